from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

from rest_framework.exceptions import ValidationError

from fymenu.conf import get_setting

TWO_PLACES = Decimal('0.01')
MAX_PRICE = Decimal('99999999.99')
MAX_ORDER_INDEX = 2147483647
CURRENCY_SYMBOLS = {'BRL': 'R$'}


def parse_order_index(raw):
    """'' or None means 0; anything that is not an integer in the column range is rejected"""
    if raw is None:
        return 0
    if isinstance(raw, bool):
        raise ValidationError('order_index inválido.')
    if isinstance(raw, int):
        value = raw
    else:
        text = str(raw).strip()
        if text == '':
            return 0
        try:
            value = int(text)
        except ValueError:
            raise ValidationError('order_index inválido.')
    if abs(value) > MAX_ORDER_INDEX:
        raise ValidationError('order_index inválido.')
    return value


def parse_price(raw):
    """
    Accepts 29.90, "29.90", "29,90", "1.234,50" and "R$ 29,90".
    Returns None for blank input.
    """
    if raw is None:
        return None
    if isinstance(raw, Decimal):
        value = raw
    elif isinstance(raw, (int, float)) and not isinstance(raw, bool):
        value = Decimal(str(raw))
    else:
        text = str(raw).replace('R$', '').replace(' ', '').strip()
        if text == '':
            return None
        if ',' in text:
            text = text.replace('.', '').replace(',', '.')
        try:
            value = Decimal(text)
        except InvalidOperation:
            raise ValidationError('Preço inválido.')

    if not value.is_finite():
        raise ValidationError('Preço inválido.')
    if value < 0:
        raise ValidationError('Preço não pode ser negativo.')
    if value > MAX_PRICE:
        raise ValidationError('Preço inválido.')
    return value.quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


def format_brl(value):
    """Decimal(1234.5) -> 'R$ 1.234,50'"""
    if value is None:
        return ''
    amount = Decimal(value).quantize(TWO_PLACES, rounding=ROUND_HALF_UP)
    text = f"{amount:,.2f}"
    text = text.replace(',', '_').replace('.', ',').replace('_', '.')
    currency = get_setting('CURRENCY')
    return f"{CURRENCY_SYMBOLS.get(currency, currency)} {text}"


def parse_variation_lines(text):
    """
    Dashboard textarea format: one 'name;price' per line.
    Blank lines are skipped.
    """
    variations = []
    for number, line in enumerate((text or '').splitlines(), start=1):
        line = line.strip()
        if not line:
            continue
        if ';' not in line:
            raise ValidationError(f'Linha {number}: use o formato nome;preço.')
        name, price = line.rsplit(';', 1)
        variations.append({'name': name.strip(), 'price': price.strip()})
    return variations


def variation_lines(product):
    """Inverse of parse_variation_lines, for pre-filling the dashboard form"""
    return '\n'.join(
        f"{v.name};{str(v.price).replace('.', ',')}" for v in product.sorted_variations()
    )
