"""
Read model for the public menu page (/u/<slug>/).

Builds the unit header, footer links, the featured section and the
remaining category sections from the unit's categories, active products
and their variations.
"""
import re
from urllib.parse import quote, unquote

from django.db.models import Prefetch
from rest_framework.exceptions import NotFound

from authentication.models import Unit
from authentication.utils import slugify_name
from .models import Product, ProductVariation
from .utils import format_brl

FEATURED_KEYS = ('destaque', 'destaques')

NON_DIGITS = re.compile(r'\D')


class UnitNotFound(NotFound):
    default_detail = 'Unidade não encontrada'
    default_code = 'unit_not_found'


def normalize_public_slug(raw):
    return unquote(raw or '').strip().lower()


def get_public_unit(slug):
    public_slug = normalize_public_slug(slug)
    try:
        return Unit.objects.select_related('restaurant').get(slug=public_slug)
    except Unit.DoesNotExist:
        raise UnitNotFound()


# =============== FOOTER LINKS ===============

def instagram_link(raw):
    value = (raw or '').strip()
    if not value:
        return ''
    if value.startswith('http://') or value.startswith('https://'):
        return value
    return f"https://instagram.com/{value.lstrip('@')}"


def maps_link(maps_url, address):
    if (maps_url or '').strip():
        return maps_url.strip()
    query = (address or '').strip()
    if not query:
        return ''
    return f"https://www.google.com/maps/search/?api=1&query={quote(query, safe='')}"


def whatsapp_link(raw):
    digits = NON_DIGITS.sub('', raw or '')
    if not digits:
        return ''
    # numbers without country code are assumed to be Brazilian
    if len(digits) <= 11:
        digits = f"55{digits}"
    return f"https://wa.me/{digits}"


def footer_links(unit):
    links = []
    ig = instagram_link(unit.instagram)
    maps = maps_link(unit.maps_url, unit.address)
    wa = whatsapp_link(unit.whatsapp)

    if ig:
        links.append({'key': 'instagram', 'label': 'Instagram', 'href': ig})
    if maps:
        links.append({'key': 'maps', 'label': 'Maps', 'href': maps})
    if wa:
        links.append({'key': 'whatsapp', 'label': 'WhatsApp', 'href': wa})
    return links


# =============== PRICES ===============

def display_price(product, variations=None):
    if not product.is_variable:
        return format_brl(product.base_price)

    if variations is None:
        variations = product.sorted_variations()
    if variations:
        return f"A partir de {format_brl(min(v.price for v in variations))}"
    return "Preço variável"


# =============== SECTIONS ===============

def find_featured_section(sections):
    """First section named/slugged 'destaque(s)', else the first one"""
    if not sections:
        return None
    for section in sections:
        name_key = section['category'].name.strip().lower()
        if name_key in FEATURED_KEYS or section['slug'] in FEATURED_KEYS:
            return section
    return sections[0]


def build_sections(unit):
    categories = [
        c for c in unit.categories.order_by('order_index', 'created_at')
        if (c.name or '').strip()
    ]

    products = (
        Product.objects
        .filter(unit=unit, is_active=True)
        .prefetch_related(Prefetch(
            'variations',
            queryset=ProductVariation.objects.order_by('order_index', 'id'),
        ))
        .order_by('order_index', 'created_at')
    )

    by_category = {c.id: [] for c in categories}
    for product in products:
        if product.category_id not in by_category:
            continue
        variations = list(product.variations.all())
        for variation in variations:
            variation.display_price = format_brl(variation.price)
        product.variation_list = variations
        product.display_price = display_price(product, variations)
        by_category[product.category_id].append(product)

    return [
        {
            'category': category,
            'slug': slugify_name(category.name) or 'categoria',
            'products': by_category[category.id],
        }
        for category in categories
        if by_category[category.id]
    ]


def build_public_menu(unit):
    sections = build_sections(unit)
    featured = find_featured_section(sections)
    others = [s for s in sections if s is not featured]
    return {
        'unit': unit,
        'links': footer_links(unit),
        'featured': featured,
        'categories': others,
    }
