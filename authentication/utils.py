import logging
import random
import re
import time
import unicodedata

from django.core.files.storage import default_storage
from rest_framework.exceptions import ValidationError

from fymenu.conf import get_setting
from .exceptions import TenantNotFound
from .models import Restaurant, Unit

logger = logging.getLogger(__name__)

NON_DIGITS = re.compile(r'\D')
NON_SLUG_CHARS = re.compile(r'[^a-z0-9]+')


# =============== SLUGS ===============

def slugify_name(value, max_length=None):
    """Lower-case ascii slug, each run of other characters becomes '-', cut to max_length"""
    if max_length is None:
        max_length = get_setting('SLUG_MAX_LENGTH')
    text = unicodedata.normalize('NFKD', str(value or ''))
    text = text.encode('ascii', 'ignore').decode('ascii').lower()
    slug = NON_SLUG_CHARS.sub('-', text).strip('-')
    return slug[:max_length].strip('-')


def random_suffix():
    return str(random.randint(1000, 9999))


def clean_slug(value):
    return (value or '').strip().lower()


def generate_unit_slug(restaurant_name, unit_name):
    """
    Build '<restaurant>-<unit>-NNNN', trying a new suffix when the slug is taken.
    """
    base = slugify_name(f"{restaurant_name}-{unit_name}") or 'unidade'
    retries = get_setting('SLUG_RETRIES')
    for _ in range(retries):
        candidate = f"{base}-{random_suffix()}"
        if not Unit.objects.filter(slug=candidate).exists():
            return candidate
        logger.info(f"Slug collision for {candidate}, retrying")
    raise ValidationError({'slug': 'Não foi possível gerar um slug único. Tente novamente.'})


# =============== CONTACT NORMALIZATION ===============

def normalize_whatsapp(value):
    """
    Turn a phone number into a wa.me link; URLs are kept as they are.
    """
    raw = (value or '').strip()
    if not raw:
        return ''
    if raw.startswith('http://') or raw.startswith('https://'):
        return raw

    digits = NON_DIGITS.sub('', raw)
    if not digits:
        return ''

    country = get_setting('DEFAULT_COUNTRY_CODE')
    if not digits.startswith(country):
        digits = f"{country}{digits}"
    return f"https://wa.me/{digits}"


# =============== TENANT CONTEXT ===============

def get_restaurant(user):
    try:
        return Restaurant.objects.get(owner=user)
    except Restaurant.DoesNotExist:
        raise TenantNotFound()


def get_tenant_context(user):
    """Return (user, restaurant, units) for the owner, oldest unit first"""
    restaurant = get_restaurant(user)
    units = list(restaurant.units.order_by('created_at'))
    return user, restaurant, units


def ensure_restaurant(user):
    """Fetch the owner's restaurant, creating a base one if missing"""
    restaurant = Restaurant.objects.filter(owner=user).first()
    if restaurant:
        return restaurant

    fallback_name = user.email.split('@')[0] if user.email else ''
    restaurant = Restaurant.objects.create(owner=user, name=fallback_name or 'Minha Empresa')
    logger.info(f"Created base restaurant {restaurant.id} for {user.email}")
    return restaurant


# =============== LOGO UPLOAD ===============

def store_unit_logo(unit, upload):
    """
    Validate and store an uploaded logo for the unit.
    Returns {'ok': bool, 'message'|'public_url': str}.
    """
    if upload is None:
        return {'ok': False, 'message': 'Arquivo não enviado.'}

    content_type = getattr(upload, 'content_type', '') or ''
    if not content_type.startswith('image/'):
        return {'ok': False, 'message': 'Envie uma imagem válida.'}

    if upload.size > get_setting('LOGO_MAX_BYTES'):
        return {'ok': False, 'message': 'Imagem muito grande (máx 3MB).'}

    name = upload.name or ''
    ext = name.rsplit('.', 1)[-1].lower() if '.' in name else ''
    ext = ext or 'png'
    file_name = f"logo-{int(time.time() * 1000)}.{ext}"

    old_name = unit.logo.name if unit.logo else None
    unit.logo.save(file_name, upload, save=False)
    unit.save(update_fields=['logo', 'updated_at'])

    if old_name and old_name != unit.logo.name and default_storage.exists(old_name):
        default_storage.delete(old_name)

    logger.info(f"Uploaded logo for unit {unit.id}: {unit.logo.name}")
    return {'ok': True, 'public_url': unit.logo_url}
