from django.conf import settings

DEFAULTS = {
    'LOGO_MAX_BYTES': 3 * 1024 * 1024,
    'DEFAULT_COUNTRY_CODE': '55',
    'PLAN_UNIT_LIMITS': {'basic': 1, 'pro': None},
    'SLUG_MAX_LENGTH': 40,
    'SLUG_RETRIES': 3,
    'CURRENCY': 'BRL',
    'PUBLIC_BASE_URL': '',
}


def get_setting(name):
    """Read a product setting from settings.FYMENU, falling back to DEFAULTS"""
    return getattr(settings, 'FYMENU', {}).get(name, DEFAULTS[name])
