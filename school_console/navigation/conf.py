"""Настройки навигации из settings.NAVIGATION."""
from django.conf import settings

from .routes import DEFAULT_TENANT_ROOT
from .tree import normalize_root


def tenant_root() -> str:
    return normalize_root(getattr(settings, 'NAVIGATION', {}).get('TENANT_ROOT', DEFAULT_TENANT_ROOT))


def keyword_fallback() -> bool:
    return bool(getattr(settings, 'NAVIGATION', {}).get('KEYWORD_FALLBACK', True))
