"""
Tenant Middleware — определяет школу из URL и кладёт в request.tenant.

Логика:
  1. greenfield.eliteschola.com → Tenant(slug='greenfield')   — субдомен
  2. eliteschola.com             → Default Tenant
  3. localhost:3000              → X-Tenant-ID header (только DEV!) или Default Tenant

БЕЗОПАСНОСТЬ:
  - В production X-Tenant-ID header ИГНОРИРУЕТСЯ для remote-хостов.
    Только hostname (subdomain) определяет tenant — нельзя подделать.
"""

import logging
import time

from django.conf import settings as django_settings
from django.db import DatabaseError

from .context import clear_current_tenant, set_current_tenant

logger = logging.getLogger(__name__)


def _cache_ttl():
    return getattr(django_settings, 'TENANT_CACHE_TTL', 300)


class TenantMiddleware:
    """
    Определяет Tenant по hostname запроса.

    Ставить в MIDDLEWARE ПОСЛЕ AuthenticationMiddleware,
    чтобы request.user уже был доступен.

    Ставит:
      - request.tenant            = Tenant instance (или None)
      - request.tenant_membership = TenantMembership (или None)
    """

    # Кэш тенантов: key → (tenant, timestamp)
    _tenant_cache = {}

    # Домены разработки — X-Tenant-ID header принимается ТОЛЬКО отсюда
    DEV_HOSTS = {'localhost', '127.0.0.1', '0.0.0.0'}

    # Пути, которые всегда обрабатываются без тенанта
    SKIP_PATHS = ('/admin/', '/api/health/')

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        tenant = self._resolve_tenant(request)
        request.tenant = tenant
        set_current_tenant(tenant)

        request.tenant_membership = None
        if tenant is not None and hasattr(request, 'user') and request.user.is_authenticated:
            request.tenant_membership = self._lookup_membership(tenant, request.user)

        try:
            response = self.get_response(request)
        finally:
            clear_current_tenant()

        return response

    def _resolve_tenant(self, request):
        """Определяет тенант по hostname. X-Tenant-ID только для localhost."""
        if request.path.startswith(self.SKIP_PATHS):
            return None

        host = request.get_host().split(':')[0].lower()

        if host in self.DEV_HOSTS:
            header_slug = request.META.get('HTTP_X_TENANT_ID', '').strip()
            if header_slug:
                return self._cached(f'slug:{header_slug}', lambda: self._lookup_by_slug(header_slug))
            return self._cached('default', self._lookup_default)

        header_slug = request.META.get('HTTP_X_TENANT_ID', '')
        if header_slug:
            logger.warning(
                'X-Tenant-ID header "%s" ignored for non-local host "%s" '
                '(tenant is determined by hostname only)',
                header_slug, host,
            )

        return self._cached(f'host:{host}', lambda: self._lookup_by_host(host))

    def _cached(self, key, loader):
        cached = self._tenant_cache.get(key)
        if cached is not None:
            tenant, ts = cached
            if (time.monotonic() - ts) < _cache_ttl():
                return tenant
            del self._tenant_cache[key]
        try:
            tenant = loader()
        except DatabaseError as e:
            # Таблица tenants_tenant может не существовать (миграции не прошли).
            # Сбой не кешируем: следующий запрос попробует снова.
            logger.error('Tenant lookup failed for %s: %s', key, e)
            return None
        self._tenant_cache[key] = (tenant, time.monotonic())
        return tenant

    def _lookup_by_slug(self, slug):
        from .models import Tenant
        return Tenant.objects.filter(slug=slug, status=Tenant.Status.ACTIVE).first()

    def _lookup_by_host(self, host):
        platform_domains = getattr(django_settings, 'PLATFORM_DOMAINS', [])
        if host in platform_domains:
            return self._lookup_default()

        # Субдомен: greenfield.eliteschola.com → slug='greenfield'
        for domain in platform_domains:
            suffix = f'.{domain}'
            if host.endswith(suffix):
                slug = host[:-len(suffix)]
                tenant = self._lookup_by_slug(slug)
                if tenant is None:
                    logger.warning('Tenant not found for subdomain: %s', slug)
                    return self._lookup_default()
                return tenant

        logger.info('Unknown host %s, using default tenant', host)
        return self._lookup_default()

    def _lookup_default(self):
        from .models import Tenant
        slug = getattr(django_settings, 'DEFAULT_TENANT_SLUG', '')
        active = Tenant.objects.filter(status=Tenant.Status.ACTIVE)
        return active.filter(slug=slug).first() or active.order_by('created_at').first()

    @staticmethod
    def _lookup_membership(tenant, user):
        from .models import TenantMembership
        return TenantMembership.objects.filter(
            tenant=tenant, user=user, is_active=True,
        ).first()

    @classmethod
    def clear_cache(cls):
        """Очистить кэш (при изменении Tenant через admin/signals)."""
        cls._tenant_cache.clear()
