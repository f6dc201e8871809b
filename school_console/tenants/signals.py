"""
Сброс кешей, завязанных на школу.

- TenantMiddleware кеширует Tenant по slug/host — сбрасываем целиком
  при любом изменении школы.
- Удалённый каталог фич кешируется по id школы — при удалении школы
  её запись больше не нужна.

Подключается через TenantsConfig.ready().
"""
import logging

from django.core.cache import cache
from django.db.models.signals import post_delete, post_save
from django.dispatch import receiver

logger = logging.getLogger(__name__)


def _reset_middleware_cache():
    from .middleware import TenantMiddleware
    TenantMiddleware.clear_cache()


@receiver(post_save, sender='tenants.Tenant', dispatch_uid='tenant_saved_reset_cache')
def tenant_saved(sender, instance, created, **kwargs):
    _reset_middleware_cache()
    logger.info('Tenant %s %s, middleware cache reset', instance.slug, 'created' if created else 'updated')


@receiver(post_delete, sender='tenants.Tenant', dispatch_uid='tenant_deleted_reset_cache')
def tenant_deleted(sender, instance, **kwargs):
    _reset_middleware_cache()
    from features.catalog import RemoteFeatureCatalog
    cache.delete(RemoteFeatureCatalog.cache_key_for(instance.pk))
    logger.info('Tenant %s deleted, caches reset', instance.slug)
