"""
Доступ к списку фич школы.

Два бэкенда (settings.FEATURE_CATALOG['BACKEND']):
- database — SchoolFeature текущей школы из локальной БД
- remote   — GET {BASE_URL}/api/schools/features внешнего сервиса каталога

Любой сбой (сеть, HTTP, JSON, БД) → FeatureCatalogUnavailable.
Навигация при этом не падает: load_features_or_empty отдаёт пустой список.
"""
import logging

import requests
from django.conf import settings
from django.core.cache import cache
from django.core.exceptions import ImproperlyConfigured
from django.db import DatabaseError

from .models import SchoolFeature
from .serializers import FeatureEntrySerializer

logger = logging.getLogger(__name__)


class FeatureCatalogUnavailable(Exception):
    """Каталог фич недоступен или вернул мусор."""


def parse_feature_payload(payload):
    """
    Список словарей → list[FeatureEntry].

    Элементы без id (и не-словари) отбрасываются с предупреждением,
    повторные id тоже.
    """
    if not isinstance(payload, list):
        raise FeatureCatalogUnavailable(
            f'Expected list of features, got {type(payload).__name__}'
        )

    entries = []
    seen = set()
    for index, item in enumerate(payload):
        if not isinstance(item, dict):
            logger.warning('Feature catalog item #%d is not an object, skipped', index)
            continue
        serializer = FeatureEntrySerializer(data=item)
        if not serializer.is_valid():
            logger.warning('Feature catalog item #%d skipped: %s', index, serializer.errors)
            continue
        entry = serializer.to_entry()
        if entry.id in seen:
            logger.warning('Duplicate feature id %s in catalog, skipped', entry.id)
            continue
        seen.add(entry.id)
        entries.append(entry)
    return entries


class DatabaseFeatureCatalog:
    """Фичи школы из локальной БД."""

    def fetch(self, tenant):
        try:
            assignments = (
                SchoolFeature.objects
                .filter(
                    tenant=tenant,
                    feature__is_active=True,
                    feature__deleted_at__isnull=True,
                )
                .select_related('feature')
            )
            return [assignment.to_entry() for assignment in assignments]
        except DatabaseError as exc:
            raise FeatureCatalogUnavailable(str(exc)) from exc


class RemoteFeatureCatalog:
    """Фичи школы из внешнего сервиса каталога."""

    PATH = '/api/schools/features'

    def __init__(self, base_url, api_token='', timeout=5.0, cache_ttl=60, session=None):
        self.base_url = base_url.rstrip('/')
        self.api_token = api_token
        self.timeout = timeout
        self.cache_ttl = cache_ttl
        self.session = session or requests.Session()

    @staticmethod
    def cache_key_for(tenant_id):
        # Ключ строго по школе: чужие фичи не должны утечь
        return f'feature-catalog:{tenant_id}'

    def cache_key(self, tenant):
        return self.cache_key_for(tenant.pk)

    def _headers(self, tenant):
        headers = {
            'Accept': 'application/json',
            'X-Tenant-ID': str(tenant.pk),
        }
        if self.api_token:
            headers['Authorization'] = f'Bearer {self.api_token}'
        return headers

    def fetch(self, tenant):
        key = self.cache_key(tenant)
        if self.cache_ttl:
            cached = cache.get(key)
            if cached is not None:
                return parse_feature_payload(cached)

        url = f'{self.base_url}{self.PATH}'
        try:
            response = self.session.get(url, headers=self._headers(tenant), timeout=self.timeout)
            response.raise_for_status()
            payload = response.json()
        except requests.RequestException as exc:
            raise FeatureCatalogUnavailable(f'Request to {url} failed: {exc}') from exc
        except ValueError as exc:
            raise FeatureCatalogUnavailable(f'Invalid JSON from {url}') from exc

        entries = parse_feature_payload(payload)
        if self.cache_ttl:
            cache.set(key, payload, self.cache_ttl)
        return entries


def get_feature_catalog():
    config = getattr(settings, 'FEATURE_CATALOG', {}) or {}
    backend = config.get('BACKEND', 'database')

    if backend == 'database':
        return DatabaseFeatureCatalog()
    if backend == 'remote':
        base_url = config.get('BASE_URL')
        if not base_url:
            raise ImproperlyConfigured("FEATURE_CATALOG['BASE_URL'] is required for remote backend")
        return RemoteFeatureCatalog(
            base_url,
            api_token=config.get('API_TOKEN', ''),
            timeout=config.get('TIMEOUT', 5.0),
            cache_ttl=config.get('CACHE_TTL', 60),
        )
    raise ImproperlyConfigured(f'Unknown feature catalog backend: {backend}')


def fetch_enabled_features(tenant):
    """Список фич школы в порядке каталога. Фильтр по enabled — на стороне потребителя."""
    return get_feature_catalog().fetch(tenant)


def load_features_or_empty(tenant):
    """(фичи, каталог_доступен). При сбое — ([], False)."""
    if tenant is None:
        return [], False
    try:
        return fetch_enabled_features(tenant), True
    except FeatureCatalogUnavailable as exc:
        logger.warning('Feature catalog unavailable for tenant %s: %s', tenant.slug, exc)
        return [], False
