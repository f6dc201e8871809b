"""
Операции супер-админа над каталогом фич и подключением фич к школам.
"""
import logging
import re

from django.db import transaction
from django.utils import timezone

from .models import Feature, SchoolFeature

logger = logging.getLogger(__name__)

DEFAULT_LINK_ICON = 'fas fa-home'


class FeatureNotFound(Exception):
    """Фича с таким key/id не найдена в каталоге."""


def generate_feature_key(name):
    """'Staff Management' → 'staff_management'."""
    key = re.sub(r'\s+', '_', (name or '').strip().lower())
    return re.sub(r'[^\w-]', '', key)


def normalize_menu_links(links):
    """Привести ссылки меню к виду {name, href, icon, enabled}."""
    normalized = []
    for link in links or []:
        normalized.append({
            'name': link.get('name', ''),
            'href': link['href'],
            'icon': link.get('icon') or DEFAULT_LINK_ICON,
            'enabled': link.get('enabled', True) is not False,
        })
    return normalized


def get_feature_by_key(key):
    try:
        return Feature.objects.alive().get(key=key)
    except Feature.DoesNotExist:
        raise FeatureNotFound(f'Feature {key} not found')


def get_feature_by_id(feature_id):
    try:
        return Feature.objects.alive().get(pk=feature_id)
    except (Feature.DoesNotExist, ValueError):
        raise FeatureNotFound(f'Feature {feature_id} not found')


def set_school_feature(tenant, feature, enabled):
    """Подключить фичу к школе (или обновить флаг enabled)."""
    school_feature, created = SchoolFeature.objects.update_or_create(
        tenant=tenant, feature=feature,
        defaults={'enabled': enabled},
    )
    logger.info(
        'School feature %s: tenant=%s feature=%s enabled=%s',
        'created' if created else 'updated', tenant.slug, feature.key, enabled,
    )
    return school_feature


def enable_feature_by_key(tenant, key):
    return set_school_feature(tenant, get_feature_by_key(key), True)


def disable_feature_by_key(tenant, key):
    return set_school_feature(tenant, get_feature_by_key(key), False)


@transaction.atomic
def enable_features(tenant, features):
    return [set_school_feature(tenant, feature, True) for feature in features]


@transaction.atomic
def bulk_assign(tenants, features):
    """Включить каждую фичу каждой школе. Повторный вызов ничего не меняет."""
    tenants = list(tenants)
    features = list(features)
    logger.info('Bulk assigning %d features to %d schools', len(features), len(tenants))
    for tenant in tenants:
        for feature in features:
            set_school_feature(tenant, feature, True)


def update_school_menu_links(tenant, feature, links):
    """Свои ссылки меню фичи для конкретной школы."""
    school_feature, _ = SchoolFeature.objects.get_or_create(
        tenant=tenant, feature=feature,
        defaults={'enabled': True},
    )
    school_feature.menu_links = normalize_menu_links(links)
    school_feature.save(update_fields=['menu_links', 'updated_at'])
    logger.info(
        'School feature setup updated: tenant=%s feature=%s links=%d',
        tenant.slug, feature.key, len(school_feature.menu_links),
    )
    return school_feature


def soft_delete_feature(feature):
    feature.deleted_at = timezone.now()
    feature.save(update_fields=['deleted_at', 'updated_at'])
    logger.info('Feature soft-deleted: %s', feature.key)
    return feature


def is_feature_enabled(tenant, key):
    if tenant is None:
        return False
    return SchoolFeature.objects.filter(
        tenant=tenant,
        enabled=True,
        feature__key=key,
        feature__is_active=True,
        feature__deleted_at__isnull=True,
    ).exists()
