"""
Каталог фич и подключение фич к школам.
"""

import uuid

from django.db import models

from navigation.types import CapabilityTag, FeatureEntry, MenuLink


def menu_links_from_json(raw):
    """JSON-список ссылок → tuple[MenuLink]. Битые элементы пропускаются."""
    links = []
    for item in raw or []:
        if not isinstance(item, dict) or not item.get('href'):
            continue
        links.append(MenuLink(
            name=str(item.get('name') or ''),
            href=str(item['href']),
            icon=str(item.get('icon') or 'fas fa-home'),
            enabled=item.get('enabled', True) is not False,
        ))
    return tuple(links)


def capabilities_from_json(raw):
    """Неизвестные теги игнорируются."""
    known = {tag.value: tag for tag in CapabilityTag}
    return tuple(known[value] for value in (raw or []) if value in known)


class FeatureQuerySet(models.QuerySet):

    def alive(self):
        """Не удалённые (soft delete) фичи."""
        return self.filter(deleted_at__isnull=True)

    def available(self):
        return self.alive().filter(is_active=True)


class Feature(models.Model):
    """
    Фича глобального каталога (например, Staff Management, Attendance).

    key — стабильный машинный идентификатор, по нему подбираются
    быстрые действия дашборда. name/description — свободный текст.
    """

    class Category(models.TextChoices):
        CORE = 'CORE', 'Core'
        ACADEMIC = 'ACADEMIC', 'Academic'
        FINANCE = 'FINANCE', 'Finance'
        COMMUNICATION = 'COMMUNICATION', 'Communication'

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    key = models.SlugField(max_length=100, unique=True)
    name = models.CharField(max_length=200)
    description = models.TextField(blank=True, default='')
    category = models.CharField(max_length=30, choices=Category.choices, default=Category.CORE)
    price = models.PositiveIntegerField(null=True, blank=True, help_text='Цена в минимальных единицах валюты')

    capabilities = models.JSONField(
        default=list, blank=True,
        help_text='Подразделы фичи: list, create, assignments, schedules, types',
    )
    menu_links = models.JSONField(
        default=list, blank=True,
        help_text='Ссылки меню по умолчанию: [{name, href, icon, enabled}]',
    )

    is_active = models.BooleanField(default=True)
    deleted_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = FeatureQuerySet.as_manager()

    class Meta:
        ordering = ['name']
        verbose_name = 'Фича'
        verbose_name_plural = 'Фичи'

    def __str__(self):
        return f'{self.name} ({self.key})'


class SchoolFeature(models.Model):
    """Фича, подключённая к школе. enabled=False — подключена, но выключена."""

    tenant = models.ForeignKey(
        'tenants.Tenant', on_delete=models.CASCADE,
        related_name='school_features',
    )
    feature = models.ForeignKey(
        Feature, on_delete=models.CASCADE,
        related_name='school_assignments',
    )
    enabled = models.BooleanField(default=True)
    menu_links = models.JSONField(
        default=list, blank=True,
        help_text='Ссылки меню для этой школы; пусто — берутся из каталога',
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = 'Фича школы'
        verbose_name_plural = 'Фичи школ'
        unique_together = ['tenant', 'feature']
        ordering = ['created_at', 'id']

    def __str__(self):
        state = 'on' if self.enabled else 'off'
        return f'{self.tenant} · {self.feature.key} ({state})'

    def to_entry(self):
        feature = self.feature
        return FeatureEntry(
            id=str(feature.id),
            key=feature.key,
            name=feature.name,
            description=feature.description or '',
            enabled=self.enabled,
            capabilities=capabilities_from_json(feature.capabilities),
            menu_links=menu_links_from_json(self.menu_links or feature.menu_links),
        )
