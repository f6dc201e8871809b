"""
Tenant models — ядро мультитенантной архитектуры.

Подход: shared-database, shared-schema с tenant FK на каждой модели верхнего уровня.
Tenant = школа.
"""

import uuid

from django.conf import settings
from django.db import models


class Tenant(models.Model):
    """
    Школа. Все данные в системе привязаны к tenant через FK.
    """

    class Status(models.TextChoices):
        ACTIVE = 'active', 'Active'
        INACTIVE = 'inactive', 'Inactive'
        SUSPENDED = 'suspended', 'Suspended'

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    slug = models.SlugField(
        max_length=50, unique=True, db_index=True,
        help_text='Уникальный идентификатор (для URL/субдомена)'
    )
    name = models.CharField(max_length=200, help_text='Название школы')
    status = models.CharField(
        max_length=20, choices=Status.choices, default=Status.ACTIVE,
    )

    email = models.EmailField(blank=True, help_text='Контактный email')
    phone = models.CharField(max_length=30, blank=True)
    logo_url = models.URLField(blank=True)

    metadata = models.JSONField(default=dict, blank=True, help_text='Тема, брендинг и т.п.')

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['name']
        verbose_name = 'Школа'
        verbose_name_plural = 'Школы'

    def __str__(self):
        return f'{self.name} ({self.slug})'

    @property
    def is_active(self):
        return self.status == self.Status.ACTIVE

    def to_frontend_config(self):
        """Публичный конфиг школы для фронтенда (без секретов)."""
        theme = (self.metadata or {}).get('theme', {})
        enabled_keys = list(
            self.school_features.filter(
                enabled=True,
                feature__is_active=True,
                feature__deleted_at__isnull=True,
            ).order_by('created_at').values_list('feature__key', flat=True)
        )
        return {
            'id': str(self.id),
            'slug': self.slug,
            'name': self.name,
            'logo_url': self.logo_url or '',
            'primary_color': theme.get('primary_color', '#2563eb'),
            'secondary_color': theme.get('secondary_color', '#f1f5f9'),
            'features': enabled_keys,
        }


class TenantMembership(models.Model):
    """
    Связь пользователя со школой.
    Один пользователь может состоять в нескольких школах с разными ролями.
    """

    class TenantRole(models.TextChoices):
        SCHOOL_ADMIN = 'school_admin', 'School Admin'
        TEACHER = 'teacher', 'Teacher'
        STUDENT = 'student', 'Student'
        PARENT = 'parent', 'Parent'

    tenant = models.ForeignKey(
        Tenant, on_delete=models.CASCADE,
        related_name='memberships',
    )
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='tenant_memberships',
    )
    role = models.CharField(
        max_length=20, choices=TenantRole.choices,
        default=TenantRole.STUDENT,
    )
    is_active = models.BooleanField(default=True)
    joined_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = 'Членство в школе'
        verbose_name_plural = 'Членства в школах'
        unique_together = ['tenant', 'user']
        indexes = [
            models.Index(fields=['tenant', 'role'], name='membership_tenant_role_idx'),
        ]

    def __str__(self):
        return f'{self.user} → {self.tenant} ({self.role})'
