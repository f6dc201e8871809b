"""
Tenant-aware permissions для DRF.
"""
from rest_framework.permissions import BasePermission

from .models import TenantMembership


def resolve_membership(request):
    """
    Членство request.user в request.tenant.

    TenantMiddleware видит только сессионного пользователя; JWT-пользователь
    появляется уже в DRF, поэтому при необходимости ищем членство здесь
    и запоминаем на request.
    """
    membership = getattr(request, 'tenant_membership', None)
    if membership is not None:
        return membership
    tenant = getattr(request, 'tenant', None)
    user = getattr(request, 'user', None)
    if tenant is None or user is None or not user.is_authenticated:
        return None
    membership = TenantMembership.objects.filter(
        tenant=tenant, user=user, is_active=True,
    ).first()
    request.tenant_membership = membership
    return membership


class IsTenantMember(BasePermission):
    """Пользователь должен быть активным участником текущей школы."""

    message = 'Вы не являетесь участником этой школы.'

    def has_permission(self, request, view):
        if not request.user or not request.user.is_authenticated:
            return False
        if getattr(request, 'tenant', None) is None:
            return False
        return resolve_membership(request) is not None


class IsTenantAdmin(BasePermission):
    """Пользователь должен быть school_admin в текущей школе."""

    message = 'Необходима роль администратора школы.'

    def has_permission(self, request, view):
        if not request.user or not request.user.is_authenticated:
            return False
        membership = resolve_membership(request)
        if membership is None:
            return False
        return membership.role == TenantMembership.TenantRole.SCHOOL_ADMIN
