"""
Определение роли пользователя в контексте текущей школы.

Роль в школе (TenantMembership.role) приоритетнее глобальной CustomUser.role:
один пользователь может быть school_admin в одной школе и teacher в другой.
"""
from tenants.permissions import resolve_membership


def resolve_role(request):
    """Роль текущего пользователя для правил навигации. '' если не определена."""
    user = getattr(request, 'user', None)
    if user is None or not user.is_authenticated:
        return ''
    membership = resolve_membership(request)
    if membership is not None and membership.role:
        return membership.role
    return getattr(user, 'role', '') or ''
