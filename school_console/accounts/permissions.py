"""
Role-Based Access Control (RBAC) permission classes.

    from accounts.permissions import IsSuperAdmin

    class MyView(APIView):
        permission_classes = [IsAuthenticated, IsSuperAdmin]
"""

from rest_framework.permissions import BasePermission


class IsSuperAdmin(BasePermission):
    """Доступ только для супер-админа платформы (role='super_admin' или is_superuser)"""
    message = 'Доступно только для супер-администратора'

    def has_permission(self, request, view):
        if not request.user or not request.user.is_authenticated:
            return False
        return request.user.is_super_admin
