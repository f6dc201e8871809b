"""
Доступ к эндпоинтам по подключённым фичам школы.

    class StaffView(APIView):
        permission_classes = [IsAuthenticated, IsTenantMember, FeatureEnabled]
        required_feature = 'staff_management'

или для отдельного метода:

    @require_school_feature('staff_management')
    def get(self, request):
        ...
"""
from functools import wraps

from rest_framework import status
from rest_framework.permissions import BasePermission
from rest_framework.response import Response

from .services import is_feature_enabled


def _forbidden_message(key):
    return f'Фича {key} не подключена для этой школы'


class FeatureEnabled(BasePermission):
    """Фича view.required_feature должна быть включена у request.tenant."""

    def has_permission(self, request, view):
        key = getattr(view, 'required_feature', None)
        if not key:
            return True
        if is_feature_enabled(getattr(request, 'tenant', None), key):
            return True
        self.message = _forbidden_message(key)
        return False


def require_school_feature(key: str):
    """Декоратор метода APIView: 403, если фича key не включена у школы."""
    def decorator(view_func):
        @wraps(view_func)
        def wrapper(self, request, *args, **kwargs):
            if not is_feature_enabled(getattr(request, 'tenant', None), key):
                return Response(
                    {'detail': _forbidden_message(key)},
                    status=status.HTTP_403_FORBIDDEN,
                )
            return view_func(self, request, *args, **kwargs)
        return wrapper
    return decorator
