from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from .roles import resolve_role
from .serializers import UserProfileSerializer


class MeView(APIView):
    """Возвращает и обновляет профиль текущего пользователя"""

    permission_classes = [IsAuthenticated]

    def get(self, request):
        data = UserProfileSerializer(request.user).data
        # Роль в текущей школе (может отличаться от глобальной)
        data['school_role'] = resolve_role(request)
        tenant = getattr(request, 'tenant', None)
        data['school'] = tenant.slug if tenant is not None else None
        return Response(data)

    def patch(self, request):
        serializer = UserProfileSerializer(request.user, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        serializer.save()
        return Response(serializer.data)
