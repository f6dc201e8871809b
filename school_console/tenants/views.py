"""
API views для tenants.

SchoolConfigView — публичный endpoint, отдаёт конфиг школы для frontend.
Frontend при загрузке дёргает /api/school/config/ и получает название,
цвета, логотип и ключи подключённых фич.
"""

from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView


class SchoolConfigView(APIView):
    """
    GET /api/school/config/

    Публичный endpoint — конфиг текущей школы. Не содержит секретов.
    Школа определяется TenantMiddleware по hostname.
    """
    permission_classes = [AllowAny]
    throttle_classes = []

    def get(self, request):
        tenant = getattr(request, 'tenant', None)
        if tenant is None:
            return Response({'detail': 'Школа не найдена'}, status=404)
        return Response(tenant.to_frontend_config())
