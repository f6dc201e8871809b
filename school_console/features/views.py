"""
API фич.

Школа:
    GET /api/school/features/ — фичи текущей школы

Супер-админ (/api/superadmin/):
    features/                                   — каталог (список, создание)
    features/<id>/                              — изменение, soft delete
    schools/<tenant_id>/features/               — фичи школы, массовое включение
    schools/<tenant_id>/features/<key>/enable/  — включить по key
    schools/<tenant_id>/features/<key>/disable/ — выключить по key
    schools/features/bulk-assign/               — фичи × школы
    schools/<tenant_id>/feature-setup/          — свои ссылки меню школы
"""
import logging

from django.shortcuts import get_object_or_404
from rest_framework import status
from rest_framework.exceptions import NotFound
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from accounts.permissions import IsSuperAdmin
from tenants.models import Tenant
from tenants.permissions import IsTenantMember

from . import services
from .catalog import load_features_or_empty
from .models import Feature, SchoolFeature
from .serializers import (
    BulkAssignSerializer,
    BulkEnableSerializer,
    FeatureEntryOutputSerializer,
    FeatureSerializer,
    FeatureSetupSerializer,
    SchoolFeatureSerializer,
)

logger = logging.getLogger(__name__)


def _features_by_ids(ids):
    """Все фичи по списку id, иначе 404 со списком ненайденных."""
    ids = list(dict.fromkeys(ids))
    features = {f.pk: f for f in Feature.objects.alive().filter(pk__in=ids)}
    missing = [str(pk) for pk in ids if pk not in features]
    if missing:
        raise NotFound(f'Фичи не найдены: {", ".join(missing)}')
    return [features[pk] for pk in ids]


def _tenants_by_ids(ids):
    ids = list(dict.fromkeys(ids))
    tenants = {t.pk: t for t in Tenant.objects.filter(pk__in=ids)}
    missing = [str(pk) for pk in ids if pk not in tenants]
    if missing:
        raise NotFound(f'Школы не найдены: {", ".join(missing)}')
    return [tenants[pk] for pk in ids]


class SchoolFeaturesView(APIView):
    """GET /api/school/features/ — то же, что видит навигация."""
    permission_classes = [IsAuthenticated, IsTenantMember]

    def get(self, request):
        features, available = load_features_or_empty(request.tenant)
        return Response({
            'features': FeatureEntryOutputSerializer(features, many=True).data,
            'catalog_available': available,
        })


class SuperAdminAPIView(APIView):
    permission_classes = [IsAuthenticated, IsSuperAdmin]


class FeatureListView(SuperAdminAPIView):

    def get(self, request):
        features = Feature.objects.alive()
        return Response(FeatureSerializer(features, many=True).data)

    def post(self, request):
        serializer = FeatureSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        feature = serializer.save()
        logger.info('Feature created: %s by %s', feature.key, request.user.email)
        return Response(FeatureSerializer(feature).data, status=status.HTTP_201_CREATED)


class FeatureDetailView(SuperAdminAPIView):

    def get_object(self, feature_id):
        return get_object_or_404(Feature.objects.alive(), pk=feature_id)

    def get(self, request, feature_id):
        return Response(FeatureSerializer(self.get_object(feature_id)).data)

    def put(self, request, feature_id):
        return self._update(request, feature_id, partial=False)

    def patch(self, request, feature_id):
        return self._update(request, feature_id, partial=True)

    def _update(self, request, feature_id, partial):
        feature = self.get_object(feature_id)
        serializer = FeatureSerializer(feature, data=request.data, partial=partial)
        serializer.is_valid(raise_exception=True)
        feature = serializer.save()
        logger.info('Feature updated: %s by %s', feature.key, request.user.email)
        return Response(FeatureSerializer(feature).data)

    def delete(self, request, feature_id):
        services.soft_delete_feature(self.get_object(feature_id))
        return Response(status=status.HTTP_204_NO_CONTENT)


class SchoolFeatureListView(SuperAdminAPIView):

    def get(self, request, tenant_id):
        tenant = get_object_or_404(Tenant, pk=tenant_id)
        assignments = (
            SchoolFeature.objects
            .filter(tenant=tenant, feature__deleted_at__isnull=True)
            .select_related('feature')
        )
        return Response(SchoolFeatureSerializer(assignments, many=True).data)

    def post(self, request, tenant_id):
        """Массово включить фичи школе: {"featureIds": [...]}."""
        tenant = get_object_or_404(Tenant, pk=tenant_id)
        serializer = BulkEnableSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        features = _features_by_ids(serializer.validated_data['featureIds'])
        services.enable_features(tenant, features)
        return Response({'message': f'Подключено фич: {len(features)}'})


class SchoolFeatureToggleView(SuperAdminAPIView):
    enabled = True

    def post(self, request, tenant_id, feature_key):
        tenant = get_object_or_404(Tenant, pk=tenant_id)
        try:
            services.set_school_feature(
                tenant, services.get_feature_by_key(feature_key), self.enabled,
            )
        except services.FeatureNotFound as exc:
            raise NotFound(str(exc))
        state = 'включена' if self.enabled else 'выключена'
        return Response({'message': f'Фича {feature_key} {state}'})


class BulkAssignView(SuperAdminAPIView):

    def post(self, request):
        serializer = BulkAssignSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(
                {'detail': 'Нужны массивы schoolIds и featureIds', 'errors': serializer.errors},
                status=status.HTTP_400_BAD_REQUEST,
            )
        data = serializer.validated_data
        tenants = _tenants_by_ids(data['schoolIds'])
        features = _features_by_ids(data['featureIds'])
        services.bulk_assign(tenants, features)
        return Response({'message': 'Фичи назначены школам'})


class FeatureSetupView(SuperAdminAPIView):
    """Ссылки меню фич для конкретной школы."""

    def get(self, request, tenant_id):
        tenant = get_object_or_404(Tenant, pk=tenant_id)
        assignments = (
            SchoolFeature.objects
            .filter(tenant=tenant, feature__deleted_at__isnull=True)
            .select_related('feature')
        )
        return Response([
            {
                'featureId': str(a.feature_id),
                'key': a.feature.key,
                'name': a.feature.name,
                'enabled': a.enabled,
                'menuLinks': a.menu_links or a.feature.menu_links,
                'customized': bool(a.menu_links),
            }
            for a in assignments
        ])

    def put(self, request, tenant_id):
        tenant = get_object_or_404(Tenant, pk=tenant_id)
        serializer = FeatureSetupSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(
                {'detail': 'Нужны featureId и menuLinks', 'errors': serializer.errors},
                status=status.HTTP_400_BAD_REQUEST,
            )
        data = serializer.validated_data
        try:
            feature = services.get_feature_by_id(data['featureId'])
        except services.FeatureNotFound as exc:
            raise NotFound(str(exc))

        school_feature = services.update_school_menu_links(tenant, feature, data['menuLinks'])
        return Response({'success': True, 'menuLinks': school_feature.menu_links})
