"""
API навигации школы.

GET  /api/school/navigation/?q=&location=      — дерево сайдбара
GET  /api/school/navigation/expanded/           — раскрытые пункты
POST /api/school/navigation/expanded/           — раскрыть/свернуть пункт
GET  /api/school/navigation/active/?path=&location=
GET  /api/school/quick-actions/                 — карточки дашборда

Недоступность каталога фич не ошибка: отдаём базовые пункты
и catalog_available=false.
"""
import logging

from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from accounts.roles import resolve_role
from features.catalog import load_features_or_empty
from tenants.permissions import IsTenantMember

from . import conf, quick_actions, session, tree
from .routes import is_active
from .serializers import (
    ActiveRouteQuerySerializer,
    NavigationNodeSerializer,
    QuickActionSerializer,
    ToggleExpandedSerializer,
)

logger = logging.getLogger(__name__)


def _build_tree(request, query=''):
    features, available = load_features_or_empty(request.tenant)
    nodes = tree.build(
        features,
        search_query=query,
        tenant_root=conf.tenant_root(),
        keyword_fallback=conf.keyword_fallback(),
    )
    return nodes, available


class NavigationView(APIView):
    permission_classes = [IsAuthenticated, IsTenantMember]

    def get(self, request):
        query = request.query_params.get('q', '')
        location = request.query_params.get('location', '')
        nodes, available = _build_tree(request, query)
        expanded = session.get_expanded(request)

        context = {
            'expanded': expanded,
            'location': location,
            'tenant_root': conf.tenant_root(),
        }
        return Response({
            'items': NavigationNodeSerializer(nodes, many=True, context=context).data,
            'expanded': sorted(expanded),
            'catalog_available': available,
        })


class ExpandedStateView(APIView):
    permission_classes = [IsAuthenticated, IsTenantMember]

    def get(self, request):
        return Response({'expanded': sorted(session.get_expanded(request))})

    def post(self, request):
        serializer = ToggleExpandedSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        node_id = serializer.validated_data['node_id']

        nodes, _ = _build_tree(request)
        if node_id not in tree.expandable_ids(nodes):
            return Response(
                {'detail': f'Пункт {node_id} нельзя раскрыть'},
                status=status.HTTP_400_BAD_REQUEST,
            )

        state = session.toggle(request, node_id)
        logger.debug('Navigation node %s toggled, expanded=%s', node_id, sorted(state))
        return Response({'expanded': sorted(state)})


class ActiveRouteView(APIView):
    permission_classes = [IsAuthenticated, IsTenantMember]

    def get(self, request):
        serializer = ActiveRouteQuerySerializer(data=request.query_params)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        return Response({
            'is_active': is_active(data['path'], data['location'], conf.tenant_root()),
        })


class QuickActionsView(APIView):
    permission_classes = [IsAuthenticated, IsTenantMember]

    def get(self, request):
        features, available = load_features_or_empty(request.tenant)
        actions = quick_actions.resolve(features, resolve_role(request), conf.tenant_root())
        return Response({
            'actions': QuickActionSerializer(actions, many=True).data,
            'catalog_available': available,
        })
