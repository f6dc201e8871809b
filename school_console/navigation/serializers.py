from rest_framework import serializers

from .routes import DEFAULT_TENANT_ROOT, is_active


class NavigationNodeSerializer(serializers.Serializer):
    """
    Пункт навигации для фронта.

    context:
        expanded  — frozenset раскрытых id
        location  — текущий путь (для is_active), может отсутствовать
        tenant_root
    У листовых пунктов ключа children нет совсем.
    """

    id = serializers.CharField()
    label = serializers.CharField()
    target_path = serializers.CharField()
    icon_kind = serializers.SerializerMethodField()
    is_pinned = serializers.BooleanField()

    def get_icon_kind(self, node):
        return node.icon_kind.value

    def to_representation(self, node):
        data = super().to_representation(node)
        location = self.context.get('location')
        tenant_root = self.context.get('tenant_root') or DEFAULT_TENANT_ROOT
        data['is_active'] = bool(location) and is_active(node.target_path, location, tenant_root)
        if node.children:
            data['is_expanded'] = node.id in self.context.get('expanded', frozenset())
            data['children'] = NavigationNodeSerializer(
                node.children, many=True, context=self.context,
            ).data
        return data


class QuickActionSerializer(serializers.Serializer):
    title = serializers.CharField()
    description = serializers.CharField()
    icon_kind = serializers.SerializerMethodField()
    target_path = serializers.CharField()
    color_token = serializers.CharField()

    def get_icon_kind(self, action):
        return action.icon_kind.value


class ToggleExpandedSerializer(serializers.Serializer):
    node_id = serializers.CharField(max_length=100)


class ActiveRouteQuerySerializer(serializers.Serializer):
    path = serializers.CharField()
    location = serializers.CharField(allow_blank=True)
