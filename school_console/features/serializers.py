from rest_framework import serializers

from navigation.types import CapabilityTag, FeatureEntry

from .models import Feature, SchoolFeature, capabilities_from_json, menu_links_from_json
from .services import generate_feature_key, normalize_menu_links


class MenuLinkSerializer(serializers.Serializer):
    name = serializers.CharField(allow_blank=True, default='')
    href = serializers.CharField()
    icon = serializers.CharField(allow_blank=True, default='fas fa-home')
    enabled = serializers.BooleanField(default=True)


class FeatureSerializer(serializers.ModelSerializer):
    """Фича каталога (супер-админ)."""

    key = serializers.SlugField(max_length=100, required=False, allow_blank=True)
    price = serializers.FloatField(required=False, allow_null=True, min_value=0)
    capabilities = serializers.ListField(
        child=serializers.ChoiceField(choices=[tag.value for tag in CapabilityTag]),
        required=False,
    )
    menuLinks = MenuLinkSerializer(many=True, required=False, source='menu_links')

    class Meta:
        model = Feature
        fields = [
            'id', 'key', 'name', 'description', 'category', 'price',
            'capabilities', 'menuLinks', 'is_active',
            'created_at', 'updated_at',
        ]
        read_only_fields = ['id', 'created_at', 'updated_at']

    def validate_price(self, value):
        # Цена хранится целым числом
        return round(value) if value is not None else None

    def validate_key(self, value):
        if not value:
            return value
        qs = Feature.objects.filter(key=value)
        if self.instance is not None:
            qs = qs.exclude(pk=self.instance.pk)
        if qs.exists():
            raise serializers.ValidationError('Фича с таким key уже существует')
        return value

    def validate(self, attrs):
        # key не задан при создании — генерируем из имени
        if self.instance is None and not attrs.get('key'):
            key = generate_feature_key(attrs.get('name', ''))
            if not key:
                raise serializers.ValidationError({'key': 'Не удалось получить key из имени'})
            if Feature.objects.filter(key=key).exists():
                raise serializers.ValidationError({'key': f'Фича с key "{key}" уже существует'})
            attrs['key'] = key
        return attrs

    def create(self, validated_data):
        links = validated_data.pop('menu_links', [])
        return Feature.objects.create(menu_links=normalize_menu_links(links), **validated_data)

    def update(self, instance, validated_data):
        if 'menu_links' in validated_data:
            instance.menu_links = normalize_menu_links(validated_data.pop('menu_links'))
        if not validated_data.get('key', instance.key):
            validated_data.pop('key', None)
        for attr, value in validated_data.items():
            setattr(instance, attr, value)
        instance.save()
        return instance


class SchoolFeatureSerializer(serializers.ModelSerializer):
    feature = FeatureSerializer(read_only=True)
    menuLinks = serializers.JSONField(source='menu_links', read_only=True)

    class Meta:
        model = SchoolFeature
        fields = ['id', 'feature', 'enabled', 'menuLinks', 'created_at', 'updated_at']
        read_only_fields = fields


class FeatureEntrySerializer(serializers.Serializer):
    """
    Проверка формы элемента списка фич от внешнего каталога.

    Без id элемент отбрасывается. Пропущенные name/description → ''.
    """

    id = serializers.CharField()
    key = serializers.CharField(allow_blank=True, allow_null=True, default='')
    name = serializers.CharField(allow_blank=True, allow_null=True, default='', trim_whitespace=False)
    description = serializers.CharField(allow_blank=True, allow_null=True, default='', trim_whitespace=False)
    enabled = serializers.BooleanField(default=False)
    capabilities = serializers.ListField(child=serializers.CharField(), allow_null=True, default=list)
    menuLinks = serializers.ListField(child=serializers.DictField(), allow_null=True, default=list, source='menu_links')

    def to_entry(self):
        data = self.validated_data
        return FeatureEntry(
            id=data['id'],
            key=data.get('key') or '',
            name=data.get('name') or '',
            description=data.get('description') or '',
            enabled=data.get('enabled', False),
            capabilities=capabilities_from_json(data.get('capabilities')),
            menu_links=menu_links_from_json(data.get('menu_links')),
        )


class FeatureEntryOutputSerializer(serializers.Serializer):
    """FeatureEntry → JSON для /api/school/features/."""

    id = serializers.CharField()
    key = serializers.CharField()
    name = serializers.CharField()
    description = serializers.CharField()
    enabled = serializers.BooleanField()
    capabilities = serializers.SerializerMethodField()
    menuLinks = serializers.SerializerMethodField()

    def get_capabilities(self, entry):
        return [tag.value for tag in entry.capabilities]

    def get_menuLinks(self, entry):
        return [
            {'name': link.name, 'href': link.href, 'icon': link.icon, 'enabled': link.enabled}
            for link in entry.menu_links
        ]


class BulkEnableSerializer(serializers.Serializer):
    featureIds = serializers.ListField(child=serializers.UUIDField(), allow_empty=True)


class BulkAssignSerializer(serializers.Serializer):
    schoolIds = serializers.ListField(child=serializers.UUIDField())
    featureIds = serializers.ListField(child=serializers.UUIDField())


class FeatureSetupSerializer(serializers.Serializer):
    featureId = serializers.UUIDField()
    menuLinks = MenuLinkSerializer(many=True)
