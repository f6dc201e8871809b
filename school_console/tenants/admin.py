from django.contrib import admin

from features.models import SchoolFeature

from .models import Tenant, TenantMembership


class MembershipInline(admin.TabularInline):
    model = TenantMembership
    extra = 0
    fields = ('user', 'role', 'is_active', 'joined_at')
    readonly_fields = ('joined_at',)
    raw_id_fields = ('user',)


class SchoolFeatureInline(admin.TabularInline):
    """Подключённые фичи — отсюда строится навигация школы."""
    model = SchoolFeature
    extra = 0
    fields = ('feature', 'enabled', 'menu_links', 'updated_at')
    readonly_fields = ('updated_at',)
    autocomplete_fields = ('feature',)


@admin.register(Tenant)
class TenantAdmin(admin.ModelAdmin):
    list_display = ('name', 'slug', 'status', 'enabled_features', 'created_at')
    list_filter = ('status',)
    search_fields = ('name', 'slug', 'email')
    readonly_fields = ('id', 'created_at', 'updated_at')
    prepopulated_fields = {'slug': ('name',)}
    inlines = [SchoolFeatureInline, MembershipInline]

    fieldsets = (
        (None, {'fields': ('id', 'name', 'slug', 'status')}),
        ('Контакты', {'fields': ('email', 'phone', 'logo_url')}),
        ('Тема (JSON)', {'classes': ('collapse',), 'fields': ('metadata',)}),
        ('Даты', {'fields': ('created_at', 'updated_at')}),
    )

    @admin.display(description='Фичи')
    def enabled_features(self, obj):
        return obj.school_features.filter(enabled=True).count()


@admin.register(TenantMembership)
class TenantMembershipAdmin(admin.ModelAdmin):
    list_display = ('user', 'tenant', 'role', 'is_active', 'joined_at')
    list_filter = ('role', 'is_active', 'tenant')
    search_fields = ('user__email', 'tenant__slug')
    raw_id_fields = ('user', 'tenant')
