from django.contrib import admin

from .models import Feature, SchoolFeature


@admin.register(Feature)
class FeatureAdmin(admin.ModelAdmin):
    list_display = ('name', 'key', 'category', 'is_active', 'deleted_at')
    list_filter = ('category', 'is_active')
    search_fields = ('name', 'key', 'description')
    readonly_fields = ('id', 'created_at', 'updated_at')

    fieldsets = (
        ('Основное', {
            'fields': ('id', 'key', 'name', 'description', 'category', 'price', 'is_active')
        }),
        ('Навигация (JSON)', {
            'fields': ('capabilities', 'menu_links')
        }),
        ('Даты', {
            'fields': ('deleted_at', 'created_at', 'updated_at')
        }),
    )


@admin.register(SchoolFeature)
class SchoolFeatureAdmin(admin.ModelAdmin):
    list_display = ('tenant', 'feature', 'enabled', 'updated_at')
    list_filter = ('enabled', 'tenant')
    search_fields = ('tenant__name', 'feature__key', 'feature__name')
    raw_id_fields = ('tenant', 'feature')
