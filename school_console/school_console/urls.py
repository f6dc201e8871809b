"""
URL configuration for school_console project.

    /api/health/          — мониторинг
    /api/                 — аккаунты, JWT
    /api/school/          — API текущей школы (конфиг, навигация, фичи)
    /api/superadmin/      — каталог фич и назначение школам
"""
from django.contrib import admin
from django.urls import include, path

from .health import health_check

urlpatterns = [
    path('api/health/', health_check, name='health'),
    path('admin/', admin.site.urls),
    path('api/', include('accounts.urls')),
    path('api/school/', include('tenants.urls')),
    path('api/school/', include('navigation.urls')),
    path('api/school/', include('features.urls')),
    path('api/superadmin/', include('features.superadmin_urls')),
]
