from django.urls import path

from . import views

urlpatterns = [
    path('features/', views.FeatureListView.as_view(), name='superadmin-features'),
    path('features/<uuid:feature_id>/', views.FeatureDetailView.as_view(), name='superadmin-feature-detail'),
    path(
        'schools/features/bulk-assign/',
        views.BulkAssignView.as_view(),
        name='superadmin-features-bulk-assign',
    ),
    path(
        'schools/<uuid:tenant_id>/features/',
        views.SchoolFeatureListView.as_view(),
        name='superadmin-school-features',
    ),
    path(
        'schools/<uuid:tenant_id>/features/<slug:feature_key>/enable/',
        views.SchoolFeatureToggleView.as_view(enabled=True),
        name='superadmin-school-feature-enable',
    ),
    path(
        'schools/<uuid:tenant_id>/features/<slug:feature_key>/disable/',
        views.SchoolFeatureToggleView.as_view(enabled=False),
        name='superadmin-school-feature-disable',
    ),
    path(
        'schools/<uuid:tenant_id>/feature-setup/',
        views.FeatureSetupView.as_view(),
        name='superadmin-school-feature-setup',
    ),
]
