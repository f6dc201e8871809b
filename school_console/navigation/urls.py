from django.urls import path

from . import views

urlpatterns = [
    path('navigation/', views.NavigationView.as_view(), name='school-navigation'),
    path('navigation/expanded/', views.ExpandedStateView.as_view(), name='school-navigation-expanded'),
    path('navigation/active/', views.ActiveRouteView.as_view(), name='school-navigation-active'),
    path('quick-actions/', views.QuickActionsView.as_view(), name='school-quick-actions'),
]
