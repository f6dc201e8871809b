from django.urls import path

from . import views

urlpatterns = [
    path('features/', views.SchoolFeaturesView.as_view(), name='school-features'),
]
