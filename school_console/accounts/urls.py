from django.urls import path
from rest_framework_simplejwt.views import TokenRefreshView

from .api_views import MeView
from .jwt_views import CaseInsensitiveTokenObtainPairView

urlpatterns = [
    path('me/', MeView.as_view(), name='api-me'),
    path('jwt/token/', CaseInsensitiveTokenObtainPairView.as_view(), name='jwt-obtain-pair'),
    path('jwt/refresh/', TokenRefreshView.as_view(), name='jwt-refresh'),
]
