import logging

from django.contrib.auth import get_user_model
from rest_framework import exceptions
from rest_framework_simplejwt.views import TokenObtainPairView

from .serializers import CustomTokenObtainPairSerializer

logger = logging.getLogger(__name__)

User = get_user_model()


class CaseInsensitiveTokenObtainPairSerializer(CustomTokenObtainPairSerializer):
    """Сериализатор выдачи JWT с строгой проверкой пароля и case-insensitive email."""

    def validate(self, attrs):
        email_field = self.username_field  # 'email'
        raw_email = (attrs.get(email_field) or '').strip()
        password = attrs.get('password') or ''

        if not raw_email or not password:
            raise exceptions.AuthenticationFailed('Некорректные учетные данные')

        try:
            user = User.objects.get(**{f'{email_field}__iexact': raw_email})
        except User.DoesNotExist:
            logger.warning('Login failed, user not found: %s', raw_email)
            raise exceptions.AuthenticationFailed('Неверный email или пароль')

        if not user.is_active:
            logger.warning('Login failed, user inactive: %s', raw_email)
            raise exceptions.AuthenticationFailed('Аккаунт деактивирован')

        if not user.check_password(password):
            logger.warning('Login failed, bad password: %s', raw_email)
            raise exceptions.AuthenticationFailed('Неверный email или пароль')

        refresh = self.get_token(user)
        return {
            'refresh': str(refresh),
            'access': str(refresh.access_token),
        }


class CaseInsensitiveTokenObtainPairView(TokenObtainPairView):
    serializer_class = CaseInsensitiveTokenObtainPairSerializer
