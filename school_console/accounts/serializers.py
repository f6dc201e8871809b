from django.contrib.auth import get_user_model
from rest_framework import serializers
from rest_framework_simplejwt.serializers import TokenObtainPairSerializer


class CustomTokenObtainPairSerializer(TokenObtainPairSerializer):
    """Добавляет роль пользователя в JWT токен"""

    @classmethod
    def get_token(cls, user):
        token = super().get_token(user)
        # Роль берём только из БД
        token['role'] = user.role
        token['is_superuser'] = getattr(user, 'is_superuser', False)
        token['email'] = user.email
        return token


class UserProfileSerializer(serializers.ModelSerializer):
    """Сериализатор для профиля текущего пользователя"""

    class Meta:
        model = get_user_model()
        fields = [
            'id',
            'email',
            'first_name',
            'last_name',
            'role',
            'created_at',
            'updated_at',
        ]
        read_only_fields = ['email', 'role', 'created_at', 'updated_at']
        extra_kwargs = {
            'first_name': {'allow_blank': True, 'required': False},
            'last_name': {'allow_blank': True, 'required': False},
        }
