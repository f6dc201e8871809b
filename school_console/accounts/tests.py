"""
Тесты аккаунтов: JWT вход и профиль.

Запуск: python manage.py test accounts.tests -v2
"""
from django.contrib.auth import get_user_model
from django.test import TestCase
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import AccessToken

from tenants.middleware import TenantMiddleware
from tenants.models import Tenant, TenantMembership

User = get_user_model()


class JWTLoginTests(TestCase):

    @classmethod
    def setUpTestData(cls):
        cls.user = User.objects.create_user(
            email='Teacher@Greenfield.test', password='Test1234', role='teacher',
        )

    def setUp(self):
        self.client = APIClient()

    def test_login_case_insensitive(self):
        response = self.client.post(
            '/api/jwt/token/',
            {'email': 'teacher@greenfield.TEST', 'password': 'Test1234'},
            format='json',
        )
        self.assertEqual(response.status_code, 200, response.content)
        token = AccessToken(response.json()['access'])
        self.assertEqual(token['role'], 'teacher')
        self.assertEqual(token['email'], self.user.email)

    def test_bad_password(self):
        response = self.client.post(
            '/api/jwt/token/',
            {'email': self.user.email, 'password': 'wrong'},
            format='json',
        )
        self.assertEqual(response.status_code, 401)

    def test_inactive_user(self):
        self.user.is_active = False
        self.user.save(update_fields=['is_active'])
        response = self.client.post(
            '/api/jwt/token/',
            {'email': self.user.email, 'password': 'Test1234'},
            format='json',
        )
        self.assertEqual(response.status_code, 401)

    def test_refresh(self):
        tokens = self.client.post(
            '/api/jwt/token/',
            {'email': self.user.email, 'password': 'Test1234'},
            format='json',
        ).json()
        response = self.client.post('/api/jwt/refresh/', {'refresh': tokens['refresh']}, format='json')
        self.assertEqual(response.status_code, 200)
        self.assertIn('access', response.json())


class MeViewTests(TestCase):

    @classmethod
    def setUpTestData(cls):
        cls.tenant = Tenant.objects.create(slug='greenfield', name='Greenfield School')
        cls.user = User.objects.create_user(
            email='admin@greenfield.test', password='Test1234', role='teacher',
        )
        TenantMembership.objects.create(tenant=cls.tenant, user=cls.user, role='school_admin')

    def setUp(self):
        TenantMiddleware.clear_cache()
        self.client = APIClient()
        self.client.credentials(HTTP_HOST='localhost', HTTP_X_TENANT_ID='greenfield')

    def test_me_with_jwt_uses_school_role(self):
        access = self.client.post(
            '/api/jwt/token/',
            {'email': self.user.email, 'password': 'Test1234'},
            format='json',
        ).json()['access']
        self.client.credentials(
            HTTP_HOST='localhost', HTTP_X_TENANT_ID='greenfield',
            HTTP_AUTHORIZATION=f'Bearer {access}',
        )
        data = self.client.get('/api/me/').json()
        self.assertEqual(data['role'], 'teacher')
        self.assertEqual(data['school_role'], 'school_admin')
        self.assertEqual(data['school'], 'greenfield')

    def test_patch_profile(self):
        self.client.force_authenticate(user=self.user)
        response = self.client.patch('/api/me/', {'first_name': 'Anna', 'role': 'super_admin'}, format='json')
        self.assertEqual(response.status_code, 200)
        self.user.refresh_from_db()
        self.assertEqual(self.user.first_name, 'Anna')
        self.assertEqual(self.user.role, 'teacher')

    def test_anonymous(self):
        self.assertEqual(self.client.get('/api/me/').status_code, 401)
