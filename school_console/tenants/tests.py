"""
Тесты tenants: контекст, определение школы по hostname, конфиг.

Запуск: python manage.py test tenants.tests -v2
"""
from unittest.mock import MagicMock, patch

from django.contrib.auth import get_user_model
from django.db import DatabaseError, IntegrityError
from django.test import RequestFactory, SimpleTestCase, TestCase, override_settings
from rest_framework.test import APIClient

from features.models import Feature, SchoolFeature
from tenants.context import clear_current_tenant, get_current_tenant, set_current_tenant, tenant_scope
from tenants.middleware import TenantMiddleware
from tenants.models import Tenant, TenantMembership
from tenants.permissions import IsTenantAdmin, IsTenantMember, resolve_membership

User = get_user_model()


class TenantContextTests(SimpleTestCase):

    def tearDown(self):
        clear_current_tenant()

    def test_set_get_clear(self):
        tenant = MagicMock()
        set_current_tenant(tenant)
        self.assertIs(get_current_tenant(), tenant)
        clear_current_tenant()
        self.assertIsNone(get_current_tenant())

    def test_scope_restores_previous(self):
        outer, inner = MagicMock(name='outer'), MagicMock(name='inner')
        set_current_tenant(outer)
        with tenant_scope(inner):
            self.assertIs(get_current_tenant(), inner)
        self.assertIs(get_current_tenant(), outer)


@override_settings(
    PLATFORM_DOMAINS=['eliteschola.com', 'www.eliteschola.com'],
    DEFAULT_TENANT_SLUG='demo',
    ALLOWED_HOSTS=['.eliteschola.com', 'eliteschola.com', 'localhost', '127.0.0.1'],
)
class TenantMiddlewareTests(TestCase):

    @classmethod
    def setUpTestData(cls):
        cls.default = Tenant.objects.create(slug='demo', name='Demo School')
        cls.greenfield = Tenant.objects.create(slug='greenfield', name='Greenfield School')
        cls.suspended = Tenant.objects.create(
            slug='closed', name='Closed School', status=Tenant.Status.SUSPENDED,
        )

    def setUp(self):
        TenantMiddleware.clear_cache()
        self.factory = RequestFactory()
        self.seen = {}

        def get_response(request):
            self.seen['tenant'] = get_current_tenant()
            return MagicMock(status_code=200)

        self.middleware = TenantMiddleware(get_response)

    def _run(self, host, path='/api/school/navigation/', **headers):
        request = self.factory.get(path, HTTP_HOST=host, **headers)
        request.user = MagicMock(is_authenticated=False)
        self.middleware(request)
        return request

    def test_subdomain(self):
        self.assertEqual(self._run('greenfield.eliteschola.com').tenant, self.greenfield)

    def test_platform_domain_gives_default(self):
        self.assertEqual(self._run('eliteschola.com').tenant, self.default)

    def test_unknown_subdomain_gives_default(self):
        self.assertEqual(self._run('nope.eliteschola.com').tenant, self.default)

    def test_suspended_tenant_not_resolved(self):
        self.assertEqual(self._run('closed.eliteschola.com').tenant, self.default)

    def test_header_on_localhost(self):
        request = self._run('localhost:8000', HTTP_X_TENANT_ID='greenfield')
        self.assertEqual(request.tenant, self.greenfield)

    def test_header_ignored_on_remote_host(self):
        request = self._run('eliteschola.com', HTTP_X_TENANT_ID='greenfield')
        self.assertEqual(request.tenant, self.default)

    def test_skip_paths(self):
        self.assertIsNone(self._run('greenfield.eliteschola.com', path='/api/health/').tenant)

    def test_context_set_during_request_and_cleared(self):
        self._run('greenfield.eliteschola.com')
        self.assertEqual(self.seen['tenant'], self.greenfield)
        self.assertIsNone(get_current_tenant())

    def test_cache_cleared_on_save(self):
        self._run('greenfield.eliteschola.com')
        self.assertTrue(TenantMiddleware._tenant_cache)
        self.greenfield.name = 'Greenfield Academy'
        self.greenfield.save()
        self.assertFalse(TenantMiddleware._tenant_cache)

    def test_database_error_not_cached(self):
        with patch.object(Tenant.objects, 'filter', side_effect=DatabaseError('no such table')):
            with self.assertLogs('tenants.middleware', level='ERROR'):
                request = self._run('greenfield.eliteschola.com')
        self.assertIsNone(request.tenant)
        self.assertNotIn('host:greenfield.eliteschola.com', TenantMiddleware._tenant_cache)

        # После восстановления БД школа находится сразу, без ожидания TTL
        self.assertEqual(self._run('greenfield.eliteschola.com').tenant, self.greenfield)

    def test_membership_for_session_user(self):
        user = User.objects.create_user(email='t@greenfield.test', password='Test1234')
        membership = TenantMembership.objects.create(tenant=self.greenfield, user=user, role='teacher')
        request = self.factory.get('/api/school/navigation/', HTTP_HOST='greenfield.eliteschola.com')
        request.user = user
        self.middleware(request)
        self.assertEqual(request.tenant_membership, membership)


class TenantPermissionTests(TestCase):

    @classmethod
    def setUpTestData(cls):
        cls.tenant = Tenant.objects.create(slug='greenfield', name='Greenfield School')
        cls.admin = User.objects.create_user(email='a@greenfield.test', password='Test1234')
        cls.teacher = User.objects.create_user(email='t@greenfield.test', password='Test1234')
        TenantMembership.objects.create(tenant=cls.tenant, user=cls.admin, role='school_admin')
        TenantMembership.objects.create(tenant=cls.tenant, user=cls.teacher, role='teacher', is_active=False)

    def _request(self, user, tenant=None):
        request = RequestFactory().get('/')
        request.user = user
        request.tenant = tenant or self.tenant
        request.tenant_membership = None
        return request

    def test_membership_resolved_lazily(self):
        request = self._request(self.admin)
        self.assertEqual(resolve_membership(request).role, 'school_admin')
        self.assertIsNotNone(request.tenant_membership)

    def test_inactive_membership(self):
        self.assertIsNone(resolve_membership(self._request(self.teacher)))
        self.assertFalse(IsTenantMember().has_permission(self._request(self.teacher), None))

    def test_admin(self):
        self.assertTrue(IsTenantMember().has_permission(self._request(self.admin), None))
        self.assertTrue(IsTenantAdmin().has_permission(self._request(self.admin), None))

    def test_no_tenant(self):
        request = self._request(self.admin)
        request.tenant = None
        self.assertFalse(IsTenantMember().has_permission(request, None))

    def test_unique_membership(self):
        with self.assertRaises(IntegrityError):
            TenantMembership.objects.create(tenant=self.tenant, user=self.admin, role='teacher')


class SchoolConfigViewTests(TestCase):

    def setUp(self):
        TenantMiddleware.clear_cache()
        self.client = APIClient()

    def test_config_lists_enabled_features(self):
        tenant = Tenant.objects.create(
            slug='greenfield', name='Greenfield School',
            metadata={'theme': {'primary_color': '#123456'}},
        )
        staff = Feature.objects.create(key='staff_management', name='Staff Management')
        billing = Feature.objects.create(key='billing', name='Billing')
        SchoolFeature.objects.create(tenant=tenant, feature=staff, enabled=True)
        SchoolFeature.objects.create(tenant=tenant, feature=billing, enabled=False)

        response = self.client.get('/api/school/config/', HTTP_HOST='localhost', HTTP_X_TENANT_ID='greenfield')
        self.assertEqual(response.status_code, 200)
        data = response.json()
        self.assertEqual(data['slug'], 'greenfield')
        self.assertEqual(data['primary_color'], '#123456')
        self.assertEqual(data['features'], ['staff_management'])

    def test_no_tenant(self):
        response = self.client.get('/api/school/config/', HTTP_HOST='localhost')
        self.assertEqual(response.status_code, 404)
