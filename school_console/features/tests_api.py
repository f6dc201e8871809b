"""
API каталога фич: школа и супер-админ.

Запуск: python manage.py test features.tests_api -v2
"""
import uuid

from django.contrib.auth import get_user_model
from django.test import TestCase
from rest_framework.test import APIClient

from features.models import Feature, SchoolFeature
from tenants.middleware import TenantMiddleware
from tenants.models import Tenant, TenantMembership

User = get_user_model()


class FeatureAPITestBase(TestCase):

    @classmethod
    def setUpTestData(cls):
        cls.tenant = Tenant.objects.create(slug='greenfield', name='Greenfield School')
        cls.other = Tenant.objects.create(slug='riverside', name='Riverside School')
        cls.staff = Feature.objects.create(
            key='staff_management', name='Staff Management',
            description='Manage staff records and assignments',
        )
        cls.timetable = Feature.objects.create(key='timetable', name='Timetable')

        cls.superadmin = User.objects.create_user(
            email='root@platform.test', password='Test1234', role='super_admin',
        )
        cls.school_admin = User.objects.create_user(
            email='admin@greenfield.test', password='Test1234', role='school_admin',
        )
        TenantMembership.objects.create(
            tenant=cls.tenant, user=cls.school_admin,
            role=TenantMembership.TenantRole.SCHOOL_ADMIN,
        )

    def setUp(self):
        TenantMiddleware.clear_cache()
        self.client = APIClient()
        self.client.credentials(HTTP_HOST='localhost', HTTP_X_TENANT_ID='greenfield')

    def as_superadmin(self):
        self.client.force_authenticate(user=self.superadmin)


class SchoolFeaturesViewTests(FeatureAPITestBase):

    def test_lists_tenant_features(self):
        SchoolFeature.objects.create(tenant=self.tenant, feature=self.staff, enabled=True)
        SchoolFeature.objects.create(tenant=self.other, feature=self.timetable, enabled=True)
        self.client.force_authenticate(user=self.school_admin)

        response = self.client.get('/api/school/features/')
        self.assertEqual(response.status_code, 200)
        data = response.json()
        self.assertTrue(data['catalog_available'])
        self.assertEqual(
            [(f['key'], f['enabled']) for f in data['features']],
            [('staff_management', True)],
        )
        self.assertEqual(data['features'][0]['menuLinks'], [])


class SuperAdminAccessTests(FeatureAPITestBase):

    def test_school_admin_forbidden(self):
        self.client.force_authenticate(user=self.school_admin)
        self.assertEqual(self.client.get('/api/superadmin/features/').status_code, 403)

    def test_anonymous(self):
        self.assertEqual(self.client.get('/api/superadmin/features/').status_code, 401)

    def test_django_superuser_allowed(self):
        root = User.objects.create_superuser(email='su@platform.test', password='Test1234')
        self.client.force_authenticate(user=root)
        self.assertEqual(self.client.get('/api/superadmin/features/').status_code, 200)


class FeatureCatalogAPITests(FeatureAPITestBase):

    def test_list_hides_deleted(self):
        Feature.objects.create(key='gone', name='Gone', deleted_at='2026-01-01T00:00:00Z')
        self.as_superadmin()
        keys = [f['key'] for f in self.client.get('/api/superadmin/features/').json()]
        self.assertEqual(sorted(keys), ['staff_management', 'timetable'])

    def test_create_generates_key(self):
        self.as_superadmin()
        response = self.client.post('/api/superadmin/features/', {
            'name': 'Exam Results',
            'description': 'Manage exam results',
            'capabilities': ['list'],
            'menuLinks': [{'name': 'Results', 'href': '/school/results'}],
        }, format='json')
        self.assertEqual(response.status_code, 201, response.content)
        data = response.json()
        self.assertEqual(data['key'], 'exam_results')
        self.assertEqual(data['menuLinks'][0]['icon'], 'fas fa-home')
        self.assertTrue(Feature.objects.filter(key='exam_results').exists())

    def test_create_duplicate_key(self):
        self.as_superadmin()
        response = self.client.post(
            '/api/superadmin/features/', {'name': 'Other', 'key': 'timetable'}, format='json',
        )
        self.assertEqual(response.status_code, 400)

    def test_update_menu_links(self):
        self.as_superadmin()
        response = self.client.patch(f'/api/superadmin/features/{self.staff.id}/', {
            'menuLinks': [{'name': 'Directory', 'href': '/school/staff', 'enabled': False}],
        }, format='json')
        self.assertEqual(response.status_code, 200, response.content)
        self.staff.refresh_from_db()
        self.assertEqual(self.staff.menu_links, [
            {'name': 'Directory', 'href': '/school/staff', 'icon': 'fas fa-home', 'enabled': False},
        ])

    def test_soft_delete(self):
        self.as_superadmin()
        response = self.client.delete(f'/api/superadmin/features/{self.timetable.id}/')
        self.assertEqual(response.status_code, 204)
        self.timetable.refresh_from_db()
        self.assertIsNotNone(self.timetable.deleted_at)
        self.assertEqual(self.client.get(f'/api/superadmin/features/{self.timetable.id}/').status_code, 404)


class SchoolAssignmentAPITests(FeatureAPITestBase):

    def test_enable_disable_by_key(self):
        self.as_superadmin()
        base = f'/api/superadmin/schools/{self.tenant.id}/features/timetable'
        self.assertEqual(self.client.post(f'{base}/enable/').status_code, 200)
        self.assertTrue(SchoolFeature.objects.get(tenant=self.tenant, feature=self.timetable).enabled)
        self.assertEqual(self.client.post(f'{base}/disable/').status_code, 200)
        self.assertFalse(SchoolFeature.objects.get(tenant=self.tenant, feature=self.timetable).enabled)

    def test_enable_unknown_key(self):
        self.as_superadmin()
        response = self.client.post(f'/api/superadmin/schools/{self.tenant.id}/features/nope/enable/')
        self.assertEqual(response.status_code, 404)

    def test_unknown_school(self):
        self.as_superadmin()
        response = self.client.post(f'/api/superadmin/schools/{uuid.uuid4()}/features/timetable/enable/')
        self.assertEqual(response.status_code, 404)

    def test_list_and_bulk_enable(self):
        self.as_superadmin()
        url = f'/api/superadmin/schools/{self.tenant.id}/features/'
        response = self.client.post(
            url, {'featureIds': [str(self.staff.id), str(self.timetable.id)]}, format='json',
        )
        self.assertEqual(response.status_code, 200)
        data = self.client.get(url).json()
        self.assertEqual(
            [item['feature']['key'] for item in data],
            ['staff_management', 'timetable'],
        )

    def test_bulk_enable_unknown_feature(self):
        self.as_superadmin()
        response = self.client.post(
            f'/api/superadmin/schools/{self.tenant.id}/features/',
            {'featureIds': [str(uuid.uuid4())]}, format='json',
        )
        self.assertEqual(response.status_code, 404)
        self.assertFalse(SchoolFeature.objects.exists())

    def test_bulk_assign(self):
        self.as_superadmin()
        response = self.client.post('/api/superadmin/schools/features/bulk-assign/', {
            'schoolIds': [str(self.tenant.id), str(self.other.id)],
            'featureIds': [str(self.staff.id)],
        }, format='json')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(SchoolFeature.objects.filter(feature=self.staff, enabled=True).count(), 2)

    def test_bulk_assign_requires_lists(self):
        self.as_superadmin()
        for payload in (
            {'schoolIds': str(self.tenant.id), 'featureIds': [str(self.staff.id)]},
            {'featureIds': [str(self.staff.id)]},
            {},
        ):
            with self.subTest(payload=payload):
                response = self.client.post(
                    '/api/superadmin/schools/features/bulk-assign/', payload, format='json',
                )
                self.assertEqual(response.status_code, 400)


class FeatureSetupAPITests(FeatureAPITestBase):

    def test_put_and_get(self):
        self.as_superadmin()
        url = f'/api/superadmin/schools/{self.tenant.id}/feature-setup/'
        response = self.client.put(url, {
            'featureId': str(self.staff.id),
            'menuLinks': [{'name': 'Team', 'href': '/school/team'}],
        }, format='json')
        self.assertEqual(response.status_code, 200, response.content)
        self.assertEqual(response.json()['menuLinks'][0]['icon'], 'fas fa-home')

        setup = self.client.get(url).json()
        self.assertEqual(len(setup), 1)
        self.assertTrue(setup[0]['customized'])
        self.assertEqual(setup[0]['menuLinks'][0]['href'], '/school/team')

    def test_missing_fields(self):
        self.as_superadmin()
        url = f'/api/superadmin/schools/{self.tenant.id}/feature-setup/'
        self.assertEqual(self.client.put(url, {'featureId': str(self.staff.id)}, format='json').status_code, 400)
        self.assertEqual(self.client.put(url, {'menuLinks': []}, format='json').status_code, 400)

    def test_unknown_feature(self):
        self.as_superadmin()
        response = self.client.put(
            f'/api/superadmin/schools/{self.tenant.id}/feature-setup/',
            {'featureId': str(uuid.uuid4()), 'menuLinks': []}, format='json',
        )
        self.assertEqual(response.status_code, 404)
