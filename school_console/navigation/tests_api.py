"""
API навигации школы.

Запуск: python manage.py test navigation.tests_api -v2
"""
from unittest.mock import patch

from django.contrib.auth import get_user_model
from django.test import TestCase, override_settings
from rest_framework.test import APIClient

from features.catalog import FeatureCatalogUnavailable
from features.models import Feature, SchoolFeature
from tenants.middleware import TenantMiddleware
from tenants.models import Tenant, TenantMembership

User = get_user_model()


class NavigationAPITestBase(TestCase):

    @classmethod
    def setUpTestData(cls):
        cls.tenant = Tenant.objects.create(slug='greenfield', name='Greenfield School')
        cls.other_tenant = Tenant.objects.create(slug='riverside', name='Riverside School')

        cls.staff = Feature.objects.create(
            key='staff_management',
            name='Staff Management',
            description='Manage staff records and assignments',
        )
        cls.timetable = Feature.objects.create(
            key='timetable', name='Timetable', description='Class schedule',
        )
        cls.billing = Feature.objects.create(
            key='billing', name='Billing', description='Invoices',
        )
        SchoolFeature.objects.create(tenant=cls.tenant, feature=cls.staff, enabled=True)
        SchoolFeature.objects.create(tenant=cls.tenant, feature=cls.timetable, enabled=False)
        SchoolFeature.objects.create(tenant=cls.other_tenant, feature=cls.billing, enabled=True)

        cls.admin = User.objects.create_user(
            email='admin@greenfield.test', password='Test1234', role='teacher',
        )
        TenantMembership.objects.create(
            tenant=cls.tenant, user=cls.admin,
            role=TenantMembership.TenantRole.SCHOOL_ADMIN,
        )
        cls.teacher = User.objects.create_user(
            email='teacher@greenfield.test', password='Test1234', role='teacher',
        )
        TenantMembership.objects.create(
            tenant=cls.tenant, user=cls.teacher,
            role=TenantMembership.TenantRole.TEACHER,
        )
        cls.outsider = User.objects.create_user(
            email='outsider@riverside.test', password='Test1234', role='school_admin',
        )
        TenantMembership.objects.create(
            tenant=cls.other_tenant, user=cls.outsider,
            role=TenantMembership.TenantRole.SCHOOL_ADMIN,
        )

    def setUp(self):
        TenantMiddleware.clear_cache()
        self.client = APIClient()

    def login(self, user, slug='greenfield'):
        self.client.force_authenticate(user=user)
        self.client.credentials(HTTP_HOST='localhost', HTTP_X_TENANT_ID=slug)


class NavigationViewTests(NavigationAPITestBase):

    def test_requires_authentication(self):
        self.client.credentials(HTTP_HOST='localhost', HTTP_X_TENANT_ID='greenfield')
        response = self.client.get('/api/school/navigation/')
        self.assertEqual(response.status_code, 401)

    def test_non_member_forbidden(self):
        self.login(self.outsider, slug='greenfield')
        response = self.client.get('/api/school/navigation/')
        self.assertEqual(response.status_code, 403)

    def test_tree_for_member(self):
        self.login(self.admin)
        response = self.client.get('/api/school/navigation/', {'location': '/school/academic-years/5'})
        self.assertEqual(response.status_code, 200)
        data = response.json()
        self.assertTrue(data['catalog_available'])
        self.assertEqual(data['expanded'], [])

        items = data['items']
        self.assertEqual(
            [item['label'] for item in items],
            ['Dashboard', 'Academic Years', 'Staff Management'],
        )
        self.assertFalse(items[0]['is_active'])
        self.assertTrue(items[1]['is_active'])

        staff = items[2]
        self.assertEqual(staff['id'], str(self.staff.id))
        self.assertEqual(staff['target_path'], f'/school/features/{self.staff.id}')
        self.assertEqual(staff['icon_kind'], 'people')
        self.assertEqual(
            [child['label'] for child in staff['children']],
            ['Staff Management List', 'Assignments'],
        )

    def test_other_tenant_features_not_visible(self):
        self.login(self.admin)
        labels = [item['label'] for item in self.client.get('/api/school/navigation/').json()['items']]
        self.assertNotIn('Billing', labels)

    def test_search(self):
        self.login(self.admin)
        response = self.client.get('/api/school/navigation/', {'q': 'assign'})
        self.assertEqual([item['label'] for item in response.json()['items']], ['Staff Management'])

    def test_catalog_failure_degrades_to_base_nodes(self):
        self.login(self.admin)
        with patch(
            'features.catalog.DatabaseFeatureCatalog.fetch',
            side_effect=FeatureCatalogUnavailable('down'),
        ):
            response = self.client.get('/api/school/navigation/')
        self.assertEqual(response.status_code, 200)
        data = response.json()
        self.assertFalse(data['catalog_available'])
        self.assertEqual([item['id'] for item in data['items']], ['dashboard', 'academic-years'])

    @override_settings(NAVIGATION={'TENANT_ROOT': '/school', 'KEYWORD_FALLBACK': False})
    def test_keyword_fallback_off(self):
        self.login(self.admin)
        staff = self.client.get('/api/school/navigation/').json()['items'][2]
        self.assertNotIn('children', staff)

    def test_capabilities_from_catalog(self):
        Feature.objects.filter(pk=self.staff.pk).update(capabilities=['create', 'types'])
        self.login(self.admin)
        staff = self.client.get('/api/school/navigation/').json()['items'][2]
        self.assertEqual([c['label'] for c in staff['children']], ['Create Staff', 'Staff Types'])

    def test_school_menu_links_override(self):
        SchoolFeature.objects.filter(tenant=self.tenant, feature=self.staff).update(
            menu_links=[{'name': 'Directory', 'href': '/school/staff', 'icon': 'fas fa-users', 'enabled': True}],
        )
        self.login(self.admin)
        staff = self.client.get('/api/school/navigation/').json()['items'][2]
        self.assertEqual(
            [(c['label'], c['target_path']) for c in staff['children']],
            [('Directory', '/school/staff')],
        )


class ExpandedStateViewTests(NavigationAPITestBase):

    def test_toggle_roundtrip(self):
        self.login(self.admin)
        node_id = str(self.staff.id)

        response = self.client.post('/api/school/navigation/expanded/', {'node_id': node_id}, format='json')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['expanded'], [node_id])

        nav = self.client.get('/api/school/navigation/').json()
        self.assertEqual(nav['expanded'], [node_id])
        self.assertTrue(nav['items'][2]['is_expanded'])

        response = self.client.post('/api/school/navigation/expanded/', {'node_id': node_id}, format='json')
        self.assertEqual(response.json()['expanded'], [])
        self.assertEqual(self.client.get('/api/school/navigation/expanded/').json()['expanded'], [])

    def test_leaf_cannot_be_expanded(self):
        self.login(self.admin)
        response = self.client.post('/api/school/navigation/expanded/', {'node_id': 'dashboard'}, format='json')
        self.assertEqual(response.status_code, 400)

    def test_unknown_node(self):
        self.login(self.admin)
        response = self.client.post('/api/school/navigation/expanded/', {'node_id': 'nope'}, format='json')
        self.assertEqual(response.status_code, 400)

    def test_missing_node_id(self):
        self.login(self.admin)
        response = self.client.post('/api/school/navigation/expanded/', {}, format='json')
        self.assertEqual(response.status_code, 400)


class ActiveRouteViewTests(NavigationAPITestBase):

    def test_root_and_prefix(self):
        self.login(self.teacher)
        cases = [
            ('/school', '/school', True),
            ('/school', '/school/academic-years', False),
            ('/school/academic-years', '/school/academic-years/5', True),
        ]
        for path, location, expected in cases:
            with self.subTest(path=path, location=location):
                response = self.client.get('/api/school/navigation/active/', {'path': path, 'location': location})
                self.assertEqual(response.status_code, 200)
                self.assertEqual(response.json()['is_active'], expected)

    def test_path_required(self):
        self.login(self.teacher)
        response = self.client.get('/api/school/navigation/active/', {'location': '/school'})
        self.assertEqual(response.status_code, 400)


class QuickActionsViewTests(NavigationAPITestBase):

    def test_school_admin_gets_setup_once(self):
        self.login(self.admin)
        response = self.client.get('/api/school/quick-actions/')
        self.assertEqual(response.status_code, 200)
        actions = response.json()['actions']
        self.assertEqual(
            [(a['title'], a['target_path']) for a in actions],
            [
                ('Staff Management', '/school/features/staff-management'),
                ('School Setup', '/school/setup'),
            ],
        )
        self.assertEqual(actions[0]['icon_kind'], 'people')

    def test_membership_role_wins_over_user_role(self):
        # Глобально school_admin, но в этой школе — teacher
        self.teacher.role = 'school_admin'
        self.teacher.save(update_fields=['role'])
        self.login(self.teacher)
        titles = [a['title'] for a in self.client.get('/api/school/quick-actions/').json()['actions']]
        self.assertEqual(titles, ['Staff Management'])

    def test_disabled_feature_has_no_action(self):
        SchoolFeature.objects.filter(tenant=self.tenant, feature=self.staff).update(enabled=False)
        self.login(self.teacher)
        self.assertEqual(self.client.get('/api/school/quick-actions/').json()['actions'], [])

    def test_catalog_failure_keeps_forced_action(self):
        self.login(self.admin)
        with patch(
            'features.catalog.DatabaseFeatureCatalog.fetch',
            side_effect=FeatureCatalogUnavailable('down'),
        ):
            data = self.client.get('/api/school/quick-actions/').json()
        self.assertFalse(data['catalog_available'])
        self.assertEqual([a['title'] for a in data['actions']], ['School Setup'])

    @override_settings(NAVIGATION={'TENANT_ROOT': '/academy', 'KEYWORD_FALLBACK': True})
    def test_paths_follow_tenant_root(self):
        self.login(self.admin)
        actions = self.client.get('/api/school/quick-actions/').json()['actions']
        self.assertEqual(
            [a['target_path'] for a in actions],
            ['/academy/features/staff-management', '/academy/setup'],
        )
