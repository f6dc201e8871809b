"""
Тесты каталога фич: сервисы, доступ к каталогу, права.

Запуск: python manage.py test features.tests -v2
"""
from io import StringIO
from unittest.mock import MagicMock, patch

import requests
from django.core.cache import cache
from django.core.exceptions import ImproperlyConfigured
from django.core.management import call_command
from django.db import DatabaseError
from django.test import RequestFactory, SimpleTestCase, TestCase, override_settings
from rest_framework.views import APIView

from features import services
from features.catalog import (
    DatabaseFeatureCatalog,
    FeatureCatalogUnavailable,
    RemoteFeatureCatalog,
    get_feature_catalog,
    load_features_or_empty,
    parse_feature_payload,
)
from features.models import Feature, SchoolFeature
from features.permissions import FeatureEnabled, require_school_feature
from features.serializers import FeatureSerializer
from navigation.types import CapabilityTag
from tenants.models import Tenant


class KeyGenerationTests(SimpleTestCase):

    def test_generate_feature_key(self):
        self.assertEqual(services.generate_feature_key('Staff Management'), 'staff_management')
        self.assertEqual(services.generate_feature_key('  Fees & Payments  '), 'fees__payments')
        self.assertEqual(services.generate_feature_key(''), '')

    def test_normalize_menu_links_defaults(self):
        links = services.normalize_menu_links([
            {'name': 'A', 'href': '/a'},
            {'name': 'B', 'href': '/b', 'icon': 'fas fa-users', 'enabled': False},
        ])
        self.assertEqual(links, [
            {'name': 'A', 'href': '/a', 'icon': 'fas fa-home', 'enabled': True},
            {'name': 'B', 'href': '/b', 'icon': 'fas fa-users', 'enabled': False},
        ])


class ParsePayloadTests(SimpleTestCase):

    def test_missing_fields_normalised(self):
        entries = parse_feature_payload([{'id': '1', 'key': 'staff_management'}])
        self.assertEqual(len(entries), 1)
        entry = entries[0]
        self.assertEqual(entry.name, '')
        self.assertEqual(entry.description, '')
        self.assertFalse(entry.enabled)

    def test_null_fields_normalised(self):
        entry = parse_feature_payload([{'id': '1', 'name': None, 'description': None, 'enabled': True}])[0]
        self.assertEqual((entry.name, entry.description), ('', ''))
        self.assertTrue(entry.enabled)

    def test_null_capabilities_and_menu_links(self):
        entries = parse_feature_payload([{
            'id': '1', 'name': 'Staff Management', 'description': 'Manage staff',
            'enabled': True, 'capabilities': None, 'menuLinks': None,
        }])
        self.assertEqual(len(entries), 1)
        self.assertEqual(entries[0].capabilities, ())
        self.assertEqual(entries[0].menu_links, ())

    def test_entries_without_id_dropped(self):
        with self.assertLogs('features.catalog', level='WARNING'):
            entries = parse_feature_payload([{'name': 'No id'}, 'junk', {'id': '2', 'name': 'Ok'}])
        self.assertEqual([e.id for e in entries], ['2'])

    def test_duplicate_ids_dropped(self):
        with self.assertLogs('features.catalog', level='WARNING'):
            entries = parse_feature_payload([{'id': '1', 'name': 'A'}, {'id': '1', 'name': 'B'}])
        self.assertEqual([e.name for e in entries], ['A'])

    def test_unknown_capabilities_ignored(self):
        entry = parse_feature_payload([{'id': '1', 'capabilities': ['list', 'teleport', 'types']}])[0]
        self.assertEqual(entry.capabilities, (CapabilityTag.LIST, CapabilityTag.TYPES))

    def test_menu_links(self):
        entry = parse_feature_payload([{
            'id': '1',
            'menuLinks': [{'name': 'A', 'href': '/a'}, {'name': 'broken'}],
        }])[0]
        self.assertEqual([link.href for link in entry.menu_links], ['/a'])
        self.assertEqual(entry.menu_links[0].icon, 'fas fa-home')

    def test_not_a_list(self):
        with self.assertRaises(FeatureCatalogUnavailable):
            parse_feature_payload({'features': []})


class FeatureCatalogTestBase(TestCase):

    @classmethod
    def setUpTestData(cls):
        cls.tenant = Tenant.objects.create(slug='greenfield', name='Greenfield School')
        cls.other = Tenant.objects.create(slug='riverside', name='Riverside School')
        cls.staff = Feature.objects.create(
            key='staff_management', name='Staff Management',
            description='Manage staff records and assignments',
            menu_links=[{'name': 'Staff', 'href': '/school/staff', 'icon': 'fas fa-users', 'enabled': True}],
        )
        cls.timetable = Feature.objects.create(key='timetable', name='Timetable', description='Schedules')


class DatabaseCatalogTests(FeatureCatalogTestBase):

    def test_assignment_order_and_flags(self):
        SchoolFeature.objects.create(tenant=self.tenant, feature=self.timetable, enabled=False)
        SchoolFeature.objects.create(tenant=self.tenant, feature=self.staff, enabled=True)
        entries = DatabaseFeatureCatalog().fetch(self.tenant)
        self.assertEqual([(e.key, e.enabled) for e in entries], [('timetable', False), ('staff_management', True)])
        self.assertEqual(entries[1].id, str(self.staff.id))

    def test_deleted_and_inactive_features_hidden(self):
        SchoolFeature.objects.create(tenant=self.tenant, feature=self.staff)
        SchoolFeature.objects.create(tenant=self.tenant, feature=self.timetable)
        services.soft_delete_feature(self.staff)
        Feature.objects.filter(pk=self.timetable.pk).update(is_active=False)
        self.assertEqual(DatabaseFeatureCatalog().fetch(self.tenant), [])

    def test_school_menu_links_override_catalog(self):
        SchoolFeature.objects.create(tenant=self.tenant, feature=self.staff)
        SchoolFeature.objects.create(
            tenant=self.other, feature=self.staff,
            menu_links=[{'name': 'Team', 'href': '/school/team'}],
        )
        own = DatabaseFeatureCatalog().fetch(self.tenant)[0]
        other = DatabaseFeatureCatalog().fetch(self.other)[0]
        self.assertEqual([l.href for l in own.menu_links], ['/school/staff'])
        self.assertEqual([l.href for l in other.menu_links], ['/school/team'])

    def test_database_error(self):
        with patch('features.catalog.SchoolFeature.objects.filter', side_effect=DatabaseError('gone')):
            with self.assertRaises(FeatureCatalogUnavailable):
                DatabaseFeatureCatalog().fetch(self.tenant)

    def test_load_features_or_empty(self):
        SchoolFeature.objects.create(tenant=self.tenant, feature=self.staff)
        features, available = load_features_or_empty(self.tenant)
        self.assertTrue(available)
        self.assertEqual(len(features), 1)

        self.assertEqual(load_features_or_empty(None), ([], False))

        with patch(
            'features.catalog.DatabaseFeatureCatalog.fetch',
            side_effect=FeatureCatalogUnavailable('down'),
        ):
            with self.assertLogs('features.catalog', level='WARNING'):
                self.assertEqual(load_features_or_empty(self.tenant), ([], False))


class RemoteCatalogTests(FeatureCatalogTestBase):

    def setUp(self):
        cache.clear()
        self.session = MagicMock()
        self.response = MagicMock()
        self.response.json.return_value = [
            {'id': 'f1', 'key': 'staff_management', 'name': 'Staff Management',
             'description': 'Manage staff', 'enabled': True},
        ]
        self.session.get.return_value = self.response

    def _catalog(self, **kwargs):
        options = {'api_token': 'secret', 'timeout': 3, 'cache_ttl': 60, 'session': self.session}
        options.update(kwargs)
        return RemoteFeatureCatalog('https://catalog.test/', **options)

    def test_request_shape(self):
        entries = self._catalog().fetch(self.tenant)
        self.assertEqual([e.key for e in entries], ['staff_management'])
        self.session.get.assert_called_once_with(
            'https://catalog.test/api/schools/features',
            headers={
                'Accept': 'application/json',
                'X-Tenant-ID': str(self.tenant.pk),
                'Authorization': 'Bearer secret',
            },
            timeout=3,
        )

    def test_no_token_no_auth_header(self):
        self._catalog(api_token='').fetch(self.tenant)
        headers = self.session.get.call_args.kwargs['headers']
        self.assertNotIn('Authorization', headers)

    def test_cached_per_tenant(self):
        catalog = self._catalog()
        catalog.fetch(self.tenant)
        catalog.fetch(self.tenant)
        self.assertEqual(self.session.get.call_count, 1)

        catalog.fetch(self.other)
        self.assertEqual(self.session.get.call_count, 2)
        self.assertEqual(
            self.session.get.call_args.kwargs['headers']['X-Tenant-ID'], str(self.other.pk),
        )

    def test_cache_disabled(self):
        catalog = self._catalog(cache_ttl=0)
        catalog.fetch(self.tenant)
        catalog.fetch(self.tenant)
        self.assertEqual(self.session.get.call_count, 2)

    def test_network_error(self):
        self.session.get.side_effect = requests.ConnectionError('refused')
        with self.assertRaises(FeatureCatalogUnavailable):
            self._catalog().fetch(self.tenant)

    def test_http_error(self):
        self.response.raise_for_status.side_effect = requests.HTTPError('401')
        with self.assertRaises(FeatureCatalogUnavailable):
            self._catalog().fetch(self.tenant)

    def test_bad_json(self):
        self.response.json.side_effect = ValueError('not json')
        with self.assertRaises(FeatureCatalogUnavailable):
            self._catalog().fetch(self.tenant)

    def test_bad_shape_not_cached(self):
        self.response.json.return_value = {'error': 'nope'}
        catalog = self._catalog()
        with self.assertRaises(FeatureCatalogUnavailable):
            catalog.fetch(self.tenant)
        self.assertIsNone(cache.get(catalog.cache_key(self.tenant)))


class CatalogSelectionTests(SimpleTestCase):

    @override_settings(FEATURE_CATALOG={'BACKEND': 'database'})
    def test_database(self):
        self.assertIsInstance(get_feature_catalog(), DatabaseFeatureCatalog)

    @override_settings(FEATURE_CATALOG={'BACKEND': 'remote', 'BASE_URL': 'https://c.test', 'TIMEOUT': 2})
    def test_remote(self):
        catalog = get_feature_catalog()
        self.assertIsInstance(catalog, RemoteFeatureCatalog)
        self.assertEqual(catalog.timeout, 2)

    @override_settings(FEATURE_CATALOG={'BACKEND': 'remote', 'BASE_URL': ''})
    def test_remote_without_url(self):
        with self.assertRaises(ImproperlyConfigured):
            get_feature_catalog()

    @override_settings(FEATURE_CATALOG={'BACKEND': 'ldap'})
    def test_unknown_backend(self):
        with self.assertRaises(ImproperlyConfigured):
            get_feature_catalog()


class ServicesTests(FeatureCatalogTestBase):

    def test_set_school_feature_create_then_update(self):
        sf = services.set_school_feature(self.tenant, self.staff, True)
        self.assertTrue(sf.enabled)
        sf = services.set_school_feature(self.tenant, self.staff, False)
        self.assertFalse(sf.enabled)
        self.assertEqual(SchoolFeature.objects.filter(tenant=self.tenant).count(), 1)

    def test_enable_disable_by_key(self):
        services.enable_feature_by_key(self.tenant, 'timetable')
        self.assertTrue(services.is_feature_enabled(self.tenant, 'timetable'))
        services.disable_feature_by_key(self.tenant, 'timetable')
        self.assertFalse(services.is_feature_enabled(self.tenant, 'timetable'))

    def test_unknown_key(self):
        with self.assertRaises(services.FeatureNotFound):
            services.enable_feature_by_key(self.tenant, 'nope')

    def test_deleted_feature_not_found_by_key(self):
        services.soft_delete_feature(self.staff)
        with self.assertRaises(services.FeatureNotFound):
            services.enable_feature_by_key(self.tenant, 'staff_management')

    def test_bulk_assign_idempotent(self):
        SchoolFeature.objects.create(tenant=self.tenant, feature=self.staff, enabled=False)
        for _ in range(2):
            services.bulk_assign([self.tenant, self.other], [self.staff, self.timetable])
        self.assertEqual(SchoolFeature.objects.count(), 4)
        self.assertFalse(SchoolFeature.objects.filter(enabled=False).exists())

    def test_update_school_menu_links(self):
        sf = services.update_school_menu_links(self.tenant, self.staff, [{'name': 'X', 'href': '/x'}])
        sf.refresh_from_db()
        self.assertEqual(sf.menu_links, [{'name': 'X', 'href': '/x', 'icon': 'fas fa-home', 'enabled': True}])
        self.assertTrue(sf.enabled)

    def test_is_feature_enabled_without_tenant(self):
        self.assertFalse(services.is_feature_enabled(None, 'staff_management'))


class FeatureSerializerTests(FeatureCatalogTestBase):

    def test_key_generated_from_name(self):
        serializer = FeatureSerializer(data={'name': 'Fee Collection', 'price': 9.6})
        self.assertTrue(serializer.is_valid(), serializer.errors)
        feature = serializer.save()
        self.assertEqual(feature.key, 'fee_collection')
        self.assertEqual(feature.price, 10)

    def test_generated_key_conflict(self):
        serializer = FeatureSerializer(data={'name': 'Staff Management'})
        self.assertFalse(serializer.is_valid())
        self.assertIn('key', serializer.errors)

    def test_unknown_capability_rejected(self):
        serializer = FeatureSerializer(data={'name': 'X', 'capabilities': ['teleport']})
        self.assertFalse(serializer.is_valid())
        self.assertIn('capabilities', serializer.errors)

    def test_update_keeps_key(self):
        serializer = FeatureSerializer(self.staff, data={'name': 'Staff'}, partial=True)
        self.assertTrue(serializer.is_valid(), serializer.errors)
        feature = serializer.save()
        self.assertEqual((feature.name, feature.key), ('Staff', 'staff_management'))

    def test_update_menu_links_normalised(self):
        serializer = FeatureSerializer(
            self.timetable, data={'menuLinks': [{'name': 'Week', 'href': '/school/week'}]}, partial=True,
        )
        self.assertTrue(serializer.is_valid(), serializer.errors)
        feature = serializer.save()
        self.assertEqual(
            feature.menu_links,
            [{'name': 'Week', 'href': '/school/week', 'icon': 'fas fa-home', 'enabled': True}],
        )


class StaffView(APIView):
    required_feature = 'staff_management'


class FeaturePermissionTests(FeatureCatalogTestBase):

    def setUp(self):
        self.factory = RequestFactory()

    def _request(self, tenant):
        request = self.factory.get('/api/school/staff/')
        request.tenant = tenant
        return request

    def test_permission(self):
        permission = FeatureEnabled()
        view = StaffView()
        self.assertFalse(permission.has_permission(self._request(self.tenant), view))
        self.assertIn('staff_management', permission.message)

        services.set_school_feature(self.tenant, self.staff, True)
        self.assertTrue(permission.has_permission(self._request(self.tenant), view))
        self.assertFalse(permission.has_permission(self._request(self.other), view))
        self.assertFalse(permission.has_permission(self._request(None), view))

    def test_view_without_required_feature(self):
        self.assertTrue(FeatureEnabled().has_permission(self._request(None), APIView()))

    def test_decorator(self):
        @require_school_feature('staff_management')
        def handler(view, request):
            return 'ok'

        response = handler(None, self._request(self.tenant))
        self.assertEqual(response.status_code, 403)

        services.set_school_feature(self.tenant, self.staff, True)
        self.assertEqual(handler(None, self._request(self.tenant)), 'ok')


class SeedFeaturesCommandTests(TestCase):

    def test_seed_is_idempotent_and_assigns(self):
        tenant = Tenant.objects.create(slug='demo', name='Demo School')
        out = StringIO()
        call_command('seed_features', stdout=out)
        call_command('seed_features', '--assign', 'demo', stdout=out)
        self.assertTrue(Feature.objects.filter(key='staff_management').exists())
        self.assertEqual(
            SchoolFeature.objects.filter(tenant=tenant, enabled=True).count(),
            Feature.objects.count(),
        )

    def test_assign_unknown_school(self):
        from django.core.management.base import CommandError
        with self.assertRaises(CommandError):
            call_command('seed_features', '--assign', 'missing', stdout=StringIO())
