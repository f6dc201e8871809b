"""
Запуск: python manage.py test school_console -v2
"""
from unittest.mock import patch

from django.db import DatabaseError
from django.test import TestCase, override_settings


class HealthCheckTests(TestCase):

    def test_healthy(self):
        response = self.client.get('/api/health/')
        self.assertEqual(response.status_code, 200)
        data = response.json()
        self.assertEqual(data['status'], 'healthy')
        self.assertEqual(data['checks']['database'], 'ok')
        self.assertEqual(data['checks']['feature_catalog'], {'backend': 'database'})

    @override_settings(FEATURE_CATALOG={'BACKEND': 'remote', 'BASE_URL': ''})
    def test_remote_catalog_not_configured(self):
        data = self.client.get('/api/health/').json()
        self.assertEqual(data['checks']['feature_catalog'], {'backend': 'remote', 'configured': False})

    def test_database_down(self):
        with patch('school_console.health.connection.cursor', side_effect=DatabaseError('down')):
            response = self.client.get('/api/health/')
        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.json()['status'], 'unhealthy')
