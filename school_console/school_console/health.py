"""
GET /api/health/ — для мониторинга.

200 — БД отвечает; 500 — нет. Состояние каталога фич только
показывается: его недоступность навигацию не ломает.
"""
import time

from django.conf import settings
from django.db import DatabaseError, connection
from django.http import JsonResponse


def _check_database():
    try:
        with connection.cursor() as cursor:
            cursor.execute('SELECT 1')
            cursor.fetchone()
    except DatabaseError as e:
        return False, f'error: {str(e)[:100]}'
    return True, 'ok'


def _catalog_info():
    config = getattr(settings, 'FEATURE_CATALOG', {}) or {}
    backend = config.get('BACKEND', 'database')
    info = {'backend': backend}
    if backend == 'remote':
        info['configured'] = bool(config.get('BASE_URL'))
    return info


def health_check(request):
    db_ok, db_status = _check_database()
    payload = {
        'status': 'healthy' if db_ok else 'unhealthy',
        'timestamp': time.time(),
        'version': getattr(settings, 'VERSION', ''),
        'checks': {
            'database': db_status,
            'feature_catalog': _catalog_info(),
        },
    }
    return JsonResponse(payload, status=200 if db_ok else 500)
