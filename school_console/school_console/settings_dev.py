"""
Development settings - локальная разработка
"""
from .settings import *  # noqa: F401,F403

DEBUG = True
ALLOWED_HOSTS = ['*']

# Каталог фич из локальной БД; для проверки удалённого каталога:
# FEATURE_CATALOG_BACKEND=remote FEATURE_CATALOG_URL=http://localhost:5000
FEATURE_CATALOG = {**FEATURE_CATALOG, 'CACHE_TTL': 0}  # noqa: F405

LOG_LEVEL = 'DEBUG'
LOGGING['loggers']['navigation']['level'] = 'DEBUG'  # noqa: F405
LOGGING['loggers']['features']['level'] = 'DEBUG'  # noqa: F405

EMAIL_BACKEND = 'django.core.mail.backends.console.EmailBackend'

print("🔧 Settings: Development (локальная разработка)")
