"""
Django settings for school_console project.

Все значения, зависящие от окружения, читаются из переменных окружения.
Оверлеи: settings_dev (локальная разработка).
"""

import os
from datetime import timedelta
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent.parent


def _env_bool(name, default=False):
    return os.environ.get(name, str(default)).lower() in ('true', '1', 'yes')


SECRET_KEY = os.environ.get('SECRET_KEY', 'django-insecure-school-console-dev-key')

DEBUG = _env_bool('DEBUG', False)

ALLOWED_HOSTS = [
    h.strip() for h in os.environ.get('ALLOWED_HOSTS', 'localhost,127.0.0.1').split(',') if h.strip()
]

VERSION = os.environ.get('APP_VERSION', '1.0.0')

INSTALLED_APPS = [
    'django.contrib.admin',
    'django.contrib.auth',
    'django.contrib.contenttypes',
    'django.contrib.sessions',
    'django.contrib.messages',
    'django.contrib.staticfiles',
    'rest_framework',
    'accounts',
    'tenants',
    'features',
    'navigation',
]

MIDDLEWARE = [
    'django.middleware.security.SecurityMiddleware',
    'django.contrib.sessions.middleware.SessionMiddleware',
    'django.middleware.common.CommonMiddleware',
    'django.middleware.csrf.CsrfViewMiddleware',
    'django.contrib.auth.middleware.AuthenticationMiddleware',
    # После AuthenticationMiddleware: нужен request.user для membership
    'tenants.middleware.TenantMiddleware',
    'django.contrib.messages.middleware.MessageMiddleware',
    'django.middleware.clickjacking.XFrameOptionsMiddleware',
]

ROOT_URLCONF = 'school_console.urls'

TEMPLATES = [
    {
        'BACKEND': 'django.template.backends.django.DjangoTemplates',
        'DIRS': [],
        'APP_DIRS': True,
        'OPTIONS': {
            'context_processors': [
                'django.template.context_processors.debug',
                'django.template.context_processors.request',
                'django.contrib.auth.context_processors.auth',
                'django.contrib.messages.context_processors.messages',
            ],
        },
    },
]

WSGI_APPLICATION = 'school_console.wsgi.application'

if os.environ.get('POSTGRES_DB'):
    DATABASES = {
        'default': {
            'ENGINE': 'django.db.backends.postgresql',
            'NAME': os.environ['POSTGRES_DB'],
            'USER': os.environ.get('POSTGRES_USER', ''),
            'PASSWORD': os.environ.get('POSTGRES_PASSWORD', ''),
            'HOST': os.environ.get('POSTGRES_HOST', 'localhost'),
            'PORT': os.environ.get('POSTGRES_PORT', '5432'),
        }
    }
else:
    DATABASES = {
        'default': {
            'ENGINE': 'django.db.backends.sqlite3',
            'NAME': BASE_DIR / 'db.sqlite3',
        }
    }

CACHES = {
    'default': {
        'BACKEND': 'django.core.cache.backends.locmem.LocMemCache',
        'LOCATION': 'school-console',
    }
}

AUTH_USER_MODEL = 'accounts.CustomUser'

AUTH_PASSWORD_VALIDATORS = [
    {'NAME': 'django.contrib.auth.password_validation.UserAttributeSimilarityValidator'},
    {'NAME': 'django.contrib.auth.password_validation.MinimumLengthValidator'},
]

LANGUAGE_CODE = 'en-us'
TIME_ZONE = 'UTC'
USE_I18N = True
USE_TZ = True

STATIC_URL = 'static/'
STATIC_ROOT = BASE_DIR / 'staticfiles'

DEFAULT_AUTO_FIELD = 'django.db.models.BigAutoField'

# ============================================================
# REST Framework / JWT
# ============================================================
REST_FRAMEWORK = {
    'DEFAULT_AUTHENTICATION_CLASSES': (
        'rest_framework_simplejwt.authentication.JWTAuthentication',
        'rest_framework.authentication.SessionAuthentication',
    ),
    'DEFAULT_PERMISSION_CLASSES': (
        'rest_framework.permissions.IsAuthenticated',
    ),
}

SIMPLE_JWT = {
    'ACCESS_TOKEN_LIFETIME': timedelta(minutes=int(os.environ.get('JWT_ACCESS_MINUTES', '60'))),
    'REFRESH_TOKEN_LIFETIME': timedelta(days=int(os.environ.get('JWT_REFRESH_DAYS', '7'))),
    'AUTH_HEADER_TYPES': ('Bearer',),
}

# ============================================================
# Multi-tenant
# ============================================================
PLATFORM_DOMAINS = [
    d.strip() for d in os.environ.get('PLATFORM_DOMAINS', 'eliteschola.com,www.eliteschola.com').split(',')
    if d.strip()
]
DEFAULT_TENANT_SLUG = os.environ.get('DEFAULT_TENANT_SLUG', 'demo')
TENANT_CACHE_TTL = int(os.environ.get('TENANT_CACHE_TTL', '300'))

# ============================================================
# Навигация и каталог фич
# ============================================================
NAVIGATION = {
    # Корень консоли школы; dashboard-пункт активен только на нём
    'TENANT_ROOT': os.environ.get('NAVIGATION_TENANT_ROOT', '/school'),
    # Разбор описания фичи по ключевым словам, когда нет capabilities
    'KEYWORD_FALLBACK': _env_bool('NAVIGATION_KEYWORD_FALLBACK', True),
}

FEATURE_CATALOG = {
    'BACKEND': os.environ.get('FEATURE_CATALOG_BACKEND', 'database'),  # database | remote
    'BASE_URL': os.environ.get('FEATURE_CATALOG_URL', ''),
    'API_TOKEN': os.environ.get('FEATURE_CATALOG_TOKEN', ''),
    'TIMEOUT': float(os.environ.get('FEATURE_CATALOG_TIMEOUT', '5')),
    'CACHE_TTL': int(os.environ.get('FEATURE_CATALOG_CACHE_TTL', '60')),
}

# ============================================================
# Logging
# ============================================================
LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')

LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'formatters': {
        'verbose': {
            'format': '{levelname} {asctime} [{tenant}] {name} {process:d} {thread:d} {message}',
            'style': '{',
        },
    },
    'filters': {
        'tenant': {
            '()': 'school_console.safe_logging.TenantContextFilter',
        },
    },
    'handlers': {
        'console': {
            'class': 'school_console.safe_logging.ThreadSafeStreamHandler',
            'formatter': 'verbose',
            'filters': ['tenant'],
        },
    },
    'root': {
        'handlers': ['console'],
        'level': 'WARNING',
    },
    'loggers': {
        'django': {
            'handlers': ['console'],
            'level': 'WARNING',
            'propagate': False,
        },
        'accounts': {'handlers': ['console'], 'level': LOG_LEVEL, 'propagate': False},
        'tenants': {'handlers': ['console'], 'level': LOG_LEVEL, 'propagate': False},
        'features': {'handlers': ['console'], 'level': LOG_LEVEL, 'propagate': False},
        'navigation': {'handlers': ['console'], 'level': LOG_LEVEL, 'propagate': False},
    },
}
