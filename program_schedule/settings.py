"""
Django settings for program_schedule project.
"""

import os

SECRET_KEY = os.environ.get('DJANGO_SECRET_KEY', 'django-insecure-dev-only-key')

DEBUG = os.environ.get('DJANGO_DEBUG', 'false').lower() == 'true'

ALLOWED_HOSTS = [
    host.strip()
    for host in os.environ.get('DJANGO_ALLOWED_HOSTS', 'localhost,127.0.0.1').split(',')
    if host.strip()
]

INSTALLED_APPS = [
    'rest_framework',
    'scheduling',
]

MIDDLEWARE = [
    'django.middleware.security.SecurityMiddleware',
    'django.middleware.common.CommonMiddleware',
]

ROOT_URLCONF = 'program_schedule.urls'

WSGI_APPLICATION = 'program_schedule.wsgi.application'

# Every session is interpreted in this single civil timezone.
SCHEDULE_REFERENCE_TIMEZONE = os.environ.get('SCHEDULE_REFERENCE_TIMEZONE', 'America/New_York')

SCHEDULE_WEEKDAY_LOCALE = os.environ.get('SCHEDULE_WEEKDAY_LOCALE', 'es')

LANGUAGE_CODE = 'en-us'

TIME_ZONE = SCHEDULE_REFERENCE_TIMEZONE

USE_I18N = True

USE_TZ = True

REST_FRAMEWORK = {
    'DEFAULT_RENDERER_CLASSES': ['rest_framework.renderers.JSONRenderer'],
    'DEFAULT_PARSER_CLASSES': ['rest_framework.parsers.JSONParser'],
    'DEFAULT_AUTHENTICATION_CLASSES': [],
    'DEFAULT_PERMISSION_CLASSES': ['rest_framework.permissions.AllowAny'],
    'UNAUTHENTICATED_USER': None,
    'TEST_REQUEST_DEFAULT_FORMAT': 'json',
}

LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'formatters': {
        'simple': {
            'format': '{asctime} {levelname} {name} {message}',
            'style': '{',
        },
    },
    'handlers': {
        'console': {
            'class': 'logging.StreamHandler',
            'formatter': 'simple',
        },
    },
    'root': {
        'handlers': ['console'],
        'level': 'WARNING',
    },
    'loggers': {
        'scheduling': {
            'handlers': ['console'],
            'level': os.environ.get('SCHEDULE_LOG_LEVEL', 'INFO'),
            'propagate': False,
        },
    },
}
