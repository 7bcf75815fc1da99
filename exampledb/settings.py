# Settings for provisioning the `example` database.
# Every connection parameter comes from the environment; the defaults match
# a local PostgreSQL started with POSTGRES_PASSWORD=password.

import os
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent.parent

SECRET_KEY = os.getenv('DJANGO_SECRET_KEY', 'exampledb-provisioning-not-secret')
DEBUG = os.getenv('DJANGO_DEBUG', '') == '1'
ALLOWED_HOSTS = []

INSTALLED_APPS = [
    'simpleschema',
]

PG_HOST = os.getenv('PGHOST', '127.0.0.1')
PG_PORT = os.getenv('PGPORT', '5432')
PG_USER = os.getenv('PGUSER', 'postgres')
PG_PASSWORD = os.getenv('PGPASSWORD', 'password')

EXAMPLE_DB_NAME = os.getenv('EXAMPLE_DB_NAME', 'example')
EXAMPLE_SCHEMA = 'simple'

# statement_timeout is in milliseconds, 0 disables it
STATEMENT_TIMEOUT_MS = int(os.getenv('EXAMPLE_STATEMENT_TIMEOUT_MS', '0'))
CONNECT_TIMEOUT = int(os.getenv('EXAMPLE_CONNECT_TIMEOUT', '10'))


def _database(name, search_path=None):
    options = f'-c statement_timeout={STATEMENT_TIMEOUT_MS}'
    if search_path:
        options = f'-c search_path={search_path} {options}'
    return {
        'ENGINE': 'django.db.backends.postgresql',
        'NAME': name,
        'USER': PG_USER,
        'PASSWORD': PG_PASSWORD,
        'HOST': PG_HOST,
        'PORT': PG_PORT,
        'CONN_MAX_AGE': 0,
        'OPTIONS': {
            'connect_timeout': CONNECT_TIMEOUT,
            'options': options,
        },
    }


DATABASES = {
    # Target database. The unmanaged models resolve through the search path.
    'default': _database(EXAMPLE_DB_NAME, search_path=f'{EXAMPLE_SCHEMA},public'),
    # CREATE DATABASE has to be issued from a database that already exists.
    'maintenance': _database(os.getenv('PGMAINTENANCE_DB', 'postgres')),
}

PROVISIONING = {
    'TABLE_OWNER': os.getenv('EXAMPLE_TABLE_OWNER', PG_USER),
    'CUSTOMERS': 1000,
    'ORDERS': 10000,
    'ITEMS': 100000,
    'SEED_MODE': os.getenv('EXAMPLE_SEED_MODE', 'server'),
    'BATCH_SIZE': int(os.getenv('EXAMPLE_BATCH_SIZE', '10000')),
}

LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'formatters': {
        'timestamped': {
            'format': '[{asctime}] {levelname} {name}: {message}',
            'style': '{',
        },
    },
    'handlers': {
        'console': {
            'class': 'logging.StreamHandler',
            'formatter': 'timestamped',
        },
    },
    'loggers': {
        'simpleschema': {
            'handlers': ['console'],
            'level': os.getenv('DJANGO_LOG_LEVEL', 'INFO'),
            'propagate': False,
        },
    },
}

USE_TZ = True
TIME_ZONE = 'UTC'
DEFAULT_AUTO_FIELD = 'django.db.models.BigAutoField'
