"""
helpdesk_site/settings.py
=========================
Base settings shared by local development, tests and production.
Environment-specific overrides live in settings_production.py and
settings_test.py.

Set DJANGO_SETTINGS_MODULE=helpdesk_site.settings_production on the host.
"""

from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent.parent

# --- Security (overridden in production via env var) ----------------------
SECRET_KEY = 'django-insecure-dev-key-replace-in-production'
DEBUG      = True
ALLOWED_HOSTS = ['*']

# --- Applications ---------------------------------------------------------
INSTALLED_APPS = [
    'django.contrib.admin',
    'django.contrib.auth',
    'django.contrib.contenttypes',
    'django.contrib.sessions',
    'django.contrib.messages',
    'django.contrib.staticfiles',
    'helpdesk',
]

# --- Middleware ------------------------------------------------------------
MIDDLEWARE = [
    'django.middleware.security.SecurityMiddleware',
    'whitenoise.middleware.WhiteNoiseMiddleware',   # serves static files in prod
    'django.contrib.sessions.middleware.SessionMiddleware',
    'django.middleware.common.CommonMiddleware',
    'django.middleware.csrf.CsrfViewMiddleware',
    'django.contrib.auth.middleware.AuthenticationMiddleware',
    'django.contrib.messages.middleware.MessageMiddleware',
    'django.middleware.clickjacking.XFrameOptionsMiddleware',
]

ROOT_URLCONF = 'helpdesk_site.urls'

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
                'helpdesk.context_processors.helpdesk',
            ],
        },
    },
]

WSGI_APPLICATION = 'helpdesk_site.wsgi.application'

# --- Database (SQLite for local dev; overridden in production) ------------
DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': BASE_DIR / 'db.sqlite3',
    }
}

# --- Password validation --------------------------------------------------
# Admin passwords only. User accounts use a padded PIN and are created
# without running these validators.
AUTH_PASSWORD_VALIDATORS = [
    {'NAME': 'django.contrib.auth.password_validation.UserAttributeSimilarityValidator'},
    {'NAME': 'django.contrib.auth.password_validation.MinimumLengthValidator'},
    {'NAME': 'django.contrib.auth.password_validation.CommonPasswordValidator'},
    {'NAME': 'django.contrib.auth.password_validation.NumericPasswordValidator'},
]

LOGIN_URL = 'login'

# --- Internationalisation --------------------------------------------------
LANGUAGE_CODE = 'en-us'
TIME_ZONE     = 'UTC'
USE_I18N = True
USE_TZ   = True

# --- Static & uploaded files ----------------------------------------------
STATIC_URL  = '/static/'
STATIC_ROOT = BASE_DIR / 'staticfiles'   # collectstatic target

MEDIA_URL  = '/media/'
MEDIA_ROOT = BASE_DIR / 'media'          # ticket and message attachments

STORAGES = {
    'default': {
        'BACKEND': 'django.core.files.storage.FileSystemStorage',
    },
    # WhiteNoise compression + caching
    'staticfiles': {
        'BACKEND': 'whitenoise.storage.CompressedManifestStaticFilesStorage',
    },
}

DATA_UPLOAD_MAX_NUMBER_FILES = 20

DEFAULT_AUTO_FIELD = 'django.db.models.BigAutoField'

# --- Session --------------------------------------------------------------
SESSION_COOKIE_AGE    = 28800   # 8 hours
SESSION_COOKIE_SECURE = False   # set True in production (HTTPS only)

# --- E-mail (admin notifications) -----------------------------------------
EMAIL_BACKEND = 'django.core.mail.backends.console.EmailBackend'
SERVER_EMAIL  = 'helpdesk@localhost'
ADMINS = [('Help Desk Admin', 'admin@localhost')]

# --- Logging --------------------------------------------------------------
LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "simple": {"format": "%(asctime)s %(levelname)s %(name)s %(message)s"},
    },
    "handlers": {"console": {"class": "logging.StreamHandler", "formatter": "simple"}},
    "root": {"handlers": ["console"], "level": "INFO"},
    "loggers": {
        "django": {"handlers": ["console"], "level": "WARNING", "propagate": False},
    },
}

# --- Help desk ------------------------------------------------------------
# User logins map "<name>" + PIN onto "<name><suffix>" + "<PIN><padding>".
HELPDESK_INTERNAL_EMAIL_SUFFIX = '@tickets.internal'
HELPDESK_PIN_PADDING           = '_TKT'
HELPDESK_PIN_LENGTH            = 4
HELPDESK_PROFILE_LIST_LIMIT    = 100
HELPDESK_NOTIFY_ADMINS         = True
HELPDESK_ATTACHMENT_MAX_BYTES  = 10 * 1024 * 1024
