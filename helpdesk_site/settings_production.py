"""
helpdesk_site/settings_production.py
====================================
Production overrides.
Set DJANGO_SETTINGS_MODULE=helpdesk_site.settings_production on the host.
"""

from .settings import *   # noqa
import os
from email.utils import getaddresses

import dj_database_url

# --- Security -------------------------------------------------------------
SECRET_KEY = os.environ["SECRET_KEY"]
DEBUG      = False

_raw_hosts = os.environ.get("ALLOWED_HOSTS", "")
ALLOWED_HOSTS = [h.strip() for h in _raw_hosts.split(",") if h.strip()]

SESSION_COOKIE_SECURE       = True
CSRF_COOKIE_SECURE          = True
SECURE_PROXY_SSL_HEADER     = ("HTTP_X_FORWARDED_PROTO", "https")

# --- Database -------------------------------------------------------------
# DATABASE_URL is only present at runtime. During collectstatic this block
# is skipped and Django falls back to the SQLite default from settings.py.
_database_url = os.environ.get("DATABASE_URL")

if _database_url:
    DATABASES = {
        "default": dj_database_url.config(
            default=_database_url,
            conn_max_age=600,
            conn_health_checks=True,
        )
    }

# --- Files ----------------------------------------------------------------
MEDIA_ROOT = os.environ.get("MEDIA_ROOT", MEDIA_ROOT)

# --- E-mail ---------------------------------------------------------------
# ADMINS="Jane Admin <jane@example.com>, ops@example.com"
_raw_admins = os.environ.get("ADMINS", "")
if _raw_admins:
    ADMINS = [(name or addr, addr) for name, addr in getaddresses([_raw_admins])]

EMAIL_BACKEND = os.environ.get("EMAIL_BACKEND", "django.core.mail.backends.smtp.EmailBackend")
EMAIL_HOST    = os.environ.get("EMAIL_HOST", "localhost")
EMAIL_PORT    = int(os.environ.get("EMAIL_PORT", "25"))
EMAIL_USE_TLS = os.environ.get("EMAIL_USE_TLS", "") == "1"
EMAIL_HOST_USER     = os.environ.get("EMAIL_HOST_USER", "")
EMAIL_HOST_PASSWORD = os.environ.get("EMAIL_HOST_PASSWORD", "")
SERVER_EMAIL  = os.environ.get("SERVER_EMAIL", SERVER_EMAIL)

HELPDESK_NOTIFY_ADMINS = os.environ.get("HELPDESK_NOTIFY_ADMINS", "1") == "1"

# --- Logging --------------------------------------------------------------
LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "handlers": {"console": {"class": "logging.StreamHandler"}},
    "root": {"handlers": ["console"], "level": "WARNING"},
    "loggers": {
        "helpdesk": {"handlers": ["console"], "level": "INFO", "propagate": False},
    },
}
