"""
helpdesk/conf.py
================
Application constants, each overridable from Django settings.

Read them through the helpers below rather than at import time so that
override_settings() in tests takes effect.
"""

from django.conf import settings

DEFAULTS = {
    "HELPDESK_INTERNAL_EMAIL_SUFFIX": "@tickets.internal",
    "HELPDESK_PIN_PADDING":           "_TKT",
    "HELPDESK_PIN_LENGTH":            4,
    "HELPDESK_PROFILE_LIST_LIMIT":    100,
    "HELPDESK_NOTIFY_ADMINS":         True,
    "HELPDESK_ATTACHMENT_MAX_BYTES":  10 * 1024 * 1024,
}

# Key of the global setting that controls PIN checks on user login.
REQUIRE_PIN_KEY = "require_pin"


def get(name: str):
    return getattr(settings, name, DEFAULTS[name])


def internal_email_suffix() -> str:
    return get("HELPDESK_INTERNAL_EMAIL_SUFFIX")


def pin_padding() -> str:
    return get("HELPDESK_PIN_PADDING")


def pin_length() -> int:
    return get("HELPDESK_PIN_LENGTH")
