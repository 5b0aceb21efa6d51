"""
helpdesk/context_processors.py
==============================
Exposes the signed-in user, admin/verified flags and the active theme to
every template.
"""

from .auth import auth_service
from .models import ThemePreference
from .services import db


def helpdesk(request):
    current_user = auth_service.get_current_user(request)
    profile = None
    if current_user is not None and not current_user.is_admin:
        profile = db.get_profile_by_user_id(current_user.id)

    theme = request.session.get("theme") if hasattr(request, "session") else None
    if not theme:
        theme = profile.theme_pref if profile is not None else ThemePreference.SYSTEM

    return {
        "current_user":    current_user,
        "current_profile": profile,
        "is_admin":        bool(current_user and current_user.is_admin),
        "is_verified":     bool(current_user and (current_user.is_admin or (profile and profile.verified))),
        "theme":           theme,
        "theme_choices":   ThemePreference.choices,
    }
