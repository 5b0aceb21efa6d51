"""
helpdesk/auth.py
================
Login conventions layered over django.contrib.auth.

Users never see an e-mail address or password. A user named "Jane Doe"
with PIN 1234 is stored as the account

    username/email = "janedoe@tickets.internal"
    password       = "1234_TKT"

and logs in by picking her profile and typing the PIN. Administrators use
a real e-mail address and password. Which kind of account is logged in is
decided from the e-mail suffix alone.

Password hashing, session creation and expiry are all Django's; this
module only derives the credentials and forwards them.
"""

import logging
import re
from dataclasses import dataclass
from typing import Optional

from django.contrib import auth
from django.contrib.auth import get_user_model
from django.db import DatabaseError, IntegrityError, transaction

from . import conf
from .exceptions import AuthenticationFailed, RegistrationFailed

logger = logging.getLogger(__name__)

_WHITESPACE = re.compile(r"\s+")

MODEL_BACKEND = "django.contrib.auth.backends.ModelBackend"


def internal_email(name: str) -> str:
    """Synthetic login address for a display name."""
    return _WHITESPACE.sub("", name).lower() + conf.internal_email_suffix()


def pad_pin(pin: str) -> str:
    """Stretch a short PIN into a password the account backend accepts."""
    return pin + conf.pin_padding()


def is_admin(user) -> bool:
    if user is None or not user.is_authenticated:
        return False
    return not (user.email or "").endswith(conf.internal_email_suffix())


@dataclass
class CurrentUser:
    id: int
    email: str
    name: str
    is_admin: bool


class AuthService:

    def login_admin(self, request, email: str, password: str):
        """Open a session for an administrator's real e-mail and password."""
        email = email.strip().lower()
        account = get_user_model().objects.filter(email__iexact=email).order_by("pk").first()
        username = account.get_username() if account is not None else email
        user = auth.authenticate(request, username=username, password=password)
        if user is None:
            logger.error("AuthService :: login_admin :: rejected %s", email)
            raise AuthenticationFailed("Invalid credentials. Please check the email and password.")
        auth.login(request, user)
        return user

    def login_user(self, request, name: str, pin: str, require_pin: bool = True):
        """
        Open a session for the account behind ``name``.
        With ``require_pin`` off the PIN is ignored and the account is
        looked up by its synthetic address.
        """
        email = internal_email(name)
        if require_pin:
            user = auth.authenticate(request, username=email, password=pad_pin(pin))
        else:
            user = (
                get_user_model().objects
                .filter(username=email, is_active=True)
                .first()
            )
            if user is not None:
                user.backend = MODEL_BACKEND
        if user is None:
            logger.error("AuthService :: login_user :: rejected %s", email)
            raise AuthenticationFailed("Invalid PIN or account not found.")
        auth.login(request, user, backend=getattr(user, "backend", MODEL_BACKEND))
        return user

    def register_user(self, name: str, pin: str):
        """Create the auth account for a new user. Returns the account."""
        if not name.strip():
            raise RegistrationFailed("Name is required.")
        email = internal_email(name)
        user_model = get_user_model()
        try:
            with transaction.atomic():
                if user_model.objects.filter(username=email).exists():
                    raise RegistrationFailed(f"An account for '{name.strip()}' already exists.")
                return user_model.objects.create_user(
                    username=email,
                    email=email,
                    password=pad_pin(pin),
                    first_name=name.strip()[:150],
                )
        except IntegrityError as exc:
            logger.error("AuthService :: register_user :: error %s", exc)
            raise RegistrationFailed(f"An account for '{name.strip()}' already exists.") from exc
        except DatabaseError:
            logger.exception("AuthService :: register_user :: error")
            raise

    def logout(self, request) -> None:
        # Django's logout is a no-op for anonymous sessions.
        auth.logout(request)

    def get_current_user(self, request) -> Optional[CurrentUser]:
        user = getattr(request, "user", None)
        if user is None or not user.is_authenticated:
            return None
        return CurrentUser(
            id=user.pk,
            email=user.email,
            name=user.get_full_name() or user.get_username(),
            is_admin=is_admin(user),
        )


auth_service = AuthService()
