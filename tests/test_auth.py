"""
Tests for helpdesk.auth: synthetic e-mail / padded PIN conventions and the
session operations forwarded to django.contrib.auth.
"""

from django.contrib.auth import get_user_model
from django.test import RequestFactory, TestCase, override_settings
from django.contrib.sessions.middleware import SessionMiddleware
from django.contrib.auth.models import AnonymousUser

from helpdesk.auth import auth_service, internal_email, is_admin, pad_pin
from helpdesk.exceptions import AuthenticationFailed, RegistrationFailed

from .helpers import ADMIN_PASSWORD, make_admin


def _request_with_session():
    request = RequestFactory().post("/login/")
    SessionMiddleware(lambda r: None).process_request(request)
    request.session.save()
    request.user = AnonymousUser()
    return request


class CredentialConventionTests(TestCase):

    def test_internal_email_strips_whitespace_and_lowercases(self):
        self.assertEqual(internal_email("Jane Doe"), "janedoe@tickets.internal")
        self.assertEqual(internal_email("  Mary \t Ann  Lee "), "maryannlee@tickets.internal")

    def test_pad_pin_appends_fixed_suffix(self):
        self.assertEqual(pad_pin("1234"), "1234_TKT")
        self.assertGreaterEqual(len(pad_pin("0000")), 8)

    @override_settings(HELPDESK_INTERNAL_EMAIL_SUFFIX="@desk.test", HELPDESK_PIN_PADDING="-pad")
    def test_conventions_follow_settings(self):
        self.assertEqual(internal_email("Bob"), "bob@desk.test")
        self.assertEqual(pad_pin("4321"), "4321-pad")


class RegisterUserTests(TestCase):

    def test_register_creates_account_with_synthetic_credentials(self):
        user = auth_service.register_user("Jane Doe", "1234")

        self.assertEqual(user.username, "janedoe@tickets.internal")
        self.assertEqual(user.email, "janedoe@tickets.internal")
        self.assertEqual(user.first_name, "Jane Doe")
        self.assertTrue(user.check_password("1234_TKT"))
        self.assertFalse(user.check_password("1234"))

    def test_duplicate_name_is_rejected(self):
        auth_service.register_user("Jane Doe", "1234")
        with self.assertRaises(RegistrationFailed):
            auth_service.register_user("jane  doe", "9999")
        self.assertEqual(get_user_model().objects.count(), 1)

    def test_blank_name_is_rejected(self):
        with self.assertRaises(RegistrationFailed):
            auth_service.register_user("   ", "1234")


class LoginTests(TestCase):

    def setUp(self):
        self.user = auth_service.register_user("Jane Doe", "1234")

    def test_login_user_with_correct_pin(self):
        request = _request_with_session()
        user = auth_service.login_user(request, "Jane Doe", "1234")
        self.assertEqual(user.pk, self.user.pk)
        self.assertEqual(int(request.session["_auth_user_id"]), self.user.pk)

    def test_login_user_with_wrong_pin_fails(self):
        with self.assertRaises(AuthenticationFailed):
            auth_service.login_user(_request_with_session(), "Jane Doe", "0000")

    def test_login_user_without_pin_when_not_required(self):
        request = _request_with_session()
        user = auth_service.login_user(request, "Jane Doe", "", require_pin=False)
        self.assertEqual(user.pk, self.user.pk)

    def test_login_user_without_pin_still_needs_an_account(self):
        with self.assertRaises(AuthenticationFailed):
            auth_service.login_user(_request_with_session(), "Nobody", "", require_pin=False)

    def test_login_admin_uses_real_email_case_insensitively(self):
        admin = make_admin()
        request = _request_with_session()
        user = auth_service.login_admin(request, "  ADMIN@example.com ", ADMIN_PASSWORD)
        self.assertEqual(user.pk, admin.pk)

    def test_login_admin_when_username_differs_from_email(self):
        boss = get_user_model().objects.create_superuser("boss", "Boss@example.com", "bosspass123")
        user = auth_service.login_admin(_request_with_session(), "boss@example.com", "bosspass123")
        self.assertEqual(user.pk, boss.pk)

    def test_login_admin_with_bad_password_fails(self):
        make_admin()
        with self.assertRaises(AuthenticationFailed):
            auth_service.login_admin(_request_with_session(), "admin@example.com", "nope")


class CurrentUserTests(TestCase):

    def test_anonymous_has_no_current_user(self):
        request = _request_with_session()
        self.assertIsNone(auth_service.get_current_user(request))
        self.assertFalse(is_admin(request.user))

    def test_admin_flag_comes_from_email_suffix(self):
        request = _request_with_session()
        request.user = auth_service.register_user("Jane Doe", "1234")
        current = auth_service.get_current_user(request)
        self.assertFalse(current.is_admin)
        self.assertEqual(current.name, "Jane Doe")

        request.user = make_admin()
        self.assertTrue(auth_service.get_current_user(request).is_admin)

    def test_logout_when_already_logged_out_is_fine(self):
        response = self.client.post("/logout/")
        self.assertRedirects(response, "/login/", fetch_redirect_response=False)
