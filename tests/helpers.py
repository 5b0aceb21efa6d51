"""Shared builders for help desk tests."""

from django.contrib.auth import get_user_model
from django.core.files.uploadedfile import SimpleUploadedFile

from helpdesk.auth import auth_service
from helpdesk.models import Profile

ADMIN_EMAIL = "admin@example.com"
ADMIN_PASSWORD = "adminpass123"

PNG_BYTES = (
    b"\x89PNG\r\n\x1a\n\x00\x00\x00\rIHDR\x00\x00\x00\x01\x00\x00\x00\x01"
    b"\x08\x06\x00\x00\x00\x1f\x15\xc4\x89\x00\x00\x00\rIDATx\x9cc\xf8\x0f"
    b"\x00\x00\x01\x01\x00\x05\x18\xd8N\x00\x00\x00\x00IEND\xaeB`\x82"
)


def make_user(name="Jane Doe", pin="1234", verified=True):
    user = auth_service.register_user(name, pin)
    Profile.objects.create(user=user, display_name=name, verified=verified)
    return user


def make_admin(email=ADMIN_EMAIL, password=ADMIN_PASSWORD):
    return get_user_model().objects.create_user(
        username=email, email=email, password=password, is_staff=True,
    )


def image_upload(name="screenshot.png"):
    return SimpleUploadedFile(name, PNG_BYTES, content_type="image/png")


def text_upload(name="log.txt", content=b"error at line 3"):
    return SimpleUploadedFile(name, content, content_type="text/plain")
