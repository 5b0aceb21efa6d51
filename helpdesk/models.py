"""
helpdesk/models.py
==================
Database models:
  Profile        — display name, theme and approval flag for a user account
  Attachment     — a file uploaded to a ticket or message
  Ticket         — a support request filed by a user
  Message        — one entry in a ticket's conversation thread
  GlobalSetting  — admin-editable key/value switch (e.g. require_pin)
  Article        — knowledge-base article
"""

import mimetypes
import uuid

from django.conf import settings
from django.db import models


# ---------------------------------------------------------------------------
# PROFILE MODEL
# ---------------------------------------------------------------------------

class ThemePreference(models.TextChoices):
    LIGHT  = "light",  "Light"
    DARK   = "dark",   "Dark"
    SYSTEM = "system", "System"


class Profile(models.Model):
    """
    Public face of a user account: the name shown on the login picker and
    whether an administrator has approved it. Admin-created local profiles
    have no linked account until one is registered for them.
    """
    user         = models.OneToOneField(
        settings.AUTH_USER_MODEL, null=True, blank=True,
        on_delete=models.SET_NULL,
        related_name="helpdesk_profile",
    )
    display_name = models.CharField("Display Name", max_length=120)
    theme_pref   = models.CharField("Theme", max_length=10,
                                    choices=ThemePreference.choices,
                                    default=ThemePreference.SYSTEM)
    verified     = models.BooleanField("Verified", default=False)
    created_at   = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["display_name"]
        verbose_name = "Profile"
        verbose_name_plural = "Profiles"

    def __str__(self):
        return self.display_name

    @property
    def initial(self) -> str:
        return self.display_name[:1].upper()


# ---------------------------------------------------------------------------
# ATTACHMENT MODEL
# ---------------------------------------------------------------------------

class Attachment(models.Model):
    id           = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    file         = models.FileField(upload_to="attachments/%Y/%m/")
    name         = models.CharField("Original Name", max_length=255)
    content_type = models.CharField(max_length=120, blank=True)
    size         = models.PositiveBigIntegerField(default=0)
    uploaded_by  = models.ForeignKey(
        settings.AUTH_USER_MODEL, null=True, blank=True,
        on_delete=models.SET_NULL,
        related_name="helpdesk_attachments",
    )
    created_at   = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["created_at"]

    def __str__(self):
        return self.name

    @property
    def is_image(self) -> bool:
        content_type = self.content_type or mimetypes.guess_type(self.name)[0] or ""
        return content_type.startswith("image/")

    @property
    def view_url(self) -> str:
        from .services import storage_service
        return storage_service.get_file_view(self.pk)

    @property
    def preview_url(self) -> str:
        from .services import storage_service
        return storage_service.get_file_preview(self.pk)


# ---------------------------------------------------------------------------
# TICKET MODEL
# ---------------------------------------------------------------------------

class TicketStatus(models.TextChoices):
    OPEN        = "open",        "Open"
    IN_PROGRESS = "in_progress", "In Progress"
    PENDING     = "pending",     "Pending"
    RESOLVED    = "resolved",    "Resolved"
    CLOSED      = "closed",      "Closed"


class TicketPriority(models.TextChoices):
    LOW    = "low",    "Low"
    MEDIUM = "medium", "Medium"
    HIGH   = "high",   "High"


class Ticket(models.Model):
    """
    A single support request. Status is free to move between any two
    values; nothing here enforces a workflow.
    """

    # Auto-generated identifier
    ticket_id   = models.CharField(max_length=20, unique=True, editable=False)

    owner       = models.ForeignKey(
        settings.AUTH_USER_MODEL, null=True, blank=True,
        on_delete=models.SET_NULL,
        related_name="helpdesk_tickets",
        verbose_name="Filed By",
    )
    title       = models.CharField("Title", max_length=200)
    description = models.TextField("Description")
    priority    = models.CharField(max_length=10, choices=TicketPriority.choices,
                                   default=TicketPriority.MEDIUM)
    status      = models.CharField(max_length=20, choices=TicketStatus.choices,
                                   default=TicketStatus.OPEN)
    attachments = models.ManyToManyField(Attachment, blank=True, related_name="tickets")

    created_at  = models.DateTimeField(auto_now_add=True)
    updated_at  = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at", "-id"]
        verbose_name = "Ticket"
        verbose_name_plural = "Tickets"

    def __str__(self):
        return f"{self.ticket_id} — {self.title}"

    def save(self, *args, **kwargs):
        if not self.ticket_id:
            from django.db.models import Max
            result = Ticket.objects.aggregate(max_id=Max("id"))
            next_num = (result["max_id"] or 0) + 1
            self.ticket_id = f"TKT-{next_num:04d}"
        super().save(*args, **kwargs)

    # ── Template convenience properties ──────────────────────────────────

    @property
    def owner_name(self) -> str:
        if self.owner is None:
            return "Unknown"
        profile = getattr(self.owner, "helpdesk_profile", None)
        if profile is not None:
            return profile.display_name
        return self.owner.get_full_name() or self.owner.email

    @property
    def priority_badge_class(self) -> str:
        return {"high": "bp-high", "medium": "bp-medium", "low": "bp-low"}.get(
            self.priority, "bp-low"
        )

    @property
    def status_badge_class(self) -> str:
        return {
            "open":        "bs-open",
            "in_progress": "bs-prog",
            "pending":     "bs-pend",
            "resolved":    "bs-res",
            "closed":      "bs-clos",
        }.get(self.status, "")

    @property
    def can_resolve(self) -> bool:
        return self.status not in (TicketStatus.RESOLVED, TicketStatus.CLOSED)

    @property
    def can_close(self) -> bool:
        return self.status != TicketStatus.CLOSED


# ---------------------------------------------------------------------------
# MESSAGE MODEL
# ---------------------------------------------------------------------------

class Message(models.Model):
    ticket      = models.ForeignKey(Ticket, on_delete=models.CASCADE, related_name="messages")
    sender      = models.ForeignKey(
        settings.AUTH_USER_MODEL, null=True, blank=True,
        on_delete=models.SET_NULL,
        related_name="helpdesk_messages",
    )
    content     = models.TextField(blank=True)
    attachments = models.ManyToManyField(Attachment, blank=True, related_name="messages")
    created_at  = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["created_at", "id"]

    def __str__(self):
        return f"{self.ticket.ticket_id} @ {self.created_at:%Y-%m-%d %H:%M}"


# ---------------------------------------------------------------------------
# GLOBAL SETTINGS
# ---------------------------------------------------------------------------

class GlobalSetting(models.Model):
    key   = models.CharField(max_length=64, unique=True)
    value = models.CharField(max_length=255, blank=True)

    class Meta:
        ordering = ["key"]

    def __str__(self):
        return f"{self.key}={self.value}"

    @property
    def enabled(self) -> bool:
        return self.value.strip().lower() == "true"


# ---------------------------------------------------------------------------
# KNOWLEDGE BASE
# ---------------------------------------------------------------------------

class Article(models.Model):
    title      = models.CharField(max_length=200)
    category   = models.CharField(max_length=80)
    content    = models.TextField()
    published  = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-updated_at", "-id"]

    def __str__(self):
        return self.title
