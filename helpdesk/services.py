"""
helpdesk/services.py
====================
Data and file-storage services used by the views.

Each method is a thin forward to the ORM or the storage API. Failures are
logged with the operation name and re-raised, except for the two reads
that feed the login page and the settings tab (get_profiles,
get_global_setting), which degrade to an empty result.

Public API
----------
    db.create_ticket(user, title, description, priority, attachment_ids)
    storage_service.upload_file(uploaded_file, uploaded_by=user)
    filter_articles(articles, "vpn")
"""

import logging
import mimetypes
from typing import Iterable, Optional

from django.db import DatabaseError, transaction
from django.urls import reverse

from . import conf
from .exceptions import AttachmentRejected
from .models import (
    Article,
    Attachment,
    GlobalSetting,
    Message,
    Profile,
    ThemePreference,
    Ticket,
    TicketStatus,
)
from .notifications import MESSAGE_SENT, TICKET_CREATED, USER_SIGNUP, notify

logger = logging.getLogger(__name__)


def _setting_value(value) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


# ---------------------------------------------------------------------------
# DATABASE
# ---------------------------------------------------------------------------

class DatabaseService:

    # ── Profiles ──────────────────────────────────────────────────────────

    def get_profiles(self) -> list:
        try:
            limit = conf.get("HELPDESK_PROFILE_LIST_LIMIT")
            return list(
                Profile.objects.select_related("user").order_by("display_name")[:limit]
            )
        except DatabaseError:
            logger.exception("DatabaseService :: get_profiles :: error")
            return []

    def create_profile(self, user, name: str) -> Profile:
        try:
            profile = Profile.objects.create(
                user=user,
                display_name=name.strip(),
                theme_pref=ThemePreference.SYSTEM,
                verified=False,
            )
        except DatabaseError:
            logger.exception("DatabaseService :: create_profile :: error")
            raise
        notify(USER_SIGNUP, {"name": profile.display_name})
        return profile

    def get_profile_by_user_id(self, user_id) -> Optional[Profile]:
        try:
            return Profile.objects.filter(user_id=user_id).first()
        except DatabaseError:
            logger.exception("DatabaseService :: get_profile_by_user_id :: error")
            raise

    def verify_user(self, profile_id) -> Profile:
        try:
            profile = Profile.objects.get(pk=profile_id)
            profile.verified = True
            profile.save(update_fields=["verified"])
            return profile
        except DatabaseError:
            logger.exception("DatabaseService :: verify_user :: error")
            raise

    def update_profile_theme(self, profile_id, theme: str) -> Profile:
        try:
            profile = Profile.objects.get(pk=profile_id)
            profile.theme_pref = theme
            profile.save(update_fields=["theme_pref"])
            return profile
        except DatabaseError:
            logger.exception("DatabaseService :: update_profile_theme :: error")
            raise

    # ── Tickets ───────────────────────────────────────────────────────────

    def get_tickets(self, user_id=None):
        try:
            tickets = Ticket.objects.select_related("owner__helpdesk_profile").order_by("-created_at", "-id")
            if user_id is not None:
                tickets = tickets.filter(owner_id=user_id)
            return list(tickets)
        except DatabaseError:
            logger.exception("DatabaseService :: get_tickets :: error")
            raise

    def create_ticket(self, user, title: str, description: str, priority: str,
                      attachment_ids: Iterable = ()) -> Ticket:
        try:
            with transaction.atomic():
                ticket = Ticket.objects.create(
                    owner=user,
                    title=title,
                    description=description,
                    priority=priority,
                    status=TicketStatus.OPEN,
                )
                if attachment_ids:
                    ticket.attachments.set(list(attachment_ids))
        except DatabaseError:
            logger.exception("DatabaseService :: create_ticket :: error")
            raise
        notify(TICKET_CREATED, {"title": title, "user_id": getattr(user, "pk", None)})
        return ticket

    def get_ticket(self, ticket_id: str) -> Ticket:
        """Raises Ticket.DoesNotExist when no ticket has that id."""
        try:
            return (
                Ticket.objects
                .select_related("owner__helpdesk_profile")
                .prefetch_related("attachments")
                .get(ticket_id=ticket_id)
            )
        except DatabaseError:
            logger.exception("DatabaseService :: get_ticket :: error")
            raise

    def update_ticket_status(self, ticket_id: str, status: str) -> Ticket:
        try:
            ticket = Ticket.objects.get(ticket_id=ticket_id)
            ticket.status = status
            ticket.save(update_fields=["status", "updated_at"])
            return ticket
        except DatabaseError:
            logger.exception("DatabaseService :: update_ticket_status :: error")
            raise

    # ── Messages ──────────────────────────────────────────────────────────

    def get_messages(self, ticket_id: str) -> list:
        try:
            return list(
                Message.objects
                .filter(ticket__ticket_id=ticket_id)
                .select_related("sender__helpdesk_profile")
                .prefetch_related("attachments")
                .order_by("created_at", "id")
            )
        except DatabaseError:
            logger.exception("DatabaseService :: get_messages :: error")
            raise

    def create_message(self, ticket_id: str, sender, content: str,
                       attachment_ids: Iterable = ()) -> Message:
        try:
            with transaction.atomic():
                ticket = Ticket.objects.get(ticket_id=ticket_id)
                message = Message.objects.create(ticket=ticket, sender=sender, content=content)
                if attachment_ids:
                    message.attachments.set(list(attachment_ids))
        except DatabaseError:
            logger.exception("DatabaseService :: create_message :: error")
            raise
        notify(MESSAGE_SENT, {"ticket_id": ticket_id, "sender_id": getattr(sender, "pk", None)})
        return message

    # ── Global settings ───────────────────────────────────────────────────

    def get_global_setting(self, key: str) -> Optional[GlobalSetting]:
        try:
            return GlobalSetting.objects.filter(key=key).first()
        except DatabaseError:
            logger.exception("DatabaseService :: get_global_setting :: error")
            return None

    def update_global_setting(self, key: str, value) -> GlobalSetting:
        try:
            setting, _ = GlobalSetting.objects.update_or_create(
                key=key, defaults={"value": _setting_value(value)},
            )
            return setting
        except DatabaseError:
            logger.exception("DatabaseService :: update_global_setting :: error")
            raise

    def is_setting_enabled(self, key: str, default: bool = True) -> bool:
        setting = self.get_global_setting(key)
        return setting.enabled if setting is not None else default

    # ── Knowledge base ────────────────────────────────────────────────────

    def get_articles(self, published_only: bool = True) -> list:
        try:
            articles = Article.objects.all()
            if published_only:
                articles = articles.filter(published=True)
            return list(articles)
        except DatabaseError:
            logger.exception("DatabaseService :: get_articles :: error")
            raise

    def get_article(self, article_id) -> Article:
        return Article.objects.get(pk=article_id)

    def create_article(self, title: str, content: str, category: str,
                       published: bool = True) -> Article:
        try:
            return Article.objects.create(
                title=title, content=content, category=category, published=published,
            )
        except DatabaseError:
            logger.exception("DatabaseService :: create_article :: error")
            raise

    def update_article(self, article_id, **fields) -> Article:
        try:
            article = Article.objects.get(pk=article_id)
            for name, value in fields.items():
                setattr(article, name, value)
            article.save()
            return article
        except DatabaseError:
            logger.exception("DatabaseService :: update_article :: error")
            raise

    def delete_article(self, article_id) -> None:
        try:
            Article.objects.filter(pk=article_id).delete()
        except DatabaseError:
            logger.exception("DatabaseService :: delete_article :: error")
            raise


# ---------------------------------------------------------------------------
# FILE STORAGE
# ---------------------------------------------------------------------------

class StorageService:

    def check_size(self, uploaded_file) -> None:
        max_bytes = conf.get("HELPDESK_ATTACHMENT_MAX_BYTES")
        if uploaded_file.size > max_bytes:
            raise AttachmentRejected(
                f"'{uploaded_file.name}' is larger than {max_bytes // (1024 * 1024)} MB."
            )

    def upload_file(self, uploaded_file, uploaded_by=None) -> Attachment:
        self.check_size(uploaded_file)
        content_type = (
            getattr(uploaded_file, "content_type", "")
            or mimetypes.guess_type(uploaded_file.name)[0]
            or "application/octet-stream"
        )
        try:
            return Attachment.objects.create(
                file=uploaded_file,
                name=uploaded_file.name,
                content_type=content_type,
                size=uploaded_file.size,
                uploaded_by=uploaded_by,
            )
        except (DatabaseError, OSError):
            logger.exception("StorageService :: upload_file :: error")
            raise

    def upload_files(self, uploaded_files, uploaded_by=None) -> list:
        """Upload each file in turn; returns the new attachment ids.

        Nothing is stored unless every file is within the size limit.
        """
        uploaded_files = list(uploaded_files)
        for uploaded_file in uploaded_files:
            self.check_size(uploaded_file)
        return [self.upload_file(f, uploaded_by=uploaded_by).pk for f in uploaded_files]

    def get_file_preview(self, file_id) -> str:
        return reverse("attachment_preview", args=[file_id])

    def get_file_view(self, file_id) -> str:
        return reverse("attachment_view", args=[file_id])


# ---------------------------------------------------------------------------
# KNOWLEDGE-BASE SEARCH
# ---------------------------------------------------------------------------

def filter_articles(articles, term: str) -> list:
    """Case-insensitive substring match on title, content or category."""
    needle = (term or "").lower()
    return [
        article for article in articles
        if needle in article.title.lower()
        or needle in article.content.lower()
        or needle in article.category.lower()
    ]


db = DatabaseService()
storage_service = StorageService()
