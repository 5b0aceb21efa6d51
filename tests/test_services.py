"""
Tests for helpdesk.services: the record and file operations behind every
screen.
"""

from unittest.mock import patch

from django.core import mail
from django.db import DatabaseError
from django.test import TestCase, override_settings

from helpdesk.auth import auth_service
from helpdesk.exceptions import AttachmentRejected
from helpdesk.models import Article, Attachment, GlobalSetting, Profile, Ticket, TicketStatus
from helpdesk.services import db, filter_articles, storage_service

from .helpers import image_upload, make_user, text_upload


class ProfileServiceTests(TestCase):

    def test_get_profiles_orders_by_display_name(self):
        for name in ("Zoe", "adam", "Mike"):
            Profile.objects.create(display_name=name)
        names = [p.display_name for p in db.get_profiles()]
        self.assertEqual(names, sorted(names))
        self.assertEqual(len(names), 3)

    @override_settings(HELPDESK_PROFILE_LIST_LIMIT=2)
    def test_get_profiles_is_limited(self):
        for name in ("A", "B", "C"):
            Profile.objects.create(display_name=name)
        self.assertEqual([p.display_name for p in db.get_profiles()], ["A", "B"])

    def test_get_profiles_degrades_to_empty_list(self):
        with patch("helpdesk.services.Profile") as profile_model:
            profile_model.objects.select_related.side_effect = DatabaseError("down")
            self.assertEqual(db.get_profiles(), [])

    def test_create_profile_is_unverified_and_notifies(self):
        user = auth_service.register_user("Jane Doe", "1234")

        profile = db.create_profile(user, "Jane Doe")

        self.assertFalse(profile.verified)
        self.assertEqual(profile.theme_pref, "system")
        self.assertEqual(db.get_profile_by_user_id(user.pk), profile)
        self.assertTrue(any("New User Registration: Jane Doe" in m.subject for m in mail.outbox))

    def test_local_profile_without_account(self):
        profile = db.create_profile(None, "Walk In")
        self.assertIsNone(profile.user)

    def test_verify_and_theme_updates(self):
        profile = db.create_profile(None, "Sam")
        db.verify_user(profile.pk)
        db.update_profile_theme(profile.pk, "dark")
        profile.refresh_from_db()
        self.assertTrue(profile.verified)
        self.assertEqual(profile.theme_pref, "dark")

    def test_get_profile_by_user_id_missing(self):
        self.assertIsNone(db.get_profile_by_user_id(12345))


class TicketServiceTests(TestCase):

    def setUp(self):
        self.jane = make_user("Jane Doe")
        self.bob = make_user("Bob Ray", "5555")

    def test_create_ticket_defaults_to_open_and_notifies(self):
        ticket = db.create_ticket(self.jane, "VPN down", "Cannot connect", "high")

        self.assertEqual(ticket.status, TicketStatus.OPEN)
        self.assertEqual(ticket.owner, self.jane)
        self.assertTrue(ticket.ticket_id.startswith("TKT-"))
        self.assertIn("[Django] New Ticket: VPN down", [m.subject for m in mail.outbox])

    def test_create_ticket_links_attachments(self):
        attachment = storage_service.upload_file(text_upload(), uploaded_by=self.jane)
        ticket = db.create_ticket(self.jane, "Logs", "See attached", "low", [attachment.pk])
        self.assertEqual(list(ticket.attachments.all()), [attachment])

    def test_get_tickets_filters_by_owner_newest_first(self):
        first = db.create_ticket(self.jane, "First", "x", "low")
        second = db.create_ticket(self.jane, "Second", "x", "low")
        db.create_ticket(self.bob, "Bob's", "x", "low")

        mine = db.get_tickets(self.jane.pk)
        self.assertEqual([t.pk for t in mine], [second.pk, first.pk])
        self.assertEqual(len(db.get_tickets()), 3)

    def test_ticket_ids_are_sequential(self):
        a = db.create_ticket(self.jane, "A", "x", "low")
        b = db.create_ticket(self.jane, "B", "x", "low")
        self.assertEqual(int(b.ticket_id.split("-")[1]), int(a.ticket_id.split("-")[1]) + 1)

    def test_get_ticket_missing_raises(self):
        with self.assertRaises(Ticket.DoesNotExist):
            db.get_ticket("TKT-9999")

    def test_any_status_can_follow_any_other(self):
        ticket = db.create_ticket(self.jane, "A", "x", "low")
        for status in ("closed", "open", "resolved", "pending", "in_progress", "open"):
            db.update_ticket_status(ticket.ticket_id, status)
            ticket.refresh_from_db()
            self.assertEqual(ticket.status, status)

    def test_create_ticket_failure_is_reraised(self):
        with patch("helpdesk.services.Ticket.objects.create", side_effect=DatabaseError("down")):
            with self.assertRaises(DatabaseError):
                db.create_ticket(self.jane, "A", "x", "low")


class MessageServiceTests(TestCase):

    def setUp(self):
        self.jane = make_user("Jane Doe")
        self.ticket = db.create_ticket(self.jane, "Printer", "Jams", "medium")
        mail.outbox.clear()

    def test_messages_are_returned_oldest_first(self):
        one = db.create_message(self.ticket.ticket_id, self.jane, "one")
        two = db.create_message(self.ticket.ticket_id, self.jane, "two")
        self.assertEqual([m.pk for m in db.get_messages(self.ticket.ticket_id)], [one.pk, two.pk])

    def test_create_message_notifies_admins(self):
        db.create_message(self.ticket.ticket_id, self.jane, "hello")
        self.assertEqual(len(mail.outbox), 1)
        self.assertIn(f"New Message on Ticket {self.ticket.ticket_id}", mail.outbox[0].subject)

    def test_message_attachments(self):
        attachment = storage_service.upload_file(image_upload(), uploaded_by=self.jane)
        message = db.create_message(self.ticket.ticket_id, self.jane, "", [attachment.pk])
        self.assertEqual(list(message.attachments.all()), [attachment])


class GlobalSettingServiceTests(TestCase):

    def test_missing_setting_is_none(self):
        self.assertIsNone(db.get_global_setting("require_pin"))
        self.assertTrue(db.is_setting_enabled("require_pin", default=True))

    def test_update_creates_then_updates_with_string_values(self):
        db.update_global_setting("require_pin", False)
        self.assertEqual(db.get_global_setting("require_pin").value, "false")
        self.assertFalse(db.is_setting_enabled("require_pin"))

        db.update_global_setting("require_pin", True)
        self.assertEqual(GlobalSetting.objects.filter(key="require_pin").count(), 1)
        self.assertEqual(db.get_global_setting("require_pin").value, "true")

    def test_get_global_setting_degrades_to_none(self):
        with patch("helpdesk.services.GlobalSetting") as setting_model:
            setting_model.objects.filter.side_effect = DatabaseError("down")
            self.assertIsNone(db.get_global_setting("require_pin"))


class ArticleServiceTests(TestCase):

    def test_crud(self):
        article = db.create_article("Reset PIN", "Ask an admin.", "Accounts")
        db.update_article(article.pk, title="Resetting your PIN", published=False)
        article.refresh_from_db()
        self.assertEqual(article.title, "Resetting your PIN")

        self.assertEqual(db.get_articles(published_only=True), [])
        self.assertEqual(db.get_articles(published_only=False), [article])

        db.delete_article(article.pk)
        self.assertFalse(Article.objects.exists())

    def test_filter_articles_matches_title_content_or_category(self):
        vpn = db.create_article("Connecting to the VPN", "Install the client.", "Technical")
        billing = db.create_article("Invoices", "Where to find invoices.", "Billing")
        printer = db.create_article("Printers", "Tray 2 jams? Use the vpn-free queue.", "Hardware")
        articles = db.get_articles()

        self.assertEqual({a.pk for a in filter_articles(articles, "vpn")}, {vpn.pk, printer.pk})
        self.assertEqual(filter_articles(articles, "BILLING"), [billing])
        self.assertEqual(filter_articles(articles, "nothing-like-this"), [])
        self.assertEqual(len(filter_articles(articles, "")), 3)


class StorageServiceTests(TestCase):

    def test_upload_records_metadata(self):
        attachment = storage_service.upload_file(image_upload("shot.png"))
        self.assertEqual(attachment.name, "shot.png")
        self.assertEqual(attachment.content_type, "image/png")
        self.assertTrue(attachment.is_image)
        self.assertGreater(attachment.size, 0)
        self.assertTrue(attachment.file.name.startswith("attachments/"))

    @override_settings(HELPDESK_ATTACHMENT_MAX_BYTES=4)
    def test_oversized_upload_is_rejected(self):
        with self.assertRaises(AttachmentRejected):
            storage_service.upload_file(text_upload(content=b"too large"))
        self.assertFalse(Attachment.objects.exists())

    def test_view_and_preview_urls(self):
        attachment = storage_service.upload_file(text_upload())
        self.assertEqual(storage_service.get_file_view(attachment.pk), f"/attachments/{attachment.pk}/")
        self.assertEqual(
            storage_service.get_file_preview(attachment.pk), f"/attachments/{attachment.pk}/preview/",
        )

    def test_attachment_urls_come_from_storage_service(self):
        attachment = storage_service.upload_file(image_upload())
        self.assertEqual(attachment.view_url, storage_service.get_file_view(attachment.pk))
        self.assertEqual(attachment.preview_url, storage_service.get_file_preview(attachment.pk))

    @override_settings(HELPDESK_ATTACHMENT_MAX_BYTES=10)
    def test_upload_files_stores_nothing_when_one_is_too_large(self):
        small = text_upload("small.txt", b"ok")
        large = text_upload("large.txt", b"much too large")
        with self.assertRaises(AttachmentRejected):
            storage_service.upload_files([small, large])
        self.assertFalse(Attachment.objects.exists())
