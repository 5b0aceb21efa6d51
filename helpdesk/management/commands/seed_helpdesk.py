"""
helpdesk/management/commands/seed_helpdesk.py
=============================================
Seeds the database with an admin account, a few users, sample tickets with
replies, and knowledge-base articles.

Usage:
    python manage.py seed_helpdesk
    python manage.py seed_helpdesk --reset     # wipe help desk data first
"""

from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand

from helpdesk.auth import auth_service, internal_email
from helpdesk.models import Article, GlobalSetting, Message, Profile, Ticket
from helpdesk.services import db


ADMIN_EMAIL    = "admin@helpdesk.local"
ADMIN_PASSWORD = "HelpDesk2024!"

# (display name, PIN, verified)
FAKE_USERS = [
    ("Maria Gonzalez", "1234", True),
    ("James Carter",   "2468", True),
    ("Priya Patel",    "1357", True),
    ("Tom Becker",     "9999", False),
]

SAMPLE_TICKETS = [
    {
        "user": "Maria Gonzalez",
        "title": "Cannot connect to VPN from home",
        "description": "The VPN client says 'authentication failed' since this morning. "
                       "I have already restarted my laptop.",
        "priority": "high", "status": "open",
        "replies": [
            ("admin", "Can you confirm which VPN client version you have installed?"),
            ("Maria Gonzalez", "Version 5.2. It worked fine yesterday."),
        ],
    },
    {
        "user": "James Carter",
        "title": "Printer on 2nd floor jams constantly",
        "description": "Every third page jams. Tray 2 seems to be the problem.",
        "priority": "medium", "status": "in_progress",
        "replies": [("admin", "A technician is scheduled for this afternoon.")],
    },
    {
        "user": "Priya Patel",
        "title": "Request access to the shared finance drive",
        "description": "I joined the finance team this week and need read access.",
        "priority": "low", "status": "pending",
        "replies": [],
    },
    {
        "user": "Maria Gonzalez",
        "title": "Outlook keeps asking for my password",
        "description": "Resolved after the password reset, keeping this for reference.",
        "priority": "low", "status": "resolved",
        "replies": [("admin", "Cleared the cached credentials. Let us know if it returns.")],
    },
]

SAMPLE_ARTICLES = [
    ("Resetting your PIN", "Accounts",
     "Ask an administrator to reset your PIN. You will be asked to confirm your name."),
    ("Connecting to the VPN", "Technical",
     "Install the VPN client, sign in with your work account and pick the nearest gateway."),
    ("How tickets are prioritised", "General",
     "High priority tickets are answered within the hour during business hours."),
]


class Command(BaseCommand):
    help = "Seed the database with an admin, sample users, tickets and articles."

    def add_arguments(self, parser):
        parser.add_argument(
            "--reset",
            action="store_true",
            help="Delete all existing help desk records and seeded accounts first.",
        )

    def handle(self, *args, **options):
        user_model = get_user_model()

        if options["reset"]:
            Message.objects.all().delete()
            Ticket.objects.all().delete()
            Profile.objects.all().delete()
            Article.objects.all().delete()
            GlobalSetting.objects.all().delete()
            user_model.objects.filter(
                username__in=[internal_email(name) for name, _, _ in FAKE_USERS] + [ADMIN_EMAIL]
            ).delete()
            self.stdout.write(self.style.WARNING("Cleared existing help desk data."))

        # ── Admin account ────────────────────────────────────────────────
        admin, created = user_model.objects.get_or_create(
            username=ADMIN_EMAIL,
            defaults={"email": ADMIN_EMAIL, "is_staff": True, "is_superuser": True,
                      "first_name": "Help Desk Admin"},
        )
        if created:
            admin.set_password(ADMIN_PASSWORD)
            admin.save()

        # ── Users + profiles ─────────────────────────────────────────────
        created_users = 0
        user_map = {"admin": admin}

        for name, pin, verified in FAKE_USERS:
            user = user_model.objects.filter(username=internal_email(name)).first()
            if user is None:
                user = auth_service.register_user(name, pin)
                created_users += 1
            profile = db.get_profile_by_user_id(user.pk) or db.create_profile(user, name)
            if verified and not profile.verified:
                db.verify_user(profile.pk)
            user_map[name] = user

        self.stdout.write(self.style.SUCCESS(
            f"  Users:     {created_users} created, {len(FAKE_USERS) - created_users} already existed."
        ))

        # ── Tickets + replies ────────────────────────────────────────────
        created_tix = 0
        for t in SAMPLE_TICKETS:
            owner = user_map[t["user"]]
            if Ticket.objects.filter(owner=owner, title=t["title"]).exists():
                continue
            ticket = db.create_ticket(owner, t["title"], t["description"], t["priority"])
            for sender, content in t["replies"]:
                db.create_message(ticket.ticket_id, user_map[sender], content)
            if t["status"] != ticket.status:
                db.update_ticket_status(ticket.ticket_id, t["status"])
            created_tix += 1

        self.stdout.write(self.style.SUCCESS(f"  Tickets:   {created_tix} created."))

        # ── Knowledge base ───────────────────────────────────────────────
        created_articles = 0
        for title, category, content in SAMPLE_ARTICLES:
            if not Article.objects.filter(title=title).exists():
                db.create_article(title, content, category)
                created_articles += 1

        self.stdout.write(self.style.SUCCESS(f"  Articles:  {created_articles} created."))
        self.stdout.write("")
        self.stdout.write(self.style.SUCCESS("── Seed complete. Test credentials ──"))
        self.stdout.write(f"  Admin:   {ADMIN_EMAIL} / {ADMIN_PASSWORD}")
        for name, pin, verified in FAKE_USERS:
            state = "" if verified else "  (pending approval)"
            self.stdout.write(f"  User:    {name} / PIN {pin}{state}")
