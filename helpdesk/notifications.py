"""
helpdesk/notifications.py
=========================
Admin notifications for ticket, message and sign-up events.

Every event is logged. Known events additionally produce an e-mail to the
ADMINS list through Django's mail_admins() when HELPDESK_NOTIFY_ADMINS is on.
A mail transport failure is logged and never reaches the caller.
"""

import logging
import smtplib

from django.core.mail import BadHeaderError, mail_admins

from . import conf

logger = logging.getLogger(__name__)

TICKET_CREATED = "ticket_created"
MESSAGE_SENT   = "message_sent"
USER_SIGNUP    = "user_signup"


def admin_subject(event: str, data: dict):
    """Subject line of the admin e-mail for ``event``, or None if it has none."""
    if event == TICKET_CREATED:
        return f"New Ticket: {data.get('title', '')}"
    if event == MESSAGE_SENT:
        return f"New Message on Ticket {data.get('ticket_id', '')}"
    if event == USER_SIGNUP:
        return f"New User Registration: {data.get('name', '')}. Approval needed."
    return None


def notify(event: str, data: dict) -> None:
    logger.info("Notification triggered: event=%s data=%s", event, data)

    subject = admin_subject(event, data)
    if subject is None:
        return
    # Header values must stay on one line.
    subject = " ".join(subject.splitlines())

    logger.info("Email to Admin: Subject: %s", subject)
    if not conf.get("HELPDESK_NOTIFY_ADMINS"):
        return

    body = "\n".join(f"{key}: {value}" for key, value in data.items())
    try:
        mail_admins(subject, body)
    except (BadHeaderError, smtplib.SMTPException, OSError) as exc:
        logger.warning("Admin notification for %s could not be sent: %s", event, exc)
