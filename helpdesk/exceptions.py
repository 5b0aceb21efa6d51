"""
helpdesk/exceptions.py
======================
Errors raised by the service layer and shown to the user by the views.
"""


class HelpdeskError(Exception):
    """Base class; str(exc) is safe to show in a flash message."""


class AuthenticationFailed(HelpdeskError):
    pass


class RegistrationFailed(HelpdeskError):
    pass


class AttachmentRejected(HelpdeskError):
    pass
