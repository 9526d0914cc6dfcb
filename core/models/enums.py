"""
Pure Enumeration Types.

No business logic - pure type definitions only.

Exports:
    DeliveryChannel: Downstream consumer of a download link
    NotificationBackend: Selectable email providers
"""

from enum import Enum


class DeliveryChannel(str, Enum):
    """Where a download link was delivered."""

    EMAIL = "email"
    UI = "ui"


class NotificationBackend(str, Enum):
    """
    Email providers selectable through NOTIFICATION_BACKEND.

    Exactly one is active per process.
    """

    SMTP = "smtp"
    SENDGRID = "sendgrid"
    SES = "ses"
