"""
Email Notification Service Base.

Every backend receives the same Notification and reports a DeliveryResult.
Message composition (subject, text body, HTML body) lives here so the
backends only differ in transport.

Exports:
    EmailContent: Composed subject and bodies
    EmailNotificationService: Abstract base for email backends
"""

import html
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

from config import NotificationConfig
from config.defaults import NotificationDefaults, StorageDefaults
from core.models import DeliveryChannel, DeliveryResult, Notification


@dataclass(frozen=True)
class EmailContent:
    """Subject and alternative bodies of one email."""
    subject: str
    text_body: str
    html_body: str


class EmailNotificationService(ABC):
    """
    Abstract base for email notification backends.

    Subclasses set provider and may override subject, then implement
    send_notification(). Exactly one backend is active per process, chosen
    by create_notification_service().
    """

    provider: str = ""
    subject: str = NotificationDefaults.DEFAULT_SUBJECT

    def __init__(self, config: NotificationConfig, link_hours: int = StorageDefaults.SAS_EXPIRY_HOURS):
        self.config = config
        self.link_hours = link_hours

    @property
    def sender_address(self) -> str:
        return self.config.sender_email or ""

    @property
    def sender_display(self) -> str:
        return f"{self.config.sender_name} <{self.sender_address}>"

    def compose(self, notification: Notification) -> EmailContent:
        """Build the email for one ready download."""
        text_body = (
            f"Your file '{notification.file_name}' is ready for download at "
            f"{notification.download_url}.\n\n"
            f"The link is read-only and expires in {self.link_hours} hour(s)."
        )
        safe_name = html.escape(notification.file_name)
        safe_url = html.escape(notification.download_url, quote=True)
        html_body = (
            f"<p>Your file <strong>{safe_name}</strong> is ready for download.</p>"
            f"<p><a href=\"{safe_url}\">Download here</a></p>"
            f"<p>The link is read-only and expires in {self.link_hours} hour(s).</p>"
        )
        return EmailContent(subject=self.subject, text_body=text_body, html_body=html_body)

    def _result(self, success: bool, status_code: Optional[int], message: str) -> DeliveryResult:
        return DeliveryResult(
            channel=DeliveryChannel.EMAIL,
            provider=self.provider,
            success=success,
            status_code=status_code,
            message=message,
        )

    @abstractmethod
    async def send_notification(self, notification: Notification) -> DeliveryResult:
        """
        Send one notification.

        Returns:
            DeliveryResult; success is decided from the provider status

        Raises:
            TransportError: Provider could not be reached or authenticated
        """
        pass

    async def close(self) -> None:
        """Release provider clients."""
        pass
