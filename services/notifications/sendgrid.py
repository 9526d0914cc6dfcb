"""
SendGrid Email Notification Service.

Posts to the SendGrid v3 mail/send API with a bearer API key. SendGrid
answers 202 Accepted on success; any 2xx is treated as delivered.
"""

from typing import Optional

import httpx

from config import NotificationConfig
from config.defaults import NotificationDefaults, StorageDefaults
from core.models import DeliveryResult, Notification
from exceptions import TransportError
from util_logger import LoggerFactory, ComponentType

from .base import EmailNotificationService

logger = LoggerFactory.create_logger(ComponentType.ADAPTER, "SendGridEmailNotificationService")


class SendGridEmailNotificationService(EmailNotificationService):
    """SendGrid HTTP API backend."""

    provider = "sendgrid"
    subject = NotificationDefaults.SENDGRID_SUBJECT

    def __init__(
        self,
        config: NotificationConfig,
        link_hours: int = StorageDefaults.SAS_EXPIRY_HOURS,
        http_client: Optional[httpx.AsyncClient] = None
    ):
        super().__init__(config, link_hours)
        self._client = http_client
        self._owns_client = http_client is None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create async HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(timeout=httpx.Timeout(self.config.http_timeout_seconds))
            self._owns_client = True
        return self._client

    async def send_notification(self, notification: Notification) -> DeliveryResult:
        content = self.compose(notification)
        payload = {
            "personalizations": [{"to": [{"email": addr} for addr in notification.recipients]}],
            "from": {"email": self.sender_address, "name": self.config.sender_name},
            "subject": content.subject,
            "content": [
                {"type": "text/plain", "value": content.text_body},
                {"type": "text/html", "value": content.html_body},
            ],
        }

        client = await self._get_client()
        try:
            response = await client.post(
                self.config.sendgrid_api_url,
                headers={
                    "Authorization": f"Bearer {self.config.sendgrid_api_key}",
                    "Content-Type": "application/json",
                },
                json=payload,
            )
        except httpx.RequestError as e:
            logger.error(f"SendGrid request error for {notification.file_name}: {e}")
            raise TransportError(f"SendGrid request error: {e}", provider=self.provider) from e

        if response.is_success:
            logger.info(
                f"✅ Email notification sent to {len(notification.recipients)} recipient(s) "
                f"for {notification.file_name} via SendGrid (status {response.status_code})"
            )
            return self._result(True, response.status_code, "Email accepted")

        logger.error(
            f"SendGrid rejected notification for {notification.file_name}: "
            f"{response.status_code} {response.text[:200]}"
        )
        return self._result(False, response.status_code, f"SendGrid returned {response.status_code}")

    async def close(self) -> None:
        if self._owns_client and self._client and not self._client.is_closed:
            await self._client.aclose()
