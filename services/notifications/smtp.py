"""
SMTP Email Notification Service (OAuth2).

Sends through an SMTP submission server (Office 365 by default) with
STARTTLS and SASL XOAUTH2. The bearer token comes from an Entra ID app
registration via client credentials (scope
https://outlook.office365.com/.default); basic auth is not supported.

smtplib is blocking, so the session runs in the default executor.
"""

import asyncio
import smtplib
import ssl
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import List, Optional

from azure.core.exceptions import AzureError
from azure.identity.aio import ClientSecretCredential

from config import NotificationConfig
from config.defaults import StorageDefaults
from core.models import DeliveryResult, Notification
from exceptions import TransportError
from util_logger import LoggerFactory, ComponentType

from .base import EmailContent, EmailNotificationService

logger = LoggerFactory.create_logger(ComponentType.ADAPTER, "SmtpEmailNotificationService")

SMTP_OK = 250


class SmtpEmailNotificationService(EmailNotificationService):
    """SMTP + OAuth2 client-credentials backend."""

    provider = "smtp"

    def __init__(
        self,
        config: NotificationConfig,
        link_hours: int = StorageDefaults.SAS_EXPIRY_HOURS,
        credential: Optional[ClientSecretCredential] = None
    ):
        super().__init__(config, link_hours)
        self.credential = credential or ClientSecretCredential(
            tenant_id=config.smtp_tenant_id,
            client_id=config.smtp_client_id,
            client_secret=config.smtp_client_secret,
        )

    async def _get_access_token(self) -> str:
        try:
            token = await self.credential.get_token(self.config.smtp_oauth_scope)
        except AzureError as e:
            logger.error(f"OAuth2 token acquisition failed for SMTP: {e}")
            raise TransportError("SMTP OAuth2 token acquisition failed", provider=self.provider) from e
        return token.token

    def _build_message(self, content: EmailContent, recipients: List[str]) -> MIMEMultipart:
        message = MIMEMultipart("alternative")
        message["Subject"] = content.subject
        message["From"] = self.sender_display
        message["To"] = ", ".join(recipients)
        message.attach(MIMEText(content.text_body, "plain"))
        message.attach(MIMEText(content.html_body, "html"))
        return message

    def _send_sync(self, access_token: str, message: MIMEMultipart, recipients: List[str]) -> None:
        sender = self.sender_address

        def xoauth2(challenge=None):
            return f"user={sender}\x01auth=Bearer {access_token}\x01\x01"

        context = ssl.create_default_context()
        with smtplib.SMTP(self.config.smtp_server, self.config.smtp_port,
                          timeout=self.config.http_timeout_seconds) as server:
            server.ehlo()
            server.starttls(context=context)
            server.ehlo()
            server.auth("XOAUTH2", xoauth2)
            server.sendmail(sender, recipients, message.as_string())

    async def send_notification(self, notification: Notification) -> DeliveryResult:
        content = self.compose(notification)
        recipients = list(notification.recipients)
        access_token = await self._get_access_token()
        message = self._build_message(content, recipients)

        loop = asyncio.get_running_loop()
        try:
            await loop.run_in_executor(None, self._send_sync, access_token, message, recipients)
        except smtplib.SMTPResponseException as e:
            # Server answered with a rejection (auth, sender, message)
            logger.error(
                f"SMTP rejected notification for {notification.file_name}: "
                f"{e.smtp_code} {e.smtp_error!r}"
            )
            return self._result(False, e.smtp_code, f"SMTP rejected message: {e.smtp_code}")
        except smtplib.SMTPRecipientsRefused as e:
            logger.error(f"SMTP refused all recipients for {notification.file_name}: {list(e.recipients)}")
            return self._result(False, None, "SMTP refused all recipients")
        except (smtplib.SMTPException, OSError) as e:
            logger.error(f"SMTP delivery failed for {notification.file_name}: {e}")
            raise TransportError(f"SMTP delivery failed: {e}", provider=self.provider) from e

        logger.info(f"✅ Email notification sent to {len(recipients)} recipient(s) for {notification.file_name} via SMTP")
        return self._result(True, SMTP_OK, "Email sent")

    async def close(self) -> None:
        await self.credential.close()
