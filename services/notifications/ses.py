"""
Amazon SES Email Notification Service.

Uses the SES v2 API through boto3 with static access keys. boto3 is
blocking, so send_email runs in the default executor.
"""

import asyncio
from typing import Any, Dict, Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from config import NotificationConfig
from config.defaults import StorageDefaults
from core.models import DeliveryResult, Notification
from exceptions import TransportError
from util_logger import LoggerFactory, ComponentType

from .base import EmailContent, EmailNotificationService

logger = LoggerFactory.create_logger(ComponentType.ADAPTER, "SesEmailNotificationService")


class SesEmailNotificationService(EmailNotificationService):
    """Amazon SES v2 backend."""

    provider = "ses"

    def __init__(
        self,
        config: NotificationConfig,
        link_hours: int = StorageDefaults.SAS_EXPIRY_HOURS,
        ses_client: Optional[Any] = None
    ):
        super().__init__(config, link_hours)
        self.client = ses_client or boto3.client(
            "sesv2",
            region_name=config.aws_region,
            aws_access_key_id=config.aws_access_key_id,
            aws_secret_access_key=config.aws_secret_access_key,
        )

    def _request(self, content: EmailContent, notification: Notification) -> Dict[str, Any]:
        return {
            "FromEmailAddress": self.sender_display,
            "Destination": {"ToAddresses": list(notification.recipients)},
            "Content": {
                "Simple": {
                    "Subject": {"Data": content.subject, "Charset": "UTF-8"},
                    "Body": {
                        "Text": {"Data": content.text_body, "Charset": "UTF-8"},
                        "Html": {"Data": content.html_body, "Charset": "UTF-8"},
                    },
                }
            },
        }

    async def send_notification(self, notification: Notification) -> DeliveryResult:
        request = self._request(self.compose(notification), notification)

        loop = asyncio.get_running_loop()
        try:
            response = await loop.run_in_executor(None, lambda: self.client.send_email(**request))
        except ClientError as e:
            status_code = e.response.get("ResponseMetadata", {}).get("HTTPStatusCode")
            error_code = e.response.get("Error", {}).get("Code")
            logger.error(
                f"SES rejected notification for {notification.file_name}: "
                f"Status={status_code} ErrorCode={error_code}"
            )
            return self._result(False, status_code, f"SES error {error_code}")
        except BotoCoreError as e:
            logger.error(f"SES request failed for {notification.file_name}: {e}")
            raise TransportError(f"SES request failed: {e}", provider=self.provider) from e

        status_code = response.get("ResponseMetadata", {}).get("HTTPStatusCode")
        if status_code == 200:
            logger.info(
                f"✅ Email notification sent to {len(notification.recipients)} recipient(s) "
                f"for {notification.file_name} via SES (MessageId {response.get('MessageId')})"
            )
            return self._result(True, status_code, "Email sent")

        logger.error(f"SES returned status {status_code} for {notification.file_name}")
        return self._result(False, status_code, f"SES returned {status_code}")
