"""
Blob-Change Listener.

Runs when a processed file lands in the result container. Re-resolves the
blob, derives a read-only signed link and hands it to two independent
consumers: the email backend and the UI microservice webhook.

Each consumer is isolated: a failure in one is logged and recorded in the
ListenerOutcome, and never stops the other or propagates to the trigger.
Repeated triggers for the same blob send repeated notifications.

Exports:
    BlobChangeListener
"""

from typing import List, Optional

from config.defaults import StorageDefaults
from core.models import (
    DeliveryChannel,
    DeliveryResult,
    ListenerOutcome,
    Notification,
    SignedDownloadLink,
)
from exceptions import TransportError
from infrastructure.blob import IBlobRepository
from infrastructure.webhook_client import UINotificationClient
from util_logger import LoggerFactory, ComponentType, LogContext

from .notifications import EmailNotificationService

logger = LoggerFactory.create_logger(ComponentType.SERVICE, "BlobChangeListener")


class BlobChangeListener:
    """Forwards signed download links for new result blobs."""

    def __init__(
        self,
        repository: IBlobRepository,
        email_service: EmailNotificationService,
        recipients: List[str],
        ui_client: Optional[UINotificationClient] = None,
        link_hours: int = StorageDefaults.SAS_EXPIRY_HOURS
    ):
        self.repository = repository
        self.email_service = email_service
        self.recipients = list(recipients)
        self.ui_client = ui_client
        self.link_hours = link_hours

    async def handle(self, blob_name: str, invocation_id: Optional[str] = None) -> ListenerOutcome:
        """
        Process one blob-created event.

        Args:
            blob_name: Blob name within the result container
            invocation_id: Functions invocation id for log correlation

        Returns:
            ListenerOutcome with separate email and UI results
        """
        context = LogContext(
            correlation_id=invocation_id,
            file_key=blob_name,
            container=self.repository.container_name
        )
        dims = {'custom_dimensions': context.to_dict()}
        outcome = ListenerOutcome(blob_name=blob_name)

        try:
            found = await self.repository.exists(blob_name)
        except TransportError as e:
            logger.error(f"Could not confirm {blob_name} exists, skipping notifications: {e}", extra=dims)
            outcome.skipped_reason = "existence check failed"
            return outcome

        if not found:
            logger.warning(f"Blob {blob_name} not found in {self.repository.container_name}, skipping notifications", extra=dims)
            outcome.skipped_reason = "blob not found"
            return outcome
        outcome.found = True

        try:
            link = await self.repository.generate_signed_link(blob_name, hours=self.link_hours)
        except TransportError as e:
            logger.error(f"Could not sign download link for {blob_name}: {e}", extra=dims)
            outcome.skipped_reason = "signed link generation failed"
            return outcome

        outcome.download_url = link.url
        outcome.link_expiry = link.expiry
        logger.info(f"Signed link for {blob_name} expires {link.expiry.isoformat()}", extra=dims)

        outcome.email = await self._send_email(blob_name, link, dims)
        outcome.ui = await self._notify_ui(blob_name, link, dims)
        return outcome

    async def _send_email(self, blob_name: str, link: SignedDownloadLink, dims: dict) -> DeliveryResult:
        provider = self.email_service.provider
        if not self.recipients:
            logger.warning(f"No recipients configured, email for {blob_name} not sent", extra=dims)
            return DeliveryResult(channel=DeliveryChannel.EMAIL, provider=provider,
                                  success=False, message="No recipients configured")

        notification = Notification(download_url=link.url, file_name=blob_name, recipients=self.recipients)
        try:
            result = await self.email_service.send_notification(notification)
        except Exception as e:
            logger.error(f"Failed to send email notification for {blob_name}: {e}", exc_info=True, extra=dims)
            return DeliveryResult(channel=DeliveryChannel.EMAIL, provider=provider,
                                  success=False, status_code=getattr(e, "status_code", None), message=str(e))

        if not result.success:
            logger.error(
                f"Email notification for {blob_name} failed with status {result.status_code}: {result.message}",
                extra=dims
            )
        return result

    async def _notify_ui(self, blob_name: str, link: SignedDownloadLink, dims: dict) -> Optional[DeliveryResult]:
        if self.ui_client is None:
            logger.debug(f"UI webhook not configured, skipping UI notification for {blob_name}", extra=dims)
            return None

        try:
            result = await self.ui_client.notify(link.url, blob_name)
        except Exception as e:
            logger.error(f"Failed to notify UI for {blob_name}: {e}", exc_info=True, extra=dims)
            return DeliveryResult(channel=DeliveryChannel.UI, provider="webhook",
                                  success=False, status_code=getattr(e, "status_code", None), message=str(e))

        if not result.success:
            logger.error(
                f"UI notification for {blob_name} failed with status {result.status_code}: {result.message}",
                extra=dims
            )
        return result
