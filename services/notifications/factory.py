"""
Notification Service Factory.

Selects exactly one email backend from NOTIFICATION_BACKEND at startup.
There is no fallback: an unknown selector or a selected backend without
credentials is a ConfigurationError.
"""

from typing import Optional

import httpx

from config import NotificationConfig
from config.defaults import StorageDefaults
from core.models import NotificationBackend
from exceptions import ConfigurationError
from util_logger import LoggerFactory, ComponentType

from .base import EmailNotificationService

logger = LoggerFactory.create_logger(ComponentType.FACTORY, "NotificationServiceFactory")


def create_notification_service(
    config: NotificationConfig,
    link_hours: int = StorageDefaults.SAS_EXPIRY_HOURS,
    http_client: Optional[httpx.AsyncClient] = None
) -> EmailNotificationService:
    """
    Build the configured email backend.

    Args:
        config: Notification configuration
        link_hours: Signed link lifetime quoted in the email body
        http_client: Shared client for HTTP based backends

    Raises:
        ConfigurationError: Unknown backend or missing credentials
    """
    try:
        backend = NotificationBackend(config.backend)
    except ValueError:
        valid = ", ".join(b.value for b in NotificationBackend)
        raise ConfigurationError(
            f"Unknown NOTIFICATION_BACKEND '{config.backend}'. Valid: {valid}"
        ) from None

    missing = config.missing_credentials()
    if missing:
        raise ConfigurationError(
            f"Notification backend '{backend.value}' is missing: {', '.join(missing)}"
        )

    if backend == NotificationBackend.SMTP:
        from .smtp import SmtpEmailNotificationService
        service = SmtpEmailNotificationService(config, link_hours)
    elif backend == NotificationBackend.SENDGRID:
        from .sendgrid import SendGridEmailNotificationService
        service = SendGridEmailNotificationService(config, link_hours, http_client=http_client)
    else:
        from .ses import SesEmailNotificationService
        service = SesEmailNotificationService(config, link_hours)

    logger.info(f"Notification backend selected: {backend.value}")
    return service
