"""
Notification Configuration.

Provides configuration for:
    - Email backend selection (smtp | sendgrid | ses)
    - Sender and recipient addresses
    - Per-backend credentials
    - UI microservice webhook endpoint

Only the selected backend's credentials are required. Missing ones are
reported by missing_credentials() and turned into a ConfigurationError by
services.notifications.factory at startup.

Exports:
    NotificationConfig: Pydantic notification configuration model
"""

import os
from typing import List, Optional
from pydantic import BaseModel, Field, field_validator

from .defaults import NotificationDefaults, AppDefaults


def _split_recipients(raw: Optional[str]) -> List[str]:
    if not raw:
        return []
    return [addr.strip() for addr in raw.split(",") if addr.strip()]


class NotificationConfig(BaseModel):
    """
    Email and UI notification configuration.
    """

    backend: str = Field(
        default=NotificationDefaults.BACKEND,
        description="Email provider: smtp, sendgrid or ses"
    )

    sender_email: Optional[str] = Field(default=None, description="From address")
    sender_name: str = Field(default=NotificationDefaults.SENDER_NAME, description="From display name")
    recipients: List[str] = Field(default_factory=list, description="Notification recipients")

    # SMTP with OAuth2 client credentials
    smtp_server: str = Field(default=NotificationDefaults.SMTP_SERVER)
    smtp_port: int = Field(default=NotificationDefaults.SMTP_PORT, ge=1, le=65535)
    smtp_tenant_id: Optional[str] = Field(default=None)
    smtp_client_id: Optional[str] = Field(default=None)
    smtp_client_secret: Optional[str] = Field(default=None, repr=False)
    smtp_oauth_scope: str = Field(default=NotificationDefaults.SMTP_OAUTH_SCOPE)

    # SendGrid
    sendgrid_api_key: Optional[str] = Field(default=None, repr=False)
    sendgrid_api_url: str = Field(default=NotificationDefaults.SENDGRID_API_URL)

    # Amazon SES
    aws_access_key_id: Optional[str] = Field(default=None, repr=False)
    aws_secret_access_key: Optional[str] = Field(default=None, repr=False)
    aws_region: str = Field(default=NotificationDefaults.AWS_REGION)

    # UI microservice
    ui_webhook_url: Optional[str] = Field(
        default=None,
        description="Endpoint receiving {DownloadUrl, FileName} when a result is ready"
    )

    http_timeout_seconds: float = Field(
        default=AppDefaults.HTTP_TIMEOUT_SECONDS,
        gt=0,
        description="Timeout for outbound HTTP calls (SendGrid, UI webhook)"
    )

    @field_validator("backend")
    @classmethod
    def _normalize_backend(cls, value: str) -> str:
        return value.strip().lower()

    def missing_credentials(self) -> List[str]:
        """
        Names of env vars the selected backend needs but does not have.

        An unknown backend is reported as NOTIFICATION_BACKEND.
        """
        missing = []
        if not self.sender_email:
            missing.append("SENDER_EMAIL")
        if not self.recipients:
            missing.append("RECIPIENT_EMAIL")

        if self.backend == "smtp":
            for env_name, value in (
                ("SMTP_TENANT_ID", self.smtp_tenant_id),
                ("SMTP_CLIENT_ID", self.smtp_client_id),
                ("SMTP_CLIENT_SECRET", self.smtp_client_secret),
            ):
                if not value:
                    missing.append(env_name)
        elif self.backend == "sendgrid":
            if not self.sendgrid_api_key:
                missing.append("SENDGRID_API_KEY")
        elif self.backend == "ses":
            if not self.aws_access_key_id:
                missing.append("AWS_ACCESS_KEY_ID")
            if not self.aws_secret_access_key:
                missing.append("AWS_SECRET_ACCESS_KEY")
        else:
            missing.append("NOTIFICATION_BACKEND")
        return missing

    @classmethod
    def from_environment(cls):
        """Load from environment variables."""
        return cls(
            backend=os.environ.get("NOTIFICATION_BACKEND", NotificationDefaults.BACKEND),
            sender_email=os.environ.get("SENDER_EMAIL"),
            sender_name=os.environ.get("SENDER_NAME", NotificationDefaults.SENDER_NAME),
            recipients=_split_recipients(os.environ.get("RECIPIENT_EMAIL")),
            smtp_server=os.environ.get("SMTP_SERVER", NotificationDefaults.SMTP_SERVER),
            smtp_port=int(os.environ.get("SMTP_PORT", str(NotificationDefaults.SMTP_PORT))),
            smtp_tenant_id=os.environ.get("SMTP_TENANT_ID"),
            smtp_client_id=os.environ.get("SMTP_CLIENT_ID"),
            smtp_client_secret=os.environ.get("SMTP_CLIENT_SECRET"),
            sendgrid_api_key=os.environ.get("SENDGRID_API_KEY"),
            aws_access_key_id=os.environ.get("AWS_ACCESS_KEY_ID"),
            aws_secret_access_key=os.environ.get("AWS_SECRET_ACCESS_KEY"),
            aws_region=os.environ.get("AWS_REGION", NotificationDefaults.AWS_REGION),
            ui_webhook_url=os.environ.get("UI_NOTIFICATION_ENDPOINT"),
            http_timeout_seconds=float(
                os.environ.get("HTTP_TIMEOUT_SECONDS", str(AppDefaults.HTTP_TIMEOUT_SECONDS))
            ),
        )
