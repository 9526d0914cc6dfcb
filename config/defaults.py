"""
Configuration Defaults - Single source of truth for all default values.

Organization:
    - StorageDefaults: container names, upload limits, signed link lifetime
    - EventDefaults: Service Bus topic and upload event envelope constants
    - NotificationDefaults: email backend selection and provider endpoints
    - AppDefaults: environment, logging, outbound HTTP timeout

Credentials never have defaults. A backend whose credentials are missing
fails at startup (see config.env_validation and
services.notifications.factory).

Usage:
    from config.defaults import StorageDefaults

    # In Pydantic Field definitions:
    upload_container: str = Field(default=StorageDefaults.UPLOAD_CONTAINER, ...)
"""


# =============================================================================
# STORAGE DEFAULTS
# =============================================================================

class StorageDefaults:
    """
    Blob storage defaults.

    Uploads land in UPLOAD_CONTAINER. The downstream data pipeline writes
    its output to RESULT_CONTAINER, which the blob trigger watches.
    """

    UPLOAD_CONTAINER = "upload"
    RESULT_CONTAINER = "download"

    # Comma-separated in ALLOWED_UPLOAD_EXTENSIONS, compared case-insensitively
    ALLOWED_EXTENSIONS = [".csv"]

    MAX_UPLOAD_SIZE_MB = 100

    # Signed download links are read-only and expire after this many hours
    SAS_EXPIRY_HOURS = 1


# =============================================================================
# EVENT DEFAULTS
# =============================================================================

class EventDefaults:
    """Upload event publication defaults."""

    TOPIC_NAME = "file-uploaded"
    EVENT_TYPE = "FileUploaded"
    DATA_VERSION = "1.0"
    SUBJECT_PREFIX = "NewFileUploaded"


# =============================================================================
# NOTIFICATION DEFAULTS
# =============================================================================

class NotificationDefaults:
    """
    Email notification defaults.

    BACKEND selects exactly one provider at startup: smtp, sendgrid or ses.
    """

    BACKEND = "smtp"
    VALID_BACKENDS = ("smtp", "sendgrid", "ses")

    SENDER_NAME = "File Processor"

    # SMTP with OAuth2 (Office 365)
    SMTP_SERVER = "smtp.office365.com"
    SMTP_PORT = 587
    SMTP_OAUTH_SCOPE = "https://outlook.office365.com/.default"

    # SendGrid v3 API
    SENDGRID_API_URL = "https://api.sendgrid.com/v3/mail/send"

    # Amazon SES
    AWS_REGION = "us-east-1"

    # Subjects differ per provider
    DEFAULT_SUBJECT = "New file uploaded to Azure Blob Storage"
    SENDGRID_SUBJECT = "Your file is ready for download"


# =============================================================================
# APP DEFAULTS
# =============================================================================

class AppDefaults:
    """Application-level defaults."""

    ENVIRONMENT = "dev"
    DEBUG_MODE = False
    LOG_LEVEL = "INFO"
    HTTP_TIMEOUT_SECONDS = 30.0
