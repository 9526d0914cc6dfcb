"""
Config test fixtures: clean environment via monkeypatch.
"""

import pytest


@pytest.fixture
def clean_env(monkeypatch):
    """Remove all env vars that config modules might read, for isolation."""
    env_vars_to_clear = [
        "AZURE_STORAGE_CONNECTION_STRING", "AzureWebJobsStorage", "STORAGE_ACCOUNT_NAME",
        "UPLOAD_CONTAINER_NAME", "RESULT_CONTAINER_NAME",
        "ALLOWED_UPLOAD_EXTENSIONS", "MAX_UPLOAD_SIZE_MB", "SAS_EXPIRY_HOURS",
        "EVENT_TOPIC_CONNECTION_STRING", "EVENT_TOPIC_NAMESPACE", "EVENT_TOPIC_NAME",
        "NOTIFICATION_BACKEND", "SENDER_EMAIL", "SENDER_NAME", "RECIPIENT_EMAIL",
        "SMTP_SERVER", "SMTP_PORT", "SMTP_CLIENT_ID", "SMTP_CLIENT_SECRET", "SMTP_TENANT_ID",
        "SENDGRID_API_KEY", "AWS_ACCESS_KEY_ID", "AWS_SECRET_ACCESS_KEY", "AWS_REGION",
        "UI_NOTIFICATION_ENDPOINT", "HTTP_TIMEOUT_SECONDS",
        "ENVIRONMENT", "DEBUG_MODE", "LOG_LEVEL",
    ]
    for var in env_vars_to_clear:
        monkeypatch.delenv(var, raising=False)
    return monkeypatch
