"""
Configuration loading tests.

Covers from_environment() defaults, storage auth fallbacks, list parsing
and the masked debug view.
"""

import pytest
from pydantic import ValidationError

from config import AppConfig, debug_config, get_config, reset_config
from config.notification_config import NotificationConfig
from config.queue_config import EventConfig
from config.storage_config import StorageConfig


class TestStorageConfig:

    def test_defaults(self, clean_env):
        config = StorageConfig.from_environment()
        assert config.upload_container == "upload"
        assert config.result_container == "download"
        assert config.allowed_extensions == [".csv"]
        assert config.max_upload_bytes == 100 * 1024 * 1024
        assert config.sas_expiry_hours == 1
        assert config.auth_mode == "unconfigured"

    def test_webjobs_storage_fallback(self, clean_env):
        clean_env.setenv("AzureWebJobsStorage", "UseDevelopmentStorage=true")
        config = StorageConfig.from_environment()
        assert config.connection_string == "UseDevelopmentStorage=true"
        assert config.auth_mode == "connection_string"

    def test_explicit_connection_string_wins(self, clean_env):
        clean_env.setenv("AzureWebJobsStorage", "UseDevelopmentStorage=true")
        clean_env.setenv("AZURE_STORAGE_CONNECTION_STRING", "AccountName=real;AccountKey=abc")
        assert StorageConfig.from_environment().connection_string.startswith("AccountName=real")

    def test_account_name_uses_managed_identity(self, clean_env):
        clean_env.setenv("STORAGE_ACCOUNT_NAME", "myacct")
        config = StorageConfig.from_environment()
        assert config.auth_mode == "managed_identity"
        assert config.account_url == "https://myacct.blob.core.windows.net"

    @pytest.mark.parametrize("raw, expected", [
        (".csv, TSV", [".csv", ".tsv"]),
        ("json,,parquet", [".json", ".parquet"]),
        (" , ", [".csv"]),
    ])
    def test_extension_parsing(self, clean_env, raw, expected):
        clean_env.setenv("ALLOWED_UPLOAD_EXTENSIONS", raw)
        assert StorageConfig.from_environment().allowed_extensions == expected

    def test_sas_expiry_bounds(self):
        with pytest.raises(ValidationError):
            StorageConfig(sas_expiry_hours=0)
        with pytest.raises(ValidationError):
            StorageConfig(sas_expiry_hours=200)


class TestEventConfig:

    def test_unconfigured(self, clean_env):
        config = EventConfig.from_environment()
        assert config.topic_name == "file-uploaded"
        assert config.is_configured is False

    def test_namespace(self, clean_env):
        clean_env.setenv("EVENT_TOPIC_NAMESPACE", "bus.servicebus.windows.net")
        clean_env.setenv("EVENT_TOPIC_NAME", "uploads")
        config = EventConfig.from_environment()
        assert config.is_configured is True
        assert config.topic_name == "uploads"


class TestNotificationConfig:

    def test_recipients_split(self, clean_env):
        clean_env.setenv("RECIPIENT_EMAIL", " a@example.com , b@example.com,, ")
        assert NotificationConfig.from_environment().recipients == ["a@example.com", "b@example.com"]

    def test_backend_normalized(self, clean_env):
        clean_env.setenv("NOTIFICATION_BACKEND", "  SendGrid ")
        assert NotificationConfig.from_environment().backend == "sendgrid"

    def test_missing_credentials_smtp(self):
        config = NotificationConfig(
            backend="smtp",
            sender_email="noreply@example.com",
            recipients=["ops@example.com"],
            smtp_client_id="client",
        )
        assert config.missing_credentials() == ["SMTP_TENANT_ID", "SMTP_CLIENT_SECRET"]

    def test_missing_credentials_ses(self):
        config = NotificationConfig(backend="ses", aws_access_key_id="AKIA")
        assert config.missing_credentials() == [
            "SENDER_EMAIL", "RECIPIENT_EMAIL", "AWS_SECRET_ACCESS_KEY",
        ]

    def test_missing_credentials_unknown_backend(self):
        config = NotificationConfig(
            backend="pigeon",
            sender_email="noreply@example.com",
            recipients=["ops@example.com"],
        )
        assert config.missing_credentials() == ["NOTIFICATION_BACKEND"]

    def test_complete_sendgrid(self):
        config = NotificationConfig(
            backend="sendgrid",
            sender_email="noreply@example.com",
            recipients=["ops@example.com"],
            sendgrid_api_key="SG.x",
        )
        assert config.missing_credentials() == []

    def test_timeout_must_be_positive(self):
        with pytest.raises(ValidationError):
            NotificationConfig(http_timeout_seconds=0)


class TestAppConfig:

    def test_singleton_and_reset(self, clean_env):
        first = get_config()
        assert get_config() is first
        reset_config()
        assert get_config() is not first

    def test_debug_mode_flag(self, clean_env):
        clean_env.setenv("DEBUG_MODE", "TRUE")
        assert AppConfig.from_environment().debug_mode is True

    def test_debug_config_masks_secrets(self, clean_env):
        clean_env.setenv("AZURE_STORAGE_CONNECTION_STRING", "AccountName=a;AccountKey=secret")
        clean_env.setenv("SENDGRID_API_KEY", "SG.secret")
        clean_env.setenv("RECIPIENT_EMAIL", "a@example.com,b@example.com")
        info = debug_config()
        assert info["storage"]["connection_string"] == "***MASKED***"
        assert info["notifications"]["sendgrid_api_key"] == "***MASKED***"
        assert info["notifications"]["smtp_client_secret"] is None
        assert info["notifications"]["recipient_count"] == 2
        assert "SG.secret" not in str(info)
        assert "AccountKey=secret" not in str(info)
