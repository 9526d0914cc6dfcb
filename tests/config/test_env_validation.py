"""
Environment variable validation tests.

Tests regex rules, the "at least one of" groups, backend credential checks
and the fail-fast startup entry point.
"""

import pytest

from config.env_validation import (
    ENV_VAR_RULES,
    EnvVarRule,
    ensure_startup_ready,
    get_validation_summary,
    validate_backend_credentials,
    validate_environment,
    validate_one_of_groups,
    validate_single_var,
)
from exceptions import ConfigurationError


def _set_valid_minimum(env):
    env.setenv("STORAGE_ACCOUNT_NAME", "myuploadstorage")
    env.setenv("EVENT_TOPIC_NAMESPACE", "mybus.servicebus.windows.net")
    env.setenv("NOTIFICATION_BACKEND", "sendgrid")
    env.setenv("SENDGRID_API_KEY", "SG.key")
    env.setenv("SENDER_EMAIL", "noreply@example.com")
    env.setenv("RECIPIENT_EMAIL", "ops@example.com")


class TestStorageAccountValidation:
    """STORAGE_ACCOUNT_NAME must be a bare account name."""

    rule = ENV_VAR_RULES["STORAGE_ACCOUNT_NAME"]

    def test_bare_name_accepted(self, monkeypatch):
        monkeypatch.setenv("STORAGE_ACCOUNT_NAME", "myuploadstorage")
        assert validate_single_var("STORAGE_ACCOUNT_NAME", self.rule) is None

    @pytest.mark.parametrize("value", [
        "https://myacct.blob.core.windows.net",
        "MyAccount",
        "ab",
        "has-hyphen",
    ])
    def test_invalid_rejected(self, monkeypatch, value):
        monkeypatch.setenv("STORAGE_ACCOUNT_NAME", value)
        result = validate_single_var("STORAGE_ACCOUNT_NAME", self.rule)
        assert result is not None
        assert result.severity == "error"


class TestContainerNameValidation:

    rule = ENV_VAR_RULES["RESULT_CONTAINER_NAME"]

    @pytest.mark.parametrize("value", ["download", "processed-results", "abc"])
    def test_valid(self, monkeypatch, value):
        monkeypatch.setenv("RESULT_CONTAINER_NAME", value)
        assert validate_single_var("RESULT_CONTAINER_NAME", self.rule) is None

    @pytest.mark.parametrize("value", ["Download", "-lead", "trail-", "dou--ble", "ab", "under_score"])
    def test_invalid(self, monkeypatch, value):
        monkeypatch.setenv("RESULT_CONTAINER_NAME", value)
        assert validate_single_var("RESULT_CONTAINER_NAME", self.rule) is not None

    def test_unset_warns_with_default(self, clean_env):
        result = validate_single_var("RESULT_CONTAINER_NAME", self.rule)
        assert result is not None
        assert result.severity == "warning"
        assert "download" in result.expected_pattern


class TestNotificationRules:

    @pytest.mark.parametrize("value", ["smtp", "sendgrid", "ses", "SES"])
    def test_backend_valid(self, monkeypatch, value):
        monkeypatch.setenv("NOTIFICATION_BACKEND", value)
        assert validate_single_var("NOTIFICATION_BACKEND", ENV_VAR_RULES["NOTIFICATION_BACKEND"]) is None

    def test_backend_invalid(self, monkeypatch):
        monkeypatch.setenv("NOTIFICATION_BACKEND", "mailgun")
        assert validate_single_var("NOTIFICATION_BACKEND", ENV_VAR_RULES["NOTIFICATION_BACKEND"]) is not None

    @pytest.mark.parametrize("value", ["a@example.com", "a@example.com, b@example.org"])
    def test_recipient_list_valid(self, monkeypatch, value):
        monkeypatch.setenv("RECIPIENT_EMAIL", value)
        assert validate_single_var("RECIPIENT_EMAIL", ENV_VAR_RULES["RECIPIENT_EMAIL"]) is None

    @pytest.mark.parametrize("value", ["not-an-email", "a@example.com,,b@example.com"])
    def test_recipient_list_invalid(self, monkeypatch, value):
        monkeypatch.setenv("RECIPIENT_EMAIL", value)
        assert validate_single_var("RECIPIENT_EMAIL", ENV_VAR_RULES["RECIPIENT_EMAIL"]) is not None

    def test_sender_required(self, clean_env):
        result = validate_single_var("SENDER_EMAIL", ENV_VAR_RULES["SENDER_EMAIL"])
        assert result is not None
        assert result.severity == "error"

    def test_sender_list_rejected(self, monkeypatch):
        monkeypatch.setenv("SENDER_EMAIL", "a@example.com,b@example.com")
        assert validate_single_var("SENDER_EMAIL", ENV_VAR_RULES["SENDER_EMAIL"]) is not None

    @pytest.mark.parametrize("value", ["30", "2.5", "120"])
    def test_timeout_valid(self, monkeypatch, value):
        monkeypatch.setenv("HTTP_TIMEOUT_SECONDS", value)
        assert validate_single_var("HTTP_TIMEOUT_SECONDS", ENV_VAR_RULES["HTTP_TIMEOUT_SECONDS"]) is None

    @pytest.mark.parametrize("value", ["0", "0.0", "-1", "abc"])
    def test_timeout_invalid(self, monkeypatch, value):
        monkeypatch.setenv("HTTP_TIMEOUT_SECONDS", value)
        assert validate_single_var("HTTP_TIMEOUT_SECONDS", ENV_VAR_RULES["HTTP_TIMEOUT_SECONDS"]) is not None


class TestGroupsAndBackends:

    def test_storage_group_missing(self, clean_env):
        names = [e.var_name for e in validate_one_of_groups()]
        assert any("STORAGE_ACCOUNT_NAME" in name for name in names)
        assert any("EVENT_TOPIC_NAMESPACE" in name for name in names)

    def test_webjobs_storage_satisfies_storage_group(self, clean_env):
        clean_env.setenv("AzureWebJobsStorage", "UseDevelopmentStorage=true")
        clean_env.setenv("EVENT_TOPIC_CONNECTION_STRING", "Endpoint=sb://x.servicebus.windows.net/;SharedAccessKey=k")
        assert validate_one_of_groups() == []

    def test_smtp_credentials_required(self, clean_env):
        clean_env.setenv("NOTIFICATION_BACKEND", "smtp")
        clean_env.setenv("SMTP_CLIENT_ID", "00000000-0000-0000-0000-000000000000")
        missing = {e.var_name for e in validate_backend_credentials()}
        assert missing == {"SMTP_TENANT_ID", "SMTP_CLIENT_SECRET"}

    def test_default_backend_is_smtp(self, clean_env):
        missing = {e.var_name for e in validate_backend_credentials()}
        assert "SMTP_CLIENT_SECRET" in missing

    def test_unknown_backend_left_to_format_rule(self, clean_env):
        clean_env.setenv("NOTIFICATION_BACKEND", "pigeon")
        assert validate_backend_credentials() == []


class TestValidateEnvironment:

    def test_valid_minimum_has_no_errors(self, clean_env):
        _set_valid_minimum(clean_env)
        errors = [r for r in validate_environment() if r.severity == "error"]
        assert errors == []

    def test_custom_rules_skip_groups(self, clean_env):
        rules = {"ONLY_THIS": EnvVarRule(
            pattern=ENV_VAR_RULES["LOG_LEVEL"].pattern,
            pattern_description="level",
            required=False,
            fix_suggestion="",
            example="INFO",
        )}
        assert validate_environment(rules=rules) == []

    def test_summary_masks_secrets(self, clean_env):
        _set_valid_minimum(clean_env)
        clean_env.setenv("AZURE_STORAGE_CONNECTION_STRING", "no account here")
        summary = get_validation_summary()
        assert summary["valid"] is False
        error = next(e for e in summary["errors"] if e["var_name"] == "AZURE_STORAGE_CONNECTION_STRING")
        assert error["current_value"] == "***MASKED***"

    def test_ensure_startup_ready_raises(self, clean_env):
        with pytest.raises(ConfigurationError) as exc_info:
            ensure_startup_ready()
        assert "SENDER_EMAIL" in str(exc_info.value)

    def test_ensure_startup_ready_passes(self, clean_env):
        _set_valid_minimum(clean_env)
        ensure_startup_ready()
