"""
Environment Variable Validation Module.

Validates environment variables at startup using regex patterns to catch
configuration errors EARLY with clear, actionable error messages.

This module is imported at the very start of function_app.py, BEFORE any
Azure SDK clients are built from these values.

Two kinds of checks:
    - Per-variable format rules (ENV_VAR_RULES)
    - "At least one of" groups (ENV_VAR_ONE_OF), e.g. storage needs either a
      connection string or an account name

Usage:
    from config.env_validation import validate_environment, ensure_startup_ready

    errors = validate_environment()
    for error in errors:
        print(f"{error.var_name}: {error.message}")

    ensure_startup_ready()  # raises ConfigurationError on any error

Exports:
    ENV_VAR_RULES: Dict of all validation rules
    ENV_VAR_ONE_OF: Groups where at least one variable must be set
    EnvValidationError: Dataclass for validation errors
    validate_environment: Main validation function
    validate_single_var: Validate one variable
    get_validation_summary: Summary for the health endpoint
    log_validation_results: Log errors and warnings
    ensure_startup_ready: Fail-fast entry point
"""

import os
import re
from dataclasses import dataclass
from typing import Dict, List, Optional, Pattern, Any, Tuple

from exceptions import ConfigurationError
from .defaults import StorageDefaults, EventDefaults, NotificationDefaults


# ============================================================================
# VALIDATION ERROR
# ============================================================================

@dataclass
class EnvValidationError:
    """Result of a failed environment variable validation."""
    var_name: str
    message: str
    current_value: Optional[str]
    expected_pattern: str
    fix_suggestion: str
    severity: str = "error"  # error, warning

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dict for JSON serialization."""
        return {
            "var_name": self.var_name,
            "message": self.message,
            "current_value": self._mask_sensitive(self.current_value),
            "expected_pattern": self.expected_pattern,
            "fix_suggestion": self.fix_suggestion,
            "severity": self.severity,
        }

    def _mask_sensitive(self, value: Optional[str]) -> Optional[str]:
        """Mask potentially sensitive values."""
        if value is None:
            return None
        sensitive_keywords = ["password", "secret", "key", "token", "connection", "storage"]
        var_lower = self.var_name.lower()
        if any(kw in var_lower for kw in sensitive_keywords):
            return "***MASKED***"
        if len(value) > 30:
            return f"{value[:20]}...({len(value)} chars)"
        return value


# ============================================================================
# VALIDATION RULE DEFINITION
# ============================================================================

@dataclass
class EnvVarRule:
    """
    Validation rule for an environment variable.

    Attributes:
        pattern: Compiled regex pattern for validation
        pattern_description: Human-readable description of expected format
        required: Whether this variable must be set
        fix_suggestion: How to fix if validation fails
        example: Example valid value
        allow_empty: Allow empty string (default False)
        default_value: Default value used if not set (for warning messages)
        warn_on_default: Emit warning when using default value
    """
    pattern: Pattern
    pattern_description: str
    required: bool
    fix_suggestion: str
    example: str
    allow_empty: bool = False
    default_value: Optional[str] = None
    warn_on_default: bool = True


# ============================================================================
# VALIDATION RULES - Single source of truth for env var formats
# ============================================================================

_AZURE_STORAGE_ACCOUNT = re.compile(r"^[a-z0-9]{3,24}$")
# Container names: 3-63 chars, lowercase letters, digits, single hyphens
_CONTAINER_NAME = re.compile(r"^(?!-)(?!.*--)[a-z0-9-]{3,63}(?<!-)$")
_STORAGE_CONNECTION = re.compile(r"^(UseDevelopmentStorage=true|.*AccountName=[^;]+;.*)$", re.IGNORECASE)
_SERVICE_BUS_CONNECTION = re.compile(r"^Endpoint=sb://[^;]+;.+$", re.IGNORECASE)
_SERVICE_BUS_FQDN = re.compile(r"^[a-z0-9][a-z0-9-]*\.servicebus\.[a-z0-9.-]+$", re.IGNORECASE)
_ENTITY_NAME = re.compile(r"^[A-Za-z0-9][A-Za-z0-9._/-]{0,259}$")
_EXTENSION_LIST = re.compile(r"^\s*\.?[A-Za-z0-9]+(\s*,\s*\.?[A-Za-z0-9]+)*\s*$")
_EMAIL = re.compile(r"^[^@\s,]+@[^@\s,]+\.[^@\s,]+$")
_EMAIL_LIST = re.compile(r"^\s*[^@\s,]+@[^@\s,]+\.[^@\s,]+(\s*,\s*[^@\s,]+@[^@\s,]+\.[^@\s,]+)*\s*$")
_BACKEND = re.compile(r"^(smtp|sendgrid|ses)$", re.IGNORECASE)
_GUID = re.compile(r"^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$", re.IGNORECASE)
_AWS_REGION = re.compile(r"^[a-z]{2}(-gov)?-[a-z]+-\d$")
_HTTP_URL = re.compile(r"^https?://[A-Za-z0-9][A-Za-z0-9.-]*(:\d+)?(/.*)?$")
_HOSTNAME = re.compile(r"^[A-Za-z0-9][A-Za-z0-9.-]+$")
_POSITIVE_INT = re.compile(r"^[1-9][0-9]*$")
_POSITIVE_NUMBER = re.compile(r"^(?!0+(\.0*)?$)\d+(\.\d+)?$")
_BOOLEAN = re.compile(r"^(true|false|1|0|yes|no)$", re.IGNORECASE)
_LOG_LEVEL = re.compile(r"^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$", re.IGNORECASE)


ENV_VAR_RULES: Dict[str, EnvVarRule] = {
    # =========================================================================
    # STORAGE
    # =========================================================================
    "AZURE_STORAGE_CONNECTION_STRING": EnvVarRule(
        pattern=_STORAGE_CONNECTION,
        pattern_description="Storage connection string containing AccountName=...",
        required=False,
        fix_suggestion="Copy the connection string from the storage account's Access keys blade",
        example="DefaultEndpointsProtocol=https;AccountName=myacct;AccountKey=...;EndpointSuffix=core.windows.net",
    ),

    "STORAGE_ACCOUNT_NAME": EnvVarRule(
        pattern=_AZURE_STORAGE_ACCOUNT,
        pattern_description="Lowercase alphanumeric, 3-24 characters",
        required=False,
        fix_suggestion="Use the storage account name only, not the full URL",
        example="myuploadstorage",
    ),

    "UPLOAD_CONTAINER_NAME": EnvVarRule(
        pattern=_CONTAINER_NAME,
        pattern_description="Lowercase letters, digits and single hyphens, 3-63 characters",
        required=False,
        fix_suggestion="Use a valid blob container name",
        example="upload",
        default_value=StorageDefaults.UPLOAD_CONTAINER,
    ),

    "RESULT_CONTAINER_NAME": EnvVarRule(
        pattern=_CONTAINER_NAME,
        pattern_description="Lowercase letters, digits and single hyphens, 3-63 characters",
        required=False,
        fix_suggestion="Use a valid blob container name",
        example="download",
        default_value=StorageDefaults.RESULT_CONTAINER,
    ),

    "ALLOWED_UPLOAD_EXTENSIONS": EnvVarRule(
        pattern=_EXTENSION_LIST,
        pattern_description="Comma-separated extensions",
        required=False,
        fix_suggestion="List extensions like '.csv,.tsv'",
        example=".csv",
        default_value=",".join(StorageDefaults.ALLOWED_EXTENSIONS),
    ),

    "MAX_UPLOAD_SIZE_MB": EnvVarRule(
        pattern=_POSITIVE_INT,
        pattern_description="Positive integer (megabytes)",
        required=False,
        fix_suggestion="Use a whole number of megabytes",
        example="100",
        default_value=str(StorageDefaults.MAX_UPLOAD_SIZE_MB),
    ),

    "SAS_EXPIRY_HOURS": EnvVarRule(
        pattern=_POSITIVE_INT,
        pattern_description="Positive integer (hours)",
        required=False,
        fix_suggestion="Use a whole number of hours",
        example="1",
        default_value=str(StorageDefaults.SAS_EXPIRY_HOURS),
        warn_on_default=False,
    ),

    # =========================================================================
    # EVENT TOPIC
    # =========================================================================
    "EVENT_TOPIC_CONNECTION_STRING": EnvVarRule(
        pattern=_SERVICE_BUS_CONNECTION,
        pattern_description="Service Bus connection string starting with Endpoint=sb://",
        required=False,
        fix_suggestion="Copy a shared access policy connection string from the Service Bus namespace",
        example="Endpoint=sb://mybus.servicebus.windows.net/;SharedAccessKeyName=send;SharedAccessKey=...",
    ),

    "EVENT_TOPIC_NAMESPACE": EnvVarRule(
        pattern=_SERVICE_BUS_FQDN,
        pattern_description="Must be full FQDN containing .servicebus. (e.g., *.servicebus.windows.net)",
        required=False,
        fix_suggestion="Use full FQDN like 'mybus.servicebus.windows.net' (not just 'mybus')",
        example="mybus.servicebus.windows.net",
    ),

    "EVENT_TOPIC_NAME": EnvVarRule(
        pattern=_ENTITY_NAME,
        pattern_description="Service Bus topic name",
        required=False,
        fix_suggestion="Use the topic name that downstream subscribers listen on",
        example="file-uploaded",
        default_value=EventDefaults.TOPIC_NAME,
    ),

    # =========================================================================
    # NOTIFICATIONS
    # =========================================================================
    "NOTIFICATION_BACKEND": EnvVarRule(
        pattern=_BACKEND,
        pattern_description="One of: smtp, sendgrid, ses",
        required=False,
        fix_suggestion="Pick the email provider to use",
        example="sendgrid",
        default_value=NotificationDefaults.BACKEND,
    ),

    "SENDER_EMAIL": EnvVarRule(
        pattern=_EMAIL,
        pattern_description="Single email address",
        required=True,
        fix_suggestion="Set the From address used for notifications",
        example="noreply@example.com",
    ),

    "RECIPIENT_EMAIL": EnvVarRule(
        pattern=_EMAIL_LIST,
        pattern_description="Email address or comma-separated list of addresses",
        required=True,
        fix_suggestion="Set who receives download notifications",
        example="ops@example.com,analyst@example.com",
    ),

    "SMTP_SERVER": EnvVarRule(
        pattern=_HOSTNAME,
        pattern_description="SMTP hostname",
        required=False,
        fix_suggestion="Use the STARTTLS submission host",
        example="smtp.office365.com",
        default_value=NotificationDefaults.SMTP_SERVER,
        warn_on_default=False,
    ),

    "SMTP_PORT": EnvVarRule(
        pattern=_POSITIVE_INT,
        pattern_description="Positive integer",
        required=False,
        fix_suggestion="Use the STARTTLS submission port",
        example="587",
        default_value=str(NotificationDefaults.SMTP_PORT),
        warn_on_default=False,
    ),

    "SMTP_TENANT_ID": EnvVarRule(
        pattern=_GUID,
        pattern_description="Entra ID tenant GUID",
        required=False,
        fix_suggestion="Copy the Directory (tenant) ID from the app registration",
        example="00000000-0000-0000-0000-000000000000",
    ),

    "SMTP_CLIENT_ID": EnvVarRule(
        pattern=_GUID,
        pattern_description="Application (client) ID GUID",
        required=False,
        fix_suggestion="Copy the Application (client) ID from the app registration",
        example="00000000-0000-0000-0000-000000000000",
    ),

    "AWS_REGION": EnvVarRule(
        pattern=_AWS_REGION,
        pattern_description="AWS region code",
        required=False,
        fix_suggestion="Use the SES region, e.g. 'us-east-1'",
        example="us-east-1",
        default_value=NotificationDefaults.AWS_REGION,
        warn_on_default=False,
    ),

    "UI_NOTIFICATION_ENDPOINT": EnvVarRule(
        pattern=_HTTP_URL,
        pattern_description="http(s) URL of the UI microservice notification endpoint",
        required=False,
        fix_suggestion="Point at the UI service route that accepts {DownloadUrl, FileName}",
        example="https://ui.example.com/api/notify",
    ),

    "HTTP_TIMEOUT_SECONDS": EnvVarRule(
        pattern=_POSITIVE_NUMBER,
        pattern_description="Positive number of seconds",
        required=False,
        fix_suggestion="Use a timeout like 30",
        example="30",
        default_value="30",
        warn_on_default=False,
    ),

    # =========================================================================
    # APPLICATION
    # =========================================================================
    "DEBUG_MODE": EnvVarRule(
        pattern=_BOOLEAN,
        pattern_description="Boolean",
        required=False,
        fix_suggestion="Use true or false",
        example="false",
    ),

    "LOG_LEVEL": EnvVarRule(
        pattern=_LOG_LEVEL,
        pattern_description="DEBUG, INFO, WARNING, ERROR or CRITICAL",
        required=False,
        fix_suggestion="Use a standard logging level name",
        example="INFO",
    ),
}


# At least one variable of each group must be set
ENV_VAR_ONE_OF: Dict[str, Tuple[str, ...]] = {
    "storage": ("AZURE_STORAGE_CONNECTION_STRING", "AzureWebJobsStorage", "STORAGE_ACCOUNT_NAME"),
    "event_topic": ("EVENT_TOPIC_CONNECTION_STRING", "EVENT_TOPIC_NAMESPACE"),
}


# Credentials required only when the matching backend is selected
BACKEND_REQUIRED_VARS: Dict[str, Tuple[str, ...]] = {
    "smtp": ("SMTP_TENANT_ID", "SMTP_CLIENT_ID", "SMTP_CLIENT_SECRET"),
    "sendgrid": ("SENDGRID_API_KEY",),
    "ses": ("AWS_ACCESS_KEY_ID", "AWS_SECRET_ACCESS_KEY"),
}


# ============================================================================
# VALIDATION FUNCTIONS
# ============================================================================

def validate_single_var(
    var_name: str,
    rule: EnvVarRule,
    include_warnings: bool = True
) -> Optional[EnvValidationError]:
    """
    Validate a single environment variable against its rule.

    Args:
        var_name: Environment variable name
        rule: Validation rule to apply
        include_warnings: Whether to return warnings for vars using defaults

    Returns:
        EnvValidationError if validation fails or warning if using default, None if passes
    """
    value = os.environ.get(var_name)

    if rule.required and (value is None or (not rule.allow_empty and value == "")):
        return EnvValidationError(
            var_name=var_name,
            message="Required environment variable not set",
            current_value=value,
            expected_pattern=rule.pattern_description,
            fix_suggestion=f"{rule.fix_suggestion}. Example: {rule.example}",
            severity="error",
        )

    if value is None or value == "":
        if include_warnings and not rule.required and rule.warn_on_default and rule.default_value is not None:
            return EnvValidationError(
                var_name=var_name,
                message="Not set, using default value",
                current_value=None,
                expected_pattern=f"Default: {rule.default_value}",
                fix_suggestion=f"Set explicitly or accept default. {rule.fix_suggestion}",
                severity="warning",
            )
        return None

    if not rule.pattern.match(value):
        return EnvValidationError(
            var_name=var_name,
            message="Invalid format",
            current_value=value,
            expected_pattern=rule.pattern_description,
            fix_suggestion=f"{rule.fix_suggestion}. Example: {rule.example}",
            severity="error",
        )

    return None


def validate_one_of_groups(
    groups: Optional[Dict[str, Tuple[str, ...]]] = None
) -> List[EnvValidationError]:
    """Check that each group has at least one variable set."""
    if groups is None:
        groups = ENV_VAR_ONE_OF

    results = []
    for group_name, var_names in groups.items():
        if not any(os.environ.get(name) for name in var_names):
            results.append(EnvValidationError(
                var_name=" | ".join(var_names),
                message=f"None of the {group_name} settings is set",
                current_value=None,
                expected_pattern=f"At least one of: {', '.join(var_names)}",
                fix_suggestion=f"Set one of {', '.join(var_names)}",
                severity="error",
            ))
    return results


def validate_backend_credentials() -> List[EnvValidationError]:
    """Check that the selected notification backend has its credentials."""
    backend = os.environ.get("NOTIFICATION_BACKEND", NotificationDefaults.BACKEND).strip().lower()
    required = BACKEND_REQUIRED_VARS.get(backend)
    if required is None:
        # Unknown selector is reported by the NOTIFICATION_BACKEND format rule
        return []

    return [
        EnvValidationError(
            var_name=name,
            message=f"Required when NOTIFICATION_BACKEND={backend}",
            current_value=None,
            expected_pattern="Non-empty credential",
            fix_suggestion=f"Set {name} or choose a different NOTIFICATION_BACKEND",
            severity="error",
        )
        for name in required
        if not os.environ.get(name)
    ]


def validate_environment(
    rules: Optional[Dict[str, EnvVarRule]] = None,
    include_warnings: bool = True
) -> List[EnvValidationError]:
    """
    Validate all environment variables against their rules.

    Args:
        rules: Optional custom rules dict (defaults to ENV_VAR_RULES).
            Group and backend checks only run with the default rules.
        include_warnings: Whether to include warnings for vars using defaults

    Returns:
        List of EnvValidationError objects (errors and optionally warnings)
    """
    use_defaults = rules is None
    if rules is None:
        rules = ENV_VAR_RULES

    results = []
    for var_name, rule in rules.items():
        result = validate_single_var(var_name, rule, include_warnings=include_warnings)
        if result:
            results.append(result)

    if use_defaults:
        results.extend(validate_one_of_groups())
        results.extend(validate_backend_credentials())

    return results


def get_validation_summary(include_warnings: bool = True) -> Dict[str, Any]:
    """
    Get a summary of environment variable validation status.

    Returns:
        Dict with validation summary suitable for health endpoint
    """
    all_results = validate_environment(include_warnings=include_warnings)

    errors = [r for r in all_results if r.severity == "error"]
    warnings = [r for r in all_results if r.severity == "warning"]

    required_vars = [name for name, rule in ENV_VAR_RULES.items() if rule.required]
    missing_required = [name for name in required_vars if not os.environ.get(name)]

    return {
        "valid": len(errors) == 0,
        "error_count": len(errors),
        "warning_count": len(warnings),
        "required_vars": {
            "total": len(required_vars),
            "set": len(required_vars) - len(missing_required),
            "missing": missing_required,
        },
        "errors": [e.to_dict() for e in errors],
        "warnings": [w.to_dict() for w in warnings],
    }


def log_validation_results(logger=None) -> bool:
    """
    Log validation results at appropriate levels.

    Logs errors at ERROR level, warnings at WARNING level.

    Args:
        logger: Optional logger instance (uses print if None)

    Returns:
        True if no errors, False if there are errors
    """
    all_results = validate_environment(include_warnings=True)

    errors = [r for r in all_results if r.severity == "error"]
    warnings = [r for r in all_results if r.severity == "warning"]

    def _log(level: str, msg: str):
        if logger:
            getattr(logger, level.lower())(msg)
        else:
            print(f"[{level.upper()}] {msg}")

    for error in errors:
        _log("error", f"ENV VAR ERROR: {error.var_name} - {error.message}")
        _log("error", f"  Expected: {error.expected_pattern}")
        _log("error", f"  Fix: {error.fix_suggestion}")

    if warnings:
        _log("warning", f"ENV VARS: {len(warnings)} optional variables using defaults:")
        for warning in warnings:
            default_val = warning.expected_pattern.replace("Default: ", "")
            _log("warning", f"  {warning.var_name} → {default_val}")

    if errors:
        _log("error", f"❌ STARTUP_FAILED: {len(errors)} environment variable errors")
        return False
    elif warnings:
        _log("info", f"✅ Environment validation passed ({len(warnings)} vars using defaults)")
        return True
    else:
        _log("info", "✅ Environment validation passed (all vars explicitly set)")
        return True


def ensure_startup_ready(logger=None) -> None:
    """
    Validate and log; raise ConfigurationError if anything is wrong.

    Called at module load of function_app.py so a misconfigured app fails
    to start instead of failing on the first upload.
    """
    if not log_validation_results(logger):
        errors = [r for r in validate_environment(include_warnings=False) if r.severity == "error"]
        names = ", ".join(e.var_name for e in errors)
        raise ConfigurationError(f"Invalid environment configuration: {names}")


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = [
    "ENV_VAR_RULES",
    "ENV_VAR_ONE_OF",
    "BACKEND_REQUIRED_VARS",
    "EnvVarRule",
    "EnvValidationError",
    "validate_environment",
    "validate_single_var",
    "validate_one_of_groups",
    "validate_backend_credentials",
    "get_validation_summary",
    "log_validation_results",
    "ensure_startup_ready",
]
