"""
Configuration Package - Domain-Specific Configuration Modules

This package provides application configuration using a composition-based approach.

Structure:
    config/
    ├── __init__.py              # This file - exports and singleton
    ├── app_config.py            # Main config (composes domain configs)
    ├── storage_config.py        # Blob containers, upload limits
    ├── queue_config.py          # Service Bus topic for upload events
    ├── notification_config.py   # Email backend, UI webhook
    ├── defaults.py              # Default values
    └── env_validation.py        # Startup environment validation

Usage:
    # Singleton pattern (preferred)
    from config import get_config
    config = get_config()
    container = config.storage.upload_container

    # Debug output
    from config import debug_config
    info = debug_config()  # Secrets masked
"""

from typing import Optional

from .storage_config import StorageConfig
from .queue_config import EventConfig
from .notification_config import NotificationConfig
from .app_config import AppConfig


# ============================================================================
# SINGLETON PATTERN
# ============================================================================

_config_instance: Optional[AppConfig] = None


def get_config() -> AppConfig:
    """
    Get global configuration singleton.

    Returns:
        AppConfig instance loaded from environment
    """
    global _config_instance
    if _config_instance is None:
        _config_instance = AppConfig.from_environment()
    return _config_instance


def reset_config() -> None:
    """Drop the cached singleton so the next get_config() re-reads the environment."""
    global _config_instance
    _config_instance = None


def _mask(value: Optional[str]) -> Optional[str]:
    return '***MASKED***' if value else None


def debug_config() -> dict:
    """
    Get sanitized configuration for debugging (masks sensitive values).

    Returns:
        Dictionary with configuration values, secrets masked
    """
    try:
        config = get_config()
        storage = config.storage
        events = config.events
        notifications = config.notifications
        return {
            'storage': {
                'auth_mode': storage.auth_mode,
                'account_name': storage.account_name,
                'connection_string': _mask(storage.connection_string),
                'upload_container': storage.upload_container,
                'result_container': storage.result_container,
                'allowed_extensions': storage.allowed_extensions,
                'max_upload_size_mb': storage.max_upload_size_mb,
                'sas_expiry_hours': storage.sas_expiry_hours,
            },
            'events': {
                'topic_name': events.topic_name,
                'namespace': events.namespace,
                'connection_string': _mask(events.connection_string),
            },
            'notifications': {
                'backend': notifications.backend,
                'sender_email': notifications.sender_email,
                'recipient_count': len(notifications.recipients),
                'smtp_server': notifications.smtp_server,
                'smtp_client_secret': _mask(notifications.smtp_client_secret),
                'sendgrid_api_key': _mask(notifications.sendgrid_api_key),
                'aws_secret_access_key': _mask(notifications.aws_secret_access_key),
                'ui_webhook_url': notifications.ui_webhook_url,
            },
            'debug_mode': config.debug_mode,
            'environment': config.environment,
            'log_level': config.log_level,
        }
    except Exception as e:
        return {'error': f'Configuration validation failed: {e}'}


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = [
    'AppConfig',
    'get_config',
    'reset_config',
    'debug_config',
    'StorageConfig',
    'EventConfig',
    'NotificationConfig',
]
