"""
Main Application Configuration.

Composes domain-specific configuration modules:
    - StorageConfig (blob containers, upload limits, signed links)
    - EventConfig (Service Bus topic for upload events)
    - NotificationConfig (email backend, UI webhook)

Exports:
    AppConfig: Main configuration class

Dependencies:
    pydantic: BaseModel for configuration validation
    config.storage_config: StorageConfig
    config.queue_config: EventConfig
    config.notification_config: NotificationConfig
    config.defaults: Default value constants

Pattern:
    Composition over inheritance - domain configs are composed, not inherited.
"""

import os
from pydantic import BaseModel, Field

from .storage_config import StorageConfig
from .queue_config import EventConfig
from .notification_config import NotificationConfig
from .defaults import AppDefaults


# ============================================================================
# APPLICATION CONFIGURATION
# ============================================================================

class AppConfig(BaseModel):
    """
    Application configuration - composition of domain configs.

    Each domain config manages its own validation and defaults.
    """

    # ========================================================================
    # Core Application Settings
    # ========================================================================

    debug_mode: bool = Field(
        default=AppDefaults.DEBUG_MODE,
        description="Enable debug mode for verbose diagnostics. "
                    "Set DEBUG_MODE=true in environment to enable.",
        examples=[True, False]
    )

    environment: str = Field(
        default=AppDefaults.ENVIRONMENT,
        description="Environment name (dev, qa, prod)",
        examples=["dev", "qa", "prod"]
    )

    log_level: str = Field(
        default=AppDefaults.LOG_LEVEL,
        description="Logging level for application diagnostics",
        examples=["DEBUG", "INFO", "WARNING", "ERROR"]
    )

    # ========================================================================
    # Domain Configurations (Composition Pattern)
    # ========================================================================

    storage: StorageConfig = Field(
        default_factory=StorageConfig,
        description="Blob storage containers and upload limits"
    )

    events: EventConfig = Field(
        default_factory=EventConfig,
        description="Service Bus topic for FileUploaded events"
    )

    notifications: NotificationConfig = Field(
        default_factory=NotificationConfig,
        description="Email backend and UI webhook"
    )

    # ========================================================================
    # Factory Methods
    # ========================================================================

    @classmethod
    def from_environment(cls) -> "AppConfig":
        """Load all configuration from environment variables."""
        return cls(
            debug_mode=os.environ.get("DEBUG_MODE", "false").lower() == "true",
            environment=os.environ.get("ENVIRONMENT", AppDefaults.ENVIRONMENT),
            log_level=os.environ.get("LOG_LEVEL", AppDefaults.LOG_LEVEL),
            storage=StorageConfig.from_environment(),
            events=EventConfig.from_environment(),
            notifications=NotificationConfig.from_environment(),
        )
