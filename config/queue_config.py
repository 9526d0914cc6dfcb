"""
Upload Event Topic Configuration.

Upload events go to an Azure Service Bus topic. Downstream subscribers (the
data-processing pipeline) own their subscriptions; this app only publishes.

Authentication:
    EVENT_TOPIC_CONNECTION_STRING, or EVENT_TOPIC_NAMESPACE with
    DefaultAzureCredential.

Exports:
    EventConfig: Pydantic event topic configuration model
"""

import os
from typing import Optional
from pydantic import BaseModel, Field

from .defaults import EventDefaults


class EventConfig(BaseModel):
    """
    Service Bus topic configuration for upload events.
    """

    connection_string: Optional[str] = Field(
        default=None,
        repr=False,
        description="Service Bus connection string (EVENT_TOPIC_CONNECTION_STRING)"
    )

    namespace: Optional[str] = Field(
        default=None,
        description="Fully qualified Service Bus namespace for managed identity auth"
    )

    topic_name: str = Field(
        default=EventDefaults.TOPIC_NAME,
        description="Topic receiving FileUploaded events"
    )

    @property
    def is_configured(self) -> bool:
        return bool(self.connection_string or self.namespace)

    @classmethod
    def from_environment(cls):
        """Load from environment variables."""
        return cls(
            connection_string=os.environ.get("EVENT_TOPIC_CONNECTION_STRING"),
            namespace=os.environ.get("EVENT_TOPIC_NAMESPACE"),
            topic_name=os.environ.get("EVENT_TOPIC_NAME", EventDefaults.TOPIC_NAME),
        )
