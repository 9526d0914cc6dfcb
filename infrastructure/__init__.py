"""
Infrastructure Package - Lazy Loading Implementation.

Provides the storage, event and webhook adapters with lazy loading so that
importing the package does not pull in the Azure SDKs or read environment
variables before the Functions host has finished initializing.

The actual import happens on first attribute access, typically when
function_app calls RepositoryFactory.

Exports:
    RepositoryFactory: Creates the shared clients
    IBlobRepository, BlobRepository: Blob storage per container
    IEventPublisher, ServiceBusEventPublisher: Upload event topic
    UINotificationClient: UI microservice webhook
"""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .factory import RepositoryFactory as _RepositoryFactory
    from .blob import BlobRepository as _BlobRepository
    from .blob import IBlobRepository as _IBlobRepository
    from .event_publisher import IEventPublisher as _IEventPublisher
    from .event_publisher import ServiceBusEventPublisher as _ServiceBusEventPublisher
    from .webhook_client import UINotificationClient as _UINotificationClient


def __getattr__(name: str):
    """
    Lazy import mechanism - only imports when actually accessed.
    """
    if name == "RepositoryFactory":
        from .factory import RepositoryFactory
        return RepositoryFactory

    # Blob storage
    elif name == "BlobRepository":
        from .blob import BlobRepository
        return BlobRepository
    elif name == "IBlobRepository":
        from .blob import IBlobRepository
        return IBlobRepository

    # Event topic
    elif name == "ServiceBusEventPublisher":
        from .event_publisher import ServiceBusEventPublisher
        return ServiceBusEventPublisher
    elif name == "IEventPublisher":
        from .event_publisher import IEventPublisher
        return IEventPublisher

    # UI webhook
    elif name == "UINotificationClient":
        from .webhook_client import UINotificationClient
        return UINotificationClient

    else:
        raise AttributeError(f"module 'infrastructure' has no attribute '{name}'")


__all__ = [
    "RepositoryFactory",
    "BlobRepository",
    "IBlobRepository",
    "ServiceBusEventPublisher",
    "IEventPublisher",
    "UINotificationClient",
]
