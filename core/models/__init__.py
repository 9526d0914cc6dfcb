"""
Core Data Models Package.

Contains pure data structures without business logic.

Exports:
    DeliveryChannel, NotificationBackend: Enums
    StoredFile, UploadEvent, UploadEventData: Upload models
    SignedDownloadLink, Notification: Listener and dispatch models
    OperationResult, DeliveryResult, PublishAck, ListenerOutcome, UploadOutcome: Results
"""

# Enums
from .enums import (
    DeliveryChannel,
    NotificationBackend
)

# File and event models
from .files import (
    StoredFile,
    UploadEvent,
    UploadEventData,
    SignedDownloadLink,
    Notification
)

# Result models
from .results import (
    OperationResult,
    DeliveryResult,
    PublishAck,
    ListenerOutcome,
    UploadOutcome
)

__all__ = [
    'DeliveryChannel',
    'NotificationBackend',
    'StoredFile',
    'UploadEvent',
    'UploadEventData',
    'SignedDownloadLink',
    'Notification',
    'OperationResult',
    'DeliveryResult',
    'PublishAck',
    'ListenerOutcome',
    'UploadOutcome',
]
