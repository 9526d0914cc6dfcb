"""
Operation Result Data Models.

Outcome envelopes returned across the upload-to-notification pipeline.
No business logic - pure data structures.

Exports:
    OperationResult: Generic {data, message, is_success} envelope
    DeliveryResult: Outcome of one email or UI webhook delivery attempt
    PublishAck: Acknowledgement of an upload event publication
    ListenerOutcome: What the blob-change listener did for one blob
    UploadOutcome: Stored file plus event publication status
"""

from datetime import datetime
from typing import Generic, List, Optional, TypeVar
from pydantic import BaseModel, Field

from .enums import DeliveryChannel
from .files import StoredFile

T = TypeVar("T")


class OperationResult(BaseModel, Generic[T]):
    """
    Generic result envelope.

    Used where failure is an expected outcome the caller branches on
    (e.g. "Failed to create container"), rather than an exception.
    """

    data: Optional[T] = Field(default=None, description="Payload on success")
    message: str = Field(default="", description="Human readable outcome")
    is_success: bool = Field(..., description="Whether the operation succeeded")

    @classmethod
    def ok(cls, data: Optional[T] = None, message: str = "") -> "OperationResult[T]":
        return cls(data=data, message=message, is_success=True)

    @classmethod
    def fail(cls, message: str) -> "OperationResult[T]":
        return cls(data=None, message=message, is_success=False)


class DeliveryResult(BaseModel):
    """
    Outcome of one downstream delivery attempt.

    success is decided from the provider's status code; a provider that
    answered with a non-success status is a failed delivery, not an error.
    """

    channel: DeliveryChannel = Field(..., description="email or ui")
    provider: str = Field(..., description="smtp, sendgrid, ses or webhook")
    success: bool = Field(..., description="Provider accepted the message")
    status_code: Optional[int] = Field(default=None, description="Provider status code, if any")
    message: str = Field(default="", description="Provider response or error summary")


class PublishAck(BaseModel):
    """Acknowledgement that events were handed to the topic."""

    topic: str = Field(..., description="Topic the events were sent to")
    message_count: int = Field(..., ge=0, description="Number of events in the batch")
    message_ids: List[str] = Field(default_factory=list, description="Service Bus message ids")


class ListenerOutcome(BaseModel):
    """
    Result of one blob-change listener invocation.

    email and ui are recorded separately so one failing path is visible
    without hiding the other.
    """

    blob_name: str = Field(..., description="Blob the trigger fired for")
    found: bool = Field(default=False, description="Blob existed when re-resolved")
    download_url: Optional[str] = Field(default=None, repr=False, description="Signed URL sent to consumers")
    link_expiry: Optional[datetime] = Field(default=None, description="Signed URL expiry (UTC)")
    email: Optional[DeliveryResult] = Field(default=None, description="Email delivery outcome")
    ui: Optional[DeliveryResult] = Field(default=None, description="UI webhook delivery outcome")
    skipped_reason: Optional[str] = Field(default=None, description="Why nothing was sent")

    @property
    def notified(self) -> bool:
        """True when at least one consumer accepted the link."""
        return bool((self.email and self.email.success) or (self.ui and self.ui.success))


class UploadOutcome(BaseModel):
    """
    Result of a successful upload.

    event_published is False when the file was stored but the FileUploaded
    event could not be handed to the topic.
    """

    stored: StoredFile = Field(..., description="Blob that was written")
    event_published: bool = Field(default=False, description="FileUploaded event accepted by the topic")
    event_id: Optional[str] = Field(default=None, description="Id of the published event")
    publish_error: Optional[str] = Field(default=None, description="Why publication failed")
