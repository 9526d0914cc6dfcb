"""
File and Event Data Models.

Exports:
    StoredFile: A file written to blob storage
    UploadEventData: Payload of the FileUploaded event
    UploadEvent: Envelope published once per successful upload
    SignedDownloadLink: Time-limited read-only URL for one blob
    Notification: One email notification request
"""

import uuid
from datetime import datetime, timezone
from typing import List, Optional
from pydantic import BaseModel, Field, ConfigDict

from config.defaults import EventDefaults


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class StoredFile(BaseModel):
    """
    A file written to blob storage.

    key is immutable once assigned; a second upload with the same key
    replaces the content rather than creating a version.
    """

    model_config = ConfigDict(frozen=True)

    key: str = Field(..., description="Normalized blob name")
    raw_name: str = Field(..., description="Filename as sent by the client")
    container: str = Field(..., description="Container holding the blob")
    size_bytes: int = Field(..., ge=0)
    content_type: str = Field(default="application/octet-stream")
    url: str = Field(..., description="Public blob URL")


class UploadEventData(BaseModel):
    """data section of the FileUploaded event."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    file_name: str = Field(..., alias="fileName", description="Stored (normalized) key")
    file_url: str = Field(..., alias="fileUrl", description="Public blob URL")


class UploadEvent(BaseModel):
    """
    FileUploaded event published after a successful upload.

    Serialized with camelCase keys (model_dump(by_alias=True)) so
    subscribers see: id, subject, eventType, dataVersion, eventTime, data.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    subject: str = Field(..., description="NewFileUploaded/<raw file name>")
    event_type: str = Field(default=EventDefaults.EVENT_TYPE, alias="eventType")
    data_version: str = Field(default=EventDefaults.DATA_VERSION, alias="dataVersion")
    event_time: datetime = Field(default_factory=_utc_now, alias="eventTime")
    data: UploadEventData

    @classmethod
    def for_upload(cls, raw_name: str, stored: StoredFile) -> "UploadEvent":
        return cls(
            subject=f"{EventDefaults.SUBJECT_PREFIX}/{raw_name}",
            data=UploadEventData(file_name=stored.key, file_url=stored.url),
        )

    def to_wire(self) -> str:
        """JSON body as sent to the topic."""
        return self.model_dump_json(by_alias=True)


class SignedDownloadLink(BaseModel):
    """
    Read-only, time-limited URL for one blob.

    Never persisted; the listener derives a fresh one per invocation.
    """

    model_config = ConfigDict(frozen=True)

    blob_uri: str = Field(..., description="Blob URL without query string")
    token: str = Field(..., repr=False, description="SAS query string")
    expiry: datetime = Field(..., description="Absolute UTC expiry")

    @property
    def url(self) -> str:
        return f"{self.blob_uri}?{self.token}"

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        return (now or _utc_now()) >= self.expiry


class Notification(BaseModel):
    """One email notification about a ready download."""

    model_config = ConfigDict(frozen=True)

    download_url: str = Field(..., repr=False)
    file_name: str = Field(...)
    recipients: List[str] = Field(..., min_length=1)
