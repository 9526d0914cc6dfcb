"""
File Upload Service.

Validates an uploaded file, stores it under a normalized key and publishes
the FileUploaded event.

Flow:
    validate (name, emptiness, extension, size)
    -> normalize_file_name
    -> BlobRepository.upload (create-if-absent, delete-then-write)
    -> UploadEvent.for_upload -> IEventPublisher.publish

A failed publication does not fail the upload: the file is stored, the
failure is logged and reported as event_published=False.

Exports:
    FileUploadService
"""

import mimetypes
import os
from datetime import datetime
from typing import Optional

from config import StorageConfig
from core.models import OperationResult, StoredFile, UploadEvent, UploadOutcome
from exceptions import PayloadTooLargeError, ValidationError
from infrastructure.blob import IBlobRepository
from infrastructure.event_publisher import IEventPublisher
from util_logger import LoggerFactory, ComponentType, LogContext

from .file_naming import normalize_file_name, strip_client_path

logger = LoggerFactory.create_logger(ComponentType.SERVICE, "FileUploadService")


class FileUploadService:
    """Stores uploads and announces them on the event topic."""

    def __init__(
        self,
        repository: IBlobRepository,
        publisher: IEventPublisher,
        storage_config: StorageConfig
    ):
        self.repository = repository
        self.publisher = publisher
        self.config = storage_config

    def validate(self, raw_name: Optional[str], content: Optional[bytes]) -> None:
        """
        Reject uploads that are missing, empty, of the wrong type or too big.

        Raises:
            ValidationError: Missing name, empty content, bad extension (400)
            PayloadTooLargeError: Over the configured size cap (413)
        """
        if not raw_name or not raw_name.strip():
            raise ValidationError("No file uploaded")
        if not content:
            raise ValidationError("Uploaded file is empty")

        extension = os.path.splitext(raw_name.strip())[1].lower()
        if extension not in self.config.allowed_extensions:
            allowed = ", ".join(self.config.allowed_extensions)
            raise ValidationError(f"Invalid file type '{extension or raw_name}'. Allowed: {allowed}")

        if len(content) > self.config.max_upload_bytes:
            raise PayloadTooLargeError(
                f"File size {len(content) / (1024 * 1024):.1f}MB exceeds "
                f"{self.config.max_upload_size_mb}MB limit"
            )

    async def upload(
        self,
        raw_name: Optional[str],
        content: Optional[bytes],
        content_type: Optional[str] = None,
        request_id: Optional[str] = None,
        now: Optional[datetime] = None
    ) -> OperationResult[UploadOutcome]:
        """
        Validate, store and announce one upload.

        Args:
            raw_name: Filename as sent by the client
            content: File bytes
            content_type: Client supplied MIME type (guessed from the name if absent)
            request_id: HTTP request id for log correlation
            now: Clock override for the key timestamp

        Returns:
            ok(UploadOutcome) when stored, fail(message) when storage refused

        Raises:
            ValidationError: Input rejected (see validate)
            TransportError: Blob storage failure
        """
        if raw_name:
            # Browsers may send "C:\fakepath\name.csv"; keep only the file name
            raw_name = strip_client_path(raw_name).strip()
        self.validate(raw_name, content)
        key = normalize_file_name(raw_name, now=now)

        context = LogContext(request_id=request_id, file_key=key, container=self.repository.container_name)
        dims = {'custom_dimensions': context.to_dict()}

        if not content_type or content_type == "application/octet-stream":
            content_type = mimetypes.guess_type(key)[0] or "application/octet-stream"

        stored_result = await self.repository.upload(key, content, content_type)
        if not stored_result.is_success:
            logger.error(f"Upload of '{raw_name}' not stored: {stored_result.message}", extra=dims)
            return OperationResult.fail(stored_result.message)

        stored = StoredFile(
            key=key,
            raw_name=raw_name,
            container=self.repository.container_name,
            size_bytes=len(content),
            content_type=content_type,
            url=stored_result.data,
        )
        logger.info(f"Stored upload '{raw_name}' as {key}", extra=dims)

        outcome = await self._publish(raw_name, stored, dims)
        return OperationResult.ok(outcome, "File uploaded successfully")

    async def _publish(self, raw_name: str, stored: StoredFile, dims: dict) -> UploadOutcome:
        event = UploadEvent.for_upload(raw_name, stored)
        try:
            result = await self.publisher.publish(event)
        except Exception as e:
            # Storage already succeeded; the client still gets its URL
            logger.error(
                f"FileUploaded event {event.id} for {stored.key} not published: {e}",
                exc_info=True,
                extra=dims
            )
            return UploadOutcome(stored=stored, event_published=False, publish_error=str(e))

        if not result.is_success:
            logger.error(
                f"FileUploaded event {event.id} for {stored.key} not published: {result.message}",
                extra=dims
            )
            return UploadOutcome(stored=stored, event_published=False, publish_error=result.message)

        logger.info(f"Published FileUploaded event {event.id} for {stored.key}", extra=dims)
        return UploadOutcome(stored=stored, event_published=True, event_id=event.id)
