"""
Blob Storage Repository.

Async repository over one Azure Blob Storage container. Used for the upload
container (client files) and the result container (processed output watched
by the blob trigger).

Key Features:
- Shares one aio BlobServiceClient per process (built by RepositoryFactory)
- Lazy container creation with public-read access set only at creation
- Delete-then-write uploads so a key never has snapshots of old content
- Missing blobs on download/delete raise NotFoundError
- Provider failures are logged once with status and error code, then raised
  as TransportError
- Read-only signed links: account key when available, otherwise a user
  delegation key (managed identity)

Usage:
    from infrastructure import RepositoryFactory

    repo = RepositoryFactory.create_blob_repository(service, "upload")
    result = await repo.upload("20240501093000-report.csv", data, "text/csv")
    if result.is_success:
        url = result.data
"""

from abc import ABC, abstractmethod
from datetime import datetime, timedelta, timezone
from typing import Optional

from azure.storage.blob import generate_blob_sas, BlobSasPermissions, ContentSettings
from azure.storage.blob.aio import BlobServiceClient, ContainerClient
from azure.core.exceptions import (
    AzureError,
    ClientAuthenticationError,
    HttpResponseError,
    ResourceExistsError,
    ResourceNotFoundError,
)

from core.models import OperationResult, SignedDownloadLink
from exceptions import NotFoundError, TransportError
from util_logger import LoggerFactory, ComponentType

logger = LoggerFactory.create_logger(ComponentType.REPOSITORY, "BlobRepository")

PROVIDER = "blob_storage"
CONTAINER_ALREADY_EXISTS = "ContainerAlreadyExists"


# ============================================================================
# BLOB REPOSITORY INTERFACE
# ============================================================================

class IBlobRepository(ABC):
    """
    Interface for blob storage operations on a single container.

    Enables dependency injection and testing/mocking of blob operations.
    """

    @property
    @abstractmethod
    def container_name(self) -> str:
        pass

    @abstractmethod
    async def exists(self, key: str) -> bool:
        """Check if blob exists"""
        pass

    @abstractmethod
    async def upload(self, key: str, data: bytes,
                     content_type: str = "application/octet-stream") -> OperationResult[str]:
        """Store data under key, replacing any previous blob. Returns the blob URL."""
        pass

    @abstractmethod
    async def download(self, key: str) -> OperationResult[bytes]:
        """Read entire blob to memory"""
        pass

    @abstractmethod
    async def delete(self, key: str) -> OperationResult[bool]:
        """Delete a blob and its snapshots"""
        pass

    @abstractmethod
    async def generate_signed_link(self, key: str, hours: int = 1) -> SignedDownloadLink:
        """Read-only time-limited URL for key"""
        pass


# ============================================================================
# BLOB REPOSITORY IMPLEMENTATION
# ============================================================================

class BlobRepository(IBlobRepository):
    """
    Azure Blob Storage repository for one container.

    The service client is injected and shared; closing it is the owner's job
    (function_app keeps it for the process lifetime).
    """

    def __init__(self, blob_service: BlobServiceClient, container_name: str):
        self.blob_service = blob_service
        self._container_name = container_name
        self._container_client: Optional[ContainerClient] = None

    @property
    def container_name(self) -> str:
        return self._container_name

    @property
    def account_name(self) -> str:
        return self.blob_service.account_name

    def _get_container_client(self) -> ContainerClient:
        """Get or create the cached container client."""
        if self._container_client is None:
            self._container_client = self.blob_service.get_container_client(self._container_name)
            logger.debug(f"Created container client for: {self._container_name}")
        return self._container_client

    def _transport_error(self, operation: str, key: Optional[str], error: AzureError) -> TransportError:
        """Log a provider failure once and convert it to TransportError."""
        status_code = getattr(error, "status_code", None)
        error_code = getattr(error, "error_code", None)
        location = f"{self._container_name}/{key}" if key else self._container_name
        logger.error(
            f"Blob storage {operation} failed for {location}: "
            f"Status={status_code} ErrorCode={error_code} {error}",
            extra={'custom_dimensions': {
                'operation': operation,
                'container': self._container_name,
                'file_key': key,
                'status_code': status_code,
                'error_code': error_code,
            }}
        )
        return TransportError(
            f"Blob storage {operation} failed for {location}",
            provider=PROVIDER,
            status_code=status_code,
            error_code=str(error_code) if error_code is not None else None
        )

    # ========================================================================
    # CONTAINER OPERATIONS
    # ========================================================================

    async def container_exists(self) -> bool:
        try:
            return await self._get_container_client().exists()
        except AzureError as e:
            raise self._transport_error("container_exists", None, e) from e

    async def ensure_container(self) -> OperationResult[bool]:
        """
        Create the container if absent, with public read access on blobs.

        Access policy is only applied on creation; an existing container
        keeps whatever policy it has.

        Returns:
            ok(True) if created, ok(False) if it already existed,
            fail("Failed to create container") otherwise.

        Raises:
            TransportError: Authentication failure, throttling (429), 5xx or
                no response from the service
        """
        try:
            await self._get_container_client().create_container(public_access="blob")
            logger.info(f"Created container {self._container_name} with blob-level public access")
            return OperationResult.ok(True, "Container created")
        except ResourceExistsError as e:
            # Every 409 maps here, including ContainerBeingDeleted
            error_code = getattr(e, "error_code", None)
            if error_code == CONTAINER_ALREADY_EXISTS:
                return OperationResult.ok(False, "Container already exists")
            logger.error(
                f"Failed to create container {self._container_name}: "
                f"Status={getattr(e, 'status_code', None)} ErrorCode={error_code}"
            )
            return OperationResult.fail("Failed to create container")
        except ClientAuthenticationError as e:
            raise self._transport_error("create_container", None, e) from e
        except HttpResponseError as e:
            status_code = getattr(e, "status_code", None)
            if status_code is not None and (status_code == 429 or status_code >= 500):
                raise self._transport_error("create_container", None, e) from e
            logger.error(
                f"Failed to create container {self._container_name}: "
                f"Status={status_code} ErrorCode={getattr(e, 'error_code', None)}"
            )
            return OperationResult.fail("Failed to create container")
        except AzureError as e:
            raise self._transport_error("create_container", None, e) from e

    # ========================================================================
    # CORE BLOB OPERATIONS
    # ========================================================================

    async def exists(self, key: str) -> bool:
        try:
            return await self._get_container_client().get_blob_client(key).exists()
        except AzureError as e:
            raise self._transport_error("exists", key, e) from e

    async def upload(self, key: str, data: bytes,
                     content_type: str = "application/octet-stream") -> OperationResult[str]:
        """
        Store data under key.

        Steps: ensure container, delete any existing blob at key together
        with its snapshots, write with overwrite. Between the delete and the
        write the key briefly does not exist.

        Args:
            key: Blob name (already normalized)
            data: File content
            content_type: MIME type stored on the blob

        Returns:
            OperationResult with the blob URL on success

        Raises:
            TransportError: Provider failure during delete or write
        """
        created = await self.ensure_container()
        if not created.is_success:
            return OperationResult.fail(created.message)

        blob_client = self._get_container_client().get_blob_client(key)

        try:
            await blob_client.delete_blob(delete_snapshots="include")
            logger.debug(f"Removed previous blob and snapshots: {self._container_name}/{key}")
        except ResourceNotFoundError:
            pass
        except AzureError as e:
            raise self._transport_error("delete_previous", key, e) from e

        try:
            await blob_client.upload_blob(
                data,
                overwrite=True,
                content_settings=ContentSettings(content_type=content_type)
            )
        except AzureError as e:
            raise self._transport_error("upload", key, e) from e

        logger.info(f"✅ Wrote blob: {self._container_name}/{key} ({len(data)} bytes)")
        return OperationResult.ok(blob_client.url, "File uploaded successfully")

    async def download(self, key: str) -> OperationResult[bytes]:
        """
        Read a blob fully into memory.

        Raises:
            NotFoundError: No blob at key
            TransportError: Provider failure
        """
        if not await self.exists(key):
            logger.warning(f"Blob not found for download: {self._container_name}/{key}")
            raise NotFoundError(key, self._container_name)

        blob_client = self._get_container_client().get_blob_client(key)
        try:
            stream = await blob_client.download_blob()
            data = await stream.readall()
        except ResourceNotFoundError as e:
            # Deleted between the existence check and the read
            raise NotFoundError(key, self._container_name) from e
        except AzureError as e:
            raise self._transport_error("download", key, e) from e

        logger.debug(f"Read {len(data)} bytes from {self._container_name}/{key}")
        return OperationResult.ok(data, "File downloaded successfully")

    async def delete(self, key: str) -> OperationResult[bool]:
        """
        Delete a blob and its snapshots.

        Raises:
            NotFoundError: No blob at key
            TransportError: Provider failure
        """
        if not await self.exists(key):
            logger.warning(f"Blob not found for deletion: {self._container_name}/{key}")
            raise NotFoundError(key, self._container_name)

        blob_client = self._get_container_client().get_blob_client(key)
        try:
            await blob_client.delete_blob(delete_snapshots="include")
        except ResourceNotFoundError as e:
            raise NotFoundError(key, self._container_name) from e
        except AzureError as e:
            raise self._transport_error("delete", key, e) from e

        logger.info(f"Deleted blob: {self._container_name}/{key}")
        return OperationResult.ok(True, "File deleted successfully")

    # ========================================================================
    # SIGNED LINKS
    # ========================================================================

    async def generate_signed_link(self, key: str, hours: int = 1) -> SignedDownloadLink:
        """
        Generate a read-only SAS link for key.

        Signs with the account key when the service client was built from a
        connection string, otherwise requests a user delegation key (the
        identity needs 'Storage Blob Delegator').

        Args:
            key: Blob name
            hours: Validity in hours (default: 1)

        Raises:
            TransportError: User delegation key request failed
        """
        blob_client = self._get_container_client().get_blob_client(key)

        start_time = datetime.now(timezone.utc)
        expiry_time = start_time + timedelta(hours=hours)

        sas_kwargs = dict(
            account_name=self.account_name,
            container_name=self._container_name,
            blob_name=key,
            permission=BlobSasPermissions(read=True),
            expiry=expiry_time,
            start=start_time,
        )

        account_key = getattr(self.blob_service.credential, "account_key", None)
        if account_key:
            token = generate_blob_sas(account_key=account_key, **sas_kwargs)
        else:
            try:
                user_delegation_key = await self.blob_service.get_user_delegation_key(
                    key_start_time=start_time,
                    key_expiry_time=expiry_time
                )
            except AzureError as e:
                raise self._transport_error("get_user_delegation_key", key, e) from e
            token = generate_blob_sas(user_delegation_key=user_delegation_key, **sas_kwargs)

        logger.debug(f"Signed link generated for {self._container_name}/{key} (expires: {expiry_time.isoformat()})")
        return SignedDownloadLink(blob_uri=blob_client.url, token=token, expiry=expiry_time)


__all__ = ['BlobRepository', 'IBlobRepository']
