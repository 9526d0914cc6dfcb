"""
Blob Storage Configuration.

Provides configuration for:
    - Storage authentication (connection string or managed identity)
    - Upload and result container names
    - Upload validation limits (extensions, size)
    - Signed download link lifetime

Authentication:
    AZURE_STORAGE_CONNECTION_STRING (or the Functions host's
    AzureWebJobsStorage) authenticates with the account key. When neither is
    set, STORAGE_ACCOUNT_NAME is used with DefaultAzureCredential.

Exports:
    StorageConfig: Pydantic storage configuration model
"""

import os
from typing import List, Optional
from pydantic import BaseModel, Field, field_validator

from .defaults import StorageDefaults


def _parse_extensions(raw: Optional[str]) -> List[str]:
    """'.csv, TSV' -> ['.csv', '.tsv']"""
    if not raw:
        return list(StorageDefaults.ALLOWED_EXTENSIONS)
    extensions = []
    for item in raw.split(","):
        item = item.strip().lower()
        if not item:
            continue
        extensions.append(item if item.startswith(".") else f".{item}")
    return extensions or list(StorageDefaults.ALLOWED_EXTENSIONS)


class StorageConfig(BaseModel):
    """
    Blob storage configuration.

    Exactly one of connection_string / account_name is needed. When both are
    present the connection string wins.
    """

    connection_string: Optional[str] = Field(
        default=None,
        repr=False,
        description="Storage connection string (AZURE_STORAGE_CONNECTION_STRING or AzureWebJobsStorage)"
    )

    account_name: Optional[str] = Field(
        default=None,
        description="Storage account name for DefaultAzureCredential auth"
    )

    upload_container: str = Field(
        default=StorageDefaults.UPLOAD_CONTAINER,
        description="Container receiving client uploads"
    )

    result_container: str = Field(
        default=StorageDefaults.RESULT_CONTAINER,
        description="Container watched by the blob trigger for processed output"
    )

    allowed_extensions: List[str] = Field(
        default_factory=lambda: list(StorageDefaults.ALLOWED_EXTENSIONS),
        description="Accepted upload extensions, lower-case with leading dot"
    )

    max_upload_size_mb: int = Field(
        default=StorageDefaults.MAX_UPLOAD_SIZE_MB,
        ge=1,
        description="Largest accepted upload in megabytes"
    )

    sas_expiry_hours: int = Field(
        default=StorageDefaults.SAS_EXPIRY_HOURS,
        ge=1,
        le=168,
        description="Lifetime of signed download links in hours"
    )

    @field_validator("allowed_extensions")
    @classmethod
    def _lower_extensions(cls, value: List[str]) -> List[str]:
        return [ext.lower() for ext in value]

    @property
    def max_upload_bytes(self) -> int:
        return self.max_upload_size_mb * 1024 * 1024

    @property
    def account_url(self) -> Optional[str]:
        if not self.account_name:
            return None
        return f"https://{self.account_name}.blob.core.windows.net"

    @property
    def auth_mode(self) -> str:
        if self.connection_string:
            return "connection_string"
        if self.account_name:
            return "managed_identity"
        return "unconfigured"

    @classmethod
    def from_environment(cls):
        """Load from environment variables."""
        return cls(
            connection_string=(
                os.environ.get("AZURE_STORAGE_CONNECTION_STRING")
                or os.environ.get("AzureWebJobsStorage")
            ),
            account_name=os.environ.get("STORAGE_ACCOUNT_NAME"),
            upload_container=os.environ.get("UPLOAD_CONTAINER_NAME", StorageDefaults.UPLOAD_CONTAINER),
            result_container=os.environ.get("RESULT_CONTAINER_NAME", StorageDefaults.RESULT_CONTAINER),
            allowed_extensions=_parse_extensions(os.environ.get("ALLOWED_UPLOAD_EXTENSIONS")),
            max_upload_size_mb=int(os.environ.get("MAX_UPLOAD_SIZE_MB", str(StorageDefaults.MAX_UPLOAD_SIZE_MB))),
            sas_expiry_hours=int(os.environ.get("SAS_EXPIRY_HOURS", str(StorageDefaults.SAS_EXPIRY_HOURS))),
        )
