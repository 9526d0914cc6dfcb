"""
Repository Factory - Central Creation Point

Builds the long-lived clients the function app shares across invocations:

- aio BlobServiceClient (connection string or DefaultAzureCredential)
- BlobRepository per container (upload, result)
- ServiceBusEventPublisher for the upload event topic
- UINotificationClient when a UI webhook is configured

All methods are static; function_app calls them once at import time.
"""

from typing import Optional

import httpx
from azure.identity.aio import DefaultAzureCredential
from azure.storage.blob.aio import BlobServiceClient

from config import EventConfig, NotificationConfig, StorageConfig
from exceptions import ConfigurationError
from util_logger import LoggerFactory, ComponentType

from .blob import BlobRepository
from .event_publisher import ServiceBusEventPublisher
from .webhook_client import UINotificationClient

logger = LoggerFactory.create_logger(ComponentType.FACTORY, "RepositoryFactory")


class RepositoryFactory:
    """
    Factory for creating repository and client instances.
    """

    @staticmethod
    def create_blob_service(storage_config: StorageConfig) -> BlobServiceClient:
        """
        Create the shared async blob service client.

        Connection string (account key) wins over managed identity.

        Raises:
            ConfigurationError: Neither a connection string nor an account name
        """
        if storage_config.connection_string:
            logger.info("🏭 Creating BlobServiceClient from connection string")
            return BlobServiceClient.from_connection_string(storage_config.connection_string)

        if storage_config.account_url:
            logger.info(f"🏭 Creating BlobServiceClient with DefaultAzureCredential for {storage_config.account_url}")
            return BlobServiceClient(
                account_url=storage_config.account_url,
                credential=DefaultAzureCredential()
            )

        raise ConfigurationError(
            "Blob storage not configured: set AZURE_STORAGE_CONNECTION_STRING, "
            "AzureWebJobsStorage or STORAGE_ACCOUNT_NAME"
        )

    @staticmethod
    def create_blob_repository(blob_service: BlobServiceClient, container_name: str) -> BlobRepository:
        """Create a repository bound to one container."""
        logger.debug(f"📦 Creating BlobRepository for container: {container_name}")
        return BlobRepository(blob_service, container_name)

    @staticmethod
    def create_event_publisher(event_config: EventConfig) -> ServiceBusEventPublisher:
        """
        Create the upload event publisher.

        Raises:
            ConfigurationError: Topic connection not configured
        """
        logger.debug(f"📦 Creating ServiceBusEventPublisher for topic: {event_config.topic_name}")
        return ServiceBusEventPublisher.from_config(event_config)

    @staticmethod
    def create_ui_client(
        notification_config: NotificationConfig,
        http_client: Optional[httpx.AsyncClient] = None
    ) -> Optional[UINotificationClient]:
        """
        Create the UI webhook client, or None when UI_NOTIFICATION_ENDPOINT is unset.
        """
        if not notification_config.ui_webhook_url:
            logger.info("UI_NOTIFICATION_ENDPOINT not set, UI notifications disabled")
            return None
        return UINotificationClient(
            notification_config.ui_webhook_url,
            http_client=http_client,
            timeout=notification_config.http_timeout_seconds
        )


__all__ = ['RepositoryFactory']
