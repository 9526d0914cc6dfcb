"""
Unit test fixtures: in-memory blob storage and a mocked event publisher.
"""

from unittest.mock import AsyncMock

import pytest

from config import NotificationConfig, StorageConfig
from core.models import OperationResult, PublishAck
from infrastructure.blob import BlobRepository
from infrastructure.event_publisher import IEventPublisher
from tests.factories.azure_fakes import FakeBlobServiceClient
from tests.factories.model_factories import make_notification_config


@pytest.fixture
def blob_service():
    """Fake aio BlobServiceClient with an account key."""
    return FakeBlobServiceClient()


@pytest.fixture
def upload_repository(blob_service):
    return BlobRepository(blob_service, "upload")


@pytest.fixture
def result_repository(blob_service):
    return BlobRepository(blob_service, "download")


@pytest.fixture
def storage_config():
    return StorageConfig(account_name="teststorage")


@pytest.fixture
def publisher():
    """IEventPublisher mock that acknowledges every event."""
    mock = AsyncMock(spec=IEventPublisher)

    async def _publish(event):
        return OperationResult.ok(
            PublishAck(topic="file-uploaded", message_count=1, message_ids=[event.id]),
            "Event published"
        )

    mock.publish.side_effect = _publish
    return mock


@pytest.fixture
def notification_config():
    return NotificationConfig(**make_notification_config("sendgrid"))
