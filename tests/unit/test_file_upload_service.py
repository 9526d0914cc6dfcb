"""
FileUploadService tests.

Validation, key normalization, storage and event publication, including
the rule that a failed publication never fails the upload.
"""

import json
import logging
from datetime import datetime, timezone

import pytest
from azure.core.exceptions import HttpResponseError

from config import StorageConfig
from core.models import OperationResult, UploadEvent
from exceptions import PayloadTooLargeError, TransportError, ValidationError
from services.file_upload import FileUploadService
from tests.factories.azure_fakes import storage_error
from tests.factories.model_factories import random_csv_bytes, random_csv_name

FIXED_NOW = datetime(2024, 5, 1, 9, 30, 0, tzinfo=timezone.utc)


@pytest.fixture
def service(upload_repository, publisher, storage_config):
    return FileUploadService(upload_repository, publisher, storage_config)


class TestValidate:

    @pytest.mark.parametrize("name", [None, "", "   "])
    def test_missing_name(self, service, name):
        with pytest.raises(ValidationError, match="No file uploaded"):
            service.validate(name, b"a,b")

    @pytest.mark.parametrize("content", [None, b""])
    def test_empty_content(self, service, content):
        with pytest.raises(ValidationError, match="empty"):
            service.validate("a.csv", content)

    @pytest.mark.parametrize("name", ["notes.txt", "archive.csv.zip", "noextension"])
    def test_wrong_extension(self, service, name):
        with pytest.raises(ValidationError) as exc_info:
            service.validate(name, b"x")
        assert exc_info.value.status_code == 400

    def test_extension_case_insensitive(self, service):
        service.validate("DATA.CSV", b"x")

    def test_configured_extensions(self, upload_repository, publisher):
        config = StorageConfig(allowed_extensions=[".TSV", ".csv"])
        service = FileUploadService(upload_repository, publisher, config)
        service.validate("a.tsv", b"x")

    def test_size_cap(self, upload_repository, publisher):
        config = StorageConfig(max_upload_size_mb=1)
        service = FileUploadService(upload_repository, publisher, config)
        with pytest.raises(PayloadTooLargeError) as exc_info:
            service.validate("big.csv", b"x" * (1024 * 1024 + 1))
        assert exc_info.value.status_code == 413

    def test_exactly_at_cap_accepted(self, upload_repository, publisher):
        config = StorageConfig(max_upload_size_mb=1)
        service = FileUploadService(upload_repository, publisher, config)
        service.validate("big.csv", b"x" * (1024 * 1024))


class TestUpload:

    @pytest.mark.asyncio
    async def test_report_stored_under_normalized_key(self, service, blob_service):
        data = random_csv_bytes()
        result = await service.upload("My Report.csv", data, "text/csv", now=FIXED_NOW)

        assert result.is_success
        stored = result.data.stored
        assert stored.key == "20240501093000-my-report.csv"
        assert stored.raw_name == "My Report.csv"
        assert stored.size_bytes == len(data)
        assert stored.url == "https://teststorage.blob.core.windows.net/upload/20240501093000-my-report.csv"
        assert blob_service.containers["upload"][stored.key].data == data

    @pytest.mark.asyncio
    @pytest.mark.parametrize("client_name", [
        "C:\\fakepath\\My Report.csv",
        "exports/2024/My Report.csv",
    ])
    async def test_client_path_dropped_from_name_and_event(self, service, publisher, client_name):
        result = await service.upload(client_name, random_csv_bytes(), "text/csv", now=FIXED_NOW)

        stored = result.data.stored
        assert stored.raw_name == "My Report.csv"
        assert stored.key == "20240501093000-my-report.csv"
        event = publisher.publish.await_args.args[0]
        assert event.subject == "NewFileUploaded/My Report.csv"

    @pytest.mark.asyncio
    async def test_extension_checked_on_file_part_only(self, service, blob_service):
        with pytest.raises(ValidationError):
            await service.upload("reports.csv/notes.txt", b"x")
        assert blob_service.calls == []

    @pytest.mark.asyncio
    async def test_event_published_with_upload_details(self, service, publisher):
        raw_name = random_csv_name()
        result = await service.upload(raw_name, b"a,b\n", now=FIXED_NOW)

        publisher.publish.assert_awaited_once()
        event = publisher.publish.await_args.args[0]
        assert isinstance(event, UploadEvent)
        assert event.subject == f"NewFileUploaded/{raw_name}"
        assert event.data.file_name == result.data.stored.key
        assert event.data.file_url == result.data.stored.url

        wire = json.loads(event.to_wire())
        assert wire["eventType"] == "FileUploaded"
        assert wire["dataVersion"] == "1.0"
        assert set(wire["data"]) == {"fileName", "fileUrl"}

        assert result.data.event_published is True
        assert result.data.event_id == event.id

    @pytest.mark.asyncio
    async def test_octet_stream_replaced_by_guess(self, service, blob_service):
        result = await service.upload("a.csv", b"x", "application/octet-stream", now=FIXED_NOW)
        assert result.data.stored.content_type == "text/csv"

    @pytest.mark.asyncio
    async def test_wrong_extension_stores_and_publishes_nothing(self, service, blob_service, publisher):
        with pytest.raises(ValidationError):
            await service.upload("notes.txt", b"hello")
        assert blob_service.containers == {}
        publisher.publish.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_publish_exception_does_not_fail_upload(self, service, publisher, blob_service, caplog):
        publisher.publish.side_effect = TransportError("topic down", provider="service_bus")

        with caplog.at_level(logging.ERROR):
            result = await service.upload("My Report.csv", b"a,b", now=FIXED_NOW)

        assert result.is_success
        assert result.data.event_published is False
        assert "topic down" in result.data.publish_error
        assert result.data.stored.url.endswith("20240501093000-my-report.csv")
        assert "20240501093000-my-report.csv" in blob_service.containers["upload"]
        assert any("not published" in record.getMessage() for record in caplog.records)

    @pytest.mark.asyncio
    async def test_publish_failure_result_does_not_fail_upload(self, service, publisher):
        publisher.publish.side_effect = None
        publisher.publish.return_value = OperationResult.fail("Event batch exceeds Service Bus size limit")

        result = await service.upload("a.csv", b"x", now=FIXED_NOW)

        assert result.is_success
        assert result.data.event_published is False
        assert result.data.publish_error == "Event batch exceeds Service Bus size limit"

    @pytest.mark.asyncio
    async def test_storage_refusal_is_failed_result(self, service, blob_service, publisher):
        blob_service.failures["create_container"] = storage_error(
            HttpResponseError, "This request is not authorized.", "AuthorizationFailure", 403
        )

        result = await service.upload("a.csv", b"x")

        assert not result.is_success
        publisher.publish.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_storage_transport_error_propagates(self, service, blob_service, publisher):
        blob_service.failures["upload_blob"] = HttpResponseError("ServerBusy")

        with pytest.raises(TransportError):
            await service.upload("a.csv", b"x")
        publisher.publish.assert_not_awaited()
