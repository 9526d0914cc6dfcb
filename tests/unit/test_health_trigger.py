"""
Health and liveness trigger tests.
"""

import json
from unittest.mock import MagicMock

import azure.functions as func
import pytest
from azure.core.exceptions import ServiceRequestError

from infrastructure.webhook_client import UINotificationClient
from triggers.health import HealthCheckTrigger


def _get(route: str = "health") -> func.HttpRequest:
    return func.HttpRequest(method="GET", url=f"http://localhost/api/{route}", headers={}, body=b"")


def _email_service(provider: str = "sendgrid"):
    service = MagicMock()
    service.provider = provider
    return service


@pytest.fixture
def health_trigger(blob_service, upload_repository, result_repository):
    blob_service.containers["upload"] = {}
    blob_service.containers["download"] = {}
    return HealthCheckTrigger(upload_repository, result_repository, _email_service())


class TestHealthCheckTrigger:

    @pytest.mark.asyncio
    async def test_all_healthy(self, health_trigger):
        response = await health_trigger.handle_request(_get())
        body = json.loads(response.get_body())

        assert response.status_code == 200
        assert body["status"] == "healthy"
        assert body["components"]["upload_container"]["status"] == "healthy"
        assert body["components"]["ui_webhook"]["status"] == "disabled"
        assert body["components"]["notifications"]["details"]["provider"] == "sendgrid"
        assert response.headers["Cache-Control"].startswith("no-cache")

    @pytest.mark.asyncio
    async def test_missing_upload_container_is_degraded(self, health_trigger, blob_service):
        del blob_service.containers["upload"]
        response = await health_trigger.handle_request(_get())
        body = json.loads(response.get_body())

        assert response.status_code == 200
        assert body["components"]["upload_container"]["status"] == "degraded"

    @pytest.mark.asyncio
    async def test_unreachable_storage_503(self, health_trigger, blob_service):
        blob_service.failures["container_exists"] = ServiceRequestError("connection refused")
        response = await health_trigger.handle_request(_get())
        body = json.loads(response.get_body())

        assert response.status_code == 503
        assert body["status"] == "unhealthy"
        assert "result_container unhealthy" in body["errors"]

    @pytest.mark.asyncio
    async def test_missing_backend_credentials_503(self, health_trigger, monkeypatch):
        monkeypatch.delenv("SENDGRID_API_KEY", raising=False)
        response = await health_trigger.handle_request(_get())
        body = json.loads(response.get_body())

        assert response.status_code == 503
        notifications = body["components"]["notifications"]
        assert notifications["status"] == "unhealthy"
        assert notifications["details"]["missing_credentials"] == ["SENDGRID_API_KEY"]

    @pytest.mark.asyncio
    async def test_ui_webhook_reported(self, blob_service, upload_repository, result_repository):
        blob_service.containers["upload"] = {}
        blob_service.containers["download"] = {}
        trigger = HealthCheckTrigger(
            upload_repository, result_repository, _email_service(),
            ui_client=UINotificationClient("https://ui.example.com/notify"),
        )
        body = json.loads((await trigger.handle_request(_get())).get_body())
        assert body["components"]["ui_webhook"]["details"]["endpoint"] == "https://ui.example.com/notify"

    @pytest.mark.asyncio
    async def test_post_not_allowed(self, health_trigger):
        req = func.HttpRequest(method="POST", url="http://localhost/api/health", headers={}, body=b"")
        response = await health_trigger.handle_request(req)
        assert response.status_code == 405
