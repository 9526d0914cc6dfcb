"""
Health Check HTTP Trigger.

System health monitoring endpoint for GET /api/health.

Components Monitored:
    - Upload container reachability
    - Result container reachability
    - Notification backend (selected provider, credentials present)
    - UI webhook (configured or disabled)
    - Environment variable validation

Returns 200 when every component is healthy, 503 otherwise.

Exports:
    HealthCheckTrigger: Health check trigger class
"""

from typing import Dict, Any, List, Optional
import json
import sys

import azure.functions as func

from config import debug_config, get_config
from config.env_validation import get_validation_summary
from infrastructure.blob import BlobRepository
from infrastructure.webhook_client import UINotificationClient
from services.notifications import EmailNotificationService

from .http_base import SystemMonitoringTrigger


class HealthCheckTrigger(SystemMonitoringTrigger):
    """Health check HTTP trigger implementation."""

    def __init__(
        self,
        upload_repository: BlobRepository,
        result_repository: BlobRepository,
        email_service: EmailNotificationService,
        ui_client: Optional[UINotificationClient] = None
    ):
        super().__init__("health_check")
        self.upload_repository = upload_repository
        self.result_repository = result_repository
        self.email_service = email_service
        self.ui_client = ui_client

    def get_allowed_methods(self) -> List[str]:
        """Health check only supports GET."""
        return ["GET"]

    async def process_request(self, req: func.HttpRequest, request_id: str) -> func.HttpResponse:
        """
        Perform health check.

        Returns:
            200 with component details when healthy, 503 when any component is unhealthy
        """
        config = get_config()
        health_data = {
            "status": "healthy",
            "components": {},
            "environment": {
                "environment": config.environment,
                "python_version": sys.version.split()[0],
                "function_runtime": "python",
            },
            "errors": [],
        }

        checks = {
            "upload_container": await self.check_component_health(
                "upload_container",
                lambda: self._check_container(self.upload_repository),
                "Container receiving client uploads"
            ),
            "result_container": await self.check_component_health(
                "result_container",
                lambda: self._check_container(self.result_repository),
                "Container watched by the blob trigger"
            ),
            "notifications": await self.check_component_health(
                "notifications",
                self._check_notifications,
                "Email backend selected by NOTIFICATION_BACKEND"
            ),
            "ui_webhook": await self.check_component_health(
                "ui_webhook",
                self._check_ui_webhook,
                "UI microservice notification endpoint"
            ),
            "environment_variables": await self.check_component_health(
                "environment_variables",
                self._check_environment,
                "Startup environment validation"
            ),
        }

        for name, result in checks.items():
            health_data["components"][name] = result
            if result["status"] == "unhealthy":
                health_data["status"] = "unhealthy"
                health_data["errors"].append(f"{name} unhealthy")

        if config.debug_mode:
            health_data["config"] = debug_config()

        status_code = 200 if health_data["status"] == "healthy" else 503
        response_data = {
            **health_data,
            "request_id": request_id,
            "timestamp": self.get_system_timestamp(),
        }

        return func.HttpResponse(
            json.dumps(response_data, default=str),
            status_code=status_code,
            mimetype="application/json",
            headers={
                "X-Request-ID": request_id,
                "Cache-Control": "no-cache, no-store, must-revalidate"
            }
        )

    async def _check_container(self, repository: BlobRepository) -> Dict[str, Any]:
        exists = await repository.container_exists()
        details = {"container": repository.container_name, "exists": exists}
        if not exists:
            # Upload container is created lazily on first upload
            details["_status"] = "degraded"
        return details

    def _check_notifications(self) -> Dict[str, Any]:
        notifications = get_config().notifications
        missing = notifications.missing_credentials()
        return {
            "backend": notifications.backend,
            "provider": self.email_service.provider,
            "recipient_count": len(notifications.recipients),
            "missing_credentials": missing,
            "error": f"Missing: {', '.join(missing)}" if missing else None,
        }

    def _check_ui_webhook(self) -> Dict[str, Any]:
        if self.ui_client is None:
            return {"_status": "disabled", "configured": False}
        return {"configured": True, "endpoint": self.ui_client.endpoint}

    def _check_environment(self) -> Dict[str, Any]:
        summary = get_validation_summary(include_warnings=True)
        if not summary["valid"]:
            summary["error"] = f"{summary['error_count']} environment variable error(s)"
        return summary
