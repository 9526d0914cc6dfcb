"""
Lightweight Liveness Check HTTP Trigger.

Fast endpoint for load balancer health checks. Returns a minimal response
to verify the Function App process is running.

This endpoint has no external dependencies: no storage, Service Bus or
email checks, no config validation. For component status use /api/health.

Exports:
    LivenessCheckTrigger: Liveness check trigger class
    livez_trigger: Singleton trigger instance
"""

from typing import Dict, Any, List

import azure.functions as func

from .http_base import SystemMonitoringTrigger


class LivenessCheckTrigger(SystemMonitoringTrigger):
    """Ultra-lightweight liveness check - no external dependencies."""

    def __init__(self):
        super().__init__("livez")

    def get_allowed_methods(self) -> List[str]:
        """Liveness check only supports GET."""
        return ["GET"]

    async def process_request(self, req: func.HttpRequest, request_id: str) -> Dict[str, Any]:
        return {"status": "alive"}


# Singleton instance
livez_trigger = LivenessCheckTrigger()
