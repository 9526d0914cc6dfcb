"""
HTTP Trigger Base Class.

Abstract base class for all Azure Functions HTTP triggers providing consistent
infrastructure patterns for request/response handling.

Error mapping:
    ValidationError      -> its status_code (400, 413 for PayloadTooLargeError)
    NotFoundError        -> 404
    anything else        -> 500 with a generic message (details only in logs)

Specialized Trigger Types:
    BaseHttpTrigger: Generic HTTP endpoint
    SystemMonitoringTrigger: Health and liveness

Exports:
    BaseHttpTrigger: Base class for HTTP triggers
    SystemMonitoringTrigger: Base class for monitoring
"""

from abc import ABC, abstractmethod
from typing import Dict, Any, Optional, Union, List
import inspect
import uuid
import json
from datetime import datetime, timezone

import azure.functions as func

from exceptions import NotFoundError, ValidationError
from util_logger import LoggerFactory, ComponentType, LogContext


class BaseHttpTrigger(ABC):
    """
    Abstract base class for Azure Functions HTTP triggers.

    Provides consistent infrastructure for HTTP request/response handling,
    parameter extraction, error handling, and logging patterns.
    """

    def __init__(self, trigger_name: str):
        """
        Initialize HTTP trigger with name for logging context.

        Args:
            trigger_name: Name of the trigger for logging (e.g., "file_upload", "health")
        """
        self.trigger_name = trigger_name
        self.logger = LoggerFactory.create_logger(ComponentType.TRIGGER, f"HttpTrigger.{trigger_name}")

    # ========================================================================
    # ABSTRACT METHODS - Must be implemented by concrete triggers
    # ========================================================================

    @abstractmethod
    async def process_request(
        self,
        req: func.HttpRequest,
        request_id: str
    ) -> Union[Dict[str, Any], func.HttpResponse]:
        """
        Process the HTTP request and return response data.

        Return a dict for a standard JSON 200 response, or a ready
        HttpResponse for anything else (binary bodies, custom status).

        Raises:
            ValidationError: For client errors (400/413)
            NotFoundError: For not found errors (404)
            Exception: For internal server errors (500)
        """
        pass

    @abstractmethod
    def get_allowed_methods(self) -> List[str]:
        """
        Return list of allowed HTTP methods for this trigger.
        """
        pass

    # ========================================================================
    # CONCRETE INFRASTRUCTURE METHODS
    # ========================================================================

    async def handle_request(self, req: func.HttpRequest) -> func.HttpResponse:
        """
        Main entry point for HTTP request handling.

        Provides consistent error handling, logging, and response formatting.

        Args:
            req: Azure Functions HTTP request object

        Returns:
            Azure Functions HTTP response
        """
        request_id = self._generate_request_id()
        dims = {'custom_dimensions': LogContext(request_id=request_id).to_dict()}

        self.logger.info(
            f"🌐 [{self.trigger_name}] Request {request_id} started: "
            f"{req.method} {req.url}",
            extra=dims
        )

        try:
            if req.method not in self.get_allowed_methods():
                return self._create_error_response(
                    error="Method not allowed",
                    message=f"Method {req.method} not allowed. Allowed: {', '.join(self.get_allowed_methods())}",
                    status_code=405,
                    request_id=request_id
                )

            response_data = await self.process_request(req, request_id)

            if isinstance(response_data, func.HttpResponse):
                response = response_data
            else:
                response = self._create_success_response(response_data, request_id)

            self.logger.info(
                f"✅ [{self.trigger_name}] Request {request_id} completed with {response.status_code}",
                extra=dims
            )
            return response

        except ValidationError as e:
            self.logger.warning(f"❌ [{self.trigger_name}] Client error: {e}", extra=dims)
            return self._create_error_response(
                error="Payload too large" if e.status_code == 413 else "Bad request",
                message=str(e),
                status_code=e.status_code,
                request_id=request_id
            )

        except NotFoundError as e:
            self.logger.info(f"🔍 [{self.trigger_name}] Not found: {e}", extra=dims)
            return self._create_error_response(
                error="Not found",
                message=str(e),
                status_code=404,
                request_id=request_id
            )

        except Exception as e:
            # Provider details stay in the logs
            self.logger.error(f"💥 [{self.trigger_name}] Internal error: {e}", exc_info=True, extra=dims)
            return self._create_error_response(
                error="Internal server error",
                message="An unexpected error occurred while processing the request",
                status_code=500,
                request_id=request_id
            )

    # ========================================================================
    # UTILITY METHODS FOR SUBCLASSES
    # ========================================================================

    def extract_path_params(self, req: func.HttpRequest, required_params: List[str]) -> Dict[str, str]:
        """
        Extract and validate path parameters.

        Raises:
            ValidationError: If required parameters are missing
        """
        params = {}
        missing_params = []

        for param_name in required_params:
            value = req.route_params.get(param_name)
            if not value:
                missing_params.append(param_name)
            else:
                params[param_name] = value

        if missing_params:
            raise ValidationError(f"Missing required path parameters: {', '.join(missing_params)}")

        return params

    # ========================================================================
    # PRIVATE INFRASTRUCTURE METHODS
    # ========================================================================

    def _generate_request_id(self) -> str:
        """Generate unique request ID for tracing."""
        return str(uuid.uuid4())[:8]

    def _create_success_response(self, data: Dict[str, Any], request_id: str) -> func.HttpResponse:
        """Create standardized success response."""
        response_data = {
            **data,
            "request_id": request_id,
            "timestamp": datetime.now(timezone.utc).isoformat()
        }

        return func.HttpResponse(
            json.dumps(response_data, default=str),
            status_code=200,
            mimetype="application/json",
            headers={"X-Request-ID": request_id}
        )

    def _create_error_response(self, error: str, message: str, status_code: int,
                               request_id: str) -> func.HttpResponse:
        """Create standardized error response."""
        response_data = {
            "error": error,
            "message": message,
            "request_id": request_id,
            "timestamp": datetime.now(timezone.utc).isoformat()
        }

        return func.HttpResponse(
            json.dumps(response_data),
            status_code=status_code,
            mimetype="application/json",
            headers={"X-Request-ID": request_id}
        )


# ============================================================================
# SPECIALIZED BASE CLASSES FOR COMMON PATTERNS
# ============================================================================

class SystemMonitoringTrigger(BaseHttpTrigger):
    """Base class for system monitoring triggers (health, liveness)."""

    def get_system_timestamp(self) -> str:
        """Get standardized system timestamp."""
        return datetime.now(timezone.utc).isoformat()

    async def check_component_health(
        self,
        component_name: str,
        check_function,
        description: Optional[str] = None
    ) -> Dict[str, Any]:
        """
        Standard pattern for checking component health.

        check_function may be sync or async. Status determination:
        1. If check_function raises exception -> "unhealthy"
        2. If result contains "_status" key -> use that value
        3. If result contains "error" key with truthy value -> "unhealthy"
        4. If result contains "exists": False -> "unhealthy"
        5. Otherwise -> "healthy"

        Returns:
            Health check result dictionary with component, description, status, details
        """
        try:
            result = check_function()
            if inspect.isawaitable(result):
                result = await result

            if isinstance(result, dict):
                if "_status" in result:
                    status = result.pop("_status")
                elif result.get("error"):
                    status = "unhealthy"
                elif result.get("exists") is False:
                    status = "unhealthy"
                else:
                    status = "healthy"
            else:
                status = "healthy"

            return {
                "component": component_name,
                "description": description or f"{component_name} health check",
                "status": status,
                "details": result,
                "checked_at": self.get_system_timestamp()
            }
        except Exception as e:
            self.logger.warning(f"Health check for {component_name} failed: {e}")
            return {
                "component": component_name,
                "description": description or f"{component_name} health check",
                "status": "unhealthy",
                "error": str(e),
                "checked_at": self.get_system_timestamp()
            }
