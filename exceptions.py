"""
Custom Exception Hierarchy.

Distinguishes between:
1. Business Logic Failures (expected runtime issues: bad input, missing
   files, provider outages)
2. Configuration Errors (fatal, the app must not serve traffic)

HTTP triggers translate BusinessLogicError subclasses into status codes;
anything outside this hierarchy becomes a generic 500.

Exports:
    BusinessLogicError, ValidationError, PayloadTooLargeError,
    NotFoundError, TransportError, ConfigurationError
"""

from typing import Optional


class BusinessLogicError(Exception):
    """
    Base class for expected runtime business logic failures.

    These are normal failures that occur during system operation
    and should be handled gracefully without crashing.
    """
    pass


class ValidationError(BusinessLogicError):
    """
    Client input failed validation.

    Examples:
        - No file part in the upload form
        - Empty upload
        - Extension not on the accepted list
        - File name with no usable characters
    """

    status_code = 400

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        if status_code is not None:
            self.status_code = status_code


class PayloadTooLargeError(ValidationError):
    """Upload exceeds the configured size cap."""

    status_code = 413


class NotFoundError(BusinessLogicError):
    """
    Requested resource does not exist.

    Examples:
        - Download of a key that was never uploaded
        - Delete of a key that was already removed
    """

    def __init__(self, key: str, container: Optional[str] = None):
        self.key = key
        self.container = container
        location = f"{container}/{key}" if container else key
        super().__init__(f"File not found: {location}")


class TransportError(BusinessLogicError):
    """
    A remote provider (blob storage, Service Bus, email API, UI webhook)
    failed or could not be reached.

    Carries the provider status and error code when the provider returned
    one, so callers can log them without re-parsing the cause.
    """

    def __init__(
        self,
        message: str,
        provider: str,
        status_code: Optional[int] = None,
        error_code: Optional[str] = None
    ):
        super().__init__(message)
        self.provider = provider
        self.status_code = status_code
        self.error_code = error_code

    def __str__(self) -> str:
        base = super().__str__()
        details = []
        if self.status_code is not None:
            details.append(f"status={self.status_code}")
        if self.error_code:
            details.append(f"code={self.error_code}")
        if details:
            return f"{base} ({self.provider}: {', '.join(details)})"
        return f"{base} ({self.provider})"


class ConfigurationError(Exception):
    """
    System configuration error.

    These are fatal and indicate misconfiguration that prevents the
    system from operating.

    Examples:
        - Missing required environment variables
        - Unknown notification backend selector
        - Selected backend has no credentials
    """
    pass
