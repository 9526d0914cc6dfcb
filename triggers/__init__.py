"""
Triggers Package.

Azure Functions HTTP and blob trigger implementations.

HTTP Endpoints:
    POST   /api/files/upload: Upload a file
    GET    /api/files/{key}: Download a stored upload
    DELETE /api/files/{key}: Delete a stored upload
    GET    /api/health: Component health
    GET    /api/livez: Liveness

Blob Triggers:
    {result container}/{name}: Notify on processed results

Exports:
    Base classes only; trigger instances are built in function_app.py
"""

# Only import base classes to avoid initialization at import time
from .http_base import BaseHttpTrigger, SystemMonitoringTrigger

__all__ = [
    'BaseHttpTrigger',
    'SystemMonitoringTrigger',
]
