"""
UI Notification Webhook Client.

Tells the UI microservice that a processed file is ready by POSTing
{"DownloadUrl": ..., "FileName": ...} to UI_NOTIFICATION_ENDPOINT.

The httpx.AsyncClient is injected so one connection pool serves the whole
process; when none is given the client creates and owns its own.

Usage:
    client = UINotificationClient("https://ui.example.com/api/notify")
    result = await client.notify(link.url, "20240501093000-report.csv")
    if not result.success:
        logger.warning(result.message)
"""

from typing import Optional

import httpx

from core.models import DeliveryChannel, DeliveryResult
from exceptions import TransportError
from util_logger import LoggerFactory, ComponentType

logger = LoggerFactory.create_logger(ComponentType.ADAPTER, "UINotificationClient")

PROVIDER = "webhook"


class UINotificationClient:
    """
    Client for the UI microservice notification endpoint.

    A non-2xx answer is a failed delivery (returned); a request that never
    got an answer is a TransportError (raised). Failures are not logged
    here; the caller logs them with its correlation context.
    """

    def __init__(
        self,
        endpoint: str,
        http_client: Optional[httpx.AsyncClient] = None,
        timeout: float = 30.0
    ):
        self.endpoint = endpoint
        self.timeout = timeout
        self._client = http_client
        self._owns_client = http_client is None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create async HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(timeout=httpx.Timeout(self.timeout))
            self._owns_client = True
        return self._client

    async def close(self):
        """Close the HTTP client if this instance created it."""
        if self._owns_client and self._client and not self._client.is_closed:
            await self._client.aclose()

    async def notify(self, download_url: str, file_name: str) -> DeliveryResult:
        """
        POST the download link to the UI microservice.

        Args:
            download_url: Signed read-only URL
            file_name: Blob name the link points at

        Returns:
            DeliveryResult (success for any 2xx)

        Raises:
            TransportError: Timeout or connection failure
        """
        client = await self._get_client()
        payload = {"DownloadUrl": download_url, "FileName": file_name}

        try:
            response = await client.post(self.endpoint, json=payload)
        except httpx.TimeoutException as e:
            raise TransportError(
                f"UI webhook timeout after {self.timeout}s",
                provider=PROVIDER,
                status_code=504
            ) from e
        except httpx.RequestError as e:
            raise TransportError(
                f"UI webhook request error: {e}",
                provider=PROVIDER
            ) from e

        if response.is_success:
            logger.debug(f"UI webhook accepted {file_name} (status {response.status_code})")
            return DeliveryResult(
                channel=DeliveryChannel.UI,
                provider=PROVIDER,
                success=True,
                status_code=response.status_code,
                message="UI notified",
            )

        return DeliveryResult(
            channel=DeliveryChannel.UI,
            provider=PROVIDER,
            success=False,
            status_code=response.status_code,
            message=f"UI webhook returned {response.status_code}: {response.text[:200]}",
        )


__all__ = ['UINotificationClient']
