"""
Blob Created Trigger Handler.

Entry point for the blob trigger on the result container. Translates the
Functions InputStream into a blob name and hands it to BlobChangeListener.

The trigger never raises for notification problems: the listener isolates
them and this handler only logs the outcome. A failure here would make the
Functions host retry the blob and send duplicate notifications.

Usage:
    # In function_app.py:
    @app.blob_trigger(arg_name="blob", path=blob_created_handler.trigger_path,
                      connection="AzureWebJobsStorage")
    async def on_result_blob(blob: func.InputStream, context: func.Context) -> None:
        await blob_created_handler.handle(blob, context.invocation_id)

Exports:
    BlobCreatedHandler
"""

from typing import Optional

import azure.functions as func

from core.models import ListenerOutcome
from services.blob_listener import BlobChangeListener
from util_logger import LoggerFactory, ComponentType, LogContext, log_exceptions


class BlobCreatedHandler:
    """Blob trigger handler for processed result files."""

    name: str = "BlobCreated"

    def __init__(self, listener: BlobChangeListener, container_name: str):
        self.listener = listener
        self.container_name = container_name
        self.logger = LoggerFactory.create_logger(ComponentType.TRIGGER, self.name)

    @property
    def trigger_path(self) -> str:
        """Blob trigger binding path for the watched container, e.g. "download/{name}"."""
        return f"{self.container_name}/{{name}}"

    def blob_name_from_path(self, path: str) -> str:
        """'download/sub/file.csv' -> 'sub/file.csv' for the watched container."""
        prefix = f"{self.container_name}/"
        if path.startswith(prefix):
            return path[len(prefix):]
        return path

    @log_exceptions(ComponentType.TRIGGER, "BlobCreated")
    async def handle(self, blob: func.InputStream, invocation_id: Optional[str] = None) -> ListenerOutcome:
        blob_name = self.blob_name_from_path(blob.name)
        dims = {'custom_dimensions': LogContext(
            correlation_id=invocation_id,
            file_key=blob_name,
            container=self.container_name
        ).to_dict()}

        self.logger.info(f"📥 [{self.name}] Blob created: {blob.name} ({blob.length} bytes)", extra=dims)

        outcome = await self.listener.handle(blob_name, invocation_id=invocation_id)

        if outcome.skipped_reason:
            self.logger.warning(f"⚠️ [{self.name}] {blob_name}: {outcome.skipped_reason}", extra=dims)
        elif outcome.notified:
            self.logger.info(f"✅ [{self.name}] Notifications sent for {blob_name}", extra=dims)
        else:
            self.logger.warning(f"⚠️ [{self.name}] Notifications incomplete for {blob_name}", extra=dims)
        return outcome
