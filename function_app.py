"""
Azure Functions entry point for the upload-to-notification pipeline.

Architecture:
    client --POST--> FileUploadTrigger -> FileUploadService -> BlobRepository (upload)
                                                   |
                                                   +--> ServiceBusEventPublisher (FileUploaded)
                                                              |
                                          (external data-processing pipeline)
                                                              |
    result blob --blob trigger--> BlobCreatedHandler -> BlobChangeListener
                                                          |-- signed link (BlobRepository, result)
                                                          |-- EmailNotificationService (smtp|sendgrid|ses)
                                                          +-- UINotificationClient (webhook)

Long-lived clients (BlobServiceClient, ServiceBusClient, httpx.AsyncClient,
the email backend) are built once here at module load and injected into the
services. Startup validation runs first so a misconfigured app never serves
traffic.

Exports:
    app: Azure Function App instance

Endpoints:
    POST   /api/files/upload - Upload a file (multipart/form-data, field "file")
    GET    /api/files/{key} - Download a stored upload
    DELETE /api/files/{key} - Delete a stored upload
    GET    /api/health - Component health
    GET    /api/livez - Liveness probe

Blob Triggers:
    {RESULT_CONTAINER_NAME}/{name} on AzureWebJobsStorage (path built from the
    loaded config, so the container default applies to the binding too)
"""

# ========================================================================
# IMPORTS - Categorized by source for maintainability
# ========================================================================

# Native Python modules
import logging

# Azure SDK modules (3rd party - Microsoft)
import azure.functions as func
import httpx

# Suppress Azure Identity and Azure SDK authentication/HTTP logging
logging.getLogger("azure.identity").setLevel(logging.WARNING)
logging.getLogger("azure.identity._internal").setLevel(logging.WARNING)
logging.getLogger("azure.core.pipeline.policies.http_logging_policy").setLevel(logging.WARNING)
logging.getLogger("azure.storage").setLevel(logging.WARNING)
logging.getLogger("azure.servicebus").setLevel(logging.WARNING)
logging.getLogger("azure.core").setLevel(logging.WARNING)
logging.getLogger("uamqp").setLevel(logging.WARNING)
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("botocore").setLevel(logging.WARNING)
logging.getLogger("msal").setLevel(logging.WARNING)

# ========================================================================
# STARTUP VALIDATION - Fail-fast on missing or malformed configuration
# ========================================================================

from util_logger import LoggerFactory, ComponentType
from config.env_validation import ensure_startup_ready

logger = LoggerFactory.create_logger(ComponentType.TRIGGER, "function_app")

ensure_startup_ready(LoggerFactory.create_logger(ComponentType.VALIDATOR, "env_validation"))

# ========================================================================
# APPLICATION IMPORTS - Our modules (validated at startup)
# ========================================================================

from config import get_config
from infrastructure import RepositoryFactory
from services import BlobChangeListener, FileUploadService
from services.notifications import create_notification_service
from triggers.blob_created import BlobCreatedHandler
from triggers.files import FileDeleteTrigger, FileDownloadTrigger
from triggers.health import HealthCheckTrigger
from triggers.livez import livez_trigger
from triggers.storage_upload import FileUploadTrigger

# ========================================================================
# SHARED CLIENTS AND SERVICES - Built once per worker process
# ========================================================================

config = get_config()

http_client = httpx.AsyncClient(timeout=httpx.Timeout(config.notifications.http_timeout_seconds))

blob_service = RepositoryFactory.create_blob_service(config.storage)
upload_repository = RepositoryFactory.create_blob_repository(blob_service, config.storage.upload_container)
result_repository = RepositoryFactory.create_blob_repository(blob_service, config.storage.result_container)
event_publisher = RepositoryFactory.create_event_publisher(config.events)
ui_client = RepositoryFactory.create_ui_client(config.notifications, http_client)

email_service = create_notification_service(
    config.notifications,
    link_hours=config.storage.sas_expiry_hours,
    http_client=http_client
)

upload_service = FileUploadService(upload_repository, event_publisher, config.storage)
blob_listener = BlobChangeListener(
    result_repository,
    email_service,
    config.notifications.recipients,
    ui_client=ui_client,
    link_hours=config.storage.sas_expiry_hours
)

file_upload_trigger = FileUploadTrigger(upload_service)
file_download_trigger = FileDownloadTrigger(upload_repository)
file_delete_trigger = FileDeleteTrigger(upload_repository)
health_check_trigger = HealthCheckTrigger(upload_repository, result_repository, email_service, ui_client)
blob_created_handler = BlobCreatedHandler(blob_listener, config.storage.result_container)

logger.info(
    f"✅ Pipeline initialized: upload={config.storage.upload_container} "
    f"result={config.storage.result_container} topic={config.events.topic_name} "
    f"email={email_service.provider} ui_webhook={'on' if ui_client else 'off'}"
)

# Initialize function app with HTTP auth level
app = func.FunctionApp(http_auth_level=func.AuthLevel.ANONYMOUS)


# ============================================================================
# FILE ENDPOINTS
# ============================================================================

@app.route(route="files/upload", methods=["POST"])
async def upload_file(req: func.HttpRequest) -> func.HttpResponse:
    """Upload a file, store it and publish the FileUploaded event."""
    return await file_upload_trigger.handle_request(req)


@app.route(route="files/{key}", methods=["GET"])
async def download_file(req: func.HttpRequest) -> func.HttpResponse:
    """Download a stored upload by key."""
    return await file_download_trigger.handle_request(req)


@app.route(route="files/{key}", methods=["DELETE"])
async def delete_file(req: func.HttpRequest) -> func.HttpResponse:
    """Delete a stored upload by key."""
    return await file_delete_trigger.handle_request(req)


# ============================================================================
# MONITORING
# ============================================================================

@app.route(route="health", methods=["GET"])
async def health(req: func.HttpRequest) -> func.HttpResponse:
    """Health check endpoint using HTTP trigger base class."""
    return await health_check_trigger.handle_request(req)


@app.route(route="livez", methods=["GET"], auth_level=func.AuthLevel.ANONYMOUS)
async def livez(req: func.HttpRequest) -> func.HttpResponse:
    """Liveness probe - is the app alive? No dependencies checked."""
    return await livez_trigger.handle_request(req)


# ============================================================================
# BLOB TRIGGER - Processed results
# ============================================================================

@app.blob_trigger(
    arg_name="blob",
    path=blob_created_handler.trigger_path,
    connection="AzureWebJobsStorage"
)
async def on_result_blob(blob: func.InputStream, context: func.Context) -> None:
    """Notify email recipients and the UI that a processed file is ready."""
    await blob_created_handler.handle(blob, context.invocation_id)
