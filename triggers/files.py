"""
File Download and Delete HTTP Triggers.

Routes:
    GET    /api/files/{key}  raw bytes of a stored upload
    DELETE /api/files/{key}  remove a stored upload and its snapshots

Both answer 404 when nothing is stored under key.

Exports:
    FileDownloadTrigger, FileDeleteTrigger
"""

import mimetypes
from typing import Dict, Any, List

import azure.functions as func

from infrastructure.blob import IBlobRepository

from .http_base import BaseHttpTrigger


class FileDownloadTrigger(BaseHttpTrigger):
    """GET /api/files/{key}"""

    def __init__(self, repository: IBlobRepository):
        super().__init__("file_download")
        self.repository = repository

    def get_allowed_methods(self) -> List[str]:
        return ["GET"]

    async def process_request(self, req: func.HttpRequest, request_id: str) -> func.HttpResponse:
        key = self.extract_path_params(req, ["key"])["key"]
        result = await self.repository.download(key)

        return func.HttpResponse(
            body=result.data,
            status_code=200,
            mimetype=mimetypes.guess_type(key)[0] or "application/octet-stream",
            headers={
                "X-Request-ID": request_id,
                "Content-Disposition": f'attachment; filename="{key}"',
            }
        )


class FileDeleteTrigger(BaseHttpTrigger):
    """DELETE /api/files/{key}"""

    def __init__(self, repository: IBlobRepository):
        super().__init__("file_delete")
        self.repository = repository

    def get_allowed_methods(self) -> List[str]:
        return ["DELETE"]

    async def process_request(self, req: func.HttpRequest, request_id: str) -> Dict[str, Any]:
        key = self.extract_path_params(req, ["key"])["key"]
        result = await self.repository.delete(key)
        return {
            "deleted": bool(result.data),
            "fileName": key,
            "message": result.message,
        }
