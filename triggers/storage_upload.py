"""
File Upload HTTP Trigger.

Route: POST /api/files/upload

Accepts multipart/form-data with a single file field. The file is
validated, stored under a normalized key in the upload container and a
FileUploaded event is published for the downstream pipeline.

Responses:
    200 {fileUrl, fileName, message, eventPublished, request_id, timestamp}
    400 missing/empty file, wrong extension, not multipart
    413 over the size cap
    500 storage failure (generic message)

Example Usage:
    curl -X POST "https://{app-url}/api/files/upload" \\
        -F "file=@My Report.csv"

Exports:
    FileUploadTrigger
"""

import re
from typing import Dict, Any, List, Tuple, Optional

import azure.functions as func

from exceptions import ValidationError
from services.file_upload import FileUploadService

from .http_base import BaseHttpTrigger


def _parse_multipart(req: func.HttpRequest) -> Tuple[Optional[bytes], Dict[str, str]]:
    """
    Parse multipart/form-data from Azure Functions request.

    Boundary-based parsing; the first part carrying a filename is the file.

    Returns:
        Tuple of (file_data, form_fields) where form_fields contains
        filename and content_type

    Raises:
        ValidationError: Not multipart, or no boundary
    """
    content_type = req.headers.get("Content-Type", "")

    if "multipart/form-data" not in content_type:
        raise ValidationError("Content-Type must be multipart/form-data")

    # Format: multipart/form-data; boundary=----WebKitFormBoundary...
    boundary = None
    for part in content_type.split(";"):
        part = part.strip()
        if part.startswith("boundary="):
            boundary = part[9:]
            if boundary.startswith('"') and boundary.endswith('"'):
                boundary = boundary[1:-1]
            break

    if not boundary:
        raise ValidationError("Could not extract boundary from Content-Type")

    body = req.get_body()

    # Each part is separated by --boundary, with --boundary-- at the end
    boundary_bytes = ("--" + boundary).encode("utf-8")
    parts = body.split(boundary_bytes)

    form_fields = {
        "filename": "",
        "content_type": "application/octet-stream",
    }
    file_data = None

    for part in parts:
        # Only the leading CRLF belongs to the delimiter; file bytes keep theirs
        if part.startswith(b"\r\n"):
            part = part[2:]
        if not part or part.startswith(b"--"):
            continue

        header_end = part.find(b"\r\n\r\n")
        if header_end == -1:
            continue

        header_section = part[:header_end].decode("utf-8", errors="replace")
        part_body = part[header_end + 4:]
        if part_body.endswith(b"\r\n"):
            part_body = part_body[:-2]

        name_match = re.search(r'name="([^"]*)"', header_section)
        filename_match = re.search(r'filename="([^"]*)"', header_section)
        part_content_type_match = re.search(
            r'Content-Type:\s*(.+)', header_section, re.IGNORECASE
        )

        if not name_match:
            continue

        if filename_match and filename_match.group(1) and file_data is None:
            file_data = part_body
            form_fields["filename"] = filename_match.group(1)
            if part_content_type_match:
                form_fields["content_type"] = part_content_type_match.group(1).strip()

    return file_data, form_fields


class FileUploadTrigger(BaseHttpTrigger):
    """POST /api/files/upload"""

    def __init__(self, upload_service: FileUploadService):
        super().__init__("file_upload")
        self.upload_service = upload_service

    def get_allowed_methods(self) -> List[str]:
        return ["POST"]

    async def process_request(self, req: func.HttpRequest, request_id: str) -> Dict[str, Any]:
        file_data, form_fields = _parse_multipart(req)

        filename = form_fields.get("filename", "")
        if file_data is None or not filename:
            raise ValidationError("No file uploaded")

        self.logger.info(f"Upload received: {filename} ({len(file_data)} bytes)")

        result = await self.upload_service.upload(
            filename,
            file_data,
            content_type=form_fields.get("content_type"),
            request_id=request_id
        )

        if not result.is_success:
            # Storage refused; message is already generic
            raise RuntimeError(result.message)

        outcome = result.data
        return {
            "fileUrl": outcome.stored.url,
            "fileName": outcome.stored.key,
            "message": result.message,
            "eventPublished": outcome.event_published,
        }
