"""
Business Services.

Exports:
    FileUploadService: Validate, store and announce uploads
    BlobChangeListener: Forward signed links for new result blobs
    normalize_file_name, sanitize_file_name: Storage key derivation
"""

from .file_naming import normalize_file_name, sanitize_file_name
from .file_upload import FileUploadService
from .blob_listener import BlobChangeListener

__all__ = [
    'FileUploadService',
    'BlobChangeListener',
    'normalize_file_name',
    'sanitize_file_name',
]
