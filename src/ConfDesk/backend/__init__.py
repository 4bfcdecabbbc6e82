"""Backend access: gateway contract, Supabase implementation and file helpers."""

from ConfDesk.backend.files import (
    FileDownloader,
    build_upload_path,
    get_storage_path_from_file_url,
    is_supported_article_file,
    sanitize_filename,
    validate_article_file,
)
from ConfDesk.backend.gateway import Gateway

__all__ = [
    "FileDownloader",
    "Gateway",
    "build_upload_path",
    "get_storage_path_from_file_url",
    "is_supported_article_file",
    "sanitize_filename",
    "validate_article_file",
]
