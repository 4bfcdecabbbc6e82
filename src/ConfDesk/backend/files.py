"""Article file rules: accepted formats, storage paths and signed-URL downloads."""

from __future__ import annotations

import re
from pathlib import Path
from urllib.parse import unquote, urlparse

import requests

from ConfDesk.core.errors import BackendError, ValidationError
from ConfDesk.utils.log import log

ALLOWED_ARTICLE_EXTENSIONS = (".pdf", ".doc", ".docx")
ALLOWED_ARTICLE_MIME_TYPES = (
    "application/pdf",
    "application/msword",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
)
MAX_ARTICLE_FILE_SIZE = 10 * 1024 * 1024

STORAGE_URL_MARKERS = (
    "/storage/v1/object/public/articles/",
    "/storage/v1/object/sign/articles/",
    "/storage/v1/object/authenticated/articles/",
)

DOWNLOAD_TIMEOUT = 60.0
CHUNK_SIZE = 64 * 1024

_UNSAFE_FILENAME_RE = re.compile(r'[\\/:*?"<>|]')
_WS_RE = re.compile(r"\s+")


def is_supported_article_file(filename: str, content_type: str | None = None) -> bool:
    """Accept a file when either its extension or its MIME type is allowed.

    Local documents frequently arrive without a MIME type, so the extension
    alone is enough.
    """
    lowered = filename.lower()
    if any(lowered.endswith(ext) for ext in ALLOWED_ARTICLE_EXTENSIONS):
        return True
    return content_type in ALLOWED_ARTICLE_MIME_TYPES


def validate_article_file(filename: str, size: int, content_type: str | None = None) -> None:
    """Raise ``ValidationError`` for unsupported or oversized article files."""
    if not is_supported_article_file(filename, content_type):
        raise ValidationError("file", "unsupported file type; use PDF, DOC or DOCX")
    if size > MAX_ARTICLE_FILE_SIZE:
        raise ValidationError("file", "file is larger than 10 MB")


def build_upload_path(user_id: str, filename: str, epoch_ms: int) -> str:
    """Return the caller-scoped storage path ``<user_id>/<epoch_ms>_<filename>``."""
    return f"{user_id}/{epoch_ms}_{filename}"


def get_storage_path_from_file_url(file_url: str | None) -> str | None:
    """Extract the bucket-relative path from a stored file reference.

    Raw paths are returned unchanged. Full URLs must contain one of the
    storage object markers; anything else yields None.
    """
    if not file_url:
        return None
    if not file_url.startswith(("http://", "https://")):
        return file_url
    try:
        path = urlparse(file_url).path
    except ValueError:
        return None
    for marker in STORAGE_URL_MARKERS:
        index = path.find(marker)
        if index >= 0:
            return unquote(path[index + len(marker) :])
    return None


def sanitize_filename(value: str) -> str:
    """Replace characters that are invalid in file names and collapse whitespace."""
    return _WS_RE.sub(" ", _UNSAFE_FILENAME_RE.sub("_", value)).strip()


class FileDownloader:
    """Fetch stored files through signed URLs.

    Signed URLs are requested fresh for every download and never cached.
    """

    def __init__(self, timeout: float = DOWNLOAD_TIMEOUT) -> None:
        self.timeout = timeout
        self._session = requests.Session()

    def close(self) -> None:
        self._session.close()

    def __enter__(self) -> FileDownloader:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def download(self, url: str, destination: Path) -> Path:
        """Stream ``url`` into ``destination`` and return the written path.

        Raises:
            BackendError: If the HTTP request fails or returns an error status.
        """
        destination.parent.mkdir(parents=True, exist_ok=True)
        try:
            with self._session.get(url, stream=True, timeout=self.timeout) as response:
                response.raise_for_status()
                with destination.open("wb") as handle:
                    for chunk in response.iter_content(chunk_size=CHUNK_SIZE):
                        if chunk:
                            handle.write(chunk)
        except requests.RequestException as error:
            raise BackendError("storage.download", str(error)) from error
        log.info("Saved %s", destination)
        return destination
