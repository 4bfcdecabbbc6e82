"""Template loading and file name helpers shared by document renderers."""

from __future__ import annotations

import re
from pathlib import Path

from ConfDesk.core.errors import TemplateError, TemplateNotFoundError

_SEGMENT_RE = re.compile(r"[\W_]+", re.UNICODE)
SEGMENT_MAX_LEN = 60


def load_template(template_dir: str, filename: str) -> str:
    """Load a template file from the configured template directory.

    Relative directories resolve against the working directory.

    Raises:
        TemplateError: If the resolved path escapes ``template_dir`` or reading fails.
        TemplateNotFoundError: If the template file does not exist.
    """
    base_dir = Path(template_dir)
    if not base_dir.is_absolute():
        base_dir = Path.cwd() / base_dir
    base_dir = base_dir.resolve()
    template_path = (base_dir / filename).resolve()
    try:
        template_path.relative_to(base_dir)
    except ValueError as exc:
        raise TemplateError(f"Template path must stay inside {base_dir}: {template_path}") from exc

    if not template_path.exists():
        raise TemplateNotFoundError(f"Template file not found: {template_path}")

    try:
        return template_path.read_text(encoding="utf-8")
    except OSError as exc:
        raise TemplateError(f"Failed to read template: {template_path}") from exc


def filename_segment(value: str | None, fallback: str) -> str:
    """Lowercase ``value`` and join its letter/digit runs with ``_`` for use in a file name.

    Returns ``fallback`` when nothing usable remains; output is capped at 60 characters.
    """
    cleaned = _SEGMENT_RE.sub("_", (value or "").strip().lower()).strip("_")
    return (cleaned or fallback)[:SEGMENT_MAX_LEN]
