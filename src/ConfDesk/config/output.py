"""Output domain configuration for exported documents."""

from __future__ import annotations

import codecs
from dataclasses import dataclass
from typing import Any, Mapping

from ConfDesk.config.common import (
    check_non_empty,
    expect_optional_str,
    expect_str,
    get_optional_value,
    get_required_value,
    get_section,
)


@dataclass(frozen=True, slots=True)
class OutputConfig:
    """Output configuration.

    Attributes:
        base_dir: Directory receiving CSV, proceedings and certificate files.
        proceedings_template_dir: Directory with proceedings HTML templates.
        proceedings_document_template: Outer document template file name.
        proceedings_article_template: Per-article block template file name.
        certificate_font: Optional TTF font for certificates (needed for non-Latin names).
        csv_encoding: Text encoding of CSV exports.
    """

    base_dir: str
    proceedings_template_dir: str
    proceedings_document_template: str
    proceedings_article_template: str
    certificate_font: str | None
    csv_encoding: str = "utf-8"


def load_output(raw: Mapping[str, Any]) -> OutputConfig:
    """Load output domain config from raw mapping.

    Raises:
        TypeError: If config types are invalid.
        ValueError: If required keys are missing.
    """
    section = get_section(raw, "output", required=True)
    proceedings = get_section(section, "proceedings", required=False)
    certificate = get_section(section, "certificate", required=False)

    return OutputConfig(
        base_dir=expect_str(get_required_value(section, "base_dir", "output.base_dir"), "output.base_dir"),
        proceedings_template_dir=expect_str(
            get_optional_value(proceedings, "template_dir", "template/proceedings"),
            "output.proceedings.template_dir",
        ),
        proceedings_document_template=expect_str(
            get_optional_value(proceedings, "document_template", "document.html"),
            "output.proceedings.document_template",
        ),
        proceedings_article_template=expect_str(
            get_optional_value(proceedings, "article_template", "article.html"),
            "output.proceedings.article_template",
        ),
        certificate_font=expect_optional_str(
            get_optional_value(certificate, "font", None),
            "output.certificate.font",
        ),
        csv_encoding=expect_str(
            get_optional_value(section, "csv_encoding", "utf-8"),
            "output.csv_encoding",
        ),
    )


def check_output(config: OutputConfig) -> None:
    """Validate output domain constraints."""
    check_non_empty(config.base_dir, "output.base_dir")
    check_non_empty(config.proceedings_template_dir, "output.proceedings.template_dir")
    check_non_empty(config.proceedings_document_template, "output.proceedings.document_template")
    check_non_empty(config.proceedings_article_template, "output.proceedings.article_template")
    if config.certificate_font is not None and not config.certificate_font.lower().endswith(".ttf"):
        raise ValueError("output.certificate.font must point to a .ttf file")
    try:
        codecs.lookup(config.csv_encoding)
    except LookupError as exc:
        raise ValueError(f"output.csv_encoding: unknown encoding {config.csv_encoding!r}") from exc
