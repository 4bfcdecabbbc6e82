"""Output renderers: console text, CSV export, proceedings HTML and certificate PDF."""

from __future__ import annotations

from ConfDesk.renderers.certificate import (
    CertificateFileWriter,
    CertificatePdfRenderer,
    certificate_filename,
)
from ConfDesk.renderers.console import ConsoleOutputWriter, render_page, render_participations
from ConfDesk.renderers.csv_export import CsvFileWriter, render_csv, select_export_articles
from ConfDesk.renderers.labels import label, status_label
from ConfDesk.renderers.proceedings import (
    ProceedingsFileWriter,
    ProceedingsRequest,
    select_proceedings_articles,
)

__all__ = [
    "CertificateFileWriter",
    "CertificatePdfRenderer",
    "ConsoleOutputWriter",
    "CsvFileWriter",
    "ProceedingsFileWriter",
    "ProceedingsRequest",
    "certificate_filename",
    "label",
    "render_csv",
    "render_page",
    "render_participations",
    "select_export_articles",
    "select_proceedings_articles",
    "status_label",
]
