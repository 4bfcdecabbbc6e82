"""CSV export of organizer article lists."""

from __future__ import annotations

import csv
import io
from pathlib import Path
from typing import Sequence

from ConfDesk.core.errors import OutputError
from ConfDesk.core.models import ACCEPTED_STATUSES, Article
from ConfDesk.listing.filters import ALL, FilterContext
from ConfDesk.listing.lists import ORGANIZER_ARTICLES
from ConfDesk.listing.pipeline import ListState
from ConfDesk.prefs.formatting import format_datetime
from ConfDesk.prefs.store import Preferences
from ConfDesk.renderers.labels import status_label
from ConfDesk.utils.log import log

EXPORT_MODES = ("all", "accepted", "rejected")

CSV_HEADERS = (
    "Id",
    "Title",
    "Author",
    "Institution",
    "Conference",
    "ConferenceId",
    "SectionId",
    "Language",
    "StatusCode",
    "StatusLabel",
    "SubmittedAt",
    "ReviewDueAt",
    "PresentationStartsAt",
    "PresentationLocation",
    "FileName",
)

_FILENAMES = {
    "all": "articles.csv",
    "accepted": "articles_accepted.csv",
    "rejected": "articles_rejected.csv",
}


def export_filename(mode: str) -> str:
    return _FILENAMES[mode]


def select_export_articles(
    articles: Sequence[Article],
    state: ListState,
    mode: str,
    context: FilterContext,
) -> list[Article]:
    """Pick the rows to export from the organizer article list.

    ``all`` exports exactly what the list filters show. ``accepted`` and
    ``rejected`` keep the search and conference filters but replace the
    status filter with their own status group.
    """
    if mode not in EXPORT_MODES:
        raise ValueError(f"Unknown export mode: {mode}")
    if mode == "all":
        return ORGANIZER_ARTICLES.filter_items(articles, state, context)
    base = ORGANIZER_ARTICLES.filter_items(articles, state.with_filter("status", ALL), context)
    if mode == "accepted":
        return [article for article in base if article.status in ACCEPTED_STATUSES]
    return [article for article in base if article.status == "rejected"]


def article_row(article: Article, prefs: Preferences) -> list[str]:
    return [
        article.id,
        article.title,
        article.author_name or "",
        article.author_institution or "",
        article.conference_title or "",
        article.conference_id or "",
        article.section_id or "",
        article.language or "",
        article.status,
        status_label(prefs.locale, article.status),
        format_datetime(article.submitted_at, prefs) if article.submitted_at else "",
        format_datetime(article.review_due_at, prefs) if article.review_due_at else "",
        format_datetime(article.presentation_starts_at, prefs) if article.presentation_starts_at else "",
        article.presentation_location or "",
        article.file_name or "",
    ]


def render_csv(articles: Sequence[Article], prefs: Preferences) -> str:
    """Render articles as CSV: every field quoted, quotes doubled, ``\\n`` between rows."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerow(CSV_HEADERS)
    for article in articles:
        writer.writerow(article_row(article, prefs))
    return buffer.getvalue().removesuffix("\n")


class CsvFileWriter:
    """Write article exports into ``<base_dir>/csv``."""

    def __init__(self, base_dir: str, *, encoding: str = "utf-8") -> None:
        self.output_dir = Path(base_dir) / "csv"
        self.encoding = encoding

    def write(self, articles: Sequence[Article], mode: str, prefs: Preferences) -> Path:
        """Write the export for ``mode`` and return its path.

        Raises:
            OutputError: If the directory or file cannot be written.
        """
        content = render_csv(articles, prefs)
        try:
            self.output_dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise OutputError(f"Failed to create output directory: {self.output_dir}") from exc
        output_path = self.output_dir / export_filename(mode)
        try:
            output_path.write_text(content, encoding=self.encoding)
        except (OSError, UnicodeEncodeError) as exc:
            raise OutputError(f"Failed to write CSV file: {output_path}") from exc
        log.info("CSV saved to %s (%d rows)", output_path, len(articles))
        return output_path
