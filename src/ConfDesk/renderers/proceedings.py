"""Proceedings bundle: article selection, Word-compatible HTML and file naming."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time, tzinfo
from pathlib import Path
from typing import Sequence

from dateutil import tz

from ConfDesk.config import OutputConfig
from ConfDesk.core.errors import OutputError, ValidationError
from ConfDesk.core.models import ACCEPTED_STATUSES, Article
from ConfDesk.core.timeutil import EPOCH
from ConfDesk.prefs.formatting import format_date, format_datetime
from ConfDesk.prefs.store import Preferences
from ConfDesk.renderers.labels import label, status_label
from ConfDesk.renderers.template_renderer import TemplateRenderer
from ConfDesk.renderers.template_utils import filename_segment, load_template
from ConfDesk.utils.log import log

PROCEEDINGS_MODES = ("conference", "all", "date", "manual")
DOC_BOM = "\ufeff"


@dataclass(frozen=True, slots=True)
class ProceedingsRequest:
    """Which articles go into a proceedings bundle.

    Attributes:
        mode: ``conference``, ``all`` (every accepted article), ``date`` or ``manual``.
        conference_id: Conference for ``conference`` mode.
        date_from: First submission day for ``date`` mode, inclusive.
        date_to: Last submission day for ``date`` mode, inclusive.
        include_all_statuses: In ``date`` mode, include non-accepted articles.
        article_ids: Explicit selection for ``manual`` mode.
    """

    mode: str = "conference"
    conference_id: str | None = None
    date_from: date | None = None
    date_to: date | None = None
    include_all_statuses: bool = False
    article_ids: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if self.mode not in PROCEEDINGS_MODES:
            raise ValidationError("mode", f"unknown proceedings mode {self.mode!r}")


def _submitted(article: Article) -> datetime:
    return article.submitted_at or EPOCH


def select_proceedings_articles(
    articles: Sequence[Article],
    request: ProceedingsRequest,
    zone: tzinfo | None = None,
) -> list[Article]:
    """Return the articles of the bundle, oldest submission first."""
    accepted = [article for article in articles if article.status in ACCEPTED_STATUSES]
    if request.mode == "conference":
        if not request.conference_id:
            return []
        chosen = [a for a in accepted if a.conference_id == request.conference_id]
    elif request.mode == "all":
        chosen = accepted
    elif request.mode == "manual":
        wanted = set(request.article_ids)
        chosen = [a for a in articles if a.id in wanted]
    else:
        zone = zone or tz.tzlocal()
        lower = datetime.combine(request.date_from, time.min, tzinfo=zone) if request.date_from else None
        upper = datetime.combine(request.date_to, time.max, tzinfo=zone) if request.date_to else None
        source = articles if request.include_all_statuses else accepted
        chosen = [
            a
            for a in source
            if (lower is None or _submitted(a) >= lower) and (upper is None or _submitted(a) <= upper)
        ]
    return sorted(chosen, key=_submitted)


def proceedings_filename(
    request: ProceedingsRequest,
    *,
    count: int,
    today: date,
    conference_title: str | None = None,
) -> str:
    suffix = today.isoformat()
    if request.mode == "conference":
        return f"proceedings_conference_{filename_segment(conference_title, 'conference')}_{suffix}.doc"
    if request.mode == "date":
        from_part = request.date_from.isoformat() if request.date_from else "start"
        to_part = request.date_to.isoformat() if request.date_to else "end"
        status_part = "all_statuses" if request.include_all_statuses else "accepted"
        return f"proceedings_date_{from_part}_to_{to_part}_{status_part}_{suffix}.doc"
    if request.mode == "manual":
        return f"proceedings_manual_{count}_articles_{suffix}.doc"
    return f"proceedings_all_accepted_{suffix}.doc"


@dataclass(frozen=True, slots=True)
class ProceedingsRenderer:
    """Render articles into the proceedings HTML document."""

    document_template: str
    article_template: str
    template_renderer: TemplateRenderer

    def render_article(self, article: Article, index: int, prefs: Preferences) -> str:
        locale = prefs.locale
        no_data = label(locale, "common.no_data")
        context = {
            "index": str(index),
            "block_class": "article-block page-break" if index > 1 else "article-block",
            "title": article.title,
            "author_label": label(locale, "common.full_name"),
            "author": article.author_name or no_data,
            "institution_label": label(locale, "common.institution"),
            "institution": article.author_institution or no_data,
            "status_label": label(locale, "common.status"),
            "status": status_label(locale, article.status),
            "submitted_label": label(locale, "common.submitted_on"),
            "submitted_at": format_date(article.submitted_at, prefs),
            "keywords_label": label(locale, "common.keywords"),
            "keywords": ", ".join(article.keywords) or no_data,
            "abstract_label": label(locale, "common.abstract"),
            "abstract": article.abstract,
            "file_label": label(locale, "common.article_file"),
            "file_name": article.file_name or no_data,
        }
        return self.template_renderer.render_conditional(self.article_template, context)

    def render(self, articles: Sequence[Article], prefs: Preferences, generated_at: datetime) -> str:
        blocks = [
            self.render_article(article, index, prefs)
            for index, article in enumerate(articles, start=1)
        ]
        return self.template_renderer.render(
            self.document_template,
            {
                "title": label(prefs.locale, "proceedings.title"),
                "generated_label": label(prefs.locale, "proceedings.generated_at"),
                "generated_at": format_datetime(generated_at, prefs),
                "included_label": label(prefs.locale, "proceedings.included"),
                "article_count": str(len(articles)),
                "articles": "\n".join(blocks),
            },
        )


class ProceedingsFileWriter:
    """Write proceedings documents into ``<base_dir>/proceedings``."""

    def __init__(self, output_config: OutputConfig) -> None:
        self.output_dir = Path(output_config.base_dir) / "proceedings"
        self.renderer = ProceedingsRenderer(
            document_template=load_template(
                output_config.proceedings_template_dir,
                output_config.proceedings_document_template,
            ),
            article_template=load_template(
                output_config.proceedings_template_dir,
                output_config.proceedings_article_template,
            ),
            template_renderer=TemplateRenderer(raw_keys=frozenset({"articles", "block_class"})),
        )

    def write(
        self,
        articles: Sequence[Article],
        request: ProceedingsRequest,
        prefs: Preferences,
        *,
        generated_at: datetime,
        conference_title: str | None = None,
    ) -> Path:
        """Render and write one bundle; the file starts with a UTF-8 BOM for Word.

        Raises:
            ValidationError: If no article was selected.
            OutputError: If the file cannot be written.
        """
        if not articles:
            raise ValidationError("proceedings", "no articles match the selection")
        content = DOC_BOM + self.renderer.render(articles, prefs, generated_at)
        filename = proceedings_filename(
            request,
            count=len(articles),
            today=generated_at.date(),
            conference_title=conference_title,
        )
        try:
            self.output_dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise OutputError(f"Failed to create output directory: {self.output_dir}") from exc
        output_path = self.output_dir / filename
        try:
            output_path.write_text(content, encoding="utf-8")
        except OSError as exc:
            raise OutputError(f"Failed to write proceedings file: {output_path}") from exc
        log.info("Proceedings saved to %s (%d articles)", output_path, len(articles))
        return output_path
