"""Click CLI interface definitions.

Defines the command-line interface structure and routes commands
to their respective runners.
"""

from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import Callable

import click
from dateutil import parser as dt_parser
from dateutil import tz
from dotenv import load_dotenv

from ConfDesk.cli import commands
from ConfDesk.cli.runner import CommandRunner
from ConfDesk.config import AppConfig, load_config_with_defaults
from ConfDesk.core.errors import ValidationError
from ConfDesk.core.models import ARTICLE_STATUSES, CONFERENCE_STATUSES, RECOMMENDATIONS
from ConfDesk.prefs import (
    COMPACT_MODE_KEY,
    EMAIL_NOTIFICATIONS_KEY,
    LANGUAGE_KEY,
    PAGE_SIZE_KEY,
    THEME_KEY,
    TIMEZONE_KEY,
)
from ConfDesk.renderers import ProceedingsRequest
from ConfDesk.renderers.csv_export import EXPORT_MODES
from ConfDesk.renderers.proceedings import PROCEEDINGS_MODES
from ConfDesk.services import ConferenceDraft
from ConfDesk.services.users import MANAGEABLE_ROLES

PREFERENCE_NAMES = {
    "theme": THEME_KEY,
    "language": LANGUAGE_KEY,
    "timezone": TIMEZONE_KEY,
    "page_size": PAGE_SIZE_KEY,
    "email_notifications": EMAIL_NOTIFICATIONS_KEY,
    "compact_mode": COMPACT_MODE_KEY,
}


class TimestampParam(click.ParamType):
    """ISO-8601 date or date-time; values without an offset use the local zone."""

    name = "timestamp"

    def convert(self, value, param, ctx) -> datetime:
        if isinstance(value, datetime):
            return value
        try:
            parsed = dt_parser.isoparse(value)
        except ValueError:
            self.fail(f"{value!r} is not an ISO-8601 date or date-time", param, ctx)
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=tz.tzlocal())
        return parsed


TIMESTAMP = TimestampParam()
DATE = click.DateTime(formats=["%Y-%m-%d"])


def _action(ctx: click.Context) -> str:
    return " ".join(ctx.command_path.split()[1:]) or ctx.command_path


def _runner(ctx: click.Context) -> CommandRunner:
    config: AppConfig = ctx.obj
    return CommandRunner(config)


def list_options(func: Callable) -> Callable:
    """Attach the search/filter/sort/page options shared by every list command."""
    options = [
        click.option("--search", default="", help="Case- and accent-insensitive search text."),
        click.option(
            "--filter",
            "filters",
            multiple=True,
            metavar="NAME=VALUE",
            help="Filter the list, e.g. status=accepted. Repeatable.",
        ),
        click.option("--sort", default=None, help="Sort option; remembered for this list."),
        click.option("--page", type=click.IntRange(min=1), default=1, show_default=True),
        click.option("--page-size", type=click.IntRange(min=1), default=None, help="Override page size."),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def _list_options(
    search: str,
    filters: tuple[str, ...],
    sort: str | None,
    page: int,
    page_size: int | None,
) -> commands.ListOptions:
    try:
        pairs = commands.parse_filter_args(filters)
    except ValidationError as e:
        raise click.BadParameter(e.message, param_hint="--filter") from e
    return commands.ListOptions(search=search, filters=pairs, sort=sort, page=page, page_size=page_size)


@click.group(help="ConfDesk: conference submissions, reviews and proceedings from the terminal.")
@click.option(
    "--config",
    "config_path",
    type=click.Path(path_type=Path, dir_okay=False),
    default=Path("config/default.yml"),
    show_default=True,
    help="Path to YAML config file (merged over config/default.yml).",
)
@click.pass_context
def cli(ctx: click.Context, config_path: Path) -> None:
    """CLI entry group.

    Loads environment variables from .env file before processing config.

    Args:
        ctx: Click context.
        config_path: Path to YAML config file.
    """
    # Backend URL, key and sign-in credentials come from the environment
    load_dotenv()

    ctx.obj = load_config_with_defaults(config_path)


# Articles


@cli.group("articles")
def articles_group() -> None:
    """Submit, review and manage articles."""


@articles_group.command("list")
@click.option("--mine", is_flag=True, help="Show your own submissions regardless of role.")
@list_options
@click.pass_context
def articles_list(ctx: click.Context, mine: bool, search, filters, sort, page, page_size) -> None:
    """List articles visible to your role."""
    options = _list_options(search, filters, sort, page, page_size)
    _runner(ctx).run(_action(ctx), lambda s: commands.list_articles(s, options, mine=mine))


@articles_group.command("show")
@click.argument("article_id")
@click.pass_context
def articles_show(ctx: click.Context, article_id: str) -> None:
    """Show one article with its status history."""
    _runner(ctx).run(_action(ctx), lambda s: commands.show_article(s, article_id))


@articles_group.command("submit")
@click.option("--title", required=True)
@click.option("--abstract", required=True)
@click.option("--keywords", required=True, help="Comma-separated keywords.")
@click.option("--conference", "conference_id", default=None, help="Conference id.")
@click.option(
    "--file",
    "file_path",
    type=click.Path(path_type=Path, exists=True, dir_okay=False),
    default=None,
    help="PDF, DOC or DOCX, at most 10 MB.",
)
@click.pass_context
def articles_submit(
    ctx: click.Context,
    title: str,
    abstract: str,
    keywords: str,
    conference_id: str | None,
    file_path: Path | None,
) -> None:
    """Submit a new article."""
    _runner(ctx).run(
        _action(ctx),
        lambda s: commands.submit_article(
            s,
            title=title,
            abstract=abstract,
            keywords=keywords,
            conference_id=conference_id,
            file_path=file_path,
        ),
    )


@articles_group.command("export")
@click.option("--mode", type=click.Choice(EXPORT_MODES), default="all", show_default=True)
@list_options
@click.pass_context
def articles_export(ctx: click.Context, mode: str, search, filters, sort, page, page_size) -> None:
    """Export the filtered organizer article list as CSV."""
    options = _list_options(search, filters, sort, page, page_size)
    _runner(ctx).run(_action(ctx), lambda s: commands.export_articles(s, options, mode))


@articles_group.command("status")
@click.argument("article_id")
@click.argument("status", type=click.Choice(ARTICLE_STATUSES))
@click.option("--comment", default="", help="Comment stored in the status history.")
@click.pass_context
def articles_status(ctx: click.Context, article_id: str, status: str, comment: str) -> None:
    """Change an article's status (organizers)."""
    _runner(ctx).run(_action(ctx), lambda s: commands.change_status(s, article_id, status, comment))


@articles_group.command("assign")
@click.argument("article_id")
@click.argument("reviewer_id")
@click.option("--due", type=TIMESTAMP, default=None, help="Review deadline.")
@click.pass_context
def articles_assign(ctx: click.Context, article_id: str, reviewer_id: str, due: datetime | None) -> None:
    """Assign a reviewer to an article (organizers)."""
    _runner(ctx).run(_action(ctx), lambda s: commands.assign_reviewer(s, article_id, reviewer_id, due))


@articles_group.command("unassign")
@click.argument("assignment_id")
@click.pass_context
def articles_unassign(ctx: click.Context, assignment_id: str) -> None:
    """Remove a reviewer assignment (organizers)."""
    _runner(ctx).run(_action(ctx), lambda s: commands.delete_assignment(s, assignment_id))


@articles_group.command("schedule")
@click.argument("article_id")
@click.option("--review-due", type=TIMESTAMP, default=None)
@click.option("--presentation-start", type=TIMESTAMP, default=None)
@click.option("--location", default=None)
@click.pass_context
def articles_schedule(
    ctx: click.Context,
    article_id: str,
    review_due: datetime | None,
    presentation_start: datetime | None,
    location: str | None,
) -> None:
    """Set the review deadline and presentation slot (organizers)."""
    _runner(ctx).run(
        _action(ctx),
        lambda s: commands.save_schedule(
            s,
            article_id,
            review_due_at=review_due,
            presentation_starts_at=presentation_start,
            presentation_location=location,
        ),
    )


@articles_group.command("file")
@click.argument("article_id")
@click.option(
    "--save",
    "destination",
    type=click.Path(path_type=Path, file_okay=False),
    default=None,
    help="Download into this directory instead of printing the signed URL.",
)
@click.pass_context
def articles_file(ctx: click.Context, article_id: str, destination: Path | None) -> None:
    """Get a short-lived link to an article file."""
    _runner(ctx).run(_action(ctx), lambda s: commands.download_article_file(s, article_id, destination))


# Reviews


@cli.group("reviews")
def reviews_group() -> None:
    """List and submit reviews."""


@reviews_group.command("list")
@list_options
@click.pass_context
def reviews_list(ctx: click.Context, search, filters, sort, page, page_size) -> None:
    """List reviews (all submitted for organizers, your own for reviewers)."""
    options = _list_options(search, filters, sort, page, page_size)
    _runner(ctx).run(_action(ctx), lambda s: commands.list_reviews(s, options))


@reviews_group.command("submit")
@click.argument("article_id")
@click.option("--content", required=True)
@click.option("--rating", type=click.IntRange(1, 5), required=True)
@click.option("--recommendation", type=click.Choice(RECOMMENDATIONS), required=True)
@click.pass_context
def reviews_submit(ctx: click.Context, article_id: str, content: str, rating: int, recommendation: str) -> None:
    """Submit a review for an assigned article."""
    _runner(ctx).run(
        _action(ctx),
        lambda s: commands.submit_review(
            s, article_id, content=content, rating=rating, recommendation=recommendation
        ),
    )


# Conferences


@cli.group("conferences")
def conferences_group() -> None:
    """List and create conferences."""


@conferences_group.command("list")
@list_options
@click.pass_context
def conferences_list(ctx: click.Context, search, filters, sort, page, page_size) -> None:
    """List conferences (public ones unless you are an organizer)."""
    options = _list_options(search, filters, sort, page, page_size)
    _runner(ctx).run(_action(ctx), lambda s: commands.list_conferences(s, options))


@conferences_group.command("create")
@click.option("--title", required=True)
@click.option("--start", "start_date", type=DATE, default=None)
@click.option("--end", "end_date", type=DATE, default=None)
@click.option("--submission-start", type=TIMESTAMP, default=None)
@click.option("--submission-end", type=TIMESTAMP, default=None)
@click.option("--status", type=click.Choice(CONFERENCE_STATUSES), default="draft", show_default=True)
@click.option("--private", is_flag=True, help="Hide the conference from authors.")
@click.option("--timezone", default="")
@click.option("--location", default="")
@click.option("--description", default="")
@click.option("--requirements", default="", help="Thesis requirements.")
@click.pass_context
def conferences_create(
    ctx: click.Context,
    title: str,
    start_date: datetime | None,
    end_date: datetime | None,
    submission_start: datetime | None,
    submission_end: datetime | None,
    status: str,
    private: bool,
    timezone: str,
    location: str,
    description: str,
    requirements: str,
) -> None:
    """Create a conference (organizers)."""
    draft = ConferenceDraft(
        title=title,
        start_date=start_date.date() if start_date else None,
        end_date=end_date.date() if end_date else None,
        submission_start_at=submission_start,
        submission_end_at=submission_end,
        status=status,
        is_public=not private,
        timezone=timezone,
        location=location,
        description=description,
        thesis_requirements=requirements,
    )
    _runner(ctx).run(_action(ctx), lambda s: commands.create_conference(s, draft))


# Users and profile


@cli.group("users")
def users_group() -> None:
    """Role management (organizers)."""


@users_group.command("list")
@list_options
@click.pass_context
def users_list(ctx: click.Context, search, filters, sort, page, page_size) -> None:
    """List registered users."""
    options = _list_options(search, filters, sort, page, page_size)
    _runner(ctx).run(_action(ctx), lambda s: commands.list_users(s, options))


@users_group.command("set-role")
@click.argument("user_id")
@click.argument("role", type=click.Choice(MANAGEABLE_ROLES))
@click.pass_context
def users_set_role(ctx: click.Context, user_id: str, role: str) -> None:
    """Change a user's role between author and reviewer."""
    _runner(ctx).run(_action(ctx), lambda s: commands.set_user_role(s, user_id, role))


@cli.group("profile")
def profile_group() -> None:
    """Your own profile."""


@profile_group.command("save")
@click.option("--full-name", required=True)
@click.option("--institution", default=None)
@click.pass_context
def profile_save(ctx: click.Context, full_name: str, institution: str | None) -> None:
    """Update your name and institution."""
    _runner(ctx).run(
        _action(ctx),
        lambda s: commands.save_profile(s, full_name=full_name, institution=institution),
    )


# Notifications


@cli.group("notifications")
def notifications_group() -> None:
    """Your notifications."""


@notifications_group.command("list")
@click.option("--page", type=click.IntRange(min=1), default=1, show_default=True)
@click.option("--page-size", type=click.IntRange(min=1), default=None)
@click.pass_context
def notifications_list(ctx: click.Context, page: int, page_size: int | None) -> None:
    """List notifications, newest first."""
    _runner(ctx).run(_action(ctx), lambda s: commands.list_notifications(s, page, page_size))


@notifications_group.command("read")
@click.argument("notification_id")
@click.pass_context
def notifications_read(ctx: click.Context, notification_id: str) -> None:
    """Mark one notification as read."""
    _runner(ctx).run(_action(ctx), lambda s: commands.mark_notification_read(s, notification_id))


@notifications_group.command("read-all")
@click.pass_context
def notifications_read_all(ctx: click.Context) -> None:
    """Mark every notification as read."""
    _runner(ctx).run(_action(ctx), commands.mark_all_notifications_read)


# Certificates and proceedings


@cli.group("certificates")
def certificates_group() -> None:
    """Participation certificates for completed conferences."""


@certificates_group.command("list")
@click.pass_context
def certificates_list(ctx: click.Context) -> None:
    """List completed participations and issued certificates."""
    _runner(ctx).run(_action(ctx), commands.list_participations)


@certificates_group.command("download")
@click.argument("conference_id")
@click.pass_context
def certificates_download(ctx: click.Context, conference_id: str) -> None:
    """Issue (once) and save the certificate PDF for a conference."""
    _runner(ctx).run(_action(ctx), lambda s: commands.download_certificate(s, conference_id))


@cli.group("proceedings")
def proceedings_group() -> None:
    """Conference proceedings (organizers)."""


@proceedings_group.command("build")
@click.option("--mode", type=click.Choice(PROCEEDINGS_MODES), default="conference", show_default=True)
@click.option("--conference", "conference_id", default=None, help="Conference id for conference mode.")
@click.option("--from", "date_from", type=DATE, default=None, help="First submission day (date mode).")
@click.option("--to", "date_to", type=DATE, default=None, help="Last submission day (date mode).")
@click.option("--all-statuses", is_flag=True, help="Date mode: include articles not accepted.")
@click.option("--article", "article_ids", multiple=True, help="Article id for manual mode. Repeatable.")
@click.pass_context
def proceedings_build(
    ctx: click.Context,
    mode: str,
    conference_id: str | None,
    date_from: datetime | None,
    date_to: datetime | None,
    all_statuses: bool,
    article_ids: tuple[str, ...],
) -> None:
    """Build the proceedings .doc file."""
    _runner(ctx).run(
        _action(ctx),
        lambda s: commands.build_proceedings(
            s,
            ProceedingsRequest(
                mode=mode,
                conference_id=conference_id,
                date_from=date_from.date() if date_from else None,
                date_to=date_to.date() if date_to else None,
                include_all_statuses=all_statuses,
                article_ids=tuple(article_ids),
            ),
        ),
    )


# Preferences


@cli.group("prefs")
def prefs_group() -> None:
    """Local display preferences."""


@prefs_group.command("show")
@click.pass_context
def prefs_show(ctx: click.Context) -> None:
    """Show every preference with its effective value."""
    _runner(ctx).run_local(_action(ctx), commands.show_preferences)


@prefs_group.command("set")
@click.argument("name", type=click.Choice(sorted(PREFERENCE_NAMES)))
@click.argument("value")
@click.pass_context
def prefs_set(ctx: click.Context, name: str, value: str) -> None:
    """Set a preference (booleans as true/false)."""
    key = PREFERENCE_NAMES[name]
    _runner(ctx).run_local(_action(ctx), lambda prefs: prefs.set_text(key, value))


@prefs_group.command("sort")
@click.argument("list_key")
@click.argument("option")
@click.pass_context
def prefs_sort(ctx: click.Context, list_key: str, option: str) -> None:
    """Set the default sort option of a list (e.g. organizer.articles title_asc)."""
    _runner(ctx).run_local(_action(ctx), lambda prefs: commands.set_list_sort(prefs, list_key, option))
