"""Conference creation and lookup."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime

from ConfDesk.backend.gateway import Gateway
from ConfDesk.core.errors import ValidationError
from ConfDesk.core.models import CONFERENCE_STATUSES, Conference, ConferenceSection
from ConfDesk.core.timeutil import to_iso
from ConfDesk.prefs.store import is_valid_timezone
from ConfDesk.utils.log import log

DEFAULT_CONFERENCE_TIMEZONE = "Europe/Kyiv"


@dataclass(frozen=True, slots=True)
class ConferenceDraft:
    """Form values for a new conference."""

    title: str
    start_date: date | None = None
    end_date: date | None = None
    submission_start_at: datetime | None = None
    submission_end_at: datetime | None = None
    status: str = "draft"
    is_public: bool = True
    timezone: str = ""
    location: str = ""
    description: str = ""
    thesis_requirements: str = ""


def validate_conference(draft: ConferenceDraft) -> None:
    """Raise ``ValidationError`` when the draft breaks a conference rule."""
    if not draft.title.strip():
        raise ValidationError("title", "title is required")
    if draft.start_date and draft.end_date and draft.end_date < draft.start_date:
        raise ValidationError("end_date", "conference cannot end before it starts")
    if (
        draft.submission_start_at
        and draft.submission_end_at
        and draft.submission_end_at < draft.submission_start_at
    ):
        raise ValidationError("submission_end_at", "submission window ends before it opens")
    if draft.status not in CONFERENCE_STATUSES:
        raise ValidationError("status", f"unknown status {draft.status!r}")
    if draft.timezone.strip() and not is_valid_timezone(draft.timezone.strip()):
        raise ValidationError("timezone", f"unknown timezone {draft.timezone!r}")


class ConferenceService:
    def __init__(self, gateway: Gateway) -> None:
        self.gateway = gateway

    async def list_all(self) -> list[Conference]:
        return await self.gateway.list_conferences()

    async def list_public(self) -> list[Conference]:
        return await self.gateway.list_conferences(public_only=True)

    async def get(self, conference_id: str) -> Conference:
        for conference in await self.gateway.list_conferences():
            if conference.id == conference_id:
                return conference
        raise ValidationError("conference", f"conference {conference_id} not found")

    async def sections(self, conference_id: str) -> list[ConferenceSection]:
        return await self.gateway.list_sections(conference_id)

    async def create(self, draft: ConferenceDraft, *, organizer_id: str) -> Conference:
        validate_conference(draft)
        conference = await self.gateway.insert_conference(
            {
                "title": draft.title.strip(),
                "description": draft.description.strip() or None,
                "thesis_requirements": draft.thesis_requirements.strip() or None,
                "start_date": draft.start_date.isoformat() if draft.start_date else None,
                "end_date": draft.end_date.isoformat() if draft.end_date else None,
                "submission_start_at": to_iso(draft.submission_start_at),
                "submission_end_at": to_iso(draft.submission_end_at),
                "organizer_id": organizer_id,
                "status": draft.status,
                "timezone": draft.timezone.strip() or DEFAULT_CONFERENCE_TIMEZONE,
                "location": draft.location.strip() or None,
                "is_public": draft.is_public,
            }
        )
        log.info("Created conference %s (%s)", conference.id, conference.title)
        return conference
