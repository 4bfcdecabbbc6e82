"""Conference participation derivation and certificate issuing."""

from __future__ import annotations

from datetime import datetime, tzinfo
from typing import Callable, Sequence

from dateutil import tz

from ConfDesk.backend.gateway import Gateway
from ConfDesk.cache.participation import ParticipationSnapshot
from ConfDesk.core.errors import BackendError
from ConfDesk.core.models import (
    ACCEPTED_STATUSES,
    Article,
    AuthorCertificate,
    AuthorParticipation,
)
from ConfDesk.core.timeutil import EPOCH, end_of_day, utc_now
from ConfDesk.utils.log import log

MISSING_TABLE_CODE = "42P01"


def derive_participations(
    articles: Sequence[Article],
    now: datetime,
    zone: tzinfo | None = None,
) -> list[AuthorParticipation]:
    """Collapse accepted articles into one participation per finished conference.

    A conference counts once the last second of its end date has passed.
    When an author has several accepted articles in one conference, the most
    recently submitted one is used.
    """
    zone = zone or tz.tzlocal()
    ordered = sorted(articles, key=lambda a: a.submitted_at or EPOCH, reverse=True)
    grouped: dict[str, AuthorParticipation] = {}
    for article in ordered:
        if article.status not in ACCEPTED_STATUSES or not article.conference_id:
            continue
        if article.conference_end_date is None:
            continue
        if end_of_day(article.conference_end_date, zone) > now:
            continue
        if article.conference_id in grouped:
            continue
        grouped[article.conference_id] = AuthorParticipation(
            conference_id=article.conference_id,
            conference_title=article.conference_title or "",
            conference_start_date=article.conference_start_date,
            conference_end_date=article.conference_end_date,
            article_id=article.id,
            article_title=article.title,
            article_status=article.status,
        )
    return list(grouped.values())


class CertificateSource:
    """Loads participation snapshots and issues certificates for the signed-in author."""

    def __init__(
        self,
        gateway: Gateway,
        *,
        clock: Callable[[], datetime] = utc_now,
        zone: tzinfo | None = None,
    ) -> None:
        self.gateway = gateway
        self.clock = clock
        self.zone = zone

    async def load(self, user_id: str) -> ParticipationSnapshot:
        articles = await self.gateway.list_articles(author_id=user_id, statuses=ACCEPTED_STATUSES)
        participations = tuple(derive_participations(articles, self.clock(), self.zone))
        if not participations:
            return ParticipationSnapshot()

        try:
            certificates = await self.gateway.list_certificates(user_id)
        except BackendError as error:
            if error.code != MISSING_TABLE_CODE:
                raise
            log.warning("Certificate table is not available; showing no certificates")
            certificates = []
        return ParticipationSnapshot(
            participations=participations,
            certificates={cert.conference_id: cert for cert in certificates},
        )

    async def issue(self, conference_id: str) -> AuthorCertificate:
        certificate = await self.gateway.issue_certificate(conference_id)
        log.info("Issued certificate %s", certificate.certificate_number)
        return certificate
