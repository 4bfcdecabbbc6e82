"""Display labels for enumerations and generated documents, per locale."""

from __future__ import annotations

DEFAULT_LOCALE = "en"

_LABELS: dict[str, dict[str, str]] = {
    "en": {
        "status.submitted": "Submitted",
        "status.under_review": "Under review",
        "status.accepted": "Accepted",
        "status.accepted_with_comments": "Accepted with comments",
        "status.rejected": "Rejected",
        "recommendation.accept": "Accept",
        "recommendation.accept_with_comments": "Accept with comments",
        "recommendation.reject": "Reject",
        "role.author": "Author",
        "role.reviewer": "Reviewer",
        "role.organizer": "Organizer",
        "conference_status.draft": "Draft",
        "conference_status.announced": "Announced",
        "conference_status.submission_open": "Submission open",
        "conference_status.reviewing": "Reviewing",
        "conference_status.closed": "Closed",
        "conference_status.archived": "Archived",
        "common.no_data": "No data",
        "common.full_name": "Full name",
        "common.institution": "Institution",
        "common.status": "Status",
        "common.submitted_on": "Submitted on",
        "common.keywords": "Keywords",
        "common.abstract": "Abstract",
        "common.article_file": "Article file",
        "proceedings.title": "Conference proceedings",
        "proceedings.generated_at": "Generated at",
        "proceedings.included": "Articles included",
        "certificate.title": "Certificate of participation",
        "certificate.subtitle": "This certificate is awarded to",
        "certificate.body": "for participation in the conference \"{conference}\"",
        "certificate.article": "with the article \"{title}\"",
        "certificate.status": "Article status: {status}",
        "certificate.period": "Conference period: {period}",
        "certificate.number": "Certificate No. {number}",
        "certificate.issued_at": "Issued on {date}",
        "pagination.page": "Page {page} of {pages} ({total} items)",
        "list.empty": "Nothing to show.",
    },
    "uk": {
        "status.submitted": "Подано",
        "status.under_review": "На рецензуванні",
        "status.accepted": "Прийнято",
        "status.accepted_with_comments": "Прийнято із зауваженнями",
        "status.rejected": "Відхилено",
        "recommendation.accept": "Прийняти",
        "recommendation.accept_with_comments": "Прийняти із зауваженнями",
        "recommendation.reject": "Відхилити",
        "role.author": "Автор",
        "role.reviewer": "Рецензент",
        "role.organizer": "Організатор",
        "conference_status.draft": "Чернетка",
        "conference_status.announced": "Оголошено",
        "conference_status.submission_open": "Прийом заявок",
        "conference_status.reviewing": "Рецензування",
        "conference_status.closed": "Завершено",
        "conference_status.archived": "В архіві",
        "common.no_data": "Немає даних",
        "common.full_name": "ПІБ",
        "common.institution": "Установа",
        "common.status": "Статус",
        "common.submitted_on": "Подано",
        "common.keywords": "Ключові слова",
        "common.abstract": "Анотація",
        "common.article_file": "Файл статті",
        "proceedings.title": "Збірник матеріалів конференції",
        "proceedings.generated_at": "Сформовано",
        "proceedings.included": "Кількість статей",
        "certificate.title": "Сертифікат учасника",
        "certificate.subtitle": "Цей сертифікат засвідчує, що",
        "certificate.body": "взяв(ла) участь у конференції «{conference}»",
        "certificate.article": "зі статтею «{title}»",
        "certificate.status": "Статус статті: {status}",
        "certificate.period": "Період проведення: {period}",
        "certificate.number": "Сертифікат № {number}",
        "certificate.issued_at": "Дата видачі: {date}",
        "pagination.page": "Сторінка {page} з {pages} (записів: {total})",
        "list.empty": "Немає записів.",
    },
}


def label(locale: str, key: str, **params: object) -> str:
    """Return the label for ``key``, falling back to English and then the key itself."""
    table = _LABELS.get(locale, _LABELS[DEFAULT_LOCALE])
    text = table.get(key) or _LABELS[DEFAULT_LOCALE].get(key) or key
    return text.format(**params) if params else text


def enum_label(locale: str, namespace: str, value: str | None) -> str:
    if not value:
        return label(locale, "common.no_data")
    key = f"{namespace}.{value}"
    text = label(locale, key)
    return value if text == key else text


def status_label(locale: str, status: str | None) -> str:
    return enum_label(locale, "status", status)
