"""Text keys for searching and ordering list items.

Searching folds case and accents and compares substrings. Ordering uses the
Unicode Collation Algorithm (default table), so Cyrillic letters such as
``Є`` and ``І`` sort next to ``Е`` and ``И`` instead of after ``Я``.
"""

from __future__ import annotations

import unicodedata
from functools import lru_cache

from pyuca import Collator


@lru_cache(maxsize=1)
def _collator() -> Collator:
    return Collator()


def search_key(text: str | None) -> str:
    """Fold case and accents so ``"Émile"`` and ``"emile"`` compare equal.

    Args:
        text: Raw field value; None and empty strings fold to ``""``.

    Returns:
        Casefolded text with combining marks removed.
    """
    if not text:
        return ""
    decomposed = unicodedata.normalize("NFKD", text)
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return stripped.casefold()


def sort_key(text: str | None) -> tuple[int, ...]:
    """Collation key that orders text alphabetically, ignoring case.

    Args:
        text: Raw field value; None and empty strings sort first.

    Returns:
        UCA sort key of the casefolded text.
    """
    if not text:
        return ()
    return _collator().sort_key(text.casefold())
