"""Case-insensitive whole-word matching for user-authored names and tags."""

from __future__ import annotations

import re
from typing import Iterable


def word_pattern(term: str) -> "re.Pattern[str]":
    # Titles are arbitrary user text; escape before compiling so "(", "[" or ".*" never break the matcher.
    return re.compile(r"\b" + re.escape(term) + r"\b", re.IGNORECASE)


def count_whole_word(text: str, term: str) -> int:
    """Count whole-word, case-insensitive occurrences of ``term`` in ``text``.

    Blank terms never match.
    """
    term = (term or "").strip().lower()
    if not term or not text:
        return 0
    return len(word_pattern(term).findall(text.lower()))


def count_any(text: str, terms: Iterable[str]) -> int:
    return sum(count_whole_word(text, term) for term in terms)
