"""Beat-prompt heuristics that boost characters and locations.

A beat prompt such as "describe Mara" or "scene in the harbour" says more about
which entry is wanted than raw mention counts do. The heuristics are plain
regular expressions grouped by locale; each category gets one matcher holding
the union of the requested locales, and a matcher awards its flat bonus at most
once per entry.
"""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from typing import Dict, Iterable, List, Optional, Sequence

from codex_models import CodexCategory, CodexEntry
from relevance_config import RelevanceSettings


LOCALE_PATTERNS: Dict[str, Dict[CodexCategory, List[str]]] = {
    "en": {
        CodexCategory.CHARACTER: [
            r"describe\s+\w+",
            r"dialog\s+with\s+\w+",
            r"\w+\s+(says|speaks|answers|asks)",
        ],
        CodexCategory.LOCATION: [
            r"(in)\s+\w+",
            r"scene\s+(in|at|by)",
            r"describe\s+(the)\s+\w+",
        ],
    },
    "de": {
        CodexCategory.CHARACTER: [
            r"beschreibe\s+\w+",
            r"dialog\s+mit\s+\w+",
            r"\w+\s+(sagt|spricht|antwortet|fragt)",
        ],
        CodexCategory.LOCATION: [
            r"(bei|am|im)\s+\w+",
            r"szene\s+(in|im|am|bei)",
        ],
    },
}


class PromptPatternMatcher(ABC):
    """Strategy deciding whether a beat prompt is aimed at a given entry."""

    def __init__(self, category: CodexCategory, bonus: float):
        self.category = category
        self.bonus = float(bonus)

    def applies_to(self, entry: CodexEntry) -> bool:
        return entry.category == self.category

    @abstractmethod
    def matches(self, entry: CodexEntry, prompt: str) -> bool:
        """Whether ``prompt`` targets ``entry``; category is checked by the caller."""

    def bonus_for(self, entry: CodexEntry, prompt: str) -> float:
        if not self.applies_to(entry):
            return 0.0
        return self.bonus if self.matches(entry, prompt) else 0.0


class RegexPromptPatternMatcher(PromptPatternMatcher):
    """Fires when any pattern matches the prompt and the prompt names the entry."""

    def __init__(self, category: CodexCategory, bonus: float, patterns: Iterable[str]):
        super().__init__(category, bonus)
        self.patterns = [re.compile(p) for p in patterns]

    def matches(self, entry: CodexEntry, prompt: str) -> bool:
        prompt_lower = (prompt or "").lower()
        title = (entry.title or "").lower()
        if not prompt_lower or not title or title not in prompt_lower:
            return False
        return any(p.search(prompt_lower) for p in self.patterns)


def build_prompt_matchers(
    locales: Optional[Sequence[str]] = None,
    settings: Optional[RelevanceSettings] = None,
) -> List[PromptPatternMatcher]:
    """One matcher per boosted category, merging the patterns of ``locales``.

    Unknown locales contribute nothing.
    """
    settings = settings or RelevanceSettings()
    if locales is None:
        locales = settings.prompt_locales

    bonuses = {
        CodexCategory.CHARACTER: settings.character_prompt_bonus,
        CodexCategory.LOCATION: settings.location_prompt_bonus,
    }
    merged: Dict[CodexCategory, List[str]] = {}
    for locale in locales:
        for category, patterns in LOCALE_PATTERNS.get(str(locale).lower(), {}).items():
            bucket = merged.setdefault(category, [])
            for pattern in patterns:
                if pattern not in bucket:
                    bucket.append(pattern)

    matchers: List[PromptPatternMatcher] = []
    for category, bonus in bonuses.items():
        patterns = merged.get(category)
        if patterns:
            matchers.append(RegexPromptPatternMatcher(category, bonus, patterns))
    return matchers
