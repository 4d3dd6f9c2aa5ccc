"""Relevance scoring for a single codex entry.

The score is evidence from the trailing context window plus the beat prompt:
- whole-word title/alias/keyword hits (per occurrence)
- a flat bonus for keywords that only appear inside longer words
- an exponentially decaying bonus for entries mentioned near the cursor
- an importance multiplier over everything above
- a flat prompt-pattern bonus for characters and locations

Every step appends a human-readable reason so selections can be explained.
"""

from __future__ import annotations

import math
from typing import Dict, Optional, Sequence

from codex_models import CodexEntry, Importance, RelevanceScore
from prompt_patterns import PromptPatternMatcher, build_prompt_matchers
from relevance_config import RelevanceSettings
from text_matching import count_whole_word


IMPORTANCE_MULTIPLIER: Dict[Importance, float] = {
    Importance.MAJOR: 1.5,
    Importance.MINOR: 1.0,
    Importance.BACKGROUND: 0.5,
}


def recency_bonus(last_mentioned: int, text_length: int, settings: Optional[RelevanceSettings] = None) -> float:
    settings = settings or RelevanceSettings()
    # A mention "after" the end of the text counts as right at the cursor.
    distance = max(0, int(text_length) - int(last_mentioned))
    normalized = distance / float(settings.context_window_size)
    return max(0.0, settings.recency_decay * math.exp(-normalized))


def score_entry(
    entry: CodexEntry,
    current_text: str,
    beat_prompt: str,
    settings: Optional[RelevanceSettings] = None,
    matchers: Optional[Sequence[PromptPatternMatcher]] = None,
) -> RelevanceScore:
    settings = settings or RelevanceSettings()
    if matchers is None:
        matchers = build_prompt_matchers(settings=settings)

    current_text = current_text or ""
    beat_prompt = beat_prompt or ""
    window = current_text[-settings.context_window_size:]
    combined = (window + " " + beat_prompt).lower()

    result = RelevanceScore(entry_id=entry.id)

    name_hits = count_whole_word(combined, entry.title)
    if name_hits > 0:
        result.score += name_hits * settings.keyword_weight
        result.reasons.append(f"Name mentioned {name_hits} times")

    for alias in entry.aliases:
        hits = count_whole_word(combined, alias)
        if hits > 0:
            result.score += hits * settings.alias_weight
            result.reasons.append(f'Alias "{alias}" mentioned {hits} times')

    for keyword in entry.keywords:
        keyword_lower = (keyword or "").strip().lower()
        if not keyword_lower:
            continue
        hits = count_whole_word(combined, keyword_lower)
        if hits > 0:
            result.score += hits * settings.keyword_weight
            result.reasons.append(f'Tag "{keyword}" matched {hits} times')
        elif keyword_lower in combined:
            # Substring-only hits earn one flat bonus, however often they occur.
            result.score += settings.semantic_weight * 0.5
            result.reasons.append(f'Tag "{keyword}" partially matched')

    if entry.last_mentioned is not None:
        bonus = recency_bonus(entry.last_mentioned, len(current_text), settings)
        result.score += bonus
        if bonus > 0:
            result.reasons.append(f"Recently mentioned (bonus: {bonus:.2f})")

    result.score *= IMPORTANCE_MULTIPLIER[entry.importance]

    for matcher in matchers:
        bonus = matcher.bonus_for(entry, beat_prompt)
        if bonus > 0:
            result.score += bonus
            result.reasons.append(f"Beat prompt targets this {entry.category.value} (bonus: {bonus:.2f})")

    return result
