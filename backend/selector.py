"""Top-k selection of scored entries under per-category quotas."""

from __future__ import annotations

from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence

from codex_models import CodexCategory, CodexEntry, ScoredEntry
from relevance_config import DEFAULT_CATEGORY_QUOTAS

TraceFn = Callable[[str, Dict[str, Any]], None]


def select_top_entries(
    scored: Sequence[ScoredEntry],
    quotas: Optional[Mapping[CodexCategory, int]] = None,
    trace: Optional[TraceFn] = None,
) -> List[CodexEntry]:
    """Admit entries by descending score until each category's quota is full.

    Ties keep their input order. ``scored`` is expected to hold non-global
    entries with a positive score only.
    """
    limits = dict(DEFAULT_CATEGORY_QUOTAS)
    limits.update(quotas or {})
    counts = dict.fromkeys(CodexCategory, 0)

    selected: List[CodexEntry] = []
    for item in sorted(scored, key=lambda s: -s.score):
        category = item.entry.category
        if counts[category] >= limits[category]:
            if trace is not None:
                trace("skipped_quota", {"entry": item.entry, "score": item.score, "quota": limits[category]})
            continue
        counts[category] += 1
        selected.append(item.entry)
        if trace is not None:
            trace("selected", {"entry": item.entry, "score": item.score, "reasons": list(item.relevance.reasons)})
    return selected
