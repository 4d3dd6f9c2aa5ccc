"""Greedy packing of codex entries into an estimated token budget."""

from __future__ import annotations

import math
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence

from codex_models import CodexEntry, Importance

TraceFn = Callable[[str, Dict[str, Any]], None]

DEFAULT_TOKENS_PER_CHAR = 0.25

IMPORTANCE_RANK: Dict[Importance, int] = {
    Importance.MAJOR: 3,
    Importance.MINOR: 2,
    Importance.BACKGROUND: 1,
}


def estimate_entry_tokens(entry: CodexEntry, tokens_per_char: float = DEFAULT_TOKENS_PER_CHAR) -> float:
    return len(entry.content or "") * tokens_per_char


def estimate_tokens(entries: Iterable[CodexEntry], tokens_per_char: float = DEFAULT_TOKENS_PER_CHAR) -> int:
    """Whole-token estimate for a list of entries (for display)."""
    chars = sum(len(e.content or "") for e in entries)
    return int(math.floor(chars * tokens_per_char))


def _priority_key(entry: CodexEntry):
    return (0 if entry.global_include else 1, -IMPORTANCE_RANK[entry.importance])


def pack_entries(
    global_entries: Sequence[CodexEntry],
    selected_entries: Sequence[CodexEntry],
    max_tokens: float,
    tokens_per_char: float = DEFAULT_TOKENS_PER_CHAR,
    force_include_globals: bool = False,
    trace: Optional[TraceFn] = None,
) -> List[CodexEntry]:
    """Pack globals first, then by importance, skipping whatever no longer fits.

    Entries are never truncated and a skip does not stop the walk: a later,
    cheaper entry may still fit. Ids are not de-duplicated. With
    ``force_include_globals`` global entries are admitted even past the budget
    (their cost still counts against it). A non-positive budget packs nothing.
    """
    if max_tokens is None or max_tokens <= 0:
        return []

    prioritized = sorted(list(global_entries) + list(selected_entries), key=_priority_key)

    packed: List[CodexEntry] = []
    used = 0.0
    for entry in prioritized:
        cost = estimate_entry_tokens(entry, tokens_per_char)
        forced = force_include_globals and entry.global_include
        if forced or used + cost <= max_tokens:
            packed.append(entry)
            used += cost
            if trace is not None:
                trace("packed", {"entry": entry, "tokens": cost, "total": used, "forced": forced})
        elif trace is not None:
            trace("skipped_budget", {"entry": entry, "tokens": cost, "total": used, "max_tokens": max_tokens})
    return packed
