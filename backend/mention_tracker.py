"""Post-generation mention bookkeeping for codex entries."""

from __future__ import annotations

from dataclasses import replace
from typing import Iterable, List

from codex_models import CodexEntry
from text_matching import count_any


def update_mentions(entries: Iterable[CodexEntry], generated_text: str, text_position: int) -> List[CodexEntry]:
    """Return a new list where entries named in ``generated_text`` carry fresh mention data.

    Title and alias hits are summed. Entries without a hit are passed through as
    the same object; matched entries are copies, the input is never mutated.
    """
    updated: List[CodexEntry] = []
    for entry in entries:
        total = count_any(generated_text or "", (entry.title, *entry.aliases))
        if total > 0:
            entry = replace(
                entry,
                last_mentioned=text_position,
                mention_count=(entry.mention_count or 0) + total,
            )
        updated.append(entry)
    return updated
