"""Render selected codex entries as a prompt block."""

from __future__ import annotations

from typing import Dict, List, Sequence

from codex_models import CodexCategory, CodexEntry

HEADER = "## Relevant Information from Codex:"

CATEGORY_LABELS: Dict[CodexCategory, str] = {
    CodexCategory.CHARACTER: "Characters",
    CodexCategory.LOCATION: "Locations",
    CodexCategory.OBJECT: "Objects",
    CodexCategory.LORE: "Background",
    CodexCategory.OTHER: "Other",
}


def format_entries_for_prompt(entries: Sequence[CodexEntry]) -> str:
    """Group entries by category (first-seen order) under markdown headings.

    The content is emitted in full; budgeting happens before this step.
    """
    if not entries:
        return ""

    grouped: Dict[CodexCategory, List[CodexEntry]] = {}
    for entry in entries:
        grouped.setdefault(entry.category, []).append(entry)

    parts = [HEADER + "\n\n"]
    for category, members in grouped.items():
        parts.append(f"### {CATEGORY_LABELS[category]}:\n\n")
        for entry in members:
            parts.append(f"**{entry.title}**\n{entry.content}\n\n")
    return "".join(parts)
