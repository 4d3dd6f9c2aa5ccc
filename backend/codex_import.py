"""Convert a story codex document into relevance-engine entries.

The editor keeps codex entries grouped under user-named categories
("Characters", "Orte", ...) with tags, an optional story role and a free-form
metadata dict (``globalInclude``, comma-separated ``aliases``). The engine wants
flat ``CodexEntry`` snapshots with a closed category and importance.
"""

from __future__ import annotations

import re
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from codex_models import CodexCategory, CodexEntry, Importance


_CATEGORY_KEYWORDS = (
    (CodexCategory.CHARACTER, ("character", "charakter", "person", "figur")),
    (CodexCategory.LOCATION, ("location", "place", "ort", "schaupl", "setting")),
    (CodexCategory.OBJECT, ("object", "item", "gegenst", "artefakt", "artifact")),
    (CodexCategory.LORE, ("lore", "history", "geschichte", "hintergrund", "background", "world")),
)

# Needles anchor at a word start: "Orte" maps to location, "Reports" does not.
_CATEGORY_PATTERNS = tuple(
    (category, re.compile(r"\b(?:" + "|".join(re.escape(n) for n in needles) + ")"))
    for category, needles in _CATEGORY_KEYWORDS
)

_ROLE_IMPORTANCE: Dict[str, Importance] = {
    "protagonist": Importance.MAJOR,
    "antagonist": Importance.MAJOR,
    "nebencharakter": Importance.MINOR,
    "love-interest": Importance.MINOR,
    "hintergrundcharakter": Importance.BACKGROUND,
}


class StoryCodexEntryPayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    title: str
    content: str = ""
    tags: List[str] = Field(default_factory=list)
    metadata: Dict[str, Any] = Field(default_factory=dict)
    story_role: Optional[str] = Field(default=None, alias="storyRole")
    always_include: bool = Field(default=False, alias="alwaysInclude")


class StoryCodexCategoryPayload(BaseModel):
    id: str = ""
    title: str
    entries: List[StoryCodexEntryPayload] = Field(default_factory=list)


class StoryCodexPayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    story_id: Optional[str] = Field(default=None, alias="storyId")
    categories: List[StoryCodexCategoryPayload] = Field(default_factory=list)


def category_from_title(title: str) -> CodexCategory:
    lowered = (title or "").strip().lower()
    for category, pattern in _CATEGORY_PATTERNS:
        if pattern.search(lowered):
            return category
    return CodexCategory.OTHER


def importance_from_role(role: Optional[str]) -> Importance:
    return _ROLE_IMPORTANCE.get((role or "").strip().lower(), Importance.MINOR)


def split_aliases(raw: Any) -> List[str]:
    if raw is None:
        return []
    if isinstance(raw, (list, tuple)):
        parts = [str(p) for p in raw]
    else:
        parts = str(raw).split(",")
    return [p.strip() for p in parts if p and p.strip()]


def convert_entry(entry: StoryCodexEntryPayload, category: CodexCategory) -> CodexEntry:
    metadata = entry.metadata or {}
    return CodexEntry(
        id=entry.id,
        title=entry.title,
        category=category,
        content=entry.content or "",
        aliases=tuple(split_aliases(metadata.get("aliases"))),
        keywords=tuple(t.strip() for t in entry.tags if t and t.strip()),
        importance=importance_from_role(entry.story_role),
        global_include=bool(entry.always_include or metadata.get("globalInclude")),
    )


def convert_story_codex(codex: Any) -> List[CodexEntry]:
    """Flatten a story codex (dict or payload) in category, then entry, order."""
    payload = codex if isinstance(codex, StoryCodexPayload) else StoryCodexPayload.model_validate(codex)
    converted: List[CodexEntry] = []
    for category in payload.categories:
        target = category_from_title(category.title)
        for entry in category.entries:
            converted.append(convert_entry(entry, target))
    return converted
