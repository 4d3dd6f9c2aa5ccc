"""Codex entry records and their wire payloads."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field


class CodexCategory(str, Enum):
    CHARACTER = "character"
    LOCATION = "location"
    OBJECT = "object"
    LORE = "lore"
    OTHER = "other"


class Importance(str, Enum):
    MAJOR = "major"
    MINOR = "minor"
    BACKGROUND = "background"


@dataclass(frozen=True)
class CodexEntry:
    """A worldbuilding entry as seen by the relevance engine.

    Entries are snapshots: only the mention tracker produces changed copies,
    and only ``last_mentioned``/``mention_count`` ever differ between them.
    ``category`` and ``importance`` may be given as their string values; an
    unknown value raises ``ValueError``.
    """

    id: str
    title: str
    category: CodexCategory
    content: str = ""
    aliases: Tuple[str, ...] = ()
    keywords: Tuple[str, ...] = ()
    importance: Importance = Importance.MINOR
    global_include: bool = False
    last_mentioned: Optional[int] = None
    mention_count: Optional[int] = None

    def __post_init__(self):
        # Accept the store's plain strings and lists; keep the record closed and immutable.
        object.__setattr__(self, "category", CodexCategory(self.category))
        object.__setattr__(self, "importance", Importance(self.importance))
        object.__setattr__(self, "aliases", tuple(self.aliases or ()))
        object.__setattr__(self, "keywords", tuple(self.keywords or ()))


@dataclass
class RelevanceScore:
    entry_id: str
    score: float = 0.0
    reasons: List[str] = field(default_factory=list)


@dataclass
class ScoredEntry:
    entry: CodexEntry
    relevance: RelevanceScore

    @property
    def score(self) -> float:
        return self.relevance.score


# API payloads

class CodexEntryPayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    title: str
    category: CodexCategory
    content: str = ""
    aliases: List[str] = Field(default_factory=list)
    keywords: List[str] = Field(default_factory=list)
    importance: Importance = Importance.MINOR
    global_include: bool = Field(default=False, alias="globalInclude")
    last_mentioned: Optional[int] = Field(default=None, alias="lastMentioned")
    mention_count: Optional[int] = Field(default=None, alias="mentionCount", ge=0)

    def to_entry(self) -> CodexEntry:
        return CodexEntry(
            id=self.id,
            title=self.title,
            category=self.category,
            content=self.content,
            aliases=tuple(self.aliases),
            keywords=tuple(self.keywords),
            importance=self.importance,
            global_include=self.global_include,
            last_mentioned=self.last_mentioned,
            mention_count=self.mention_count,
        )

    @classmethod
    def from_entry(cls, entry: CodexEntry) -> "CodexEntryPayload":
        return cls(
            id=entry.id,
            title=entry.title,
            category=entry.category,
            content=entry.content,
            aliases=list(entry.aliases),
            keywords=list(entry.keywords),
            importance=entry.importance,
            global_include=entry.global_include,
            last_mentioned=entry.last_mentioned,
            mention_count=entry.mention_count,
        )


class RelevanceScorePayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    entry_id: str = Field(alias="entryId")
    score: float
    reasons: List[str] = Field(default_factory=list)


def entries_from_payloads(items: Iterable[dict]) -> List[CodexEntry]:
    """Validate raw entry dicts (snake_case or camelCase keys) into entries."""
    return [CodexEntryPayload.model_validate(item).to_entry() for item in items]


def entries_to_payloads(entries: Iterable[CodexEntry]) -> List[dict]:
    return [CodexEntryPayload.from_entry(e).model_dump(by_alias=True) for e in entries]
