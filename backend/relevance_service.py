"""Codex relevance pipeline: score, cap per category, pack into a token budget."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from budget import estimate_tokens, pack_entries
from codex_models import CodexEntry, CodexEntryPayload, RelevanceScore, RelevanceScorePayload, ScoredEntry
from mention_tracker import update_mentions
from prompt_formatter import format_entries_for_prompt
from prompt_patterns import PromptPatternMatcher, build_prompt_matchers
from relevance_config import RelevanceSettings
from scoring import score_entry
from selector import select_top_entries

logger = logging.getLogger(__name__)

TraceFn = Callable[[str, Dict[str, Any]], None]


@dataclass
class RelevanceReport:
    """Per-entry scores alongside the final selection, for inspection."""

    scores: List[RelevanceScore] = field(default_factory=list)
    selected: List[CodexEntry] = field(default_factory=list)
    estimated_tokens: int = 0

    def score_for(self, entry_id: str) -> Optional[RelevanceScore]:
        for score in self.scores:
            if score.entry_id == entry_id:
                return score
        return None

    def to_payload(self) -> dict:
        return {
            "scores": [
                RelevanceScorePayload(entry_id=s.entry_id, score=s.score, reasons=list(s.reasons)).model_dump(by_alias=True)
                for s in self.scores
            ],
            "selected": [CodexEntryPayload.from_entry(e).model_dump(by_alias=True) for e in self.selected],
            "estimatedTokens": self.estimated_tokens,
        }


class CodexRelevanceService:
    """Stateless facade over the scoring, selection and packing steps.

    ``trace`` receives ``(event, data)`` for every selection and packing
    decision; nothing is retained between calls.
    """

    def __init__(
        self,
        settings: Optional[RelevanceSettings] = None,
        matchers: Optional[Sequence[PromptPatternMatcher]] = None,
        trace: Optional[TraceFn] = None,
    ):
        self.settings = settings or RelevanceSettings()
        self.matchers = list(matchers) if matchers is not None else build_prompt_matchers(settings=self.settings)
        self.trace = trace

    def score(self, entry: CodexEntry, current_text: str, beat_prompt: str) -> RelevanceScore:
        return score_entry(entry, current_text, beat_prompt, self.settings, self.matchers)

    def relevant_entries(
        self,
        entries: Sequence[CodexEntry],
        current_text: str,
        beat_prompt: str,
        max_tokens: Optional[int] = None,
    ) -> List[CodexEntry]:
        _, packed = self._run(entries, current_text, beat_prompt, max_tokens)
        return packed

    def analyze(
        self,
        entries: Sequence[CodexEntry],
        current_text: str,
        beat_prompt: str,
        max_tokens: Optional[int] = None,
    ) -> RelevanceReport:
        """Run the pipeline and keep every entry's score, in input order.

        Global entries are scored here for inspection only; their score never
        affects selection.
        """
        scored, selected = self._run(entries, current_text, beat_prompt, max_tokens)
        ranked = iter(scored)
        scores = [
            self.score(entry, current_text, beat_prompt) if entry.global_include else next(ranked).relevance
            for entry in entries
        ]
        return RelevanceReport(
            scores=scores,
            selected=selected,
            estimated_tokens=estimate_tokens(selected, self.settings.tokens_per_char),
        )

    def update_mentions(self, entries: Sequence[CodexEntry], generated_text: str, text_position: int) -> List[CodexEntry]:
        return update_mentions(entries, generated_text, text_position)

    def format_for_prompt(self, entries: Sequence[CodexEntry]) -> str:
        return format_entries_for_prompt(entries)

    def build_prompt_context(
        self,
        entries: Sequence[CodexEntry],
        current_text: str,
        beat_prompt: str,
        max_tokens: Optional[int] = None,
    ) -> str:
        return format_entries_for_prompt(self.relevant_entries(entries, current_text, beat_prompt, max_tokens))

    def _run(
        self,
        entries: Sequence[CodexEntry],
        current_text: str,
        beat_prompt: str,
        max_tokens: Optional[int],
    ) -> Tuple[List[ScoredEntry], List[CodexEntry]]:
        # Globals skip scoring and quotas entirely.
        globals_: List[CodexEntry] = []
        scored: List[ScoredEntry] = []
        for entry in entries:
            if entry.global_include:
                globals_.append(entry)
                continue
            scored.append(ScoredEntry(entry=entry, relevance=self.score(entry, current_text, beat_prompt)))

        candidates = [s for s in scored if s.score > 0]
        selected = select_top_entries(candidates, self.settings.category_quotas, trace=self._emit)
        budget = self.settings.default_max_tokens if max_tokens is None else max_tokens
        packed = pack_entries(
            globals_,
            selected,
            budget,
            tokens_per_char=self.settings.tokens_per_char,
            force_include_globals=self.settings.force_include_globals,
            trace=self._emit,
        )
        return scored, packed

    def _emit(self, event: str, data: Dict[str, Any]) -> None:
        entry = data.get("entry")
        title = entry.title if entry is not None else "?"
        if event == "selected":
            logger.debug("Selected %s (%s): score=%.2f reasons=%s", title, entry.category.value, data["score"], data["reasons"])
        elif event == "skipped_budget":
            logger.debug("Skipping %s due to token limit (%.1f tokens)", title, data["tokens"])
        if self.trace is not None:
            self.trace(event, data)
