"""Tunable constants for codex relevance scoring, selection and packing."""

from __future__ import annotations

import logging
from typing import Annotated, Any, Dict, Tuple

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

from codex_models import CodexCategory

logger = logging.getLogger(__name__)

DEFAULT_CATEGORY_QUOTAS: Dict[CodexCategory, int] = {
    CodexCategory.CHARACTER: 5,
    CodexCategory.LOCATION: 3,
    CodexCategory.OBJECT: 3,
    CodexCategory.LORE: 2,
    CodexCategory.OTHER: 2,
}


class RelevanceSettings(BaseSettings):
    """Weights, windows and quotas, overridable through ``CODEX_RELEVANCE_*``.

    Quotas come one category at a time from
    ``CODEX_RELEVANCE_CATEGORY_QUOTAS__<CATEGORY>`` and locales from a comma
    separated ``CODEX_RELEVANCE_PROMPT_LOCALES``.
    """

    model_config = SettingsConfigDict(
        env_prefix="CODEX_RELEVANCE_",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
        frozen=True,
    )

    context_window_size: int = Field(default=2000, gt=0, description="Trailing characters searched for evidence")
    keyword_weight: float = Field(default=1.0, ge=0)
    alias_weight: float = Field(default=0.9, ge=0)
    semantic_weight: float = Field(default=0.7, ge=0)
    recency_decay: float = Field(default=0.8, ge=0)
    tokens_per_char: float = Field(default=0.25, gt=0)
    default_max_tokens: int = Field(default=1000, description="Budget used when a call passes none")
    character_prompt_bonus: float = Field(default=2.0, ge=0)
    location_prompt_bonus: float = Field(default=1.5, ge=0)
    prompt_locales: Annotated[Tuple[str, ...], NoDecode] = ("en", "de")
    category_quotas: Dict[CodexCategory, int] = Field(default_factory=lambda: dict(DEFAULT_CATEGORY_QUOTAS))
    force_include_globals: bool = False

    @field_validator("category_quotas", mode="before")
    @classmethod
    def _fill_quotas(cls, value):
        # Quotas are exhaustive over CodexCategory; overrides sit on top of defaults.
        merged = dict(DEFAULT_CATEGORY_QUOTAS)
        for key, quota in dict(value or {}).items():
            merged[CodexCategory(str(getattr(key, "value", key)).lower())] = int(quota)
        return merged

    @field_validator("category_quotas")
    @classmethod
    def _non_negative_quotas(cls, value: Dict[CodexCategory, int]) -> Dict[CodexCategory, int]:
        for category, quota in value.items():
            if quota < 0:
                raise ValueError(f"quota for {category.value} must be >= 0, got {quota}")
        return value

    @field_validator("prompt_locales", mode="before")
    @classmethod
    def _split_locales(cls, value):
        if isinstance(value, str):
            value = value.split(",")
        return tuple(str(v).strip().lower() for v in (value or ()) if str(v).strip())

    def quota_for(self, category: CodexCategory) -> int:
        return self.category_quotas[category]

    @classmethod
    def from_env(cls, **overrides: Any) -> "RelevanceSettings":
        """Load settings, replacing malformed environment values with defaults.

        Plain construction raises on a bad variable; this logs a warning per
        offending field and retries with that field pinned to its default.
        Invalid explicit ``overrides`` still raise.
        """
        try:
            return cls(**overrides)
        except ValidationError as exc:
            failed: Dict[str, str] = {}
            for error in exc.errors():
                name = str(error["loc"][0]) if error["loc"] else ""
                if name not in cls.model_fields or name in overrides:
                    raise
                failed.setdefault(name, error["msg"])

        values = dict(overrides)
        prefix = cls.model_config.get("env_prefix", "")
        for name, message in failed.items():
            default = cls.model_fields[name].get_default(call_default_factory=True)
            logger.warning("Ignoring %s%s (%s); using default %r", prefix, name.upper(), message, default)
            values[name] = default
        return cls(**values)
