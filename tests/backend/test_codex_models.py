"""
Unit tests for codex entry payload conversion.
"""

import os
import sys

import pytest
from pydantic import ValidationError

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "../../backend"))

from codex_models import (
    CodexCategory,
    CodexEntry,
    CodexEntryPayload,
    Importance,
    entries_from_payloads,
    entries_to_payloads,
)


@pytest.mark.unit
def test_camel_case_payload_builds_entry():
    [entry] = entries_from_payloads(
        [
            {
                "id": "char-1",
                "title": "Emma Steinberg",
                "category": "character",
                "content": "A bold archaeologist.",
                "aliases": ["Emma", "Dr. Steinberg"],
                "keywords": ["archaeology"],
                "importance": "major",
                "globalInclude": True,
                "lastMentioned": 120,
                "mentionCount": 3,
            }
        ]
    )
    assert entry == CodexEntry(
        id="char-1",
        title="Emma Steinberg",
        category=CodexCategory.CHARACTER,
        content="A bold archaeologist.",
        aliases=("Emma", "Dr. Steinberg"),
        keywords=("archaeology",),
        importance=Importance.MAJOR,
        global_include=True,
        last_mentioned=120,
        mention_count=3,
    )


@pytest.mark.unit
def test_snake_case_payload_and_defaults():
    entry = CodexEntryPayload(id="x", title="X", category="lore", global_include=True).to_entry()
    assert entry.global_include is True
    assert entry.importance == Importance.MINOR
    assert entry.aliases == ()
    assert entry.last_mentioned is None


@pytest.mark.unit
def test_payloads_use_store_field_names():
    entry = CodexEntry(id="loc-1", title="Harbour", category=CodexCategory.LOCATION, mention_count=2)
    [payload] = entries_to_payloads([entry])
    assert payload["globalInclude"] is False
    assert payload["mentionCount"] == 2
    assert payload["category"] == "location"


@pytest.mark.unit
@pytest.mark.parametrize(
    "item",
    [
        {"id": "a", "title": "A", "category": "vehicle"},
        {"id": "a", "title": "A", "category": "object", "importance": "huge"},
        {"id": "a", "title": "A", "category": "object", "mentionCount": -1},
    ],
)
def test_invalid_payloads_are_rejected(item):
    with pytest.raises(ValidationError):
        entries_from_payloads([item])


@pytest.mark.unit
def test_entries_are_immutable():
    entry = CodexEntry(id="a", title="A", category=CodexCategory.OTHER)
    with pytest.raises(AttributeError):
        entry.title = "B"


@pytest.mark.unit
def test_entry_accepts_plain_string_values():
    entry = CodexEntry(
        id="c",
        title="Castle",
        category="location",
        importance="major",
        aliases=["Keep"],
        keywords=["ruin"],
    )
    assert entry.category is CodexCategory.LOCATION
    assert entry.importance is Importance.MAJOR
    assert entry.aliases == ("Keep",)
    assert entry.keywords == ("ruin",)


@pytest.mark.unit
def test_entry_rejects_unknown_category():
    with pytest.raises(ValueError):
        CodexEntry(id="v", title="Cart", category="vehicle")
