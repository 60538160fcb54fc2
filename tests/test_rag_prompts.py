# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-01-22
# Description: test_rag_prompts.py
# -----------------------------------------------------------------------------
from dataclasses import replace
from datetime import datetime

import pytest

from conftest import make_item
from prompts import RAGPrompts
from source.SourceItem import SourceKind


@pytest.mark.parametrize(
    "language, expected",
    [("de", "de"), ("en", "en"), ("en-US", "en"), ("DE", "de"), ("fr", "de"), (None, "de")],
)
def test_resolve_language(language, expected):
    assert RAGPrompts.resolve_language(language) == expected


def test_format_source_block():
    item = make_item("e1", SourceKind.ENRICHMENT, "  Key points: ship v2  ", label="Standup.webm")

    block = RAGPrompts.format_source(2, item, 0.8766, "en")

    assert block.startswith("[Source 2]\n")
    assert "File: Standup.webm" in block
    assert "Date: 2026-01-20" in block
    assert "Type: Enrichment" in block
    assert "Relevance: 87.7%" in block
    assert "Key points: ship v2\n---" in block


def test_format_source_block_german_without_label():
    item = make_item("t1", SourceKind.TRANSCRIPTION, "Hallo")

    block = RAGPrompts.format_source(1, item, 0.5, "de")

    assert "[Quelle 1]" in block
    assert "Datei: Unbekannte Aufnahme" in block
    assert "Datum: 20.01.2026" in block
    assert "Typ: Transkription" in block


def test_format_source_block_shows_recording_date():
    item = replace(
        make_item("e1", SourceKind.ENRICHMENT, "Summary"),
        recording_created_at=datetime(2025, 12, 24, 9, 30),
    )

    assert "Date: 2025-12-24" in RAGPrompts.format_source(1, item, 0.5, "en")
    assert "Datum: 24.12.2025" in RAGPrompts.format_source(1, item, 0.5, "de")


@pytest.mark.parametrize(
    "question, expected",
    [
        ("Kannst du mehr dazu sagen?", True),
        ("Tell me more", True),
        ("What about that?", True),
        ("Wie hoch ist das Budget?", True),
        ("Summarize the Q3 budget meeting", False),
        ("Which items were discussed?", False),  # 'it' inside a word does not count
    ],
)
def test_is_follow_up(question, expected):
    assert RAGPrompts.is_follow_up(question) is expected


def test_expand_follow_up_uses_last_exchange_only():
    history = [
        {"role": "user", "content": "old question"},
        {"role": "assistant", "content": "old answer"},
        {"role": "user", "content": "Wer kommt zum Offsite?"},
        {"role": "assistant", "content": "Das ganze Team."},
    ]

    expanded = RAGPrompts.expand_follow_up("Und wann?", history, "de")

    assert expanded == (
        "Kontext der vorherigen Frage: Wer kommt zum Offsite? - Das ganze Team.\n\n"
        "Aktuelle Frage: Und wann?"
    )


def test_build_messages():
    messages = RAGPrompts.build_messages("Q?", "CTX", "en")

    assert [m["role"] for m in messages] == ["system", "user"]
    assert "Question: Q?" in messages[1]["content"]
    assert "CTX" in messages[1]["content"]
