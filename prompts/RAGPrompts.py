# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-01-22
# Description: RAGPrompts.py
# -----------------------------------------------------------------------------
"""Prompt text for answering questions over recordings (German + English)."""

import re
from typing import Dict, List, Optional, Sequence

from chat.CompletionClient import Message
from source.SourceItem import SourceItem, SourceKind

SUPPORTED_LANGUAGES = ("de", "en")

_SYSTEM_PROMPTS: Dict[str, str] = {
    "de": (
        "Du bist ein hilfreicher Assistent, der Fragen über Sprachaufnahmen und Transkriptionen beantwortet.\n\n"
        "Wichtige Regeln:\n"
        "1. Antworte NUR basierend auf den bereitgestellten Kontextinformationen.\n"
        "2. Wenn die Antwort nicht im Kontext zu finden ist, sage das ehrlich.\n"
        "3. Zitiere relevante Quellen mit [Quelle X] wenn möglich.\n"
        "4. Fasse Informationen aus mehreren Quellen zusammen, wenn relevant.\n"
        "5. Antworte präzise und hilfreich auf Deutsch.\n"
        "6. Verwende Markdown-Formatierung (Fett, Listen, Überschriften) für bessere Lesbarkeit.\n"
    ),
    "en": (
        "You are a helpful assistant that answers questions about voice recordings and transcriptions.\n\n"
        "Important rules:\n"
        "1. Answer ONLY based on the provided context information.\n"
        "2. If the answer cannot be found in the context, say so honestly.\n"
        "3. Cite relevant sources with [Source X] when possible.\n"
        "4. Combine information from multiple sources when relevant.\n"
        "5. Answer precisely and helpfully in English.\n"
        "6. Use Markdown formatting (bold, lists, headings) for better readability.\n"
    ),
}

_NO_CONTEXT_ANSWERS: Dict[str, str] = {
    "de": "Ich konnte keine relevanten Informationen in den Aufnahmen finden.",
    "en": "I could not find relevant information in the recordings.",
}

_LABELS: Dict[str, Dict[str, str]] = {
    "de": {
        "source": "Quelle",
        "file": "Datei",
        "date": "Datum",
        "type": "Typ",
        "relevance": "Relevanz",
        "content": "Inhalt",
        "unknown_file": "Unbekannte Aufnahme",
        "unknown_date": "Unbekannt",
        SourceKind.TRANSCRIPTION.value: "Transkription",
        SourceKind.ENRICHMENT.value: "Anreicherung",
    },
    "en": {
        "source": "Source",
        "file": "File",
        "date": "Date",
        "type": "Type",
        "relevance": "Relevance",
        "content": "Content",
        "unknown_file": "Unknown recording",
        "unknown_date": "Unknown",
        SourceKind.TRANSCRIPTION.value: "Transcription",
        SourceKind.ENRICHMENT.value: "Enrichment",
    },
}

_DATE_FORMATS = {"de": "%d.%m.%Y", "en": "%Y-%m-%d"}

_FOLLOW_UP_INDICATORS = (
    # German
    "das", "dies", "diese", "dieser", "davon", "dazu",
    "mehr", "weitere", "genauer", "detail",
    "was noch", "und", "aber",
    # English
    "this", "that", "those", "it", "them",
    "more", "also", "and what about",
)

_FOLLOW_UP_RE = re.compile(
    r"\b(?:" + "|".join(re.escape(i) for i in _FOLLOW_UP_INDICATORS) + r")\b",
    re.IGNORECASE,
)


def resolve_language(language: Optional[str]) -> str:
    lang = (language or "").strip().lower()[:2]
    return lang if lang in SUPPORTED_LANGUAGES else "de"


def system_prompt(language: str) -> str:
    return _SYSTEM_PROMPTS[resolve_language(language)]


def no_context_answer(language: str) -> str:
    return _NO_CONTEXT_ANSWERS[resolve_language(language)]


def format_source(index: int, item: SourceItem, score: float, language: str) -> str:
    labels = _LABELS[resolve_language(language)]
    recorded = item.recording_created_at or item.created_at
    date = (
        recorded.strftime(_DATE_FORMATS[resolve_language(language)])
        if recorded is not None
        else labels["unknown_date"]
    )
    return (
        f"[{labels['source']} {index}]\n"
        f"{labels['file']}: {item.label or labels['unknown_file']}\n"
        f"{labels['date']}: {date}\n"
        f"{labels['type']}: {labels[item.kind.value]}\n"
        f"{labels['relevance']}: {score * 100:.1f}%\n\n"
        f"{labels['content']}:\n"
        f"{item.text.strip()}\n"
        f"---"
    )


def user_prompt(question: str, context: str, language: str) -> str:
    if resolve_language(language) == "de":
        return (
            f"Kontext aus meinen Aufnahmen:\n\n{context}\n\n"
            f"Frage: {question}\n\n"
            f"Bitte beantworte die Frage basierend auf dem obigen Kontext."
        )
    return (
        f"Context from my recordings:\n\n{context}\n\n"
        f"Question: {question}\n\n"
        f"Please answer the question based on the context above."
    )


def is_follow_up(question: str) -> bool:
    return bool(_FOLLOW_UP_RE.search(question or ""))


def expand_follow_up(question: str, history: Sequence[Message], language: str) -> str:
    """Prefix the question with the last exchange so retrieval sees the topic."""
    last_exchange = [m.get("content", "") for m in list(history)[-2:] if m.get("content")]
    previous = " - ".join(last_exchange)
    if resolve_language(language) == "de":
        return f"Kontext der vorherigen Frage: {previous}\n\nAktuelle Frage: {question}"
    return f"Context of the previous question: {previous}\n\nCurrent question: {question}"


def build_messages(question: str, context: str, language: str) -> List[Message]:
    return [
        {"role": "system", "content": system_prompt(language)},
        {"role": "user", "content": user_prompt(question, context, language)},
    ]
