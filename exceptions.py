# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-01-22
# Description: exceptions.py
# -----------------------------------------------------------------------------
"""Typed exceptions for the voice recording RAG core."""


class VoiceRAGError(Exception):
    """Base exception for embedding / retrieval errors."""
    pass


class ConfigurationError(VoiceRAGError):
    """Missing or invalid configuration (e.g. no OpenAI API key)."""
    pass


class UpstreamError(VoiceRAGError):
    """Embedding or completion API call failed."""
    pass


class DataError(VoiceRAGError):
    """Vector dimensionality mismatch or malformed stored record."""
    pass


class NotFoundError(VoiceRAGError):
    """Referenced source item no longer exists."""
    pass
