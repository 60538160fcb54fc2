# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-01-22
# Description: db_models.py
# -----------------------------------------------------------------------------
"""
Read-side mapping of the recordings database.

The schema is owned by the web backend's migrations; these models only
describe the columns the embedding pipeline reads.
"""
from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.orm import declarative_base

Base = declarative_base()


def _utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


class RecordingModel(Base):
    __tablename__ = "recordings"

    id = Column(String(36), primary_key=True)
    filename = Column(String(255), nullable=False)
    original_filename = Column(String(255), nullable=True)
    duration_seconds = Column(Numeric(10, 2), nullable=True)
    created_at = Column(DateTime, nullable=False, default=_utcnow)
    updated_at = Column(DateTime, nullable=False, default=_utcnow)


class TranscriptionModel(Base):
    __tablename__ = "transcriptions"

    id = Column(String(36), primary_key=True)
    recording_id = Column(
        String(36), ForeignKey("recordings.id", ondelete="CASCADE"), nullable=False, unique=True, index=True
    )
    text = Column(Text, nullable=False)
    language = Column(String(10), default="de")
    created_at = Column(DateTime, nullable=False, default=_utcnow, index=True)
    updated_at = Column(DateTime, nullable=False, default=_utcnow)


class EnrichmentModel(Base):
    __tablename__ = "enrichments"

    id = Column(String(36), primary_key=True)
    transcription_id = Column(
        String(36), ForeignKey("transcriptions.id", ondelete="CASCADE"), nullable=False, index=True
    )
    type = Column(String(50), nullable=False)  # summary, notes, action_items, ...
    content = Column(Text, nullable=False)
    tokens_used = Column(Integer, nullable=True)
    created_at = Column(DateTime, nullable=False, default=_utcnow, index=True)
    updated_at = Column(DateTime, nullable=False, default=_utcnow)

