# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2026-01-22
# Description: SQLSourceRepository
# -----------------------------------------------------------------------------
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, List, Optional

from sqlalchemy import and_, create_engine, func, or_, select, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session

from source.SourceItem import SourceItem, SourceKind
from source.SourceRepository import Cursor, SourceRepository
from source.db_models import EnrichmentModel, RecordingModel, TranscriptionModel
from utility.logging_utils import get_class_logger


@dataclass
class SQLSourceRepository(SourceRepository):
    """
    Reads transcriptions and enrichments from the recordings database.

    Both kinds go through the same query shape:
      - model: table holding the text
      - text column: transcriptions.text / enrichments.content
      - recording id: direct column / via the parent transcription
    """

    engine: Engine
    logger: Optional[logging.Logger] = None

    def __post_init__(self) -> None:
        self.logger = self.logger or get_class_logger(self.__class__)
        self.logger.info("SQLSourceRepository initialised (dialect=%s)", self.engine.dialect.name)

    @classmethod
    def from_url(cls, database_url: str, **engine_kwargs: Any) -> "SQLSourceRepository":
        engine = create_engine(database_url, pool_pre_ping=True, **engine_kwargs)
        return cls(engine=engine)

    # ------------------------------------------------------------------
    # Query building
    # ------------------------------------------------------------------
    @staticmethod
    def _model(kind: SourceKind):
        return TranscriptionModel if kind is SourceKind.TRANSCRIPTION else EnrichmentModel

    def _select_items(self, kind: SourceKind):
        if kind is SourceKind.TRANSCRIPTION:
            return (
                select(
                    TranscriptionModel.id,
                    TranscriptionModel.text.label("text"),
                    TranscriptionModel.updated_at,
                    TranscriptionModel.created_at,
                    TranscriptionModel.recording_id,
                    RecordingModel.original_filename,
                    RecordingModel.filename,
                    RecordingModel.created_at.label("recording_created_at"),
                )
                .outerjoin(RecordingModel, TranscriptionModel.recording_id == RecordingModel.id)
            )

        return (
            select(
                EnrichmentModel.id,
                EnrichmentModel.content.label("text"),
                EnrichmentModel.updated_at,
                EnrichmentModel.created_at,
                TranscriptionModel.recording_id,
                RecordingModel.original_filename,
                RecordingModel.filename,
                RecordingModel.created_at.label("recording_created_at"),
            )
            .join(TranscriptionModel, EnrichmentModel.transcription_id == TranscriptionModel.id)
            .outerjoin(RecordingModel, TranscriptionModel.recording_id == RecordingModel.id)
        )

    @staticmethod
    def _to_item(kind: SourceKind, row: Any) -> SourceItem:
        return SourceItem(
            id=str(row.id),
            kind=kind,
            text=row.text or "",
            revision=row.updated_at,
            parent_recording_id=str(row.recording_id) if row.recording_id is not None else None,
            created_at=row.created_at,
            label=row.original_filename or row.filename,
            recording_created_at=row.recording_created_at,
        )

    # ------------------------------------------------------------------
    # SourceRepository
    # ------------------------------------------------------------------
    def test_connection(self) -> bool:
        try:
            with self.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
            return True
        except Exception as e:
            self.logger.error("Database connection failed: %s", e)
            return False

    def count(self, kind: SourceKind, created_until: Optional[datetime] = None) -> int:
        model = self._model(kind)
        stmt = select(func.count()).select_from(model)
        if created_until is not None:
            stmt = stmt.where(model.created_at <= created_until)

        with Session(self.engine) as session:
            return int(session.execute(stmt).scalar_one())

    def latest_created_at(self, kind: SourceKind) -> Optional[datetime]:
        model = self._model(kind)
        with Session(self.engine) as session:
            return session.execute(select(func.max(model.created_at))).scalar_one_or_none()

    def fetch_page(
            self,
            kind: SourceKind,
            *,
            after: Optional[Cursor] = None,
            created_until: Optional[datetime] = None,
            limit: int = 100,
    ) -> List[SourceItem]:
        model = self._model(kind)
        stmt = self._select_items(kind)

        if after is not None:
            after_created, after_id = after
            stmt = stmt.where(
                or_(
                    model.created_at > after_created,
                    and_(model.created_at == after_created, model.id > after_id),
                )
            )
        if created_until is not None:
            stmt = stmt.where(model.created_at <= created_until)

        stmt = stmt.order_by(model.created_at.asc(), model.id.asc()).limit(limit)

        with Session(self.engine) as session:
            rows = session.execute(stmt).all()

        self.logger.debug("fetch_page(kind=%s, after=%s) -> %d rows", kind.value, after, len(rows))
        return [self._to_item(kind, r) for r in rows]

    def get_item(self, kind: SourceKind, source_id: str) -> Optional[SourceItem]:
        model = self._model(kind)
        stmt = self._select_items(kind).where(model.id == source_id)

        with Session(self.engine) as session:
            row = session.execute(stmt).first()

        return self._to_item(kind, row) if row is not None else None
