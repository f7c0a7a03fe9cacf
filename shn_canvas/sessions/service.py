"""Session orchestration: listing, loading, extraction and export.

Pure sequencing of store and pipeline calls. Errors propagate to the
caller (the API layer), which reports them as short status strings.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Literal

from shn_canvas.context import CanvasContext
from shn_canvas.errors import ConfigurationMissingError, ExtractionNotFoundError, SessionNotFoundError
from shn_canvas.extraction.chunker import assemble_turn_log
from shn_canvas.extraction.pipeline import ExtractionPipeline, ExtractionRun
from shn_canvas.models.session import ExtractionKind, ExtractionResult, Session, Turn
from shn_canvas.sessions.export import (
    build_extracted_export,
    build_raw_export,
    export_filename,
    refined_download_filename,
)
from shn_canvas.store.repositories import (
    EXTRACTIONS_COLLECTION,
    SESSIONS_COLLECTION,
    extraction_doc_id,
    turns_collection,
)

logger = logging.getLogger(__name__)

TURN_PAGE_SIZE = 100

ExportMode = Literal["raw", "extracted"]


@dataclass(frozen=True)
class SessionExport:
    """Export document and the filename to offer it under."""

    filename: str
    document: dict[str, Any]


class SessionService:
    """Session browser operations bound to one CanvasContext."""

    def __init__(self, ctx: CanvasContext, pipeline: ExtractionPipeline | None = None) -> None:
        self._ctx = ctx
        self._pipeline = pipeline

    @property
    def context(self) -> CanvasContext:
        return self._ctx

    async def list_sessions(self) -> list[Session]:
        """All sessions, newest update first; missing timestamps sort last."""
        documents = await self._ctx.store.list(SESSIONS_COLLECTION)
        sessions = [Session.from_document(doc) for doc in documents]
        sessions.sort(key=lambda s: s.sort_timestamp, reverse=True)
        self._ctx.sessions_cache = sessions
        return sessions

    async def get_session(self, session_id: str) -> Session:
        """Fetch one session.

        Raises:
            SessionNotFoundError: If the session does not exist
        """
        document = await self._ctx.store.get(SESSIONS_COLLECTION, session_id)
        if document is None:
            raise SessionNotFoundError(session_id)
        return Session.from_document(document)

    async def load_session(self, session_id: str) -> Session:
        """Fetch a session and make it the context's current session."""
        session = await self.get_session(session_id)
        self._ctx.current_session_id = session.id
        self._ctx.current_subject = session.subject
        logger.info(f"Loaded session {session_id}")
        return session

    async def get_turns(self, session_id: str) -> list[Turn]:
        """Child turns ordered by turn number (one page)."""
        documents = await self._ctx.store.list(
            turns_collection(session_id), order_field="turnNumber", limit=TURN_PAGE_SIZE
        )
        turns = [Turn.from_document(doc) for doc in documents]
        turns.sort(key=lambda t: t.turn_number)
        return turns

    async def get_extraction(self, session_id: str, kind: ExtractionKind) -> ExtractionResult | None:
        document = await self._ctx.store.get(EXTRACTIONS_COLLECTION, extraction_doc_id(session_id, kind.value))
        return ExtractionResult.from_document(document) if document else None

    async def run_extraction(
        self,
        session_id: str,
        *,
        kind: ExtractionKind = ExtractionKind.micro,
        batch_size: int | str | None = 10,
        download_dir: Path | None = None,
    ) -> ExtractionRun:
        """Refine a session's full turn log and persist the result.

        Args:
            session_id: Session to extract
            kind: Granularity; selects the chunk marker
            batch_size: Chunks per LLM call
            download_dir: If given, also write the array-literal download there

        Raises:
            SessionNotFoundError: If the session does not exist
            ExtractionError: If there are no turns or a batch fails
            ConfigurationMissingError: If no pipeline is available
        """
        if self._pipeline is None:
            raise ConfigurationMissingError("llm.apiKey")

        session = await self.get_session(session_id)
        turns = await self.get_turns(session_id)
        full_text = assemble_turn_log(turns)

        download_path = download_dir / refined_download_filename(session) if download_dir else None
        run = await self._pipeline.extract(
            full_text,
            kind.marker_kind,
            batch_size,
            session_id=session_id,
            kind=kind,
            download_path=download_path,
        )
        logger.info(
            f"Extraction {kind.value} for session {session_id}: "
            f"{run.chunk_count} chunks, {run.batch_count} batches"
        )
        return run

    async def export_session(self, session_id: str, mode: ExportMode = "raw") -> SessionExport:
        """Build a downloadable export document.

        Raises:
            SessionNotFoundError: If the session does not exist
            ExtractionNotFoundError: If ``extracted`` is requested with nothing stored
        """
        session = await self.get_session(session_id)
        turns = await self.get_turns(session_id)

        if mode == "extracted":
            extractions = {kind: await self.get_extraction(session_id, kind) for kind in ExtractionKind}
            if not any(extractions.values()):
                raise ExtractionNotFoundError(session_id)
            document = build_extracted_export(session, turns, extractions)
            return SessionExport(filename=export_filename("shn_extracted", session), document=document)

        document = build_raw_export(session, turns)
        return SessionExport(filename=export_filename("shn_raw", session), document=document)
