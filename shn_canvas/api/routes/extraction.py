"""Extraction endpoints - POST /sessions/{id}/extractions, POST /extractions/batch."""

from typing import Annotated

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from shn_canvas.api.deps import get_pipeline, get_session_service, to_http_error
from shn_canvas.config import Settings, get_settings
from shn_canvas.errors import CanvasError, ConfigurationMissingError
from shn_canvas.extraction.chunker import MAX_BATCH_SIZE, MIN_BATCH_SIZE
from shn_canvas.extraction.pipeline import ExtractionPipeline
from shn_canvas.models.session import ExtractionKind
from shn_canvas.sessions.service import SessionService

router = APIRouter(tags=["extraction"])


class ExtractionRequest(BaseModel):
    """Request body for POST /sessions/{session_id}/extractions."""

    kind: ExtractionKind = ExtractionKind.micro
    batch_size: int | None = Field(None, ge=MIN_BATCH_SIZE, le=MAX_BATCH_SIZE)


class ExtractionResponse(BaseModel):
    """Response for POST /sessions/{session_id}/extractions."""

    session_id: str
    kind: ExtractionKind
    chunk_count: int
    batch_count: int
    batch_size: int
    persisted_id: str | None
    persist_error: str | None = None
    result: str


class BatchExtractionRequest(BaseModel):
    """Request body for POST /extractions/batch."""

    chunks: list[str] = Field(..., min_length=1)
    batch_size: int = Field(1, ge=MIN_BATCH_SIZE, le=MAX_BATCH_SIZE)


class BatchOutcomeResponse(BaseModel):
    """One attempted batch."""

    index: int
    ok: bool
    result: str | None = None
    error: str | None = None


class BatchExtractionResponse(BaseModel):
    """Response for POST /extractions/batch."""

    outcomes: list[BatchOutcomeResponse]
    succeeded: int
    failed: int


@router.post("/sessions/{session_id}/extractions", response_model=ExtractionResponse)
async def run_session_extraction(
    session_id: str,
    request: ExtractionRequest,
    service: Annotated[SessionService, Depends(get_session_service)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> ExtractionResponse:
    """Refine a session's turn log and persist the result.

    Raises:
        HTTPException: 400 without an LLM key, 404 for an unknown session,
            502 when a batch or the store fails
    """
    batch_size = request.batch_size or settings.default_batch_size
    try:
        run = await service.run_extraction(session_id, kind=request.kind, batch_size=batch_size)
    except CanvasError as e:
        raise to_http_error(e) from e

    return ExtractionResponse(
        session_id=session_id,
        kind=request.kind,
        chunk_count=run.chunk_count,
        batch_count=run.batch_count,
        batch_size=run.batch_size,
        persisted_id=run.persisted_id,
        persist_error=run.persist_error,
        result=run.result,
    )


@router.post("/extractions/batch", response_model=BatchExtractionResponse)
async def run_batch_extraction(
    request: BatchExtractionRequest,
    pipeline: Annotated[ExtractionPipeline | None, Depends(get_pipeline)],
) -> BatchExtractionResponse:
    """Refine pre-chunked text, reporting each batch.

    A failing batch ends the run and is the last outcome; it is reported in
    the body rather than as an error status.
    """
    if pipeline is None:
        raise to_http_error(ConfigurationMissingError("llm.apiKey"))

    outcomes = await pipeline.batch_extract(request.chunks, batch_size=request.batch_size)
    failed = sum(1 for o in outcomes if not o.ok)
    return BatchExtractionResponse(
        outcomes=[
            BatchOutcomeResponse(index=o.index, ok=o.ok, result=o.result, error=o.error) for o in outcomes
        ],
        succeeded=len(outcomes) - failed,
        failed=failed,
    )
