"""Session browser endpoints - GET /sessions, GET /sessions/{id}, export."""

from datetime import datetime
from typing import Annotated, Literal
from urllib.parse import quote

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from shn_canvas.api.deps import get_session_service, to_http_error
from shn_canvas.errors import CanvasError
from shn_canvas.models.session import ExtractionKind, Session, Turn
from shn_canvas.sessions.service import SessionService

router = APIRouter(prefix="/sessions", tags=["sessions"])


class SessionSummary(BaseModel):
    """One row of the session list."""

    session_id: str
    subject: str
    title: str
    turn_count: int
    last_turn_title: str | None
    created_at: datetime | None
    updated_at: datetime | None


class SessionListResponse(BaseModel):
    """Response for GET /sessions."""

    sessions: list[SessionSummary]


class TurnSummary(BaseModel):
    """Turn as shown in the session detail view."""

    turn_number: int
    title: str | None
    scene_title: str | None
    content: str
    timestamp: datetime | None


class SessionDetailResponse(BaseModel):
    """Response for GET /sessions/{session_id}."""

    session: SessionSummary
    turns: list[TurnSummary]
    extractions: list[ExtractionKind]


def to_summary(session: Session) -> SessionSummary:
    return SessionSummary(
        session_id=session.id,
        subject=session.subject,
        title=session.display_title,
        turn_count=session.turn_count,
        last_turn_title=session.last_turn_title,
        created_at=session.created_at,
        updated_at=session.updated_at,
    )


def to_turn_summary(turn: Turn) -> TurnSummary:
    return TurnSummary(
        turn_number=turn.turn_number,
        title=turn.title,
        scene_title=turn.scene_title,
        content=turn.content,
        timestamp=turn.timestamp,
    )


def content_disposition(filename: str) -> str:
    """Attachment header value; RFC 5987 encoding keeps non-ASCII titles intact."""
    return f"attachment; filename*=UTF-8''{quote(filename)}"


@router.get("", response_model=SessionListResponse)
async def list_sessions(
    service: Annotated[SessionService, Depends(get_session_service)],
) -> SessionListResponse:
    """List sessions, most recently updated first."""
    try:
        sessions = await service.list_sessions()
    except CanvasError as e:
        raise to_http_error(e) from e
    return SessionListResponse(sessions=[to_summary(s) for s in sessions])


@router.get("/{session_id}", response_model=SessionDetailResponse)
async def get_session_detail(
    session_id: str,
    service: Annotated[SessionService, Depends(get_session_service)],
) -> SessionDetailResponse:
    """Load a session with its turns and make it the current session.

    Raises:
        HTTPException: 404 if the session does not exist, 502 on store failure
    """
    try:
        session = await service.load_session(session_id)
        turns = await service.get_turns(session_id)
        stored = [kind for kind in ExtractionKind if await service.get_extraction(session_id, kind)]
    except CanvasError as e:
        raise to_http_error(e) from e

    return SessionDetailResponse(
        session=to_summary(session),
        turns=[to_turn_summary(t) for t in turns],
        extractions=stored,
    )


@router.get("/{session_id}/export")
async def export_session(
    session_id: str,
    service: Annotated[SessionService, Depends(get_session_service)],
    mode: Annotated[Literal["raw", "extracted"], Query()] = "raw",
) -> JSONResponse:
    """Download a session as a JSON document.

    Args:
        session_id: Session to export
        service: Session service
        mode: ``raw`` for persisted fields, ``extracted`` for stored extractions

    Raises:
        HTTPException: 404 if the session (or, in extracted mode, any
            extraction) does not exist
    """
    try:
        export = await service.export_session(session_id, mode)
    except CanvasError as e:
        raise to_http_error(e) from e

    return JSONResponse(
        content=export.document,
        headers={"Content-Disposition": content_disposition(export.filename)},
    )
