"""Session export documents and download filenames."""

import re
from datetime import datetime
from typing import Any

from fastapi.encoders import jsonable_encoder

from shn_canvas.models.export import (
    ExportMeta,
    ExtractedExport,
    ExtractionBundle,
    ExtractionPayload,
    RawExport,
    RawTurnSummary,
)
from shn_canvas.models.session import ExtractionKind, ExtractionResult, Session, Turn
from shn_canvas.store.wire import utcnow

_UNSAFE_FILENAME_RE = re.compile(r'[<>:"/\\|?*]')
_WHITESPACE_RE = re.compile(r"\s+")


def sanitize_filename(name: str, max_length: int = 50) -> str:
    """Replace path-unsafe characters and whitespace runs with underscores."""
    cleaned = _UNSAFE_FILENAME_RE.sub("_", str(name))
    cleaned = _WHITESPACE_RE.sub("_", cleaned)
    return cleaned[:max_length]


def export_filename(prefix: str, session: Session) -> str:
    return f"{prefix}_{sanitize_filename(session.display_title)}_{session.id}.json"


def refined_download_filename(session: Session, now: datetime | None = None) -> str:
    """Filename for the array-literal download written after an extraction."""
    stamp = int((now or utcnow()).timestamp() * 1000)
    return f"{sanitize_filename(session.title or session.subject or 'session')}_refined_{stamp}.json"


def _strip_id(document: dict[str, Any]) -> dict[str, Any]:
    return {k: v for k, v in document.items() if k != "_id"}


def _meta(session: Session, turns: list[Turn], fmt: str, now: datetime, **extra: Any) -> ExportMeta:
    return ExportMeta(
        format=fmt,
        exported_at=now,
        session_id=session.id,
        title=session.display_title,
        subject=session.subject,
        turn_count=session.turn_count or len(turns),
        **extra,
    )


def build_raw_export(
    session: Session,
    turns: list[Turn],
    *,
    now: datetime | None = None,
) -> dict[str, Any]:
    """Raw persisted fields of the session and its turns."""
    now = now or utcnow()
    document = RawExport(
        meta=_meta(
            session,
            turns,
            "raw",
            now,
            created_at=session.created_at,
            updated_at=session.updated_at,
        ),
        session=_strip_id(session.model_dump(by_alias=True)),
        turns=[_strip_id(turn.model_dump(by_alias=True)) for turn in turns],
    )
    return jsonable_encoder(document.model_dump(by_alias=True))


def build_extracted_export(
    session: Session,
    turns: list[Turn],
    extractions: dict[ExtractionKind, ExtractionResult | None],
    *,
    now: datetime | None = None,
) -> dict[str, Any]:
    """Stored extraction results for every granularity plus turn headers."""
    now = now or utcnow()

    def payload(kind: ExtractionKind) -> ExtractionPayload | None:
        result = extractions.get(kind)
        if result is None:
            return None
        return ExtractionPayload(extracted_at=result.extracted_at, data=result.data)

    document = ExtractedExport(
        meta=_meta(session, turns, "extracted", now),
        extraction=ExtractionBundle(
            micro=payload(ExtractionKind.micro),
            meso=payload(ExtractionKind.meso),
            macro=payload(ExtractionKind.macro),
        ),
        raw_turns=[
            RawTurnSummary(
                turn_number=turn.turn_number,
                scene_title=turn.scene_title or turn.title,
                timestamp=turn.timestamp,
            )
            for turn in turns
        ],
    )
    return jsonable_encoder(document.model_dump(by_alias=True))
