"""Exported session document formats."""

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

EXPORT_VERSION = "shn-lite-1.0"


class _Camel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class ExportMeta(_Camel):
    """Header block shared by both export formats."""

    version: str = EXPORT_VERSION
    format: Literal["raw", "extracted"]
    exported_at: datetime = Field(..., alias="exportedAt")
    session_id: str = Field(..., alias="sessionId")
    title: str
    subject: str | None = None
    turn_count: int = Field(..., alias="turnCount")
    created_at: datetime | None = Field(None, alias="createdAt")
    updated_at: datetime | None = Field(None, alias="updatedAt")


class ExtractionPayload(_Camel):
    """Stored extraction output for one granularity."""

    extracted_at: datetime | None = Field(None, alias="extractedAt")
    data: str


class ExtractionBundle(BaseModel):
    """Extractions for every granularity; missing ones are null."""

    micro: ExtractionPayload | None = None
    meso: ExtractionPayload | None = None
    macro: ExtractionPayload | None = None


class RawTurnSummary(_Camel):
    """Turn header included alongside extracted data."""

    turn_number: int = Field(..., alias="turnNumber")
    scene_title: str | None = Field(None, alias="sceneTitle")
    timestamp: datetime | None = None


class RawExport(_Camel):
    """Persisted session and turn fields as stored."""

    meta: ExportMeta
    session: dict[str, Any]
    turns: list[dict[str, Any]]


class ExtractedExport(_Camel):
    """Previously computed extraction results."""

    meta: ExportMeta
    extraction: ExtractionBundle
    raw_turns: list[RawTurnSummary] = Field(default_factory=list, alias="rawTurns")
