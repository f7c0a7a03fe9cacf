"""Session, turn and extraction domain models."""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from shn_canvas.errors import ResponseShapeError

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


class MarkerKind(str, Enum):
    """Heading that delimits chunks in accumulated turn text."""

    turn = "turn"
    day = "day"
    episode = "episode"


class ExtractionKind(str, Enum):
    """Extraction granularity."""

    micro = "micro"  # per turn
    meso = "meso"  # per day or episode
    macro = "macro"  # whole session

    @property
    def marker_kind(self) -> MarkerKind | None:
        """Marker used to chunk text for this granularity (None = one chunk)."""
        return {
            ExtractionKind.micro: MarkerKind.turn,
            ExtractionKind.meso: MarkerKind.day,
            ExtractionKind.macro: None,
        }[self]


StoreModelT = TypeVar("StoreModelT", bound="_StoreModel")


class _StoreModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    @classmethod
    def from_document(cls: type[StoreModelT], document: dict[str, Any]) -> StoreModelT:
        """Validate a stored document.

        Raises:
            ResponseShapeError: If the document does not fit the model
        """
        try:
            return cls.model_validate(document)
        except ValidationError as e:
            raise ResponseShapeError(
                f"Stored {cls.__name__} {document.get('_id')!r} is invalid ({e.error_count()} errors)"
            ) from e


class Session(_StoreModel):
    """A named, ordered collection of turns sharing a subject."""

    id: str = Field(..., alias="_id")
    subject: str = "General"
    title: str | None = None
    created_at: datetime | None = Field(None, alias="createdAt")
    updated_at: datetime | None = Field(None, alias="updatedAt")
    turn_count: int = Field(0, alias="turnCount")
    last_turn_title: str | None = Field(None, alias="lastTurnTitle")

    @property
    def display_title(self) -> str:
        return self.title or self.subject or "Untitled"

    @property
    def sort_timestamp(self) -> datetime:
        """Last update time; missing timestamps sort as the epoch."""
        if self.updated_at is None:
            return EPOCH
        if self.updated_at.tzinfo is None:
            return self.updated_at.replace(tzinfo=timezone.utc)
        return self.updated_at


class Turn(_StoreModel):
    """One unit of narrative content."""

    id: str | None = Field(None, alias="_id")
    turn_number: int = Field(..., alias="turnNumber", ge=1)
    content: str = ""
    raw_html: str = Field("", alias="rawHtml")
    title: str | None = None
    scene_title: str | None = Field(None, alias="sceneTitle")
    timestamp: datetime | None = None


class ExtractionResult(_StoreModel):
    """One live extraction per (session, kind); overwritten on re-run."""

    id: str | None = Field(None, alias="_id")
    session_id: str = Field(..., alias="sessionId")
    kind: ExtractionKind
    chunk_size: int = Field(..., alias="chunkSize")
    total_chunks: int = Field(..., alias="totalChunks")
    data: str
    extracted_at: datetime | None = Field(None, alias="extractedAt")

