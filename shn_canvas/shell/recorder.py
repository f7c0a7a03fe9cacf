"""Save-on-render: persist each rendered turn under its subject's session."""

import logging
import re
from dataclasses import dataclass

import httpx

from shn_canvas.context import CanvasContext
from shn_canvas.errors import CanvasError
from shn_canvas.shell.converter import convert_html_to_turn_log
from shn_canvas.store.repositories import SESSIONS_COLLECTION, turn_doc_id, turns_collection
from shn_canvas.store.wire import SERVER_TIMESTAMP

logger = logging.getLogger(__name__)

TURN_ATTR_RE = re.compile(r"""data-turn=["'](\d+)["']""", re.IGNORECASE)
SUBJECT_ATTR_RE = re.compile(r"""data-subject=["']([^"']+)["']""", re.IGNORECASE)
DEFAULT_SUBJECT = "General"


def detect_turn_number(markup: str) -> int:
    """Read ``data-turn="N"``; turn numbers are 1-based, so missing or 0 gives 1."""
    match = TURN_ATTR_RE.search(markup)
    return max(int(match.group(1)), 1) if match else 1


def detect_subject(markup: str) -> str:
    """Read ``data-subject="..."``; defaults to General."""
    match = SUBJECT_ATTR_RE.search(markup)
    return match.group(1) if match else DEFAULT_SUBJECT


def session_title(subject: str) -> str:
    return f"[{subject}] 서사 기록"


@dataclass(frozen=True)
class SavedTurn:
    """Where a rendered turn was written."""

    session_id: str
    subject: str
    turn_number: int
    created_session: bool


class TurnRecorder:
    """Writes rendered turns to the document store."""

    def __init__(self, ctx: CanvasContext) -> None:
        self._ctx = ctx

    async def _resolve_session(self, subject: str) -> tuple[str, bool]:
        ctx = self._ctx
        if ctx.current_session_id and ctx.current_subject == subject:
            return ctx.current_session_id, False

        existing = await ctx.store.list(SESSIONS_COLLECTION)
        match = next((s for s in existing if s.get("subject") == subject), None)
        if match is not None:
            session_id, created = match["_id"], False
        else:
            session_id = await ctx.store.add(
                SESSIONS_COLLECTION,
                {
                    "subject": subject,
                    "title": session_title(subject),
                    "createdAt": SERVER_TIMESTAMP,
                    "updatedAt": SERVER_TIMESTAMP,
                    "turnCount": 0,
                },
            )
            created = True
            logger.info(f"Created session {session_id} for subject {subject!r}")

        ctx.current_session_id = session_id
        ctx.current_subject = subject
        return session_id, created

    async def save_canvas(self, markup: str, title: str | None, canvas_id: str | None = None) -> SavedTurn:
        """Persist one rendered turn.

        Args:
            markup: Raw turn markup
            title: Turn title
            canvas_id: Canvas identifier supplied by the host page

        Returns:
            SavedTurn describing the write

        Raises:
            StoreRequestError: If any store call fails
        """
        turn = detect_turn_number(markup)
        subject = detect_subject(markup)
        content = convert_html_to_turn_log(markup, turn)

        session_id, created = await self._resolve_session(subject)

        await self._ctx.store.set(
            turns_collection(session_id),
            turn_doc_id(turn),
            {
                "turnNumber": turn,
                "content": content,
                "rawHtml": markup,
                "title": title,
                "canvasId": canvas_id,
                "timestamp": SERVER_TIMESTAMP,
            },
        )
        await self._ctx.store.set(
            SESSIONS_COLLECTION,
            session_id,
            {"updatedAt": SERVER_TIMESTAMP, "turnCount": turn, "lastTurnTitle": title},
        )

        logger.info(f"Saved turn {turn} to session {session_id} (subject {subject!r})")
        return SavedTurn(session_id=session_id, subject=subject, turn_number=turn, created_session=created)

    async def save_canvas_quietly(
        self, markup: str, title: str | None, canvas_id: str | None = None
    ) -> SavedTurn | None:
        """Best-effort variant used after rendering: failures are logged only."""
        try:
            return await self.save_canvas(markup, title, canvas_id)
        except (CanvasError, httpx.HTTPError) as e:
            logger.error(f"Canvas save failed: {e}")
            return None
