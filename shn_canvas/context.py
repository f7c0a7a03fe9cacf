"""Client context shared by the recorder and session orchestration."""

from dataclasses import dataclass, field

from shn_canvas.models.session import Session
from shn_canvas.settings_store import CanvasConfig
from shn_canvas.store.repositories import DocumentStore


@dataclass
class CanvasContext:
    """Per-client state: configuration, store handle and the current session.

    Mutated only between awaits on the event loop; no locking.
    """

    config: CanvasConfig
    store: DocumentStore
    current_session_id: str | None = None
    current_subject: str | None = None
    sessions_cache: list[Session] = field(default_factory=list)
