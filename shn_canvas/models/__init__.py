"""Models package - re-exports for convenience."""

from shn_canvas.models.dashboard import Dashboard, DashboardEvent, DashboardItem, DashboardSection
from shn_canvas.models.export import (
    EXPORT_VERSION,
    ExportMeta,
    ExtractedExport,
    ExtractionBundle,
    ExtractionPayload,
    RawExport,
    RawTurnSummary,
)
from shn_canvas.models.session import (
    EPOCH,
    ExtractionKind,
    ExtractionResult,
    MarkerKind,
    Session,
    Turn,
)

__all__ = [
    # Session
    "Session",
    "Turn",
    "ExtractionResult",
    "ExtractionKind",
    "MarkerKind",
    "EPOCH",
    # Dashboard
    "Dashboard",
    "DashboardSection",
    "DashboardItem",
    "DashboardEvent",
    # Export
    "EXPORT_VERSION",
    "ExportMeta",
    "ExtractionPayload",
    "ExtractionBundle",
    "RawTurnSummary",
    "RawExport",
    "ExtractedExport",
]
