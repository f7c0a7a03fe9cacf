"""Structured logging for extraction batches."""

import logging
from typing import Any

logger = logging.getLogger(__name__)


class StructuredBatchLogger:
    """Structured logger for per-batch extraction progress."""

    def __init__(self, path: str, session_id: str | None = None) -> None:
        self._path = path
        self._session_id = session_id

    def log_batch(
        self,
        index: int,
        total: int,
        outcome: str,
        latency_ms: float,
        chars_in: int,
        chars_out: int = 0,
        error_reason: str | None = None,
    ) -> None:
        """Log one batch with structured data."""
        log_data: dict[str, Any] = {
            "path": self._path,
            "session_id": self._session_id,
            "batch": index + 1,
            "total_batches": total,
            "outcome": outcome,
            "latency_ms": round(latency_ms, 2),
            "chars_in": chars_in,
            "chars_out": chars_out,
        }

        if error_reason:
            log_data["error_reason"] = error_reason

        log_msg = f"Extraction batch {index + 1}/{total} - {outcome}"

        if outcome == "success":
            logger.info(log_msg, extra={"structured": log_data})
        else:
            logger.warning(log_msg, extra={"structured": log_data})


def configure_logging(level: str = "INFO") -> None:
    """Configure root logging once for the API process."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
