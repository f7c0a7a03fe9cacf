"""Chunked, sequential LLM extraction pipeline.

Per batch, strictly in order: wrap the batch in delimiter lines, call the
LLM with the refiner prompt, append the result. A fixed delay separates
batches (never after the last one) to stay under provider rate limits.

Failure policy: both entry points stop at the first failing batch.
``extract`` raises ExtractionError carrying the outcomes so far;
``batch_extract`` returns the outcomes, the last of which is the failure.
"""

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass, field
from pathlib import Path

import httpx

from shn_canvas.errors import CanvasError, ExtractionError
from shn_canvas.extraction.chunker import (
    DEFAULT_BATCH_SIZE,
    build_user_message,
    chunk_by_marker,
    clamp_batch_size,
    group_batches,
)
from shn_canvas.llm.client import LLMClient
from shn_canvas.llm.prompts import NARRATIVE_DATA_REFINER_PROMPT
from shn_canvas.models.session import ExtractionKind, MarkerKind
from shn_canvas.store.repositories import EXTRACTIONS_COLLECTION, DocumentStore, extraction_doc_id
from shn_canvas.store.wire import SERVER_TIMESTAMP
from shn_canvas.utils.logging import StructuredBatchLogger
from shn_canvas.utils.metrics import metrics

logger = logging.getLogger(__name__)

RESULT_JOINER = ",\n"
INTERACTIVE_DELAY_SECONDS = 2.0
BATCH_DELAY_SECONDS = 0.5

Sleeper = Callable[[float], Awaitable[None]]


@dataclass
class BatchOutcome:
    """Result of one batch call."""

    index: int
    ok: bool
    result: str | None = None
    error: str | None = None


@dataclass
class ExtractionRun:
    """Completed extraction."""

    result: str
    chunk_count: int
    batch_size: int
    outcomes: list[BatchOutcome] = field(default_factory=list)
    persisted_id: str | None = None
    persist_error: str | None = None
    download_path: Path | None = None

    @property
    def batch_count(self) -> int:
        return len(self.outcomes)


def join_results(results: Sequence[str]) -> str:
    """Join non-blank batch results with comma-newline."""
    return RESULT_JOINER.join(r for r in results if r.strip())


def write_download(path: Path, joined: str) -> Path:
    """Write the joined results wrapped in an array literal."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(f"[{joined}]", encoding="utf-8")
    return path


class ExtractionPipeline:
    """Runs refiner batches through an LLM client one at a time."""

    def __init__(
        self,
        llm: LLMClient,
        store: DocumentStore | None = None,
        *,
        prompt: str = NARRATIVE_DATA_REFINER_PROMPT,
        interactive_delay: float = INTERACTIVE_DELAY_SECONDS,
        batch_delay: float = BATCH_DELAY_SECONDS,
        sleep: Sleeper = asyncio.sleep,
    ) -> None:
        """Initialize pipeline.

        Args:
            llm: Client used for every batch
            store: Optional document store for persisting results
            prompt: Instruction prompt sent with every batch
            interactive_delay: Pause between batches in ``extract``
            batch_delay: Pause between batches in ``batch_extract``
            sleep: Awaitable sleep function (injectable for tests)
        """
        self._llm = llm
        self._store = store
        self._prompt = prompt
        self._interactive_delay = interactive_delay
        self._batch_delay = batch_delay
        self._sleep = sleep

    async def _run_batches(
        self,
        batches: Sequence[str],
        *,
        delay: float,
        path: str,
        session_id: str | None = None,
        on_progress: Callable[[int, int], None] | None = None,
    ) -> list[BatchOutcome]:
        """Call the LLM per batch in sequence, stopping at the first failure."""
        batch_log = StructuredBatchLogger(path, session_id)
        outcomes: list[BatchOutcome] = []
        total = len(batches)

        for index, batch in enumerate(batches):
            if on_progress:
                on_progress(index + 1, total)

            start = time.perf_counter()
            try:
                result = await self._llm.call(self._prompt, build_user_message(batch))
            except (CanvasError, httpx.HTTPError) as e:
                latency_ms = (time.perf_counter() - start) * 1000
                batch_log.log_batch(index, total, "error", latency_ms, len(batch), error_reason=str(e))
                metrics.inc_batch(path, "error")
                outcomes.append(BatchOutcome(index=index, ok=False, error=str(e)))
                break

            latency_ms = (time.perf_counter() - start) * 1000
            batch_log.log_batch(index, total, "success", latency_ms, len(batch), len(result))
            metrics.inc_batch(path, "success")
            outcomes.append(BatchOutcome(index=index, ok=True, result=result))

            if index < total - 1:
                await self._sleep(delay)

        return outcomes

    async def extract(
        self,
        full_text: str,
        marker_kind: MarkerKind | None = MarkerKind.turn,
        batch_size: int | str | None = DEFAULT_BATCH_SIZE,
        *,
        session_id: str | None = None,
        kind: ExtractionKind | None = None,
        download_path: Path | None = None,
        on_progress: Callable[[int, int], None] | None = None,
    ) -> ExtractionRun:
        """Chunk, batch and refine accumulated turn text.

        Args:
            full_text: Accumulated structured text
            marker_kind: Marker to chunk on (None = whole text as one chunk)
            batch_size: Chunks per LLM call, clamped to [1, 100]
            session_id: Session to persist under (with ``kind``)
            kind: Extraction granularity to persist under (with ``session_id``)
            download_path: If given, write ``[<results>]`` to this file
            on_progress: Optional callback receiving (current_batch, total_batches)

        Returns:
            ExtractionRun with the joined result

        Raises:
            ExtractionError: If there is nothing to process or a batch fails.
                A failed save is not raised; it is reported in ``persist_error``.
        """
        size = clamp_batch_size(batch_size)
        chunks = chunk_by_marker(full_text, marker_kind)
        batches = group_batches(chunks, size)
        if not batches:
            raise ExtractionError("No turn data to process", outcomes=[])

        logger.info(f"Extracting {len(chunks)} chunks in {len(batches)} batches of {size}")
        outcomes = await self._run_batches(
            batches,
            delay=self._interactive_delay,
            path="interactive",
            session_id=session_id,
            on_progress=on_progress,
        )

        failed = next((o for o in outcomes if not o.ok), None)
        if failed is not None:
            raise ExtractionError(
                f"Extraction failed at batch {failed.index + 1}/{len(batches)}: {failed.error}",
                outcomes=outcomes,
            )

        joined = join_results([o.result or "" for o in outcomes])
        run = ExtractionRun(result=joined, chunk_count=len(chunks), batch_size=size, outcomes=outcomes)

        if self._store is not None and session_id and kind is not None:
            try:
                run.persisted_id = await self._persist(self._store, session_id, kind, run)
            except (CanvasError, httpx.HTTPError) as e:
                # Results are still returned and downloaded; only the stored copy is missing
                logger.warning(f"Extraction finished but saving {session_id}/{kind.value} failed: {e}")
                run.persist_error = str(e)

        if download_path is not None:
            run.download_path = write_download(download_path, joined)
            logger.info(f"Wrote extraction download to {download_path}")

        return run

    async def _persist(
        self, store: DocumentStore, session_id: str, kind: ExtractionKind, run: ExtractionRun
    ) -> str:
        doc_id = extraction_doc_id(session_id, kind.value)
        await store.set(
            EXTRACTIONS_COLLECTION,
            doc_id,
            {
                "sessionId": session_id,
                "kind": kind.value,
                "chunkSize": run.batch_size,
                "totalChunks": run.chunk_count,
                "data": run.result,
                "extractedAt": SERVER_TIMESTAMP,
            },
        )
        logger.info(f"Persisted extraction {doc_id}")
        return doc_id

    async def batch_extract(
        self,
        chunks: Sequence[str],
        *,
        batch_size: int | str | None = 1,
    ) -> list[BatchOutcome]:
        """Programmatic path: refine pre-chunked text, reporting each batch.

        Args:
            chunks: Chunks in order
            batch_size: Chunks per LLM call, clamped to [1, 100]

        Returns:
            One outcome per attempted batch; a failing batch is the last entry
        """
        batches = group_batches(list(chunks), clamp_batch_size(batch_size))
        return await self._run_batches(batches, delay=self._batch_delay, path="batch")
