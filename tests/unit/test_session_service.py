"""Tests for session listing, extraction and export orchestration."""

from datetime import datetime, timezone
from pathlib import Path

import pytest

from shn_canvas.context import CanvasContext
from shn_canvas.errors import (
    ConfigurationMissingError,
    ExtractionNotFoundError,
    ResponseShapeError,
    SessionNotFoundError,
)
from shn_canvas.extraction.pipeline import ExtractionPipeline
from shn_canvas.models.session import ExtractionKind
from shn_canvas.sessions.service import SessionService
from shn_canvas.store.repositories import EXTRACTIONS_COLLECTION, SESSIONS_COLLECTION, turns_collection


async def seed_session(ctx: CanvasContext, session_id: str = "s1", turns: int = 3) -> None:
    await ctx.store.set(
        SESSIONS_COLLECTION,
        session_id,
        {
            "subject": "Noir",
            "title": "[Noir] 서사 기록",
            "createdAt": datetime(2024, 3, 1, tzinfo=timezone.utc),
            "updatedAt": datetime(2024, 3, 5, tzinfo=timezone.utc),
            "turnCount": turns,
        },
    )
    for n in range(1, turns + 1):
        await ctx.store.set(
            turns_collection(session_id),
            f"turn_{n}",
            {"turnNumber": n, "content": f"\n\n## [턴 {n}]\n\n장면 {n}\n\n", "title": f"T{n}"},
        )


@pytest.mark.asyncio
async def test_list_sessions_newest_first(canvas_ctx: CanvasContext) -> None:
    """Test that sessions sort by update time descending with missing timestamps last."""
    store = canvas_ctx.store
    await store.set(SESSIONS_COLLECTION, "old", {"subject": "A", "updatedAt": datetime(2023, 1, 1, tzinfo=timezone.utc)})
    await store.set(SESSIONS_COLLECTION, "none", {"subject": "B"})
    await store.set(SESSIONS_COLLECTION, "new", {"subject": "C", "updatedAt": datetime(2024, 1, 1, tzinfo=timezone.utc)})

    sessions = await SessionService(canvas_ctx).list_sessions()

    assert [s.id for s in sessions] == ["new", "old", "none"]
    assert canvas_ctx.sessions_cache == sessions


@pytest.mark.asyncio
async def test_get_session_missing_raises(canvas_ctx: CanvasContext) -> None:
    """Test that an unknown session ID raises SessionNotFoundError."""
    with pytest.raises(SessionNotFoundError):
        await SessionService(canvas_ctx).get_session("missing")


@pytest.mark.asyncio
async def test_load_session_sets_current(canvas_ctx: CanvasContext) -> None:
    """Test that loading a session makes it current for later renders."""
    await seed_session(canvas_ctx)

    await SessionService(canvas_ctx).load_session("s1")

    assert canvas_ctx.current_session_id == "s1"
    assert canvas_ctx.current_subject == "Noir"


@pytest.mark.asyncio
async def test_get_turns_ordered(canvas_ctx: CanvasContext) -> None:
    """Test that turns come back ordered by turn number."""
    await seed_session(canvas_ctx, turns=3)

    turns = await SessionService(canvas_ctx).get_turns("s1")

    assert [t.turn_number for t in turns] == [1, 2, 3]


@pytest.mark.asyncio
async def test_invalid_stored_turn_raises_shape_error(canvas_ctx: CanvasContext) -> None:
    """Test that a stored turn with an invalid number is reported as a canvas error."""
    await seed_session(canvas_ctx, turns=1)
    await canvas_ctx.store.set(turns_collection("s1"), "turn_0", {"turnNumber": 0, "content": "x"})

    with pytest.raises(ResponseShapeError, match="turn_0"):
        await SessionService(canvas_ctx).get_turns("s1")


@pytest.mark.asyncio
async def test_run_extraction_persists(canvas_ctx: CanvasContext, fake_llm, recording_sleep, tmp_path: Path) -> None:
    """Test that extraction over stored turns persists the joined result and writes a download."""
    await seed_session(canvas_ctx, turns=3)
    pipeline = ExtractionPipeline(fake_llm, canvas_ctx.store, sleep=recording_sleep)

    run = await SessionService(canvas_ctx, pipeline).run_extraction("s1", batch_size=2, download_dir=tmp_path)

    assert run.chunk_count == 3
    assert len(fake_llm.calls) == 2
    assert "## [턴 1]" in fake_llm.calls[0][1]
    assert "## [턴 3]" in fake_llm.calls[1][1]
    stored = await canvas_ctx.store.get(EXTRACTIONS_COLLECTION, "s1_micro")
    assert stored["data"] == "result-1,\nresult-2"
    assert run.download_path is not None
    assert run.download_path.parent == tmp_path
    assert "_refined_" in run.download_path.name


@pytest.mark.asyncio
async def test_macro_extraction_sends_whole_log(canvas_ctx: CanvasContext, fake_llm, recording_sleep) -> None:
    """Test that the macro granularity sends the entire session as one chunk."""
    await seed_session(canvas_ctx, turns=3)
    pipeline = ExtractionPipeline(fake_llm, canvas_ctx.store, sleep=recording_sleep)

    run = await SessionService(canvas_ctx, pipeline).run_extraction("s1", kind=ExtractionKind.macro)

    assert run.chunk_count == 1
    assert len(fake_llm.calls) == 1
    assert run.persisted_id == "s1_macro"


@pytest.mark.asyncio
async def test_run_extraction_without_llm_raises(canvas_ctx: CanvasContext) -> None:
    """Test that extraction without a configured LLM is a configuration error."""
    await seed_session(canvas_ctx)

    with pytest.raises(ConfigurationMissingError):
        await SessionService(canvas_ctx).run_extraction("s1")


@pytest.mark.asyncio
async def test_run_extraction_unknown_session(canvas_ctx: CanvasContext, fake_llm, recording_sleep) -> None:
    """Test that extracting a missing session raises before any LLM call."""
    pipeline = ExtractionPipeline(fake_llm, canvas_ctx.store, sleep=recording_sleep)

    with pytest.raises(SessionNotFoundError):
        await SessionService(canvas_ctx, pipeline).run_extraction("missing")

    assert fake_llm.calls == []


@pytest.mark.asyncio
async def test_export_raw(canvas_ctx: CanvasContext) -> None:
    """Test that a raw export carries meta, session fields and every turn."""
    await seed_session(canvas_ctx, turns=2)

    export = await SessionService(canvas_ctx).export_session("s1", "raw")

    assert export.filename == "shn_raw_[Noir]_서사_기록_s1.json"
    meta = export.document["meta"]
    assert meta["version"] == "shn-lite-1.0"
    assert meta["format"] == "raw"
    assert meta["sessionId"] == "s1"
    assert meta["turnCount"] == 2
    assert meta["createdAt"].startswith("2024-03-01")
    assert export.document["session"]["subject"] == "Noir"
    assert "_id" not in export.document["session"]
    assert [t["turnNumber"] for t in export.document["turns"]] == [1, 2]


@pytest.mark.asyncio
async def test_export_extracted_requires_stored_extraction(canvas_ctx: CanvasContext) -> None:
    """Test that an extracted export without any stored extraction is rejected."""
    await seed_session(canvas_ctx)

    with pytest.raises(ExtractionNotFoundError):
        await SessionService(canvas_ctx).export_session("s1", "extracted")


@pytest.mark.asyncio
async def test_export_extracted(canvas_ctx: CanvasContext) -> None:
    """Test that an extracted export includes stored granularities and turn headers."""
    await seed_session(canvas_ctx, turns=2)
    await canvas_ctx.store.set(
        EXTRACTIONS_COLLECTION,
        "s1_micro",
        {
            "sessionId": "s1",
            "kind": "micro",
            "chunkSize": 10,
            "totalChunks": 2,
            "data": '{"a":1}',
            "extractedAt": datetime(2024, 3, 6, tzinfo=timezone.utc),
        },
    )

    export = await SessionService(canvas_ctx).export_session("s1", "extracted")

    assert export.filename.startswith("shn_extracted_")
    document = export.document
    assert document["meta"]["format"] == "extracted"
    assert document["extraction"]["micro"]["data"] == '{"a":1}'
    assert document["extraction"]["meso"] is None
    assert document["extraction"]["macro"] is None
    assert [t["turnNumber"] for t in document["rawTurns"]] == [1, 2]
    assert document["rawTurns"][0]["sceneTitle"] == "T1"
