"""Fixtures for route tests: the app with in-memory store and fake LLM."""

import asyncio
from collections.abc import Generator
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from shn_canvas.api.deps import get_canvas_context, get_config_store, get_pipeline
from shn_canvas.context import CanvasContext
from shn_canvas.extraction.pipeline import ExtractionPipeline
from shn_canvas.main import app
from shn_canvas.settings_store import LocalConfigStore
from shn_canvas.store.repositories import SESSIONS_COLLECTION, turns_collection


@pytest.fixture
def llm(fake_llm_factory):
    """LLM double shared by the app's pipeline for one test."""
    return fake_llm_factory()


@pytest.fixture
def client(
    canvas_ctx: CanvasContext, llm, recording_sleep, tmp_path: Path
) -> Generator[TestClient, None, None]:
    """Create test client wired to the in-memory store and fake LLM."""
    config_store = LocalConfigStore(tmp_path / "config.json")

    app.dependency_overrides[get_canvas_context] = lambda: canvas_ctx
    app.dependency_overrides[get_config_store] = lambda: config_store
    app.dependency_overrides[get_pipeline] = lambda: ExtractionPipeline(llm, canvas_ctx.store, sleep=recording_sleep)
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def seeded(canvas_ctx: CanvasContext) -> str:
    """Store one session with three turns and return its ID."""

    async def seed() -> None:
        await canvas_ctx.store.set(
            SESSIONS_COLLECTION,
            "s1",
            {"subject": "Noir", "title": "[Noir] 서사 기록", "turnCount": 3, "lastTurnTitle": "T3"},
        )
        for n in (1, 2, 3):
            await canvas_ctx.store.set(
                turns_collection("s1"),
                f"turn_{n}",
                {"turnNumber": n, "content": f"\n\n## [턴 {n}]\n\n장면 {n}\n\n", "title": f"T{n}"},
            )

    asyncio.run(seed())
    return "s1"
