"""Shared pytest fixtures for all test suites."""

from collections.abc import Callable
from typing import Any

import pytest

from shn_canvas.context import CanvasContext
from shn_canvas.errors import LLMRequestError, StoreRequestError
from shn_canvas.settings_store import CanvasConfig, LLMConfig
from shn_canvas.store.inmemory import InMemoryDocumentStore


class FakeLLM:
    """LLM client double that records every call.

    Returns ``result-<n>`` for the n-th call (1-based) and raises
    LLMRequestError on the calls listed in ``fail_on``.
    """

    def __init__(self, fail_on: set[int] | None = None, responses: list[str] | None = None) -> None:
        self.calls: list[tuple[str, str]] = []
        self._fail_on = fail_on or set()
        self._responses = responses

    async def call(self, prompt: str, content: str) -> str:
        self.calls.append((prompt, content))
        number = len(self.calls)
        if number in self._fail_on:
            raise LLMRequestError(500, "upstream exploded")
        if self._responses is not None:
            return self._responses[number - 1]
        return f"result-{number}"


class RecordingSleep:
    """Awaitable sleep replacement that records requested delays."""

    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)


class FailingWritesStore(InMemoryDocumentStore):
    """In-memory store whose writes to one collection fail with a 503."""

    def __init__(self, failing_collection: str) -> None:
        super().__init__()
        self._failing_collection = failing_collection

    async def set(self, collection: str, doc_id: str, fields: dict[str, Any]) -> None:
        if collection == self._failing_collection:
            raise StoreRequestError(503, "unavailable")
        await super().set(collection, doc_id, fields)


@pytest.fixture
def store() -> InMemoryDocumentStore:
    """Create an empty in-memory document store."""
    return InMemoryDocumentStore()


@pytest.fixture
def canvas_ctx(store: InMemoryDocumentStore) -> CanvasContext:
    """Create a canvas context with an LLM key and the in-memory store."""
    return CanvasContext(config=CanvasConfig(llm=LLMConfig(api_key="test-key")), store=store)


@pytest.fixture
def fake_llm_factory() -> Callable[..., FakeLLM]:
    """Return the FakeLLM class for tests that need custom failures."""
    return FakeLLM


@pytest.fixture
def fake_llm() -> FakeLLM:
    """Create an LLM double that always succeeds."""
    return FakeLLM()


@pytest.fixture
def recording_sleep() -> RecordingSleep:
    """Create a sleep replacement that records delays."""
    return RecordingSleep()


@pytest.fixture
def failing_store_factory() -> Callable[..., FailingWritesStore]:
    """Return the FailingWritesStore class for tests of store outages."""
    return FailingWritesStore
