"""Integration tests for extraction routes."""

from fastapi.testclient import TestClient

from shn_canvas.api.deps import get_pipeline
from shn_canvas.extraction.pipeline import ExtractionPipeline
from shn_canvas.main import app


def test_session_extraction_persists_and_exports(client: TestClient, seeded: str, llm) -> None:
    """Test that a session extraction runs sequential batches and becomes exportable."""
    response = client.post(f"/sessions/{seeded}/extractions", json={"kind": "micro", "batch_size": 2})

    assert response.status_code == 200
    data = response.json()
    assert data["chunk_count"] == 3
    assert data["batch_count"] == 2
    assert data["persisted_id"] == "s1_micro"
    assert data["result"] == "result-1,\nresult-2"
    assert len(llm.calls) == 2

    detail = client.get(f"/sessions/{seeded}").json()
    assert detail["extractions"] == ["micro"]

    exported = client.get(f"/sessions/{seeded}/export", params={"mode": "extracted"}).json()
    assert exported["extraction"]["micro"]["data"] == "result-1,\nresult-2"
    assert [t["turnNumber"] for t in exported["rawTurns"]] == [1, 2, 3]


def test_session_extraction_unknown_session(client: TestClient) -> None:
    """Test that extracting a missing session is a 404."""
    response = client.post("/sessions/missing/extractions", json={})

    assert response.status_code == 404


def test_session_extraction_batch_size_bounds(client: TestClient, seeded: str) -> None:
    """Test that out-of-range batch sizes are rejected by validation."""
    response = client.post(f"/sessions/{seeded}/extractions", json={"batch_size": 500})

    assert response.status_code == 422


def test_session_extraction_upstream_failure(
    client: TestClient, seeded: str, fake_llm_factory, recording_sleep, canvas_ctx
) -> None:
    """Test that a failing batch is reported as a 502 and nothing is persisted."""
    failing = fake_llm_factory(fail_on={1})
    app.dependency_overrides[get_pipeline] = lambda: ExtractionPipeline(failing, canvas_ctx.store, sleep=recording_sleep)

    response = client.post(f"/sessions/{seeded}/extractions", json={"batch_size": 1})

    assert response.status_code == 502
    assert response.json()["detail"]["status"] == "추출 실패"
    assert client.get(f"/sessions/{seeded}").json()["extractions"] == []


def test_extraction_without_llm_key(client: TestClient, seeded: str) -> None:
    """Test that extraction without a configured LLM is a 400."""
    app.dependency_overrides[get_pipeline] = lambda: None

    response = client.post(f"/sessions/{seeded}/extractions", json={})

    assert response.status_code == 400
    assert response.json()["detail"]["status"] == "설정 필요"


def test_batch_extraction_reports_outcomes(client: TestClient, llm) -> None:
    """Test that the batch route returns one outcome per batch."""
    response = client.post("/extractions/batch", json={"chunks": ["a", "b", "c"], "batch_size": 2})

    assert response.status_code == 200
    data = response.json()
    assert data["succeeded"] == 2
    assert data["failed"] == 0
    assert [o["result"] for o in data["outcomes"]] == ["result-1", "result-2"]


def test_batch_extraction_stops_at_failure(client: TestClient, fake_llm_factory, recording_sleep, canvas_ctx) -> None:
    """Test that a failing batch is the last outcome and is reported in the body."""
    failing = fake_llm_factory(fail_on={2})
    app.dependency_overrides[get_pipeline] = lambda: ExtractionPipeline(failing, canvas_ctx.store, sleep=recording_sleep)

    response = client.post("/extractions/batch", json={"chunks": ["a", "b", "c"]})

    assert response.status_code == 200
    data = response.json()
    assert [o["ok"] for o in data["outcomes"]] == [True, False]
    assert data["failed"] == 1
    assert len(failing.calls) == 2


def test_batch_extraction_requires_chunks(client: TestClient) -> None:
    """Test that an empty chunk list is rejected."""
    response = client.post("/extractions/batch", json={"chunks": []})

    assert response.status_code == 422


def test_session_extraction_reports_failed_save(
    client: TestClient, seeded: str, llm, recording_sleep, failing_store_factory
) -> None:
    """Test that a failed save still returns the finished result with the save error."""
    app.dependency_overrides[get_pipeline] = lambda: ExtractionPipeline(
        llm, failing_store_factory("extractions"), sleep=recording_sleep
    )

    response = client.post(f"/sessions/{seeded}/extractions", json={"batch_size": 2})

    assert response.status_code == 200
    data = response.json()
    assert data["result"] == "result-1,\nresult-2"
    assert data["persisted_id"] is None
    assert "503" in data["persist_error"]
