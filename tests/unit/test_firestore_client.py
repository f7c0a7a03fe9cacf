"""Tests for the Firestore REST document store client."""

import json

import httpx
import pytest

from shn_canvas.errors import StoreRequestError
from shn_canvas.store.firestore import FirestoreRestClient, document_id_from_name
from shn_canvas.store.wire import SERVER_TIMESTAMP

BASE = "https://firestore.test/v1"
DOCS = f"{BASE}/projects/demo/databases/(default)/documents"


def make_client(handler) -> tuple[FirestoreRestClient, httpx.AsyncClient]:
    http = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return FirestoreRestClient(project_id="demo", api_key="k", base_url=BASE, client=http), http


def test_document_id_from_name() -> None:
    """Test that the ID is the last segment of the full document name."""
    assert document_id_from_name("projects/p/databases/(default)/documents/shn-sessions/abc123") == "abc123"


@pytest.mark.asyncio
async def test_get_decodes_fields_and_id() -> None:
    """Test that get decodes tagged fields and attaches the document ID."""
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(
            200,
            json={
                "name": "projects/demo/databases/(default)/documents/shn-sessions/s1",
                "fields": {"subject": {"stringValue": "General"}, "turnCount": {"integerValue": "4"}},
            },
        )

    store, http = make_client(handler)
    document = await store.get("shn-sessions", "s1")

    assert document == {"subject": "General", "turnCount": 4, "_id": "s1"}
    assert seen[0].url.host == "firestore.test"
    assert seen[0].url.path.endswith("/projects/demo/databases/(default)/documents/shn-sessions/s1")
    assert seen[0].url.params["key"] == "k"

    await http.aclose()


@pytest.mark.asyncio
async def test_get_missing_document_returns_none() -> None:
    """Test that a 404 from the provider yields None rather than an error."""

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(404, json={"error": {"message": "Document not found"}})

    store, http = make_client(handler)

    assert await store.get("extractions", "s1_micro") is None

    await http.aclose()


@pytest.mark.asyncio
async def test_error_status_raises_with_provider_message() -> None:
    """Test that non-404 failures raise StoreRequestError carrying the provider message."""

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(403, json={"error": {"code": 403, "message": "Missing or insufficient permissions."}})

    store, http = make_client(handler)

    with pytest.raises(StoreRequestError) as exc_info:
        await store.get("shn-sessions", "s1")

    assert exc_info.value.status_code == 403
    assert exc_info.value.body == "Missing or insufficient permissions."

    await http.aclose()


@pytest.mark.asyncio
async def test_error_without_json_body_uses_text() -> None:
    """Test that a non-JSON error body is reported verbatim."""

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(500, text="boom")

    store, http = make_client(handler)

    with pytest.raises(StoreRequestError) as exc_info:
        await store.list("shn-sessions")

    assert exc_info.value.body == "boom"

    await http.aclose()


@pytest.mark.asyncio
async def test_list_sends_order_and_page_size() -> None:
    """Test that list passes orderBy and pageSize and decodes every document."""
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(
            200,
            json={
                "documents": [
                    {"name": f"{DOCS}/shn-sessions/s1/turns/turn_1", "fields": {"turnNumber": {"integerValue": "1"}}},
                    {"name": f"{DOCS}/shn-sessions/s1/turns/turn_2", "fields": {"turnNumber": {"integerValue": "2"}}},
                ]
            },
        )

    store, http = make_client(handler)
    documents = await store.list("shn-sessions/s1/turns", order_field="turnNumber", limit=100)

    assert [d["_id"] for d in documents] == ["turn_1", "turn_2"]
    assert seen[0].url.params["orderBy"] == "turnNumber"
    assert seen[0].url.params["pageSize"] == "100"
    assert seen[0].url.path.endswith("/documents/shn-sessions/s1/turns")

    await http.aclose()


@pytest.mark.asyncio
async def test_list_empty_collection() -> None:
    """Test that a response without documents yields an empty list."""

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={})

    store, http = make_client(handler)

    assert await store.list("shn-sessions") == []

    await http.aclose()


@pytest.mark.asyncio
async def test_set_patches_with_update_mask() -> None:
    """Test that set issues a PATCH limited to the given field paths."""
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"name": f"{DOCS}/shn-sessions/s1", "fields": {}})

    store, http = make_client(handler)
    await store.set("shn-sessions", "s1", {"turnCount": 3, "updatedAt": SERVER_TIMESTAMP})

    request = seen[0]
    assert request.method == "PATCH"
    assert request.url.params.get_list("updateMask.fieldPaths") == ["turnCount", "updatedAt"]
    body = json.loads(request.content)
    assert body["fields"]["turnCount"] == {"integerValue": "3"}
    assert "timestampValue" in body["fields"]["updatedAt"]

    await http.aclose()


@pytest.mark.asyncio
async def test_add_returns_generated_id() -> None:
    """Test that add POSTs to the collection and returns the new document's ID."""
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"name": f"{DOCS}/shn-sessions/newId42", "fields": {}})

    store, http = make_client(handler)
    new_id = await store.add("shn-sessions", {"subject": "General"})

    assert new_id == "newId42"
    assert seen[0].method == "POST"
    assert json.loads(seen[0].content) == {"fields": {"subject": {"stringValue": "General"}}}

    await http.aclose()
