"""Firestore REST document store client using httpx."""

import logging
from typing import Any

import httpx

from shn_canvas.errors import StoreRequestError
from shn_canvas.store.wire import from_wire_fields, to_wire_fields
from shn_canvas.utils.metrics import metrics

logger = logging.getLogger(__name__)


def document_id_from_name(name: str) -> str:
    """Return the last path segment of a full Firestore document name."""
    return name.rsplit("/", 1)[-1]


def _error_message(response: httpx.Response) -> str:
    """Pull the provider's message out of an error response."""
    try:
        payload = response.json()
    except ValueError:
        return response.text
    if isinstance(payload, dict):
        error = payload.get("error")
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])
    return response.text


class FirestoreRestClient:
    """Document store backed by the Firestore REST API.

    No retries and no transactions: a failed call raises StoreRequestError
    and is reported by the caller.
    """

    def __init__(
        self,
        project_id: str,
        api_key: str,
        base_url: str = "https://firestore.googleapis.com/v1",
        client: httpx.AsyncClient | None = None,
        timeout: float = 30.0,
    ) -> None:
        """Initialize the client.

        Args:
            project_id: Firebase project ID
            api_key: Web API key sent as the ``key`` query parameter
            base_url: Firestore REST base URL
            client: Optional httpx client (for testing with mocks)
            timeout: Timeout used when this class creates its own client
        """
        self.project_id = project_id
        self._api_key = api_key
        self._documents_url = f"{base_url}/projects/{project_id}/databases/(default)/documents"
        self._client = client or httpx.AsyncClient(timeout=timeout)
        self._owns_client = client is None

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    def _url(self, collection: str, doc_id: str | None = None) -> str:
        path = collection.strip("/")
        if doc_id is not None:
            path = f"{path}/{doc_id}"
        return f"{self._documents_url}/{path}"

    def _convert_document(self, document: dict[str, Any]) -> dict[str, Any]:
        data = from_wire_fields(document.get("fields", {}))
        data["_id"] = document_id_from_name(document.get("name", ""))
        return data

    def _raise_for_status(self, op: str, response: httpx.Response) -> None:
        if response.is_success:
            metrics.inc_store_request(op, "success")
            return
        metrics.inc_store_request(op, "error")
        message = _error_message(response)
        logger.warning(f"Firestore {op} failed: {response.status_code} - {message}")
        raise StoreRequestError(response.status_code, message)

    async def get(self, collection: str, doc_id: str) -> dict[str, Any] | None:
        """Fetch one document; a 404 yields None."""
        response = await self._client.get(self._url(collection, doc_id), params={"key": self._api_key})
        if response.status_code == 404:
            metrics.inc_store_request("get", "not_found")
            return None
        self._raise_for_status("get", response)
        return self._convert_document(response.json())

    async def list(
        self,
        collection: str,
        order_field: str | None = None,
        limit: int | None = None,
    ) -> list[dict[str, Any]]:
        """List a single page of documents."""
        params: dict[str, str | int] = {"key": self._api_key}
        if order_field:
            params["orderBy"] = order_field
        if limit:
            params["pageSize"] = limit

        response = await self._client.get(self._url(collection), params=params)
        self._raise_for_status("list", response)
        payload = response.json()
        return [self._convert_document(doc) for doc in payload.get("documents", [])]

    async def set(self, collection: str, doc_id: str, fields: dict[str, Any]) -> None:
        """Upsert: create the document or replace only the given fields."""
        params: list[tuple[str, str]] = [("key", self._api_key)]
        params.extend(("updateMask.fieldPaths", field_path) for field_path in fields)

        response = await self._client.patch(
            self._url(collection, doc_id),
            params=params,
            json={"fields": to_wire_fields(fields)},
        )
        self._raise_for_status("set", response)

    async def add(self, collection: str, fields: dict[str, Any]) -> str:
        """Create a document with an auto-generated ID."""
        response = await self._client.post(
            self._url(collection),
            params={"key": self._api_key},
            json={"fields": to_wire_fields(fields)},
        )
        self._raise_for_status("add", response)
        return document_id_from_name(response.json()["name"])
