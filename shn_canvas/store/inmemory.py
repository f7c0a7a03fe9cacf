"""In-memory implementation of the DocumentStore protocol."""

import copy
import uuid
from datetime import datetime, timezone
from typing import Any

from shn_canvas.store.wire import resolve_sentinels, to_wire_value


def _sort_key(value: Any) -> tuple[int, Any]:
    """Order values of mixed types the way the store groups them."""
    if value is None:
        return (0, 0)
    if isinstance(value, bool):
        return (1, value)
    if isinstance(value, (int, float)):
        return (2, value)
    if isinstance(value, datetime):
        return (3, value if value.tzinfo else value.replace(tzinfo=timezone.utc))
    if isinstance(value, str):
        return (4, value)
    return (5, str(value))


class InMemoryDocumentStore:
    """Dict-backed document store with the same semantics as the REST client."""

    def __init__(self) -> None:
        self._collections: dict[str, dict[str, dict[str, Any]]] = {}

    def _collection(self, collection: str) -> dict[str, dict[str, Any]]:
        return self._collections.setdefault(collection.strip("/"), {})

    async def get(self, collection: str, doc_id: str) -> dict[str, Any] | None:
        """Fetch a document or None."""
        document = self._collection(collection).get(doc_id)
        if document is None:
            return None
        return {**copy.deepcopy(document), "_id": doc_id}

    async def list(
        self,
        collection: str,
        order_field: str | None = None,
        limit: int | None = None,
    ) -> list[dict[str, Any]]:
        """List documents, optionally ordered ascending by a field."""
        items = list(self._collection(collection).items())
        if order_field:
            # Documents lacking the order field are excluded, as Firestore does
            items = [item for item in items if order_field in item[1]]
            items.sort(key=lambda item: _sort_key(item[1][order_field]))
        if limit:
            items = items[:limit]
        return [{**copy.deepcopy(doc), "_id": doc_id} for doc_id, doc in items]

    async def set(self, collection: str, doc_id: str, fields: dict[str, Any]) -> None:
        """Merge the given fields into the document, creating it if needed."""
        for value in fields.values():
            # Reject the same types the wire codec rejects
            to_wire_value(value)
        document = self._collection(collection).setdefault(doc_id, {})
        document.update(copy.deepcopy(resolve_sentinels(fields)))

    async def add(self, collection: str, fields: dict[str, Any]) -> str:
        """Create a document under a random ID."""
        doc_id = uuid.uuid4().hex[:20]
        await self.set(collection, doc_id, fields)
        return doc_id
