"""Document store protocol and collection names."""

from typing import Any, Protocol

SESSIONS_COLLECTION = "shn-sessions"
EXTRACTIONS_COLLECTION = "extractions"


def turns_collection(session_id: str) -> str:
    """Child collection holding a session's turns."""
    return f"{SESSIONS_COLLECTION}/{session_id}/turns"


def turn_doc_id(turn_number: int) -> str:
    return f"turn_{turn_number}"


def extraction_doc_id(session_id: str, kind: str) -> str:
    """Synthetic key for the one live extraction per (session, kind)."""
    return f"{session_id}_{kind}"


class DocumentStore(Protocol):
    """Get/list/set access to a document database.

    Documents are plain dicts of native values. Listed and fetched documents
    carry their identifier under the ``_id`` key.
    """

    async def get(self, collection: str, doc_id: str) -> dict[str, Any] | None:
        """Fetch a single document.

        Args:
            collection: Collection path (may be nested, e.g. "a/b/c")
            doc_id: Document ID

        Returns:
            Document fields with ``_id``, or None if the document does not exist
        """
        ...

    async def list(
        self,
        collection: str,
        order_field: str | None = None,
        limit: int | None = None,
    ) -> list[dict[str, Any]]:
        """List one page of documents in a collection.

        Args:
            collection: Collection path
            order_field: Optional field to order by (ascending)
            limit: Optional page size

        Returns:
            Documents with ``_id``
        """
        ...

    async def set(self, collection: str, doc_id: str, fields: dict[str, Any]) -> None:
        """Create the document or replace the given fields (upsert)."""
        ...

    async def add(self, collection: str, fields: dict[str, Any]) -> str:
        """Create a document with a store-assigned ID and return the ID."""
        ...
