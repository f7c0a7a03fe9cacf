"""Firestore REST value codec.

Every value on the wire is a single-key tagged object, e.g.
``{"stringValue": "a"}`` or ``{"mapValue": {"fields": {...}}}``.
Integers travel as decimal strings.
"""

from datetime import datetime, timezone
from typing import Any


class _ServerTimestamp:
    """Sentinel replaced by the current UTC time when written."""

    _instance: "_ServerTimestamp | None" = None

    def __new__(cls) -> "_ServerTimestamp":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "SERVER_TIMESTAMP"


SERVER_TIMESTAMP = _ServerTimestamp()


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def format_timestamp(value: datetime) -> str:
    """Format a datetime as RFC 3339 UTC with a trailing Z."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


def parse_timestamp(raw: str) -> datetime:
    """Parse an RFC 3339 timestamp; digits past microseconds are truncated."""
    return datetime.fromisoformat(raw)


def to_wire_value(value: Any) -> dict[str, Any]:
    """Convert a native value into its tagged wire form.

    Raises:
        TypeError: If the value type has no wire representation
    """
    if value is SERVER_TIMESTAMP:
        return {"timestampValue": format_timestamp(utcnow())}
    if value is None:
        return {"nullValue": None}
    # bool must be checked before int
    if isinstance(value, bool):
        return {"booleanValue": value}
    if isinstance(value, int):
        return {"integerValue": str(value)}
    if isinstance(value, float):
        return {"doubleValue": value}
    if isinstance(value, str):
        return {"stringValue": value}
    if isinstance(value, datetime):
        return {"timestampValue": format_timestamp(value)}
    if isinstance(value, (list, tuple)):
        return {"arrayValue": {"values": [to_wire_value(v) for v in value]}}
    if isinstance(value, dict):
        return {"mapValue": {"fields": to_wire_fields(value)}}
    raise TypeError(f"Unsupported value type for document store: {type(value).__name__}")


def from_wire_value(wire: dict[str, Any]) -> Any:
    """Convert a tagged wire value back into a native value."""
    if "nullValue" in wire:
        return None
    if "booleanValue" in wire:
        return bool(wire["booleanValue"])
    if "integerValue" in wire:
        return int(wire["integerValue"])
    if "doubleValue" in wire:
        return float(wire["doubleValue"])
    if "stringValue" in wire:
        return wire["stringValue"]
    if "timestampValue" in wire:
        return parse_timestamp(wire["timestampValue"])
    if "arrayValue" in wire:
        return [from_wire_value(v) for v in wire["arrayValue"].get("values", [])]
    if "mapValue" in wire:
        return from_wire_fields(wire["mapValue"].get("fields", {}))
    # referenceValue, geoPointValue, bytesValue are not used by this system
    for passthrough in ("referenceValue", "bytesValue", "geoPointValue"):
        if passthrough in wire:
            return wire[passthrough]
    raise ValueError(f"Unknown wire value: {sorted(wire)}")


def to_wire_fields(data: dict[str, Any]) -> dict[str, dict[str, Any]]:
    """Convert a native mapping into a Firestore ``fields`` object."""
    return {key: to_wire_value(value) for key, value in data.items()}


def from_wire_fields(fields: dict[str, dict[str, Any]]) -> dict[str, Any]:
    """Convert a Firestore ``fields`` object into a native mapping."""
    return {key: from_wire_value(value) for key, value in fields.items()}


def resolve_sentinels(value: Any) -> Any:
    """Replace SERVER_TIMESTAMP sentinels with the current time (in-memory store)."""
    if value is SERVER_TIMESTAMP:
        return utcnow()
    if isinstance(value, dict):
        return {k: resolve_sentinels(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [resolve_sentinels(v) for v in value]
    return value
