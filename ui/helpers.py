"""Helper functions for the UI - API client calls and display formatting."""

import re
from datetime import datetime
from typing import Any
from urllib.parse import unquote

import httpx

# Extraction runs pace their batches, so allow long requests
EXTRACTION_TIMEOUT = 600.0
DEFAULT_TIMEOUT = 30.0

_FILENAME_STAR_RE = re.compile(r"filename\*=UTF-8''([^;]+)", re.IGNORECASE)
_FILENAME_RE = re.compile(r'filename="?([^";]+)"?', re.IGNORECASE)


def format_date(value: str | datetime | None) -> str:
    """Format a timestamp as a Korean short date, e.g. ``2024년 3월 5일``.

    Missing or unparsable values render as ``-``.
    """
    if not value:
        return "-"
    try:
        parsed = value if isinstance(value, datetime) else datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    except ValueError:
        return "-"
    return f"{parsed.year}년 {parsed.month}월 {parsed.day}일"


def build_session_rows(sessions: list[dict[str, Any]]) -> list[str]:
    """Build one display line per session from GET /sessions payload.

    Args:
        sessions: Session summary dicts

    Returns:
        Lines like ``[General] 서사 기록 · 3 턴 · 2024년 3월 5일``
    """
    rows = []
    for session in sessions:
        title = session.get("title") or session.get("subject") or "Untitled"
        turns = session.get("turn_count") or 0
        rows.append(f"{title} · {turns} 턴 · {format_date(session.get('updated_at'))}")
    return rows


def filename_from_disposition(header: str | None, fallback: str) -> str:
    """Read the download filename from a Content-Disposition header."""
    if not header:
        return fallback
    match = _FILENAME_STAR_RE.search(header)
    if match:
        return unquote(match.group(1))
    match = _FILENAME_RE.search(header)
    return match.group(1) if match else fallback


def error_detail(error: httpx.HTTPStatusError) -> str:
    """Short status string from an API error response."""
    try:
        detail = error.response.json().get("detail")
    except ValueError:
        return f"HTTP {error.response.status_code}"
    if isinstance(detail, dict):
        return f"{detail.get('status', '오류')}: {detail.get('message', '')}".rstrip(": ")
    return str(detail or f"HTTP {error.response.status_code}")


def fetch_settings(backend_url: str) -> dict[str, Any]:
    """Call GET /settings.

    Raises:
        httpx.HTTPStatusError: If request fails
    """
    response = httpx.get(f"{backend_url}/settings", timeout=DEFAULT_TIMEOUT)
    response.raise_for_status()
    result: dict[str, Any] = response.json()
    return result


def save_settings(
    backend_url: str,
    llm_api_key: str,
    llm_model: str,
    firebase_api_key: str,
    firebase_project_id: str,
    firebase_auth_domain: str = "",
) -> dict[str, Any]:
    """Call PUT /settings with the full config blob.

    Raises:
        httpx.HTTPStatusError: If request fails
    """
    body = {
        "llm": {"apiKey": llm_api_key, "model": llm_model},
        "firebase": {
            "apiKey": firebase_api_key,
            "projectId": firebase_project_id,
            "authDomain": firebase_auth_domain,
        },
    }
    response = httpx.put(f"{backend_url}/settings", json=body, timeout=DEFAULT_TIMEOUT)
    response.raise_for_status()
    result: dict[str, Any] = response.json()
    return result


def list_sessions(backend_url: str) -> list[dict[str, Any]]:
    """Call GET /sessions.

    Raises:
        httpx.HTTPStatusError: If request fails
    """
    response = httpx.get(f"{backend_url}/sessions", timeout=DEFAULT_TIMEOUT)
    response.raise_for_status()
    sessions: list[dict[str, Any]] = response.json()["sessions"]
    return sessions


def get_session_detail(backend_url: str, session_id: str) -> dict[str, Any]:
    """Call GET /sessions/{session_id}.

    Raises:
        httpx.HTTPStatusError: If request fails
    """
    response = httpx.get(f"{backend_url}/sessions/{session_id}", timeout=DEFAULT_TIMEOUT)
    response.raise_for_status()
    result: dict[str, Any] = response.json()
    return result


def run_extraction(
    backend_url: str, session_id: str, kind: str = "micro", batch_size: int | None = None
) -> dict[str, Any]:
    """Call POST /sessions/{session_id}/extractions.

    Raises:
        httpx.HTTPStatusError: If request fails
    """
    response = httpx.post(
        f"{backend_url}/sessions/{session_id}/extractions",
        json={"kind": kind, "batch_size": batch_size},
        timeout=EXTRACTION_TIMEOUT,
    )
    response.raise_for_status()
    result: dict[str, Any] = response.json()
    return result


def download_export(backend_url: str, session_id: str, mode: str = "raw") -> tuple[str, bytes]:
    """Call GET /sessions/{session_id}/export.

    Returns:
        (filename, JSON bytes)

    Raises:
        httpx.HTTPStatusError: If request fails
    """
    response = httpx.get(
        f"{backend_url}/sessions/{session_id}/export",
        params={"mode": mode},
        timeout=DEFAULT_TIMEOUT,
    )
    response.raise_for_status()
    filename = filename_from_disposition(
        response.headers.get("content-disposition"), f"shn_{mode}_{session_id}.json"
    )
    return filename, response.content
