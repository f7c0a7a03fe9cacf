"""Marker chunking and batching for the extraction pipeline.

Pure functions with no I/O: same input, same output.
"""

import math
import re
from collections.abc import Iterable, Sequence

from shn_canvas.models.session import MarkerKind, Turn

DEFAULT_BATCH_SIZE = 10
MIN_BATCH_SIZE = 1
MAX_BATCH_SIZE = 100

BATCH_JOINER = "\n\n"
DATA_START = "--- 데이터 시작 ---"
DATA_END = "--- 데이터 끝 ---"

# Lookahead patterns keep each marker attached to the content that follows it
MARKER_SPLIT_PATTERNS: dict[MarkerKind, re.Pattern[str]] = {
    MarkerKind.turn: re.compile(r"(?=## \[턴)"),
    MarkerKind.day: re.compile(r"(?=## \[\d+일차)"),
    MarkerKind.episode: re.compile(r"(?=## \[에피소드)"),
}

TURN_MARKER_PREFIX = "## [턴"


def chunk_by_marker(text: str, marker_kind: MarkerKind | None) -> list[str]:
    """Split accumulated text into marker-delimited chunks.

    Args:
        text: Accumulated structured text
        marker_kind: Marker to split on; None keeps the text as one chunk

    Returns:
        Stripped, non-empty chunks in original order. Text without any
        marker yields a single chunk equal to the trimmed input.
    """
    if not text or not text.strip():
        return []
    if marker_kind is None:
        return [text.strip()]

    pieces = MARKER_SPLIT_PATTERNS[marker_kind].split(text)
    return [piece.strip() for piece in pieces if piece.strip()]


def clamp_batch_size(value: int | str | None, default: int = DEFAULT_BATCH_SIZE) -> int:
    """Clamp a requested batch size into [1, 100]; unparsable input uses the default."""
    try:
        size = int(value) if value is not None else default
    except (TypeError, ValueError):
        size = default
    if size == 0:
        size = default
    return max(MIN_BATCH_SIZE, min(MAX_BATCH_SIZE, size))


def count_batches(chunk_count: int, batch_size: int) -> int:
    return math.ceil(chunk_count / batch_size) if chunk_count else 0


def group_batches(chunks: Sequence[str], batch_size: int) -> list[str]:
    """Group consecutive chunks into batches joined by a blank line."""
    size = clamp_batch_size(batch_size)
    return [BATCH_JOINER.join(chunks[i : i + size]) for i in range(0, len(chunks), size)]


def build_user_message(batch: str) -> str:
    """Wrap a batch with the fixed delimiter lines."""
    return f"{DATA_START}\n{batch}\n{DATA_END}"


def assemble_turn_log(turns: Iterable[Turn]) -> str:
    """Concatenate turn contents into one turn log, adding missing headings."""
    blocks = []
    for turn in turns:
        content = turn.content or ""
        if content.strip().startswith(TURN_MARKER_PREFIX):
            blocks.append(content)
        else:
            blocks.append(f"## [턴 {turn.turn_number}]\n\n{content}")
    return BATCH_JOINER.join(blocks)
