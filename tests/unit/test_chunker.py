"""Tests for marker chunking and batching."""

import math

import pytest

from shn_canvas.extraction.chunker import (
    BATCH_JOINER,
    DATA_END,
    DATA_START,
    assemble_turn_log,
    build_user_message,
    chunk_by_marker,
    clamp_batch_size,
    count_batches,
    group_batches,
)
from shn_canvas.models.session import MarkerKind, Turn

THREE_TURNS = "## [턴 1]\n\nA\n\n## [턴 2]\n\nB\n\n## [턴 3]\n\nC"


def test_chunk_by_turn_marker_keeps_headings() -> None:
    """Test that each chunk starts with its own turn heading."""
    chunks = chunk_by_marker(THREE_TURNS, MarkerKind.turn)

    assert chunks == ["## [턴 1]\n\nA", "## [턴 2]\n\nB", "## [턴 3]\n\nC"]


def test_text_before_first_marker_is_its_own_chunk() -> None:
    """Test that a preamble before the first marker is kept in order."""
    chunks = chunk_by_marker("intro\n## [턴 1]\nA", MarkerKind.turn)

    assert chunks == ["intro", "## [턴 1]\nA"]


def test_text_without_marker_is_single_trimmed_chunk() -> None:
    """Test that text with no marker yields exactly one chunk equal to the trimmed input."""
    assert chunk_by_marker("  just prose\n\n", MarkerKind.turn) == ["just prose"]


def test_no_marker_kind_keeps_whole_text() -> None:
    """Test that a None marker keeps the text as a single chunk."""
    assert chunk_by_marker(f"  {THREE_TURNS}  ", None) == [THREE_TURNS]


@pytest.mark.parametrize("text", ["", "   \n\t"])
def test_empty_text_has_no_chunks(text: str) -> None:
    """Test that blank input produces no chunks."""
    assert chunk_by_marker(text, MarkerKind.turn) == []


def test_day_and_episode_markers() -> None:
    """Test that day and episode headings split their own kind only."""
    text = "## [1일차] 아침\n## [턴 1]\nA\n## [2일차] 밤\nB"
    episodes = "## [에피소드 1]\nA\n## [에피소드 2]\nB"

    assert chunk_by_marker(text, MarkerKind.day) == ["## [1일차] 아침\n## [턴 1]\nA", "## [2일차] 밤\nB"]
    assert len(chunk_by_marker(episodes, MarkerKind.episode)) == 2


@pytest.mark.parametrize(
    ("value", "expected"),
    [(10, 10), (0, 10), (-5, 1), (250, 100), ("7", 7), ("abc", 10), (None, 10), (1, 1), (100, 100)],
)
def test_clamp_batch_size(value: object, expected: int) -> None:
    """Test that batch sizes are clamped to [1, 100] with the default for 0 or garbage."""
    assert clamp_batch_size(value) == expected  # type: ignore[arg-type]


@pytest.mark.parametrize(("chunks", "size"), [(1, 1), (3, 2), (10, 10), (11, 10), (25, 7)])
def test_group_batches_count_and_order(chunks: int, size: int) -> None:
    """Test that k chunks in batches of n produce ceil(k/n) batches in original order."""
    items = [f"c{i}" for i in range(chunks)]

    batches = group_batches(items, size)

    assert len(batches) == math.ceil(chunks / size) == count_batches(chunks, size)
    assert BATCH_JOINER.join(batches).split(BATCH_JOINER) == items


def test_count_batches_for_no_chunks() -> None:
    """Test that zero chunks means zero batches."""
    assert count_batches(0, 10) == 0
    assert group_batches([], 10) == []


def test_build_user_message_wraps_batch() -> None:
    """Test that the batch sits between the fixed delimiter lines."""
    assert build_user_message("X") == f"{DATA_START}\nX\n{DATA_END}"
    assert DATA_START == "--- 데이터 시작 ---"
    assert DATA_END == "--- 데이터 끝 ---"


def test_assemble_turn_log_adds_missing_headings() -> None:
    """Test that contents lacking a turn heading get one, and headed contents are kept."""
    turns = [
        Turn(turn_number=1, content="\n\n## [턴 1]\n\nA"),
        Turn(turn_number=2, content="B"),
    ]

    log = assemble_turn_log(turns)

    assert log == "\n\n## [턴 1]\n\nA\n\n## [턴 2]\n\nB"
    assert chunk_by_marker(log, MarkerKind.turn) == ["## [턴 1]\n\nA", "## [턴 2]\n\nB"]
