from __future__ import annotations

from hypothesis import given
from hypothesis import strategies as st

from folioterm.shell import EntryKind, HistoryEntry
from folioterm.shell.history import count_lines, limit_history


def _entries(line_counts: list[int]) -> tuple[HistoryEntry, ...]:
    entries = []
    for entry_id, lines in enumerate(line_counts, start=1):
        content = tuple(f"{entry_id}:{index}" for index in range(lines)) if lines > 1 else f"{entry_id}"
        entries.append(HistoryEntry(entry_id=entry_id, kind=EntryKind.OUTPUT, content=content))
    return tuple(entries)


@given(
    st.lists(st.integers(min_value=1, max_value=20), max_size=60),
    st.integers(min_value=10, max_value=200),
)
def test_limit_keeps_newest_whole_entries_within_cap(line_counts: list[int], max_lines: int) -> None:
    history = _entries(line_counts)

    limited = limit_history(history, max_lines)

    assert count_lines(limited) <= max_lines
    assert limited == history[len(history) - len(limited) :]
    if len(limited) < len(history):
        evicted = history[len(history) - len(limited) - 1]
        assert count_lines(limited) + evicted.line_count > max_lines


@given(
    st.lists(st.integers(min_value=1, max_value=20), max_size=60),
    st.integers(min_value=10, max_value=200),
)
def test_limit_is_idempotent(line_counts: list[int], max_lines: int) -> None:
    once = limit_history(_entries(line_counts), max_lines)

    assert limit_history(once, max_lines) == once
