"""Line-bounded history buffer helpers."""

from __future__ import annotations

from collections.abc import Iterable

from folioterm.shell.models import HistoryEntry


def count_lines(history: Iterable[HistoryEntry]) -> int:
    return sum(entry.line_count for entry in history)


def limit_history(history: Iterable[HistoryEntry], max_lines: int) -> tuple[HistoryEntry, ...]:
    """Drop whole entries, oldest first, until the displayed line count fits ``max_lines``."""
    entries = tuple(history)
    if count_lines(entries) <= max_lines:
        return entries

    kept: list[HistoryEntry] = []
    used = 0
    for entry in reversed(entries):
        if used + entry.line_count > max_lines:
            break
        kept.append(entry)
        used += entry.line_count
    kept.reverse()
    return tuple(kept)
