"""Per-frame coalescing of continuous pointer updates."""

from __future__ import annotations

from collections.abc import Callable
from typing import Generic, TypeVar

T = TypeVar("T")


class FrameCoalescer(Generic[T]):
    """Keep only the latest pending update and commit it once per display frame."""

    def __init__(self, commit: Callable[[T], object]) -> None:
        self._commit = commit
        self._pending: T | None = None
        self.commits = 0
        self.dropped = 0

    @property
    def has_pending(self) -> bool:
        return self._pending is not None

    def request(self, update: T) -> None:
        if self._pending is not None:
            self.dropped += 1
        self._pending = update

    def cancel(self) -> None:
        self._pending = None

    def flush(self) -> bool:
        pending = self._pending
        if pending is None:
            return False
        self._pending = None
        self._commit(pending)
        self.commits += 1
        return True
