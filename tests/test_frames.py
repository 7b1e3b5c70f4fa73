from __future__ import annotations

from folioterm.window import FrameCoalescer


def test_only_latest_update_is_committed_per_frame() -> None:
    committed: list[int] = []
    frames: FrameCoalescer[int] = FrameCoalescer(committed.append)

    frames.request(1)
    frames.request(2)
    frames.request(3)

    assert frames.has_pending
    assert frames.flush() is True
    assert committed == [3]
    assert frames.commits == 1
    assert frames.dropped == 2


def test_flush_without_pending_update_is_noop() -> None:
    committed: list[int] = []
    frames: FrameCoalescer[int] = FrameCoalescer(committed.append)

    assert frames.flush() is False
    assert committed == []


def test_cancel_discards_pending_update() -> None:
    committed: list[int] = []
    frames: FrameCoalescer[int] = FrameCoalescer(committed.append)

    frames.request(7)
    frames.cancel()

    assert not frames.has_pending
    assert frames.flush() is False
    assert committed == []
