from __future__ import annotations

import json

import pytest

from folioterm.session import (
    SNAPSHOT_VERSION,
    SessionBridge,
    SessionSnapshot,
    build_session_snapshot,
    parse_session_snapshot,
)
from folioterm.shell import EntryKind, HistoryEntry, InterpreterState
from folioterm.storage import MemoryStore
from folioterm.window import WindowGeometry

KEY = "terminal-session"


class BrokenStore:
    def get(self, key: str) -> str | None:
        raise OSError("storage disabled")

    def set(self, key: str, value: str) -> None:
        raise OSError("quota exceeded")

    def remove(self, key: str) -> None:
        raise OSError("storage disabled")


def _snapshot(*, restore: bool = True, reopen: bool = False, minimized: bool = False) -> SessionSnapshot:
    return SessionSnapshot(
        history=(
            HistoryEntry(entry_id=1, kind=EntryKind.COMMAND, content="ls", is_root=True, path="/"),
            HistoryEntry(entry_id=2, kind=EntryKind.OUTPUT, content=("  /", "  /about")),
        ),
        commands=("ls",),
        is_root=True,
        geometry=WindowGeometry(x=10, y=20, width=700, height=450, is_minimized=minimized),
        restore=restore,
        reopen=reopen,
    )


def test_snapshot_serializes_to_versioned_json() -> None:
    payload = _snapshot().to_dict()

    assert payload["version"] == SNAPSHOT_VERSION
    assert payload["commands"] == ["ls"]
    assert payload["history"][1] == {"id": 2, "type": "output", "content": ["  /", "  /about"]}
    assert payload["geometry"]["width"] == 700
    assert parse_session_snapshot(json.loads(json.dumps(payload))) == _snapshot()


def test_parse_rejects_malformed_payloads() -> None:
    assert parse_session_snapshot(None) is None
    assert parse_session_snapshot([]) is None
    assert parse_session_snapshot({"version": 99}) is None
    assert parse_session_snapshot({"history": "nope", "commands": [], "geometry": {}}) is None

    payload = _snapshot().to_dict()
    payload["geometry"] = {"x": 0, "y": 0, "width": -1, "height": 10}
    assert parse_session_snapshot(payload) is None


def test_build_snapshot_bounds_history() -> None:
    history = tuple(
        HistoryEntry(entry_id=index, kind=EntryKind.OUTPUT, content=f"line {index}")
        for index in range(1, 31)
    )
    state = InterpreterState(history=history, commands=("echo",))

    snapshot = build_session_snapshot(
        shell=state,
        geometry=WindowGeometry(x=0, y=0, width=800, height=500),
        max_lines=10,
    )

    assert len(snapshot.history) == 10
    assert snapshot.history[0].content == "line 21"
    assert snapshot.restore
    assert not snapshot.reopen


def test_restore_consumes_snapshot_and_unminimizes() -> None:
    store = MemoryStore()
    bridge = SessionBridge(store, key=KEY)
    assert bridge.save(_snapshot(minimized=True))

    loaded = bridge.load()

    assert loaded is not None
    assert loaded.is_root
    assert loaded.commands == ("ls",)
    assert not loaded.geometry.is_minimized
    assert KEY not in store.values
    assert bridge.load() is None


def test_restore_keeps_reopen_flag_for_host() -> None:
    store = MemoryStore()
    bridge = SessionBridge(store, key=KEY)
    bridge.save(_snapshot(restore=True, reopen=True))

    assert bridge.load() is not None
    remaining = json.loads(store.values[KEY])
    assert remaining["restore"] is False
    assert remaining["reopen"] is True

    assert bridge.load() is None
    assert bridge.pending_reopen()
    bridge.clear_reopen()
    assert not bridge.pending_reopen()
    assert KEY not in store.values


def test_snapshot_without_flags_is_discarded() -> None:
    store = MemoryStore()
    bridge = SessionBridge(store, key=KEY)
    bridge.save(_snapshot(restore=False, reopen=False))

    assert bridge.load() is None
    assert KEY not in store.values


_GEOMETRY = '"geometry":{"x":X,"y":0,"width":800,"height":500}'


def _raw_snapshot(x: str = "0", entry_id: str = "1") -> str:
    history = f'[{{"id":{entry_id},"type":"output","content":"hi"}}]'
    return "{" + f'"history":{history},"commands":[],"restore":true,' + _GEOMETRY.replace("X", x) + "}"


def test_raw_snapshot_with_restore_flag_loads() -> None:
    snapshot = SessionBridge(MemoryStore({KEY: _raw_snapshot()}), key=KEY).load()

    assert snapshot is not None
    assert snapshot.history[0].content == "hi"
    assert snapshot.geometry.width == 800


@pytest.mark.parametrize(
    "raw",
    [
        "{not json",
        _raw_snapshot(entry_id="Infinity"),
        _raw_snapshot(x="1" * 400),
        _raw_snapshot(x="9" * 5000),
        _raw_snapshot(x="NaN"),
        _raw_snapshot(x="-Infinity"),
        "[" * 50_000 + "]" * 50_000,
    ],
    ids=[
        "not-json",
        "infinite-id",
        "huge-x",
        "oversized-int",
        "nan-x",
        "negative-infinite-x",
        "deep-nesting",
    ],
)
def test_malformed_payload_is_discarded(raw: str) -> None:
    store = MemoryStore({KEY: raw})
    bridge = SessionBridge(store, key=KEY)

    assert bridge.load() is None
    assert KEY not in store.values


def test_storage_failures_never_raise() -> None:
    bridge = SessionBridge(BrokenStore(), key=KEY)

    assert bridge.save(_snapshot()) is False
    assert bridge.load() is None
    assert bridge.pending_reopen() is False
    bridge.clear_reopen()
