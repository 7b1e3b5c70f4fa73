"""Session snapshot persistence across minimize, navigation and reload."""

from __future__ import annotations

import json
import logging as py_logging
from dataclasses import dataclass, replace
from typing import Any

from folioterm.shell.history import limit_history
from folioterm.shell.models import HistoryEntry, InterpreterState, parse_entry
from folioterm.storage import KeyValueStore
from folioterm.window.models import WindowGeometry, parse_geometry

logger = py_logging.getLogger(__name__)

SNAPSHOT_VERSION = 1


@dataclass(frozen=True)
class SessionSnapshot:
    history: tuple[HistoryEntry, ...]
    commands: tuple[str, ...]
    is_root: bool
    geometry: WindowGeometry
    restore: bool = False
    reopen: bool = False

    def to_dict(self) -> dict[str, object]:
        return {
            "version": SNAPSHOT_VERSION,
            "history": [entry.to_dict() for entry in self.history],
            "commands": list(self.commands),
            "is_root": self.is_root,
            "geometry": self.geometry.to_dict(),
            "restore": self.restore,
            "reopen": self.reopen,
        }


def build_session_snapshot(
    *,
    shell: InterpreterState,
    geometry: WindowGeometry,
    max_lines: int,
    restore: bool = True,
    reopen: bool = False,
) -> SessionSnapshot:
    return SessionSnapshot(
        history=limit_history(shell.history, max_lines),
        commands=shell.commands,
        is_root=shell.is_root,
        geometry=geometry,
        restore=restore,
        reopen=reopen,
    )


def parse_session_snapshot(raw: Any) -> SessionSnapshot | None:
    if not isinstance(raw, dict):
        return None
    if raw.get("version", SNAPSHOT_VERSION) != SNAPSHOT_VERSION:
        return None

    history_raw = raw.get("history", [])
    commands_raw = raw.get("commands", [])
    if not isinstance(history_raw, list) or not isinstance(commands_raw, list):
        return None

    history: list[HistoryEntry] = []
    for item in history_raw:
        entry = parse_entry(item)
        if entry is None:
            return None
        history.append(entry)

    if not all(isinstance(item, str) for item in commands_raw):
        return None

    geometry = parse_geometry(raw.get("geometry"))
    if geometry is None:
        return None

    return SessionSnapshot(
        history=tuple(history),
        commands=tuple(commands_raw),
        is_root=bool(raw.get("is_root", False)),
        geometry=geometry,
        restore=bool(raw.get("restore", False)),
        reopen=bool(raw.get("reopen", False)),
    )


class SessionBridge:
    """Reads and writes snapshots through a host store without ever raising."""

    def __init__(self, store: KeyValueStore, *, key: str = "terminal-session") -> None:
        self.store = store
        self.key = key

    def save(self, snapshot: SessionSnapshot) -> bool:
        payload = json.dumps(snapshot.to_dict(), ensure_ascii=True, separators=(",", ":"))
        try:
            self.store.set(self.key, payload)
        except Exception as exc:
            logger.warning("Session snapshot not saved (storage unavailable): %s", exc)
            return False
        logger.debug(
            "Session snapshot saved entries=%s restore=%s reopen=%s",
            len(snapshot.history),
            snapshot.restore,
            snapshot.reopen,
        )
        return True

    def _read(self) -> SessionSnapshot | None:
        try:
            payload = self.store.get(self.key)
        except Exception as exc:
            logger.warning("Session snapshot not read (storage unavailable): %s", exc)
            return None
        if not payload:
            return None
        try:
            decoded = json.loads(payload)
        except (ValueError, RecursionError):
            decoded = None
        snapshot = parse_session_snapshot(decoded)
        if snapshot is None:
            logger.info("Discarding malformed session snapshot")
            self._remove()
        return snapshot

    def _remove(self) -> None:
        try:
            self.store.remove(self.key)
        except Exception as exc:
            logger.warning("Session snapshot not removed (storage unavailable): %s", exc)

    def load(self) -> SessionSnapshot | None:
        """Consume a restorable snapshot; a pending reopen flag is left for the host."""
        snapshot = self._read()
        if snapshot is None:
            return None
        if not snapshot.restore:
            if not snapshot.reopen:
                logger.debug("Discarding session snapshot without restore flags")
                self._remove()
            return None

        if snapshot.reopen:
            self.save(replace(snapshot, restore=False))
        else:
            self._remove()
        return replace(snapshot, geometry=replace(snapshot.geometry, is_minimized=False))

    def pending_reopen(self) -> bool:
        snapshot = self._read()
        return snapshot is not None and snapshot.reopen

    def clear_reopen(self) -> None:
        snapshot = self._read()
        if snapshot is None or not snapshot.reopen:
            return
        if snapshot.restore:
            self.save(replace(snapshot, reopen=False))
        else:
            self._remove()
