"""Key/value stores backing session persistence."""

from __future__ import annotations

import json
import logging as py_logging
import re
from contextlib import suppress
from pathlib import Path
from typing import Protocol

from folioterm.errors import ErrorKind, ExitCode, TerminalError

logger = py_logging.getLogger(__name__)

_KEY_PATTERN = re.compile(r"^[A-Za-z0-9._-]+$")


class KeyValueStore(Protocol):
    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...

    def remove(self, key: str) -> None: ...


class MemoryStore:
    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self.values: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self.values.get(key)

    def set(self, key: str, value: str) -> None:
        self.values[key] = value

    def remove(self, key: str) -> None:
        self.values.pop(key, None)


def _storage_error(message: str, exc: Exception) -> TerminalError:
    return TerminalError(
        message,
        code=ExitCode.STORAGE_ERROR,
        hint=str(exc) or "Check the state directory permissions.",
        kind=ErrorKind.STORAGE_UNAVAILABLE,
    )


class FileStore:
    """One JSON document per store, rewritten on every change."""

    def __init__(self, directory: str | Path, *, filename: str = "store.json") -> None:
        self.path = Path(directory).expanduser() / filename

    def _load(self) -> dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
        except OSError as exc:
            raise _storage_error("State file could not be read.", exc) from exc
        except json.JSONDecodeError:
            logger.warning("Discarding corrupt state file path=%s", self.path)
            return {}
        if not isinstance(raw, dict):
            return {}
        return {key: value for key, value in raw.items() if isinstance(key, str) and isinstance(value, str)}

    def _save(self, values: dict[str, str]) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(json.dumps(values, ensure_ascii=True, sort_keys=True), encoding="utf-8")
        except OSError as exc:
            raise _storage_error("State file could not be written.", exc) from exc
        with suppress(OSError):
            self.path.chmod(0o600)

    def get(self, key: str) -> str | None:
        return self._load().get(_validate_key(key))

    def set(self, key: str, value: str) -> None:
        values = self._load()
        values[_validate_key(key)] = value
        self._save(values)

    def remove(self, key: str) -> None:
        values = self._load()
        if values.pop(_validate_key(key), None) is not None:
            self._save(values)


def _validate_key(key: str) -> str:
    if not _KEY_PATTERN.match(key):
        raise TerminalError(
            f"Invalid storage key: {key!r}",
            code=ExitCode.VALIDATION_ERROR,
            hint="Use letters, digits, dot, dash or underscore.",
            kind=ErrorKind.STORAGE_UNAVAILABLE,
        )
    return key
