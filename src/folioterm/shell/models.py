"""Shell domain models: history entries and interpreter state."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Union

from folioterm.errors import ErrorKind

Content = Union[str, tuple[str, ...]]


class EntryKind(str, Enum):
    COMMAND = "command"
    OUTPUT = "output"
    ERROR = "error"


class PromptMode(str, Enum):
    NORMAL = "normal"
    AWAITING_PASSWORD = "awaiting-password"


@dataclass(frozen=True)
class HistoryEntry:
    entry_id: int
    kind: EntryKind
    content: Content
    is_root: bool = False
    accepted: bool = False
    path: str = ""
    error_kind: ErrorKind | None = None

    @property
    def lines(self) -> tuple[str, ...]:
        if isinstance(self.content, tuple):
            return self.content
        return (self.content,)

    @property
    def line_count(self) -> int:
        if isinstance(self.content, tuple):
            return len(self.content)
        return 1

    def to_dict(self) -> dict[str, object]:
        payload: dict[str, object] = {
            "id": self.entry_id,
            "type": self.kind.value,
            "content": list(self.content) if isinstance(self.content, tuple) else self.content,
        }
        if self.kind == EntryKind.COMMAND:
            payload["is_root"] = self.is_root
            payload["accepted"] = self.accepted
            payload["path"] = self.path
        if self.error_kind is not None:
            payload["error_kind"] = self.error_kind.value
        return payload


def parse_entry(raw: object) -> HistoryEntry | None:
    if not isinstance(raw, dict):
        return None
    try:
        kind = EntryKind(str(raw.get("type", "")))
        entry_id = int(raw.get("id", 0))
    except (TypeError, ValueError, OverflowError):
        return None

    content_raw = raw.get("content", "")
    content: Content
    if isinstance(content_raw, list):
        if not all(isinstance(item, str) for item in content_raw):
            return None
        content = tuple(content_raw)
    elif isinstance(content_raw, str):
        content = content_raw
    else:
        return None

    error_kind: ErrorKind | None = None
    if "error_kind" in raw:
        try:
            error_kind = ErrorKind(str(raw["error_kind"]))
        except ValueError:
            error_kind = None

    return HistoryEntry(
        entry_id=entry_id,
        kind=kind,
        content=content,
        is_root=bool(raw.get("is_root", False)),
        accepted=bool(raw.get("accepted", False)),
        path=str(raw.get("path", "")),
        error_kind=error_kind,
    )


@dataclass(frozen=True)
class CompletionState:
    candidates: tuple[str, ...] = ()
    head: str = ""
    index: int = -1
    last_at_ms: float | None = None


@dataclass(frozen=True)
class InterpreterState:
    input: str = ""
    history: tuple[HistoryEntry, ...] = ()
    commands: tuple[str, ...] = ()
    history_index: int = -1
    is_root: bool = False
    mode: PromptMode = PromptMode.NORMAL
    executing: bool = False
    pending_request_id: int | None = None
    completion: CompletionState = field(default_factory=CompletionState)
    accepted_text: str = ""
    ghost: str = ""
    next_id: int = 1

    @property
    def is_accepted(self) -> bool:
        return bool(self.accepted_text) and self.input.startswith(self.accepted_text)
