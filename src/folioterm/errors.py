"""Deterministic error model and exit code contract."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, IntEnum


class ExitCode(IntEnum):
    SUCCESS = 0
    INVALID_ARGS = 2
    CONFIG_ERROR = 3
    RUNTIME_ERROR = 4
    STORAGE_ERROR = 5
    NETWORK_ERROR = 6
    VALIDATION_ERROR = 7


class ErrorKind(str, Enum):
    UNKNOWN_COMMAND = "unknown-command"
    MISSING_ARGUMENT = "missing-argument"
    UNKNOWN_ROUTE = "unknown-route"
    NETWORK_TIMEOUT = "network-timeout"
    NETWORK_FAILURE = "network-failure"
    AUTH_FAILURE = "auth-failure"
    HOST_INFO_UNAVAILABLE = "host-info-unavailable"
    STORAGE_UNAVAILABLE = "storage-unavailable"


# Kinds that are shown to the user as error entries in the terminal history.
SURFACED_KINDS = frozenset(kind for kind in ErrorKind if kind != ErrorKind.STORAGE_UNAVAILABLE)


@dataclass
class TerminalError(Exception):
    message: str
    code: ExitCode = ExitCode.RUNTIME_ERROR
    hint: str = ""
    kind: ErrorKind | None = None

    def __str__(self) -> str:
        if self.hint:
            return f"{self.message} Hint: {self.hint}"
        return self.message


def user_facing_error(message: str, *, hint: str = "") -> str:
    if hint:
        return f"Error: {message}. Next step: {hint}"
    return f"Error: {message}."
