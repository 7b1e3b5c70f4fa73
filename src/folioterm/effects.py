"""Side effects returned by the window and shell reducers for the host to execute."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, Union

Theme = Literal["light", "dark"]


@dataclass(frozen=True)
class Navigate:
    path: str
    delay: float = 0.0


@dataclass(frozen=True)
class OpenUrl:
    url: str


@dataclass(frozen=True)
class SetTheme:
    theme: Theme


@dataclass(frozen=True)
class Reload:
    delay: float = 0.0


@dataclass(frozen=True)
class CloseWidget:
    delay: float = 0.0


@dataclass(frozen=True)
class LookupIp:
    request_id: int
    url: str
    timeout: float


@dataclass(frozen=True)
class PersistSession:
    restore: bool = True
    reopen: bool = False


Effect = Union[Navigate, OpenUrl, SetTheme, Reload, CloseWidget, LookupIp, PersistSession]


def describe(effect: Effect) -> str:
    name = type(effect).__name__
    fields = " ".join(f"{key}={value}" for key, value in vars(effect).items())
    return f"{name} {fields}".strip()
