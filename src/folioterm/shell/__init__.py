"""Command interpreter package."""

from .commands import COMMAND_NAMES, HostInfo, ShellContext
from .interpreter import (
    Complete,
    HistoryDown,
    HistoryUp,
    HydrateShell,
    IpLookupFailed,
    IpResolved,
    SetInput,
    Shell,
    Submit,
    reduce_shell,
)
from .models import EntryKind, HistoryEntry, InterpreterState, PromptMode

__all__ = [
    "COMMAND_NAMES",
    "Complete",
    "EntryKind",
    "HistoryDown",
    "HistoryEntry",
    "HistoryUp",
    "HostInfo",
    "HydrateShell",
    "InterpreterState",
    "IpLookupFailed",
    "IpResolved",
    "PromptMode",
    "SetInput",
    "Shell",
    "ShellContext",
    "Submit",
    "reduce_shell",
]
