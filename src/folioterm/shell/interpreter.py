"""Shell reducer: input buffer, history browsing, evaluation and privilege state."""

from __future__ import annotations

import logging as py_logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, replace
from typing import Union

from folioterm.effects import Effect, LookupIp
from folioterm.errors import ErrorKind
from folioterm.shell.autocomplete import complete, inline_suggestion
from folioterm.shell.commands import COMMAND_NAMES, ShellContext, evaluate
from folioterm.shell.history import limit_history
from folioterm.shell.models import (
    CompletionState,
    Content,
    EntryKind,
    HistoryEntry,
    InterpreterState,
    PromptMode,
)

logger = py_logging.getLogger(__name__)


@dataclass(frozen=True)
class SetInput:
    text: str


@dataclass(frozen=True)
class Complete:
    pass


@dataclass(frozen=True)
class HistoryUp:
    pass


@dataclass(frozen=True)
class HistoryDown:
    pass


@dataclass(frozen=True)
class Submit:
    pass


@dataclass(frozen=True)
class IpResolved:
    request_id: int
    ip: str


@dataclass(frozen=True)
class IpLookupFailed:
    request_id: int
    kind: ErrorKind
    message: str


@dataclass(frozen=True)
class HydrateShell:
    history: tuple[HistoryEntry, ...]
    commands: tuple[str, ...]
    is_root: bool


ShellAction = Union[
    SetInput,
    Complete,
    HistoryUp,
    HistoryDown,
    Submit,
    IpResolved,
    IpLookupFailed,
    HydrateShell,
]


def initial_shell_state(banner: str = "") -> InterpreterState:
    if not banner:
        return InterpreterState()
    welcome = HistoryEntry(entry_id=1, kind=EntryKind.OUTPUT, content=banner)
    return InterpreterState(history=(welcome,), next_id=2)


def prompt_for(state: InterpreterState, context: ShellContext) -> str:
    config = context.config
    path = context.current_path or "/"
    if state.mode == PromptMode.AWAITING_PASSWORD:
        return "Password: "
    if state.is_root:
        return f"root@{config.host_name}:{path}# "
    return f"{config.user_name}@{config.host_name}:{path}$ "


def _append(
    state: InterpreterState,
    items: Iterable[tuple[EntryKind, Content, ErrorKind | None]],
    *,
    max_lines: int,
) -> tuple[InterpreterState, list[int]]:
    history = list(state.history)
    next_id = state.next_id
    ids: list[int] = []
    for kind, content, error_kind in items:
        history.append(
            HistoryEntry(entry_id=next_id, kind=kind, content=content, error_kind=error_kind)
        )
        ids.append(next_id)
        next_id += 1
    return replace(state, history=limit_history(history, max_lines), next_id=next_id), ids


def _command_entry(state: InterpreterState, line: str, context: ShellContext) -> HistoryEntry:
    return HistoryEntry(
        entry_id=state.next_id,
        kind=EntryKind.COMMAND,
        content=line,
        is_root=state.is_root,
        accepted=state.is_accepted and bool(line),
        path=context.current_path or "/",
    )


def _reset_input(state: InterpreterState) -> InterpreterState:
    return replace(
        state,
        input="",
        ghost="",
        accepted_text="",
        completion=CompletionState(),
        history_index=-1,
    )


def _ghost(text: str, state: InterpreterState, context: ShellContext) -> str:
    if state.mode == PromptMode.AWAITING_PASSWORD:
        return ""
    return inline_suggestion(text, routes=context.config.routes, commands=COMMAND_NAMES)


def _replace_entry(
    history: Sequence[HistoryEntry],
    entry_id: int,
    replacement: HistoryEntry,
) -> tuple[HistoryEntry, ...] | None:
    for index, entry in enumerate(history):
        if entry.entry_id == entry_id:
            return (*history[:index], replacement, *history[index + 1 :])
    return None


def _submit_password(
    state: InterpreterState,
    context: ShellContext,
) -> tuple[InterpreterState, list[Effect]]:
    supplied = state.input
    state = replace(_reset_input(state), mode=PromptMode.NORMAL)
    max_lines = context.config.max_history_lines
    if supplied == context.config.root_password:
        logger.info("Privilege escalation accepted")
        state = replace(state, is_root=True)
        state, _ = _append(
            state,
            [(EntryKind.OUTPUT, "Authentication successful. You are now root.", None)],
            max_lines=max_lines,
        )
        return state, []
    logger.info("Privilege escalation rejected")
    state, _ = _append(
        state,
        [(EntryKind.ERROR, "su: Authentication failure", ErrorKind.AUTH_FAILURE)],
        max_lines=max_lines,
    )
    return state, []


def _submit(
    state: InterpreterState,
    context: ShellContext,
) -> tuple[InterpreterState, list[Effect]]:
    if state.executing:
        logger.debug("Submission ignored while a command is executing")
        return state, []
    if state.mode == PromptMode.AWAITING_PASSWORD:
        return _submit_password(state, context)

    max_lines = context.config.max_history_lines
    line = state.input.strip()
    command = _command_entry(state, line, context)
    state = _reset_input(state)

    if not line:
        history = limit_history((*state.history, command), max_lines)
        return replace(state, history=history, next_id=command.entry_id + 1), []

    commands = (*state.commands, line)
    evaluation = evaluate(line, is_root=state.is_root, context=context)
    logger.debug(
        "Evaluated command=%r outputs=%s effects=%s",
        line.split()[0],
        len(evaluation.outputs),
        len(evaluation.effects),
    )

    if evaluation.cleared:
        return replace(state, history=(), commands=commands, next_id=command.entry_id + 1), []

    state = replace(
        state,
        history=(*state.history, command),
        commands=commands,
        is_root=evaluation.is_root,
        mode=evaluation.mode,
        next_id=command.entry_id + 1,
    )
    state, ids = _append(state, evaluation.outputs, max_lines=max_lines)
    effects = list(evaluation.effects)
    if evaluation.lookup_pending:
        request_id = ids[-1]
        state = replace(state, executing=True, pending_request_id=request_id)
        effects.append(
            LookupIp(
                request_id=request_id,
                url=context.config.ip_lookup_url,
                timeout=context.config.ip_lookup_timeout_seconds,
            )
        )
    return state, effects


def _finish_lookup(
    state: InterpreterState,
    request_id: int,
    kind: EntryKind,
    content: str,
    error_kind: ErrorKind | None,
    context: ShellContext,
) -> InterpreterState:
    if state.pending_request_id != request_id:
        logger.debug("Ignoring stale lookup result request_id=%s", request_id)
        return state
    result = HistoryEntry(entry_id=request_id, kind=kind, content=content, error_kind=error_kind)
    history = _replace_entry(state.history, request_id, result)
    if history is None:
        history = limit_history((*state.history, result), context.config.max_history_lines)
    return replace(state, history=history, executing=False, pending_request_id=None)


def reduce_shell(
    state: InterpreterState,
    action: ShellAction,
    context: ShellContext,
) -> tuple[InterpreterState, list[Effect]]:
    config = context.config

    if isinstance(action, SetInput):
        accepted_text = state.accepted_text if action.text.startswith(state.accepted_text) else ""
        return (
            replace(
                state,
                input=action.text,
                accepted_text=accepted_text,
                completion=CompletionState(),
                ghost=_ghost(action.text, state, context),
            ),
            [],
        )

    if isinstance(action, Complete):
        if state.mode == PromptMode.AWAITING_PASSWORD:
            return state, []
        result = complete(
            state.input,
            state.completion,
            now_ms=context.now_ms,
            debounce_ms=config.completion_debounce_ms,
            routes=config.routes,
            commands=COMMAND_NAMES,
        )
        accepted_text = result.text if result.accepted else state.accepted_text
        if not result.text.startswith(accepted_text):
            accepted_text = ""
        return (
            replace(
                state,
                input=result.text,
                completion=result.state,
                accepted_text=accepted_text,
                ghost=_ghost(result.text, state, context),
            ),
            [],
        )

    if isinstance(action, HistoryUp):
        if state.mode == PromptMode.AWAITING_PASSWORD or not state.commands:
            return replace(state, completion=CompletionState()), []
        if state.history_index == -1:
            index = len(state.commands) - 1
        else:
            index = max(0, state.history_index - 1)
        text = state.commands[index]
        return (
            replace(
                state,
                history_index=index,
                input=text,
                accepted_text="",
                completion=CompletionState(),
                ghost=_ghost(text, state, context),
            ),
            [],
        )

    if isinstance(action, HistoryDown):
        if state.mode == PromptMode.AWAITING_PASSWORD or state.history_index == -1:
            return replace(state, completion=CompletionState()), []
        index = state.history_index + 1
        if index >= len(state.commands):
            return _reset_input(state), []
        text = state.commands[index]
        return (
            replace(
                state,
                history_index=index,
                input=text,
                accepted_text="",
                completion=CompletionState(),
                ghost=_ghost(text, state, context),
            ),
            [],
        )

    if isinstance(action, Submit):
        return _submit(state, context)

    if isinstance(action, IpResolved):
        resolved = f"IP address: {action.ip}"
        resolved_state = _finish_lookup(
            state, action.request_id, EntryKind.OUTPUT, resolved, None, context
        )
        return resolved_state, []

    if isinstance(action, IpLookupFailed):
        failed = _finish_lookup(
            state, action.request_id, EntryKind.ERROR, action.message, action.kind, context
        )
        return failed, []

    if isinstance(action, HydrateShell):
        restored = action.history
        # The saved history usually opens with the same banner this shell already shows.
        if state.history and restored and _same_text(restored[0], state.history[0]):
            restored = restored[1:]
        history = limit_history((*state.history, *restored), config.max_history_lines)
        highest = max((entry.entry_id for entry in history), default=0)
        return (
            replace(
                state,
                history=_renumber(history) if _has_duplicate_ids(history) else history,
                commands=action.commands,
                is_root=action.is_root,
                next_id=max(state.next_id, highest + 1, len(history) + 1),
            ),
            [],
        )

    raise TypeError(f"Unsupported shell action: {action!r}")


def _same_text(left: HistoryEntry, right: HistoryEntry) -> bool:
    return left.kind == right.kind and left.content == right.content


def _has_duplicate_ids(history: Sequence[HistoryEntry]) -> bool:
    ids = [entry.entry_id for entry in history]
    return len(ids) != len(set(ids))


def _renumber(history: Sequence[HistoryEntry]) -> tuple[HistoryEntry, ...]:
    return tuple(replace(entry, entry_id=index) for index, entry in enumerate(history, start=1))


class Shell:
    """Owns one interpreter state; callers supply a fresh context per action."""

    def __init__(self, *, banner: str = "", state: InterpreterState | None = None) -> None:
        self._state = state or initial_shell_state(banner)

    @property
    def state(self) -> InterpreterState:
        return self._state

    def dispatch(self, action: ShellAction, context: ShellContext) -> list[Effect]:
        self._state, effects = reduce_shell(self._state, action, context)
        return effects

    def prompt(self, context: ShellContext) -> str:
        return prompt_for(self._state, context)
