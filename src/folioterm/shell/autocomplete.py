"""
Tab completion for the terminal widget.

Two grammars are recognised: ``cd <partial-path>`` completes against the
known routes, and a bare token completes against the known command names.
Pressing Tab again within the debounce window, while the buffer still shows
what the last completion offered, cycles through the ambiguous candidates.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, replace

from folioterm.config import normalize_route
from folioterm.shell.models import CompletionState


@dataclass(frozen=True)
class CompletionTarget:
    """Where a completion applies: ``head`` is kept verbatim, ``partial`` is replaced."""

    head: str
    partial: str
    candidates: tuple[str, ...]

    def render(self, candidate: str) -> str:
        return f"{self.head}{candidate}"


@dataclass(frozen=True)
class CompletionResult:
    text: str
    accepted: bool
    state: CompletionState


def common_prefix(items: Sequence[str]) -> str:
    if not items:
        return ""
    prefix = items[0]
    for item in items[1:]:
        while not item.startswith(prefix):
            prefix = prefix[:-1]
            if not prefix:
                return ""
    return prefix


def find_target(
    text: str,
    *,
    routes: Sequence[str],
    commands: Sequence[str],
) -> CompletionTarget | None:
    stripped = text.lstrip()
    if stripped[:3].lower() == "cd ":
        partial = stripped[3:].strip()
        wanted = normalize_route(partial)
        matches = tuple(sorted(route for route in routes if route.startswith(wanted)))
        return CompletionTarget(head="cd ", partial=partial, candidates=matches)

    if not stripped or any(char.isspace() for char in stripped):
        return None
    matches = tuple(sorted(name for name in commands if name.startswith(stripped)))
    return CompletionTarget(head="", partial=stripped, candidates=matches)


def _cycle(
    text: str,
    previous: CompletionState,
    *,
    now_ms: float,
    debounce_ms: float,
) -> CompletionResult | None:
    """Advance through the last ambiguous candidate set while the buffer still shows it."""
    if not previous.candidates or previous.last_at_ms is None:
        return None
    if now_ms - previous.last_at_ms >= debounce_ms:
        return None
    if previous.index >= 0:
        shown = previous.candidates[previous.index]
    else:
        shown = common_prefix(previous.candidates)
    if text != f"{previous.head}{shown}":
        return None
    index = (previous.index + 1) % len(previous.candidates)
    return CompletionResult(
        text=f"{previous.head}{previous.candidates[index]}",
        accepted=True,
        state=replace(previous, index=index, last_at_ms=now_ms),
    )


def complete(
    text: str,
    previous: CompletionState,
    *,
    now_ms: float,
    debounce_ms: float,
    routes: Sequence[str],
    commands: Sequence[str],
) -> CompletionResult:
    cycled = _cycle(text, previous, now_ms=now_ms, debounce_ms=debounce_ms)
    if cycled is not None:
        return cycled

    target = find_target(text, routes=routes, commands=commands)
    if target is None or not target.candidates:
        return CompletionResult(text=text, accepted=False, state=CompletionState())

    candidates = target.candidates
    if len(candidates) == 1:
        return CompletionResult(
            text=target.render(candidates[0]),
            accepted=True,
            state=CompletionState(),
        )

    prefix = common_prefix(candidates)
    if len(prefix) > len(target.partial):
        return CompletionResult(
            text=target.render(prefix),
            accepted=False,
            state=CompletionState(
                candidates=candidates,
                head=target.head,
                index=-1,
                last_at_ms=now_ms,
            ),
        )
    return CompletionResult(
        text=target.render(candidates[0]),
        accepted=False,
        state=CompletionState(candidates=candidates, head=target.head, index=0, last_at_ms=now_ms),
    )


def inline_suggestion(
    text: str,
    *,
    routes: Sequence[str],
    commands: Sequence[str],
) -> str:
    """Return the ghost remainder shown after the caret, or an empty string."""
    target = find_target(text, routes=routes, commands=commands)
    if target is None or not target.candidates:
        return ""
    if len(target.candidates) == 1:
        suggestion = target.render(target.candidates[0])
    else:
        prefix = common_prefix(target.candidates)
        if len(prefix) <= len(target.partial):
            return ""
        suggestion = target.render(prefix)
    if len(suggestion) <= len(text) or not suggestion.startswith(text):
        return ""
    return suggestion[len(text) :]
