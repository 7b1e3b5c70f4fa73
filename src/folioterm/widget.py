"""Thin adapter turning host events into reducer actions and running their effects."""

from __future__ import annotations

import asyncio
import logging as py_logging
import time
from collections.abc import Callable, Coroutine

from folioterm.config import TerminalConfig
from folioterm.effects import (
    CloseWidget,
    Effect,
    LookupIp,
    Navigate,
    OpenUrl,
    PersistSession,
    Reload,
    SetTheme,
    describe,
)
from folioterm.errors import SURFACED_KINDS, ErrorKind, TerminalError
from folioterm.host import Host
from folioterm.logging import log_event
from folioterm.netinfo import AsyncIpLookup, fetch_public_ip_async
from folioterm.session import SessionBridge, build_session_snapshot
from folioterm.shell import (
    Complete,
    EntryKind,
    HistoryDown,
    HistoryEntry,
    HistoryUp,
    HydrateShell,
    IpLookupFailed,
    IpResolved,
    SetInput,
    Shell,
    ShellContext,
    Submit,
)
from folioterm.shell.interpreter import ShellAction
from folioterm.storage import KeyValueStore
from folioterm.window import (
    BeginDrag,
    BeginResize,
    Close,
    EndDrag,
    EndResize,
    FrameCoalescer,
    Hydrate,
    Minimize,
    Point,
    ResizeDirection,
    Show,
    ToggleMaximize,
    UpdateDrag,
    UpdateResize,
    Viewport,
    ViewportResized,
    WindowGeometry,
    WindowManager,
)
from folioterm.window.manager import WindowAction

logger = py_logging.getLogger(__name__)


def render_entry(entry: HistoryEntry, config: TerminalConfig) -> list[str]:
    if entry.kind == EntryKind.COMMAND:
        if entry.is_root:
            prompt = f"root@{config.host_name}:{entry.path}# "
        else:
            prompt = f"{config.user_name}@{config.host_name}:{entry.path}$ "
        return [f"{prompt}{entry.content}"]
    return list(entry.lines)


class TerminalWidget:
    def __init__(
        self,
        *,
        config: TerminalConfig,
        host: Host,
        store: KeyValueStore,
        viewport: Viewport,
        ip_lookup: AsyncIpLookup | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.config = config
        self.host = host
        self.window = WindowManager(viewport)
        self.shell = Shell(banner=config.welcome_banner)
        self.bridge = SessionBridge(store, key=config.session_key)
        self._ip_lookup = ip_lookup or self._default_lookup
        self._clock = clock
        self._frames: FrameCoalescer[Point] = FrameCoalescer(self._commit_pointer)
        self._tasks: set[asyncio.Task[None]] = set()

    async def _default_lookup(self, url: str) -> str:
        return await fetch_public_ip_async(url, timeout=self.config.ip_lookup_timeout_seconds)

    def mount(self) -> bool:
        snapshot = self.bridge.load()
        if snapshot is None:
            return False
        self._dispatch_shell(
            HydrateShell(
                history=snapshot.history,
                commands=snapshot.commands,
                is_root=snapshot.is_root,
            )
        )
        self._dispatch_window(Hydrate(geometry=snapshot.geometry))
        log_event(
            logger,
            "restore",
            f"entries={len(snapshot.history)} commands={len(snapshot.commands)} root={snapshot.is_root}",
        )
        return True

    def context(self) -> ShellContext:
        return ShellContext(
            config=self.config,
            current_path=self.host.current_path(),
            theme=self.host.theme(),
            host_info=self.host.host_info(),
            now_ms=self._clock() * 1000,
        )

    @property
    def history(self) -> tuple[HistoryEntry, ...]:
        return self.shell.state.history

    @property
    def input(self) -> str:
        return self.shell.state.input

    @property
    def ghost(self) -> str:
        return self.shell.state.ghost

    @property
    def geometry(self) -> WindowGeometry:
        return self.window.geometry

    @property
    def suggestions(self) -> tuple[str, ...]:
        return self.shell.state.completion.candidates

    @property
    def suggestion_index(self) -> int:
        return self.shell.state.completion.index

    def prompt(self) -> str:
        return self.shell.prompt(self.context())

    def render(self) -> list[str]:
        lines: list[str] = []
        for entry in self.history:
            lines.extend(render_entry(entry, self.config))
        return lines

    def render_suggestions(self) -> list[str]:
        """Candidate list shown under the prompt while Tab has several matches."""
        candidates = self.suggestions
        if len(candidates) < 2:
            return []
        marked = [
            f"[{candidate}]" if index == self.suggestion_index else candidate
            for index, candidate in enumerate(candidates)
        ]
        return [
            f"Multiple matches ({len(candidates)}):",
            "  ".join(marked),
            "Press Tab to cycle through matches",
        ]

    # Keyboard

    def type(self, text: str) -> None:
        self._dispatch_shell(SetInput(text))

    def complete(self) -> None:
        self._dispatch_shell(Complete())

    def history_up(self) -> None:
        self._dispatch_shell(HistoryUp())

    def history_down(self) -> None:
        self._dispatch_shell(HistoryDown())

    def submit(self, text: str | None = None) -> None:
        if text is not None:
            self._dispatch_shell(SetInput(text))
        self._dispatch_shell(Submit())

    # Chrome

    def pointer_down_title(self, x: float, y: float) -> None:
        self._dispatch_window(BeginDrag(Point(x, y)))

    def pointer_down_edge(self, direction: ResizeDirection | str, x: float, y: float) -> None:
        self._dispatch_window(BeginResize(ResizeDirection(direction), Point(x, y)))

    def pointer_move(self, x: float, y: float) -> None:
        if self.window.is_dragging or self.window.is_resizing:
            self._frames.request(Point(x, y))

    def frame(self) -> bool:
        return self._frames.flush()

    def pointer_up(self) -> None:
        self._frames.flush()
        if self.window.is_dragging:
            self._dispatch_window(EndDrag())
        if self.window.is_resizing:
            self._dispatch_window(EndResize())

    def maximize(self) -> None:
        self._dispatch_window(ToggleMaximize())

    def minimize(self) -> None:
        self._dispatch_window(Minimize())

    def show(self) -> None:
        self._dispatch_window(Show())

    def close(self) -> None:
        self._frames.cancel()
        self._dispatch_window(Close())
        self.host.close_widget()

    def viewport_resized(self, width: float, height: float) -> None:
        self._dispatch_window(ViewportResized(Viewport(width, height)))

    async def wait_idle(self) -> None:
        while self._tasks:
            await asyncio.gather(*list(self._tasks))

    # Internals

    def _commit_pointer(self, point: Point) -> None:
        if self.window.is_dragging:
            self._dispatch_window(UpdateDrag(point))
        elif self.window.is_resizing:
            self._dispatch_window(UpdateResize(point))

    def _dispatch_shell(self, action: ShellAction) -> None:
        self._run(self.shell.dispatch(action, self.context()))

    def _dispatch_window(self, action: WindowAction) -> None:
        self._run(self.window.dispatch(action))

    def persist(self, *, restore: bool = True, reopen: bool = False) -> bool:
        snapshot = build_session_snapshot(
            shell=self.shell.state,
            geometry=self.window.geometry,
            max_lines=self.config.max_history_lines,
            restore=restore,
            reopen=reopen,
        )
        return self.bridge.save(snapshot)

    def _run(self, effects: list[Effect]) -> None:
        for effect in effects:
            log_event(logger, "effect", describe(effect))
            if isinstance(effect, PersistSession):
                self.persist(restore=effect.restore, reopen=effect.reopen)
            elif isinstance(effect, Navigate):
                self._later(effect.delay, lambda path=effect.path: self.host.navigate(path))
            elif isinstance(effect, OpenUrl):
                self.host.open_url(effect.url)
            elif isinstance(effect, SetTheme):
                self.host.set_theme(effect.theme)
            elif isinstance(effect, Reload):
                self._later(effect.delay, self.host.reload)
            elif isinstance(effect, CloseWidget):
                self._later(effect.delay, self.close)
            elif isinstance(effect, LookupIp):
                self._start_lookup(effect)
            else:
                raise TypeError(f"Unsupported effect: {effect!r}")

    def _spawn(self, coro: Coroutine[object, object, None]) -> bool:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            return False
        task = loop.create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return True

    def _later(self, delay: float, callback: Callable[[], object]) -> None:
        if delay <= 0:
            callback()
            return

        async def fire() -> None:
            await asyncio.sleep(delay)
            callback()

        coro = fire()
        if not self._spawn(coro):
            coro.close()
            callback()

    def _start_lookup(self, effect: LookupIp) -> None:
        coro = self._lookup(effect)
        if not self._spawn(coro):
            coro.close()
            logger.warning("IP lookup needs a running event loop")
            self._dispatch_shell(
                IpLookupFailed(
                    request_id=effect.request_id,
                    kind=ErrorKind.NETWORK_FAILURE,
                    message="whoami: lookup unavailable",
                )
            )

    async def _lookup(self, effect: LookupIp) -> None:
        action: ShellAction
        try:
            ip = await asyncio.wait_for(self._ip_lookup(effect.url), timeout=effect.timeout)
        except asyncio.TimeoutError:
            logger.warning("IP lookup timed out after %ss", effect.timeout)
            action = IpLookupFailed(
                request_id=effect.request_id,
                kind=ErrorKind.NETWORK_TIMEOUT,
                message=f"whoami: request timed out after {effect.timeout:g}s",
            )
        except TerminalError as exc:
            logger.warning("IP lookup failed: %s", exc)
            action = IpLookupFailed(
                request_id=effect.request_id,
                kind=exc.kind if exc.kind in SURFACED_KINDS else ErrorKind.NETWORK_FAILURE,
                message=f"whoami: {exc.message}",
            )
        except Exception as exc:
            logger.warning("IP lookup failed unexpectedly: %s", exc)
            action = IpLookupFailed(
                request_id=effect.request_id,
                kind=ErrorKind.NETWORK_FAILURE,
                message="whoami: unable to determine IP address",
            )
        else:
            action = IpResolved(request_id=effect.request_id, ip=ip)
        self._dispatch_shell(action)
