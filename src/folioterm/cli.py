"""Public CLI contract and entrypoint."""

from __future__ import annotations

import argparse
import asyncio
import getpass
import logging as py_logging
import os
import platform
import sys
import webbrowser
from collections.abc import Callable, Sequence
from pathlib import Path
from typing import TextIO

from . import __version__
from .config import TerminalConfig, load_config, normalize_route
from .errors import ExitCode, TerminalError, user_facing_error
from .host import HeadlessHost
from .logging import configure_logging, default_log_path, log_event
from .netinfo import AsyncIpLookup
from .shell import EntryKind, HistoryEntry, HostInfo, PromptMode
from .storage import FileStore, KeyValueStore
from .widget import TerminalWidget, render_entry
from .window import Viewport

_VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARN", "ERROR")
DEFAULT_VIEWPORT = Viewport(1280, 800)
_CLEAR_SCREEN = "\x1b[H\x1b[2J"

InputFunc = Callable[[str], str]


def _log_level_type(value: str) -> str:
    normalized = value.upper()
    if normalized == "WARNING":
        normalized = "WARN"
    if normalized not in _VALID_LOG_LEVELS:
        accepted = ", ".join(_VALID_LOG_LEVELS)
        raise argparse.ArgumentTypeError(f"--log-level must be one of: {accepted}")
    return normalized


def _viewport_type(value: str) -> Viewport:
    width, sep, height = value.lower().partition("x")
    if not sep:
        raise argparse.ArgumentTypeError("--viewport must look like WIDTHxHEIGHT")
    try:
        parsed = Viewport(float(width), float(height))
    except ValueError as exc:
        raise argparse.ArgumentTypeError("--viewport must look like WIDTHxHEIGHT") from exc
    if parsed.width <= 0 or parsed.height <= 0:
        raise argparse.ArgumentTypeError("--viewport dimensions must be positive")
    return parsed


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="folioterm")
    parser.add_argument("--config", type=Path, default=None)
    parser.add_argument("--state-dir", type=Path, default=None)
    parser.add_argument("--path", default="/", help="Route the terminal starts on")
    parser.add_argument("--viewport", type=_viewport_type, default=DEFAULT_VIEWPORT)
    parser.add_argument(
        "--fresh",
        action="store_true",
        help="Discard any saved terminal session before starting",
    )
    parser.add_argument("--log-level", type=_log_level_type, default="INFO")
    parser.add_argument("--log-file", type=Path, default=None)
    return parser


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = build_parser()
    return parser.parse_args(argv)


def local_host_info() -> HostInfo:
    language = os.environ.get("LANG", "").split(".")[0].replace("_", "-") or "en-US"
    return HostInfo(
        platform=platform.system() or "unknown",
        user_agent=f"folioterm/{__version__} Python/{platform.python_version()}",
        language=language,
    )


def resolve_start_path(config: TerminalConfig, path: str) -> str:
    route = normalize_route(path)
    if route not in config.routes:
        raise TerminalError(
            f"Unknown start route: {route}",
            code=ExitCode.VALIDATION_ERROR,
            hint=f"Use one of: {', '.join(config.routes)}",
        )
    return route


class _Transcript:
    """Prints history entries the terminal has not shown yet."""

    def __init__(self, widget: TerminalWidget, output: TextIO) -> None:
        self.widget = widget
        self.output = output
        self._shown: dict[int, HistoryEntry] = {}

    def flush(self, *, include_commands: bool) -> None:
        history = self.widget.history
        if self._shown and not any(entry.entry_id in self._shown for entry in history):
            self._shown.clear()
            # Piped output gets a form feed instead of escape codes.
            self.output.write(_CLEAR_SCREEN if self.output.isatty() else "\f")
        for entry in history:
            if self._shown.get(entry.entry_id) == entry:
                continue
            self._shown[entry.entry_id] = entry
            # Typed lines are already on screen next to the prompt.
            if entry.kind == EntryKind.COMMAND and not include_commands:
                continue
            for line in render_entry(entry, self.widget.config):
                print(line, file=self.output)
        self.output.flush()


class _TabCompleter:
    """readline completer that routes Tab through the widget's completion."""

    def __init__(self, widget: TerminalWidget) -> None:
        self.widget = widget

    def __call__(self, text: str, state: int) -> str | None:
        if state > 0:
            return None
        # Retyping the same buffer would reset the cycling state.
        if text != self.widget.input:
            self.widget.type(text)
        self.widget.complete()
        return self.widget.input


def install_tab_completion(completer: _TabCompleter) -> bool:
    try:
        import readline
    except ImportError:
        return False
    readline.set_completer_delims("")
    readline.set_completer(completer)
    if "libedit" in (readline.__doc__ or ""):
        readline.parse_and_bind("bind ^I rl_complete")
    else:
        readline.parse_and_bind("tab: complete")
    return True


async def run_repl(
    *,
    config: TerminalConfig,
    store: KeyValueStore,
    host: HeadlessHost,
    viewport: Viewport,
    output: TextIO,
    input_func: InputFunc,
    secret_input_func: InputFunc,
    ip_lookup: AsyncIpLookup | None = None,
    tab_completion: bool = False,
) -> int:
    logger = py_logging.getLogger("folioterm")
    while True:
        host.reload_requested = False
        widget = TerminalWidget(
            config=config,
            host=host,
            store=store,
            viewport=viewport,
            ip_lookup=ip_lookup,
        )
        restored = widget.mount()
        if widget.bridge.pending_reopen():
            widget.bridge.clear_reopen()
            host.open_widget()
        log_event(
            logger,
            "mount",
            f"restored={restored} path={host.current_path()}",
            level=py_logging.DEBUG,
        )

        if tab_completion and not install_tab_completion(_TabCompleter(widget)):
            logger.debug("readline unavailable, Tab completion disabled")
            tab_completion = False
        transcript = _Transcript(widget, output)
        transcript.flush(include_commands=True)
        while host.is_open and not host.reload_requested:
            reader = input_func
            if widget.shell.state.mode == PromptMode.AWAITING_PASSWORD:
                reader = secret_input_func
            try:
                line = await asyncio.to_thread(reader, widget.prompt())
            except EOFError:
                print(file=output)
                return int(ExitCode.SUCCESS)
            widget.submit(line)
            await widget.wait_idle()
            transcript.flush(include_commands=False)
            # The blog lives on its own page, so leaving for it remounts the terminal.
            if widget.bridge.pending_reopen():
                host.reload_requested = True

        if not host.reload_requested:
            logger.debug("Terminal closed path=%s", host.current_path())
            return int(ExitCode.SUCCESS)
        log_event(logger, "reload", f"path={host.current_path()}")


def main(
    argv: Sequence[str] | None = None,
    *,
    input_func: InputFunc | None = None,
    secret_input_func: InputFunc | None = None,
    output: TextIO | None = None,
    ip_lookup: AsyncIpLookup | None = None,
    url_opener: Callable[[str], object] | None = None,
) -> int:
    log_path = default_log_path()
    logger = configure_logging(log_file=log_path)
    parser = build_parser()
    try:
        namespace = parser.parse_args(argv)
    except SystemExit as exc:
        if exc.code not in (None, 0):
            logger.warning("Argument parsing failed with exit code %s", exc.code)
        return int(exc.code or 0)

    if namespace.log_file is not None:
        log_path = namespace.log_file.expanduser()
    logger = configure_logging(level=namespace.log_level, log_file=log_path)

    try:
        config = load_config(namespace.config)
        if namespace.state_dir is not None:
            config.state_dir = str(namespace.state_dir)
        store = FileStore(config.state_dir)
        if namespace.fresh:
            logger.debug("Discarding saved session key=%s", config.session_key)
            store.remove(config.session_key)
        host = HeadlessHost(
            store,
            path=resolve_start_path(config, namespace.path),
            info=local_host_info(),
            url_opener=url_opener or webbrowser.open,
        )
        logger.debug(
            "Starting terminal viewport=%sx%s",
            namespace.viewport.width,
            namespace.viewport.height,
        )
        return asyncio.run(
            run_repl(
                config=config,
                store=store,
                host=host,
                viewport=namespace.viewport,
                output=output or sys.stdout,
                input_func=input_func or input,
                secret_input_func=secret_input_func or getpass.getpass,
                ip_lookup=ip_lookup,
                tab_completion=input_func is None and sys.stdin.isatty(),
            )
        )
    except KeyboardInterrupt:
        logger.debug("Interrupted by user")
        return int(ExitCode.SUCCESS)
    except TerminalError as exc:
        logger.error(
            "Handled TerminalError (code=%s): %s",
            int(exc.code),
            exc.message,
            exc_info=logger.isEnabledFor(py_logging.DEBUG),
        )
        print(user_facing_error(exc.message, hint=exc.hint), file=sys.stderr)
        return int(exc.code)
    except Exception:
        logger.exception("Unhandled exception in CLI entrypoint")
        hint = f"Inspect logs: {log_path}"
        print(user_facing_error("Unexpected runtime failure", hint=hint), file=sys.stderr)
        return int(ExitCode.RUNTIME_ERROR)


def run(argv: Sequence[str] | None = None) -> int:
    return main(argv)
