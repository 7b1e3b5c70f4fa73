"""Command table for the terminal shell."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field

from folioterm.config import TerminalConfig, normalize_route
from folioterm.effects import (
    CloseWidget,
    Effect,
    Navigate,
    OpenUrl,
    PersistSession,
    Reload,
    SetTheme,
    Theme,
)
from folioterm.errors import ErrorKind
from folioterm.shell.models import Content, EntryKind, PromptMode

HELP_LINES = (
    "Available commands:",
    "  help        - List all supported commands",
    "  ls          - List available site routes",
    "  pwd         - Display the current route",
    "  cd <path>   - Navigate to the given route (e.g., cd /about)",
    "  cd ..       - Return to the parent route",
    "  uname       - Display browser information",
    "  echo <text> - Print the provided text",
    "  clear       - Clear the terminal output",
    "  whoami      - Look up your public IP address",
    "  reboot      - Reload the page and keep this session",
    "  github      - Open the GitHub profile",
    "  blog        - Go to the blog",
    "  theme       - Toggle light/dark theme",
    "  sudo su     - Become root",
    "  logout      - Leave root mode",
    "  exit        - Close the terminal",
)

CHECKING_LINE = "Checking…"
PASSWORD_PROMPT = "Password:"


@dataclass(frozen=True)
class HostInfo:
    platform: str
    user_agent: str
    language: str


@dataclass(frozen=True)
class ShellContext:
    """Read-only view of the host at evaluation time."""

    config: TerminalConfig
    current_path: str = "/"
    theme: Theme = "dark"
    host_info: HostInfo | None = None
    now_ms: float = 0.0


@dataclass
class Evaluation:
    """Collects what a command produced; the interpreter turns it into state."""

    context: ShellContext
    is_root: bool
    outputs: list[tuple[EntryKind, Content, ErrorKind | None]] = field(default_factory=list)
    effects: list[Effect] = field(default_factory=list)
    mode: PromptMode = PromptMode.NORMAL
    cleared: bool = False
    lookup_pending: bool = False
    raw_args: str = ""

    def print(self, content: Content) -> None:
        self.outputs.append((EntryKind.OUTPUT, content, None))

    def fail(self, kind: ErrorKind, message: str) -> None:
        self.outputs.append((EntryKind.ERROR, message, kind))

    def emit(self, effect: Effect) -> None:
        self.effects.append(effect)


CommandHandler = Callable[[Evaluation, list[str]], None]


def _help(ev: Evaluation, args: list[str]) -> None:
    ev.print(HELP_LINES)


def _ls(ev: Evaluation, args: list[str]) -> None:
    ev.print(tuple(f"  {route}" for route in ev.context.config.routes))


def _pwd(ev: Evaluation, args: list[str]) -> None:
    ev.print(ev.context.current_path or "/")


def parent_route(path: str) -> str:
    return path.rstrip("/").rsplit("/", 1)[0] or "/"


def _cd(ev: Evaluation, args: list[str]) -> None:
    routes = ev.context.config.routes
    if not args:
        ev.fail(ErrorKind.MISSING_ARGUMENT, "cd: missing argument")
        return

    if args[0] == "..":
        current = ev.context.current_path or "/"
        if current == "/":
            ev.fail(ErrorKind.UNKNOWN_ROUTE, "cd: already at root directory")
            return
        target = parent_route(current)
    else:
        target = normalize_route(args[0])

    if target not in routes:
        ev.fail(ErrorKind.UNKNOWN_ROUTE, f"cd: {target}: No such route")
        return
    ev.emit(Navigate(path=target))
    ev.print(f"Navigated to {target}")


def _uname(ev: Evaluation, args: list[str]) -> None:
    info = ev.context.host_info
    if info is None:
        ev.fail(ErrorKind.HOST_INFO_UNAVAILABLE, "uname: browser information not available")
        return
    ev.print(
        (
            f"Platform: {info.platform}",
            f"User Agent: {info.user_agent}",
            f"Language: {info.language}",
        )
    )


def _echo(ev: Evaluation, args: list[str]) -> None:
    ev.print(ev.raw_args)


def _clear(ev: Evaluation, args: list[str]) -> None:
    ev.cleared = True


def _whoami(ev: Evaluation, args: list[str]) -> None:
    ev.print(CHECKING_LINE)
    ev.lookup_pending = True


def _reboot(ev: Evaluation, args: list[str]) -> None:
    ev.emit(PersistSession(restore=True))
    ev.print("Rebooting…")
    ev.emit(Reload(delay=ev.context.config.reboot_delay_seconds))


def _github(ev: Evaluation, args: list[str]) -> None:
    url = ev.context.config.github_url
    ev.print(f"Opening {url} …")
    ev.emit(OpenUrl(url=url))


def _blog(ev: Evaluation, args: list[str]) -> None:
    route = ev.context.config.blog_route
    ev.emit(PersistSession(restore=True, reopen=True))
    ev.print(f"Opening blog at {route} …")
    ev.emit(Navigate(path=route))


def _theme(ev: Evaluation, args: list[str]) -> None:
    new_theme: Theme = "light" if ev.context.theme == "dark" else "dark"
    ev.emit(SetTheme(theme=new_theme))
    ev.print(f"Theme set to {new_theme}")


def _su(ev: Evaluation, args: list[str]) -> None:
    if ev.is_root:
        ev.print("You are already root.")
        return
    ev.mode = PromptMode.AWAITING_PASSWORD
    ev.print(PASSWORD_PROMPT)


def _sudo(ev: Evaluation, args: list[str]) -> None:
    if not args:
        ev.fail(ErrorKind.MISSING_ARGUMENT, "sudo: missing argument (try: sudo su)")
        return
    if args[0].lower() != "su":
        ev.fail(ErrorKind.UNKNOWN_COMMAND, f"sudo: {args[0]}: command not supported")
        return
    _su(ev, args[1:])


def _logout(ev: Evaluation, args: list[str]) -> None:
    if not ev.is_root:
        ev.print("logout: not root, already a normal user")
        return
    ev.is_root = False
    ev.print("Logged out of root.")


def _exit(ev: Evaluation, args: list[str]) -> None:
    ev.print("Closing terminal…")
    ev.emit(CloseWidget(delay=ev.context.config.exit_delay_seconds))


COMMANDS: dict[str, CommandHandler] = {
    "help": _help,
    "ls": _ls,
    "pwd": _pwd,
    "cd": _cd,
    "uname": _uname,
    "echo": _echo,
    "clear": _clear,
    "whoami": _whoami,
    "reboot": _reboot,
    "github": _github,
    "blog": _blog,
    "theme": _theme,
    "sudo": _sudo,
    "su": _su,
    "logout": _logout,
    "exit": _exit,
}

COMMAND_NAMES = tuple(sorted(COMMANDS))


def evaluate(line: str, *, is_root: bool, context: ShellContext) -> Evaluation:
    name, _, raw_args = line.strip().partition(" ")
    args = raw_args.split()
    evaluation = Evaluation(context=context, is_root=is_root, raw_args=raw_args)
    handler = COMMANDS.get(name.lower())
    if handler is None:
        evaluation.fail(
            ErrorKind.UNKNOWN_COMMAND,
            f'{name}: command not found. Type "help" for available commands.',
        )
        return evaluation
    handler(evaluation, args)
    return evaluation
