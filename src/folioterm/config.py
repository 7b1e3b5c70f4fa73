"""XDG config loading for the terminal widget."""

from __future__ import annotations

import os
import sys
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, field_validator

if sys.version_info >= (3, 11):
    import tomllib
else:  # pragma: no cover
    import tomli as tomllib

DEFAULT_CONFIG_PATH = Path("~/.config/folioterm/config.toml").expanduser()
DEFAULT_STATE_DIR = "~/.config/folioterm/state"
DEFAULT_ROUTES = ["/", "/about", "/achievements", "/blog"]
DEFAULT_BLOG_ROUTE = "/blog"
DEFAULT_GITHUB_URL = "https://github.com"
DEFAULT_ROOT_PASSWORD = "toor"
DEFAULT_WELCOME_BANNER = 'Welcome to the terminal. Type "help" to see available commands.'
DEFAULT_IP_LOOKUP_URL = "https://api.ipify.org?format=json"
DEFAULT_IP_LOOKUP_TIMEOUT_SECONDS = 10.0
DEFAULT_COMPLETION_DEBOUNCE_MS = 500
DEFAULT_MAX_HISTORY_LINES = 100
DEFAULT_REBOOT_DELAY_SECONDS = 1.0
DEFAULT_EXIT_DELAY_SECONDS = 0.5
DEFAULT_SESSION_KEY = "terminal-session"
ROOT_PASSWORD_ENV = "FOLIOTERM_ROOT_PASSWORD"


def normalize_route(path: str) -> str:
    value = path.strip()
    if not value.startswith("/"):
        value = f"/{value}"
    return value


class TerminalConfig(BaseModel):
    model_config = ConfigDict(validate_assignment=True)

    routes: list[str] = Field(default_factory=lambda: list(DEFAULT_ROUTES))
    blog_route: str = DEFAULT_BLOG_ROUTE
    github_url: str = DEFAULT_GITHUB_URL
    root_password: str = DEFAULT_ROOT_PASSWORD
    user_name: str = "guest"
    host_name: str = "portfolio"
    welcome_banner: str = DEFAULT_WELCOME_BANNER
    max_history_lines: int = Field(default=DEFAULT_MAX_HISTORY_LINES, ge=10, le=10_000)
    completion_debounce_ms: int = Field(default=DEFAULT_COMPLETION_DEBOUNCE_MS, ge=0, le=10_000)
    ip_lookup_url: str = DEFAULT_IP_LOOKUP_URL
    ip_lookup_timeout_seconds: float = Field(default=DEFAULT_IP_LOOKUP_TIMEOUT_SECONDS, gt=0, le=120)
    reboot_delay_seconds: float = Field(default=DEFAULT_REBOOT_DELAY_SECONDS, ge=0, le=30)
    exit_delay_seconds: float = Field(default=DEFAULT_EXIT_DELAY_SECONDS, ge=0, le=30)
    session_key: str = DEFAULT_SESSION_KEY
    state_dir: str = DEFAULT_STATE_DIR

    @field_validator("routes")
    @classmethod
    def _validate_routes(cls, value: list[str]) -> list[str]:
        normalized: list[str] = []
        for item in value:
            route = normalize_route(item)
            if route not in normalized:
                normalized.append(route)
        if not normalized:
            raise ValueError("At least one route is required")
        return sorted(normalized)

    @field_validator("blog_route")
    @classmethod
    def _validate_blog_route(cls, value: str) -> str:
        return normalize_route(value)

    @field_validator("ip_lookup_url", "github_url")
    @classmethod
    def _validate_url(cls, value: str) -> str:
        if not value.startswith(("https://", "http://")):
            raise ValueError(f"Invalid URL: {value}")
        return value


def get_config_path(path: str | Path | None = None) -> Path:
    if path is None:
        return DEFAULT_CONFIG_PATH
    return Path(path).expanduser()


def _string(raw: dict[str, object], key: str, fallback: str) -> str:
    value = raw.get(key, fallback)
    if isinstance(value, str) and value.strip():
        return value
    return fallback


def _number(raw: dict[str, object], key: str, fallback: float, low: float, high: float) -> float:
    value = raw.get(key, fallback)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return fallback
    if low <= value <= high:
        return float(value)
    return fallback


def _sanitize(raw: dict[str, object]) -> TerminalConfig:
    cfg = TerminalConfig()

    routes = raw.get("routes")
    if isinstance(routes, list):
        valid_routes = [item for item in routes if isinstance(item, str) and item.strip()]
        if valid_routes:
            cfg.routes = valid_routes

    cfg.blog_route = _string(raw, "blog_route", cfg.blog_route)
    for url_key in ("github_url", "ip_lookup_url"):
        candidate = _string(raw, url_key, getattr(cfg, url_key))
        if candidate.startswith(("https://", "http://")):
            setattr(cfg, url_key, candidate)

    cfg.root_password = _string(raw, "root_password", cfg.root_password)
    env_password = os.getenv(ROOT_PASSWORD_ENV, "").strip()
    if env_password:
        cfg.root_password = env_password

    cfg.user_name = _string(raw, "user_name", cfg.user_name)
    cfg.host_name = _string(raw, "host_name", cfg.host_name)
    cfg.welcome_banner = _string(raw, "welcome_banner", cfg.welcome_banner)
    cfg.session_key = _string(raw, "session_key", cfg.session_key)
    cfg.state_dir = _string(raw, "state_dir", cfg.state_dir)

    cfg.max_history_lines = int(_number(raw, "max_history_lines", cfg.max_history_lines, 10, 10_000))
    cfg.completion_debounce_ms = int(
        _number(raw, "completion_debounce_ms", cfg.completion_debounce_ms, 0, 10_000)
    )
    timeout = _number(raw, "ip_lookup_timeout_seconds", cfg.ip_lookup_timeout_seconds, 0, 120)
    if timeout > 0:
        cfg.ip_lookup_timeout_seconds = timeout
    cfg.reboot_delay_seconds = _number(raw, "reboot_delay_seconds", cfg.reboot_delay_seconds, 0, 30)
    cfg.exit_delay_seconds = _number(raw, "exit_delay_seconds", cfg.exit_delay_seconds, 0, 30)
    return cfg


def load_config(path: str | Path | None = None) -> TerminalConfig:
    resolved = get_config_path(path)
    if not resolved.exists():
        return _sanitize({})
    try:
        with resolved.open("rb") as handle:
            raw = tomllib.load(handle)
    except (tomllib.TOMLDecodeError, OSError):
        return _sanitize({})
    if not isinstance(raw, dict):
        return _sanitize({})
    return _sanitize(raw)
