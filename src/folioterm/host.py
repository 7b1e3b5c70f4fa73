"""Host capabilities consumed by the widget, plus an in-process implementation."""

from __future__ import annotations

import logging as py_logging
from collections.abc import Callable
from typing import Protocol

from folioterm.effects import Theme
from folioterm.shell.commands import HostInfo
from folioterm.storage import KeyValueStore

logger = py_logging.getLogger(__name__)

THEME_KEY = "theme"


class Host(Protocol):
    def navigate(self, path: str) -> None: ...

    def current_path(self) -> str: ...

    def theme(self) -> Theme: ...

    def set_theme(self, theme: Theme) -> None: ...

    def open_url(self, url: str) -> None: ...

    def close_widget(self) -> None: ...

    def reload(self) -> None: ...

    def host_info(self) -> HostInfo | None: ...


class HeadlessHost:
    """Router, theme and widget toggles kept in memory; the theme survives in the store."""

    def __init__(
        self,
        store: KeyValueStore,
        *,
        path: str = "/",
        info: HostInfo | None = None,
        url_opener: Callable[[str], object] | None = None,
    ) -> None:
        self.store = store
        self.path = path
        self.info = info
        self.is_open = True
        self.reload_requested = False
        self.opened_urls: list[str] = []
        self.visited: list[str] = [path]
        self._url_opener = url_opener

    def navigate(self, path: str) -> None:
        self.path = path
        self.visited.append(path)

    def current_path(self) -> str:
        return self.path

    def theme(self) -> Theme:
        try:
            stored = self.store.get(THEME_KEY)
        except Exception as exc:
            logger.debug("Theme preference unavailable: %s", exc)
            return "dark"
        return "light" if stored == "light" else "dark"

    def set_theme(self, theme: Theme) -> None:
        try:
            self.store.set(THEME_KEY, theme)
        except Exception as exc:
            logger.warning("Theme preference not saved: %s", exc)

    def open_url(self, url: str) -> None:
        self.opened_urls.append(url)
        if self._url_opener is not None:
            self._url_opener(url)

    def open_widget(self) -> None:
        self.is_open = True

    def close_widget(self) -> None:
        self.is_open = False

    def reload(self) -> None:
        self.reload_requested = True

    def host_info(self) -> HostInfo | None:
        return self.info
