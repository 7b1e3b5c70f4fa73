"""Window chrome reducer: drag, resize, maximize and viewport clamping."""

from __future__ import annotations

import logging as py_logging
from dataclasses import dataclass, replace
from typing import Union

from folioterm.effects import Effect, PersistSession
from folioterm.window.models import (
    MIN_VISIBLE_AREA,
    DragSession,
    Point,
    ResizeDirection,
    ResizeSession,
    Viewport,
    WindowGeometry,
    WindowState,
    default_geometry,
)

logger = py_logging.getLogger(__name__)


@dataclass(frozen=True)
class BeginDrag:
    pointer: Point


@dataclass(frozen=True)
class UpdateDrag:
    pointer: Point


@dataclass(frozen=True)
class EndDrag:
    pass


@dataclass(frozen=True)
class BeginResize:
    direction: ResizeDirection
    pointer: Point


@dataclass(frozen=True)
class UpdateResize:
    pointer: Point


@dataclass(frozen=True)
class EndResize:
    pass


@dataclass(frozen=True)
class Maximize:
    pass


@dataclass(frozen=True)
class Restore:
    pass


@dataclass(frozen=True)
class ToggleMaximize:
    pass


@dataclass(frozen=True)
class Minimize:
    pass


@dataclass(frozen=True)
class Show:
    pass


@dataclass(frozen=True)
class ViewportResized:
    viewport: Viewport


@dataclass(frozen=True)
class Close:
    pass


@dataclass(frozen=True)
class Hydrate:
    geometry: WindowGeometry


WindowAction = Union[
    BeginDrag,
    UpdateDrag,
    EndDrag,
    BeginResize,
    UpdateResize,
    EndResize,
    Maximize,
    Restore,
    ToggleMaximize,
    Minimize,
    Show,
    ViewportResized,
    Close,
    Hydrate,
]


def required_visible(size: float, viewport_size: float) -> float:
    return min(MIN_VISIBLE_AREA, size, viewport_size)


def clamp_position(geometry: WindowGeometry, viewport: Viewport) -> WindowGeometry:
    """Keep at least the minimum visible area on screen; the title bar never leaves the top."""
    need_x = required_visible(geometry.width, viewport.width)
    need_y = required_visible(geometry.height, viewport.height)
    x = min(max(geometry.x, need_x - geometry.width), viewport.width - need_x)
    y = min(max(geometry.y, 0.0), viewport.height - need_y)
    return replace(geometry, x=x, y=y)


def clamp_geometry(geometry: WindowGeometry, viewport: Viewport) -> WindowGeometry:
    if geometry.is_maximized:
        return replace(geometry, x=0.0, y=0.0, width=viewport.width, height=viewport.height)
    width = max(viewport.min_width, min(geometry.width, viewport.width))
    height = max(viewport.min_height, min(geometry.height, viewport.height))
    return clamp_position(replace(geometry, width=width, height=height), viewport)


def resize_geometry(
    origin: WindowGeometry,
    direction: ResizeDirection,
    dx: float,
    dy: float,
    viewport: Viewport,
) -> WindowGeometry:
    min_width = viewport.min_width
    min_height = viewport.min_height
    x, y, width, height = origin.x, origin.y, origin.width, origin.height

    if direction.moves_right:
        width = max(min_width, min(origin.width + dx, viewport.width - origin.x))
    elif direction.moves_left:
        right = origin.x + origin.width
        width = max(min_width, min(origin.width - dx, right))
        x = right - width

    if direction.moves_bottom:
        height = max(min_height, min(origin.height + dy, viewport.height - origin.y))
    elif direction.moves_top:
        bottom = origin.y + origin.height
        height = max(min_height, min(origin.height - dy, bottom))
        y = bottom - height

    resized = replace(origin, x=x, y=y, width=width, height=height)
    return clamp_position(resized, viewport)


def initial_state(viewport: Viewport) -> WindowState:
    return WindowState(geometry=default_geometry(viewport), viewport=viewport)


def reduce_window(state: WindowState, action: WindowAction) -> tuple[WindowState, list[Effect]]:
    geometry = state.geometry
    viewport = state.viewport

    if isinstance(action, BeginDrag):
        if not state.interactive:
            logger.debug("Drag rejected while maximized or minimized")
            return state, []
        offset = Point(action.pointer.x - geometry.x, action.pointer.y - geometry.y)
        return replace(state, drag=DragSession(offset=offset), resize=None), []

    if isinstance(action, UpdateDrag):
        if state.drag is None or not state.interactive:
            return state, []
        moved = replace(
            geometry,
            x=action.pointer.x - state.drag.offset.x,
            y=action.pointer.y - state.drag.offset.y,
        )
        return replace(state, geometry=clamp_position(moved, viewport)), []

    if isinstance(action, EndDrag):
        return replace(state, drag=None), []

    if isinstance(action, BeginResize):
        if not state.interactive:
            logger.debug("Resize rejected while maximized or minimized")
            return state, []
        session = ResizeSession(direction=action.direction, pointer=action.pointer, origin=geometry)
        return replace(state, resize=session, drag=None), []

    if isinstance(action, UpdateResize):
        session = state.resize
        if session is None or not state.interactive:
            return state, []
        resized = resize_geometry(
            session.origin,
            session.direction,
            action.pointer.x - session.pointer.x,
            action.pointer.y - session.pointer.y,
            viewport,
        )
        return replace(state, geometry=resized), []

    if isinstance(action, EndResize):
        return replace(state, resize=None), []

    if isinstance(action, ToggleMaximize):
        return reduce_window(state, Restore() if geometry.is_maximized else Maximize())

    if isinstance(action, Maximize):
        if geometry.is_maximized:
            return state, []
        full = replace(
            geometry,
            x=0.0,
            y=0.0,
            width=viewport.width,
            height=viewport.height,
            is_maximized=True,
        )
        return replace(state, geometry=full, saved=geometry, drag=None, resize=None), []

    if isinstance(action, Restore):
        if not geometry.is_maximized:
            return state, []
        base = state.saved or default_geometry(viewport)
        restored = replace(base, is_maximized=False, is_minimized=geometry.is_minimized)
        return replace(state, geometry=clamp_geometry(restored, viewport), saved=None), []

    if isinstance(action, Minimize):
        if geometry.is_minimized:
            return state, []
        hidden = replace(geometry, is_minimized=True)
        return replace(state, geometry=hidden, drag=None, resize=None), [PersistSession(restore=True)]

    if isinstance(action, Show):
        return replace(state, geometry=replace(geometry, is_minimized=False)), []

    if isinstance(action, ViewportResized):
        resized_viewport = action.viewport
        return (
            replace(
                state,
                viewport=resized_viewport,
                geometry=clamp_geometry(geometry, resized_viewport),
            ),
            [],
        )

    if isinstance(action, Close):
        return WindowState(geometry=default_geometry(viewport), viewport=viewport), []

    if isinstance(action, Hydrate):
        hydrated = replace(action.geometry, is_minimized=False)
        saved = None
        if hydrated.is_maximized:
            saved = default_geometry(viewport)
        return replace(state, geometry=clamp_geometry(hydrated, viewport), saved=saved), []

    raise TypeError(f"Unsupported window action: {action!r}")


class WindowManager:
    """Owns one widget's window state and applies actions to it."""

    def __init__(self, viewport: Viewport, *, state: WindowState | None = None) -> None:
        self._state = state or initial_state(viewport)

    @property
    def state(self) -> WindowState:
        return self._state

    @property
    def geometry(self) -> WindowGeometry:
        return self._state.geometry

    @property
    def is_dragging(self) -> bool:
        return self._state.drag is not None

    @property
    def is_resizing(self) -> bool:
        return self._state.resize is not None

    def dispatch(self, action: WindowAction) -> list[Effect]:
        self._state, effects = reduce_window(self._state, action)
        return effects
