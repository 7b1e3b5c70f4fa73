"""Window chrome domain models."""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum

from typing_extensions import TypedDict

MIN_WIDTH = 600
MIN_HEIGHT = 400
MIN_WIDTH_MOBILE = 320
MIN_HEIGHT_MOBILE = 300
MOBILE_BREAKPOINT = 768
INITIAL_WIDTH = 800
INITIAL_HEIGHT = 500
MOBILE_MARGIN = 8
MIN_VISIBLE_AREA = 100


class ResizeDirection(str, Enum):
    TOP = "top"
    RIGHT = "right"
    BOTTOM = "bottom"
    LEFT = "left"
    TOP_LEFT = "top-left"
    TOP_RIGHT = "top-right"
    BOTTOM_LEFT = "bottom-left"
    BOTTOM_RIGHT = "bottom-right"

    @property
    def moves_left(self) -> bool:
        return self in {
            ResizeDirection.LEFT,
            ResizeDirection.TOP_LEFT,
            ResizeDirection.BOTTOM_LEFT,
        }

    @property
    def moves_right(self) -> bool:
        return self in {
            ResizeDirection.RIGHT,
            ResizeDirection.TOP_RIGHT,
            ResizeDirection.BOTTOM_RIGHT,
        }

    @property
    def moves_top(self) -> bool:
        return self in {
            ResizeDirection.TOP,
            ResizeDirection.TOP_LEFT,
            ResizeDirection.TOP_RIGHT,
        }

    @property
    def moves_bottom(self) -> bool:
        return self in {
            ResizeDirection.BOTTOM,
            ResizeDirection.BOTTOM_LEFT,
            ResizeDirection.BOTTOM_RIGHT,
        }


class GeometryPayload(TypedDict):
    x: float
    y: float
    width: float
    height: float
    is_maximized: bool
    is_minimized: bool


@dataclass(frozen=True)
class Point:
    x: float
    y: float


@dataclass(frozen=True)
class Viewport:
    width: float
    height: float

    @property
    def is_narrow(self) -> bool:
        return self.width < MOBILE_BREAKPOINT

    @property
    def min_width(self) -> float:
        return MIN_WIDTH_MOBILE if self.is_narrow else MIN_WIDTH

    @property
    def min_height(self) -> float:
        return MIN_HEIGHT_MOBILE if self.is_narrow else MIN_HEIGHT


@dataclass(frozen=True)
class WindowGeometry:
    x: float
    y: float
    width: float
    height: float
    is_maximized: bool = False
    is_minimized: bool = False

    def to_dict(self) -> GeometryPayload:
        return {
            "x": self.x,
            "y": self.y,
            "width": self.width,
            "height": self.height,
            "is_maximized": self.is_maximized,
            "is_minimized": self.is_minimized,
        }


@dataclass(frozen=True)
class DragSession:
    offset: Point


@dataclass(frozen=True)
class ResizeSession:
    direction: ResizeDirection
    pointer: Point
    origin: WindowGeometry


@dataclass(frozen=True)
class WindowState:
    geometry: WindowGeometry
    viewport: Viewport
    saved: WindowGeometry | None = None
    drag: DragSession | None = None
    resize: ResizeSession | None = None

    @property
    def interactive(self) -> bool:
        return not (self.geometry.is_maximized or self.geometry.is_minimized)


def default_geometry(viewport: Viewport) -> WindowGeometry:
    if viewport.is_narrow:
        return WindowGeometry(
            x=MOBILE_MARGIN,
            y=MOBILE_MARGIN,
            width=max(viewport.min_width, viewport.width - MOBILE_MARGIN * 2),
            height=max(viewport.min_height, viewport.height - MOBILE_MARGIN * 2),
        )
    return WindowGeometry(
        x=max(0.0, viewport.width / 2 - INITIAL_WIDTH / 2),
        y=max(0.0, viewport.height / 2 - INITIAL_HEIGHT / 2),
        width=INITIAL_WIDTH,
        height=INITIAL_HEIGHT,
    )


def parse_geometry(raw: object) -> WindowGeometry | None:
    if not isinstance(raw, dict):
        return None
    try:
        values = [float(raw[key]) for key in ("x", "y", "width", "height")]
    except (KeyError, TypeError, ValueError, OverflowError):
        return None
    if not all(math.isfinite(value) for value in values):
        return None
    if values[2] <= 0 or values[3] <= 0:
        return None
    return WindowGeometry(
        x=values[0],
        y=values[1],
        width=values[2],
        height=values[3],
        is_maximized=bool(raw.get("is_maximized", False)),
        is_minimized=bool(raw.get("is_minimized", False)),
    )
