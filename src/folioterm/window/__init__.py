"""Window chrome package."""

from .frames import FrameCoalescer
from .manager import (
    BeginDrag,
    BeginResize,
    Close,
    EndDrag,
    EndResize,
    Hydrate,
    Maximize,
    Minimize,
    Restore,
    Show,
    ToggleMaximize,
    UpdateDrag,
    UpdateResize,
    ViewportResized,
    WindowManager,
    reduce_window,
)
from .models import Point, ResizeDirection, Viewport, WindowGeometry, WindowState

__all__ = [
    "BeginDrag",
    "BeginResize",
    "Close",
    "EndDrag",
    "EndResize",
    "FrameCoalescer",
    "Hydrate",
    "Maximize",
    "Minimize",
    "Point",
    "ResizeDirection",
    "Restore",
    "Show",
    "ToggleMaximize",
    "UpdateDrag",
    "UpdateResize",
    "Viewport",
    "ViewportResized",
    "WindowGeometry",
    "WindowManager",
    "WindowState",
    "reduce_window",
]
