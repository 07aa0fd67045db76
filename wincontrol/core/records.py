from __future__ import annotations

from dataclasses import asdict, dataclass
from enum import IntEnum
from typing import Any, NamedTuple


class Rect(NamedTuple):
    x: int
    y: int
    width: int
    height: int

    def intersect(self, other: Rect) -> Rect | None:
        left = max(self.x, other.x)
        top = max(self.y, other.y)
        right = min(self.x + self.width, other.x + other.width)
        bottom = min(self.y + self.height, other.y + other.height)
        if right <= left or bottom <= top:
            return None
        return Rect(left, top, right - left, bottom - top)

    def to_dict(self) -> dict[str, int]:
        return {"x": self.x, "y": self.y, "width": self.width, "height": self.height}


SENTINEL_RECT = Rect(-1, -1, -1, -1)

# Returned by GetFocused when no normal window has focus.
NO_FOCUS = (0, "", "")

ALL_WORKSPACES = -1


class WindowType(IntEnum):
    NORMAL = 0
    DESKTOP = 1
    DOCK = 2
    DIALOG = 3
    MODAL_DIALOG = 4
    TOOLBAR = 5
    MENU = 6
    UTILITY = 7
    SPLASHSCREEN = 8
    DROPDOWN_MENU = 9
    POPUP_MENU = 10
    TOOLTIP = 11
    NOTIFICATION = 12
    COMBO = 13
    DND = 14
    OVERRIDE_OTHER = 15


WINDOW_TYPE_NAMES: dict[int, str] = {t.value: t.name.lower() for t in WindowType}


def window_type_name(window_type: int) -> str:
    return WINDOW_TYPE_NAMES.get(window_type, "unknown")


@dataclass(frozen=True)
class WindowRecord:
    id: int
    title: str
    wm_class: str
    wm_class_instance: str
    sandboxed_app_id: str
    gtk_application_id: str
    has_focus: bool
    is_hidden: bool
    is_minimized: bool
    is_maximized: bool
    is_fullscreen: bool
    is_above: bool
    is_on_all_workspaces: bool
    is_skip_taskbar: bool
    workspace_index: int
    monitor_index: int
    pid: int
    window_type: int
    frame_rect: Rect

    @property
    def window_type_name(self) -> str:
        return window_type_name(self.window_type)

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["appears_focused"] = self.has_focus
        data["window_type_name"] = self.window_type_name
        data["frame_rect"] = self.frame_rect.to_dict()
        return data


@dataclass(frozen=True)
class MonitorRecord:
    index: int
    x: int
    y: int
    width: int
    height: int
    is_primary: bool
    scale: float
    connector: str = ""

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)
