"""Capability interface onto the window-management subsystem.

The core never owns window objects. It reads and mutates them through the
three abstract classes below, which a concrete backend (see ``x11.py``)
implements for a particular desktop session.
"""
from __future__ import annotations

import abc
from typing import Sequence

from wincontrol.core.records import Rect


class WindowHandle(abc.ABC):
    """A live top-level window owned by the window-management subsystem.

    Any method may raise if the window vanished after it was resolved;
    callers are expected to treat that as a failed operation.
    """

    # -- reads --------------------------------------------------------------

    @abc.abstractmethod
    def get_id(self) -> int:
        """Stable unsigned identifier, unique among open windows."""
        raise NotImplementedError

    @abc.abstractmethod
    def get_window_type(self) -> int:
        """Window kind as a ``WindowType`` value."""
        raise NotImplementedError

    @abc.abstractmethod
    def get_title(self) -> str | None:
        raise NotImplementedError

    @abc.abstractmethod
    def get_wm_class(self) -> str | None:
        raise NotImplementedError

    @abc.abstractmethod
    def get_wm_class_instance(self) -> str | None:
        raise NotImplementedError

    @abc.abstractmethod
    def get_sandboxed_app_id(self) -> str | None:
        raise NotImplementedError

    @abc.abstractmethod
    def get_gtk_application_id(self) -> str | None:
        raise NotImplementedError

    @abc.abstractmethod
    def has_focus(self) -> bool:
        raise NotImplementedError

    @abc.abstractmethod
    def get_workspace_index(self) -> int | None:
        """Index of the workspace the window lives on, None if it has none."""
        raise NotImplementedError

    @abc.abstractmethod
    def is_on_all_workspaces(self) -> bool:
        raise NotImplementedError

    @abc.abstractmethod
    def get_monitor(self) -> int:
        raise NotImplementedError

    @abc.abstractmethod
    def get_pid(self) -> int:
        """Owning process id, 0 when unknown."""
        raise NotImplementedError

    @abc.abstractmethod
    def get_frame_rect(self) -> Rect:
        """Bounding rectangle including decorations, in desktop coordinates."""
        raise NotImplementedError

    @abc.abstractmethod
    def is_hidden(self) -> bool:
        raise NotImplementedError

    @abc.abstractmethod
    def is_minimized(self) -> bool:
        raise NotImplementedError

    @abc.abstractmethod
    def is_maximized(self) -> bool:
        """True only when maximized both horizontally and vertically."""
        raise NotImplementedError

    @abc.abstractmethod
    def is_fullscreen(self) -> bool:
        raise NotImplementedError

    @abc.abstractmethod
    def is_above(self) -> bool:
        raise NotImplementedError

    @abc.abstractmethod
    def is_skip_taskbar(self) -> bool:
        raise NotImplementedError

    # -- mutations ----------------------------------------------------------

    @abc.abstractmethod
    def activate(self, timestamp: int) -> None:
        """Focus and raise the window.

        Args:
            timestamp: Opaque "now" token from ``WindowSystem.get_current_time``.
        """
        raise NotImplementedError

    @abc.abstractmethod
    def focus(self, timestamp: int) -> None:
        """Give the window input focus without restacking it."""
        raise NotImplementedError

    @abc.abstractmethod
    def move_frame(self, x: int, y: int) -> None:
        raise NotImplementedError

    @abc.abstractmethod
    def move_resize_frame(self, x: int, y: int, width: int, height: int) -> None:
        """Change position and size in one request."""
        raise NotImplementedError

    @abc.abstractmethod
    def minimize(self) -> None:
        raise NotImplementedError

    @abc.abstractmethod
    def unminimize(self) -> None:
        raise NotImplementedError

    @abc.abstractmethod
    def maximize(self) -> None:
        raise NotImplementedError

    @abc.abstractmethod
    def unmaximize(self) -> None:
        raise NotImplementedError

    @abc.abstractmethod
    def make_fullscreen(self) -> None:
        raise NotImplementedError

    @abc.abstractmethod
    def unmake_fullscreen(self) -> None:
        raise NotImplementedError

    @abc.abstractmethod
    def make_above(self) -> None:
        raise NotImplementedError

    @abc.abstractmethod
    def unmake_above(self) -> None:
        raise NotImplementedError

    @abc.abstractmethod
    def stick(self) -> None:
        raise NotImplementedError

    @abc.abstractmethod
    def unstick(self) -> None:
        raise NotImplementedError

    @abc.abstractmethod
    def delete(self, timestamp: int) -> None:
        """Ask the owning client to close the window.

        The client may show a save prompt or ignore the request entirely.
        """
        raise NotImplementedError


class WindowActor(abc.ABC):
    """An entry in the subsystem's top-level window list."""

    @abc.abstractmethod
    def get_window(self) -> WindowHandle | None:
        """Return the backing window, or None while it is being created or torn down."""
        raise NotImplementedError


class WindowSystem(abc.ABC):
    """Session-wide window enumeration and monitor/workspace topology."""

    @abc.abstractmethod
    def get_window_actors(self) -> Sequence[WindowActor]:
        """List top-level window actors in the subsystem's natural order."""
        raise NotImplementedError

    @abc.abstractmethod
    def get_current_time(self) -> int:
        raise NotImplementedError

    @abc.abstractmethod
    def get_n_monitors(self) -> int:
        raise NotImplementedError

    @abc.abstractmethod
    def get_primary_monitor(self) -> int:
        raise NotImplementedError

    @abc.abstractmethod
    def get_monitor_geometry(self, index: int) -> Rect:
        raise NotImplementedError

    @abc.abstractmethod
    def get_monitor_scale(self, index: int) -> float:
        raise NotImplementedError

    @abc.abstractmethod
    def get_monitor_connector(self, index: int) -> str:
        raise NotImplementedError

    @abc.abstractmethod
    def get_work_area_for_monitor(self, index: int) -> Rect:
        """Usable area of the active workspace on a monitor, minus panels and docks."""
        raise NotImplementedError

    def close(self) -> None:
        """Release any connection held to the subsystem."""
