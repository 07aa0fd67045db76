"""X11 implementation of the window capability interface.

Talks to an EWMH-compliant window manager through python-xlib: reads come
from root and client window properties, mutations are sent as client
messages to the root window so the window manager carries them out.
Monitor topology is read through RandR.
"""
from __future__ import annotations

import configparser
import logging
from pathlib import Path
from typing import Any, Dict, List, NamedTuple, Optional, Sequence

from Xlib import X, Xutil, display, error, protocol
from Xlib.ext import randr

from wincontrol.core.backend import WindowActor, WindowHandle, WindowSystem
from wincontrol.core.errors import SubsystemError
from wincontrol.core.records import Rect, WindowType

logger = logging.getLogger(__name__)

ALL_DESKTOPS = 0xFFFFFFFF

# _NET_WM_STATE actions
_STATE_REMOVE = 0
_STATE_ADD = 1

# source indication: pager / direct user action
_SOURCE_PAGER = 2

# _NET_MOVERESIZE_WINDOW flags
_GRAVITY_NORTHWEST = 1
_MR_X = 1 << 8
_MR_Y = 1 << 9
_MR_WIDTH = 1 << 10
_MR_HEIGHT = 1 << 11
_MR_SOURCE = _SOURCE_PAGER << 12

_TYPE_ATOMS = {
    "_NET_WM_WINDOW_TYPE_NORMAL": WindowType.NORMAL,
    "_NET_WM_WINDOW_TYPE_DESKTOP": WindowType.DESKTOP,
    "_NET_WM_WINDOW_TYPE_DOCK": WindowType.DOCK,
    "_NET_WM_WINDOW_TYPE_DIALOG": WindowType.DIALOG,
    "_NET_WM_WINDOW_TYPE_TOOLBAR": WindowType.TOOLBAR,
    "_NET_WM_WINDOW_TYPE_MENU": WindowType.MENU,
    "_NET_WM_WINDOW_TYPE_UTILITY": WindowType.UTILITY,
    "_NET_WM_WINDOW_TYPE_SPLASH": WindowType.SPLASHSCREEN,
    "_NET_WM_WINDOW_TYPE_DROPDOWN_MENU": WindowType.DROPDOWN_MENU,
    "_NET_WM_WINDOW_TYPE_POPUP_MENU": WindowType.POPUP_MENU,
    "_NET_WM_WINDOW_TYPE_TOOLTIP": WindowType.TOOLTIP,
    "_NET_WM_WINDOW_TYPE_NOTIFICATION": WindowType.NOTIFICATION,
    "_NET_WM_WINDOW_TYPE_COMBO": WindowType.COMBO,
    "_NET_WM_WINDOW_TYPE_DND": WindowType.DND,
}


def _decode(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bytes):
        value = value.decode("utf-8", errors="replace")
    # D-Bus strings end at the first NUL
    return str(value).replace("\x00", "")


def read_flatpak_app_id(pid: int, proc_root: Path = Path("/proc")) -> str:
    """Return the Flatpak application id of a sandboxed process, or ""."""
    if pid <= 0:
        return ""
    parser = configparser.ConfigParser(interpolation=None)
    try:
        read = parser.read(proc_root / str(pid) / "root" / ".flatpak-info", encoding="utf-8")
    except (OSError, configparser.Error):
        return ""
    if not read:
        return ""
    return parser.get("Application", "name", fallback="")


class _Monitor(NamedTuple):
    geometry: Rect
    connector: str
    output: int


class X11WindowSystem(WindowSystem):
    def __init__(self, display_name: Optional[str] = None, dpy: Any = None) -> None:
        try:
            self.dpy = dpy if dpy is not None else display.Display(display_name)
        except (error.DisplayError, error.ConnectionClosedError) as exc:
            raise SubsystemError(f"Cannot open X display {display_name or '$DISPLAY'}: {exc}") from exc
        self.root = self.dpy.screen().root
        self.atoms: Dict[str, int] = {}
        self._type_by_atom: Dict[int, WindowType] = {}

    # -------------------------
    # atoms / properties
    # -------------------------
    def atom(self, name: str) -> int:
        if name not in self.atoms:
            self.atoms[name] = self.dpy.intern_atom(name)
        return self.atoms[name]

    def window_type_for_atom(self, atom: int) -> Optional[WindowType]:
        if not self._type_by_atom:
            self._type_by_atom = {self.atom(name): wtype for name, wtype in _TYPE_ATOMS.items()}
        return self._type_by_atom.get(atom)

    def get_property(self, win: Any, name: str) -> Optional[Any]:
        prop = win.get_full_property(self.atom(name), X.AnyPropertyType)
        if prop is None:
            return None
        return prop.value

    def get_cardinals(self, win: Any, name: str) -> List[int]:
        value = self.get_property(win, name)
        if value is None:
            return []
        return [int(v) for v in value]

    def send_client_message(self, win: Any, message_type: str, data: Sequence[int]) -> None:
        payload = (list(data) + [0, 0, 0, 0, 0])[:5]
        ev = protocol.event.ClientMessage(window=win, client_type=self.atom(message_type), data=(32, payload))
        self.root.send_event(ev, event_mask=X.SubstructureRedirectMask | X.SubstructureNotifyMask)
        self.dpy.flush()

    # -------------------------
    # enumeration
    # -------------------------
    def get_window_actors(self) -> Sequence[WindowActor]:
        ids = self.get_property(self.root, "_NET_CLIENT_LIST_STACKING")
        if ids is None:
            ids = self.get_property(self.root, "_NET_CLIENT_LIST")
        if ids is None:
            raise SubsystemError("Window manager does not publish _NET_CLIENT_LIST")
        return [X11WindowActor(self, int(xid)) for xid in ids]

    def get_active_window_id(self) -> int:
        value = self.get_cardinals(self.root, "_NET_ACTIVE_WINDOW")
        return value[0] if value else 0

    def get_current_desktop(self) -> int:
        value = self.get_cardinals(self.root, "_NET_CURRENT_DESKTOP")
        return value[0] if value else 0

    def get_current_time(self) -> int:
        return X.CurrentTime

    # -------------------------
    # monitors
    # -------------------------
    def _query_monitors(self) -> List[_Monitor]:
        try:
            res = randr.get_screen_resources(self.root)
        except Exception:
            screen = self.dpy.screen()
            return [_Monitor(Rect(0, 0, screen.width_in_pixels, screen.height_in_pixels), "", 0)]

        monitors = []
        for output in res.outputs:
            info = randr.get_output_info(self.root, output, res.config_timestamp)
            if info.crtc == 0:
                continue
            crtc = randr.get_crtc_info(self.root, info.crtc, res.config_timestamp)
            monitors.append(
                _Monitor(Rect(crtc.x, crtc.y, crtc.width, crtc.height), _decode(info.name), output)
            )

        if not monitors:
            screen = self.dpy.screen()
            monitors.append(_Monitor(Rect(0, 0, screen.width_in_pixels, screen.height_in_pixels), "", 0))
        return monitors

    def _monitor(self, index: int) -> _Monitor:
        monitors = self._query_monitors()
        if not 0 <= index < len(monitors):
            raise SubsystemError(f"No monitor with index {index}")
        return monitors[index]

    def get_n_monitors(self) -> int:
        return len(self._query_monitors())

    def get_primary_monitor(self) -> int:
        monitors = self._query_monitors()
        try:
            primary = randr.get_output_primary(self.root).output
        except Exception:
            return 0
        for i, monitor in enumerate(monitors):
            if monitor.output == primary:
                return i
        return 0

    def get_monitor_geometry(self, index: int) -> Rect:
        return self._monitor(index).geometry

    def get_monitor_scale(self, index: int) -> float:
        # X11 has no per-monitor scale; the session scales uniformly.
        self._monitor(index)
        return 1.0

    def get_monitor_connector(self, index: int) -> str:
        return self._monitor(index).connector

    def get_work_area_for_monitor(self, index: int) -> Rect:
        geometry = self._monitor(index).geometry
        workarea = self.get_cardinals(self.root, "_NET_WORKAREA")
        offset = self.get_current_desktop() * 4
        if len(workarea) < offset + 4:
            return geometry
        usable = geometry.intersect(Rect(*workarea[offset:offset + 4]))
        return usable if usable is not None else geometry

    def monitor_for_rect(self, rect: Rect) -> int:
        best, best_area = 0, 0
        for i, monitor in enumerate(self._query_monitors()):
            overlap = monitor.geometry.intersect(rect)
            area = overlap.width * overlap.height if overlap else 0
            if area > best_area:
                best, best_area = i, area
        return best

    def close(self) -> None:
        try:
            self.dpy.close()
        except Exception as e:
            logger.debug(f"Closing X display failed: {e}")


class X11WindowActor(WindowActor):
    def __init__(self, system: X11WindowSystem, xid: int) -> None:
        self.system = system
        self.xid = xid

    def get_window(self) -> Optional[WindowHandle]:
        win = self.system.dpy.create_resource_object("window", self.xid)
        try:
            win.get_attributes()
        except (error.BadWindow, error.BadDrawable):
            # destroyed after the client list was read
            return None
        return X11Window(self.system, win)


class X11Window(WindowHandle):
    def __init__(self, system: X11WindowSystem, win: Any) -> None:
        self.system = system
        self.win = win

    def _states(self) -> set:
        value = self.system.get_property(self.win, "_NET_WM_STATE")
        return {int(a) for a in value} if value is not None else set()

    def _has_state(self, name: str) -> bool:
        return self.system.atom(name) in self._states()

    def _desktop(self) -> Optional[int]:
        value = self.system.get_cardinals(self.win, "_NET_WM_DESKTOP")
        return value[0] if value else None

    def _change_state(self, action: int, first: str, second: Optional[str] = None) -> None:
        atoms = [self.system.atom(first), self.system.atom(second) if second else 0]
        self.system.send_client_message(self.win, "_NET_WM_STATE", [action, *atoms, _SOURCE_PAGER])

    def _frame_extents(self) -> List[int]:
        extents = self.system.get_cardinals(self.win, "_NET_FRAME_EXTENTS")
        return extents if len(extents) == 4 else [0, 0, 0, 0]

    # -------------------------
    # reads
    # -------------------------
    def get_id(self) -> int:
        return int(self.win.id)

    def get_window_type(self) -> int:
        for atom in self.system.get_property(self.win, "_NET_WM_WINDOW_TYPE") or []:
            wtype = self.system.window_type_for_atom(int(atom))
            if wtype is None:
                continue
            if wtype == WindowType.DIALOG and self._has_state("_NET_WM_STATE_MODAL"):
                return WindowType.MODAL_DIALOG
            return wtype
        if self.win.get_wm_transient_for() is not None:
            return WindowType.DIALOG
        return WindowType.NORMAL

    def get_title(self) -> Optional[str]:
        title = self.system.get_property(self.win, "_NET_WM_NAME")
        if title is None:
            title = self.win.get_wm_name()
        return _decode(title)

    def get_wm_class(self) -> Optional[str]:
        wm_class = self.win.get_wm_class()
        return wm_class[1] if wm_class else None

    def get_wm_class_instance(self) -> Optional[str]:
        wm_class = self.win.get_wm_class()
        return wm_class[0] if wm_class else None

    def get_sandboxed_app_id(self) -> Optional[str]:
        return read_flatpak_app_id(self.get_pid())

    def get_gtk_application_id(self) -> Optional[str]:
        return _decode(self.system.get_property(self.win, "_GTK_APPLICATION_ID"))

    def has_focus(self) -> bool:
        return self.system.get_active_window_id() == self.get_id()

    def get_workspace_index(self) -> Optional[int]:
        desktop = self._desktop()
        if desktop is None or desktop == ALL_DESKTOPS:
            return None
        return desktop

    def is_on_all_workspaces(self) -> bool:
        return self._desktop() == ALL_DESKTOPS or self._has_state("_NET_WM_STATE_STICKY")

    def get_monitor(self) -> int:
        return self.system.monitor_for_rect(self.get_frame_rect())

    def get_pid(self) -> int:
        value = self.system.get_cardinals(self.win, "_NET_WM_PID")
        return value[0] if value else 0

    def get_frame_rect(self) -> Rect:
        geom = self.win.get_geometry()
        origin = self.system.root.translate_coords(self.win, 0, 0)
        left, right, top, bottom = self._frame_extents()
        return Rect(
            origin.x - left,
            origin.y - top,
            geom.width + left + right,
            geom.height + top + bottom,
        )

    def is_hidden(self) -> bool:
        return self._has_state("_NET_WM_STATE_HIDDEN")

    def is_minimized(self) -> bool:
        wm_state = self.win.get_wm_state()
        if wm_state is not None and wm_state.state == Xutil.IconicState:
            return True
        return self.is_hidden()

    def is_maximized(self) -> bool:
        states = self._states()
        return (
            self.system.atom("_NET_WM_STATE_MAXIMIZED_VERT") in states
            and self.system.atom("_NET_WM_STATE_MAXIMIZED_HORZ") in states
        )

    def is_fullscreen(self) -> bool:
        return self._has_state("_NET_WM_STATE_FULLSCREEN")

    def is_above(self) -> bool:
        return self._has_state("_NET_WM_STATE_ABOVE")

    def is_skip_taskbar(self) -> bool:
        return self._has_state("_NET_WM_STATE_SKIP_TASKBAR")

    # -------------------------
    # mutations
    # -------------------------
    def activate(self, timestamp: int) -> None:
        self.system.send_client_message(self.win, "_NET_ACTIVE_WINDOW", [_SOURCE_PAGER, timestamp, 0])

    def focus(self, timestamp: int) -> None:
        self.win.set_input_focus(X.RevertToParent, timestamp)
        self.system.dpy.flush()

    def move_frame(self, x: int, y: int) -> None:
        flags = _GRAVITY_NORTHWEST | _MR_X | _MR_Y | _MR_SOURCE
        self.system.send_client_message(self.win, "_NET_MOVERESIZE_WINDOW", [flags, x, y, 0, 0])

    def move_resize_frame(self, x: int, y: int, width: int, height: int) -> None:
        # The request carries the client size; the frame adds the extents back.
        left, right, top, bottom = self._frame_extents()
        client_width = max(1, width - left - right)
        client_height = max(1, height - top - bottom)
        flags = _GRAVITY_NORTHWEST | _MR_X | _MR_Y | _MR_WIDTH | _MR_HEIGHT | _MR_SOURCE
        self.system.send_client_message(
            self.win, "_NET_MOVERESIZE_WINDOW", [flags, x, y, client_width, client_height]
        )

    def minimize(self) -> None:
        self.system.send_client_message(self.win, "WM_CHANGE_STATE", [Xutil.IconicState])

    def unminimize(self) -> None:
        self.win.map()
        self.system.dpy.flush()

    def maximize(self) -> None:
        self._change_state(_STATE_ADD, "_NET_WM_STATE_MAXIMIZED_VERT", "_NET_WM_STATE_MAXIMIZED_HORZ")

    def unmaximize(self) -> None:
        self._change_state(_STATE_REMOVE, "_NET_WM_STATE_MAXIMIZED_VERT", "_NET_WM_STATE_MAXIMIZED_HORZ")

    def make_fullscreen(self) -> None:
        self._change_state(_STATE_ADD, "_NET_WM_STATE_FULLSCREEN")

    def unmake_fullscreen(self) -> None:
        self._change_state(_STATE_REMOVE, "_NET_WM_STATE_FULLSCREEN")

    def make_above(self) -> None:
        self._change_state(_STATE_ADD, "_NET_WM_STATE_ABOVE")

    def unmake_above(self) -> None:
        self._change_state(_STATE_REMOVE, "_NET_WM_STATE_ABOVE")

    def stick(self) -> None:
        self.system.send_client_message(self.win, "_NET_WM_DESKTOP", [ALL_DESKTOPS, _SOURCE_PAGER])

    def unstick(self) -> None:
        desktop = self.system.get_current_desktop()
        self.system.send_client_message(self.win, "_NET_WM_DESKTOP", [desktop, _SOURCE_PAGER])
        if self._has_state("_NET_WM_STATE_STICKY"):
            self._change_state(_STATE_REMOVE, "_NET_WM_STATE_STICKY")

    def delete(self, timestamp: int) -> None:
        self.system.send_client_message(self.win, "_NET_CLOSE_WINDOW", [timestamp, _SOURCE_PAGER])
