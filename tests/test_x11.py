"""X11 backend decoding and request encoding against a stand-in display."""

from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest

pytest.importorskip("Xlib")
from Xlib import Xutil

from wincontrol.core import x11
from wincontrol.core.errors import SubsystemError
from wincontrol.core.records import Rect, WindowType
from wincontrol.core.x11 import ALL_DESKTOPS, X11Window, X11WindowSystem, read_flatpak_app_id


class Atoms:
    def __init__(self) -> None:
        self.ids: dict[str, int] = {}
        self.names: dict[int, str] = {}

    def intern(self, name: str, only_if_exists: bool = False) -> int:
        if name not in self.ids:
            self.ids[name] = len(self.ids) + 1
            self.names[self.ids[name]] = name
        return self.ids[name]


class FakeXWindow:
    def __init__(self, atoms: Atoms, wid: int = 0x400001, props: dict | None = None) -> None:
        self.atoms = atoms
        self.id = wid
        self.props = props or {}
        self.geometry = SimpleNamespace(x=0, y=0, width=800, height=600)
        self.origins: dict[int, tuple[int, int]] = {}
        self.wm_class = None
        self.wm_name = None
        self.wm_state = None
        self.transient_for = None

    def get_full_property(self, atom: int, property_type: int):
        value = self.props.get(self.atoms.names.get(atom))
        return SimpleNamespace(value=value) if value is not None else None

    def get_geometry(self):
        return self.geometry

    def translate_coords(self, src, x, y):
        ox, oy = self.origins.get(src.id, (0, 0))
        return SimpleNamespace(x=ox + x, y=oy + y)

    def get_wm_class(self):
        return self.wm_class

    def get_wm_name(self):
        return self.wm_name

    def get_wm_state(self):
        return self.wm_state

    def get_wm_transient_for(self):
        return self.transient_for

    def get_attributes(self):
        return SimpleNamespace(map_state=2)


@pytest.fixture
def atoms() -> Atoms:
    return Atoms()


@pytest.fixture
def root(atoms: Atoms) -> FakeXWindow:
    return FakeXWindow(atoms, wid=0x1)


@pytest.fixture
def system(atoms: Atoms, root: FakeXWindow) -> X11WindowSystem:
    dpy = MagicMock()
    dpy.intern_atom.side_effect = atoms.intern
    dpy.screen.return_value.root = root
    dpy.screen.return_value.width_in_pixels = 1024
    dpy.screen.return_value.height_in_pixels = 768
    return X11WindowSystem(dpy=dpy)


def make_window(system: X11WindowSystem, atoms: Atoms, **props) -> tuple[X11Window, FakeXWindow]:
    xwin = FakeXWindow(atoms, props=props)
    return X11Window(system, xwin), xwin


def test_actors_follow_stacking_order(system: X11WindowSystem, root: FakeXWindow) -> None:
    root.props["_NET_CLIENT_LIST"] = [1, 2, 3]
    root.props["_NET_CLIENT_LIST_STACKING"] = [3, 1, 2]

    assert [a.xid for a in system.get_window_actors()] == [3, 1, 2]


def test_actors_fall_back_to_client_list(system: X11WindowSystem, root: FakeXWindow) -> None:
    root.props["_NET_CLIENT_LIST"] = [5, 6]
    assert [a.xid for a in system.get_window_actors()] == [5, 6]


def test_actors_require_ewmh(system: X11WindowSystem) -> None:
    with pytest.raises(SubsystemError):
        system.get_window_actors()


def test_actor_resolves_window(system: X11WindowSystem, atoms: Atoms, root: FakeXWindow) -> None:
    root.props["_NET_CLIENT_LIST"] = [0x400001]
    system.dpy.create_resource_object.return_value = FakeXWindow(atoms)

    [actor] = system.get_window_actors()
    window = actor.get_window()

    assert isinstance(window, X11Window)
    assert window.get_id() == 0x400001


def test_window_type_decoding(system: X11WindowSystem, atoms: Atoms) -> None:
    untyped, _ = make_window(system, atoms)
    dock, _ = make_window(system, atoms, _NET_WM_WINDOW_TYPE=[atoms.intern("_NET_WM_WINDOW_TYPE_DOCK")])
    modal, _ = make_window(
        system,
        atoms,
        _NET_WM_WINDOW_TYPE=[atoms.intern("_KDE_NET_WM_WINDOW_TYPE_OVERRIDE"), atoms.intern("_NET_WM_WINDOW_TYPE_DIALOG")],
        _NET_WM_STATE=[atoms.intern("_NET_WM_STATE_MODAL")],
    )

    assert untyped.get_window_type() == WindowType.NORMAL
    assert dock.get_window_type() == WindowType.DOCK
    assert modal.get_window_type() == WindowType.MODAL_DIALOG


def test_untyped_transient_is_a_dialog(system: X11WindowSystem, atoms: Atoms) -> None:
    window, xwin = make_window(system, atoms)
    xwin.transient_for = FakeXWindow(atoms, wid=0x400002)

    assert window.get_window_type() == WindowType.DIALOG


def test_title_prefers_utf8_name(system: X11WindowSystem, atoms: Atoms) -> None:
    window, xwin = make_window(system, atoms, _NET_WM_NAME="Café: notes".encode())
    xwin.wm_name = "legacy"
    assert window.get_title() == "Café: notes"

    legacy, xlegacy = make_window(system, atoms)
    xlegacy.wm_name = "legacy"
    assert legacy.get_title() == "legacy"


def test_title_drops_embedded_nul(system: X11WindowSystem, atoms: Atoms) -> None:
    window, _ = make_window(system, atoms, _NET_WM_NAME=b"Inbox\x00 (3)")
    legacy, xlegacy = make_window(system, atoms)
    xlegacy.wm_name = "term\x00inal"

    assert window.get_title() == "Inbox (3)"
    assert legacy.get_title() == "terminal"


def test_wm_class_pair(system: X11WindowSystem, atoms: Atoms) -> None:
    window, xwin = make_window(system, atoms)
    xwin.wm_class = ("Navigator", "firefox")

    assert window.get_wm_class() == "firefox"
    assert window.get_wm_class_instance() == "Navigator"


def test_workspace_and_sticky(system: X11WindowSystem, atoms: Atoms) -> None:
    pinned, _ = make_window(system, atoms, _NET_WM_DESKTOP=[2])
    everywhere, _ = make_window(system, atoms, _NET_WM_DESKTOP=[ALL_DESKTOPS])

    assert pinned.get_workspace_index() == 2
    assert pinned.is_on_all_workspaces() is False
    assert everywhere.get_workspace_index() is None
    assert everywhere.is_on_all_workspaces() is True


def test_focus_and_pid(system: X11WindowSystem, atoms: Atoms, root: FakeXWindow) -> None:
    window, xwin = make_window(system, atoms, _NET_WM_PID=[4321])
    root.props["_NET_ACTIVE_WINDOW"] = [xwin.id]

    assert window.has_focus() is True
    assert window.get_pid() == 4321


def test_frame_rect_includes_extents(system: X11WindowSystem, atoms: Atoms, root: FakeXWindow) -> None:
    window, xwin = make_window(system, atoms, _NET_FRAME_EXTENTS=[10, 10, 30, 10])
    root.origins[xwin.id] = (110, 230)

    assert window.get_frame_rect() == Rect(100, 200, 820, 640)


def test_state_flags(system: X11WindowSystem, atoms: Atoms) -> None:
    maximized, _ = make_window(
        system,
        atoms,
        _NET_WM_STATE=[atoms.intern("_NET_WM_STATE_MAXIMIZED_VERT"), atoms.intern("_NET_WM_STATE_MAXIMIZED_HORZ")],
    )
    half, xhalf = make_window(system, atoms, _NET_WM_STATE=[atoms.intern("_NET_WM_STATE_MAXIMIZED_VERT")])
    xhalf.wm_state = SimpleNamespace(state=Xutil.IconicState)

    assert maximized.is_maximized() is True
    assert half.is_maximized() is False
    assert half.is_minimized() is True
    assert maximized.is_minimized() is False


def test_move_resize_sends_client_size(system: X11WindowSystem, atoms: Atoms) -> None:
    window, xwin = make_window(system, atoms, _NET_FRAME_EXTENTS=[2, 2, 30, 2])
    system.send_client_message = MagicMock()

    window.move_resize_frame(10, 20, 804, 632)

    target, message, data = system.send_client_message.call_args[0]
    assert target is xwin
    assert message == "_NET_MOVERESIZE_WINDOW"
    assert data[1:] == [10, 20, 800, 600]
    assert data[0] & 0xFF == 1
    assert data[0] & 0xF00 == 0xF00


def test_maximize_adds_both_states(system: X11WindowSystem, atoms: Atoms) -> None:
    window, _ = make_window(system, atoms)
    system.send_client_message = MagicMock()

    window.maximize()

    _, message, data = system.send_client_message.call_args[0]
    assert message == "_NET_WM_STATE"
    assert data == [1, atoms.intern("_NET_WM_STATE_MAXIMIZED_VERT"), atoms.intern("_NET_WM_STATE_MAXIMIZED_HORZ"), 2]


def test_unstick_moves_to_current_desktop(system: X11WindowSystem, atoms: Atoms, root: FakeXWindow) -> None:
    window, _ = make_window(system, atoms, _NET_WM_DESKTOP=[ALL_DESKTOPS])
    root.props["_NET_CURRENT_DESKTOP"] = [3]
    system.send_client_message = MagicMock()

    window.unstick()

    _, message, data = system.send_client_message.call_args[0]
    assert message == "_NET_WM_DESKTOP"
    assert data[0] == 3


def test_work_area_per_monitor(system: X11WindowSystem, root: FakeXWindow) -> None:
    system._query_monitors = lambda: [
        x11._Monitor(Rect(0, 0, 1920, 1080), "eDP-1", 1),
        x11._Monitor(Rect(1920, 0, 1280, 1024), "HDMI-1", 2),
    ]
    assert system.get_work_area_for_monitor(1) == Rect(1920, 0, 1280, 1024)

    root.props["_NET_WORKAREA"] = [0, 27, 3200, 1053, 0, 0, 3200, 1080]
    root.props["_NET_CURRENT_DESKTOP"] = [0]

    assert system.get_work_area_for_monitor(0) == Rect(0, 27, 1920, 1053)
    assert system.get_work_area_for_monitor(1) == Rect(1920, 27, 1280, 997)


def test_monitor_for_rect_uses_largest_overlap(system: X11WindowSystem) -> None:
    system._query_monitors = lambda: [
        x11._Monitor(Rect(0, 0, 1920, 1080), "eDP-1", 1),
        x11._Monitor(Rect(1920, 0, 1280, 1024), "HDMI-1", 2),
    ]
    assert system.monitor_for_rect(Rect(1800, 100, 400, 300)) == 1
    assert system.monitor_for_rect(Rect(-500, -500, 10, 10)) == 0


def test_primary_monitor(system: X11WindowSystem, monkeypatch) -> None:
    system._query_monitors = lambda: [
        x11._Monitor(Rect(0, 0, 1920, 1080), "eDP-1", 11),
        x11._Monitor(Rect(1920, 0, 1280, 1024), "HDMI-1", 12),
    ]
    monkeypatch.setattr(x11.randr, "get_output_primary", lambda window: SimpleNamespace(output=12))

    assert system.get_primary_monitor() == 1
    assert system.get_monitor_connector(1) == "HDMI-1"


def test_single_screen_without_randr(system: X11WindowSystem, monkeypatch) -> None:
    def no_randr(window):
        raise RuntimeError("RANDR missing")

    monkeypatch.setattr(x11.randr, "get_screen_resources", no_randr)

    assert system.get_n_monitors() == 1
    assert system.get_monitor_geometry(0) == Rect(0, 0, 1024, 768)


def test_flatpak_app_id(tmp_path: Path) -> None:
    info = tmp_path / "77" / "root" / ".flatpak-info"
    info.parent.mkdir(parents=True)
    info.write_text("[Application]\nname=org.gnome.TextEditor\nruntime=runtime/org.gnome.Platform\n")

    assert read_flatpak_app_id(77, proc_root=tmp_path) == "org.gnome.TextEditor"
    assert read_flatpak_app_id(78, proc_root=tmp_path) == ""
    assert read_flatpak_app_id(0, proc_root=tmp_path) == ""
