from __future__ import annotations

import logging
from typing import Any

import gi

gi.require_version("Gio", "2.0")
from gi.repository import Gio, GLib

from wincontrol.core.config import Config
from wincontrol.daemon.dispatcher import ServiceDispatcher

logger = logging.getLogger(__name__)

_WINDOW_ID = '<arg type="t" direction="in" name="window_id"/>'
_SUCCESS = '<arg type="b" direction="out" name="success"/>'
_RECT_OUT = (
    '<arg type="i" direction="out" name="x"/>'
    '<arg type="i" direction="out" name="y"/>'
    '<arg type="i" direction="out" name="width"/>'
    '<arg type="i" direction="out" name="height"/>'
)


def _method(name: str, *args: str) -> str:
    return f'<method name="{name}">{"".join(args)}</method>'


def _state_method(name: str) -> str:
    return _method(name, _WINDOW_ID, _SUCCESS)


def interface_xml(interface_name: str) -> str:
    methods = [
        _method("List", '<arg type="a(tssssbiiii)" direction="out" name="windows"/>'),
        _method("ListDetailed", '<arg type="s" direction="out" name="windows_json"/>'),
        _method("ListMonitors", '<arg type="s" direction="out" name="monitors_json"/>'),
        _method("Activate", _WINDOW_ID, _SUCCESS),
        _method("ActivateByTitle", '<arg type="s" direction="in" name="title"/>', _SUCCESS),
        _method("ActivateByTitleSubstring", '<arg type="s" direction="in" name="substring"/>', _SUCCESS),
        _method("ActivateByWmClass", '<arg type="s" direction="in" name="wm_class"/>', _SUCCESS),
        _method("ActivateByPid", '<arg type="i" direction="in" name="pid"/>', _SUCCESS),
        _method("Focus", _WINDOW_ID, _SUCCESS),
        _method(
            "GetFocused",
            '<arg type="t" direction="out" name="window_id"/>',
            '<arg type="s" direction="out" name="title"/>',
            '<arg type="s" direction="out" name="wm_class"/>',
        ),
        _method(
            "Move",
            _WINDOW_ID,
            '<arg type="i" direction="in" name="x"/>',
            '<arg type="i" direction="in" name="y"/>',
            _SUCCESS,
        ),
        _method(
            "Resize",
            _WINDOW_ID,
            '<arg type="i" direction="in" name="width"/>',
            '<arg type="i" direction="in" name="height"/>',
            _SUCCESS,
        ),
        _method(
            "MoveResize",
            _WINDOW_ID,
            '<arg type="i" direction="in" name="x"/>',
            '<arg type="i" direction="in" name="y"/>',
            '<arg type="i" direction="in" name="width"/>',
            '<arg type="i" direction="in" name="height"/>',
            _SUCCESS,
        ),
        _method("GetGeometry", _WINDOW_ID, _RECT_OUT),
        _method("GetWorkarea", '<arg type="i" direction="in" name="monitor_index"/>', _RECT_OUT),
        _state_method("Minimize"),
        _state_method("Unminimize"),
        _state_method("Maximize"),
        _state_method("Unmaximize"),
        _state_method("Fullscreen"),
        _state_method("Unfullscreen"),
        _method("SetAbove", _WINDOW_ID, '<arg type="b" direction="in" name="above"/>', _SUCCESS),
        _method("SetSticky", _WINDOW_ID, '<arg type="b" direction="in" name="sticky"/>', _SUCCESS),
        _state_method("Close"),
    ]
    return f'<node><interface name="{interface_name}">{"".join(methods)}</interface></node>'


def out_signature(method_info: Gio.DBusMethodInfo) -> str:
    return "(" + "".join(arg.signature for arg in method_info.out_args) + ")"


def pack_result(method_info: Gio.DBusMethodInfo, result: Any) -> GLib.Variant:
    """Wrap a dispatcher result in the method's out-tuple variant."""
    if len(method_info.out_args) == 1:
        result = (result,)
    return GLib.Variant(out_signature(method_info), tuple(result))


class BusExporter:
    """Publishes the dispatcher as one object on the session bus."""

    def __init__(self, dispatcher: ServiceDispatcher, config: Config) -> None:
        self.dispatcher = dispatcher
        self.config = config
        self.node_info = Gio.DBusNodeInfo.new_for_xml(interface_xml(config.interface_name))
        self.interface_info = self.node_info.lookup_interface(config.interface_name)
        self._owner_id = 0
        self._registration_id = 0
        self._connection: Gio.DBusConnection | None = None

    @property
    def exported(self) -> bool:
        return self._registration_id != 0

    def export(self) -> None:
        flags = Gio.BusNameOwnerFlags.ALLOW_REPLACEMENT
        if self.config.replace_existing:
            flags |= Gio.BusNameOwnerFlags.REPLACE
        self._owner_id = Gio.bus_own_name(
            Gio.BusType.SESSION,
            self.config.bus_name,
            flags,
            self._on_bus_acquired,
            self._on_name_acquired,
            self._on_name_lost,
        )

    def unexport(self) -> None:
        if self._connection is not None and self._registration_id:
            self._connection.unregister_object(self._registration_id)
            logger.info(f"D-Bus object unregistered from {self.config.object_path}")
        self._registration_id = 0
        self._connection = None
        if self._owner_id:
            Gio.bus_unown_name(self._owner_id)
            self._owner_id = 0

    def _on_bus_acquired(self, connection: Gio.DBusConnection, name: str) -> None:
        self._connection = connection
        self._registration_id = connection.register_object(
            self.config.object_path, self.interface_info, self._on_method_call, None, None
        )
        logger.info(f"D-Bus service registered at {self.config.object_path}")

    def _on_name_acquired(self, connection: Gio.DBusConnection, name: str) -> None:
        logger.info(f"Acquired bus name {name}")

    def _on_name_lost(self, connection: Gio.DBusConnection | None, name: str) -> None:
        logger.warning(f"Lost or could not acquire bus name {name}")

    def _on_method_call(
        self,
        connection: Gio.DBusConnection,
        sender: str,
        object_path: str,
        interface_name: str,
        method_name: str,
        parameters: GLib.Variant,
        invocation: Gio.DBusMethodInvocation,
    ) -> None:
        self.handle_call(method_name, parameters, invocation)

    def handle_call(self, method_name: str, parameters: GLib.Variant, invocation: Any) -> None:
        method_info = self.interface_info.lookup_method(method_name)
        if method_info is None or not self.dispatcher.has_method(method_name):
            invocation.return_dbus_error(
                "org.freedesktop.DBus.Error.UnknownMethod", f"No such method: {method_name}"
            )
            return

        result = self.dispatcher.dispatch(method_name, parameters.unpack())
        try:
            invocation.return_value(pack_result(method_info, result))
        except (TypeError, OverflowError, ValueError) as e:
            logger.error(f"{method_name}: cannot encode result {result!r}: {e}")
            invocation.return_dbus_error("org.freedesktop.DBus.Error.Failed", str(e))
