from __future__ import annotations

import functools
import json
import logging
from copy import copy
from typing import Any, Callable

from wincontrol.core.backend import WindowHandle, WindowSystem
from wincontrol.core.errors import InvalidArgumentError, UnknownMethodError, WindowControlError, WindowNotFoundError
from wincontrol.core.inspector import Inspector
from wincontrol.core.mutator import WindowMutator
from wincontrol.core.records import NO_FOCUS, SENTINEL_RECT
from wincontrol.core.resolver import WindowResolver
from wincontrol.core.source import WindowSource
from wincontrol.core.validation import (
    is_window_id,
    validate_geometry,
    validate_position,
    validate_size,
)

logger = logging.getLogger(__name__)


def _summary(result: Any) -> str:
    if isinstance(result, list):
        return f"{len(result)} windows"
    text = repr(result)
    return text if len(text) <= 200 else text[:197] + "..."


def rpc(name: str, failure: Any) -> Callable:
    """Mark a dispatcher method as the handler of RPC method ``name``.

    The wrapper is the service boundary: whatever the handler raises is
    logged and turned into ``failure``, so callers always get a value of
    the declared shape.
    """

    def decorator(fn: Callable) -> Callable:
        @functools.wraps(fn)
        def wrapper(self: ServiceDispatcher, *args: Any) -> Any:
            call = f"{name}({', '.join(repr(a) for a in args)})"
            logger.info(f"{call} called")
            try:
                result = fn(self, *args)
            except WindowControlError as e:
                # not found / invalid argument: an expected negative answer
                logger.info(f"{call} -> {_summary(failure)} ({e})")
                return copy(failure)
            except Exception as e:
                logger.exception(f"{call} error: {e}")
                return copy(failure)
            logger.info(f"{call} -> {_summary(result)}")
            return result

        wrapper.rpc_name = name
        wrapper.rpc_failure = failure
        return wrapper

    return decorator


class ServiceDispatcher:
    """Single entry point for every RPC method.

    Stateless: each call takes a fresh snapshot of the window set, resolves
    its target and acts on it, so two calls may see different windows.
    """

    def __init__(self, system: WindowSystem) -> None:
        self.system = system
        self.source = WindowSource(system)
        self.resolver = WindowResolver(self.source)
        self.mutator = WindowMutator(system)
        self.inspector = Inspector(system)

    # -------------------------
    # dispatch
    # -------------------------
    @classmethod
    def method_names(cls) -> list[str]:
        return sorted(METHODS)

    def has_method(self, name: str) -> bool:
        return name in METHODS

    def dispatch(self, name: str, args: tuple | list = ()) -> Any:
        handler = METHODS.get(name)
        if handler is None:
            raise UnknownMethodError(f"No such method: {name}")
        return handler(self, *args)

    # -------------------------
    # helpers
    # -------------------------
    def _require_id(self, window_id: Any) -> int:
        if not is_window_id(window_id):
            raise InvalidArgumentError(f"invalid window id {window_id!r}")
        return window_id

    def _require_str(self, value: Any, what: str) -> str:
        if not isinstance(value, str):
            raise InvalidArgumentError(f"{what} must be a string, got {value!r}")
        return value

    def _require_bool(self, value: Any, what: str) -> bool:
        if not isinstance(value, bool):
            raise InvalidArgumentError(f"{what} must be a boolean, got {value!r}")
        return value

    def _found(self, window: WindowHandle | None) -> WindowHandle:
        if window is None:
            raise WindowNotFoundError("window not found")
        return window

    def _window(self, window_id: Any) -> WindowHandle:
        return self._found(self.resolver.find_by_id(self._require_id(window_id)))

    # -------------------------
    # enumeration
    # -------------------------
    @rpc("List", failure=[])
    def list_windows(self) -> list[tuple]:
        result = []
        for window in self.source.snapshot():
            try:
                result.append(self.inspector.project_compact(window))
            except Exception as e:
                logger.warning(f"List: skipping unreadable window: {e}")
        return result

    @rpc("ListDetailed", failure="[]")
    def list_detailed(self) -> str:
        result = []
        for window in self.source.snapshot():
            try:
                result.append(self.inspector.project(window).to_dict())
            except Exception as e:
                logger.warning(f"ListDetailed: skipping unreadable window: {e}")
        return json.dumps(result)

    @rpc("ListMonitors", failure="[]")
    def list_monitors(self) -> str:
        return json.dumps([m.to_dict() for m in self.inspector.list_monitors()])

    # -------------------------
    # activation / focus
    # -------------------------
    @rpc("Activate", failure=False)
    def activate(self, window_id: int) -> bool:
        return self.mutator.activate(self._window(window_id))

    @rpc("ActivateByTitle", failure=False)
    def activate_by_title(self, title: str) -> bool:
        title = self._require_str(title, "title")
        return self.mutator.activate(self._found(self.resolver.find_by_title(title)))

    @rpc("ActivateByTitleSubstring", failure=False)
    def activate_by_title_substring(self, substring: str) -> bool:
        substring = self._require_str(substring, "substring")
        return self.mutator.activate(self._found(self.resolver.find_by_title_substring(substring)))

    @rpc("ActivateByWmClass", failure=False)
    def activate_by_wm_class(self, wm_class: str) -> bool:
        wm_class = self._require_str(wm_class, "wm_class")
        return self.mutator.activate(self._found(self.resolver.find_by_wm_class(wm_class)))

    @rpc("ActivateByPid", failure=False)
    def activate_by_pid(self, pid: int) -> bool:
        if isinstance(pid, bool) or not isinstance(pid, int):
            raise InvalidArgumentError(f"invalid pid {pid!r}")
        return self.mutator.activate(self._found(self.resolver.find_by_pid(pid)))

    @rpc("Focus", failure=False)
    def focus(self, window_id: int) -> bool:
        return self.mutator.focus(self._window(window_id))

    @rpc("GetFocused", failure=NO_FOCUS)
    def get_focused(self) -> tuple[int, str, str]:
        window = self.resolver.find_focused()
        if window is None:
            return NO_FOCUS
        return (window.get_id(), window.get_title() or "", window.get_wm_class() or "")

    # -------------------------
    # geometry
    # -------------------------
    @rpc("Move", failure=False)
    def move(self, window_id: int, x: int, y: int) -> bool:
        if not validate_position(x, y):
            raise InvalidArgumentError(f"invalid coordinates ({x!r}, {y!r})")
        return self.mutator.move(self._window(window_id), x, y)

    @rpc("Resize", failure=False)
    def resize(self, window_id: int, width: int, height: int) -> bool:
        if not validate_size(width, height):
            raise InvalidArgumentError(f"invalid dimensions ({width!r}, {height!r}), must be positive")
        return self.mutator.resize(self._window(window_id), width, height)

    @rpc("MoveResize", failure=False)
    def move_resize(self, window_id: int, x: int, y: int, width: int, height: int) -> bool:
        if not validate_geometry(x, y, width, height):
            raise InvalidArgumentError(f"invalid parameters ({x!r}, {y!r}, {width!r}, {height!r})")
        return self.mutator.move_resize(self._window(window_id), x, y, width, height)

    @rpc("GetGeometry", failure=tuple(SENTINEL_RECT))
    def get_geometry(self, window_id: int) -> tuple[int, int, int, int]:
        return tuple(self.inspector.get_geometry(self._window(window_id)))

    @rpc("GetWorkarea", failure=tuple(SENTINEL_RECT))
    def get_workarea(self, monitor_index: int) -> tuple[int, int, int, int]:
        return tuple(self.inspector.get_workarea(monitor_index))

    # -------------------------
    # state
    # -------------------------
    @rpc("Minimize", failure=False)
    def minimize(self, window_id: int) -> bool:
        return self.mutator.minimize(self._window(window_id))

    @rpc("Unminimize", failure=False)
    def unminimize(self, window_id: int) -> bool:
        return self.mutator.unminimize(self._window(window_id))

    @rpc("Maximize", failure=False)
    def maximize(self, window_id: int) -> bool:
        return self.mutator.maximize(self._window(window_id))

    @rpc("Unmaximize", failure=False)
    def unmaximize(self, window_id: int) -> bool:
        return self.mutator.unmaximize(self._window(window_id))

    @rpc("Fullscreen", failure=False)
    def fullscreen(self, window_id: int) -> bool:
        return self.mutator.fullscreen(self._window(window_id))

    @rpc("Unfullscreen", failure=False)
    def unfullscreen(self, window_id: int) -> bool:
        return self.mutator.unfullscreen(self._window(window_id))

    @rpc("SetAbove", failure=False)
    def set_above(self, window_id: int, above: bool) -> bool:
        above = self._require_bool(above, "above")
        return self.mutator.set_above(self._window(window_id), above)

    @rpc("SetSticky", failure=False)
    def set_sticky(self, window_id: int, sticky: bool) -> bool:
        sticky = self._require_bool(sticky, "sticky")
        return self.mutator.set_sticky(self._window(window_id), sticky)

    @rpc("Close", failure=False)
    def close(self, window_id: int) -> bool:
        return self.mutator.close(self._window(window_id))


METHODS: dict[str, Callable] = {
    fn.rpc_name: fn for fn in vars(ServiceDispatcher).values() if hasattr(fn, "rpc_name")
}
