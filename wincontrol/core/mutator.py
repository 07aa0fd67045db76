from __future__ import annotations

import logging
from typing import Any, Callable

from wincontrol.core.backend import WindowHandle, WindowSystem
from wincontrol.core.validation import validate_geometry, validate_position, validate_size

logger = logging.getLogger(__name__)


class WindowMutator:
    """Applies commands to an already resolved window.

    Every operation returns True on success and False when the window is
    missing, the arguments are invalid, or the subsystem raises. Arguments
    are checked before the window is touched, so a rejected call has no
    effect at all.
    """

    def __init__(self, system: WindowSystem) -> None:
        self.system = system

    def _apply(self, window: WindowHandle | None, action: str, fn: Callable[[WindowHandle], Any]) -> bool:
        if window is None:
            return False
        try:
            fn(window)
        except Exception as e:
            # The window may have vanished between resolve and act.
            logger.warning(f"{action} failed on window: {e}")
            return False
        return True

    def activate(self, window: WindowHandle | None) -> bool:
        return self._apply(window, "activate", lambda w: w.activate(self.system.get_current_time()))

    def focus(self, window: WindowHandle | None) -> bool:
        return self._apply(window, "focus", lambda w: w.focus(self.system.get_current_time()))

    def move(self, window: WindowHandle | None, x: Any, y: Any) -> bool:
        if not validate_position(x, y):
            logger.info(f"move rejected: invalid coordinates ({x!r}, {y!r})")
            return False
        return self._apply(window, "move", lambda w: w.move_frame(int(x), int(y)))

    def resize(self, window: WindowHandle | None, width: Any, height: Any) -> bool:
        if not validate_size(width, height):
            logger.info(f"resize rejected: invalid dimensions ({width!r}, {height!r}), must be positive")
            return False

        def _resize(w: WindowHandle) -> None:
            rect = w.get_frame_rect()
            w.move_resize_frame(rect.x, rect.y, int(width), int(height))

        return self._apply(window, "resize", _resize)

    def move_resize(self, window: WindowHandle | None, x: Any, y: Any, width: Any, height: Any) -> bool:
        if not validate_geometry(x, y, width, height):
            logger.info(f"move_resize rejected: invalid parameters ({x!r}, {y!r}, {width!r}, {height!r})")
            return False
        return self._apply(
            window, "move_resize", lambda w: w.move_resize_frame(int(x), int(y), int(width), int(height))
        )

    def minimize(self, window: WindowHandle | None) -> bool:
        return self._apply(window, "minimize", lambda w: w.minimize())

    def unminimize(self, window: WindowHandle | None) -> bool:
        return self._apply(window, "unminimize", lambda w: w.unminimize())

    def maximize(self, window: WindowHandle | None) -> bool:
        return self._apply(window, "maximize", lambda w: w.maximize())

    def unmaximize(self, window: WindowHandle | None) -> bool:
        return self._apply(window, "unmaximize", lambda w: w.unmaximize())

    def fullscreen(self, window: WindowHandle | None) -> bool:
        return self._apply(window, "fullscreen", lambda w: w.make_fullscreen())

    def unfullscreen(self, window: WindowHandle | None) -> bool:
        return self._apply(window, "unfullscreen", lambda w: w.unmake_fullscreen())

    def set_above(self, window: WindowHandle | None, above: bool) -> bool:
        def _set_above(w: WindowHandle) -> None:
            if bool(above) == w.is_above():
                return
            if above:
                w.make_above()
            else:
                w.unmake_above()

        return self._apply(window, "set_above", _set_above)

    def set_sticky(self, window: WindowHandle | None, sticky: bool) -> bool:
        def _set_sticky(w: WindowHandle) -> None:
            if bool(sticky) == w.is_on_all_workspaces():
                return
            if sticky:
                w.stick()
            else:
                w.unstick()

        return self._apply(window, "set_sticky", _set_sticky)

    def close(self, window: WindowHandle | None) -> bool:
        return self._apply(window, "close", lambda w: w.delete(self.system.get_current_time()))
