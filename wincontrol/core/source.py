from __future__ import annotations

import logging

from wincontrol.core.backend import WindowHandle, WindowSystem
from wincontrol.core.records import WindowType

logger = logging.getLogger(__name__)


class WindowSource:
    """Reads the live set of normal top-level windows.

    Every call re-enumerates the subsystem; nothing is cached between calls.
    """

    def __init__(self, system: WindowSystem) -> None:
        self.system = system

    def snapshot(self) -> list[WindowHandle]:
        try:
            actors = list(self.system.get_window_actors())
        except Exception as e:
            logger.debug(f"Window enumeration failed: {e}")
            return []

        windows: list[WindowHandle] = []
        for actor in actors:
            window = self._normal_window(actor)
            if window is not None:
                windows.append(window)

        logger.debug(f"snapshot(): found {len(actors)} actors, {len(windows)} normal windows")
        return windows

    def _normal_window(self, actor) -> WindowHandle | None:
        # A single unreadable actor is skipped, not fatal to the snapshot.
        try:
            window = actor.get_window()
            if window is None:
                return None
            if window.get_window_type() != WindowType.NORMAL:
                return None
            return window
        except Exception as e:
            logger.debug(f"Skipping unreadable window actor: {e}")
            return None
