from __future__ import annotations

from typing import Callable

from wincontrol.core.backend import WindowHandle
from wincontrol.core.source import WindowSource

Predicate = Callable[[WindowHandle], bool]


class WindowResolver:
    """Picks at most one window out of a fresh snapshot.

    When several windows match, the first one in the subsystem's enumeration
    order wins. That order is not guaranteed to be stable or to follow
    z-order.
    """

    def __init__(self, source: WindowSource) -> None:
        self.source = source

    def find_by_predicate(self, predicate: Predicate) -> WindowHandle | None:
        for window in self.source.snapshot():
            if predicate(window):
                return window
        return None

    def find_by_id(self, window_id: int) -> WindowHandle | None:
        return self.find_by_predicate(lambda w: w.get_id() == window_id)

    def find_by_title(self, title: str) -> WindowHandle | None:
        return self.find_by_predicate(lambda w: (w.get_title() or "") == title)

    def find_by_title_substring(self, substring: str) -> WindowHandle | None:
        # Case-sensitive containment; "" matches the first window.
        return self.find_by_predicate(lambda w: substring in (w.get_title() or ""))

    def find_by_wm_class(self, wm_class: str) -> WindowHandle | None:
        return self.find_by_predicate(lambda w: (w.get_wm_class() or "") == wm_class)

    def find_by_pid(self, pid: int) -> WindowHandle | None:
        return self.find_by_predicate(lambda w: w.get_pid() == pid)

    def find_focused(self) -> WindowHandle | None:
        return self.find_by_predicate(lambda w: w.has_focus())
