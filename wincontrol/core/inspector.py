from __future__ import annotations

import logging

from wincontrol.core.backend import WindowHandle, WindowSystem
from wincontrol.core.records import (
    ALL_WORKSPACES,
    SENTINEL_RECT,
    MonitorRecord,
    Rect,
    WindowRecord,
)
from wincontrol.core.validation import is_index

logger = logging.getLogger(__name__)


class Inspector:
    """Projects live windows and monitor topology into serializable records."""

    def __init__(self, system: WindowSystem) -> None:
        self.system = system

    def project(self, window: WindowHandle) -> WindowRecord:
        workspace_index = self._workspace_index(window)
        return WindowRecord(
            id=window.get_id(),
            title=window.get_title() or "",
            wm_class=window.get_wm_class() or "",
            wm_class_instance=window.get_wm_class_instance() or "",
            sandboxed_app_id=window.get_sandboxed_app_id() or "",
            gtk_application_id=window.get_gtk_application_id() or "",
            has_focus=bool(window.has_focus()),
            is_hidden=bool(window.is_hidden()),
            is_minimized=bool(window.is_minimized()),
            is_maximized=bool(window.is_maximized()),
            is_fullscreen=bool(window.is_fullscreen()),
            is_above=bool(window.is_above()),
            is_on_all_workspaces=workspace_index == ALL_WORKSPACES,
            is_skip_taskbar=bool(window.is_skip_taskbar()),
            workspace_index=workspace_index,
            monitor_index=window.get_monitor(),
            pid=window.get_pid() or 0,
            window_type=int(window.get_window_type()),
            frame_rect=Rect(*window.get_frame_rect()),
        )

    def project_compact(self, window: WindowHandle) -> tuple:
        return (
            window.get_id(),
            window.get_title() or "",
            window.get_wm_class() or "",
            window.get_wm_class_instance() or "",
            window.get_sandboxed_app_id() or "",
            bool(window.has_focus()),
            self._workspace_index(window),
            window.get_monitor(),
            window.get_pid() or 0,
            int(window.get_window_type()),
        )

    def _workspace_index(self, window: WindowHandle) -> int:
        # A window with no workspace of its own is reported as on all of them,
        # keeping workspace_index == -1 and is_on_all_workspaces in agreement.
        if window.is_on_all_workspaces():
            return ALL_WORKSPACES
        index = window.get_workspace_index()
        return ALL_WORKSPACES if index is None else index

    def get_geometry(self, window: WindowHandle | None) -> Rect:
        if window is None:
            return SENTINEL_RECT
        return Rect(*window.get_frame_rect())

    def list_monitors(self) -> list[MonitorRecord]:
        count = self.system.get_n_monitors()
        primary = self.system.get_primary_monitor()
        monitors: list[MonitorRecord] = []
        for i in range(count):
            geometry = self.system.get_monitor_geometry(i)
            monitors.append(
                MonitorRecord(
                    index=i,
                    x=geometry.x,
                    y=geometry.y,
                    width=geometry.width,
                    height=geometry.height,
                    is_primary=i == primary,
                    scale=float(self.system.get_monitor_scale(i)),
                    connector=self.system.get_monitor_connector(i) or "",
                )
            )
        return monitors

    def get_workarea(self, monitor_index: int) -> Rect:
        count = self.system.get_n_monitors()
        if not is_index(monitor_index) or monitor_index >= count:
            logger.info(f"Invalid monitor index {monitor_index!r} (valid: 0-{count - 1})")
            return SENTINEL_RECT
        return Rect(*self.system.get_work_area_for_monitor(monitor_index))
