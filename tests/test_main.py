"""Daemon startup and shutdown paths."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import MagicMock

import pytest

pytest.importorskip("gi")
pytest.importorskip("Xlib")

from wincontrol.core.config import ConfigManager
from wincontrol.core.errors import SubsystemError
from wincontrol.daemon import service as service_module
from wincontrol.daemon.main import main
from wincontrol.daemon.service import WindowControlService


def test_startup_without_display_exits_with_status_1(tmp_path: Path, monkeypatch) -> None:
    """An unreachable X display ends the process with status 1, not a traceback."""
    monkeypatch.setenv("HOME", str(tmp_path))
    monkeypatch.setenv("DISPLAY", ":987")

    with pytest.raises(SystemExit) as exc:
        main()

    assert exc.value.code == 1


def test_failed_enable_releases_window_system(tmp_path: Path, monkeypatch) -> None:
    def refuse_export(dispatcher, config):
        raise SubsystemError("session bus unavailable")

    monkeypatch.setattr(service_module, "BusExporter", refuse_export)
    system = MagicMock()
    service = WindowControlService(ConfigManager(tmp_path), system=system)

    with pytest.raises(SubsystemError):
        service.run()

    system.close.assert_called_once_with()
    assert service.system is None
    assert service.dispatcher is None
