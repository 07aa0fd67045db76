from __future__ import annotations

import pytest

from tests.fakes import FakeDesktop
from wincontrol.daemon.dispatcher import ServiceDispatcher


@pytest.fixture
def desktop() -> FakeDesktop:
    return FakeDesktop()


@pytest.fixture
def two_windows(desktop: FakeDesktop) -> FakeDesktop:
    desktop.add(100, "Editor", "Code", instance="code", pid=1100, rect=(10, 20, 800, 600))
    desktop.add(200, "Browser", "Firefox", instance="Navigator", pid=2200, rect=(900, 40, 1000, 700))
    return desktop


@pytest.fixture
def dispatcher(desktop: FakeDesktop) -> ServiceDispatcher:
    return ServiceDispatcher(desktop)
