from __future__ import annotations

import logging
import signal

import gi

gi.require_version("GLib", "2.0")
from gi.repository import GLib

from wincontrol.core.backend import WindowSystem
from wincontrol.core.config import ConfigManager
from wincontrol.core.x11 import X11WindowSystem
from wincontrol.daemon.bus import BusExporter
from wincontrol.daemon.dispatcher import ServiceDispatcher

logger = logging.getLogger(__name__)


class WindowControlService:
    def __init__(self, config_manager: ConfigManager | None = None, system: WindowSystem | None = None) -> None:
        self.config_manager = config_manager or ConfigManager()
        self.config = self.config_manager.load()
        self.system = system
        self.dispatcher: ServiceDispatcher | None = None
        self.exporter: BusExporter | None = None
        self._loop = GLib.MainLoop()

    def enable(self) -> None:
        logger.info("Enabling window control service...")
        if self.system is None:
            self.system = X11WindowSystem(self.config.display)
        self.dispatcher = ServiceDispatcher(self.system)
        self.exporter = BusExporter(self.dispatcher, self.config)
        self.exporter.export()
        logger.info("Window control service enabled")

    def disable(self) -> None:
        logger.info("Disabling window control service...")
        if self.exporter is not None:
            try:
                self.exporter.unexport()
            except Exception as e:
                logger.error(f"Failed to unregister D-Bus service: {e}")
            self.exporter = None
        self.dispatcher = None
        if self.system is not None:
            self.system.close()
            self.system = None
        logger.info("Window control service disabled")

    def run(self) -> None:
        logger.info("Starting window control service...")

        try:
            self.enable()
        except Exception:
            self.disable()
            raise

        sources = [
            GLib.unix_signal_add(GLib.PRIORITY_HIGH, sig, self._on_stop_signal)
            for sig in (signal.SIGINT, signal.SIGTERM)
        ]
        sources.append(GLib.unix_signal_add(GLib.PRIORITY_HIGH, signal.SIGHUP, self._on_reload_signal))
        try:
            self._loop.run()
        finally:
            for source_id in sources:
                GLib.source_remove(source_id)
            self.disable()
            logger.info("Service shutdown complete.")

    def stop(self) -> None:
        logger.info("Stopping service...")
        if self._loop.is_running():
            self._loop.quit()

    def reload_config(self) -> None:
        logger.info("Reloading configuration...")
        try:
            self.config = self.config_manager.load()
            logging.getLogger().setLevel(self.config.log_level)
            # bus name and object path are bound at export time
            logger.info("Configuration reloaded successfully.")
        except Exception as e:
            logger.error(f"Failed to reload config: {e}")

    def _on_stop_signal(self) -> bool:
        self.stop()
        return GLib.SOURCE_CONTINUE

    def _on_reload_signal(self) -> bool:
        self.reload_config()
        return GLib.SOURCE_CONTINUE
