from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any

from .errors import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_BUS_NAME = "org.gnome.Shell.Extensions.WindowControl"
DEFAULT_OBJECT_PATH = "/org/gnome/Shell/Extensions/WindowControl"
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


@dataclass(frozen=True)
class Config:
    bus_name: str
    object_path: str
    interface_name: str
    display: str | None
    log_level: str
    replace_existing: bool


class ConfigManager:
    def __init__(self, config_dir: Path | None = None) -> None:
        self._config_dir = config_dir if config_dir is not None else Path.home() / ".config" / "window-control"

    @property
    def config_dir(self) -> Path:
        return self._config_dir

    @property
    def config_path(self) -> Path:
        return self._config_dir / "config.json"

    def get_default(self) -> Config:
        return Config(
            bus_name=DEFAULT_BUS_NAME,
            object_path=DEFAULT_OBJECT_PATH,
            interface_name=DEFAULT_BUS_NAME,
            display=None,
            log_level="INFO",
            replace_existing=False,
        )

    def load(self) -> Config:
        self._config_dir.mkdir(parents=True, exist_ok=True)

        config_path = self.config_path
        if not config_path.exists():
            config = self.get_default()
            self.save(config)
            return config

        base = self._read_json_dict(config_path)
        return Config(
            bus_name=self._require_str(base, field_name="bus_name", path=config_path),
            object_path=self._require_object_path(base, path=config_path),
            interface_name=self._require_str(base, field_name="interface_name", path=config_path),
            display=self._require_optional_str(base, field_name="display", path=config_path),
            log_level=self._require_log_level(base, path=config_path),
            replace_existing=self._require_bool(base, field_name="replace_existing", path=config_path),
        )

    def save(self, config: Config) -> None:
        self._config_dir.mkdir(parents=True, exist_ok=True)
        self._write_json(path=self.config_path, payload=asdict(config))

    def _read_json_dict(self, path: Path) -> dict[str, Any]:
        try:
            raw = path.read_text(encoding="utf-8")
        except OSError as exc:
            logger.exception("Failed to read JSON file")
            raise ConfigurationError(f"Cannot read file: {path}") from exc

        try:
            data = json.loads(raw)
        except json.JSONDecodeError as exc:
            logger.exception("Failed to parse JSON")
            raise ConfigurationError(f"Invalid JSON in file: {path}") from exc

        if not isinstance(data, dict):
            raise ConfigurationError(f"Expected a JSON object in file: {path}")

        return data

    def _write_json(self, path: Path, payload: Any) -> None:
        try:
            encoded = json.dumps(payload, ensure_ascii=False, indent=2, sort_keys=True)
            path.write_text(encoded + "\n", encoding="utf-8")
        except OSError as exc:
            logger.exception("Failed to write JSON")
            raise ConfigurationError(f"Cannot write file: {path}") from exc

    def _require_bool(self, source: dict[str, Any], field_name: str, path: Path) -> bool:
        value = source.get(field_name)
        if isinstance(value, bool):
            return value
        raise ConfigurationError(f"Field {field_name} must be bool in file: {path}")

    def _require_str(self, source: dict[str, Any], field_name: str, path: Path) -> str:
        value = source.get(field_name)
        if isinstance(value, str) and value:
            return value
        raise ConfigurationError(f"Field {field_name} must be a non-empty string in file: {path}")

    def _require_optional_str(self, source: dict[str, Any], field_name: str, path: Path) -> str | None:
        value = source.get(field_name)
        if value is None or isinstance(value, str):
            return value or None
        raise ConfigurationError(f"Field {field_name} must be a string or null in file: {path}")

    def _require_object_path(self, source: dict[str, Any], path: Path) -> str:
        value = self._require_str(source, field_name="object_path", path=path)
        if not value.startswith("/"):
            raise ConfigurationError(f"Field object_path must start with '/' in file: {path}")
        return value

    def _require_log_level(self, source: dict[str, Any], path: Path) -> str:
        value = source.get("log_level")
        if isinstance(value, str) and value.upper() in LOG_LEVELS:
            return value.upper()
        raise ConfigurationError(f"Field log_level must be one of {', '.join(LOG_LEVELS)} in file: {path}")
