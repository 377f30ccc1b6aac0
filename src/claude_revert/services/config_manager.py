"""Application configuration manager backed by a JSON settings file."""

import logging
from pathlib import Path

import orjson

from claude_revert.utils.atomic_write import atomic_write_bytes

logger = logging.getLogger(__name__)

DEFAULT_SETTINGS_PATH = Path.home() / ".config" / "claude-revert" / "settings.json"

# Default values
DEFAULTS = {
    "general/projectsRoot": "~/.claude/projects",
    "general/previewLength": 100,
    "parser/maxLineSize": 10 * 1024 * 1024,
    "revert/ledgerPath": "~/.local/share/claude-revert/reverts.db",
    "revert/fsync": True,
}


class ConfigManager:
    """Centralized application settings with typed accessors."""

    def __init__(self, settings_path: str | Path | None = None):
        self._path = Path(settings_path) if settings_path else DEFAULT_SETTINGS_PATH
        self._values: dict = self._load()

    @property
    def settings_path(self) -> Path:
        return self._path

    def _load(self) -> dict:
        try:
            raw = orjson.loads(self._path.read_bytes())
        except FileNotFoundError:
            return {}
        except (OSError, orjson.JSONDecodeError) as e:
            logger.warning("Ignoring unreadable settings file %s: %s", self._path, e)
            return {}
        if not isinstance(raw, dict):
            logger.warning("Ignoring settings file %s: not a JSON object", self._path)
            return {}
        return raw

    def _value(self, key: str, fallback):
        return self._values.get(key, DEFAULTS.get(key, fallback))

    def get_string(self, key: str) -> str:
        return str(self._value(key, ""))

    def get_int(self, key: str) -> int:
        val = self._value(key, 0)
        try:
            return int(val)
        except (ValueError, TypeError):
            return DEFAULTS.get(key, 0)

    def get_bool(self, key: str) -> bool:
        val = self._value(key, False)
        if isinstance(val, bool):
            return val
        if isinstance(val, str):
            return val.lower() in ("true", "1", "yes")
        return bool(val)

    def get_path(self, key: str) -> Path:
        return Path(self.get_string(key)).expanduser()

    def set_string(self, key: str, value: str):
        self._set(key, value)

    def set_int(self, key: str, value: int):
        self._set(key, value)

    def set_bool(self, key: str, value: bool):
        self._set(key, value)

    def _set(self, key: str, value):
        self._values[key] = value
        self._save()

    def _save(self):
        self._path.parent.mkdir(parents=True, exist_ok=True)
        atomic_write_bytes(
            self._path,
            orjson.dumps(self._values, option=orjson.OPT_INDENT_2 | orjson.OPT_SORT_KEYS),
        )
