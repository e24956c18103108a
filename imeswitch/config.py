"""Configuration management, JSON-based, stored in ~/.config/imeswitch/."""
import json
import logging
from pathlib import Path
from typing import Iterable, List, Optional, Union

logger = logging.getLogger(__name__)

TOGGLE_KEYS = ("shift", "ctrl", "auto")

DEFAULT_CONFIG = {
    "enabled": True,
    "delay_ms": 300,
    "pause_after_manual_switch_ms": 3000,
    "toggle_key": "auto",  # key the helper presses: shift, ctrl or auto
    "deny_list": ["plaintext", "markdown"],
    "allow_list": [],  # empty = every document kind allowed
    "log_enabled": False,
    "executable_path": "",  # empty = bundled helper
}

CONFIG_DIR = Path.home() / ".config" / "imeswitch"
CONFIG_FILE = CONFIG_DIR / "config.json"


def parse_kind_list(value: Union[str, Iterable[str], None]) -> List[str]:
    """Normalize a document-kind list.

    Accepts a list or a comma-separated string ("TEXT,Markdown").
    Entries are stripped, empty entries dropped, order kept.
    """
    if value is None:
        return []
    if isinstance(value, str):
        value = value.split(",")
    result = []
    for item in value:
        item = str(item).strip()
        if item and item not in result:
            result.append(item)
    return result


class Config:
    def __init__(self, path: Optional[Path] = None):
        self._path = Path(path) if path is not None else CONFIG_FILE
        self._data = dict(DEFAULT_CONFIG)
        self.load()

    @property
    def path(self) -> Path:
        return self._path

    def load(self):
        if self._path.exists():
            try:
                with open(self._path, "r", encoding="utf-8") as f:
                    stored = json.load(f)
                if isinstance(stored, dict):
                    self._data.update(stored)
                else:
                    logger.warning("Ignoring %s: top level is not an object", self._path)
            except (json.JSONDecodeError, IOError) as e:
                logger.warning("Failed to read %s, using defaults: %s", self._path, e)

    def save(self):
        self._path.parent.mkdir(parents=True, exist_ok=True)
        with open(self._path, "w", encoding="utf-8") as f:
            json.dump(self._data, f, indent=2, ensure_ascii=False)

    def get(self, key, default=None):
        return self._data.get(key, default)

    def set(self, key, value):
        self._data[key] = value
        self.save()

    @property
    def enabled(self) -> bool:
        return bool(self._data["enabled"])

    @enabled.setter
    def enabled(self, val):
        self._data["enabled"] = bool(val)
        self.save()

    @property
    def delay_ms(self) -> int:
        return max(int(self._data.get("delay_ms", 300)), 0)

    @delay_ms.setter
    def delay_ms(self, val):
        self._data["delay_ms"] = max(int(val), 0)
        self.save()

    @property
    def pause_after_manual_switch_ms(self) -> int:
        return max(int(self._data.get("pause_after_manual_switch_ms", 3000)), 0)

    @pause_after_manual_switch_ms.setter
    def pause_after_manual_switch_ms(self, val):
        self._data["pause_after_manual_switch_ms"] = max(int(val), 0)
        self.save()

    @property
    def toggle_key(self) -> str:
        key = str(self._data.get("toggle_key", "auto")).strip().lower()
        if key not in TOGGLE_KEYS:
            logger.warning("Unknown toggle_key %r, falling back to 'auto'", key)
            return "auto"
        return key

    @toggle_key.setter
    def toggle_key(self, val):
        key = str(val).strip().lower()
        if key not in TOGGLE_KEYS:
            raise ValueError(f"toggle_key must be one of {', '.join(TOGGLE_KEYS)}")
        self._data["toggle_key"] = key
        self.save()

    @property
    def deny_list(self) -> List[str]:
        return parse_kind_list(self._data.get("deny_list"))

    @deny_list.setter
    def deny_list(self, val):
        self._data["deny_list"] = parse_kind_list(val)
        self.save()

    @property
    def allow_list(self) -> List[str]:
        return parse_kind_list(self._data.get("allow_list"))

    @allow_list.setter
    def allow_list(self, val):
        self._data["allow_list"] = parse_kind_list(val)
        self.save()

    @property
    def log_enabled(self) -> bool:
        return bool(self._data.get("log_enabled", False))

    @log_enabled.setter
    def log_enabled(self, val):
        self._data["log_enabled"] = bool(val)
        self.save()

    @property
    def executable_path(self) -> str:
        return str(self._data.get("executable_path") or "").strip()

    @executable_path.setter
    def executable_path(self, val):
        self._data["executable_path"] = str(val or "").strip()
        self.save()

    def is_allowed(self, document_kind: str) -> bool:
        """Check whether automatic switching may run for a document kind.

        The deny list wins over the allow list; an empty allow list
        allows everything not denied.
        """
        if document_kind in self.deny_list:
            return False
        allow = self.allow_list
        if allow and document_kind not in allow:
            return False
        return True
