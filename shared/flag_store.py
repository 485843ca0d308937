"""Boolean flag persistence used by the version check."""

from __future__ import annotations

import json
import logging
import os
import threading
from pathlib import Path
from typing import Any, Dict, Protocol

_ENV_FLAGS_PATH = "VERSION_CHECK_FLAGS_PATH"

logger = logging.getLogger(__name__)


class FlagStore(Protocol):
    """Interface for reading and writing persisted boolean flags."""

    def get_bool(self, key: str) -> bool:
        """Return the stored flag or ``False`` when it was never set."""

    def set_bool(self, key: str, value: bool) -> None:
        """Persist ``value`` under ``key``."""


class MemoryFlagStore:
    """Keep flags in memory for headless hosts and tests."""

    def __init__(self, initial: Dict[str, bool] | None = None) -> None:
        self._flags: Dict[str, bool] = dict(initial or {})
        self._lock = threading.Lock()

    def get_bool(self, key: str) -> bool:
        with self._lock:
            return self._flags.get(key, False)

    def set_bool(self, key: str, value: bool) -> None:
        with self._lock:
            self._flags[key] = bool(value)

    def snapshot(self) -> Dict[str, bool]:
        with self._lock:
            return dict(self._flags)


def default_flags_path() -> Path:
    """Return the configured flags path, falling back to the user home."""

    override = os.environ.get(_ENV_FLAGS_PATH)
    if override:
        return Path(override)
    return Path.home() / ".version_check" / "flags.json"


class JsonFlagStore:
    """Persist flags in a small JSON document between application launches."""

    def __init__(self, path: Path | None = None) -> None:
        self._path = path or default_flags_path()
        self._lock = threading.Lock()

    @property
    def path(self) -> Path:
        return self._path

    def get_bool(self, key: str) -> bool:
        with self._lock:
            value = self._load().get(key)
        return value is True

    def set_bool(self, key: str, value: bool) -> None:
        with self._lock:
            data = self._load()
            data[key] = bool(value)
            self._save(data)

    def _load(self) -> Dict[str, Any]:
        try:
            raw = self._path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return {}
        except OSError:
            logger.debug("Unable to read flag store %s", self._path, exc_info=True)
            return {}

        try:
            data = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("Ignoring corrupt flag store %s", self._path)
            return {}
        if not isinstance(data, dict):
            return {}
        return {key: value for key, value in data.items() if isinstance(key, str) and isinstance(value, bool)}

    def _save(self, data: Dict[str, Any]) -> None:
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            payload = json.dumps(data, indent=2, sort_keys=True) + "\n"
            self._path.write_text(payload, encoding="utf-8")
        except OSError:
            # Flag persistence is best-effort; the notes simply show again next launch.
            logger.warning("Unable to write flag store %s", self._path, exc_info=True)


__all__ = ["FlagStore", "JsonFlagStore", "MemoryFlagStore", "default_flags_path"]
