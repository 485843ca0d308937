"""Version check configuration loaded from JSON resources."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from importlib import resources
from pathlib import Path
from typing import Any, Mapping

_CONFIG_RESOURCE = "app.json"
_CONFIG_PATH_ENV = "VERSION_CHECK_CONFIG_PATH"
_SECTION = "version_check"
_APP_CONFIG_CACHE: VersionCheckConfig | None = None


@dataclass(frozen=True)
class VersionCheckConfig:
    """Settings controlling how the launch-time version check runs.

    ``app_id`` takes precedence over ``bundle_id`` when both are present.
    ``alert_title`` and ``alert_body`` override the localized prompt text when
    non-empty.  ``requirement_url`` points at a ``{"version", "optional"}`` JSON
    document; when it is empty the default requirement applies.
    """

    app_id: str | None = None
    bundle_id: str | None = None
    requirement_url: str | None = None
    alert_title: str = ""
    alert_body: str = ""
    locale: str | None = None
    enabled: bool = True
    skip_development_builds: bool = False
    log_verbosity: str | None = None


def get_version_check_config() -> VersionCheckConfig:
    """Return the cached configuration."""

    global _APP_CONFIG_CACHE
    if _APP_CONFIG_CACHE is None:
        _APP_CONFIG_CACHE = load_version_check_config()
    return _APP_CONFIG_CACHE


def reset_version_check_config_cache() -> None:
    """Reset the cached configuration for subsequent reloads."""

    global _APP_CONFIG_CACHE
    _APP_CONFIG_CACHE = None


def load_version_check_config(path: str | Path | None = None) -> VersionCheckConfig:
    """Load configuration from ``path``, the env override or the bundled JSON resource."""

    data = _read_config_data(path)
    section = data.get(_SECTION) if isinstance(data, Mapping) else None
    if not isinstance(section, Mapping):
        return VersionCheckConfig()
    return VersionCheckConfig(
        app_id=_coerce_identifier(section.get("app_id")),
        bundle_id=_coerce_identifier(section.get("bundle_id")),
        requirement_url=_coerce_optional_str(section.get("requirement_url")),
        alert_title=_coerce_optional_str(section.get("alert_title")) or "",
        alert_body=_coerce_optional_str(section.get("alert_body")) or "",
        locale=_coerce_optional_str(section.get("locale")),
        enabled=_coerce_bool(section.get("enabled"), default=True),
        skip_development_builds=_coerce_bool(section.get("skip_development_builds"), default=False),
        log_verbosity=_coerce_optional_str(section.get("log_verbosity")),
    )


def _read_config_data(path: str | Path | None) -> Mapping[str, Any]:
    if path is None:
        override = os.environ.get(_CONFIG_PATH_ENV)
        if override:
            path = override
    if path is not None:
        return _load_json_from_path(Path(path).expanduser())
    return _load_default_config_data()


def _load_json_from_path(path: Path) -> Mapping[str, Any]:
    try:
        raw = path.read_text(encoding="utf-8")
    except OSError:
        return {}
    return _parse_json(raw)


def _load_default_config_data() -> Mapping[str, Any]:
    try:
        resource = resources.files(__package__).joinpath(_CONFIG_RESOURCE)
        raw = resource.read_text(encoding="utf-8")
    except (FileNotFoundError, OSError):
        return {}
    return _parse_json(raw)


def _parse_json(raw: str) -> Mapping[str, Any]:
    try:
        parsed = json.loads(raw)
    except json.JSONDecodeError:
        return {}
    if isinstance(parsed, Mapping):
        return parsed
    return {}


def _coerce_identifier(value: Any) -> str | None:
    # Store identifiers are sometimes written as bare JSON numbers.
    if isinstance(value, int) and not isinstance(value, bool):
        return str(value)
    return _coerce_optional_str(value)


def _coerce_optional_str(value: Any) -> str | None:
    if not isinstance(value, str):
        return None
    cleaned = value.strip()
    return cleaned or None


def _coerce_bool(value: Any, *, default: bool) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        normalized = value.strip().lower()
        if normalized in {"1", "true", "t", "yes", "on"}:
            return True
        if normalized in {"0", "false", "f", "no", "off"}:
            return False
    return default


__all__ = [
    "VersionCheckConfig",
    "get_version_check_config",
    "load_version_check_config",
    "reset_version_check_config_cache",
]
