from __future__ import annotations

"""Installed application version resolution."""

from functools import lru_cache
import os
import subprocess
from importlib import resources

_FALLBACK_VERSION = "0.0.0-dev"
_VERSION_ENV = "VERSION_CHECK_APP_VERSION"


def _read_version_file() -> str | None:
    try:
        text = resources.files("app").joinpath("VERSION").read_text(encoding="utf-8")
    except (FileNotFoundError, ModuleNotFoundError, NotADirectoryError):
        return None
    version = text.strip()
    return version or None


def _version_from_env() -> str | None:
    env_version = os.environ.get(_VERSION_ENV)
    if not env_version:
        return None
    return _normalize(env_version)


def _version_from_git() -> str | None:
    try:
        output = subprocess.check_output(
            ["git", "describe", "--tags", "--abbrev=0"],
            stderr=subprocess.DEVNULL,
            text=True,
        )
    except (OSError, subprocess.CalledProcessError):
        return None
    return _normalize(output.strip()) or None


def _normalize(raw_version: str) -> str:
    version = raw_version.strip()
    if version[:1] in {"v", "V"}:
        version = version[1:]
    return version


@lru_cache(maxsize=1)
def get_app_version() -> str:
    """Return the installed application version.

    The order of precedence is:
    1. The ``VERSION_CHECK_APP_VERSION`` environment variable.
    2. The ``VERSION`` file packaged with the app.
    3. The latest ``git`` tag when running from a source checkout.
    4. A fallback development version string.
    """

    for resolver in (_version_from_env, _read_version_file, _version_from_git):
        version = resolver()
        if version:
            return version
    return _FALLBACK_VERSION


__all__ = ["get_app_version"]
