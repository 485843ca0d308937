"""Localized string lookup backed by bundled JSON tables."""

from __future__ import annotations

import json
import logging
from importlib import resources
from typing import Mapping, Protocol

_LOCALES_PACKAGE = "shared.locales"
_FALLBACK_LANGUAGE = "en"

logger = logging.getLogger(__name__)


class StringLookup(Protocol):
    """Interface for resolving user-facing strings by key."""

    def string(self, key: str) -> str:
        """Return the text for ``key``."""


def language_for_locale(locale: str | None) -> str:
    """Return the language part of a locale such as ``ja_JP`` or ``en-GB``."""

    if not locale:
        return _FALLBACK_LANGUAGE
    language = locale.replace("-", "_").split("_", 1)[0].split(".", 1)[0].strip().lower()
    return language or _FALLBACK_LANGUAGE


class LocalizedStrings:
    """Resolve strings for an explicit locale, falling back to English."""

    def __init__(self, locale: str | None = None, *, overrides: Mapping[str, str] | None = None) -> None:
        self._language = language_for_locale(locale)
        self._table = _load_table(self._language)
        self._fallback = self._table if self._language == _FALLBACK_LANGUAGE else _load_table(_FALLBACK_LANGUAGE)
        self._overrides = dict(overrides or {})

    @property
    def language(self) -> str:
        return self._language

    def string(self, key: str) -> str:
        for table in (self._overrides, self._table, self._fallback):
            value = table.get(key)
            if value:
                return value
        logger.debug("No localized string for %s (language=%s)", key, self._language)
        return key


def _load_table(language: str) -> dict[str, str]:
    try:
        resource = resources.files(_LOCALES_PACKAGE).joinpath(f"{language}.json")
        raw = resource.read_text(encoding="utf-8")
    except (FileNotFoundError, OSError):
        return {}
    try:
        data = json.loads(raw)
    except json.JSONDecodeError:
        logger.warning("Ignoring malformed string table for %s", language)
        return {}
    if not isinstance(data, dict):
        return {}
    return {key: value for key, value in data.items() if isinstance(key, str) and isinstance(value, str)}


__all__ = ["LocalizedStrings", "StringLookup", "language_for_locale"]
