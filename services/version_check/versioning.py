"""Helpers for comparing and classifying application versions."""

from __future__ import annotations

import re
from enum import Enum
from itertools import zip_longest

from packaging.version import InvalidVersion, Version


__all__ = [
    "VersionOrder",
    "compare_versions",
    "is_version_newer",
    "is_development_version",
]


class VersionOrder(Enum):
    """Ordering of one version relative to another."""

    LESS = -1
    EQUAL = 0
    GREATER = 1


def compare_versions(first: str, second: str) -> VersionOrder:
    """Compare ``first`` against ``second`` segment by segment.

    Versions are split on ``.`` and each segment is compared as an integer, so
    ``1.2.10`` sorts after ``1.2.3``.  A missing trailing segment counts as
    ``0`` (``1.2`` equals ``1.2.0``) and so does any segment that is not a plain
    non-negative integer.  The comparison never raises.
    """

    for left, right in zip_longest(_segments(first), _segments(second), fillvalue=0):
        if left < right:
            return VersionOrder.LESS
        if left > right:
            return VersionOrder.GREATER
    return VersionOrder.EQUAL


def is_version_newer(current_version: str, candidate: str) -> bool:
    """Return ``True`` if ``candidate`` is newer than ``current_version``."""

    return compare_versions(current_version, candidate) is VersionOrder.LESS


def is_development_version(version: str) -> bool:
    """Return ``True`` when ``version`` looks like a pre-release or dev build."""

    try:
        parsed = Version(version)
    except InvalidVersion:
        return _looks_like_development_version(version)
    return bool(parsed.is_prerelease or parsed.is_devrelease)


def _segments(version: str) -> list[int]:
    if not isinstance(version, str):
        return []
    return [_segment_value(segment) for segment in version.strip().split(".")]


def _segment_value(segment: str) -> int:
    segment = segment.strip()
    if segment.isascii() and segment.isdigit():
        return int(segment)
    return 0


def _looks_like_development_version(version: str) -> bool:
    markers = ("dev", "alpha", "beta", "rc", "pre", "preview")
    tokens = [token for token in re.split(r"[.\-+_]", (version or "").lower()) if token]
    for token in tokens:
        if any(token.startswith(marker) for marker in markers):
            return True
        if token[0] in {"a", "b"} and len(token) > 1 and token[1:].isdigit():
            return True
    return False
