"""Per-version first launch bookkeeping."""

from __future__ import annotations

import logging

from services.version_check.constants import FIRST_LAUNCH_KEY_PREFIX
from shared.flag_store import FlagStore


_LOGGER = logging.getLogger(__name__)


class FirstLaunchTracker:
    """Remember which versions have already shown their release notes."""

    def __init__(self, store: FlagStore, *, prefix: str = FIRST_LAUNCH_KEY_PREFIX) -> None:
        self._store = store
        self._prefix = prefix

    def key_for(self, version: str) -> str:
        return f"{self._prefix}{version}"

    def is_first_launch(self, version: str) -> bool:
        return not self._store.get_bool(self.key_for(version))

    def mark_launched(self, version: str) -> None:
        # Flags are only ever set; nothing in the check clears them.
        self._store.set_bool(self.key_for(version), True)
        _LOGGER.info("Recorded first launch of version %s", version)


__all__ = ["FirstLaunchTracker"]
