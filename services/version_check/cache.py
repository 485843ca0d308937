"""Per-cycle memoization of remote application metadata."""

from __future__ import annotations

import logging
import threading

from services.version_check.models import AppMetadata, FetchError, MetadataQuery, NetworkError
from services.version_check.providers import MetadataProvider
from shared.result import Result


_LOGGER = logging.getLogger(__name__)


class MetadataCache:
    """Fetch metadata at most once and share the outcome with every caller.

    One instance lives for exactly one check cycle.  Callers that arrive while
    the fetch is running wait for it instead of starting another request; the
    memoized result, success or failure, is returned for the rest of the cycle.
    """

    def __init__(self, provider: MetadataProvider, query: MetadataQuery) -> None:
        self._provider = provider
        self._query = query
        self._lock = threading.Lock()
        self._done = threading.Event()
        self._fetching = False
        self._result: Result[AppMetadata, FetchError] | None = None
        self._fetch_count = 0

    @property
    def fetch_count(self) -> int:
        return self._fetch_count

    @property
    def is_populated(self) -> bool:
        return self._done.is_set()

    def get_metadata(self, timeout: float | None = None) -> Result[AppMetadata, FetchError]:
        """Return the cycle's metadata, fetching it on the first call."""

        with self._lock:
            owner = not self._fetching
            if owner:
                self._fetching = True
                self._fetch_count += 1

        if owner:
            self._fetch()
        elif not self._done.wait(timeout):
            return Result.err(NetworkError("Timed out waiting for the metadata fetch in progress"))

        assert self._result is not None
        return self._result

    def _fetch(self) -> None:
        provider_name = type(self._provider).__name__
        _LOGGER.debug("Fetching metadata from %s for %s", provider_name, self._query)
        result: Result[AppMetadata, FetchError] | None = None
        try:
            result = self._provider.fetch(self._query)
        except FetchError as exc:
            result = Result.err(exc)
        finally:
            if result is None:
                result = Result.err(NetworkError(f"Metadata provider {provider_name} failed"))
            self._result = result
            self._done.set()

        if result.is_err():
            _LOGGER.info("Metadata fetch from %s failed: %s", provider_name, result.error)
        else:
            _LOGGER.debug("Metadata fetch from %s returned %s", provider_name, result.value)


__all__ = ["MetadataCache"]
