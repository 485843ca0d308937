"""Metadata and requirement provider implementations."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Protocol
from urllib.error import HTTPError, URLError
from urllib.parse import quote, urlparse
from urllib.request import urlopen

from services.version_check.constants import (
    LOCAL_METADATA_FILENAME,
    REQUEST_TIMEOUT_SECONDS,
    REQUIREMENT_OPTIONAL_KEY,
    REQUIREMENT_VERSION_KEY,
    STORE_LOOKUP_BY_BUNDLE_ID_URL,
    STORE_LOOKUP_BY_ID_URL,
    STORE_RELEASE_NOTES_KEY,
    STORE_RESULTS_KEY,
    STORE_URL_KEY,
    STORE_VERSION_KEY,
)
from services.version_check.models import (
    AppMetadata,
    ConfigError,
    FetchError,
    MetadataQuery,
    NetworkError,
    NotFoundError,
    ParseError,
    UpdateRequirement,
)
from shared.result import Result


_LOGGER = logging.getLogger(__name__)

_ALLOWED_REQUIREMENT_SCHEMES = {"http", "https", "file"}


class MetadataProvider(Protocol):
    """Protocol describing remote metadata sources."""

    def fetch(self, query: MetadataQuery) -> Result[AppMetadata, FetchError]:
        """Return the published metadata matching ``query``."""


class RequirementProvider(Protocol):
    """Protocol describing minimum-version policy sources."""

    def fetch(self, url: str) -> Result[UpdateRequirement, FetchError | ConfigError]:
        """Return the requirement published at ``url``."""


class StoreLookupProvider:
    """Query the store lookup API by app identifier or bundle identifier."""

    def __init__(
        self,
        *,
        by_id_url: str = STORE_LOOKUP_BY_ID_URL,
        by_bundle_id_url: str = STORE_LOOKUP_BY_BUNDLE_ID_URL,
        timeout: float = REQUEST_TIMEOUT_SECONDS,
    ) -> None:
        self._by_id_url = by_id_url
        self._by_bundle_id_url = by_bundle_id_url
        self._timeout = timeout

    def lookup_url(self, query: MetadataQuery) -> str:
        identifier = query.identifier
        if not identifier:
            raise ConfigError("No app identifier or bundle identifier configured")
        template = self._by_id_url if query.uses_app_id else self._by_bundle_id_url
        return template.format(
            country=quote(query.country.lower(), safe=""),
            identifier=quote(identifier, safe=""),
        )

    def fetch(self, query: MetadataQuery) -> Result[AppMetadata, FetchError]:
        try:
            url = self.lookup_url(query)
        except ConfigError as exc:
            return Result.err(NotFoundError(str(exc)))

        payload = _request_json(url, self._timeout)
        if payload.is_err():
            return Result.err(payload.error)

        data = payload.value
        if not isinstance(data, dict):
            return Result.err(ParseError(f"Store lookup returned {type(data).__name__}, expected an object"))
        results = data.get(STORE_RESULTS_KEY)
        if not isinstance(results, list):
            return Result.err(ParseError("Store lookup response has no results list"))
        if not results:
            return Result.err(NotFoundError(f"Store has no entry for {query.identifier}"))
        entry = results[0]
        if not isinstance(entry, dict):
            return Result.err(ParseError("Store lookup result is not an object"))

        version = _clean_string(entry.get(STORE_VERSION_KEY))
        if version is None:
            return Result.err(ParseError("Store lookup result is missing a version"))

        metadata = AppMetadata(
            store_version=version,
            download_url=_clean_string(entry.get(STORE_URL_KEY)) or "",
            release_notes=_clean_string(entry.get(STORE_RELEASE_NOTES_KEY)) or "",
        )
        _LOGGER.info("Store lists version %s for %s", metadata.store_version, query.identifier)
        return Result.ok(metadata)


class LocalFolderMetadataProvider:
    """Serve metadata from a local directory for testing."""

    def __init__(self, folder: Path) -> None:
        self._folder = Path(folder)

    def fetch(self, query: MetadataQuery) -> Result[AppMetadata, FetchError]:
        metadata_path = self._folder / LOCAL_METADATA_FILENAME
        if not metadata_path.exists():
            return Result.err(NotFoundError(f"Local metadata missing: {metadata_path}"))
        try:
            data = json.loads(metadata_path.read_text(encoding="utf-8"))
        except OSError as exc:
            return Result.err(NetworkError(f"Failed to read local metadata: {exc}"))
        except json.JSONDecodeError as exc:
            return Result.err(ParseError(f"Local metadata is not valid JSON: {exc}"))

        if not isinstance(data, dict):
            return Result.err(ParseError("Local metadata must be a JSON object"))
        version = _clean_string(data.get("version"))
        if version is None:
            return Result.err(ParseError("Local metadata is missing a version"))

        _LOGGER.info("Local metadata at %s supplies version %s", metadata_path, version)
        return Result.ok(
            AppMetadata(
                store_version=version,
                download_url=_clean_string(data.get("download_url")) or "",
                release_notes=_clean_string(data.get("release_notes") or data.get("notes")) or "",
            )
        )


class JsonRequirementProvider:
    """Read ``{"version": str, "optional": bool}`` from a URL."""

    def __init__(self, *, timeout: float = REQUEST_TIMEOUT_SECONDS) -> None:
        self._timeout = timeout

    def fetch(self, url: str) -> Result[UpdateRequirement, FetchError | ConfigError]:
        try:
            validate_requirement_url(url)
        except ConfigError as exc:
            return Result.err(exc)

        payload = _request_json(url, self._timeout)
        if payload.is_err():
            return Result.err(payload.error)

        data = payload.value
        if not isinstance(data, dict):
            return Result.err(ParseError("Requirement document must be a JSON object"))
        version = data.get(REQUIREMENT_VERSION_KEY)
        optional = data.get(REQUIREMENT_OPTIONAL_KEY)
        if not isinstance(version, str) or not version.strip():
            return Result.err(ParseError("Requirement document is missing 'version'"))
        if not isinstance(optional, bool):
            return Result.err(ParseError("Requirement document is missing 'optional'"))

        _LOGGER.info("Required version %s (optional=%s) from %s", version.strip(), optional, url)
        return Result.ok(UpdateRequirement(min_version=version.strip(), optional=optional))


def validate_requirement_url(url: str) -> None:
    """Raise :class:`ConfigError` unless ``url`` is an absolute http(s) or file URL."""

    if not isinstance(url, str) or not url.strip():
        raise ConfigError("Requirement URL is empty")
    parsed = urlparse(url.strip())
    if parsed.scheme.lower() not in _ALLOWED_REQUIREMENT_SCHEMES:
        raise ConfigError(f"Requirement URL has unsupported scheme: {url!r}")
    if parsed.scheme.lower() != "file" and not parsed.netloc:
        raise ConfigError(f"Requirement URL has no host: {url!r}")


def _request_json(url: str, timeout: float) -> Result[object, FetchError]:
    try:
        with urlopen(url, timeout=timeout) as response:  # nosec - configured HTTPS endpoints
            raw = response.read()
    except HTTPError as exc:
        if exc.code == 404:
            return Result.err(NotFoundError(f"{url} returned HTTP 404"))
        return Result.err(NetworkError(f"{url} returned HTTP {exc.code}"))
    except (OSError, URLError, ValueError) as exc:
        _LOGGER.debug("Failed to query %s: %s", url, exc)
        return Result.err(NetworkError(f"Failed to query {url}: {exc}"))

    try:
        return Result.ok(json.loads(raw))
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        return Result.err(ParseError(f"{url} did not return valid JSON: {exc}"))


def _clean_string(raw: object) -> str | None:
    if not isinstance(raw, str):
        return None
    cleaned = raw.strip()
    return cleaned or None


__all__ = [
    "JsonRequirementProvider",
    "LocalFolderMetadataProvider",
    "MetadataProvider",
    "RequirementProvider",
    "StoreLookupProvider",
    "validate_requirement_url",
]
