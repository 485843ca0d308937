"""Helpers for constructing and scheduling the launch-time version check."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import TYPE_CHECKING

from adapters.url_opener import UrlOpener, WebBrowserUrlOpener
from app.config import VersionCheckConfig, get_version_check_config
from app.version import get_app_version
from services.version_check.constants import DEFAULT_STORE_COUNTRY, LOCAL_METADATA_ENV
from services.version_check.coordinator import CheckCoordinator, DiagnosticSink
from services.version_check.first_launch import FirstLaunchTracker
from services.version_check.models import ConfigError, MetadataQuery
from services.version_check.providers import (
    JsonRequirementProvider,
    LocalFolderMetadataProvider,
    MetadataProvider,
    RequirementProvider,
    StoreLookupProvider,
)
from services.version_check.versioning import is_development_version
from shared.flag_store import FlagStore, JsonFlagStore
from shared.logging_config import set_file_log_verbosity
from shared.strings import LocalizedStrings, StringLookup

if TYPE_CHECKING:
    from adapters.prompt_presenter import PromptPresenter


_LOGGER = logging.getLogger(__name__)


def country_for_locale(locale: str | None) -> str:
    """Return the store country for ``locale`` (``ja_JP`` -> ``JP``)."""

    if not locale:
        return DEFAULT_STORE_COUNTRY
    parts = locale.split(".", 1)[0].replace("-", "_").split("_")
    if len(parts) >= 2:
        region = parts[-1].strip()
        if len(region) == 2 and region.isalpha():
            return region.upper()
    return DEFAULT_STORE_COUNTRY


def resolve_metadata_query(config: VersionCheckConfig) -> MetadataQuery:
    """Select the store lookup strategy; the app identifier wins over the bundle id."""

    country = country_for_locale(config.locale)
    if config.app_id:
        return MetadataQuery(app_id=config.app_id, country=country)
    if config.bundle_id:
        return MetadataQuery(bundle_id=config.bundle_id, country=country)
    raise ConfigError("Neither app_id nor bundle_id is configured for the version check")


def _build_metadata_provider_from_env() -> tuple[MetadataProvider, bool]:
    local_dir = os.environ.get(LOCAL_METADATA_ENV)
    if local_dir:
        folder = Path(local_dir)
        if folder.exists():
            _LOGGER.info("Using local metadata source at %s", folder)
            return LocalFolderMetadataProvider(folder), True
        _LOGGER.warning("Configured local metadata directory does not exist: %s", folder)
    return StoreLookupProvider(), False


def build_check_coordinator(
    presenter: PromptPresenter,
    *,
    config: VersionCheckConfig | None = None,
    url_opener: UrlOpener | None = None,
    flag_store: FlagStore | None = None,
    strings: StringLookup | None = None,
    metadata_provider: MetadataProvider | None = None,
    requirement_provider: RequirementProvider | None = None,
    installed_version: str | None = None,
    diagnostics: DiagnosticSink | None = None,
) -> CheckCoordinator | None:
    """Construct a :class:`CheckCoordinator` for the current environment.

    Returns ``None`` when no usable store identifier is configured.
    """

    config = config or get_version_check_config()

    is_local = False
    if metadata_provider is None:
        metadata_provider, is_local = _build_metadata_provider_from_env()

    try:
        query = resolve_metadata_query(config)
    except ConfigError as exc:
        if not is_local:
            _LOGGER.warning("Version check disabled: %s", exc)
            return None
        query = MetadataQuery(country=country_for_locale(config.locale))

    if config.requirement_url and requirement_provider is None:
        requirement_provider = JsonRequirementProvider()

    return CheckCoordinator(
        installed_version=installed_version or get_app_version(),
        metadata_provider=metadata_provider,
        metadata_query=query,
        presenter=presenter,
        url_opener=url_opener or WebBrowserUrlOpener(),
        tracker=FirstLaunchTracker(flag_store or JsonFlagStore()),
        strings=strings or LocalizedStrings(config.locale),
        requirement_provider=requirement_provider,
        requirement_url=config.requirement_url,
        alert_title=config.alert_title,
        alert_body=config.alert_body,
        diagnostics=diagnostics,
    )


def schedule_startup_check(
    presenter: PromptPresenter,
    *,
    config: VersionCheckConfig | None = None,
    enabled: bool | None = None,
    blocking: bool = False,
    **kwargs,
) -> CheckCoordinator | None:
    """Kick off the launch-time check and hand the coordinator back to the host.

    The host keeps the returned coordinator so it can :meth:`~CheckCoordinator.cancel`
    the cycle when shutting down.
    """

    config = config or get_version_check_config()

    if config.log_verbosity:
        try:
            set_file_log_verbosity(config.log_verbosity)
        except ValueError:
            _LOGGER.warning("Ignoring unsupported log verbosity %r", config.log_verbosity)

    if not (config.enabled if enabled is None else enabled):
        _LOGGER.debug("Version check disabled by configuration")
        return None

    coordinator = build_check_coordinator(presenter, config=config, **kwargs)
    if coordinator is None:
        return None

    if config.skip_development_builds and is_development_version(coordinator.installed_version):
        _LOGGER.info("Skipping version check for development build %s", coordinator.installed_version)
        return None

    coordinator.check(blocking=blocking)
    return coordinator


__all__ = [
    "build_check_coordinator",
    "country_for_locale",
    "resolve_metadata_query",
    "schedule_startup_check",
]
