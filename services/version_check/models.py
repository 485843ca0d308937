"""Data models and errors used by the version check service."""

from __future__ import annotations

from dataclasses import dataclass

from services.version_check.constants import DEFAULT_STORE_COUNTRY


class VersionCheckError(RuntimeError):
    """Base class for failures raised while checking versions."""


class FetchError(VersionCheckError):
    """Raised when remote metadata cannot be obtained."""


class NetworkError(FetchError):
    """The transport failed before a response could be read."""


class ParseError(FetchError):
    """The response was malformed or missing required fields."""


class NotFoundError(FetchError):
    """The provider had no entry matching the query."""


class ConfigError(VersionCheckError):
    """No usable identifier was configured or a URL was malformed."""


@dataclass(frozen=True)
class AppMetadata:
    """Release metadata published for the application."""

    store_version: str
    download_url: str
    release_notes: str = ""


@dataclass(frozen=True)
class UpdateRequirement:
    """Minimum version policy applied to the installed copy."""

    min_version: str
    optional: bool
    is_default: bool = False

    @classmethod
    def default_for(cls, installed_version: str) -> "UpdateRequirement":
        return cls(min_version=installed_version, optional=True, is_default=True)


@dataclass(frozen=True)
class CheckOutcome:
    """Result of evaluating the update policy."""

    should_prompt: bool
    optional: bool = True
    store_url: str | None = None
    release_notes: str | None = None

    @classmethod
    def no_prompt(cls) -> "CheckOutcome":
        return cls(should_prompt=False)


@dataclass(frozen=True)
class MetadataQuery:
    """Selector used to look up store metadata."""

    app_id: str | None = None
    bundle_id: str | None = None
    country: str = DEFAULT_STORE_COUNTRY

    @property
    def uses_app_id(self) -> bool:
        return bool(self.app_id)

    @property
    def identifier(self) -> str | None:
        return self.app_id or self.bundle_id or None


@dataclass(frozen=True)
class PromptAction:
    """A single button offered by a prompt."""

    label: str
    is_default: bool = False
    is_cancel: bool = False


@dataclass(frozen=True)
class CheckDiagnostic:
    """Structured event describing what a check flow decided or why it failed."""

    flow: str
    stage: str
    message: str
    error: BaseException | None = None
