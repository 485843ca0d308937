"""Public API for the launch-time version check package."""

from __future__ import annotations

from services.version_check.models import (
    AppMetadata,
    CheckDiagnostic,
    CheckOutcome,
    ConfigError,
    FetchError,
    MetadataQuery,
    NetworkError,
    NotFoundError,
    ParseError,
    PromptAction,
    UpdateRequirement,
    VersionCheckError,
)
from services.version_check.constants import (
    FIRST_LAUNCH_KEY_PREFIX,
    FLOW_RELEASE_NOTES,
    FLOW_REQUIRED_VERSION,
    LOCAL_METADATA_ENV,
    STORE_LOOKUP_BY_BUNDLE_ID_URL,
    STORE_LOOKUP_BY_ID_URL,
)
from services.version_check.versioning import (
    VersionOrder,
    compare_versions,
    is_development_version,
    is_version_newer,
)
from services.version_check.providers import (
    JsonRequirementProvider,
    LocalFolderMetadataProvider,
    MetadataProvider,
    RequirementProvider,
    StoreLookupProvider,
)
from services.version_check.cache import MetadataCache
from services.version_check.policy import UpdatePolicyEngine
from services.version_check.first_launch import FirstLaunchTracker
from services.version_check.coordinator import CheckCoordinator, CheckCycle
from services.version_check.builder import (
    build_check_coordinator,
    country_for_locale,
    resolve_metadata_query,
    schedule_startup_check,
)

__all__ = [
    "FIRST_LAUNCH_KEY_PREFIX",
    "FLOW_RELEASE_NOTES",
    "FLOW_REQUIRED_VERSION",
    "LOCAL_METADATA_ENV",
    "STORE_LOOKUP_BY_BUNDLE_ID_URL",
    "STORE_LOOKUP_BY_ID_URL",
    "AppMetadata",
    "CheckCoordinator",
    "CheckCycle",
    "CheckDiagnostic",
    "CheckOutcome",
    "ConfigError",
    "FetchError",
    "FirstLaunchTracker",
    "JsonRequirementProvider",
    "LocalFolderMetadataProvider",
    "MetadataCache",
    "MetadataProvider",
    "MetadataQuery",
    "NetworkError",
    "NotFoundError",
    "ParseError",
    "PromptAction",
    "RequirementProvider",
    "StoreLookupProvider",
    "UpdatePolicyEngine",
    "UpdateRequirement",
    "VersionCheckError",
    "VersionOrder",
    "build_check_coordinator",
    "compare_versions",
    "country_for_locale",
    "is_development_version",
    "is_version_newer",
    "resolve_metadata_query",
    "schedule_startup_check",
]
