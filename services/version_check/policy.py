"""Decide whether an update prompt is warranted."""

from __future__ import annotations

import logging

from services.version_check.models import AppMetadata, CheckOutcome, UpdateRequirement
from services.version_check.versioning import VersionOrder, compare_versions


_LOGGER = logging.getLogger(__name__)


class UpdatePolicyEngine:
    """Apply the required-versus-optional update policy.

    A prompt is shown only when the required version is strictly behind what
    the store publishes (a requirement that runs ahead of the store is treated
    as misconfigured) and the installed copy is strictly behind the required
    version.  With the default requirement the required version is the
    installed version itself and only the first condition applies, which turns
    the policy into an optional notice whenever a newer store release exists.
    """

    def evaluate(
        self,
        installed_version: str,
        requirement: UpdateRequirement,
        metadata: AppMetadata | None,
    ) -> CheckOutcome:
        if metadata is None:
            _LOGGER.debug("No store metadata available; skipping update prompt")
            return CheckOutcome.no_prompt()

        if requirement.is_default:
            required = installed_version
            optional = True
        else:
            required = requirement.min_version
            optional = requirement.optional

        if compare_versions(required, metadata.store_version) is not VersionOrder.LESS:
            _LOGGER.debug(
                "Required version %s is not behind store version %s",
                required,
                metadata.store_version,
            )
            return CheckOutcome.no_prompt()

        if not requirement.is_default and compare_versions(installed_version, required) is not VersionOrder.LESS:
            _LOGGER.debug(
                "Installed version %s already satisfies required version %s",
                installed_version,
                required,
            )
            return CheckOutcome.no_prompt()

        if not metadata.download_url:
            _LOGGER.warning(
                "Store version %s has no download URL; cannot offer the update",
                metadata.store_version,
            )
            return CheckOutcome.no_prompt()

        _LOGGER.info(
            "Update available: %s -> %s (required=%s, optional=%s)",
            installed_version,
            metadata.store_version,
            required,
            optional,
        )
        return CheckOutcome(
            should_prompt=True,
            optional=optional,
            store_url=metadata.download_url,
            release_notes=metadata.release_notes,
        )


__all__ = ["UpdatePolicyEngine"]
