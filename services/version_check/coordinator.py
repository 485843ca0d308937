"""Coordinate the release notes and required version checks for one launch."""

from __future__ import annotations

import logging
import threading
from typing import TYPE_CHECKING, Callable

from services.version_check.cache import MetadataCache
from services.version_check.constants import (
    FLOW_RELEASE_NOTES,
    FLOW_REQUIRED_VERSION,
    STRING_BODY,
    STRING_BUTTON_LATER,
    STRING_BUTTON_OK,
    STRING_BUTTON_UPDATE,
    STRING_TITLE,
)
from services.version_check.first_launch import FirstLaunchTracker
from services.version_check.models import (
    AppMetadata,
    CheckDiagnostic,
    CheckOutcome,
    MetadataQuery,
    PromptAction,
    UpdateRequirement,
)
from services.version_check.policy import UpdatePolicyEngine
from services.version_check.providers import MetadataProvider, RequirementProvider
from shared.strings import StringLookup

if TYPE_CHECKING:
    from adapters.prompt_presenter import PromptPresenter
    from adapters.url_opener import UrlOpener


_LOGGER = logging.getLogger(__name__)

DiagnosticSink = Callable[[CheckDiagnostic], None]


class CheckCycle:
    """State owned by a single :meth:`CheckCoordinator.check` invocation."""

    def __init__(self, cache: MetadataCache) -> None:
        self.cache = cache
        self.cancel_event = threading.Event()
        self.threads: list[threading.Thread] = []

    @property
    def cancelled(self) -> bool:
        return self.cancel_event.is_set()

    def cancel(self) -> None:
        self.cancel_event.set()

    def join(self, timeout: float | None = None) -> bool:
        for thread in self.threads:
            thread.join(timeout)
        return not any(thread.is_alive() for thread in self.threads)


class CheckCoordinator:
    """Run both launch-time checks against a shared per-cycle metadata cache."""

    def __init__(
        self,
        *,
        installed_version: str,
        metadata_provider: MetadataProvider,
        metadata_query: MetadataQuery,
        presenter: PromptPresenter,
        url_opener: UrlOpener,
        tracker: FirstLaunchTracker,
        strings: StringLookup,
        requirement_provider: RequirementProvider | None = None,
        requirement_url: str | None = None,
        alert_title: str = "",
        alert_body: str = "",
        policy: UpdatePolicyEngine | None = None,
        diagnostics: DiagnosticSink | None = None,
    ) -> None:
        self._installed_version = installed_version
        self._metadata_provider = metadata_provider
        self._metadata_query = metadata_query
        self._presenter = presenter
        self._url_opener = url_opener
        self._tracker = tracker
        self._strings = strings
        self._requirement_provider = requirement_provider
        self._requirement_url = requirement_url
        self._alert_title = alert_title
        self._alert_body = alert_body
        self._policy = policy or UpdatePolicyEngine()
        self._diagnostics = diagnostics
        self._lock = threading.Lock()
        self._current_cycle: CheckCycle | None = None

    @property
    def installed_version(self) -> str:
        return self._installed_version

    @property
    def current_cycle(self) -> CheckCycle | None:
        return self._current_cycle

    def check(self, *, blocking: bool = False) -> None:
        """Start a new check cycle.

        Both flows run on daemon worker threads unless ``blocking`` is set, in
        which case they run one after the other on the calling thread.  Starting a
        cycle cancels the one before it.  Failures never propagate to the caller.
        """

        cycle = CheckCycle(MetadataCache(self._metadata_provider, self._metadata_query))
        with self._lock:
            previous = self._current_cycle
            self._current_cycle = cycle
        # Only the newest cycle may still prompt.
        if previous is not None and not previous.cancelled:
            previous.cancel()
            _LOGGER.debug("Superseded the previous version check cycle")

        flows = (
            (FLOW_RELEASE_NOTES, self._release_notes_flow),
            (FLOW_REQUIRED_VERSION, self._required_version_flow),
        )
        if blocking:
            for name, flow in flows:
                self._run_flow(name, flow, cycle)
            return

        for name, flow in flows:
            thread = threading.Thread(
                target=self._run_flow,
                args=(name, flow, cycle),
                name=f"version-check-{name.replace('_', '-')}",
                daemon=True,
            )
            cycle.threads.append(thread)
        for thread in cycle.threads:
            thread.start()

    def cancel(self) -> None:
        """Turn every pending step of the current cycle into a no-op."""

        with self._lock:
            cycle = self._current_cycle
        if cycle is not None and not cycle.cancelled:
            cycle.cancel()
            _LOGGER.info("Version check cancelled")

    def wait(self, timeout: float | None = None) -> bool:
        """Join the current cycle's workers; ``True`` when all have finished."""

        with self._lock:
            cycle = self._current_cycle
        if cycle is None:
            return True
        return cycle.join(timeout)

    def _run_flow(
        self,
        name: str,
        flow: Callable[[CheckCycle], None],
        cycle: CheckCycle,
    ) -> None:
        try:
            flow(cycle)
        except Exception as exc:
            _LOGGER.exception("Unexpected error during %s check", name)
            self._emit(name, "failed", "Unexpected error", exc)

    # ------------------------------------------------------------------
    # Release notes
    # ------------------------------------------------------------------
    def _release_notes_flow(self, cycle: CheckCycle) -> None:
        version = self._installed_version
        if not self._tracker.is_first_launch(version):
            self._emit(FLOW_RELEASE_NOTES, "skipped", f"Release notes for {version} already shown")
            return

        metadata = self._get_metadata(FLOW_RELEASE_NOTES, cycle)
        if metadata is None or cycle.cancelled:
            return

        # The notes belong to the store release only when it is exactly the installed build.
        if metadata.store_version.strip() != version.strip():
            self._emit(
                FLOW_RELEASE_NOTES,
                "evaluated",
                f"Store version {metadata.store_version} does not match installed {version}",
            )
            return

        notes = metadata.release_notes.strip()
        if not notes:
            self._emit(FLOW_RELEASE_NOTES, "evaluated", f"No release notes published for {version}")
            return

        ok_action = PromptAction(self._strings.string(STRING_BUTTON_OK), is_default=True)
        chosen = self._presenter.show_prompt(version, notes, [ok_action])
        if cycle.cancelled:
            return
        if chosen is None:
            self._emit(FLOW_RELEASE_NOTES, "evaluated", "Release notes dismissed without acknowledgement")
            return

        self._tracker.mark_launched(version)
        self._emit(FLOW_RELEASE_NOTES, "evaluated", f"Release notes for {version} acknowledged")

    # ------------------------------------------------------------------
    # Required version
    # ------------------------------------------------------------------
    def _required_version_flow(self, cycle: CheckCycle) -> None:
        requirement = self._resolve_requirement()
        if cycle.cancelled:
            return

        metadata = self._get_metadata(FLOW_REQUIRED_VERSION, cycle)
        if cycle.cancelled:
            return

        outcome = self._policy.evaluate(self._installed_version, requirement, metadata)
        if not outcome.should_prompt:
            if metadata is not None:
                self._emit(FLOW_REQUIRED_VERSION, "evaluated", "No update prompt needed")
            return

        self._emit(
            FLOW_REQUIRED_VERSION,
            "evaluated",
            f"Prompting for update to {metadata.store_version if metadata else '?'} (optional={outcome.optional})",
        )
        self._present_update(outcome, cycle)

    def _resolve_requirement(self) -> UpdateRequirement:
        default = UpdateRequirement.default_for(self._installed_version)
        if not self._requirement_url or self._requirement_provider is None:
            return default

        result = self._requirement_provider.fetch(self._requirement_url)
        if result.is_err():
            _LOGGER.warning("Falling back to the default update requirement: %s", result.error)
            self._emit(FLOW_REQUIRED_VERSION, "requirement", "Requirement unavailable; using default", result.error)
            return default
        return result.unwrap()

    def _present_update(self, outcome: CheckOutcome, cycle: CheckCycle) -> None:
        title = self._alert_title or self._strings.string(STRING_TITLE)
        message = self._alert_body or self._strings.string(STRING_BODY)

        update_action = PromptAction(self._strings.string(STRING_BUTTON_UPDATE), is_default=True)
        actions: list[PromptAction] = []
        if outcome.optional:
            actions.append(PromptAction(self._strings.string(STRING_BUTTON_LATER), is_cancel=True))
        actions.append(update_action)

        chosen = self._presenter.show_prompt(title, message, actions)
        if cycle.cancelled or chosen != update_action or not outcome.store_url:
            return

        if not self._url_opener.open(outcome.store_url):
            _LOGGER.warning("No handler could open the store page %s", outcome.store_url)
            self._emit(FLOW_REQUIRED_VERSION, "open_url", f"Unable to open {outcome.store_url}")

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    def _get_metadata(self, flow: str, cycle: CheckCycle) -> AppMetadata | None:
        result = cycle.cache.get_metadata()
        if result.is_err():
            self._emit(flow, "failed", "Store metadata unavailable", result.error)
            return None
        return result.value

    def _emit(
        self,
        flow: str,
        stage: str,
        message: str,
        error: BaseException | None = None,
    ) -> None:
        _LOGGER.debug("[%s] %s: %s", flow, stage, message)
        if self._diagnostics is None:
            return
        try:
            self._diagnostics(CheckDiagnostic(flow=flow, stage=stage, message=message, error=error))
        except Exception:  # pragma: no cover - defensive guard
            _LOGGER.exception("Diagnostic sink raised while reporting %s/%s", flow, stage)


__all__ = ["CheckCoordinator", "CheckCycle", "DiagnosticSink"]
