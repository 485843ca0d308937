from __future__ import annotations

import pytest

from services.version_check import (
    FLOW_RELEASE_NOTES,
    FLOW_REQUIRED_VERSION,
    NetworkError,
    ParseError,
    UpdateRequirement,
)
from shared.flag_store import MemoryFlagStore
from shared.result import Result
from tests.unit.version_check_test_utils import (
    STORE_URL,
    BlockingMetadataProvider,
    RecordingPresenter,
    RecordingUrlOpener,
    StaticMetadataProvider,
    StaticRequirementProvider,
    make_coordinator,
    published,
)


def _stages(fixture, flow: str) -> list[str]:
    return [diagnostic.stage for diagnostic in fixture.diagnostics if diagnostic.flow == flow]


def test_optional_update_opens_store_page_when_accepted() -> None:
    fixture = make_coordinator(
        installed="1.0.0",
        provider=StaticMetadataProvider(published("1.1.0")),
    )

    fixture.coordinator.check(blocking=True)

    assert fixture.presenter.titles() == ["Update Available"]
    prompt = fixture.presenter.prompts[0]
    assert prompt.message == "A new version is available. Please update to the latest version."
    assert [action.label for action in prompt.actions] == ["Later", "Update"]
    assert prompt.actions[0].is_cancel
    assert prompt.actions[1].is_default
    assert fixture.opener.opened == [STORE_URL]


def test_choosing_later_does_not_open_store_page() -> None:
    fixture = make_coordinator(
        installed="1.0.0",
        provider=StaticMetadataProvider(published("1.1.0")),
        presenter=RecordingPresenter("cancel"),
    )

    fixture.coordinator.check(blocking=True)

    assert len(fixture.presenter.prompts) == 1
    assert fixture.opener.opened == []


def test_required_update_offers_single_action() -> None:
    requirement = StaticRequirementProvider(Result.ok(UpdateRequirement(min_version="1.2.0", optional=False)))
    fixture = make_coordinator(
        installed="1.0.0",
        provider=StaticMetadataProvider(published("1.3.0")),
        requirement_provider=requirement,
        requirement_url="https://config.example.com/requirement.json",
    )

    fixture.coordinator.check(blocking=True)

    assert requirement.urls == ["https://config.example.com/requirement.json"]
    actions = fixture.presenter.prompts[0].actions
    assert [action.label for action in actions] == ["Update"]
    assert not any(action.is_cancel for action in actions)
    assert fixture.opener.opened == [STORE_URL]


def test_requirement_failure_falls_back_to_default() -> None:
    requirement = StaticRequirementProvider(Result.err(ParseError("missing 'optional'")))
    fixture = make_coordinator(
        installed="1.0.0",
        provider=StaticMetadataProvider(published("1.1.0")),
        requirement_provider=requirement,
        requirement_url="https://config.example.com/requirement.json",
    )

    fixture.coordinator.check(blocking=True)

    assert "requirement" in _stages(fixture, FLOW_REQUIRED_VERSION)
    assert [action.label for action in fixture.presenter.prompts[0].actions] == ["Later", "Update"]


def test_requirement_provider_ignored_without_url() -> None:
    requirement = StaticRequirementProvider(Result.ok(UpdateRequirement(min_version="1.2.0", optional=False)))
    fixture = make_coordinator(
        installed="1.0.0",
        provider=StaticMetadataProvider(published("1.3.0")),
        requirement_provider=requirement,
    )

    fixture.coordinator.check(blocking=True)

    assert requirement.urls == []
    assert fixture.presenter.prompts[0].actions[0].is_cancel


def test_alert_overrides_replace_localized_text() -> None:
    fixture = make_coordinator(
        installed="1.0.0",
        provider=StaticMetadataProvider(published("1.1.0")),
        alert_title="New build",
        alert_body="Grab it now.",
    )

    fixture.coordinator.check(blocking=True)

    prompt = fixture.presenter.prompts[0]
    assert (prompt.title, prompt.message) == ("New build", "Grab it now.")


def test_prompt_uses_requested_locale() -> None:
    fixture = make_coordinator(
        installed="1.0.0",
        provider=StaticMetadataProvider(published("1.1.0")),
        locale="ja_JP",
    )

    fixture.coordinator.check(blocking=True)

    prompt = fixture.presenter.prompts[0]
    assert prompt.title != "Update Available"
    assert prompt.title != "version_check.title"


def test_url_open_failure_is_reported() -> None:
    fixture = make_coordinator(
        installed="1.0.0",
        provider=StaticMetadataProvider(published("1.1.0")),
        opener=RecordingUrlOpener(result=False),
    )

    fixture.coordinator.check(blocking=True)

    assert fixture.opener.opened == [STORE_URL]
    assert "open_url" in _stages(fixture, FLOW_REQUIRED_VERSION)


def test_release_notes_shown_once_per_version() -> None:
    provider = StaticMetadataProvider(published("1.1.0", notes="  Bug fixes and polish.  "))
    flags = MemoryFlagStore()
    fixture = make_coordinator(installed="1.1.0", provider=provider, flags=flags)

    fixture.coordinator.check(blocking=True)

    assert fixture.presenter.titles() == ["1.1.0"]
    prompt = fixture.presenter.prompts[0]
    assert prompt.message == "Bug fixes and polish."
    assert [action.label for action in prompt.actions] == ["OK"]
    assert not fixture.tracker.is_first_launch("1.1.0")

    again = make_coordinator(installed="1.1.0", provider=provider, flags=flags)
    again.coordinator.check(blocking=True)

    assert again.presenter.prompts == []
    assert "skipped" in _stages(again, FLOW_RELEASE_NOTES)


def test_release_notes_require_matching_store_version() -> None:
    fixture = make_coordinator(
        installed="1.0.0",
        provider=StaticMetadataProvider(published("1.1.0", notes="Newer notes")),
        presenter=RecordingPresenter("cancel"),
    )

    fixture.coordinator.check(blocking=True)

    assert "1.0.0" not in fixture.presenter.titles()
    assert fixture.tracker.is_first_launch("1.0.0")


@pytest.mark.parametrize(("installed", "store"), [("2.0", "2.0.0"), ("1.0.beta", "1.0.0")])
def test_release_notes_require_identical_version_strings(installed: str, store: str) -> None:
    fixture = make_coordinator(
        installed=installed,
        provider=StaticMetadataProvider(published(store, notes="Fresh")),
    )

    fixture.coordinator.check(blocking=True)

    assert fixture.presenter.titles() == []
    assert fixture.tracker.is_first_launch(installed)


def test_empty_release_notes_are_not_shown() -> None:
    fixture = make_coordinator(
        installed="1.1.0",
        provider=StaticMetadataProvider(published("1.1.0", notes="   ")),
    )

    fixture.coordinator.check(blocking=True)

    assert fixture.presenter.prompts == []
    assert fixture.tracker.is_first_launch("1.1.0")


def test_dismissed_release_notes_are_not_acknowledged() -> None:
    fixture = make_coordinator(
        installed="1.1.0",
        provider=StaticMetadataProvider(published("1.1.0", notes="Notes")),
        presenter=RecordingPresenter("dismiss"),
    )

    fixture.coordinator.check(blocking=True)

    assert len(fixture.presenter.prompts) == 1
    assert fixture.tracker.is_first_launch("1.1.0")


def test_both_flows_share_one_fetch() -> None:
    provider = StaticMetadataProvider(published("1.1.0", notes="Notes"))
    fixture = make_coordinator(installed="1.0.0", provider=provider)

    fixture.coordinator.check(blocking=True)

    assert provider.calls == 1
    assert fixture.coordinator.current_cycle.cache.fetch_count == 1


def test_each_check_starts_a_fresh_cache() -> None:
    provider = StaticMetadataProvider(published("1.0.0"))
    fixture = make_coordinator(installed="1.0.0", provider=provider)

    fixture.coordinator.check(blocking=True)
    first_cycle = fixture.coordinator.current_cycle
    fixture.coordinator.check(blocking=True)

    assert fixture.coordinator.current_cycle is not first_cycle
    assert provider.calls == 2


def test_fetch_failure_is_silent_and_reported() -> None:
    provider = StaticMetadataProvider(Result.err(NetworkError("offline")))
    fixture = make_coordinator(installed="1.0.0", provider=provider)

    fixture.coordinator.check(blocking=True)

    assert fixture.presenter.prompts == []
    assert fixture.opener.opened == []
    assert provider.calls == 1
    assert _stages(fixture, FLOW_RELEASE_NOTES) == ["failed"]
    assert _stages(fixture, FLOW_REQUIRED_VERSION) == ["failed"]
    assert all(isinstance(d.error, NetworkError) for d in fixture.diagnostics)


def test_requirement_failure_does_not_affect_release_notes() -> None:
    requirement = StaticRequirementProvider(Result.err(NetworkError("requirement host down")))
    fixture = make_coordinator(
        installed="1.1.0",
        provider=StaticMetadataProvider(published("1.1.0", notes="What's new")),
        requirement_provider=requirement,
        requirement_url="https://config.example.com/requirement.json",
    )

    fixture.coordinator.check(blocking=True)

    assert fixture.presenter.titles() == ["1.1.0"]
    assert not fixture.tracker.is_first_launch("1.1.0")
    assert fixture.opener.opened == []


def test_background_check_runs_on_worker_threads() -> None:
    provider = StaticMetadataProvider(published("1.1.0"))
    fixture = make_coordinator(installed="1.0.0", provider=provider)

    fixture.coordinator.check()

    assert fixture.coordinator.wait(5)
    threads = fixture.coordinator.current_cycle.threads
    assert sorted(thread.name for thread in threads) == [
        "version-check-release-notes",
        "version-check-required-version",
    ]
    assert all(thread.daemon for thread in threads)
    assert provider.calls == 1
    assert fixture.opener.opened == [STORE_URL]


def test_cancel_before_fetch_completes_is_a_no_op() -> None:
    provider = BlockingMetadataProvider(published("1.1.0", notes="Notes"))
    fixture = make_coordinator(installed="1.1.0", provider=provider)

    fixture.coordinator.check()
    assert provider.started.wait(5)
    fixture.coordinator.cancel()
    provider.release()

    assert fixture.coordinator.wait(5)
    assert fixture.coordinator.current_cycle.cancelled
    assert fixture.presenter.prompts == []
    assert fixture.opener.opened == []
    assert fixture.tracker.is_first_launch("1.1.0")
    assert provider.calls == 1


def test_new_check_supersedes_the_previous_cycle() -> None:
    provider = BlockingMetadataProvider(published("1.1.0"))
    fixture = make_coordinator(installed="1.0.0", provider=provider)

    fixture.coordinator.check()
    first_cycle = fixture.coordinator.current_cycle
    assert provider.started.wait(5)
    fixture.coordinator.check()
    second_cycle = fixture.coordinator.current_cycle
    fixture.coordinator.cancel()
    provider.release()

    assert first_cycle.join(5)
    assert fixture.coordinator.wait(5)
    assert first_cycle is not second_cycle
    assert first_cycle.cancelled
    assert second_cycle.cancelled
    assert fixture.presenter.prompts == []
    assert fixture.opener.opened == []


def test_cancel_while_prompt_is_open_discards_the_choice() -> None:
    class _CancellingPresenter(RecordingPresenter):
        def __init__(self) -> None:
            super().__init__()
            self.coordinator = None

        def show_prompt(self, title, message, actions):
            chosen = super().show_prompt(title, message, actions)
            self.coordinator.cancel()
            return chosen

    presenter = _CancellingPresenter()
    fixture = make_coordinator(
        installed="1.0.0",
        provider=StaticMetadataProvider(published("1.1.0")),
        presenter=presenter,
    )
    presenter.coordinator = fixture.coordinator

    fixture.coordinator.check(blocking=True)

    assert len(presenter.prompts) == 1
    assert fixture.opener.opened == []


def test_wait_without_check_returns_immediately() -> None:
    fixture = make_coordinator(installed="1.0.0", provider=StaticMetadataProvider(published("1.0.0")))

    assert fixture.coordinator.wait(0)
    fixture.coordinator.cancel()
    assert fixture.coordinator.current_cycle is None


def test_flow_errors_do_not_escape_check() -> None:
    class _ExplodingPresenter(RecordingPresenter):
        def show_prompt(self, title, message, actions):
            raise RuntimeError("display gone")

    fixture = make_coordinator(
        installed="1.1.0",
        provider=StaticMetadataProvider(published("1.1.0", notes="Notes")),
        presenter=_ExplodingPresenter(),
    )

    fixture.coordinator.check(blocking=True)

    assert "failed" in _stages(fixture, FLOW_RELEASE_NOTES)
    assert fixture.tracker.is_first_launch("1.1.0")
