from __future__ import annotations

import sys
from pathlib import Path

import pytest


def _ensure_project_root_on_path() -> None:
    """Guarantee the repository root is discoverable for absolute imports."""

    root = Path(__file__).resolve().parent.parent
    root_str = str(root)
    if root_str not in sys.path:
        sys.path.insert(0, root_str)

    tests_dir = root / "tests"
    tests_str = str(tests_dir)
    if tests_str not in sys.path:
        sys.path.insert(1, tests_str)


_ensure_project_root_on_path()


@pytest.fixture(autouse=True)
def _flags_path_env(monkeypatch: pytest.MonkeyPatch, tmp_path_factory: pytest.TempPathFactory):
    """Isolate first-launch flag writes so tests never touch real user data."""

    flags_dir = tmp_path_factory.mktemp("flags")
    monkeypatch.setenv("VERSION_CHECK_FLAGS_PATH", str(flags_dir / "flags.json"))
    yield


@pytest.fixture(autouse=True)
def _version_check_env(monkeypatch: pytest.MonkeyPatch, tmp_path_factory: pytest.TempPathFactory):
    """Clear environment overrides and cached configuration between tests."""

    from app.config import reset_version_check_config_cache
    from app.version import get_app_version

    for name in (
        "VERSION_CHECK_APP_VERSION",
        "VERSION_CHECK_CONFIG_PATH",
        "VERSION_CHECK_LOCAL_METADATA_DIR",
        "VERSION_CHECK_LOG_FILE",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("VERSION_CHECK_LOG_DIR", str(tmp_path_factory.mktemp("logs")))

    reset_version_check_config_cache()
    get_app_version.cache_clear()
    yield
    reset_version_check_config_cache()
    get_app_version.cache_clear()
