from __future__ import annotations

import pytest
from pytest_bdd import scenarios


pytest_plugins = ["tests.e2e.steps.startup_check"]

pytestmark = [pytest.mark.e2e]

scenarios("startup_check.feature")
