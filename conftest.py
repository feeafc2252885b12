"""Root conftest.py - Auto-discover and register step definitions for pytest-bdd."""

from pathlib import Path

import pytest

from tests.unit.mocks import MockContext

STEP_DEFS_DIR = Path(__file__).parent / "tests" / "step_defs"


def _discover_step_definition_modules() -> list[str]:
    """Find every step definition module in tests/step_defs/.

    Modules are registered as pytest plugins so the step fixtures they define
    are visible to every feature, wherever the scenario test module lives.
    """
    return [
        f"tests.step_defs.{step_file.stem}"
        for step_file in sorted(STEP_DEFS_DIR.glob("*.py"))
        if step_file.stem not in ("__init__", "helpers")
    ]


pytest_plugins = _discover_step_definition_modules()


@pytest.fixture
def nav_context() -> MockContext:
    """Fresh site, fake page and state machine for each scenario."""
    return MockContext()
