"""Unit test conftest.

Provides a state machine wired to a ``MockPage`` through a real
``PageDriver``, so predicates and transitions exercise the same driver
contract a Playwright page would.
"""

import pytest

from pagenav.page import PageDriver
from pagenav.state_machine import StateMachine
from tests.unit.mocks import MockPage, at, build_ring

ALL_PAGES = ["foo", "bar", "baz", "qux", "qux1"]


@pytest.fixture
def mock_page() -> MockPage:
    """Fake browser page, initially showing nothing recognisable."""
    return MockPage()


@pytest.fixture
def machine(mock_page: MockPage) -> StateMachine:
    return StateMachine(PageDriver(mock_page))


@pytest.fixture
def ring(machine: StateMachine) -> StateMachine:
    """foo >> bar >> baz >> foo with a cost 2 default transition into foo."""
    return build_ring(machine)


@pytest.fixture
def pages(machine: StateMachine) -> StateMachine:
    """Five base states with no transitions, for composite layer tests."""
    for name in ALL_PAGES:
        machine.add_state(name, at(name))
    return machine
