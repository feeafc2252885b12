"""Step definitions for declaring sites and checking errors."""

from pytest_bdd import given, parsers, then

from pagenav import errors
from tests.unit.mocks import MockContext, at, go_to

from .helpers import split_names


@given(parsers.parse('a site with pages "{names}"'))
def site_with_pages(nav_context: MockContext, names: str) -> None:
    """Declare one base state per page, recognised by the page location."""
    for name in split_names(names):
        nav_context.machine.add_state(name, at(name))


@given(parsers.parse('a site with pages "{names}" linked in a ring'))
def site_with_ring(nav_context: MockContext, names: str) -> None:
    """Declare the pages and a cost-1 link from each page to the next."""
    pages = split_names(names)
    site_with_pages(nav_context, names)
    for index, start in enumerate(pages):
        end = pages[(index + 1) % len(pages)]
        nav_context.machine.add_state_transition(start, end, go_to(end))


@given(parsers.parse('a default transition into "{name}" with cost {cost:d}'))
def default_transition(nav_context: MockContext, name: str, cost: int) -> None:
    nav_context.machine.add_default_state_transition(name, go_to(name), cost)


@given(parsers.parse('a page "{name}" that nothing links to'))
def unreachable_page(nav_context: MockContext, name: str) -> None:
    nav_context.machine.add_state(name, at(name))


@then(parsers.parse('the error is "{error_type}" mentioning "{text}"'))
def error_raised(nav_context: MockContext, error_type: str, text: str) -> None:
    """Verify the last action failed with the given error type and message."""
    assert nav_context.error is not None, "Expected an error but the action succeeded"
    assert isinstance(nav_context.error, getattr(errors, error_type)), (
        f"Expected {error_type}, got {type(nav_context.error).__name__}: {nav_context.error}"
    )
    assert text in str(nav_context.error)
