"""Navigation step definitions."""

from pytest_bdd import given, parsers, then, when

from tests.unit.mocks import MockContext

from .helpers import attempt, split_names


@given("the browser shows no known page")
def browser_shows_nothing(nav_context: MockContext) -> None:
    nav_context.page.location = None


@given(parsers.parse('the browser shows "{location}"'))
def browser_opened_at(nav_context: MockContext, location: str) -> None:
    nav_context.page.location = location


@given(parsers.parse('links to "{location}" are broken'))
def links_broken(nav_context: MockContext, location: str) -> None:
    nav_context.page.blocked.add(location)


@when(parsers.parse('the path to "{name}" is computed'))
def compute_path(nav_context: MockContext, name: str) -> None:
    nav_context.path = attempt(nav_context, nav_context.machine.find_path_to_state, name)


@when(parsers.parse('the drone ensures state "{name}"'))
def ensure_state(nav_context: MockContext, name: str) -> None:
    attempt(nav_context, nav_context.machine.ensure_state, name)


@when(parsers.parse('the drone ensures state "{name}" with {retries:d} retries'))
def ensure_state_with_retries(nav_context: MockContext, name: str, retries: int) -> None:
    attempt(nav_context, nav_context.machine.ensure_state, name, None, None, retries)


@when(parsers.parse('the drone ensures either state "{names}"'))
def ensure_either_state(nav_context: MockContext, names: str) -> None:
    attempt(nav_context, nav_context.machine.ensure_either_state, split_names(names))


@then(parsers.parse('the path is "{expected}"'))
def path_is(nav_context: MockContext, expected: str) -> None:
    """Verify the computed path, written as "a >> b, b >> c"."""
    assert nav_context.error is None, f"Path computation failed: {nav_context.error}"
    expected_path = [tuple(edge.split(" >> ")) for edge in expected.split(", ")]
    assert nav_context.path == expected_path


@then("the path is empty")
def path_is_empty(nav_context: MockContext) -> None:
    assert nav_context.error is None, f"Path computation failed: {nav_context.error}"
    assert nav_context.path == []


@then(parsers.parse('the browser shows "{location}"'))
def browser_shows(nav_context: MockContext, location: str) -> None:
    assert nav_context.page.location == location


@then(parsers.parse('the pages visited are "{locations}"'))
def pages_visited(nav_context: MockContext, locations: str) -> None:
    assert nav_context.page.visited == split_names(locations)
