"""Unit tests for shortest-path routing."""

import asyncio

import pytest

from pagenav.errors import NoRouteError, UnknownStateError
from pagenav.states import UNKNOWN_STATE
from tests.unit.mocks import at, go_to, noop


def test_path_from_uninitialized_state(ring):
    assert asyncio.run(ring.find_path_to_state("baz")) == [
        (UNKNOWN_STATE, "foo"),
        ("foo", "bar"),
        ("bar", "baz"),
    ]


def test_default_transition_is_single_edge(ring):
    assert asyncio.run(ring.find_path_to_state("foo")) == [(UNKNOWN_STATE, "foo")]


def test_already_at_target(ring, mock_page):
    mock_page.location = "bar"
    assert asyncio.run(ring.find_path_to_state("bar")) == []


def test_path_from_known_state(ring, mock_page):
    mock_page.location = "bar"
    assert asyncio.run(ring.find_path_to_state("baz")) == [("bar", "baz")]


def test_default_transition_shortcut(ring, mock_page):
    """From bar, foo costs 2 either way round; the fallback edge is as good."""
    mock_page.location = "bar"
    path = asyncio.run(ring.find_path_to_state("foo"))
    assert ring.path_cost(path) == 2


def test_cheapest_path_wins(ring, mock_page):
    ring.add_state_transition("foo", "baz", go_to("baz"), 5)
    mock_page.location = "foo"
    path = asyncio.run(ring.find_path_to_state("baz"))
    assert path == [("foo", "bar"), ("bar", "baz")]
    assert ring.path_cost(path) == 2


def test_direct_edge_wins_when_cheaper(ring, mock_page):
    ring.add_state_transition("foo", "baz", go_to("baz"), 1.5)
    mock_page.location = "foo"
    assert asyncio.run(ring.find_path_to_state("baz")) == [("foo", "baz")]


def test_dead_end_state_uses_sentinel(ring, mock_page):
    """A recognised state with no way out routes as if the position were unknown."""
    ring.add_state("qux", at("qux"))
    mock_page.location = "qux"
    assert asyncio.run(ring.find_path_to_state("bar")) == [(UNKNOWN_STATE, "foo"), ("foo", "bar")]


def test_unknown_target(ring):
    with pytest.raises(UnknownStateError, match='Unknown state: "bird"'):
        asyncio.run(ring.find_path_to_state("bird"))


def test_no_route(ring, mock_page):
    ring.add_state("qux", at("qux"))
    mock_page.location = "bar"
    with pytest.raises(NoRouteError, match="No route exists"):
        asyncio.run(ring.find_path_to_state("qux"))


def test_no_route_without_default(machine):
    machine.add_state("foo", at("foo"))
    machine.add_state("bar", at("bar"))
    machine.add_state_transition("foo", "bar", noop)
    with pytest.raises(NoRouteError, match="no default route exists"):
        asyncio.run(machine.find_path_to_state("bar"))


def test_path_finding_is_repeatable(ring, mock_page):
    mock_page.location = "baz"
    first = asyncio.run(ring.find_path_to_state("bar"))
    assert asyncio.run(ring.find_path_to_state("bar")) == first


def test_offline_shortest_path(ring):
    assert ring.shortest_path(None, "bar") == [(UNKNOWN_STATE, "foo"), ("foo", "bar")]
    assert ring.shortest_path("baz", "bar") == [("baz", "foo"), ("foo", "bar")]


def test_offline_shortest_path_unknown_start(ring):
    with pytest.raises(UnknownStateError, match='Unknown state: "bird"'):
        ring.shortest_path("bird", "bar")
