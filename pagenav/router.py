"""Current-state detection and shortest-path routing."""

from __future__ import annotations

import heapq
import logging
import math
from typing import TYPE_CHECKING, Any, Optional

from pagenav.errors import NoRouteError, UnknownStateError
from pagenav.states import UNKNOWN_STATE, StateRegistry
from pagenav.transitions import TransitionGraph

if TYPE_CHECKING:
    from pagenav.page import PageDriver

logger = logging.getLogger(__name__)

Path = list[tuple[str, str]]


class Router:
    """Owns the cached current state and computes paths over the graph.

    The cache is only a hint for the fast path of ``where_am_i``; it is
    replaced whenever a transition lands somewhere unexpected, so callers
    must re-query after a failed traversal before assuming a position.
    """

    def __init__(self, states: StateRegistry, graph: TransitionGraph):
        self._states = states
        self._graph = graph
        self.current_state: Optional[str] = None

    async def where_am_i(
        self, driver: PageDriver, params: Optional[dict[str, Any]] = None
    ) -> Optional[str]:
        """Classify the live page; None when no state predicate holds."""
        state = await self._states.classify(driver, params or {}, self.current_state)
        self.current_state = state
        return state

    async def find_path_to_state(
        self,
        driver: PageDriver,
        target: str,
        params: Optional[dict[str, Any]] = None,
    ) -> Path:
        if target not in self._states:
            raise UnknownStateError(
                f'Unknown state: "{target}", you must add this state first.'
            )

        start = await self.where_am_i(driver, params)
        if start == target:
            return []  # already there
        if start is None or not self._graph.has_exit(start):
            # unrecognised, or a legitimate state with no path out
            start = UNKNOWN_STATE

        return self.shortest_path(start, target)

    def shortest_path(self, start: str, target: str) -> Path:
        """Dijkstra from ``start`` to ``target``.

        The unknown state is seeded at distance 0 alongside ``start``, so the
        default transition is always available as a fallback. Costs must be
        non-negative.
        """
        for name in (start, target):
            if name != UNKNOWN_STATE and name not in self._states:
                raise UnknownStateError(
                    f'Unknown state: "{name}", you must add this state first.'
                )

        distance ={name: math.inf for name in self._states.names}
        distance[UNKNOWN_STATE] = math.inf
        prev: dict[str, Optional[str]] = dict.fromkeys(distance)

        queue: list[tuple[float, int, str]] = []
        for seed in {start, UNKNOWN_STATE}:
            distance[seed] = 0
            heapq.heappush(queue, (0, self._states.priority(seed), seed))

        visited = set()
        while queue:
            dist, _, node = heapq.heappop(queue)
            if node in visited:
                continue
            visited.add(node)
            for neighbor, transition in self._graph.neighbors.get(node, {}).items():
                candidate = dist + transition.cost
                if candidate < distance[neighbor]:
                    distance[neighbor] = candidate
                    prev[neighbor] = node
                    heapq.heappush(
                        queue, (candidate, self._states.priority(neighbor), neighbor)
                    )

        if prev[target] is None:
            raise NoRouteError(
                f'No route exists from "{start}" (current) to "{target}" and no default '
                "route exists."
            )

        path: Path = []
        node = target
        while node not in (start, UNKNOWN_STATE):
            previous = prev[node]
            path.insert(0, (previous, node))
            node = previous
        logger.debug("Path to %s (cost %s): %s", target, distance[target], path)
        return path

    def path_cost(self, path: Path) -> float:
        return sum(self._graph.transition(start, end).cost for start, end in path)
