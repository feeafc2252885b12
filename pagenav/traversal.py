"""Guarded execution of computed paths against the page driver."""

from __future__ import annotations

import inspect
import logging
import math
from typing import TYPE_CHECKING, Any, Callable, Optional, Sequence

from pagenav.errors import NoRouteError, TraversalError
from pagenav.router import Path, Router
from pagenav.transitions import TransitionGraph

if TYPE_CHECKING:
    from pagenav.page import PageDriver

logger = logging.getLogger(__name__)

DEFAULT_RETRIES = 3


async def _call(func: Callable[..., Any], *args: Any) -> Any:
    result = func(*args)
    if inspect.isawaitable(result):
        result = await result
    return result


class TraversalEngine:
    """Walks a path edge by edge, verifying the landing state after each hop.

    Edges run strictly in order. A failed attempt re-runs the same edge (it
    does not re-plan from wherever the page ended up); once the retries for
    an edge are exhausted the rest of the path is abandoned.
    """

    def __init__(self, router: Router, graph: TransitionGraph):
        self._router = router
        self._graph = graph
        self.triggers: dict[str, Callable[..., Any]] = {}

    def on_state(self, name: str, logic: Callable[..., Any]) -> None:
        """Run ``logic`` every time traversal enters ``name``."""
        self.triggers[name] = logic

    async def _fire_trigger(self, driver: PageDriver, state: Optional[str], params: dict) -> None:
        trigger = self.triggers.get(state)
        if trigger is not None:
            await driver.run_transition(trigger, params)

    async def _attempt(
        self, driver: PageDriver, start: str, end: str, params: dict[str, Any]
    ) -> bool:
        previous = self._router.current_state
        await driver.run_transition(self._graph.transition(start, end).logic, params)
        new_state = await self._router.where_am_i(driver, params)
        if new_state == end:
            return True

        if new_state == previous:
            logger.error('Route "%s >> %s" did not result in any state transition.', start, end)
        else:
            logger.error(
                'Route "%s >> %s" resulted in transition to wrong state (%s).',
                start, end, new_state,
            )
            self._router.current_state = new_state
            await self._fire_trigger(driver, new_state, params)
        return False

    async def traverse_path(
        self,
        driver: PageDriver,
        path: Path,
        retries: int = DEFAULT_RETRIES,
        params: Optional[dict[str, Any]] = None,
    ) -> None:
        params = params if params is not None else {}
        logger.info("Traversing path of %d steps", len(path))
        for step, (start, end) in enumerate(path, start=1):
            attempts = 0
            success = False
            while not success and attempts < retries:
                logger.debug("Attempt %d for %s >> %s", attempts + 1, start, end)
                success = await self._attempt(driver, start, end, params)
                attempts += 1
            if not success:
                raise TraversalError(
                    f'Failed to traverse "{start} >> {end}" route after {retries} attempts.'
                )
            self._router.current_state = end
            logger.info("Step %d/%d: %s >> %s", step, len(path), start, end)
            await self._fire_trigger(driver, end, params)

    async def ensure_state(
        self,
        driver: PageDriver,
        name: str,
        params: Optional[dict[str, Any]] = None,
        continuation: Optional[Callable[..., Any]] = None,
        retries: int = DEFAULT_RETRIES,
    ) -> Any:
        """Navigate to ``name`` and run ``continuation(driver, params)`` there.

        Returns:
            Whatever the continuation returns, None without one
        """
        params = params if params is not None else {}
        path = await self._router.find_path_to_state(driver, name, params)
        await self.traverse_path(driver, path, retries, params)
        if continuation is not None:
            return await _call(continuation, driver, params)
        return None

    async def ensure_either_state(
        self,
        driver: PageDriver,
        names: Sequence[str],
        params: Optional[dict[str, Any]] = None,
        continuation: Optional[Callable[..., Any]] = None,
        retries: int = DEFAULT_RETRIES,
    ) -> Any:
        """Navigate to whichever of ``names`` is cheapest to reach.

        Candidates without a route are skipped; every other routing error
        propagates. The continuation receives the chosen state name as its
        third argument.
        """
        params = params if params is not None else {}
        best_name: Optional[str] = None
        best_path: Path = []
        best_cost = math.inf
        for name in names:
            try:
                path = await self._router.find_path_to_state(driver, name, params)
            except NoRouteError:
                logger.debug("No route to candidate %s", name)
                continue
            cost = self._router.path_cost(path)
            if cost < best_cost:
                best_name, best_path, best_cost = name, path, cost

        if best_name is None:
            raise NoRouteError(
                f"No route exists from the current state to any of: {', '.join(names)}."
            )

        logger.info("Chose %s (cost %s) out of %s", best_name, best_cost, list(names))
        await self.traverse_path(driver, best_path, retries, params)
        if continuation is not None:
            return await _call(continuation, driver, params, best_name)
        return None
