"""Composite state machine facade.

``StateMachine`` wires the registries, the router, the traversal engine and
the occlusion tracker together and exposes them as one object. Site models
declare against it, and navigation calls run through ``self.driver``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Callable, Mapping, Optional, Sequence, Union

from pagenav.fragments import BASE, key_to_fragment
from pagenav.layers import LayerRegistry, LayerValue
from pagenav.occlusion import OcclusionTracker
from pagenav.router import Path, Router
from pagenav.states import UNKNOWN_STATE, StateRegistry
from pagenav.transitions import Transition, TransitionGraph
from pagenav.traversal import DEFAULT_RETRIES, TraversalEngine

if TYPE_CHECKING:
    from pagenav.page import PageDriver


class StateMachine:
    """Site model plus navigation over a page driver.

    Args:
        driver: Page driver used for every live query. ``Drone`` sets it
            when the browser starts; tests may pass any object exposing
            ``evaluate_predicate`` and ``run_transition``.
    """

    def __init__(self, driver: Optional[PageDriver] = None):
        self.driver = driver
        self._states = StateRegistry()
        self._layers = LayerRegistry(self._states)
        self._graph = TransitionGraph(self._states, self._layers)
        self._router = Router(self._states, self._graph)
        self._traversal = TraversalEngine(self._router, self._graph)
        self._occlusion = OcclusionTracker(self._layers, self._router)

    # ========================================================================
    # Declaration
    # ========================================================================

    def add_state(self, name: str, predicate: Callable[..., Any]) -> None:
        self._states.add_state(name, predicate)

    def add_composite_state(
        self,
        fragment: Mapping[str, str],
        base_states: list[str],
        predicate: Callable[..., Any],
    ) -> None:
        self._layers.add_composite_state(fragment, base_states, predicate)

    def add_default_composite_state(
        self, fragment: Mapping[str, str], predicate: Callable[..., Any]
    ) -> None:
        self._layers.add_default_composite_state(fragment, predicate)

    def add_state_transition(
        self, start: str, end: str, logic: Callable[..., Any], cost: float = 1
    ) -> None:
        self._graph.add_state_transition(start, end, logic, cost)

    def add_default_state_transition(
        self, end: str, logic: Callable[..., Any], cost: float = 1
    ) -> None:
        self._graph.add_default_state_transition(end, logic, cost)

    def add_composite_state_transition(
        self,
        start: Mapping[str, str],
        end: Mapping[str, str],
        logic: Callable[..., Any],
        cost: float = 1,
    ) -> None:
        self._graph.add_composite_state_transition(start, end, logic, cost)

    def add_state_occlusion(self, layer: str, fragments: Sequence[Mapping[str, str]]) -> None:
        self._occlusion.add_state_occlusion(layer, fragments)

    def on_state(self, name: str, logic: Callable[..., Any]) -> None:
        self._traversal.on_state(name, logic)

    # ========================================================================
    # Model queries
    # ========================================================================

    @property
    def current_state(self) -> Optional[str]:
        """Last observed base state (a cache, not a live reading)."""
        return self._router.current_state

    @property
    def base_states(self) -> list[str]:
        return self._states.names

    @property
    def layers(self) -> dict[str, dict[str, LayerValue]]:
        return self._layers.layers

    @property
    def states_in_layer(self) -> dict[str, list[str]]:
        return self._layers.states_in_layer

    @property
    def transitions(self) -> dict[tuple[str, str], Transition]:
        return self._graph.transitions

    @property
    def fragment_transitions(self) -> dict:
        return self._graph.fragment_transitions

    def is_dependency_satisfied(
        self, base_state: str, layer_value: LayerValue, partial_state: Mapping[str, str]
    ) -> bool:
        return self._layers.is_dependency_satisfied(base_state, layer_value, partial_state)

    def compute_composite_states(self) -> list[dict[str, str]]:
        return self._layers.compute_composite_states()

    def all_states(self, filter_props: Optional[Mapping[str, str]] = None) -> list[dict[str, str]]:
        return self._layers.all_states(filter_props)

    def is_valid_state(self, fragment: Mapping[str, str]) -> bool:
        return self._layers.is_valid_state(fragment)

    def get_neighbors(
        self, start: Union[str, Mapping[str, str]]
    ) -> Union[list[str], list[dict[str, str]]]:
        return self._graph.get_neighbors(start)

    def transition_side_effects(
        self, start: Mapping[str, str], end: Mapping[str, str]
    ) -> list[str]:
        return self._graph.transition_side_effects(start, end)

    def path_cost(self, path: Path) -> float:
        return self._router.path_cost(path)

    def shortest_path(self, start: Optional[str], target: str) -> Path:
        """Offline path computation, ``None`` standing for an unrecognised page."""
        return self._router.shortest_path(start or UNKNOWN_STATE, target)

    # ========================================================================
    # Live page
    # ========================================================================

    async def where_am_i(self, params: Optional[dict[str, Any]] = None) -> Optional[str]:
        return await self._router.where_am_i(self.driver, params)

    async def get_state_detail(
        self, params: Optional[dict[str, Any]] = None
    ) -> dict[str, Optional[str]]:
        return await self._occlusion.get_state_detail(self.driver, params)

    def is_last_known_occluded(self, layer: str) -> bool:
        return self._occlusion.is_last_known_occluded(layer)

    async def is_occluded(self, layer: str, params: Optional[dict[str, Any]] = None) -> bool:
        return await self._occlusion.is_occluded(self.driver, layer, params)

    async def find_path_to_state(
        self, target: str, params: Optional[dict[str, Any]] = None
    ) -> Path:
        return await self._router.find_path_to_state(self.driver, target, params)

    async def traverse_path(
        self,
        path: Path,
        retries: int = DEFAULT_RETRIES,
        params: Optional[dict[str, Any]] = None,
    ) -> None:
        await self._traversal.traverse_path(self.driver, path, retries, params)

    async def ensure_state(
        self,
        name: str,
        params: Optional[dict[str, Any]] = None,
        continuation: Optional[Callable[..., Any]] = None,
        retries: int = DEFAULT_RETRIES,
    ) -> Any:
        return await self._traversal.ensure_state(
            self.driver, name, params, continuation, retries
        )

    async def ensure_either_state(
        self,
        names: Sequence[str],
        params: Optional[dict[str, Any]] = None,
        continuation: Optional[Callable[..., Any]] = None,
        retries: int = DEFAULT_RETRIES,
    ) -> Any:
        return await self._traversal.ensure_either_state(
            self.driver, names, params, continuation, retries
        )

    # ========================================================================
    # Export
    # ========================================================================

    def export_graph(self) -> dict[str, Any]:
        """Export the declared model in a JSON-serialisable graph format.

        Returns:
            Dictionary containing nodes, edges, layers, composite edges and
            statistics
        """
        nodes = []
        for priority, name in enumerate(self._states.names):
            nodes.append({
                "id": name,
                "node_type": "state",
                "priority": priority,
                "predicate": getattr(self._states.predicate(name), "__name__", None),
                "on_state": name in self._traversal.triggers,
            })

        edges = []
        for (start, end), transition in self._graph.transitions.items():
            edges.append({
                "source": None if start == UNKNOWN_STATE else start,
                "target": end,
                "edge_type": "default" if start == UNKNOWN_STATE else "transition",
                "cost": transition.cost,
            })

        composite_edges = []
        for start_key, ends in self._graph.fragment_transitions.items():
            start = key_to_fragment(start_key)
            for end_key, transition in ends.items():
                end = key_to_fragment(end_key)
                if set(start) == {BASE} and set(end) == {BASE}:
                    continue  # mirror of a simple transition
                composite_edges.append({
                    "source": start,
                    "target": end,
                    "cost": transition.cost,
                })

        composite_count = len(self._layers.compute_composite_states())
        return {
            "graph_type": "composite_fsm",
            "nodes": nodes,
            "edges": edges,
            "layers": self._layers.states_in_layer,
            "composite_edges": composite_edges,
            "statistics": {
                "state_count": len(self._states),
                "transition_count": len(edges),
                "default_transition_count": sum(
                    1 for edge in edges if edge["edge_type"] == "default"
                ),
                "layer_count": len(self._layers.layers),
                "composite_state_count": composite_count,
                "composite_transition_count": len(composite_edges),
            },
        }
