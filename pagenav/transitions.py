"""Directed, costed transitions between base states and composite fragments."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Mapping, Union

from pagenav.errors import AmbiguousStateError, DeclarationError, InvalidStateError
from pagenav.fragments import (
    BASE,
    FragmentKey,
    format_state,
    fragment_key,
    is_substate,
    key_to_fragment,
    merge,
)
from pagenav.layers import LayerRegistry
from pagenav.states import UNKNOWN_STATE, StateRegistry


@dataclass
class Transition:
    """Edge payload: cost and the logic that performs the move."""

    cost: float
    logic: Callable[..., Any]


class TransitionGraph:
    """Simple transitions keyed by base state names, plus fragment transitions.

    Every simple transition is mirrored into the fragment table under
    ``{"base": start} -> {"base": end}`` so composite routing sees both kinds
    uniformly.
    """

    def __init__(self, states: StateRegistry, layers: LayerRegistry):
        self._states = states
        self._layers = layers
        self.neighbors: dict[str, dict[str, Transition]] = {}
        self._edges: dict[tuple[str, str], Transition] = {}
        self.fragment_transitions: dict[FragmentKey, dict[FragmentKey, Transition]] = {}

    # ========================================================================
    # Declaration
    # ========================================================================

    def add_state_transition(
        self, start: str, end: str, logic: Callable[..., Any], cost: float = 1
    ) -> None:
        if start == end:
            raise DeclarationError(f"Transition from state to itself is not allowed ({start}).")
        if start not in self._states:
            raise DeclarationError(f'Start state "{start}" does not exist.')
        if end not in self._states:
            raise DeclarationError(f'End state "{end}" does not exist.')

        existing = self.neighbors.get(start, {}).get(end)
        if existing is not None and existing.cost <= cost:
            raise DeclarationError(
                f'A cheaper path (cost = {existing.cost}) from "{start}" to "{end}" already exists.'
            )

        transition = Transition(cost, logic)
        self.neighbors.setdefault(start, {})[end] = transition
        self._edges[(start, end)] = transition
        self.fragment_transitions.setdefault(fragment_key({BASE: start}), {})[
            fragment_key({BASE: end})
        ] = transition

    def add_default_state_transition(
        self, end: str, logic: Callable[..., Any], cost: float = 1
    ) -> None:
        """Fallback edge from the unknown state, used when nothing else matches."""
        if end not in self._states:
            raise DeclarationError(f'End state "{end}" does not exist.')
        transition = Transition(cost, logic)
        self.neighbors.setdefault(UNKNOWN_STATE, {})[end] = transition
        self._edges[(UNKNOWN_STATE, end)] = transition

    def add_composite_state_transition(
        self,
        start: Mapping[str, str],
        end: Mapping[str, str],
        logic: Callable[..., Any],
        cost: float = 1,
    ) -> None:
        """Transition between fragments.

        ``end`` only lists the layers that change; the effective end state is
        ``start`` with ``end`` applied on top, and both must match at least one
        expanded composite state.
        """
        merged_end = merge(start, end)
        if not self._layers.is_valid_state(start):
            raise DeclarationError(
                f"No generated state matches composite start state of {format_state(start)}"
            )
        if not self._layers.is_valid_state(merged_end):
            raise DeclarationError(
                f"No generated state matches composite end state of {format_state(merged_end)}"
            )

        start_key, end_key = fragment_key(start), fragment_key(end)
        existing = self.fragment_transitions.get(start_key, {}).get(end_key)
        if existing is not None and existing.cost <= cost:
            raise DeclarationError(
                f"A cheaper path (cost = {existing.cost}) for {format_state(start)} >> "
                f"{format_state(end)} transition already exists."
            )
        self.fragment_transitions.setdefault(start_key, {})[end_key] = Transition(cost, logic)

    # ========================================================================
    # Queries
    # ========================================================================

    def get_neighbors(
        self, start: Union[str, Mapping[str, str]]
    ) -> Union[list[str], list[dict[str, str]]]:
        """States directly reachable from ``start``.

        Args:
            start: Base state name, or a fragment resolving to exactly one
                composite state

        Returns:
            Base state names for a name, full composite states for a fragment
        """
        if isinstance(start, str):
            if start not in self._states:
                raise InvalidStateError(f'"{start}" is not a valid state.')
            return list(self.neighbors.get(start, {}))

        if not self._layers.is_valid_state(start):
            raise InvalidStateError(f"{format_state(start)} is not a valid state.")
        matches = self._layers.all_states(start)
        if len(matches) > 1:
            raise AmbiguousStateError(
                f"Multiple composite states match {format_state(start)}, "
                "define more layers to resolve ambiguity."
            )
        full_state = matches[0]

        next_states = []
        for start_key, ends in self.fragment_transitions.items():
            if is_substate(key_to_fragment(start_key), full_state):
                for end_key in ends:
                    next_states.append(merge(full_state, key_to_fragment(end_key)))
        return next_states

    def transition(self, start: str, end: str) -> Transition:
        return self.neighbors[start][end]

    def has_exit(self, state: str) -> bool:
        return bool(self.neighbors.get(state))

    @property
    def transitions(self) -> dict[tuple[str, str], Transition]:
        """Simple and default transitions in declaration order."""
        return dict(self._edges)

    def transition_side_effects(
        self, start: Mapping[str, str], end: Mapping[str, str]
    ) -> list[str]:
        """Problems that a ``start >> end`` fragment transition would cause.

        Every composite state matching ``start`` should map onto exactly one
        composite state once ``end`` is applied; anything else means the
        transition silently changes layers it does not mention.
        """
        all_states = self._layers.all_states()
        end_states = [state for state in all_states if is_substate(end, state)]
        label = f"{format_state(start)} to {format_state(end)}"

        side_effects = []
        for state in all_states:
            if not is_substate(start, state):
                continue
            expected = merge(state, end)
            found = sum(1 for candidate in end_states if candidate == expected)
            if found > 1:
                side_effects.append(f"Can't traverse {label}. Multiple end states possible.")
            elif not found:
                side_effects.append(
                    f"Can't traverse {label}. No end state exists for start state: "
                    f"{format_state(state)}."
                )
        return side_effects
