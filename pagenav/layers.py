"""Composite layers overlaid on base states.

A layer is a named dimension (login status, locale, ...) whose values apply to
a subset of base states. Declaring several layers in one fragment chains them:
each later layer records the earlier assignments as a dependency, so its
applicability can hinge on values already chosen and not only on the base
state. Expansion into full composite states happens on every query so that
results always reflect the latest declarations.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Mapping, Optional

from pagenav.errors import DeclarationError, ExpansionError
from pagenav.fragments import (
    BASE,
    FragmentKey,
    filter_by_layer,
    format_state,
    fragment_key,
    is_substate,
)
from pagenav.states import StateRegistry


@dataclass
class Dependency:
    """Earlier-layer assignments that must hold for a value to apply."""

    fragment: dict[str, str]
    base_states: list[str]


@dataclass
class LayerValue:
    """Definition of one value of a layer."""

    base_states: list[str]
    predicate: Callable[..., Any]
    dependencies: list[Dependency] = field(default_factory=list)


class LayerRegistry:
    """Declared layers, in registration order, and their expansion."""

    def __init__(self, states: StateRegistry):
        self._states = states
        self.layers: dict[str, dict[str, LayerValue]] = {}
        self._fragments: set[FragmentKey] = set()

    # ========================================================================
    # Declaration
    # ========================================================================

    def add_composite_state(
        self,
        fragment: Mapping[str, str],
        base_states: list[str],
        predicate: Callable[..., Any],
    ) -> None:
        """Declare a fragment applicable to ``base_states``.

        Base states are not validated here; a base state left without a value
        at some layer surfaces as an ``ExpansionError`` on the next query.
        """
        key = fragment_key(fragment)
        if key in self._fragments:
            raise DeclarationError(
                f"Composite state {format_state(fragment)} already exists, "
                "please use unique state names."
            )
        self._fragments.add(key)

        dependency: dict[str, str] = {}
        for layer, value in fragment.items():
            values = self.layers.setdefault(layer, {})
            if value not in values:
                values[value] = LayerValue(list(base_states), predicate)
            else:
                existing = values[value].base_states
                existing.extend(s for s in base_states if s not in existing)

            if len(fragment) > 1:
                if dependency:
                    values[value].dependencies.append(
                        Dependency(dict(dependency), list(base_states))
                    )
                dependency = {**dependency, layer: value}

    def add_default_composite_state(
        self, fragment: Mapping[str, str], predicate: Callable[..., Any]
    ) -> None:
        """Declare ``fragment`` for every base state no layer of it covers yet."""
        covered = set()
        for layer in fragment:
            for layer_value in self.layers.get(layer, {}).values():
                covered.update(layer_value.base_states)
        base_states = [name for name in self._states.names if name not in covered]
        self.add_composite_state(fragment, base_states, predicate)

    # ========================================================================
    # Expansion
    # ========================================================================

    @staticmethod
    def is_dependency_satisfied(
        base_state: str, layer_value: LayerValue, partial_state: Mapping[str, str]
    ) -> bool:
        if not layer_value.dependencies:
            return base_state in layer_value.base_states
        return any(
            base_state in dep.base_states and is_substate(dep.fragment, partial_state)
            for dep in layer_value.dependencies
        )

    def compute_composite_states(self) -> list[dict[str, str]]:
        states = [{BASE: name} for name in self._states.names]
        for layer, values in self.layers.items():
            expanded = []
            for state in states:
                base_state = state[BASE]
                matched = False
                for value, layer_value in values.items():
                    if self.is_dependency_satisfied(base_state, layer_value, state):
                        matched = True
                        expanded.append({**state, layer: value})
                if not matched:
                    raise ExpansionError(
                        f'No composite state of type "{layer}" exists for base state '
                        f'"{base_state}".'
                    )
            states = expanded
        return states

    def all_states(self, filter_props: Optional[Mapping[str, str]] = None) -> list[dict[str, str]]:
        """Every expanded composite state, optionally narrowed by ``filter_props``."""
        states = self.compute_composite_states()
        if not filter_props:
            return states
        for layer in filter_props:
            if layer != BASE and layer not in self.layers:
                raise ExpansionError(f'Compositing layer "{layer}" doesn\'t exist.')
        return filter_by_layer(states, filter_props)

    def is_valid_state(self, fragment: Mapping[str, str]) -> bool:
        return any(is_substate(fragment, state) for state in self.compute_composite_states())

    # ========================================================================
    # Introspection
    # ========================================================================

    @property
    def states_in_layer(self) -> dict[str, list[str]]:
        return {layer: list(values) for layer, values in self.layers.items()}

    def layer_value(self, layer: str, value: str) -> LayerValue:
        return self.layers[layer][value]
