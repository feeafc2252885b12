"""Helpers for state fragments.

A fragment is a partial assignment ``{layer: value}``; a composite state is a
fragment that also carries ``"base"`` and a value for every declared layer.
Fragments are plain dicts so they read naturally in site models, and are keyed
structurally (sorted item tuples) wherever they index a table.
"""

from __future__ import annotations

import json
from typing import Iterable, Mapping

BASE = "base"

FragmentKey = tuple[tuple[str, str], ...]


def fragment_key(fragment: Mapping[str, str]) -> FragmentKey:
    """Canonical, insertion-order independent key for a fragment."""
    return tuple(sorted(fragment.items()))


def key_to_fragment(key: FragmentKey) -> dict[str, str]:
    return dict(key)


def format_state(fragment: Mapping[str, str]) -> str:
    """Render a fragment for log and error messages."""
    return json.dumps(dict(fragment), sort_keys=True)


def is_substate(sub_state: Mapping[str, str], super_state: Mapping[str, str]) -> bool:
    """True if every layer assignment of ``sub_state`` also holds in ``super_state``."""
    return all(
        key in super_state and super_state[key] == value
        for key, value in sub_state.items()
    )


def filter_by_layer(
    states: Iterable[Mapping[str, str]], filter_props: Mapping[str, str]
) -> list[dict[str, str]]:
    return [dict(state) for state in states if is_substate(filter_props, state)]


def merge(start: Mapping[str, str], end: Mapping[str, str]) -> dict[str, str]:
    """Apply ``end`` on top of ``start``; keys in ``end`` win."""
    return {**start, **end}


def parse_fragment(text: str) -> dict[str, str]:
    """Parse ``"layer=value, other=value"`` into a fragment.

    Used by the command line and the feature files.
    """
    fragment: dict[str, str] = {}
    for part in text.split(","):
        part = part.strip()
        if not part:
            continue
        if "=" not in part:
            raise ValueError(f'Expected "layer=value", got "{part}"')
        layer, value = part.split("=", 1)
        fragment[layer.strip()] = value.strip()
    return fragment
