"""Registry of named base states and the predicates that recognise them."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Callable, Optional

from pagenav.errors import DeclarationError

if TYPE_CHECKING:
    from pagenav.page import PageDriver

logger = logging.getLogger(__name__)

# Synthetic vertex for "current position not recognised by any predicate".
UNKNOWN_STATE = "< INVALID STATE >"

Predicate = Callable[..., Any]


class StateRegistry:
    """Base states in test priority order.

    Predicates are not required to be mutually exclusive; the declaration
    order is the tie-break when more than one of them holds.
    """

    def __init__(self):
        self._order: list[str] = []
        self._tests: dict[str, Predicate] = {}

    def add_state(self, name: str, predicate: Predicate) -> None:
        if name == UNKNOWN_STATE or name in self._tests:
            raise DeclarationError(
                f'State "{name}" already exists, please use unique state names.'
            )
        self._order.append(name)
        self._tests[name] = predicate

    def __contains__(self, name: object) -> bool:
        return name in self._tests

    def __len__(self) -> int:
        return len(self._order)

    @property
    def names(self) -> list[str]:
        return list(self._order)

    def predicate(self, name: str) -> Predicate:
        return self._tests[name]

    def priority(self, name: str) -> int:
        """Position in the priority list; the sentinel sorts last."""
        try:
            return self._order.index(name)
        except ValueError:
            return len(self._order)

    async def classify(
        self,
        driver: PageDriver,
        params: dict[str, Any],
        cached: Optional[str] = None,
    ) -> Optional[str]:
        """Return the first state whose predicate holds, or None.

        Args:
            driver: Page driver used to evaluate predicates
            params: Caller params handed to every predicate
            cached: Previously observed state, re-checked first

        Returns:
            Name of the matching state, None when nothing matches
        """
        if cached in self._tests and await driver.evaluate_predicate(
            self._tests[cached], params
        ):
            logger.debug("Cached state %s still holds", cached)
            return cached

        for name in self._order:
            if await driver.evaluate_predicate(self._tests[name], params):
                return name
        return None
