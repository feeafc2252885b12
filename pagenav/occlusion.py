"""Layer values that cannot always be verified on the live page.

While the page matches one of a layer's occlusion fragments (a modal covering
the header, say), the layer keeps its last observed value instead of being
re-tested.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Mapping, Optional, Sequence

from pagenav.errors import StateDetectionError
from pagenav.fragments import BASE, is_substate
from pagenav.layers import LayerRegistry, LayerValue
from pagenav.router import Router

if TYPE_CHECKING:
    from pagenav.page import PageDriver

logger = logging.getLogger(__name__)


class OcclusionTracker:
    """Owns the last-known value of every layer."""

    def __init__(self, layers: LayerRegistry, router: Router):
        self._layers = layers
        self._router = router
        self.occlusions: dict[str, list[dict[str, str]]] = {}
        self.last_known: dict[str, str] = {}

    def add_state_occlusion(self, layer: str, fragments: Sequence[Mapping[str, str]]) -> None:
        self.occlusions[layer] = [dict(fragment) for fragment in fragments]

    def is_last_known_occluded(self, layer: str) -> bool:
        last_known_state = {BASE: self._router.current_state, **self.last_known}
        return any(
            is_substate(occlusion, last_known_state)
            for occlusion in self.occlusions.get(layer, [])
        )

    async def _holds(
        self,
        driver: PageDriver,
        layer: str,
        layer_value: LayerValue,
        base_state: Optional[str],
        params: dict[str, Any],
    ) -> bool:
        if base_state not in layer_value.base_states:
            return False
        if self.is_last_known_occluded(layer):
            return True  # untestable, assume unchanged
        return await driver.evaluate_predicate(layer_value.predicate, params)

    async def get_state_detail(
        self, driver: PageDriver, params: Optional[dict[str, Any]] = None
    ) -> dict[str, Optional[str]]:
        """Resolve the full composite state of the live page.

        Returns:
            ``{"base": <state>, <layer>: <value>, ...}``
        """
        params = params if params is not None else {}
        base_state = await self._router.where_am_i(driver, params)
        detail: dict[str, Optional[str]] = {BASE: base_state}

        for layer, values in self._layers.layers.items():
            last_value = self.last_known.get(layer)
            if last_value in values and await self._holds(
                driver, layer, values[last_value], base_state, params
            ):
                detail[layer] = last_value
                continue

            for value, layer_value in values.items():
                if await self._holds(driver, layer, layer_value, base_state, params):
                    detail[layer] = value
                    break
            else:
                if last_value is not None:
                    raise StateDetectionError(
                        f'Unable to determine state for "{layer}" layer and last known '
                        f'state of "{last_value}" failed test.'
                    )
                raise StateDetectionError(
                    f'Unable to determine state for "{layer}" layer, no last known state exists.'
                )

            if detail[layer] != last_value:
                logger.debug("Layer %s changed: %s -> %s", layer, last_value, detail[layer])
            self.last_known[layer] = detail[layer]

        return detail

    async def is_occluded(
        self, driver: PageDriver, layer: str, params: Optional[dict[str, Any]] = None
    ) -> bool:
        detail = await self.get_state_detail(driver, params)
        return any(is_substate(occlusion, detail) for occlusion in self.occlusions.get(layer, []))
