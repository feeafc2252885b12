"""Shared helper functions for step definitions."""

import asyncio
from typing import Any, Awaitable, Callable

from pagenav.errors import NavigationError


def run(awaitable: Awaitable[Any]) -> Any:
    """Drive a coroutine to completion from a synchronous step."""
    return asyncio.run(awaitable)


def split_names(text: str) -> list[str]:
    """Parse a comma-separated list of state names."""
    return [name.strip() for name in text.split(",") if name.strip()]


def attempt(nav_context: Any, func: Callable[..., Any], *args: Any) -> Any:
    """Run ``func`` and record any navigation error on the context instead of raising.

    Coroutine results are awaited; the outcome is also stored as
    ``nav_context.result`` for later "then" steps.
    """
    nav_context.error = None
    nav_context.result = None
    try:
        result = func(*args)
        if asyncio.iscoroutine(result):
            result = run(result)
    except NavigationError as e:
        nav_context.error = e
        return None
    nav_context.result = result
    return result
