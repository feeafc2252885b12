"""Mock classes for unit testing the state machine without a browser."""

from .mock_context import MockContext
from .mock_page import MockPage
from .mock_site import RING, at, build_ring, flag_is, go_to, never, noop, set_flag

__all__ = [
    "MockContext",
    "MockPage",
    "RING",
    "at",
    "build_ring",
    "flag_is",
    "go_to",
    "never",
    "noop",
    "set_flag",
]
