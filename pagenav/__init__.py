"""Navigate websites modelled as composite state machines."""

from pagenav.config import DroneConfig, load_config
from pagenav.drone import Drone
from pagenav.errors import (
    AmbiguousStateError,
    DeclarationError,
    DroneNotStartedError,
    ExpansionError,
    InvalidStateError,
    NavigationError,
    NoRouteError,
    RoutingError,
    StateDetectionError,
    TraversalError,
    UnknownStateError,
)
from pagenav.page import ElementList, PageDriver
from pagenav.state_machine import StateMachine
from pagenav.states import UNKNOWN_STATE

__all__ = [
    "AmbiguousStateError",
    "DeclarationError",
    "Drone",
    "DroneConfig",
    "DroneNotStartedError",
    "ElementList",
    "ExpansionError",
    "InvalidStateError",
    "NavigationError",
    "NoRouteError",
    "PageDriver",
    "RoutingError",
    "StateDetectionError",
    "StateMachine",
    "TraversalError",
    "UNKNOWN_STATE",
    "UnknownStateError",
    "load_config",
]
