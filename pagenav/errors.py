"""Exception hierarchy for declaring and navigating page state machines."""


class NavigationError(Exception):
    """Base class for every error raised by pagenav."""


# ============================================================================
# Declaration / expansion
# ============================================================================

class DeclarationError(NavigationError, ValueError):
    """Raised synchronously by a declaration call that would corrupt the model."""


class ExpansionError(NavigationError, ValueError):
    """Raised when composite states are (re)computed from inconsistent layers."""


# ============================================================================
# Routing
# ============================================================================

class RoutingError(NavigationError):
    """Base class for failures computing where we are or how to get somewhere."""


class UnknownStateError(RoutingError, ValueError):
    """Raised when a requested target state was never declared."""


class InvalidStateError(RoutingError, ValueError):
    """Raised when a fragment matches no expanded composite state."""


class AmbiguousStateError(RoutingError, ValueError):
    """Raised when a fragment matches more than one expanded composite state."""


class NoRouteError(RoutingError):
    """Raised when the target is unreachable, even through the default transition."""


# ============================================================================
# Runtime
# ============================================================================

class TraversalError(NavigationError, RuntimeError):
    """Raised when an edge still fails after exhausting its retries."""


class StateDetectionError(NavigationError, RuntimeError):
    """Raised when no value of a layer can be verified on the live page."""


class DroneNotStartedError(NavigationError, RuntimeError):
    """Raised by browser operations attempted before ``Drone.start()``."""
