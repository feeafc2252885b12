"""Site-model building blocks over ``MockPage``."""

from typing import Any, Callable

from pagenav.state_machine import StateMachine

RING = ["foo", "bar", "baz"]


def at(location: str) -> Callable[..., bool]:
    """Predicate: the page currently shows ``location``."""
    def predicate(page: Any, params: dict) -> bool:
        return page.location == location
    predicate.__name__ = f"at_{location}"
    return predicate


def go_to(location: str) -> Callable[..., Any]:
    """Transition logic opening ``location``."""
    async def logic(page: Any, params: dict) -> None:
        await page.goto(location)
    return logic


def flag_is(name: str, value: Any) -> Callable[..., bool]:
    def predicate(page: Any, params: dict) -> bool:
        return page.flags.get(name) == value
    return predicate


def set_flag(name: str, value: Any) -> Callable[..., None]:
    def logic(page: Any, params: dict) -> None:
        page.flags[name] = value
    return logic


def never(page: Any, params: dict) -> bool:
    return False


def noop(page: Any, params: dict) -> None:
    return None


def build_ring(machine: StateMachine, default_cost: float = 2) -> StateMachine:
    """foo >> bar >> baz >> foo, plus a default transition into foo."""
    for name in RING:
        machine.add_state(name, at(name))
    for index, start in enumerate(RING):
        end = RING[(index + 1) % len(RING)]
        machine.add_state_transition(start, end, go_to(end))
    machine.add_default_state_transition("foo", go_to("foo"), default_cost)
    return machine
