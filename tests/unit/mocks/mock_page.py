"""Mock Playwright page for unit testing."""

from typing import Any, Optional


class MockPage:
    """In-memory stand-in for a Playwright page.

    ``location`` names the page currently shown and ``flags`` holds any
    other page conditions (logged in, modal open, ...). Predicates read both
    through the ``PageDriver`` attribute pass-through, and transitions move
    between pages with ``goto``. Locations in ``blocked`` behave like dead
    links: navigating to them leaves the page where it was.
    """

    def __init__(self, location: Optional[str] = None, flags: Optional[dict] = None):
        self.location = location
        self.flags: dict[str, Any] = dict(flags or {})
        self.blocked: set[str] = set()
        self.visited: list[str] = []

    async def goto(self, url: str) -> None:
        self.visited.append(url)
        if url not in self.blocked:
            self.location = url
