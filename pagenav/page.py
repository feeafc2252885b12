"""Page driver wrapping a Playwright async ``Page``.

The driver is what predicates, transition logic and continuations receive as
their first argument. Anything not defined here resolves on the wrapped
Playwright page, so site models can call ``page.goto(...)`` or
``page.locator(...)`` directly alongside the helpers below.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
import random
import re
from typing import Any, Callable, Optional, Pattern, Union

from playwright.async_api import Locator, Page, Response

logger = logging.getLogger(__name__)

TABLE_TO_JSON_JS = """
(table) => {
    const children = (element, selector) =>
        Array.from(element.querySelectorAll(`:scope > ${selector}`));
    const cellValue = (cell) => cell.innerText.trim();

    const scanRows = (rows) => {
        const grid = [];
        rows.forEach((row, rowIndex) => {
            grid[rowIndex] = grid[rowIndex] || [];
            let cellIndex = 0;
            Array.from(row.children).forEach((cell) => {
                while (grid[rowIndex][cellIndex] !== undefined) {
                    cellIndex++;
                }
                const text = cellValue(cell);
                const rowSpan = parseInt(cell.rowSpan || 1);
                const colSpan = parseInt(cell.colSpan || 1);
                for (let r = 0; r < rowSpan; r++) {
                    grid[rowIndex + r] = grid[rowIndex + r] || [];
                    for (let c = 0; c < colSpan; c++) {
                        grid[rowIndex + r][cellIndex + c] = text;
                    }
                }
                cellIndex += colSpan;
            });
        });
        return grid;
    };

    const header = [];
    scanRows(children(table, 'thead > tr')).forEach((row) => {
        row.forEach((cell, i) => {
            if (header[i] === undefined) {
                header[i] = cell;
            } else if (header[i] !== cell) {
                header[i] += `: ${cell}`;
            }
        });
    });
    const seen = {};
    header.forEach((name, i) => {
        if (seen[name]) {
            seen[name]++;
            header[i] = `${name} (${seen[name]})`;
        } else {
            seen[name] = 1;
        }
    });

    let body = scanRows(children(table, 'tbody > tr'));
    const footer = scanRows(children(table, 'tfoot > tr'));
    if (!body.length) {
        body = scanRows(children(table, 'tr'));
    }
    const width = body.length ? body[0].length : 0;
    const keys = header.length === width ? header : [...Array(width).keys()].map(String);
    const toObject = (names, row) => {
        const result = {};
        names.forEach((name, i) => {
            if (row[i] !== undefined) {
                result[name] = row[i];
            }
        });
        return result;
    };

    const result = body.map((row) => toObject(keys, row));
    footer.forEach((row) => {
        const footerKeys = row.length === width ? keys : [...Array(row.length).keys()].map(String);
        result.push(toObject(footerKeys, row));
    });
    return result;
}
"""

LIST_TO_JSON_JS = """
(list) => Array.from(list.querySelectorAll(':scope > li')).map((item) => item.innerText.trim())
"""

ATTRIBUTES_JS = """
(element) => {
    const result = { tag: element.tagName };
    for (const attribute of element.attributes) {
        result[attribute.name] = attribute.value;
    }
    return result;
}
"""

WAIT_FOR_UPDATE_JS = """
(element, timeout) => new Promise((resolve, reject) => {
    const observer = new MutationObserver((mutations) => {
        for (const mutation of mutations) {
            if (mutation.type === 'childList' || mutation.type === 'characterData') {
                observer.disconnect();
                resolve();
                return;
            }
        }
    });
    observer.observe(element, { childList: true, subtree: true, characterData: true });
    setTimeout(() => {
        observer.disconnect();
        reject(new Error('Timeout waiting for the element to update'));
    }, timeout);
})
"""


def escape_xpath_string(text: str) -> str:
    """Quote ``text`` as an XPath string literal, even when it contains quotes."""
    split_quotes = text.replace("'", "', \"'\", '")
    return f"concat('{split_quotes}', '')"


def _text_xpath(text: str) -> str:
    return f"xpath=//*[text()[contains(., {escape_xpath_string(text)})]]"


class ElementList(list):
    """List of locators that can be clicked when it holds exactly one element."""

    async def click(self, **options: Any) -> None:
        if len(self) != 1:
            raise ValueError(f"List has {len(self)} elements in it, click requires exactly 1.")
        await self[0].click(**options)


class PageDriver:
    """Executes predicates and transitions against a live page."""

    def __init__(self, page: Page):
        self.page = page

    def __getattr__(self, name: str) -> Any:
        # only reached for attributes the driver does not define itself
        return getattr(self.page, name)

    # ========================================================================
    # State machine contract
    # ========================================================================

    async def _invoke(self, func: Callable[..., Any], params: dict[str, Any]) -> Any:
        result = func(self, params)
        if inspect.isawaitable(result):
            result = await result
        return result

    async def evaluate_predicate(self, predicate: Callable[..., Any], params: dict[str, Any]) -> bool:
        return bool(await self._invoke(predicate, params))

    async def run_transition(self, logic: Callable[..., Any], params: dict[str, Any]) -> None:
        await self._invoke(logic, params)

    # ========================================================================
    # Element helpers
    # ========================================================================

    async def element_with_text(self, text: str) -> Locator:
        """The single element containing ``text``.

        Raises:
            LookupError: No element contains the text
            ValueError: More than one element contains the text
        """
        locator = self.page.locator(_text_xpath(text))
        count = await locator.count()
        if count == 1:
            return locator.first
        if count > 1:
            raise ValueError(f'Ambiguous click command, {count} elements with text "{text}" found.')
        raise LookupError(f'No elements with text "{text}" found.')

    async def all_elements_with_text(self, text: str) -> list[Locator]:
        return await self.page.locator(_text_xpath(text)).all()

    async def wait_for_element_with_text(self, text: str, timeout: Optional[float] = None) -> Locator:
        """Wait until at least one element with ``text`` is attached."""
        locator = self.page.locator(_text_xpath(text)).first
        await locator.wait_for(state="attached", timeout=timeout)
        return locator

    async def click_within_element(self, element: Locator, x: float = 0, y: float = 0) -> None:
        """Click at an offset from the centre of ``element``.

        Offsets with magnitude below 1 are fractions of the half-width or
        half-height; anything else is a pixel offset.
        """
        box = await element.bounding_box()
        if box is None:
            raise LookupError("Element is not visible, cannot compute its bounding box.")
        x_offset = box["width"] / 2 * x if abs(x) < 1 else x
        y_offset = box["height"] / 2 * y if abs(y) < 1 else y
        await self.page.mouse.click(
            box["x"] + box["width"] / 2 + x_offset,
            box["y"] + box["height"] / 2 + y_offset,
        )

    async def wait_for_update(self, element: Locator, timeout: int = 10000) -> None:
        """Resolve on the first DOM mutation inside ``element``."""
        if element is None:
            raise ValueError("No element passed")
        await element.evaluate(WAIT_FOR_UPDATE_JS, timeout)

    async def wait(self, min_ms: float, max_ms: Optional[float] = None) -> None:
        """Sleep ``min_ms``, or a random interval in ``[min_ms, max_ms)``."""
        ms = min_ms
        if max_ms:
            ms = random.uniform(min_ms, max_ms)
        await asyncio.sleep(ms / 1000)

    async def wait_and_click(self, selector: str, **options: Any) -> None:
        await self.page.wait_for_selector(selector, **options)
        await self.page.click(selector, **options)

    async def json_response(self, url: str, response: Response) -> Any:
        """Parsed JSON body of ``response`` if it matches ``url``, else None.

        ``url`` may contain ``*`` wildcards.
        """
        if "*" in url:
            pattern = ".*".join(re.escape(part) for part in url.split("*"))
            if not re.fullmatch(pattern, response.url):
                return None
        elif url != response.url:
            return None

        content_type = response.headers.get("content-type", "")
        if "application/json" not in content_type:
            return None
        return await response.json()

    async def scrape(self, element: Locator, fmt: str = "text") -> Any:
        """Scrape ``element`` as text or JSON.

        In JSON format tables become a list of row objects keyed by header,
        lists become a list of item texts, and any other element becomes its
        JSON value or, failing that, its tag and attributes. Nested elements
        are not visited except for table cells and list items.
        """
        if fmt not in ("json", "text"):
            raise ValueError('Invalid format, must be "json" or "text"')
        if element is None:
            raise ValueError("No element passed in to scrape")

        if fmt == "text":
            return await element.inner_text()

        tag = await element.evaluate("(e) => e.tagName")
        if tag == "TABLE":
            return await element.evaluate(TABLE_TO_JSON_JS)
        if tag in ("UL", "OL"):
            return await element.evaluate(LIST_TO_JSON_JS)
        value = await element.evaluate("(e) => e.toJSON ? e.toJSON() : {}")
        if value:
            return value
        return await element.evaluate(ATTRIBUTES_JS)

    # ========================================================================
    # Selection
    # ========================================================================

    def _css_and_xpath(self, css: Optional[str], xpath: Optional[str]) -> Optional[Locator]:
        selected = None
        if css:
            selected = self.page.locator(css)
        if xpath:
            by_xpath = self.page.locator(f"xpath={xpath}")
            selected = by_xpath if selected is None else selected.and_(by_xpath)
        return selected

    async def filter(
        self,
        css: Optional[str] = None,
        xpath: Optional[str] = None,
        text: Optional[str] = None,
    ) -> ElementList:
        """Elements matching every given selector.

        The text selector matches the element that directly holds the text,
        so ``css="button", text="Save"`` misses ``<button><span>Save</span></button>``;
        use ``smart_filter`` for that.
        """
        selected = self._css_and_xpath(css, xpath)
        if text:
            by_text = self.page.locator(_text_xpath(text))
            selected = by_text if selected is None else selected.and_(by_text)
        if selected is None:
            return ElementList()
        return ElementList(await selected.all())

    async def smart_filter(
        self,
        css: Optional[str] = None,
        xpath: Optional[str] = None,
        text: Union[str, Pattern[str], None] = None,
    ) -> ElementList:
        """Like ``filter`` but matches ``text`` against each element's inner text.

        ``text`` may be a substring or a compiled regular expression.
        """
        selected = self._css_and_xpath(css, xpath)
        candidates = await selected.all() if selected is not None else []
        if candidates:
            if not text:
                return ElementList(candidates)
            matches = ElementList()
            for candidate in candidates:
                inner_text = await candidate.inner_text()
                if isinstance(text, str):
                    if text in inner_text:
                        matches.append(candidate)
                elif text.search(inner_text):
                    matches.append(candidate)
            return matches

        if isinstance(text, str) and text:
            return ElementList(await self.all_elements_with_text(text))
        return ElementList()
