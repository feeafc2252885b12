"""Browser-backed state machine."""

from __future__ import annotations

import inspect
import logging
import shutil
from pathlib import Path
from typing import Any, Callable, Optional, Union

from playwright.async_api import Browser, BrowserContext, Playwright, async_playwright

from pagenav.config import DroneConfig
from pagenav.errors import DroneNotStartedError
from pagenav.page import PageDriver
from pagenav.state_machine import StateMachine

logger = logging.getLogger(__name__)


class Drone(StateMachine):
    """State machine that owns its Playwright browser.

    Example:
        async with Drone(DroneConfig(headless=False)) as drone:
            build_site(drone)
            await drone.ensure_state("dashboard")
    """

    def __init__(self, config: Optional[DroneConfig] = None):
        super().__init__()
        self.config = config or DroneConfig()
        self._playwright: Optional[Playwright] = None
        self.browser: Optional[Browser] = None
        self.context: Optional[BrowserContext] = None

    async def __aenter__(self) -> Drone:
        await self.start()
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.stop()

    @property
    def started(self) -> bool:
        return self.browser is not None

    async def start(self, **overrides: Any) -> PageDriver:
        """Launch the browser and open a page.

        Args:
            **overrides: ``DroneConfig`` fields overriding the configured values

        Returns:
            The driver now attached to this drone
        """
        if self.started:
            logger.warning("Browser already started, restarting it")
            await self.stop()

        config = self.config.merged(**overrides)
        self._playwright = await async_playwright().start()
        try:
            browser_type = getattr(self._playwright, config.browser)
            self.browser = await browser_type.launch(headless=config.headless)
            self.context = await self.browser.new_context(viewport=config.viewport)
            self.context.set_default_timeout(config.default_timeout)
            page = await self.context.new_page()
            self.driver = PageDriver(page)
            logger.info("Started %s (headless=%s)", config.browser, config.headless)

            if config.base_url:
                await page.goto(config.base_url)
                logger.info("Opened %s", config.base_url)
        except Exception as e:
            logger.error("Failed to start %s: %s", config.browser, e)
            await self._shutdown()
            raise
        return self.driver

    async def stop(self) -> None:
        if not self.started:
            raise DroneNotStartedError("Browser has not been started, call start() first.")
        await self._shutdown()
        logger.info("Browser stopped")

    async def _shutdown(self) -> None:
        try:
            if self.browser is not None:
                await self.browser.close()
        finally:
            if self._playwright is not None:
                await self._playwright.stop()
            self.browser = None
            self.context = None
            self._playwright = None
            self.driver = None

    async def actions(self, logic: Callable[..., Any]) -> Any:
        """Run ``logic(driver)`` against the open page and return its result."""
        if self.driver is None:
            raise DroneNotStartedError("Browser has not been started, call start() first.")
        result = logic(self.driver)
        if inspect.isawaitable(result):
            result = await result
        return result

    def get_dir(self, build: str) -> Path:
        """Directory for ``build`` under the configured base directory, created if missing."""
        path = Path(self.config.base_dir) / build
        path.mkdir(parents=True, exist_ok=True)
        return path

    @staticmethod
    def clean_dir(path: Union[str, Path]) -> None:
        """Remove everything inside ``path``, keeping the directory itself."""
        for entry in Path(path).iterdir():
            try:
                if entry.is_dir() and not entry.is_symlink():
                    shutil.rmtree(entry)
                else:
                    entry.unlink()
            except OSError as e:
                logger.error("Failed to remove %s: %s", entry, e)
