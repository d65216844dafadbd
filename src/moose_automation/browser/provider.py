"""
Browser Session Provider

Owns the single long-lived Chromium process shared by all requests.
The browser is launched lazily on first use and kept open until shutdown;
every request opens its own context and page on top of it.
"""

import asyncio
import logging
from typing import Awaitable, Callable, Optional

from playwright.async_api import Browser, Playwright, async_playwright

from ..config import BrowserConfig

logger = logging.getLogger(__name__)


PlaywrightStarter = Callable[[], Awaitable[Playwright]]


async def start_playwright() -> Playwright:
    """Start the Playwright driver."""
    return await async_playwright().start()


class BrowserSessionProvider:
    """
    Lazily-initialized owner of the shared browser handle.

    Provides:
    - acquire(): return the live browser, launching it if needed
    - is_alive(): whether a connected handle exists
    - release(): close the browser and stop Playwright

    Initialization is serialized with an asyncio.Lock so that concurrent
    first requests launch a single process.

    Usage:
        >>> provider = BrowserSessionProvider()
        >>> browser = await provider.acquire()
        >>> ...
        >>> await provider.release()
    """

    def __init__(
        self,
        config: Optional[BrowserConfig] = None,
        starter: Optional[PlaywrightStarter] = None,
    ):
        """
        Initialize the provider.

        Args:
            config: Launch configuration (uses env if None)
            starter: Coroutine factory returning a started Playwright instance
        """
        self.config = config or BrowserConfig.from_env()
        self._starter = starter or start_playwright

        self._playwright: Optional[Playwright] = None
        self._browser: Optional[Browser] = None
        self._is_initialized = False
        self._lock = asyncio.Lock()
        self._launches = 0

    @property
    def launch_count(self) -> int:
        """Number of successful browser launches since creation."""
        return self._launches

    def is_alive(self) -> bool:
        """Check that a handle exists, was initialized and is still connected."""
        if self._browser is None or not self._is_initialized:
            return False
        return self._browser.is_connected()

    async def acquire(self) -> Browser:
        """
        Return the shared browser, launching it on first use.

        Returns:
            Connected Playwright Browser instance

        Raises:
            Exception: Whatever Playwright raised while starting or launching.
                No handle is kept, so the next call tries again.
        """
        if self.is_alive():
            return self._browser

        async with self._lock:
            # Another request may have launched while we waited
            if self.is_alive():
                return self._browser

            if self._browser is not None:
                logger.warning("Browser disconnected, relaunching")
                await self._shutdown()

            await self._launch()
            return self._browser

    async def _launch(self) -> None:
        playwright = await self._starter()
        try:
            launch_options = {
                "headless": self.config.headless,
                "args": list(self.config.args),
            }
            if self.config.channel:
                launch_options["channel"] = self.config.channel

            browser = await playwright.chromium.launch(**launch_options)
        except Exception:
            logger.error("Failed to initialize browser", exc_info=True)
            try:
                await playwright.stop()
            except Exception as stop_error:
                logger.debug(f"Error stopping Playwright after failed launch: {stop_error}")
            raise

        self._playwright = playwright
        self._browser = browser
        self._is_initialized = True
        self._launches += 1
        logger.info("Browser initialized successfully")

    async def release(self) -> None:
        """
        Close the browser and stop Playwright.

        Waits at most config.close_timeout seconds for the browser to close.
        Errors are logged, never raised.
        """
        async with self._lock:
            await self._shutdown()

    async def _shutdown(self) -> None:
        browser, playwright = self._browser, self._playwright
        self._browser = None
        self._playwright = None
        self._is_initialized = False

        if browser is not None:
            try:
                await asyncio.wait_for(browser.close(), timeout=self.config.close_timeout)
            except asyncio.TimeoutError:
                logger.error(
                    f"Browser did not close within {self.config.close_timeout}s"
                )
            except Exception:
                logger.error("Error closing browser", exc_info=True)

        if playwright is not None:
            try:
                await playwright.stop()
            except Exception:
                logger.error("Error stopping Playwright", exc_info=True)

        if browser is not None:
            logger.info("Browser released")


def create_provider(
    config: Optional[BrowserConfig] = None,
    starter: Optional[PlaywrightStarter] = None,
) -> BrowserSessionProvider:
    """
    Factory function to create a browser session provider.

    Args:
        config: Launch configuration (uses env if None)
        starter: Optional Playwright starter (tests inject fakes here)

    Returns:
        BrowserSessionProvider with no browser launched yet
    """
    return BrowserSessionProvider(config=config, starter=starter)
