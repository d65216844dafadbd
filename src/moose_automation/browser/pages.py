"""
Page Helpers

Scoped per-request browser contexts and bounded element probes.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from playwright.async_api import Browser, Page, TimeoutError as PlaywrightTimeout

from ..config import BrowserConfig

logger = logging.getLogger(__name__)


@asynccontextmanager
async def open_page(
    browser: Browser,
    config: BrowserConfig,
    *,
    accept_downloads: bool = False,
) -> AsyncIterator[Page]:
    """
    Open an isolated context and page for one request.

    The page and its context are closed exactly once when the block exits,
    whether it returns or raises. The browser itself stays open.

    Args:
        browser: Shared browser handle
        config: Viewport and timeout settings
        accept_downloads: Allow file downloads in this context

    Yields:
        Fresh Playwright Page with default timeouts applied
    """
    context = await browser.new_context(
        viewport=config.viewport,
        accept_downloads=accept_downloads,
    )
    try:
        page = await context.new_page()
    except BaseException:
        await _close_quietly(context, "context")
        raise

    page.set_default_timeout(config.page_timeout)
    page.set_default_navigation_timeout(config.page_timeout)

    try:
        yield page
    finally:
        await _close_quietly(page, "page")
        await _close_quietly(context, "context")


async def _close_quietly(resource, name: str) -> None:
    try:
        await resource.close()
    except Exception as e:
        logger.warning(f"Failed to close {name}: {e}")


async def is_visible_within(page: Page, selector: str, timeout: int) -> bool:
    """
    Wait up to timeout ms for an element to become visible.

    Args:
        page: Playwright Page instance
        selector: CSS or text selector
        timeout: Maximum wait time in ms

    Returns:
        True if the element became visible, False on timeout
    """
    try:
        await page.locator(selector).wait_for(state="visible", timeout=timeout)
        return True
    except PlaywrightTimeout:
        return False
