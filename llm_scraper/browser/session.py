"""Playwright session helper.

Launching, navigating and closing are owned by Playwright; this module only
sequences them so callers get a ready page and a guaranteed cleanup.
"""

from __future__ import annotations

import contextlib
import logging
from collections.abc import AsyncIterator
from typing import TYPE_CHECKING, Any

from llm_scraper.browser.config import BrowserConfig, get_browser_config

if TYPE_CHECKING:
    from playwright.async_api import Page

logger = logging.getLogger(__name__)


async def launch_browser(playwright: Any, config: BrowserConfig) -> Any:
    """Launch a Chromium instance with the given configuration.

    Args:
        playwright: A started Playwright instance.
        config: Browser configuration.

    Returns:
        Launched Browser instance.
    """
    return await playwright.chromium.launch(headless=config.headless)


async def new_page(browser: Any, config: BrowserConfig) -> Page:
    """Open a new page sized to the configured viewport."""
    return await browser.new_page(
        viewport={"width": config.window_width, "height": config.window_height}
    )


@contextlib.asynccontextmanager
async def open_page(
    url: str, config: BrowserConfig | None = None
) -> AsyncIterator[Page]:
    """Launch a browser, navigate a fresh page to ``url`` and yield it.

    The page and browser are closed on exit, including when navigation or
    the caller's block raises.

    Args:
        url: Address to navigate to.
        config: Browser configuration. If not provided, uses default.

    Yields:
        The navigated Playwright page.
    """
    from playwright.async_api import async_playwright

    config = config or get_browser_config()

    async with async_playwright() as playwright:
        browser = await launch_browser(playwright, config)
        page = None
        try:
            page = await new_page(browser, config)
            logger.info("Navigating to %s", url)
            await page.goto(
                url,
                wait_until=config.wait_until,
                timeout=config.navigation_timeout * 1000,
            )
            yield page
        finally:
            if page is not None:
                with contextlib.suppress(Exception):
                    await page.close()
            with contextlib.suppress(Exception):
                await browser.close()
