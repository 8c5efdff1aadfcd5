"""Headless browser session helpers.

Public API:
    - open_page: Async context manager yielding a navigated Playwright page
    - BrowserConfig: Configuration settings for the browser
    - get_browser_config: Get the browser configuration singleton
"""

from llm_scraper.browser.config import (
    BrowserConfig,
    get_browser_config,
    reset_browser_config,
)
from llm_scraper.browser.session import open_page

__all__ = [
    "open_page",
    "BrowserConfig",
    "get_browser_config",
    "reset_browser_config",
]
