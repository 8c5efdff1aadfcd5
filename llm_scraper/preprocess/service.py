"""Page preprocessing: turn a browser page into content for the model."""

from __future__ import annotations

import base64
import inspect
import logging
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, Any

from markdownify import markdownify

from llm_scraper.browser.config import BrowserConfig, get_browser_config
from llm_scraper.preprocess.models import (
    ContentFormat,
    ScraperLoadOptions,
    ScraperLoadResult,
)

if TYPE_CHECKING:
    from playwright.async_api import Page

logger = logging.getLogger(__name__)

BODY_HTML_SCRIPT = "() => document.body.innerHTML"

# Readability mutates the document it parses, so it gets a clone.
READABILITY_SCRIPT = """async (scriptUrl) => {
  const { Readability } = await import(scriptUrl);
  const article = new Readability(document.cloneNode(true)).parse();
  if (!article) {
    return null;
  }
  return { title: article.title, textContent: article.textContent };
}"""


class PreprocessError(Exception):
    """Exception raised when a page cannot be converted to content."""

    def __init__(self, message: str, original_error: Exception | None = None):
        super().__init__(message)
        self.original_error = original_error


class UnsupportedFormatError(PreprocessError):
    """Raised for a format the preprocessor has no handler for."""


class FormatNotImplementedError(PreprocessError):
    """Raised for a known format whose extraction is not implemented."""


class MissingFormatFunctionError(PreprocessError):
    """Raised when the custom format is requested without a callable."""


class PagePreprocessor:
    """Converts a page into a ScraperLoadResult according to a content format.

    Attributes:
        config: Browser configuration (supplies the readability script URL).
    """

    def __init__(self, config: BrowserConfig | None = None) -> None:
        self.config = config or get_browser_config()
        self._handlers: dict[
            ContentFormat, Callable[[Page, ScraperLoadOptions], Awaitable[str]]
        ] = {
            ContentFormat.HTML: self._load_html,
            ContentFormat.MARKDOWN: self._load_markdown,
            ContentFormat.TEXT: self._load_text,
            ContentFormat.CLEANUP: self._load_cleanup,
            ContentFormat.IMAGE: self._load_image,
            ContentFormat.CUSTOM: self._load_custom,
        }

    async def load(
        self, page: Page, options: ScraperLoadOptions | None = None
    ) -> ScraperLoadResult:
        """Extract content from the page in the requested format.

        Args:
            page: Browser page, already navigated.
            options: Load options. Defaults to the ``html`` format.

        Returns:
            The page URL, the extracted content and its format.

        Raises:
            UnsupportedFormatError: No handler exists for the format.
            FormatNotImplementedError: The format is recognised but not implemented.
            MissingFormatFunctionError: ``custom`` was requested without a function.
            PreprocessError: Extraction produced no usable content.
        """
        options = options or ScraperLoadOptions()
        content_format = options.format

        try:
            content_format = ContentFormat(content_format)
        except ValueError as e:
            raise UnsupportedFormatError(
                f"Unsupported format: {options.format!r}", e
            ) from e

        url = page.url
        logger.debug("Preprocessing %s as %s", url, content_format.value)

        content = await self._handlers[content_format](page, options)

        logger.info(
            "Loaded %s as %s (%d chars)", url, content_format.value, len(content)
        )
        return ScraperLoadResult(url=url, content=content, format=content_format)

    async def _load_html(self, page: Page, options: ScraperLoadOptions) -> str:
        return await page.content()

    async def _load_markdown(self, page: Page, options: ScraperLoadOptions) -> str:
        body = await page.evaluate(BODY_HTML_SCRIPT)
        return markdownify(body or "", heading_style="ATX").strip()

    async def _load_text(self, page: Page, options: ScraperLoadOptions) -> str:
        readable: dict[str, Any] | None = await page.evaluate(
            READABILITY_SCRIPT, self.config.readability_script_url
        )
        if not readable:
            raise PreprocessError(f"Readability could not parse page: {page.url}")

        title = readable.get("title") or ""
        text = readable.get("textContent") or ""
        return f"Page Title: {title}\n{text}"

    async def _load_cleanup(self, page: Page, options: ScraperLoadOptions) -> str:
        raise FormatNotImplementedError("Cleanup not implemented")

    async def _load_image(self, page: Page, options: ScraperLoadOptions) -> str:
        image = await page.screenshot(full_page=options.full_page, type="png")
        return base64.b64encode(image).decode("ascii")

    async def _load_custom(self, page: Page, options: ScraperLoadOptions) -> str:
        format_function = options.format_function
        if format_function is None or not callable(format_function):
            raise MissingFormatFunctionError(
                "format_function must be provided in custom mode"
            )

        content = format_function(page)
        if inspect.isawaitable(content):
            content = await content

        if not isinstance(content, str):
            raise PreprocessError(
                "format_function must return a string, "
                f"got {type(content).__name__}"
            )
        return content
