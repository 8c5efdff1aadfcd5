"""Scraper service: preprocess a page and extract structured data from it."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any, TypeVar

from pydantic import BaseModel

from llm_scraper.config.settings import Settings, get_settings
from llm_scraper.preprocess.models import ScraperLoadOptions, ScraperLoadResult
from llm_scraper.preprocess.service import PagePreprocessor
from llm_scraper.scraper.models import ScraperRunOptions

if TYPE_CHECKING:
    from playwright.async_api import Page

    from llm_scraper.browser.config import BrowserConfig
    from llm_scraper.completion.llm import ScraperLLM
    from llm_scraper.completion.models import (
        ScraperCompletionResult,
        ScraperLLMOptions,
    )

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)

RunOptions = ScraperRunOptions | ScraperLoadOptions | Mapping[str, Any] | None


class LLMScraper:
    """Turns web pages into schema-validated data using an LLM.

    Attributes:
        preprocessor: Converts pages into content of a given format.
        settings: Application settings (artifact output directory).
    """

    def __init__(
        self,
        llm: ScraperLLM | None = None,
        preprocessor: PagePreprocessor | None = None,
        settings: Settings | None = None,
    ) -> None:
        """Initialize the LLMScraper.

        Args:
            llm: LLM client. Created from the completion config on first use
                if not provided.
            preprocessor: Page preprocessor. If not provided, uses default.
            settings: Application settings. If not provided, uses default.
        """
        self._llm = llm
        self.preprocessor = preprocessor or PagePreprocessor()
        self.settings = settings or get_settings()

    @property
    def llm(self) -> ScraperLLM:
        if self._llm is None:
            from llm_scraper.completion.llm import ScraperLLM

            self._llm = ScraperLLM()
        return self._llm

    async def preprocess(
        self, page: Page, options: RunOptions = None
    ) -> ScraperLoadResult:
        """Convert a page into content of the requested format."""
        return await self.preprocessor.load(page, ScraperRunOptions.coerce(options))

    async def generate_completions(
        self,
        page: ScraperLoadResult,
        schema: type[T],
        options: ScraperLLMOptions | Mapping[str, Any] | None = None,
    ) -> ScraperCompletionResult[T]:
        """Ask the model for data matching ``schema`` from a loaded page."""
        return await self.llm.generate_completions(
            page, schema, ScraperRunOptions.coerce(options)
        )

    async def run(
        self, page: Page, schema: type[T], options: RunOptions = None
    ) -> ScraperCompletionResult[T]:
        """Preprocess the page, then extract data matching ``schema``.

        Args:
            page: Browser page, already navigated.
            schema: Pydantic model class describing the data to extract.
            options: Load and model options (model or mapping).

        Returns:
            Validated data plus the page URL.
        """
        run_options = ScraperRunOptions.coerce(options)
        loaded = await self.preprocessor.load(page, run_options)
        return await self.llm.generate_completions(loaded, schema, run_options)

    async def scrape_url(
        self,
        url: str,
        schema: type[T],
        options: RunOptions = None,
        save_artifact: bool = False,
        browser_config: BrowserConfig | None = None,
    ) -> ScraperCompletionResult[T]:
        """Open ``url`` in a headless browser and run the scraper on it.

        The browser is always closed before returning.

        Args:
            url: Page to scrape.
            schema: Pydantic model class describing the data to extract.
            options: Load and model options.
            save_artifact: Whether to write result.json to the output directory.
            browser_config: Browser configuration. If not provided, uses default.

        Returns:
            Validated data plus the page URL.
        """
        from llm_scraper.browser.session import open_page

        run_options = ScraperRunOptions.coerce(options)
        logger.info("Scraping %s as %s", url, run_options.format.value)

        try:
            async with open_page(url, browser_config) as page:
                result = await self.run(page, schema, run_options)
        except Exception as e:
            logger.error("Error scraping %s: %s", url, e)
            raise

        if save_artifact:
            output_path = self.settings.output_dir / "result.json"
            result.save_json(output_path)
            logger.info("Saved scrape result to: %s", output_path)

        return result
