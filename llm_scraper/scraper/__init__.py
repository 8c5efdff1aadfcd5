"""LLM-driven page scraping.

Public API:
    - LLMScraper: Preprocess a page and extract structured data from it
    - ScraperRunOptions: Combined load and model options for a run
"""

from llm_scraper.scraper.models import ScraperRunOptions
from llm_scraper.scraper.service import LLMScraper

__all__ = ["LLMScraper", "ScraperRunOptions"]
