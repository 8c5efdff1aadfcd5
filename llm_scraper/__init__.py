"""llm-scraper: turn web pages into structured data with a headless browser and an LLM.

Public API:
    - LLMScraper: Preprocess a page and extract schema-validated data from it
    - ScraperRunOptions / ScraperLoadOptions / ScraperLLMOptions: Run options
    - ScraperLoadResult / ScraperCompletionResult: Results of the two steps
    - ContentFormat / ExtractionMode: Content and structured-output modes
"""

__version__ = "0.1.0"

from llm_scraper.completion import (
    CompletionError,
    ExtractionMode,
    ResponseParseError,
    ScraperCompletionResult,
    ScraperLLM,
    ScraperLLMOptions,
)
from llm_scraper.preprocess import (
    ContentFormat,
    FormatNotImplementedError,
    MissingFormatFunctionError,
    PreprocessError,
    ScraperLoadOptions,
    ScraperLoadResult,
    UnsupportedFormatError,
)
from llm_scraper.scraper import LLMScraper, ScraperRunOptions

__all__ = [
    "__version__",
    "LLMScraper",
    "ScraperLLM",
    "ScraperRunOptions",
    "ScraperLoadOptions",
    "ScraperLLMOptions",
    "ScraperLoadResult",
    "ScraperCompletionResult",
    "ContentFormat",
    "ExtractionMode",
    "PreprocessError",
    "UnsupportedFormatError",
    "FormatNotImplementedError",
    "MissingFormatFunctionError",
    "CompletionError",
    "ResponseParseError",
]
