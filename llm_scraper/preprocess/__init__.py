"""Page preprocessing.

Converts a browser page into one of several content formats before the
model is asked to extract data from it.

Public API:
    - PagePreprocessor: Format dispatcher producing a ScraperLoadResult
    - ContentFormat: Supported content-extraction modes
    - ScraperLoadOptions: Options for a page load
    - ScraperLoadResult: URL, content and format of a loaded page
"""

from llm_scraper.preprocess.models import (
    ContentFormat,
    ScraperLoadOptions,
    ScraperLoadResult,
)
from llm_scraper.preprocess.service import (
    FormatNotImplementedError,
    MissingFormatFunctionError,
    PagePreprocessor,
    PreprocessError,
    UnsupportedFormatError,
)

__all__ = [
    "PagePreprocessor",
    "ContentFormat",
    "ScraperLoadOptions",
    "ScraperLoadResult",
    "PreprocessError",
    "UnsupportedFormatError",
    "FormatNotImplementedError",
    "MissingFormatFunctionError",
]
