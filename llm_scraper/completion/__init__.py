"""Structured data extraction with an LLM.

Public API:
    - ScraperLLM: LiteLLM client producing schema-validated completion results
    - ScraperLLMOptions: Prompt, sampling and mode options
    - ScraperCompletionResult: Validated data plus source URL
    - CompletionConfig: Configuration settings
    - parse_structured_output: Validate (and repair) a raw model response
"""

from llm_scraper.completion.config import (
    CompletionConfig,
    get_completion_config,
    reset_completion_config,
)
from llm_scraper.completion.errors import CompletionError, ResponseParseError
from llm_scraper.completion.llm import ScraperLLM
from llm_scraper.completion.models import (
    ExtractionMode,
    ScraperCompletionResult,
    ScraperLLMOptions,
)
from llm_scraper.completion.parsing import find_json_objects, parse_structured_output
from llm_scraper.completion.prompts import DEFAULT_SYSTEM_PROMPT

__all__ = [
    "ScraperLLM",
    "ScraperLLMOptions",
    "ScraperCompletionResult",
    "ExtractionMode",
    "CompletionConfig",
    "get_completion_config",
    "reset_completion_config",
    "CompletionError",
    "ResponseParseError",
    "parse_structured_output",
    "find_json_objects",
    "DEFAULT_SYSTEM_PROMPT",
]
