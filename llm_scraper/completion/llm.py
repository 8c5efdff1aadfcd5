"""LLM client for page data extraction.

Sends a loaded page to the configured provider through LiteLLM and
validates the reply against the caller's Pydantic schema.
"""

from __future__ import annotations

import asyncio
import json
import logging
import os
import warnings
from typing import Any, TypeVar

from pydantic import BaseModel

from llm_scraper.completion.config import CompletionConfig, get_completion_config
from llm_scraper.completion.errors import CompletionError
from llm_scraper.completion.models import (
    ExtractionMode,
    ScraperCompletionResult,
    ScraperLLMOptions,
)
from llm_scraper.completion.parsing import parse_structured_output
from llm_scraper.completion.prompts import build_messages
from llm_scraper.preprocess.models import ScraperLoadResult

# LiteLLM loads `.env` into the process environment in DEV mode. Default to
# PRODUCTION unless the user explicitly opted into DEV.
os.environ.setdefault("LITELLM_MODE", "PRODUCTION")

from litellm import Timeout, acompletion  # noqa: E402

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)

EXTRACTION_TOOL_NAME = "extract_page_data"

warnings.filterwarnings(
    "ignore",
    message=r"(?s)^Pydantic serializer warnings:.*",
    category=UserWarning,
)


class ScraperLLM:
    """LLM client that turns a ScraperLoadResult into schema-validated data."""

    def __init__(self, config: CompletionConfig | None = None):
        """Initialize the LLM client.

        Args:
            config: Optional CompletionConfig. Uses global config if not provided.
        """
        self.config = config or get_completion_config()
        self._setup_provider_env()

    def _setup_provider_env(self) -> None:
        """Set up provider-specific environment variables.

        Anthropic reads custom base URLs from the environment rather than
        from call parameters.
        """
        if self.config.llm_base_url and self.config.llm_provider == "anthropic":
            # The Anthropic SDK appends /v1 itself
            base_url = self.config.llm_base_url.rstrip("/")
            if base_url.endswith("/v1"):
                base_url = base_url[:-3]
            os.environ["ANTHROPIC_BASE_URL"] = base_url
            if self.config.llm_api_key:
                os.environ["ANTHROPIC_API_KEY"] = self.config.llm_api_key

    def _get_model_name(self) -> str:
        """Get the model name formatted for LiteLLM.

        Returns:
            Model name with provider prefix if needed.
        """
        if self.config.llm_provider == "anthropic":
            if "/" in self.config.llm_model:
                return self.config.llm_model
            return f"anthropic/{self.config.llm_model}"

        # Custom base URLs (local models, proxies) are routed as OpenAI-compatible
        if self.config.llm_base_url:
            if "/" in self.config.llm_model:
                return self.config.llm_model
            return f"openai/{self.config.llm_model}"

        if self.config.llm_provider == "openai":
            return self.config.llm_model

        return f"{self.config.llm_provider}/{self.config.llm_model}"

    async def generate_completions(
        self,
        page: ScraperLoadResult,
        schema: type[T],
        options: ScraperLLMOptions | None = None,
    ) -> ScraperCompletionResult[T]:
        """Extract schema-shaped data from a loaded page.

        Args:
            page: Result of preprocessing the page.
            schema: Pydantic model class describing the data to extract.
            options: Prompt, sampling and mode options.

        Returns:
            Validated data plus the page URL.

        Raises:
            CompletionError: The provider call failed or returned nothing.
            ResponseParseError: The response could not be validated against
                the schema, even after the embedded-JSON fallback.
        """
        options = options or ScraperLLMOptions()
        messages = build_messages(page, schema, options.prompt)

        last_error: Exception | None = None
        for attempt in range(self.config.llm_max_retries + 1):
            try:
                response = await self._call_completion(
                    messages=messages,
                    schema=schema,
                    options=options,
                )
                break

            except Timeout as e:
                raise CompletionError(
                    "LLM request timed out. This usually means the model/server is slow "
                    f"(timeout={self.config.llm_timeout}s). Increase "
                    "`COMPLETION_LLM_TIMEOUT` (or use a faster model).",
                    e,
                ) from e

            except Exception as e:
                last_error = e
                if attempt < self.config.llm_max_retries:
                    is_rate_limit = "rate_limit" in str(e).lower() or "429" in str(e)
                    base_wait = 8 if is_rate_limit else 2
                    wait_time = base_wait * (attempt + 1)
                    logger.warning(
                        "LLM call failed (attempt %d), retrying in %ds: %s",
                        attempt + 1,
                        wait_time,
                        e,
                    )
                    await asyncio.sleep(wait_time)
                else:
                    raise CompletionError(f"LLM call failed: {e}", e) from e
        else:
            raise CompletionError(f"LLM call failed: {last_error}", last_error)

        text = self._response_text(response, options.mode)
        logger.debug("LLM response for %s: %s", page.url, text[:500])

        data = parse_structured_output(text, schema)
        return ScraperCompletionResult[schema](data=data, url=page.url)

    async def _call_completion(
        self,
        *,
        messages: list[dict[str, Any]],
        schema: type[BaseModel],
        options: ScraperLLMOptions,
    ):
        """Make the actual LLM API call.

        Returns:
            LiteLLM completion response.
        """
        temperature = options.temperature
        if temperature is None:
            temperature = self.config.default_temperature

        kwargs: dict[str, Any] = {
            "model": self._get_model_name(),
            "messages": messages,
            "timeout": self.config.llm_timeout,
            "temperature": temperature,
            "max_tokens": options.max_tokens or self.config.default_max_tokens,
        }

        if options.top_p is not None:
            kwargs["top_p"] = options.top_p

        reasoning_effort = _normalize_reasoning_effort(self.config.llm_reasoning_effort)
        if reasoning_effort is not None:
            kwargs["reasoning_effort"] = reasoning_effort

        if self.config.llm_api_key:
            kwargs["api_key"] = self.config.llm_api_key

        # Anthropic takes its base URL from the environment (_setup_provider_env)
        if self.config.llm_base_url and self.config.llm_provider != "anthropic":
            kwargs["base_url"] = self.config.llm_base_url

        if options.mode == ExtractionMode.AUTO:
            kwargs["response_format"] = schema
        elif options.mode == ExtractionMode.JSON:
            kwargs["response_format"] = {"type": "json_object"}
        elif options.mode == ExtractionMode.TOOL:
            kwargs["tools"] = [_extraction_tool(schema)]
            kwargs["tool_choice"] = {
                "type": "function",
                "function": {"name": EXTRACTION_TOOL_NAME},
            }

        logger.info(
            "Requesting completion from %s (mode=%s)",
            kwargs["model"],
            options.mode.value,
        )
        return await acompletion(**kwargs)

    def _response_text(self, response, mode: ExtractionMode) -> str:
        """Pull the text to validate out of a completion response.

        Tool-call arguments win in tool mode, and otherwise stand in for
        missing or blank content (some providers return structured output that way).
        """
        message = response.choices[0].message
        content = getattr(message, "content", None)

        arguments = None
        tool_calls = getattr(message, "tool_calls", None) or []
        if tool_calls:
            function = getattr(tool_calls[0], "function", None)
            arguments = getattr(function, "arguments", None)
            if not (isinstance(arguments, str) and arguments.strip()):
                arguments = None

        if isinstance(content, str) and not content.strip():
            content = None

        if arguments is not None and (content is None or mode == ExtractionMode.TOOL):
            content = arguments

        if content is None:
            raise CompletionError("LLM returned no content to parse.")

        if not isinstance(content, str):
            content = json.dumps(content)

        return content


def _extraction_tool(schema: type[BaseModel]) -> dict[str, Any]:
    """Describe the schema as a single function tool."""
    return {
        "type": "function",
        "function": {
            "name": EXTRACTION_TOOL_NAME,
            "description": "Record the data extracted from the webpage.",
            "parameters": schema.model_json_schema(),
        },
    }


def _normalize_reasoning_effort(value: str | None) -> str | None:
    if value is None:
        return None
    normalized = str(value).strip().lower()
    if not normalized:
        return None
    if normalized in {"off", "disabled", "0", "false"}:
        return "disable"
    return normalized
