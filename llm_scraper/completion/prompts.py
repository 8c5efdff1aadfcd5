"""Prompt builders for page data extraction."""

from __future__ import annotations

import json
from typing import Any

from pydantic import BaseModel

from llm_scraper.preprocess.models import ContentFormat, ScraperLoadResult

DEFAULT_SYSTEM_PROMPT = (
    "You are a sophisticated web scraper. Extract the contents of the webpage"
)

EXTRACTION_INSTRUCTION = (
    "Please extract data from this webpage according to the schema provided."
)


def schema_instruction(schema: type[BaseModel]) -> str:
    """Describe the expected output shape as a JSON schema block."""
    return "\n".join(
        [
            "Respond with a single JSON object (no markdown, no commentary) "
            "matching this JSON schema:",
            json.dumps(schema.model_json_schema(), indent=2),
        ]
    )


def build_user_content(
    page: ScraperLoadResult, schema: type[BaseModel]
) -> str | list[dict[str, Any]]:
    """Build the user message content for a loaded page.

    Text formats are inlined. Screenshots are attached as a base64 image part
    so vision-capable models see the page itself.
    """
    if page.format == ContentFormat.IMAGE:
        text = (
            f"{EXTRACTION_INSTRUCTION} URL: {page.url}\n\n"
            "Content: a screenshot of the page is attached.\n\n"
            f"{schema_instruction(schema)}"
        )
        return [
            {"type": "text", "text": text},
            {
                "type": "image_url",
                "image_url": {"url": f"data:image/png;base64,{page.content}"},
            },
        ]

    return (
        f"{EXTRACTION_INSTRUCTION} URL: {page.url}\n\n"
        f"Content:\n{page.content}\n\n"
        f"{schema_instruction(schema)}"
    )


def build_messages(
    page: ScraperLoadResult,
    schema: type[BaseModel],
    prompt: str | None = None,
) -> list[dict[str, Any]]:
    """Build the role-tagged message list sent to the provider."""
    return [
        {"role": "system", "content": prompt or DEFAULT_SYSTEM_PROMPT},
        {"role": "user", "content": build_user_content(page, schema)},
    ]
