"""Data models for the completion step."""

from __future__ import annotations

import json
from enum import Enum
from pathlib import Path
from typing import Annotated, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field

T = TypeVar("T", bound=BaseModel)


class ExtractionMode(str, Enum):
    """How structured output is requested from the provider.

    - AUTO: pass the schema model as ``response_format``
    - JSON: ask for a bare JSON object (``{"type": "json_object"}``)
    - TOOL: force a single function call whose parameters are the schema
    """

    AUTO = "auto"
    JSON = "json"
    TOOL = "tool"


class ScraperLLMOptions(BaseModel):
    """Per-request model options.

    Unset sampling values fall back to the CompletionConfig defaults.
    """

    model_config = ConfigDict(extra="forbid")

    prompt: str | None = Field(default=None, description="System prompt override")
    temperature: Annotated[float, Field(ge=0.0, le=2.0)] | None = Field(
        default=None, description="Sampling temperature"
    )
    max_tokens: Annotated[int, Field(gt=0)] | None = Field(
        default=None, description="Maximum completion tokens"
    )
    top_p: Annotated[float, Field(gt=0.0, le=1.0)] | None = Field(
        default=None, description="Nucleus sampling probability mass"
    )
    mode: ExtractionMode = Field(
        default=ExtractionMode.AUTO, description="Structured output mode"
    )


class ScraperCompletionResult(BaseModel, Generic[T]):
    """Schema-validated data extracted from a page, plus the page URL."""

    data: T = Field(..., description="Validated structured data")
    url: str = Field(..., description="URL the data was extracted from")

    def to_dict(self) -> dict:
        """Serialize the completion result to a dictionary."""
        return self.model_dump(mode="json")

    def save_json(self, path: Path | str) -> None:
        """Save the completion result to a JSON file.

        Args:
            path: Path to the output JSON file.
        """
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w") as f:
            json.dump(self.to_dict(), f, indent=2)
