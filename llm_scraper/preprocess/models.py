"""Data models for page preprocessing."""

from __future__ import annotations

from collections.abc import Callable
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ContentFormat(str, Enum):
    """Content-extraction mode applied to a page before the model sees it."""

    HTML = "html"
    TEXT = "text"
    MARKDOWN = "markdown"
    CLEANUP = "cleanup"
    IMAGE = "image"
    CUSTOM = "custom"


class ScraperLoadOptions(BaseModel):
    """Options controlling how a page is turned into content.

    Attributes:
        format: Extraction mode. Defaults to raw HTML.
        format_function: Callable receiving the page and returning a string
            (or an awaitable of one). Required for the ``custom`` format.
        full_page: Capture the full scrollable page for the ``image`` format.
    """

    model_config = ConfigDict(extra="forbid")

    format: ContentFormat = Field(
        default=ContentFormat.HTML, description="Content-extraction mode"
    )
    format_function: Callable[..., Any] | None = Field(
        default=None,
        description="Custom page-to-string function (format='custom')",
        exclude=True,
    )
    full_page: bool = Field(
        default=False, description="Capture the full page (format='image')"
    )


class ScraperLoadResult(BaseModel):
    """A page's content plus its format label and source URL.

    ``content`` is markup for ``html``, Markdown for ``markdown``,
    ``"Page Title: ...\\n..."`` text for ``text``, a base64-encoded PNG for
    ``image`` and whatever string the caller's function produced for
    ``custom``.
    """

    url: str = Field(..., description="URL the page was loaded from")
    content: str = Field(..., description="Extracted page content")
    format: ContentFormat = Field(..., description="Format the content is in")

    def to_dict(self) -> dict:
        """Serialize the load result to a dictionary."""
        return self.model_dump(mode="json")
