"""Pytest configuration and shared fixtures."""

from __future__ import annotations

from typing import Any

import pytest
from pydantic import BaseModel, Field

PNG_BYTES = b"\x89PNG\r\n\x1a\nfake-image-data"


class FakePage:
    """Stand-in for a Playwright page with canned responses."""

    def __init__(
        self,
        url: str = "https://example.com/articles/1",
        html: str = "<html><head><title>Example</title></head><body></body></html>",
        body_html: str = "",
        readable: dict[str, Any] | None = None,
        screenshot: bytes = PNG_BYTES,
    ) -> None:
        self.url = url
        self.html = html
        self.body_html = body_html
        self.readable = readable
        self.screenshot_bytes = screenshot
        self.evaluate_calls: list[tuple[str, Any]] = []
        self.screenshot_calls: list[dict[str, Any]] = []
        self.closed = False

    async def content(self) -> str:
        return self.html

    async def evaluate(self, expression: str, arg: Any = None) -> Any:
        self.evaluate_calls.append((expression, arg))
        if "Readability" in expression:
            return self.readable
        if "innerHTML" in expression:
            return self.body_html
        raise AssertionError(f"Unexpected script: {expression}")

    async def screenshot(self, **kwargs: Any) -> bytes:
        self.screenshot_calls.append(kwargs)
        return self.screenshot_bytes

    async def close(self) -> None:
        self.closed = True


class Story(BaseModel):
    """Sample schema item for extraction tests."""

    title: str
    points: int
    by: str


class TopStories(BaseModel):
    """Sample schema for extraction tests."""

    top: list[Story] = Field(..., description="Top stories on the page")


@pytest.fixture
def sample_url() -> str:
    """Sample page URL for testing."""
    return "https://example.com/articles/1"


@pytest.fixture
def fake_page(sample_url: str) -> FakePage:
    """A fake page serving a small article."""
    return FakePage(
        url=sample_url,
        html="<html><body><h1>Hello</h1><p>World</p></body></html>",
        body_html="<h1>Hello</h1><p>Some <strong>bold</strong> text</p>",
        readable={"title": "Hello", "textContent": "Some bold text"},
    )


@pytest.fixture
def top_stories_json() -> str:
    """A well-formed response for the TopStories schema."""
    return (
        '{"top": [{"title": "Show HN: A thing", "points": 42, "by": "alice"}, '
        '{"title": "Ask HN: Another", "points": 7, "by": "bob"}]}'
    )


@pytest.fixture
def make_page():
    """Factory for FakePage instances."""
    return FakePage


@pytest.fixture
def top_stories_schema() -> type[TopStories]:
    """The TopStories schema class."""
    return TopStories
