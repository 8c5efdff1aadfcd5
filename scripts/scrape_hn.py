#!/usr/bin/env python3
"""Manual test script: extract the top Hacker News stories.

Usage:
    python scripts/scrape_hn.py [format]

Example:
    python scripts/scrape_hn.py markdown

The schema can also be used from the CLI:
    python -m llm_scraper scrape https://news.ycombinator.com --schema scripts.scrape_hn:TopStories
"""

import asyncio
import json
import sys
from pathlib import Path

from pydantic import BaseModel, Field

# Add the project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from llm_scraper import CompletionError, LLMScraper, PreprocessError
from llm_scraper.completion.config import get_completion_config
from llm_scraper.config.settings import get_settings
from llm_scraper.utils.logging import configure_logging

HN_URL = "https://news.ycombinator.com"


class Story(BaseModel):
    title: str
    points: int
    by: str
    comments_url: str = Field(..., alias="commentsURL")


class TopStories(BaseModel):
    top: list[Story] = Field(
        ..., min_length=5, max_length=5, description="Top 5 stories on Hacker News"
    )


async def main():
    content_format = sys.argv[1] if len(sys.argv) > 1 else "html"

    settings = get_settings()
    configure_logging(settings.log_level)
    config = get_completion_config()

    print(f"\n{'=' * 60}")
    print("Hacker News Scrape")
    print(f"{'=' * 60}")
    print(f"URL: {HN_URL}")
    print(f"Format: {content_format}")
    print(f"LLM Provider: {config.llm_provider}")
    print(f"LLM Model: {config.llm_model}")
    print()

    scraper = LLMScraper(settings=settings)
    try:
        result = await scraper.scrape_url(
            HN_URL, TopStories, {"format": content_format}, save_artifact=True
        )
    except (PreprocessError, CompletionError) as e:
        print(f"❌ Scrape failed: {e}")
        sys.exit(1)

    print("✅ Scrape successful!\n")
    for index, story in enumerate(result.data.top, start=1):
        print(f"{index}. {story.title} ({story.points} points by {story.by})")

    print(f"\nArtifact saved to: {settings.output_dir / 'result.json'}\n")
    print(json.dumps(result.to_dict()["data"], indent=2))


if __name__ == "__main__":
    asyncio.run(main())
