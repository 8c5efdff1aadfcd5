"""Main entry point for llm-scraper."""

import argparse
import asyncio
import base64
import importlib
import json
import sys
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from llm_scraper import __version__
from llm_scraper.completion.models import ExtractionMode
from llm_scraper.config.settings import Settings
from llm_scraper.preprocess.models import ContentFormat
from llm_scraper.utils.logging import configure_logging

_CONTENT_SUFFIXES = {
    ContentFormat.HTML: ".html",
    ContentFormat.MARKDOWN: ".md",
}


def _probability(value: str) -> float:
    number = float(value)
    if not (0.0 < number <= 1.0):
        raise argparse.ArgumentTypeError("--top-p must be in (0.0, 1.0]")
    return number


def _timestamp_run_id(prefix: str) -> str:
    timestamp = datetime.now(UTC).strftime("%Y%m%d_%H%M%S")
    return f"{prefix}_{timestamp}"


def _resolve_run_dir(
    settings: Settings, *, prefix: str, out_run_dir: Path | None
) -> Path:
    if out_run_dir is not None:
        run_dir = out_run_dir
    else:
        run_dir = settings.output_dir / "runs" / _timestamp_run_id(prefix)
    run_dir.mkdir(parents=True, exist_ok=True)
    return run_dir


def _write_json(path: Path, payload: object) -> None:
    def _default(value: object):
        to_dict = getattr(value, "to_dict", None)
        if callable(to_dict):
            return to_dict()
        model_dump = getattr(value, "model_dump", None)
        if callable(model_dump):
            return model_dump(mode="json")
        return str(value)

    path.write_text(
        json.dumps(payload, indent=2, default=_default),
        encoding="utf-8",
    )


def _import_object(path: str) -> Any:
    """Import ``package.module:attribute``."""
    module_name, sep, attribute = path.partition(":")
    if not sep or not module_name or not attribute:
        raise ValueError(f"Expected 'module:attribute', got {path!r}")
    module = importlib.import_module(module_name)
    try:
        return getattr(module, attribute)
    except AttributeError as e:
        raise ValueError(f"{module_name} has no attribute {attribute!r}") from e


def _load_options(parsed: argparse.Namespace) -> dict[str, Any]:
    options: dict[str, Any] = {"format": parsed.format}
    if parsed.full_page:
        options["full_page"] = True
    if parsed.format_function:
        options["format_function"] = _import_object(parsed.format_function)
    return options


def _add_load_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("url", help="URL of the page to load")
    parser.add_argument(
        "--format",
        choices=[f.value for f in ContentFormat],
        default=ContentFormat.HTML.value,
        help="Content format the page is converted to (default: html)",
    )
    parser.add_argument(
        "--full-page",
        action="store_true",
        help="Capture the full scrollable page (image format)",
    )
    parser.add_argument(
        "--format-function",
        default=None,
        metavar="MODULE:FUNC",
        help="Page-to-string function for the custom format",
    )
    parser.add_argument(
        "--out-run-dir",
        type=Path,
        default=None,
        help="Optional output run directory (defaults under artifacts/runs/)",
    )


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser for the CLI."""
    parser = argparse.ArgumentParser(
        prog="llm-scraper",
        description="llm-scraper: extract structured data from web pages with an LLM",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m llm_scraper load https://news.ycombinator.com --format markdown
  python -m llm_scraper scrape https://news.ycombinator.com --schema myapp.schemas:TopStories
        """,
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=None,
        help="Set the log level (overrides settings)",
    )

    subparsers = parser.add_subparsers(
        dest="mode",
        title="modes",
        description="Available operating modes",
    )

    load_parser = subparsers.add_parser(
        "load",
        help="Load a page and write its content only (no LLM call)",
    )
    _add_load_arguments(load_parser)

    scrape_parser = subparsers.add_parser(
        "scrape",
        help="Load a page and extract data matching a Pydantic schema",
    )
    _add_load_arguments(scrape_parser)
    scrape_parser.add_argument(
        "--schema",
        required=True,
        metavar="MODULE:MODEL",
        help="Pydantic model describing the data to extract",
    )
    scrape_parser.add_argument(
        "--prompt",
        default=None,
        help="System prompt override",
    )
    scrape_parser.add_argument(
        "--temperature",
        type=float,
        default=None,
        help="Sampling temperature (default from COMPLETION_DEFAULT_TEMPERATURE)",
    )
    scrape_parser.add_argument(
        "--max-tokens",
        type=int,
        default=None,
        help="Maximum completion tokens (default from COMPLETION_DEFAULT_MAX_TOKENS)",
    )
    scrape_parser.add_argument(
        "--top-p",
        type=_probability,
        default=None,
        help="Nucleus sampling probability mass",
    )
    scrape_parser.add_argument(
        "--mode",
        dest="llm_mode",
        choices=[m.value for m in ExtractionMode],
        default=ExtractionMode.AUTO.value,
        help="Structured output mode (default: auto)",
    )

    return parser


async def _load_page(url: str, options: dict[str, Any]):
    from llm_scraper.browser.session import open_page
    from llm_scraper.scraper.service import LLMScraper

    scraper = LLMScraper()
    async with open_page(url) as page:
        return await scraper.preprocess(page, options)


def main(args: list[str] | None = None) -> int:
    """Main entry point for the application.

    Args:
        args: Command line arguments (defaults to sys.argv[1:]).

    Returns:
        Exit code (0 for success, non-zero for errors).
    """
    parser = create_parser()
    parsed = parser.parse_args(args)

    try:
        settings = Settings()
    except Exception as e:
        print(f"Error loading settings: {e}", file=sys.stderr)
        return 1

    log_level = parsed.log_level or settings.log_level
    logger = configure_logging(level=log_level)

    if parsed.mode is None:
        parser.print_help()
        return 0

    logger.info("llm-scraper v%s starting in %s mode", __version__, parsed.mode)

    try:
        options = _load_options(parsed)
    except (ImportError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if parsed.mode == "load":
        from playwright.async_api import Error as PlaywrightError

        from llm_scraper.preprocess.service import PreprocessError

        run_dir = _resolve_run_dir(
            settings,
            prefix="load",
            out_run_dir=getattr(parsed, "out_run_dir", None),
        )

        try:
            loaded = asyncio.run(_load_page(parsed.url, options))
        except (PreprocessError, PlaywrightError, ValueError) as e:
            print(f"Error: {e}", file=sys.stderr)
            return 1

        if loaded.format == ContentFormat.IMAGE:
            content_path = run_dir / "screenshot.png"
            content_path.write_bytes(base64.b64decode(loaded.content))
        else:
            suffix = _CONTENT_SUFFIXES.get(loaded.format, ".txt")
            content_path = run_dir / f"content{suffix}"
            content_path.write_text(loaded.content, encoding="utf-8")

        _write_json(
            run_dir / "load.json",
            {
                "url": loaded.url,
                "format": loaded.format.value,
                "content_path": str(content_path),
            },
        )
        print(f"Wrote: {content_path}")
        print(f"URL: {loaded.url}")
        print(f"Format: {loaded.format.value}")
        return 0

    if parsed.mode == "scrape":
        from playwright.async_api import Error as PlaywrightError

        from llm_scraper.completion.errors import CompletionError
        from llm_scraper.preprocess.service import PreprocessError
        from llm_scraper.scraper.service import LLMScraper

        try:
            schema = _import_object(parsed.schema)
        except (ImportError, ValueError) as e:
            print(f"Error: {e}", file=sys.stderr)
            return 1

        options.update(
            {
                key: value
                for key, value in {
                    "prompt": parsed.prompt,
                    "temperature": parsed.temperature,
                    "max_tokens": parsed.max_tokens,
                    "top_p": parsed.top_p,
                    "mode": parsed.llm_mode,
                }.items()
                if value is not None
            }
        )

        run_dir = _resolve_run_dir(
            settings,
            prefix="scrape",
            out_run_dir=getattr(parsed, "out_run_dir", None),
        )

        scraper = LLMScraper(settings=settings)
        try:
            result = asyncio.run(scraper.scrape_url(parsed.url, schema, options))
        except (PreprocessError, CompletionError, PlaywrightError, ValueError) as e:
            print(f"Error: {e}", file=sys.stderr)
            return 1

        _write_json(run_dir / "result.json", result)
        print(f"Wrote: {run_dir / 'result.json'}")
        print(json.dumps(result.to_dict()["data"], indent=2))
        return 0

    return 0


if __name__ == "__main__":
    sys.exit(main())
