"""Data models for a full scrape run."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel

from llm_scraper.completion.models import ScraperLLMOptions
from llm_scraper.preprocess.models import ScraperLoadOptions


class ScraperRunOptions(ScraperLoadOptions, ScraperLLMOptions):
    """Load options and model options for a single run."""

    @classmethod
    def coerce(
        cls, options: BaseModel | Mapping[str, Any] | None
    ) -> ScraperRunOptions:
        """Build run options from None, a mapping or either partial options model.

        ``format_function`` is excluded from dumps, so fields are copied by
        attribute rather than through ``model_dump``.
        """
        if options is None:
            return cls()
        if isinstance(options, cls):
            return options
        if isinstance(options, Mapping):
            return cls.model_validate(dict(options))
        if isinstance(options, (ScraperLoadOptions, ScraperLLMOptions)):
            values = {
                name: getattr(options, name)
                for name in type(options).model_fields
                if name in options.model_fields_set
            }
            return cls.model_validate(values)
        raise TypeError(f"Unsupported options type: {type(options).__name__}")
