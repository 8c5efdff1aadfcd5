"""Validation and repair of raw model responses.

Models are asked for bare JSON but often wrap it in code fences or prose.
The whole response is validated first; if that fails, one fallback pass
looks for embedded JSON objects and returns the first that validates.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterator
from typing import TypeVar

from pydantic import BaseModel, ValidationError

from llm_scraper.completion.errors import ResponseParseError

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)

_FENCED_BLOCK_RE = re.compile(r"```[a-zA-Z0-9_-]*\s*\n?(.*?)```", re.DOTALL)


def _object_spans(text: str) -> list[tuple[int, int]]:
    """Return ``(start, end)`` spans of balanced ``{...}`` objects in one pass.

    Braces inside JSON string literals are ignored. Strings are only tracked
    inside an open object, so quotes in surrounding prose do not count.
    Spans are ordered by start, which puts outer objects before nested ones.
    """
    spans: list[tuple[int, int]] = []
    open_braces: list[int] = []
    in_string = False
    escaped = False

    for idx, ch in enumerate(text):
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
            continue

        if ch == "{":
            open_braces.append(idx)
        elif ch == "}" and open_braces:
            spans.append((open_braces.pop(), idx + 1))
        elif ch == '"' and open_braces:
            in_string = True

    spans.sort()
    return spans


def find_json_objects(text: str) -> Iterator[str]:
    """Yield candidate JSON objects embedded in ``text``, most likely first.

    Order: fenced code blocks, then every balanced brace-delimited object by
    position (outer objects before the objects nested in them), then the
    span from the first ``{`` to the last ``}``.
    """
    seen: set[str] = set()

    def _fresh(candidate: str) -> bool:
        if candidate in seen:
            return False
        seen.add(candidate)
        return True

    for block in _FENCED_BLOCK_RE.findall(text):
        block = block.strip()
        if block.startswith("{") and _fresh(block):
            yield block

    for start, end in _object_spans(text):
        candidate = text[start:end]
        if _fresh(candidate):
            yield candidate

    first, last = text.find("{"), text.rfind("}")
    if first != -1 and last > first:
        candidate = text[first : last + 1]
        if _fresh(candidate):
            yield candidate


def parse_structured_output(raw: str, schema: type[T]) -> T:
    """Validate a raw model response against ``schema``.

    Args:
        raw: Response text from the model.
        schema: Pydantic model the response must match.

    Returns:
        Validated schema instance.

    Raises:
        ResponseParseError: Neither the whole response nor any embedded
            object validates. The message includes the raw response.
    """
    try:
        return schema.model_validate_json(raw.strip())
    except ValidationError as e:
        first_error: ValidationError = e

    logger.debug(
        "Response is not valid %s JSON, scanning for embedded objects",
        schema.__name__,
    )

    last_error: ValidationError | None = None
    for candidate in find_json_objects(raw):
        try:
            return schema.model_validate_json(candidate)
        except ValidationError as e:
            last_error = e

    if last_error is None:
        raise ResponseParseError(
            f"Failed to extract valid JSON from AI response: {raw}",
            raw_response=raw,
            original_error=first_error,
        )

    raise ResponseParseError(
        f"Failed to parse AI response as {schema.__name__}: {last_error}\n"
        f"Raw response: {raw}",
        raw_response=raw,
        original_error=last_error,
    )
