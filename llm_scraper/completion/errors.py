"""Exceptions raised by the completion step."""

from __future__ import annotations


class CompletionError(Exception):
    """Exception raised when LLM operations fail."""

    def __init__(self, message: str, original_error: Exception | None = None):
        super().__init__(message)
        self.original_error = original_error


class ResponseParseError(CompletionError):
    """Raised when no JSON matching the schema can be recovered from a response."""

    def __init__(
        self,
        message: str,
        raw_response: str,
        original_error: Exception | None = None,
    ):
        super().__init__(message, original_error)
        self.raw_response = raw_response
