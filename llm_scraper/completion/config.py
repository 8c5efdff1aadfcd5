"""Configuration settings for the completion (LLM) step.

Provides settings for the LLM provider and default sampling parameters.
"""

from __future__ import annotations

from typing import Annotated

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class CompletionConfig(BaseSettings):
    """Configuration for the completion step.

    Settings can be overridden via environment variables prefixed with
    COMPLETION_ or a .env file.

    Example: COMPLETION_LLM_PROVIDER=anthropic
    """

    model_config = SettingsConfigDict(
        env_prefix="COMPLETION_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # LLM settings
    llm_provider: str = Field(
        default="openai",
        description="LLM provider (openai, anthropic, azure, groq, etc.)",
    )
    llm_model: str = Field(
        default="gpt-4o",
        description="LLM model name",
    )
    llm_api_key: str | None = Field(
        default=None,
        description="API key for LLM provider",
    )
    llm_base_url: str | None = Field(
        default=None,
        description="Base URL for OpenAI-compatible endpoints",
    )
    llm_max_retries: Annotated[int, Field(ge=0)] = Field(
        default=0,
        description="Retry attempts for failed LLM calls (parse errors are never retried)",
    )
    llm_timeout: Annotated[float, Field(gt=0)] = Field(
        default=180.0,
        description="Timeout in seconds for LLM calls",
    )
    llm_reasoning_effort: str | None = Field(
        default=None,
        description=(
            "Reasoning effort for supported models (e.g. 'minimal', 'low', "
            "'medium', 'high')."
        ),
    )

    # Sampling defaults, used when a request leaves them unset
    default_temperature: Annotated[float, Field(ge=0.0, le=2.0)] = Field(
        default=0.7,
        description="Sampling temperature when the request does not set one",
    )
    default_max_tokens: Annotated[int, Field(gt=0)] = Field(
        default=2048,
        description="Maximum completion tokens when the request does not set one",
    )

    @field_validator("llm_provider", mode="before")
    @classmethod
    def normalize_provider(cls, v: str) -> str:
        """Lower-case and trim the provider name."""
        if not isinstance(v, str) or not v.strip():
            raise ValueError("llm_provider must be a non-empty string")
        return v.strip().lower()


# Singleton instance
_completion_config: CompletionConfig | None = None


def get_completion_config() -> CompletionConfig:
    """Get the completion configuration singleton."""
    global _completion_config
    if _completion_config is None:
        _completion_config = CompletionConfig()
    return _completion_config


def reset_completion_config() -> None:
    """Reset the configuration singleton (useful for testing)."""
    global _completion_config
    _completion_config = None
