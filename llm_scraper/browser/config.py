"""Configuration settings for the headless browser."""

from typing import Annotated

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_READABILITY_SCRIPT_URL = "https://esm.sh/@mozilla/readability"


class BrowserConfig(BaseSettings):
    """Browser configuration settings.

    All settings have sensible defaults and can be overridden via
    environment variables with BROWSER_ prefix or a .env file.

    Attributes:
        headless: Run browser in headless mode.
        window_width: Viewport width.
        window_height: Viewport height.
        navigation_timeout: Timeout for page navigation in seconds.
        wait_until: Playwright load state to wait for after navigation.
        readability_script_url: ES module URL the readability script is
            imported from inside the page.
    """

    model_config = SettingsConfigDict(
        env_prefix="BROWSER_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    headless: bool = Field(
        default=True,
        description="Run browser in headless mode",
    )
    window_width: int = Field(
        default=1280,
        description="Browser viewport width",
    )
    window_height: int = Field(
        default=720,
        description="Browser viewport height",
    )
    navigation_timeout: Annotated[float, Field(gt=0)] = Field(
        default=30.0,
        description="Timeout for page navigation in seconds",
    )
    wait_until: str = Field(
        default="load",
        description="Load state to wait for: 'load', 'domcontentloaded', 'networkidle', or 'commit'",
    )
    readability_script_url: str = Field(
        default=DEFAULT_READABILITY_SCRIPT_URL,
        description="ES module URL for Mozilla Readability (used by the 'text' format)",
    )

    @field_validator("wait_until", mode="before")
    @classmethod
    def validate_wait_until(cls, v: str) -> str:
        """Validate wait_until."""
        if not isinstance(v, str):
            raise ValueError("wait_until must be a string")
        value = v.lower().strip()
        if value not in {"load", "domcontentloaded", "networkidle", "commit"}:
            raise ValueError(
                "wait_until must be one of: load, domcontentloaded, networkidle, commit"
            )
        return value


# Singleton instance for easy import
_browser_config: BrowserConfig | None = None


def get_browser_config() -> BrowserConfig:
    """Get the browser configuration singleton."""
    global _browser_config
    if _browser_config is None:
        _browser_config = BrowserConfig()
    return _browser_config


def reset_browser_config() -> None:
    """Reset the browser configuration singleton (useful for testing)."""
    global _browser_config
    _browser_config = None
