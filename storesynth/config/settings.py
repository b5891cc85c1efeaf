"""
Application settings and configuration management.

Handles environment variables, API keys, browser limits and output locations
using Pydantic settings management for type safety and validation.
"""

from functools import lru_cache
from pathlib import Path
from typing import Literal, Optional

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    The Anthropic key is optional: without it the design analyzer always
    serves the fallback recommendation set.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # API Keys
    anthropic_api_key: Optional[SecretStr] = Field(default=None, alias="ANTHROPIC_API_KEY")

    # Application Configuration
    app_env: Literal["development", "staging", "production"] = Field(
        default="development",
        alias="APP_ENV"
    )
    debug: bool = Field(default=False, alias="DEBUG")
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        alias="LOG_LEVEL"
    )

    # Model Configuration
    claude_model: str = Field(
        default="claude-sonnet-4-20250514",
        alias="CLAUDE_MODEL"
    )
    claude_max_tokens: int = Field(default=1500, alias="CLAUDE_MAX_TOKENS")
    recommendation_temperature: float = Field(default=0.4, alias="RECOMMENDATION_TEMPERATURE")
    ai_timeout_seconds: float = Field(default=30.0, alias="AI_TIMEOUT_SECONDS")
    ai_max_retries: int = Field(default=2, alias="AI_MAX_RETRIES")

    # Browser / Acquisition
    browser_headless: bool = Field(default=True, alias="BROWSER_HEADLESS")
    browser_launch_retries: int = Field(default=3, alias="BROWSER_LAUNCH_RETRIES")
    navigation_timeout_seconds: float = Field(default=30.0, alias="NAVIGATION_TIMEOUT_SECONDS")
    navigation_wait_until: Literal["load", "domcontentloaded", "networkidle", "commit"] = Field(
        default="networkidle",
        alias="NAVIGATION_WAIT_UNTIL",
    )
    max_concurrent_pages: int = Field(default=4, alias="MAX_CONCURRENT_PAGES")
    raw_html_limit: int = Field(default=10_000, alias="RAW_HTML_LIMIT")
    max_candidate_products: int = Field(default=10, alias="MAX_CANDIDATE_PRODUCTS")

    # Output Settings
    output_dir: Path = Field(default=Path("outputs"), alias="OUTPUT_DIR")
    store_host_suffix: str = Field(default="storesynth.app", alias="STORE_HOST_SUFFIX")

    @field_validator("output_dir", mode="before")
    @classmethod
    def validate_directories(cls, v: str | Path) -> Path:
        """Ensure directories exist."""
        path = Path(v)
        path.mkdir(parents=True, exist_ok=True)
        return path

    @field_validator("anthropic_api_key", mode="before")
    @classmethod
    def validate_anthropic_key(cls, v: Optional[str]) -> Optional[str]:
        """Validate Anthropic API key format; blank values mean 'not configured'."""
        if v is None or v == "":
            return None
        if not str(v).startswith("sk-"):
            raise ValueError("Invalid Anthropic API key format")
        return v

    @field_validator("max_concurrent_pages", "max_candidate_products", "raw_html_limit")
    @classmethod
    def validate_positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError("must be a positive integer")
        return v

    @property
    def ai_enabled(self) -> bool:
        """Whether an Anthropic key is configured."""
        return self.anthropic_api_key is not None

    @property
    def navigation_timeout_ms(self) -> int:
        """Navigation timeout in the millisecond unit Playwright expects."""
        return int(self.navigation_timeout_seconds * 1000)


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings."""
    return Settings()
