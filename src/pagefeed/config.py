"""
Configuration management using Pydantic Settings.

Loads environment variables with validation, defaults, and type safety.
"""

from pathlib import Path

from dotenv import load_dotenv
from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from pagefeed import __version__
from pagefeed.constants import (
    DEFAULT_BASE_URL,
    DEFAULT_ERROR_BODY_LIMIT,
    DEFAULT_LIMIT_PARAM,
    DEFAULT_PAGE_PARAM,
    DEFAULT_PAGE_SIZE,
    DEFAULT_REQUEST_TIMEOUT,
    DEFAULT_RESOURCE,
    MAX_PAGE_SIZE,
    MAX_REQUEST_TIMEOUT,
    MIN_PAGE_SIZE,
    LogFormat,
)

# Load .env file explicitly before creating Settings instance
# Search for .env file in project root (parent of src/)
_current_file = Path(__file__)
_project_root = _current_file.parent.parent.parent
_env_file = _project_root / ".env"

# Load .env file if it exists (don't error if missing)
load_dotenv(dotenv_path=_env_file, override=False)


class Settings(BaseSettings):
    """
    Application configuration loaded from environment variables.

    All settings have sensible defaults and are validated on load.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",  # Ignore unknown env vars
    )

    # ========================================================================
    # Remote Collection Configuration
    # ========================================================================

    api_base_url: str = Field(
        default=DEFAULT_BASE_URL,
        description="Base URL of the collection API",
    )
    default_resource: str = Field(
        default=DEFAULT_RESOURCE,
        min_length=1,
        description="Collection fetched when no resource is given",
    )
    request_timeout_seconds: float = Field(
        default=DEFAULT_REQUEST_TIMEOUT,
        gt=0,
        le=MAX_REQUEST_TIMEOUT,
        description="HTTP request timeout",
    )
    user_agent: str = Field(
        default=f"pagefeed/{__version__}",
        description="User-Agent header sent with every request",
    )
    error_body_limit: int = Field(
        default=DEFAULT_ERROR_BODY_LIMIT,
        ge=0,
        description="Maximum characters of an error response body kept",
    )

    # ========================================================================
    # Pagination Configuration
    # ========================================================================

    page_size: int = Field(
        default=DEFAULT_PAGE_SIZE,
        ge=MIN_PAGE_SIZE,
        le=MAX_PAGE_SIZE,
        description=f"Items requested per page ({MIN_PAGE_SIZE}-{MAX_PAGE_SIZE})",
    )
    page_param: str = Field(
        default=DEFAULT_PAGE_PARAM,
        min_length=1,
        description="Query parameter carrying the 1-based page index",
    )
    limit_param: str = Field(
        default=DEFAULT_LIMIT_PARAM,
        min_length=1,
        description="Query parameter carrying the page size",
    )

    # ========================================================================
    # Logging Configuration
    # ========================================================================

    log_level: str = Field(
        default="INFO",
        description="Logging level",
    )
    log_format: LogFormat = Field(
        default=LogFormat.TEXT,
        description="Log format: text or json",
    )
    debug_mode: bool = Field(
        default=False,
        description="Enable debug mode with verbose logging",
    )

    # ========================================================================
    # Validators
    # ========================================================================

    @field_validator("api_base_url")
    @classmethod
    def validate_api_base_url(cls, v: str) -> str:
        """Require an http(s) URL and strip the trailing slash."""
        v = v.strip()
        if not v.startswith(("http://", "https://")):
            raise ValueError(
                f"Invalid API base URL: {v}. Must start with http:// or https://"
            )
        return v.rstrip("/")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is valid."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        v_upper = v.upper()
        if v_upper not in valid_levels:
            raise ValueError(
                f"Invalid log level: {v}. Must be one of {valid_levels}"
            )
        return v_upper

    @field_validator("log_format", mode="before")
    @classmethod
    def validate_log_format(cls, v):
        """Accept log format names in any case."""
        if isinstance(v, str):
            return v.lower()
        return v

    @model_validator(mode="after")
    def validate_query_params(self) -> "Settings":
        """Page and limit must travel in different query parameters."""
        if self.page_param == self.limit_param:
            raise ValueError(
                f"page_param and limit_param must differ (both are '{self.page_param}')"
            )
        return self

    # ========================================================================
    # Computed Properties
    # ========================================================================

    @property
    def effective_log_level(self) -> str:
        """Log level after applying debug mode."""
        return "DEBUG" if self.debug_mode else self.log_level


# Global settings instance
# Loaded once at import time
settings = Settings()
