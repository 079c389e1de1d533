"""Application configuration management.

All configuration is loaded from environment variables (or a local .env file).
No hardcoded values except sensible defaults for development.
"""

from functools import lru_cache
from typing import Literal

from pydantic import AliasChoices, Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Environment variables are matched case-insensitively against field
    names, e.g. MAX_CONCURRENT_REQUESTS -> max_concurrent_requests.
    LOG_LEVEL and DATABASE_PATH are accepted for older deployments.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    # Application
    app_env: Literal["development", "test", "production"] = Field(
        default="development",
        description="Application environment",
    )
    app_log_level: Literal["debug", "info", "warning", "error"] = Field(
        default="info",
        validation_alias=AliasChoices("app_log_level", "log_level"),
        description="Logging level",
    )
    app_log_format: Literal["json", "text"] = Field(
        default="json",
        description="Log output format",
    )

    # Server
    host: str = Field(default="0.0.0.0", description="Server bind host")
    port: int = Field(default=8000, description="Server bind port")

    # Database
    database_url: str = Field(
        default="sqlite+aiosqlite:///./data/analyses.db",
        description="SQLAlchemy async database URL",
    )
    database_echo: bool = Field(
        default=False,
        description="Echo SQL statements to the log",
    )
    database_path: str | None = Field(
        default=None,
        description="SQLite file path, used only when DATABASE_URL is unset",
    )

    # LLM provider
    anthropic_api_key: str = Field(
        default="",
        description="Anthropic API key (required at startup)",
    )
    llm_base_url: str = Field(
        default="https://api.anthropic.com",
        description="LLM provider API base URL",
    )
    llm_model: str = Field(
        default="claude-3-5-sonnet-20241022",
        description="Model used for summaries and metadata extraction",
    )
    llm_max_tokens: int = Field(
        default=1024,
        ge=1,
        le=8192,
        description="Max tokens per LLM completion",
    )
    llm_timeout_ms: int = Field(
        default=30000,
        ge=100,
        le=300000,
        description="Timeout for a single LLM call in milliseconds",
    )

    # Admission queue
    max_concurrent_requests: int = Field(
        default=10,
        ge=1,
        description="Maximum analyses executing concurrently",
    )
    max_queue_size: int = Field(
        default=100,
        ge=0,
        description="Maximum analyses waiting for a free slot",
    )

    # Analysis
    max_text_length: int = Field(
        default=50000,
        ge=1,
        description="Maximum accepted input length in characters",
    )
    short_text_word_threshold: int = Field(
        default=20,
        ge=0,
        description="Inputs with fewer words are used verbatim as the summary",
    )

    # Search
    search_default_limit: int = Field(
        default=10,
        ge=1,
        description="Result count when the client does not send a limit",
    )
    search_max_limit: int = Field(
        default=100,
        ge=1,
        description="Largest accepted search limit",
    )
    search_max_topic_length: int = Field(
        default=200,
        ge=1,
        description="Longest accepted search term in characters",
    )

    # Health Check Timeouts (in seconds)
    health_check_db_timeout: float = Field(
        default=5.0,
        ge=0.1,
        le=30.0,
        description="Database health check timeout in seconds",
    )
    health_check_llm_timeout: float = Field(
        default=5.0,
        ge=0.1,
        le=30.0,
        description="LLM provider health check timeout in seconds",
    )

    @property
    def llm_timeout_seconds(self) -> float:
        """LLM timeout expressed in seconds."""
        return self.llm_timeout_ms / 1000

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.app_env == "development"

    @field_validator("app_log_level", mode="before")
    @classmethod
    def lowercase_log_level(cls, value: object) -> object:
        return value.lower() if isinstance(value, str) else value

    @model_validator(mode="after")
    def database_url_from_path(self) -> "Settings":
        if self.database_path and "database_url" not in self.model_fields_set:
            self.database_url = f"sqlite+aiosqlite:///{self.database_path}"
        return self


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings.

    Settings are loaded once and cached for the lifetime of the application.
    """
    return Settings()
