"""Application settings loaded from environment variables.

Environment Configuration:
    SPEECHKARMA_ENV: Deployment environment (local | test | staging | prod)
    DATABASE_URL: PostgreSQL connection string (required)

Auth Configuration (required in all environments):
    SUPABASE_JWKS_URL: Full URL to Supabase JWKS endpoint
    SUPABASE_ISSUER: Expected JWT issuer (trailing slash stripped)
    SUPABASE_AUDIENCES: Comma-separated list of allowed audiences

Logging:
    LOG_LEVEL: Root log level (default INFO)
    LOG_JSON: JSON lines when true, console output when false (default true)

Statement Policy:
    GRACE_PERIOD_MINUTES: Edit/delete window after creation (default 15)

AI Summary Configuration (optional):
    USE_AI_SUMMARY: Enable summary enrichment on statement creation
    OPENROUTER_API_KEY: OpenRouter API key
    AI_SUMMARY_MODEL: OpenRouter model identifier
    AI_SUMMARY_TIMEOUT_S: Hard timeout for one enrichment call
    REQUEST_TIMEOUT_S: Overall request budget (enrichment timeout must be shorter)
    SITE_URL: Sent to OpenRouter as HTTP-Referer
"""

from datetime import timedelta
from enum import Enum
from functools import lru_cache
from typing import Annotated, Literal

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings


class Environment(str, Enum):
    """Valid deployment environments."""

    LOCAL = "local"
    TEST = "test"
    STAGING = "staging"
    PROD = "prod"


class Settings(BaseSettings):
    """Application configuration.

    Settings are loaded from environment variables.
    Validation rules:
    - DATABASE_URL is always required
    - SUPABASE_JWKS_URL, SUPABASE_ISSUER, SUPABASE_AUDIENCES are required in all environments
    - AI_SUMMARY_TIMEOUT_S must be strictly shorter than REQUEST_TIMEOUT_S
    """

    speechkarma_env: Environment = Field(default=Environment.LOCAL, alias="SPEECHKARMA_ENV")
    database_url: Annotated[str, Field(alias="DATABASE_URL")]

    # Supabase auth settings (required in all environments)
    supabase_jwks_url: str | None = Field(default=None, alias="SUPABASE_JWKS_URL")
    supabase_issuer: str | None = Field(default=None, alias="SUPABASE_ISSUER")
    supabase_audiences: str | None = Field(default=None, alias="SUPABASE_AUDIENCES")

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO", alias="LOG_LEVEL"
    )
    log_json: bool = Field(default=True, alias="LOG_JSON")

    # Statement policy
    grace_period_minutes: int = Field(default=15, ge=1, le=1440, alias="GRACE_PERIOD_MINUTES")

    # AI summary enrichment
    use_ai_summary: bool = Field(default=False, alias="USE_AI_SUMMARY")
    openrouter_api_key: str | None = Field(default=None, alias="OPENROUTER_API_KEY")
    ai_summary_model: str = Field(default="openai/gpt-4o-mini", alias="AI_SUMMARY_MODEL")
    ai_summary_timeout_s: float = Field(default=8.0, gt=0, le=30, alias="AI_SUMMARY_TIMEOUT_S")
    request_timeout_s: float = Field(default=30.0, gt=0, alias="REQUEST_TIMEOUT_S")
    site_url: str = Field(default="http://localhost:4321", alias="SITE_URL")

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }

    @model_validator(mode="after")
    def validate_required_settings(self) -> "Settings":
        """Ensure required settings are set for all environments."""
        missing_auth = []
        if not self.supabase_jwks_url:
            missing_auth.append("SUPABASE_JWKS_URL")
        if not self.supabase_issuer:
            missing_auth.append("SUPABASE_ISSUER")
        if not self.supabase_audiences:
            missing_auth.append("SUPABASE_AUDIENCES")

        if missing_auth:
            raise ValueError(
                f"Missing required Supabase auth settings: {', '.join(missing_auth)}. "
                "Run 'supabase start' to configure Supabase local, or set these environment variables."
            )

        if self.ai_summary_timeout_s >= self.request_timeout_s:
            raise ValueError(
                "AI_SUMMARY_TIMEOUT_S must be shorter than REQUEST_TIMEOUT_S "
                f"({self.ai_summary_timeout_s} >= {self.request_timeout_s})"
            )

        return self

    @property
    def grace_period(self) -> timedelta:
        """Edit/delete window as a timedelta."""
        return timedelta(minutes=self.grace_period_minutes)

    @property
    def ai_summary_configured(self) -> bool:
        """Whether enrichment is enabled and has credentials to run."""
        return self.use_ai_summary and bool(self.openrouter_api_key)

    @property
    def audience_list(self) -> list[str]:
        """Parse comma-separated audiences into a list."""
        if self.supabase_audiences:
            return [a.strip() for a in self.supabase_audiences.split(",") if a.strip()]
        return []

    @property
    def normalized_issuer(self) -> str | None:
        """Return issuer with trailing slash stripped."""
        if self.supabase_issuer:
            return self.supabase_issuer.rstrip("/")
        return None


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings.

    Returns:
        Settings instance loaded from environment.

    Raises:
        ValidationError: If required settings are missing or invalid.
    """
    return Settings()


def clear_settings_cache() -> None:
    """Clear the settings cache. Useful for testing."""
    get_settings.cache_clear()
