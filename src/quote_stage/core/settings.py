"""Application settings and configuration.

This module defines all configuration options for the Quote Stage application.
Settings are loaded from environment variables with sensible defaults.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Settings can be overridden via environment variables or .env files.
    """

    # Application metadata
    app_name: str = Field(default="Quote Stage", alias="APP_NAME")
    app_version: str = Field(default="0.1.0", alias="APP_VERSION")

    # Security and authentication
    secret_key: str = Field(alias="SECRET_KEY")
    debug: bool = Field(default=False, alias="DEBUG")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    # Database configuration
    database_url: str = Field(default="sqlite:///./quotes.db", alias="DATABASE_URL")
    test_database_url: str | None = Field(default=None, alias="TEST_DATABASE_URL")
    use_testing_database: bool = Field(default=False, alias="USE_TEST_DATABASE")
    sql_debug: bool = Field(default=False, alias="SQL_DEBUG")

    # JWT authentication settings
    jwt_algorithm: str = Field(default="HS256", alias="JWT_ALGORITHM")
    access_token_expire_minutes: int = Field(
        default=60 * 24 * 30,
        alias="ACCESS_TOKEN_EXPIRE_MINUTES",
    )

    # Content limits
    quote_max_length: int = Field(default=1000, alias="QUOTE_MAX_LENGTH")
    author_max_length: int = Field(default=100, alias="AUTHOR_MAX_LENGTH")

    # Feed pagination
    feed_default_limit: int = Field(default=12, alias="FEED_DEFAULT_LIMIT")
    feed_min_limit: int = Field(default=1, alias="FEED_MIN_LIMIT")
    feed_max_limit: int = Field(default=100, alias="FEED_MAX_LIMIT")

    # Sliding-window admission control. Creation is stricter than voting.
    rate_limit_quotes_max: int = Field(default=2, alias="RATE_LIMIT_QUOTES_MAX")
    rate_limit_quotes_window_seconds: float = Field(
        default=5 * 60,
        alias="RATE_LIMIT_QUOTES_WINDOW_SECONDS",
    )
    rate_limit_votes_max: int = Field(default=20, alias="RATE_LIMIT_VOTES_MAX")
    rate_limit_votes_window_seconds: float = Field(
        default=60,
        alias="RATE_LIMIT_VOTES_WINDOW_SECONDS",
    )

    # Write conflicts on the vote ledger are retried this many times.
    vote_conflict_retries: int = Field(default=1, ge=0, alias="VOTE_CONFLICT_RETRIES")

    # Abuse signal supplied by the edge proxy
    bot_signal_header: str = Field(default="x-bot-verdict", alias="BOT_SIGNAL_HEADER")

    # Feed-refresh notification
    feed_refresh_webhook_url: str | None = Field(
        default=None,
        alias="FEED_REFRESH_WEBHOOK_URL",
    )
    feed_refresh_timeout_seconds: float = Field(
        default=2.0,
        alias="FEED_REFRESH_TIMEOUT_SECONDS",
    )

    # CORS configuration for web frontend access
    cors_origins: list[str] = Field(
        default=["*"],
        alias="CORS_ORIGINS",
    )
    cors_allow_credentials: bool = Field(default=True, alias="CORS_ALLOW_CREDENTIALS")
    cors_allow_methods: list[str] = Field(
        default=["GET", "POST", "DELETE", "OPTIONS"],
        alias="CORS_ALLOW_METHODS",
    )
    cors_allow_headers: list[str] = Field(
        default=["*"],
        alias="CORS_ALLOW_HEADERS",
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        validate_assignment=True,
        extra="ignore",
    )

    @property
    def database_url_sync(self) -> str:
        """Return a sync-compatible database URL for tooling.

        Converts asyncpg URLs to psycopg for synchronous database operations
        like Alembic migrations.
        """
        url = self.effective_database_url
        if url.startswith("postgresql+asyncpg"):
            return url.replace("postgresql+asyncpg", "postgresql+psycopg", 1)
        return url

    @property
    def effective_database_url(self) -> str:
        """Return the database URL respecting testing overrides."""
        if self.use_testing_database and self.test_database_url:
            return self.test_database_url
        return self.database_url


settings = Settings()  # type: ignore[call-arg]
