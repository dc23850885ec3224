"""Application settings and configuration.

This module defines all configuration options for the device-key authentication
service. Settings are loaded from environment variables with sensible defaults.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

MILLIS_PER_DAY = 24 * 60 * 60 * 1000


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Settings can be overridden via environment variables or .env files.
    """

    # Application metadata
    app_name: str = Field(default="Device Key Auth", alias="APP_NAME")

    # Security and authentication
    secret_key: str = Field(alias="SECRET_KEY")
    debug: bool = Field(default=False, alias="DEBUG")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    # Database configuration
    database_url: str = Field(default="sqlite:///./devicekey.db", alias="DATABASE_URL")
    test_database_url: str | None = Field(default=None, alias="TEST_DATABASE_URL")
    use_testing_database: bool = Field(default=False, alias="USE_TEST_DATABASE")
    sql_debug: bool = Field(default=False, alias="SQL_DEBUG")

    # JWT access tokens
    jwt_algorithm: str = Field(default="HS256", alias="JWT_ALGORITHM")
    access_token_expire_minutes: int = Field(default=60, alias="ACCESS_TOKEN_EXPIRE_MINUTES")

    # Renewal challenges
    challenge_ttl_seconds: int = Field(default=60, alias="CHALLENGE_TTL_SECONDS")
    challenge_bytes: int = Field(default=33, ge=33, alias="CHALLENGE_BYTES")

    # Device key lifecycle
    key_default_expires_after_ms: int = Field(
        default=6 * 31 * MILLIS_PER_DAY,
        alias="KEY_DEFAULT_EXPIRES_AFTER_MS",
    )
    key_max_invalid_attempts: int = Field(default=3, alias="KEY_MAX_INVALID_ATTEMPTS")
    deleted_key_retention_days: int = Field(
        default=15 * 31,
        alias="DELETED_KEY_RETENTION_DAYS",
    )

    # CORS configuration for web frontend access
    cors_origins: list[str] = Field(default=["*"], alias="CORS_ORIGINS")
    cors_allow_credentials: bool = Field(default=True, alias="CORS_ALLOW_CREDENTIALS")
    cors_allow_methods: list[str] = Field(
        default=["GET", "POST", "DELETE", "OPTIONS"],
        alias="CORS_ALLOW_METHODS",
    )
    cors_allow_headers: list[str] = Field(default=["*"], alias="CORS_ALLOW_HEADERS")

    model_config = SettingsConfigDict(
        env_file=".env",
        validate_assignment=True,
        extra="ignore",
    )

    @property
    def effective_database_url(self) -> str:
        """Return the database URL respecting testing overrides."""
        if self.use_testing_database and self.test_database_url:
            return self.test_database_url
        return self.database_url

    @property
    def deleted_key_retention_ms(self) -> int:
        return self.deleted_key_retention_days * MILLIS_PER_DAY


settings = Settings()  # type: ignore[call-arg]
