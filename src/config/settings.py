"""Application settings and configuration."""

from typing import Literal

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from src.features.auth.jwt_utils import TokenConfig


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Application (hardcoded constants)
    app_name: str = "Storefront API"
    app_version: str = "0.1.0"

    # Environment-specific settings
    debug: bool = False
    environment: str  # development, staging, production

    # PostgreSQL
    postgres_url: str
    postgres_pool_size: int = 10
    postgres_max_overflow: int = 20
    postgres_pool_timeout: int = 30
    postgres_pool_recycle: int = 3600
    postgres_echo: bool = False
    postgres_create_schema: bool = False

    # Session store
    session_store_backend: Literal["redis", "memory"] = "redis"
    redis_url: str = "redis://localhost:6379/0"
    redis_socket_timeout: float = 5.0

    # Server
    host: str = "0.0.0.0"
    port: int = 5000

    # API
    api_prefix: str = "/api"

    # CORS
    cors_allow_origins: str = "*"

    # Rate limiting (global, per client address)
    rate_limit_enabled: bool = True
    rate_limit_default: str = "100/15minutes"

    # Security
    jwt_secret: str
    refresh_secret: str
    jwt_algorithm: str = "HS256"
    access_token_expire_minutes: int = 15
    refresh_token_expire_days: int = 7
    federated_refresh_token_expire_minutes: int = 60
    session_idle_timeout_seconds: int = 24 * 60 * 60

    # Refresh cookie
    refresh_cookie_name: str = "refreshToken"
    cookie_secure: bool = True

    # Federated login
    google_client_id: str | None = None

    # Logging
    log_level: str = "INFO"
    log_format: str = "json"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("environment", mode="before")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        """Validate environment value."""
        valid_envs = {"development", "staging", "production"}
        env = str(v).lower()
        if env not in valid_envs:
            raise ValueError(f"Environment must be one of {valid_envs}, got {env}")
        return env

    @field_validator("jwt_secret", "refresh_secret")
    @classmethod
    def validate_secret_length(cls, v: str) -> str:
        """Reject signing secrets that are too short to resist brute force."""
        if len(v) < 32:
            raise ValueError("Signing secrets must be at least 32 characters long")
        return v

    @model_validator(mode="after")
    def validate_distinct_secrets(self) -> "Settings":
        """Access and refresh tokens must never share a signing secret."""
        if self.jwt_secret == self.refresh_secret:
            raise ValueError("JWT_SECRET and REFRESH_SECRET must differ")
        return self

    @property
    def cors_origins(self) -> list[str]:
        """Comma-separated CORS origins as a list."""
        return [origin.strip() for origin in self.cors_allow_origins.split(",") if origin.strip()]

    def token_config(self) -> TokenConfig:
        """Build the signing configuration handed to the token issuer."""
        return TokenConfig(
            access_secret=self.jwt_secret,
            refresh_secret=self.refresh_secret,
            algorithm=self.jwt_algorithm,
            access_token_ttl_seconds=self.access_token_expire_minutes * 60,
            refresh_token_ttl_seconds=self.refresh_token_expire_days * 24 * 60 * 60,
        )


settings = Settings()  # type: ignore[call-arg]
