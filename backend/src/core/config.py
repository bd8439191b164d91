"""Application configuration using pydantic-settings."""
from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

MIN_JWT_SECRET_LENGTH = 16


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    # Database
    database_url: str
    db_pool_size: int = Field(default=10, validation_alias="DB_POOL_SIZE")
    db_max_overflow: int = Field(default=20, validation_alias="DB_MAX_OVERFLOW")

    # Redis - account read cache
    redis_url: str = Field(default="redis://localhost:6379", validation_alias="REDIS_URL")
    redis_enabled: bool = Field(default=True, validation_alias="REDIS_ENABLED")
    redis_pool_size: int = Field(default=20, validation_alias="REDIS_POOL_SIZE")
    redis_socket_timeout: float = Field(default=2.0, validation_alias="REDIS_SOCKET_TIMEOUT")
    account_cache_ttl: int = Field(default=3600, validation_alias="ACCOUNT_CACHE_TTL")

    # Bearer tokens
    jwt_secret_key: str = Field(validation_alias="JWT_SECRET_KEY")
    jwt_expire_minutes: int = Field(default=60, validation_alias="JWT_EXPIRE_MINUTES")

    # JWT cookie (alternative to the Authorization header)
    cookie_name: str = Field(default="jwt-token", validation_alias="COOKIE_NAME")
    cookie_max_age: int = Field(default=3600, validation_alias="COOKIE_MAX_AGE")
    cookie_secure: bool = Field(default=False, validation_alias="COOKIE_SECURE")
    cookie_http_only: bool = Field(default=True, validation_alias="COOKIE_HTTP_ONLY")

    # Upper bound for a single request's store and cache calls
    request_timeout_seconds: float = Field(
        default=15.0, validation_alias="REQUEST_TIMEOUT_SECONDS",
    )

    # CORS - comma-separated list of allowed origins (stored as string, parsed via property)
    cors_origins_str: str = Field(
        default="http://localhost:3000",
        validation_alias="CORS_ORIGINS",
    )

    @field_validator("jwt_secret_key")
    @classmethod
    def validate_jwt_secret(cls, value: str) -> str:
        """Refuse to start with a missing or trivially short signing secret."""
        if len(value) < MIN_JWT_SECRET_LENGTH:
            raise ValueError(
                f"JWT_SECRET_KEY must be at least {MIN_JWT_SECRET_LENGTH} characters",
            )
        return value

    @property
    def cors_origins(self) -> list[str]:
        """Parse comma-separated CORS origins string into a list."""
        if not self.cors_origins_str:
            return []
        return [origin.strip() for origin in self.cors_origins_str.split(",") if origin.strip()]


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
