"""
Redis Structures Configuration

Configuration management with environment variable support.
Provides validated defaults for the Redis connection and value codec.
"""

from functools import lru_cache

from dotenv import load_dotenv
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load environment variables from .env file
load_dotenv()

SUPPORTED_CODECS = ("pydantic", "json", "pickle")


class Settings(BaseSettings):
    """Library settings with validation and secure defaults."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=True, extra="ignore"
    )

    # Redis configuration
    REDIS_URL: str = Field(
        default="redis://localhost:6379", description="Redis connection URL"
    )
    REDIS_DB: int = Field(default=0, ge=0, le=15, description="Redis database index")
    REDIS_MAX_CONNECTIONS: int = Field(
        default=10, ge=1, le=50, description="Redis connection pool size"
    )
    REDIS_CONNECTION_TIMEOUT: float = Field(
        default=5.0, gt=0, le=60, description="Socket connect timeout in seconds"
    )
    REDIS_OPERATION_TIMEOUT: float = Field(
        default=10.0, gt=0, le=300, description="Socket read/write timeout in seconds"
    )
    REDIS_HEALTH_CHECK_INTERVAL: int = Field(
        default=30, ge=0, le=300, description="Idle connection health check interval"
    )

    # Serialization
    VALUE_CODEC: str = Field(
        default="pydantic", description="Value codec: pydantic, json or pickle"
    )

    # Tracing
    TRACING_ENABLED: bool = Field(
        default=True, description="Emit OpenTelemetry spans around Redis commands"
    )

    @field_validator("REDIS_URL")
    @classmethod
    def validate_redis_url(cls, v: str) -> str:
        """Validate Redis URL scheme."""
        if not v.startswith(("redis://", "rediss://", "unix://")):
            raise ValueError(
                "REDIS_URL must start with redis://, rediss:// or unix://"
            )
        return v

    @field_validator("VALUE_CODEC")
    @classmethod
    def validate_value_codec(cls, v: str) -> str:
        """Validate codec name."""
        normalized = v.strip().lower()
        if normalized not in SUPPORTED_CODECS:
            raise ValueError(
                f"VALUE_CODEC must be one of {', '.join(SUPPORTED_CODECS)}"
            )
        return normalized


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
