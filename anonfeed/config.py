"""
Configuration and settings for the anonymous feed service and client.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Optional

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


def _env(name: str, field_name: str) -> AliasChoices:
    return AliasChoices(name, field_name)


class Settings(BaseSettings):
    """Environment-backed settings for the FastAPI service and the client."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    api_prefix: str = Field(default="/api")

    # Database (Postgres expected, any SQLAlchemy URL works)
    database_url: Optional[str] = Field(
        default=None, validation_alias=_env("DATABASE_URL", "database_url")
    )

    # Development toggles
    use_in_memory_backends: bool = Field(
        default=False,
        validation_alias=_env(
            "ANONFEED_USE_IN_MEMORY_BACKENDS", "use_in_memory_backends"
        ),
    )

    # HTTP server
    server_host: str = Field(
        default="0.0.0.0",
        validation_alias=_env("ANONFEED_SERVER_HOST", "server_host"),
    )
    server_port: int = Field(
        default=2022, validation_alias=_env("ANONFEED_SERVER_PORT", "server_port")
    )
    cors_allow_origins: list[str] = Field(
        default_factory=lambda: ["*"],
        validation_alias=_env("ANONFEED_CORS_ALLOW_ORIGINS", "cors_allow_origins"),
    )

    # Client
    api_url: str = Field(
        default="http://localhost:2022/api",
        validation_alias=_env("ANONFEED_API_URL", "api_url"),
    )
    demo_mode: bool = Field(
        default=False, validation_alias=_env("ANONFEED_DEMO_MODE", "demo_mode")
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached settings instance."""
    return Settings()
