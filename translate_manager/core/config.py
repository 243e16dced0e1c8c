"""Translation manager configuration.

Environment variables are loaded from .env file and can be overridden.
Constructor arguments passed to ``TranslateManager`` always win over these.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Any

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_STORAGE_KEY = "TranslateManager"
CORRUPT_POLICIES = ("reset", "raise")
CACHE_BACKENDS = ("memory", "valkey")


def _valkey_alias(env_name: str) -> AliasChoices:
    """Support both VALKEY_* and REDIS_* env var names for compatibility."""
    redis_name = env_name.replace("VALKEY_", "REDIS_")
    return AliasChoices(redis_name, env_name)


class Settings(BaseSettings):
    """Translation cache settings loaded from environment variables."""

    # ==========================================================================
    # Cache
    # ==========================================================================

    storage_key: str = Field(
        default=DEFAULT_STORAGE_KEY,
        alias="TRANSLATE_STORAGE_KEY",
        min_length=1,
        description="Namespace under which the cache envelope is persisted.",
    )
    cache_expiry_ms: int | None = Field(
        default=None,
        alias="TRANSLATE_CACHE_EXPIRY_MS",
        ge=0,
        description="Freshness window in milliseconds. Unset means never expires.",
    )
    cache_corrupt_policy: str = Field(
        default="reset",
        alias="TRANSLATE_CACHE_CORRUPT_POLICY",
        description="'reset' treats malformed cache as empty, 'raise' surfaces it.",
    )
    cache_backend: str = Field(default="memory", alias="TRANSLATE_CACHE_BACKEND")

    valkey_url: str = Field(
        default="valkey://localhost:6379/0",
        validation_alias=_valkey_alias("VALKEY_URL"),
    )

    # ==========================================================================
    # Lookup
    # ==========================================================================

    lookup_timeout_seconds: float | None = Field(
        default=None, alias="TRANSLATE_LOOKUP_TIMEOUT_SECONDS", gt=0
    )
    lookup_base_url: str = Field(
        default="http://localhost:8000", alias="TRANSLATE_LOOKUP_BASE_URL"
    )
    lookup_path: str = Field(
        default="/translations/{language}", alias="TRANSLATE_LOOKUP_PATH"
    )
    lookup_http_timeout_seconds: float = Field(
        default=10.0, alias="TRANSLATE_LOOKUP_HTTP_TIMEOUT_SECONDS", gt=0
    )

    # ==========================================================================
    # Pydantic Settings Config
    # ==========================================================================

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    # ==========================================================================
    # Validators
    # ==========================================================================

    @field_validator("cache_corrupt_policy", "cache_backend", mode="before")
    @classmethod
    def normalize_choice(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip().lower()
        return value

    @field_validator("cache_corrupt_policy")
    @classmethod
    def validate_corrupt_policy(cls, value: str) -> str:
        if value not in CORRUPT_POLICIES:
            raise ValueError(
                f"Unknown cache corrupt policy '{value}'. "
                f"Expected one of: {', '.join(CORRUPT_POLICIES)}."
            )
        return value

    @field_validator("cache_backend")
    @classmethod
    def validate_cache_backend(cls, value: str) -> str:
        if value not in CACHE_BACKENDS:
            raise ValueError(
                f"Unknown cache backend '{value}'. "
                f"Expected one of: {', '.join(CACHE_BACKENDS)}."
            )
        return value

    @field_validator("lookup_path")
    @classmethod
    def validate_lookup_path(cls, value: str) -> str:
        """Require the language placeholder so each locale hits its own URL."""
        if "{language}" not in value:
            raise ValueError("TRANSLATE_LOOKUP_PATH must contain '{language}'.")
        return value


@lru_cache
def get_settings() -> Settings:
    """Return cached settings instance."""
    return Settings()
