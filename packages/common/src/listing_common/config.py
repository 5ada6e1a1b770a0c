"""Configuration management for listing-drafts.

Settings are read from environment variables and an optional ``.env`` file.
Use ``get_settings()`` to obtain the cached instance.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_VALID_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
_VALID_LOG_FORMATS = {"json", "console"}


class Settings(BaseSettings):
    """Runtime settings for the listing-drafts packages."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    # Remote services
    catalog_api_url: str = Field(
        default="http://localhost:8080/api",
        description="Base URL of the catalog-entry service",
    )
    media_api_url: str = Field(
        default="http://localhost:8080/api",
        description="Base URL of the asset (media) service",
    )
    request_timeout: float = Field(
        default=30.0,
        description="HTTP request timeout in seconds",
    )

    # Attachment limits
    max_attachments: int = Field(
        default=5,
        ge=1,
        description="Maximum images per catalog entry",
    )
    max_image_bytes: int = Field(
        default=2 * 1024 * 1024,
        ge=1,
        description="Maximum size of a single image in bytes",
    )
    entry_image_types: list[str] = Field(
        default_factory=lambda: ["image/jpeg", "image/png"],
        description="MIME types accepted for entry images",
    )
    avatar_image_types: list[str] = Field(
        default_factory=lambda: ["image/jpeg", "image/png", "image/webp", "image/gif"],
        description="MIME types accepted for user avatars",
    )
    notice_clear_seconds: float = Field(
        default=3.0,
        ge=0,
        description="Delay before a transient validation notice clears itself",
    )

    # Actor defaults (CLI)
    actor_id: Optional[str] = Field(
        default=None,
        validation_alias="LISTING_ACTOR_ID",
        description="Actor id asserted on mutating requests",
    )
    actor_role: str = Field(
        default="SELLER",
        validation_alias="LISTING_ACTOR_ROLE",
        description="Actor role asserted on mutating requests",
    )

    # Logging
    log_level: str = Field(default="INFO", description="Log level")
    log_format: str = Field(default="console", description="Log renderer: json or console")

    @field_validator("log_level")
    @classmethod
    def _validate_log_level(cls, value: str) -> str:
        upper = value.upper()
        if upper not in _VALID_LOG_LEVELS:
            raise ValueError(f"log_level must be one of {sorted(_VALID_LOG_LEVELS)}")
        return upper

    @field_validator("log_format")
    @classmethod
    def _validate_log_format(cls, value: str) -> str:
        lower = value.lower()
        if lower not in _VALID_LOG_FORMATS:
            raise ValueError(f"log_format must be one of {sorted(_VALID_LOG_FORMATS)}")
        return lower


@lru_cache
def get_settings() -> Settings:
    """Return the process-wide settings instance."""
    return Settings()
