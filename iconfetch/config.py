"""Configuration settings for charm icon resolution."""
from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field, PositiveFloat, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_CONCURRENCY = 10
DEFAULT_ICON_BASE_URL = "https://api.jujucharms.com/charmstore/v4"


class Settings(BaseSettings):
    """Environment driven configuration."""

    model_config = SettingsConfigDict(
        env_prefix="ICONFETCH_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    resolver: Literal["http", "link"] = Field(
        "http",
        description="Resolver implementation: fetch icons over HTTP or embed them as links.",
    )
    concurrency: int = Field(
        DEFAULT_CONCURRENCY,
        description="Maximum number of icon downloads in flight at once. Non-positive means the default.",
    )
    request_timeout: PositiveFloat = Field(
        30.0,
        description="Timeout in seconds for each outbound icon request.",
    )
    follow_redirects: bool = Field(
        True,
        description="Follow HTTP redirects when downloading icons.",
    )
    icon_base_url: str = Field(
        DEFAULT_ICON_BASE_URL,
        description="Charm store endpoint under which icons are served as <path>/icon.svg.",
    )

    @field_validator("concurrency", mode="before")
    @classmethod
    def _default_concurrency(cls, value: int | str | None) -> int:
        if value is None or value == "":
            return DEFAULT_CONCURRENCY
        value = int(value)
        if value <= 0:
            return DEFAULT_CONCURRENCY
        return value

    @field_validator("icon_base_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        value = value.strip().rstrip("/")
        if not value:
            raise ValueError("icon_base_url must not be empty")
        return value


@lru_cache
def get_settings() -> Settings:
    """Return a cached settings instance."""

    return Settings()


__all__ = ["DEFAULT_CONCURRENCY", "DEFAULT_ICON_BASE_URL", "Settings", "get_settings"]
