# config.py

"""Application configuration utilities.

Values are primarily loaded from ``config.json`` and may be overridden by
environment variables. The :func:`get_settings` helper merges the two sources
and caches the result.
"""

from __future__ import annotations

import json
import os
from enum import Enum
from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class StoreBackend(str, Enum):
    """Persistence backend used by the record store."""

    MEMORY = "memory"
    SQL = "sql"
    REDIS = "redis"


class LinkScheme(str, Enum):
    """Token scheme for customer table links.

    ``DEVICE`` derives the token from the requesting device fingerprint, so a
    link only validates on the device that produced it and only on the same
    calendar day. ``SIGNED`` keys the token with ``link_secret`` instead and
    validates on any device for the same day.
    """

    DEVICE = "device"
    SIGNED = "signed"


class Settings(BaseSettings):
    """Application settings merged from JSON and environment variables."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    store_backend: StoreBackend = StoreBackend.MEMORY
    database_url: str = "sqlite:///./smartorder.db"
    redis_url: str = "redis://localhost:6379/0"
    store_prefix: str = "smartorder:"
    store_quota_bytes: int | None = None
    public_base_url: str = "http://localhost:8000"
    link_scheme: LinkScheme = LinkScheme.DEVICE
    link_secret: str | None = None
    link_token_length: int = 12
    menu_parser_url: str | None = None
    menu_parse_timeout_secs: float = 20.0
    default_tables: str = "A1, A2, A3, B1, B2"
    log_level: str = "INFO"


# Cached singleton to avoid repeated file reads
@lru_cache
def get_settings() -> Settings:
    """Return merged settings with environment variable precedence.

    The configuration is read from ``config.json`` located alongside this file
    when present and fed into :class:`Settings`. Environment variables override
    any values from the JSON file.
    """

    config_path = Path(__file__).with_name("config.json")
    data = json.loads(config_path.read_text()) if config_path.exists() else {}
    env_override = {
        k.lower(): v
        for k, v in os.environ.items()
        if k.lower() in Settings.model_fields
    }
    merged = {**data, **env_override}
    return Settings(**merged)
