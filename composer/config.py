"""
Composer configuration — all environment variables in one place.

Read from environment at import time. Nothing here is secret and nothing is
required; every value has a default.
"""

from __future__ import annotations

import os


class Settings:
    """Application settings from environment variables."""

    # CMS content types
    CONFIG_CONTENT_TYPE: str = os.environ.get("COMPOSER_CONFIG_CONTENT_TYPE", "configurations")
    DATA_CONTENT_TYPE: str = os.environ.get("COMPOSER_DATA_CONTENT_TYPE", "data")
    PAGE_CONFIG_TYPE: str = os.environ.get("COMPOSER_PAGE_CONFIG_TYPE", "Page")

    # Content cache
    CACHE_MAX_AGE_SECONDS: float = float(os.environ.get("COMPOSER_CACHE_MAX_AGE_SECONDS", "600"))
    SYNC_INTERVAL_SECONDS: float = float(os.environ.get("COMPOSER_SYNC_INTERVAL_SECONDS", "300"))

    # Resolver
    MAX_RESOLVE_DEPTH: int = int(os.environ.get("COMPOSER_MAX_RESOLVE_DEPTH", "16"))


# Singleton instance
settings = Settings()
