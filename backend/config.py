"""
Digest service configuration: all environment variables in one place.

Read from environment at runtime. Never hardcode secrets.
"""

from __future__ import annotations

import os


class Settings:
    """Application settings from environment variables."""

    # Database
    DATABASE_URL: str = os.environ.get("DATABASE_URL", "")
    POOL_MIN_SIZE: int = int(os.environ.get("POOL_MIN_SIZE", "2"))
    POOL_MAX_SIZE: int = int(os.environ.get("POOL_MAX_SIZE", "20"))
    COMMAND_TIMEOUT_SECONDS: int = 60

    # Pagination
    DEFAULT_PAGE_SIZE: int = int(os.environ.get("DEFAULT_PAGE_SIZE", "30"))
    BOOKMARKS_PAGE_SIZE: int = int(os.environ.get("BOOKMARKS_PAGE_SIZE", "10"))
    DISCOVER_PAGE_SIZE: int = int(os.environ.get("DISCOVER_PAGE_SIZE", "10"))
    MAX_PAGE_SIZE: int = 100

    # Digests
    TEMPLATE_TITLE_SEPARATOR: str = "-template-"
    RECENT_TEAMS_LIMIT: int = 5

    # Application
    ENVIRONMENT: str = os.environ.get("ENVIRONMENT", "development")


# Singleton instance
settings = Settings()

# Validate required settings (skip in test mode)
_testing = os.environ.get("TESTING", "").lower() == "true"

if not _testing and not settings.DATABASE_URL:
    raise RuntimeError("DATABASE_URL environment variable is required")
