"""
Configuration management for the Digest CLI.

Multi-environment support:
  Settings are stored per API URL, so a local dev server and production can
  each remember their own team and default digest.

  Config structure:
  {
    "environments": {
      "http://localhost:8000": {
        "team_id": "...",
        "default_digest_id": "..."
      }
    },
    "default_url": "http://localhost:8000"
  }

Environment resolution order:
  1. DIGEST_API_URL environment variable
  2. --api-url command line flag
  3. default_url from config file
  4. Fallback: http://localhost:8000
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path

DEFAULT_API_URL = "http://localhost:8000"

logger = logging.getLogger(__name__)


class Config:
    """Config manager for the Digest CLI with multi-environment support."""

    def __init__(self, api_url_override: str | None = None, config_dir: Path | None = None):
        """
        Initialize config.

        Args:
            api_url_override: Optional --api-url flag value
            config_dir: Where config.json lives (default ~/.digest)
        """
        self.config_dir = config_dir or Path.home() / ".digest"
        self.config_file = self.config_dir / "config.json"
        self._data = {}
        self._api_url_override = api_url_override
        self._load()

    def _load(self):
        """Load config from disk. An unreadable file is treated as empty."""
        if self.config_file.exists():
            try:
                with open(self.config_file) as f:
                    self._data = json.load(f)
            except (OSError, ValueError) as e:
                logger.warning("Ignoring unreadable config %s: %s", self.config_file, e)
                self._data = {}

        if not isinstance(self._data.get("environments"), dict):
            self._data["environments"] = {}

    def _save(self):
        """Save config to disk, owner read/write only."""
        self.config_dir.mkdir(parents=True, exist_ok=True)
        with open(self.config_file, "w") as f:
            json.dump(self._data, f, indent=2)
        self.config_file.chmod(0o600)

    @property
    def api_url(self) -> str:
        """Current API URL, resolved in the order listed in the module docstring."""
        env_url = os.environ.get("DIGEST_API_URL")
        if env_url:
            return env_url.rstrip("/")

        if self._api_url_override:
            return self._api_url_override.rstrip("/")

        return self._data.get("default_url", DEFAULT_API_URL).rstrip("/")

    @property
    def default_url(self) -> str:
        return self._data.get("default_url", DEFAULT_API_URL)

    @default_url.setter
    def default_url(self, value: str):
        self._data["default_url"] = value.rstrip("/")
        self._save()

    def _get_env(self) -> dict:
        """Get current environment config dict."""
        return self._data["environments"].get(self.api_url, {})

    def _set_env(self, key: str, value):
        """Set a value in current environment config."""
        self._data["environments"].setdefault(self.api_url, {})[key] = value
        self._save()

    @property
    def team_id(self) -> str | None:
        return self._get_env().get("team_id")

    @team_id.setter
    def team_id(self, value: str | None):
        self._set_env("team_id", value)

    @property
    def default_digest_id(self) -> str | None:
        """Digest that show/add/move/remove act on when --digest is not given."""
        return self._get_env().get("default_digest_id")

    @default_digest_id.setter
    def default_digest_id(self, value: str | None):
        self._set_env("default_digest_id", value)

    def clear_environment(self, url: str | None = None):
        """Forget the settings for one environment (current one by default)."""
        target_url = (url or self.api_url).rstrip("/")
        if target_url in self._data["environments"]:
            del self._data["environments"][target_url]
            self._save()
