"""Configuration management from environment variables and .env files."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

ENV_PREFIX = "ROKCAL_"

# Environment variable -> (config key, converter)
_ENV_KEYS: dict[str, tuple[str, Any]] = {
    "ROKCAL_SOURCE": ("source", str),
    "ROKCAL_UPSTREAM_URL": ("upstream_url", str),
    "ROKCAL_MONTHS_AHEAD": ("months_ahead", int),
    "ROKCAL_HORIZON_YEARS": ("horizon_years", int),
    "ROKCAL_REPETITIONS": ("repetitions", int),
    "ROKCAL_UPCOMING_LIMIT": ("upcoming_limit", int),
    "ROKCAL_LOCALE": ("locale", str),
    "ROKCAL_REQUEST_TIMEOUT": ("request_timeout", int),
    "ROKCAL_MAX_RETRIES": ("max_retries", int),
    "ROKCAL_RETRY_BACKOFF_FACTOR": ("retry_backoff_factor", float),
    "ROKCAL_LOG_LEVEL": ("log_level", str),
}


class ConfigManager:
    """Manages application configuration from environment variables and .env files."""

    def __init__(self, env_file_path: Path | None = None):
        """Initialize configuration manager.

        Args:
            env_file_path: Optional path to .env file (defaults to .env in current directory)
        """
        self.env_file_path = env_file_path or Path.cwd() / ".env"

    def load_env_file(self) -> list[str]:
        """Load .env file and set environment variables.

        Only sets variables that are not already in the environment to avoid
        surprising overrides of user's environment.

        Returns:
            List of environment variable keys that were loaded from .env file
        """
        if not self.env_file_path.exists():
            logger.debug("No .env file found at %s", self.env_file_path)
            return []

        set_keys = []

        try:
            content = self.env_file_path.read_text(encoding="utf-8")
        except OSError:
            logger.warning("Failed to read .env file %s", self.env_file_path, exc_info=True)
            return []

        for raw_line in content.splitlines():
            line = raw_line.strip()

            # Skip empty lines and comments
            if not line or line.startswith("#") or "=" not in line:
                continue

            key, val = line.split("=", 1)
            key = key.strip()
            val = val.strip().strip('"').strip("'")

            # Only set if not already in environment
            if key and key not in os.environ:
                os.environ[key] = val
                set_keys.append(key)

        if set_keys:
            logger.debug("Loaded .env defaults for keys: %s", ", ".join(set_keys))

        return set_keys

    def build_config_from_env(self) -> dict[str, Any]:
        """Build configuration dictionary from ROKCAL_* environment variables.

        Recognizes the keys in ``_ENV_KEYS`` plus:
        - ROKCAL_WEB_HOST or ROKCAL_SERVER_BIND -> 'server_bind'
        - ROKCAL_WEB_PORT or ROKCAL_SERVER_PORT -> 'server_port' (int)

        Values that fail conversion are logged and ignored.

        Returns:
            Configuration mapping suitable for ``Config.from_dict``
        """
        cfg: dict[str, Any] = {}

        for env_key, (cfg_key, convert) in _ENV_KEYS.items():
            raw = os.environ.get(env_key)
            if not raw:
                continue
            try:
                cfg[cfg_key] = convert(raw)
            except ValueError:
                logger.warning("Invalid %s=%r; ignoring", env_key, raw)

        host = os.environ.get("ROKCAL_WEB_HOST") or os.environ.get("ROKCAL_SERVER_BIND")
        if host:
            cfg["server_bind"] = host

        port = os.environ.get("ROKCAL_WEB_PORT") or os.environ.get("ROKCAL_SERVER_PORT")
        if port:
            try:
                cfg["server_port"] = int(port)
            except ValueError:
                logger.warning("Invalid ROKCAL_WEB_PORT=%r; ignoring", port)

        return cfg

    def load_full_config(self) -> dict[str, Any]:
        """Load .env file and build configuration from environment.

        Returns:
            Configuration dictionary
        """
        self.load_env_file()
        return self.build_config_from_env()


def get_config_value(config: Any, key: str, default: Any = None) -> Any:
    """Get configuration value supporting both dict and dataclass-like objects.

    Args:
        config: Configuration object (dict or object with attributes)
        key: Configuration key to retrieve
        default: Default value if key not found

    Returns:
        Configuration value or default
    """
    if isinstance(config, dict):
        return config.get(key, default)
    return getattr(config, key, default)
