"""rokcalendar.config_loader

Config loader for rokcalendar.

- Reads YAML (PyYAML); plain JSON files parse as YAML too.
- Exposes a typed dataclass `Config` and a `load_config()` helper that accepts
  an optional path override.
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any

import yaml

logger = logging.getLogger(__name__)

DEFAULT_UPSTREAM_URL = "https://www.rokhub.xyz/api/events"
SOURCES = ("static", "remote")


@dataclass
class Config:
    """Typed configuration for rokcalendar.

    Fields:
        source: "static" (built-in catalog) or "remote" (fetched catalog)
        upstream_url: remote catalog endpoint, also used by the /api/events proxy
        months_ahead: horizon and repetition count for the static catalog (1..720)
        horizon_years: horizon for the remote catalog (1..60)
        repetitions: explicit repetition count for single-run templates; None = until horizon
        upcoming_limit: default size of the upcoming list
        locale: display locale code ("vi" or "en")
        server_bind: host to bind the HTTP server to
        server_port: port for the HTTP server
        log_level: logging level name
        request_timeout: HTTP read timeout in seconds
        max_retries: extra attempts after a transport failure
        retry_backoff_factor: base of the exponential retry backoff
    """

    source: str = "static"
    upstream_url: str = DEFAULT_UPSTREAM_URL
    months_ahead: int = 12
    horizon_years: int = 1
    repetitions: int | None = None
    upcoming_limit: int = 10
    locale: str = "vi"
    server_bind: str = "127.0.0.1"
    server_port: int = 8888
    log_level: str = "INFO"
    request_timeout: int = 30
    max_retries: int = 2
    retry_backoff_factor: float = 1.5

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> Config:
        """Create Config from a plain mapping, applying defaults and validation.

        Numeric-like values are coerced; out-of-range values are clamped and
        unknown choices reset to the default, each with a logged warning.
        """
        if data is None:
            data = {}
        defaults = cls()

        def _coerce_int(key: str, default: int, low: int, high: int) -> int:
            raw = data.get(key, default)
            try:
                value = int(raw)
            except (TypeError, ValueError):
                logger.warning("Config %s=%r is not an int; using default %d", key, raw, default)
                return default
            if value < low:
                logger.warning("Config %s=%d below minimum; coercing to %d", key, value, low)
                return low
            if value > high:
                logger.warning("Config %s=%d above maximum; coercing to %d", key, value, high)
                return high
            return value

        def _coerce_float(key: str, default: float) -> float:
            raw = data.get(key, default)
            try:
                return float(raw)
            except (TypeError, ValueError):
                logger.warning("Config %s=%r is not a number; using default %s", key, raw, default)
                return default

        source = str(data.get("source", defaults.source)).lower()
        if source not in SOURCES:
            logger.warning("Config source=%r not one of %s; using %r", source, SOURCES, defaults.source)
            source = defaults.source

        repetitions: int | None = None
        if data.get("repetitions") is not None:
            repetitions = _coerce_int("repetitions", 12, 0, 10_000)

        log_level = data.get("log_level", defaults.log_level)
        log_level = str(log_level).upper() if log_level is not None else defaults.log_level

        return cls(
            source=source,
            upstream_url=str(data.get("upstream_url") or defaults.upstream_url),
            months_ahead=_coerce_int("months_ahead", defaults.months_ahead, 1, 720),
            horizon_years=_coerce_int("horizon_years", defaults.horizon_years, 1, 60),
            repetitions=repetitions,
            upcoming_limit=_coerce_int("upcoming_limit", defaults.upcoming_limit, 1, 500),
            locale=str(data.get("locale") or defaults.locale).lower(),
            server_bind=str(data.get("server_bind") or defaults.server_bind),
            server_port=_coerce_int("server_port", defaults.server_port, 1, 65535),
            log_level=log_level,
            request_timeout=_coerce_int("request_timeout", defaults.request_timeout, 1, 300),
            max_retries=_coerce_int("max_retries", defaults.max_retries, 0, 10),
            retry_backoff_factor=_coerce_float("retry_backoff_factor", defaults.retry_backoff_factor),
        )

    def merged(self, overrides: dict[str, Any]) -> Config:
        """Return a new Config with ``overrides`` applied on top of this one."""
        return Config.from_dict({**asdict(self), **overrides})


def _load_yaml(path: Path) -> Any:
    loaded = yaml.safe_load(path.read_text(encoding="utf-8"))
    # safe_load returns None for empty files
    return {} if loaded is None else loaded


def load_config(path: str | None = None) -> Config:
    """Load configuration from a YAML/JSON file and return a Config instance.

    Args:
        path: Optional path to the config file. Defaults to ./rokcalendar.yaml.

    Returns:
        Config dataclass instance with values from file (or defaults).

    Raises:
        ValueError: If the file's top level is not a mapping.
        yaml.YAMLError: If the file cannot be parsed.
    """
    p = Path(path) if path else Path.cwd() / "rokcalendar.yaml"
    logger.debug("Attempting to load config from %s", p)
    if not p.exists():
        logger.info("Config file %s not found; using defaults", p)
        return Config()

    raw = _load_yaml(p)
    if not isinstance(raw, dict):
        logger.warning("Config file %s parsed but top-level is not a mapping: %r", p, raw)
        raise ValueError("Config file must contain a mapping at top level")  # noqa: TRY004
    cfg = Config.from_dict(raw)
    logger.info("Loaded configuration from %s", p)
    logger.debug("Configuration values: %s", cfg)
    return cfg
