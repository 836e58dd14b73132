"""rokcalendar - recurring event calendar for Rise of Kingdoms.

Expands a catalog of recurring game events into concrete dated occurrences,
indexes them by day and month, and serves them over a small aiohttp API.
"""

__version__ = "0.1.0"

from typing import Optional


def _init_logging(level_name: Optional[str]) -> None:
    """Initialize root logging to stream to console.

    Sets a colorized formatter and a default level so that early startup
    messages are visible. Callers may adjust the level later (e.g. from config).

    The ROKCAL_DEBUG environment variable (truthy values: "1", "true", "yes",
    "on") forces DEBUG verbosity regardless of ``level_name``.
    """
    import logging
    import os
    import sys

    from colorlog import ColoredFormatter

    debug_env = os.environ.get("ROKCAL_DEBUG", "")
    if debug_env.strip().lower() in ("1", "true", "yes", "on"):
        level_name = "DEBUG"

    root = logging.getLogger()
    # Only configure a handler if none are present to avoid duplicate output.
    if not root.handlers:
        handler = logging.StreamHandler(stream=sys.stderr)
        # HH:MM:SS  LEVEL   logger.name: message  (only the level is colorized)
        fmt = "%(asctime)s %(log_color)s%(levelname)-7s%(reset)s %(name)s: %(message)s"
        log_colors = {
            "DEBUG": "cyan",
            "INFO": "green",
            "WARNING": "yellow",
            "ERROR": "red",
            "CRITICAL": "bold_red",
        }
        handler.setFormatter(ColoredFormatter(fmt, datefmt="%H:%M:%S", log_colors=log_colors))
        root.addHandler(handler)

    level = logging.INFO
    if isinstance(level_name, str):
        level = getattr(logging, level_name.upper(), logging.INFO)
        if not isinstance(level, int):
            level = logging.INFO
    root.setLevel(level)
    logging.getLogger(__name__).debug(
        "Logging initialized at level %s", logging.getLevelName(level)
    )


def run_server(args: Optional[object] = None) -> None:
    """Start the rokcalendar HTTP server.

    Args:
        args: Optional command line arguments namespace with ``port``,
            ``source`` and ``config`` attributes

    Behavior:
    - Initialize console logging early using ROKCAL_LOG_LEVEL (env) if present.
    - Load the config file, then apply ROKCAL_* environment overrides, then
      command line overrides.
    - Update the log level from the resulting config and delegate to
      ``rokcalendar.api.server.start_server``.
    """
    import logging
    import os

    _init_logging(os.environ.get("ROKCAL_LOG_LEVEL"))
    logger = logging.getLogger(__name__)

    from .api.server import start_server
    from .config_loader import load_config
    from .core.config_manager import ConfigManager

    config_path = getattr(args, "config", None)
    cfg = load_config(config_path)
    cfg = cfg.merged(ConfigManager().load_full_config())

    overrides: dict[str, object] = {}
    port = getattr(args, "port", None)
    if port is not None:
        overrides["server_port"] = port
        logger.debug("Applied command line port override: %s", port)
    source = getattr(args, "source", None)
    if source is not None:
        overrides["source"] = source
        logger.debug("Applied command line source override: %s", source)
    if overrides:
        cfg = cfg.merged(overrides)

    logger.info("Applying configured log_level=%s", cfg.log_level)
    logging.getLogger().setLevel(getattr(logging, cfg.log_level, logging.INFO))

    start_server(cfg)
