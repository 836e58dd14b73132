"""rokcalendar HTTP server.

Builds the template store for the configured source, wires the aiohttp
application and runs it until SIGINT/SIGTERM.
"""

from __future__ import annotations

import asyncio
import contextlib
import datetime
import logging
import signal
from collections.abc import Callable
from typing import Any, Optional

from aiohttp import web

from ..calendar.catalog import base_templates
from ..calendar.display import VI, DisplayLocale, UnknownLocaleError, get_locale
from ..core.clock import now_local
from ..core.config_manager import get_config_value
from ..core.http_client import close_all_clients
from ..sources.remote_fetcher import RemoteCatalogFetcher
from ..sources.template_store import HorizonMode, HorizonPolicy, TemplateStore
from .middleware import correlation_id_middleware, cors_middleware
from .routes import register_calendar_routes, register_proxy_routes

logger = logging.getLogger(__name__)

STORE_KEY = web.AppKey("store", TemplateStore)
FETCHER_KEY = web.AppKey("fetcher", RemoteCatalogFetcher)


def _resolve_locale(config: Any) -> DisplayLocale:
    code = get_config_value(config, "locale", VI.code)
    try:
        return get_locale(code)
    except UnknownLocaleError:
        logger.warning("Unknown locale %r; falling back to %r", code, VI.code)
        return VI


def horizon_policy_for(config: Any) -> HorizonPolicy:
    """Horizon policy for the configured source.

    The static catalog repeats ``months_ahead`` times up to ``months_ahead``
    months out; the remote catalog runs ``horizon_years`` years out.
    """
    source = get_config_value(config, "source", "static")
    repetitions = get_config_value(config, "repetitions")
    if source == "remote":
        return HorizonPolicy(
            mode=HorizonMode.YEARS_AHEAD,
            amount=int(get_config_value(config, "horizon_years", 1)),
            repetitions=repetitions,
        )
    months_ahead = int(get_config_value(config, "months_ahead", 12))
    return HorizonPolicy(
        mode=HorizonMode.MONTHS_AHEAD,
        amount=months_ahead,
        repetitions=months_ahead if repetitions is None else repetitions,
    )


def build_store(
    config: Any,
    fetcher: Optional[RemoteCatalogFetcher],
    locale: DisplayLocale,
    time_provider: Callable[[], datetime.datetime] = now_local,
) -> TemplateStore:
    """Create the template store for the configured source.

    The static catalog is loaded immediately. A remote store starts empty;
    its first fetch is scheduled when the app starts.
    """
    policy = horizon_policy_for(config)
    source = get_config_value(config, "source", "static")
    if source == "remote":
        upstream_url = get_config_value(config, "upstream_url")
        logger.info("Using remote catalog %s (policy=%s)", upstream_url, policy)
        return TemplateStore(
            fetcher=fetcher,
            policy=policy,
            catalog_url=upstream_url,
            time_provider=time_provider,
        )

    store = TemplateStore(policy=policy, time_provider=time_provider)
    store.load_static(base_templates(time_provider().date(), locale.week_start))
    logger.info("Loaded static catalog (policy=%s)", policy)
    return store


def make_app(
    config: Any,
    store: Optional[TemplateStore] = None,
    fetcher: Optional[RemoteCatalogFetcher] = None,
    time_provider: Callable[[], datetime.datetime] = now_local,
) -> web.Application:
    """Create the aiohttp application with routes wired to the template store.

    Args:
        config: Config dataclass or mapping
        store: Prebuilt store; built from ``config`` when omitted
        fetcher: Catalog fetcher used by the proxy and the remote store
        time_provider: Returns the current local time
    """
    locale = _resolve_locale(config)
    if fetcher is None:
        fetcher = RemoteCatalogFetcher(config)
    if store is None:
        store = build_store(config, fetcher, locale, time_provider)

    app = web.Application(middlewares=[correlation_id_middleware, cors_middleware])
    app[STORE_KEY] = store
    app[FETCHER_KEY] = fetcher

    register_proxy_routes(
        app,
        fetcher=fetcher,
        upstream_url=get_config_value(config, "upstream_url"),
    )
    register_calendar_routes(
        app,
        store=store,
        locale=locale,
        time_provider=time_provider,
        upcoming_limit=int(get_config_value(config, "upcoming_limit", 10)),
    )

    # Started tasks, kept here because the app is frozen once it starts
    startup_tasks: list[asyncio.Task[bool]] = []

    async def _initial_refresh(app: web.Application) -> None:
        if app[STORE_KEY].fetcher is not None and app[STORE_KEY].catalog_url:
            logger.debug("Scheduling initial catalog fetch")
            startup_tasks.append(asyncio.create_task(app[STORE_KEY].refresh()))

    async def _cleanup(app: web.Application) -> None:
        for task in startup_tasks:
            if not task.done():
                task.cancel()
                with contextlib.suppress(asyncio.CancelledError):
                    await task
        await app[FETCHER_KEY].close()
        logger.info("Application shutdown complete")

    app.on_startup.append(_initial_refresh)
    app.on_cleanup.append(_cleanup)
    return app


async def _serve(config: Any, external_stop_event: Optional[asyncio.Event] = None) -> None:
    """Run the server until signalled to stop.

    Args:
        config: Server configuration object/dict.
        external_stop_event: Optional event to signal shutdown. If provided,
            signal handlers are not registered (caller owns signal handling).
    """
    stop_event = external_stop_event or asyncio.Event()

    app = make_app(config)
    runner = web.AppRunner(app)
    await runner.setup()

    host = get_config_value(config, "server_bind", "127.0.0.1")
    configured_port = int(get_config_value(config, "server_port", 8888))
    max_port_attempts = 10

    actual_port = configured_port
    for port_offset in range(max_port_attempts):
        actual_port = configured_port + port_offset
        site = web.TCPSite(runner, host=host, port=actual_port)
        try:
            await site.start()
            break
        except OSError as e:
            if "address already in use" not in str(e).lower():
                logger.exception("Failed to start server on %s:%d", host, actual_port)
                await runner.cleanup()
                raise
            logger.debug("Port %d in use, trying next port", actual_port)
    else:
        await runner.cleanup()
        raise RuntimeError(
            f"No available port found in range {configured_port}-{configured_port + max_port_attempts - 1}"
        )

    if actual_port != configured_port:
        logger.warning(
            "Configured port %d was in use, using port %d instead", configured_port, actual_port
        )
    logger.info("Server started successfully on http://%s:%d", host, actual_port)

    if external_stop_event is None:
        loop = asyncio.get_running_loop()

        def _on_signal() -> None:
            logger.info("Shutdown signal received")
            stop_event.set()

        for sig in (signal.SIGINT, signal.SIGTERM):
            with contextlib.suppress(NotImplementedError):
                loop.add_signal_handler(sig, _on_signal)

    await stop_event.wait()
    logger.info("Stop event received, shutting down")

    await runner.cleanup()
    try:
        await close_all_clients()
    except Exception as e:
        logger.warning("Error cleaning up shared HTTP clients: %s", e)
    logger.info("Server shutdown complete")


def start_server(config: Any) -> None:
    """Start the asyncio event loop and HTTP server.

    Blocks the calling thread until SIGINT/SIGTERM.

    Args:
        config: Config dataclass or mapping with keys:
            - source: "static" or "remote"
            - upstream_url: remote catalog endpoint
            - months_ahead / horizon_years / repetitions: expansion horizon
            - upcoming_limit: default upcoming list size
            - locale: display locale code
            - server_bind / server_port: listen address
            - request_timeout / max_retries / retry_backoff_factor: fetch settings
    """
    from ..logging_config import configure_logging

    debug_mode = str(get_config_value(config, "log_level", "INFO")).upper() == "DEBUG"
    configure_logging(debug_mode=debug_mode)
    logger.info("Logging configuration applied: debug_mode=%s", debug_mode)

    try:
        asyncio.run(_serve(config))
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
    except Exception:
        logger.exception("Server terminated unexpectedly")
        raise
