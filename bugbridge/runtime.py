"""Bridge runtime entrypoint.

This module provides the ASGI application factory Granian loads in factory
mode. It reads process settings and the routing file, builds every
long-lived component, and hands them to :func:`bugbridge.api.app.create_app`
together with the lifespan middleware that starts the chat gateway and the
event dispatcher inside the server's event loop.

Configuration is driven by environment variables:

- ``BUGBRIDGE_HOST``: Bind address (default ``0.0.0.0``)
- ``BUGBRIDGE_PORT``: Listen port (default ``8080``)
- ``BUGBRIDGE_LOG_LEVEL``: Log level (default ``INFO``)
- ``BUGBRIDGE_*`` bridge settings read by
  :meth:`bugbridge.config.BridgeSettings.from_env`

Run the service directly with ``python -m bugbridge.runtime``.
"""

from __future__ import annotations

import asyncio
import os
import typing as typ

from bugbridge.config import (
    BridgeSettings,
    ConfigError,
    RoutingTable,
    load_bridge_config,
)
from bugbridge.logging import (
    configure_logging,
    get_logger,
    log_error,
    log_info,
    log_warning,
)

if typ.TYPE_CHECKING:
    import falcon.asgi

    from bugbridge.engine.models import BridgeEvent
    from bugbridge.github import GitHubAuth

__all__ = ["create_app", "main"]

logger = get_logger(__name__)

# TCP port number range limits
_MIN_PORT = 1
_MAX_PORT = 65535


def _parse_port(port_str: str) -> int:
    """Parse and validate a port number string.

    Raises
    ------
    SystemExit
        If port_str is not a valid integer in range 1-65535.

    """
    try:
        port = int(port_str)
        if not (_MIN_PORT <= port <= _MAX_PORT):
            msg = f"port {port} outside valid range {_MIN_PORT}-{_MAX_PORT}"
            raise ValueError(msg)  # noqa: TRY301 - unify conversion and range errors
    except ValueError as exc:
        log_error(
            logger,
            "Invalid BUGBRIDGE_PORT value: %r (must be %d-%d): %s",
            port_str,
            _MIN_PORT,
            _MAX_PORT,
            exc,
        )
        raise SystemExit(1) from exc
    return port


def _github_auth(settings: BridgeSettings) -> GitHubAuth:
    from bugbridge.github import AppAuth, TokenAuth

    if settings.github_token is not None:
        return TokenAuth(settings.github_token)
    app = settings.github_app
    if app is None:
        raise ConfigError.missing_github_auth()
    return AppAuth(app.app_id, app.read_private_key())


def _engine_options(database_url: str) -> dict[str, typ.Any]:
    # SQLite allows one writer; sharing one connection turns concurrent binds
    # into constraint violations rather than "database is locked" errors.
    if database_url.startswith("sqlite") and ":memory:" not in database_url:
        return {"pool_size": 1, "max_overflow": 0}
    return {}


def _build_app(settings: BridgeSettings) -> falcon.asgi.App:
    from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine

    from bugbridge.api.app import AppDependencies, create_app as _create_api_app
    from bugbridge.api.lifespan import BridgeLifespan, BridgeWorkers
    from bugbridge.chat import ChatGateway
    from bugbridge.correlation import CorrelationStore
    from bugbridge.engine import EngineSettings, EventDispatcher, SyncEngine
    from bugbridge.github import GitHubRestClient

    config = load_bridge_config(settings.config_path)
    routing = RoutingTable(config)

    engine = create_async_engine(
        settings.database_url, **_engine_options(settings.database_url)
    )
    session_factory = async_sessionmaker(engine, expire_on_commit=False)
    store = CorrelationStore(session_factory)

    tracker = GitHubRestClient(_github_auth(settings))
    queue: asyncio.Queue[BridgeEvent] = asyncio.Queue()
    gateway = ChatGateway(queue)
    sync = SyncEngine(
        routing=routing,
        store=store,
        chat=gateway,
        messages=gateway,
        tracker=tracker,
        settings=EngineSettings(
            trigger_emoji=config.trigger_emoji,
            issue_label=config.issue_label,
        ),
    )
    dispatcher = EventDispatcher(
        queue, sync.handle, max_in_flight=settings.max_in_flight
    )

    log_info(
        logger,
        "Routing %d repositories from %s",
        len(routing.repositories),
        settings.config_path,
    )
    deps = AppDependencies(
        store=store,
        queue=queue,
        identity=tracker.authenticated_login,
        webhook_secret=settings.webhook_secret,
        is_ready=gateway.is_ready,
        lifespan=BridgeLifespan(
            BridgeWorkers(
                engine=engine,
                gateway=gateway,
                dispatcher=dispatcher,
                tracker=tracker,
                discord_token=settings.discord_token,
            )
        ),
    )
    return _create_api_app(deps)


def create_app() -> falcon.asgi.App:
    """Create the fully wired bridge application.

    Returns
    -------
    falcon.asgi.App
        Configured Falcon ASGI application.

    Raises
    ------
    SystemExit
        If settings or the routing file are invalid. Each problem is logged
        before exiting.

    """
    try:
        settings = BridgeSettings.from_env()
        return _build_app(settings)
    except ConfigError as exc:
        for issue in exc.issues:
            log_error(logger, "Configuration error: %s", issue)
        raise SystemExit(1) from exc


def main() -> None:
    """Start the bridge server using Granian.

    Reads ``BUGBRIDGE_HOST``, ``BUGBRIDGE_PORT``, and ``BUGBRIDGE_LOG_LEVEL``
    from the environment and starts the ASGI server with a single worker,
    because the correlation of chat and webhook events relies on one
    in-process queue.
    """
    from granian import Granian
    from granian.constants import Interfaces

    host = os.environ.get("BUGBRIDGE_HOST", "0.0.0.0")  # noqa: S104 - bind all interfaces for container
    port = _parse_port(os.environ.get("BUGBRIDGE_PORT", "8080"))
    log_level_str = os.environ.get("BUGBRIDGE_LOG_LEVEL", "INFO")

    normalized_level, invalid_level = configure_logging(log_level_str)
    if invalid_level:
        log_warning(
            logger,
            "Invalid BUGBRIDGE_LOG_LEVEL %r, falling back to %s",
            log_level_str,
            normalized_level,
        )

    log_info(
        logger,
        "Starting bridge on %s:%d (log_level=%s)",
        host,
        port,
        normalized_level,
    )

    server = Granian(
        "bugbridge.runtime:create_app",
        address=host,
        port=port,
        interface=Interfaces.ASGI,
        factory=True,
        workers=1,
    )
    server.serve()


if __name__ == "__main__":
    main()
