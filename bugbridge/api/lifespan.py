"""ASGI lifespan middleware starting and stopping the bridge's workers.

The chat gateway connection and the event dispatcher run as background tasks
inside the server's event loop. Falcon calls ``process_startup`` once the
loop is running and ``process_shutdown`` when the server stops.

Usage
-----
Register the middleware when creating the Falcon app::

    app = falcon.asgi.App(middleware=[BridgeLifespan(workers)])

"""

from __future__ import annotations

import asyncio
import contextlib
import dataclasses as dc
import typing as typ

from bugbridge.correlation import init_correlation_storage
from bugbridge.logging import get_logger, log_exception, log_info, log_warning

if typ.TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncEngine

    from bugbridge.chat import ChatGateway
    from bugbridge.engine import EventDispatcher
    from bugbridge.github import GitHubRestClient

__all__ = ["BridgeLifespan", "BridgeWorkers"]

logger = get_logger(__name__)


@dc.dataclass(slots=True)
class BridgeWorkers:
    """Long-lived components owned by one bridge process."""

    engine: AsyncEngine
    gateway: ChatGateway
    dispatcher: EventDispatcher
    tracker: GitHubRestClient
    discord_token: str


class BridgeLifespan:
    """Falcon middleware tying bridge workers to the ASGI lifespan."""

    def __init__(self, workers: BridgeWorkers) -> None:
        """Store the workers; nothing starts until ``process_startup``."""
        self._workers = workers
        self._gateway_task: asyncio.Task[None] | None = None

    async def process_startup(
        self, _scope: dict[str, typ.Any], _event: dict[str, typ.Any]
    ) -> None:
        """Create the schema, then start the dispatcher and gateway.

        Storage failures propagate and abort server startup.
        """
        workers = self._workers
        await init_correlation_storage(workers.engine)
        try:
            login = await workers.tracker.authenticated_login()
        except Exception as exc:  # noqa: BLE001 - resolved again per webhook
            log_warning(logger, "Could not resolve GitHub identity yet: %s", exc)
        else:
            log_info(logger, "Posting to GitHub as %s", login)

        workers.dispatcher.start()
        self._gateway_task = asyncio.create_task(
            self._run_gateway(), name="chat-gateway"
        )

    async def _run_gateway(self) -> None:
        try:
            await self._workers.gateway.start(self._workers.discord_token)
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            log_exception(logger, "Chat gateway stopped unexpectedly", exc)
            raise

    async def process_shutdown(
        self, _scope: dict[str, typ.Any], _event: dict[str, typ.Any]
    ) -> None:
        """Stop workers without draining in-flight events."""
        workers = self._workers
        await workers.dispatcher.stop()
        await workers.gateway.close()
        if self._gateway_task is not None:
            self._gateway_task.cancel()
            with contextlib.suppress(asyncio.CancelledError, Exception):
                await self._gateway_task
        await workers.tracker.aclose()
        await workers.engine.dispose()
        log_info(logger, "Bridge stopped")
