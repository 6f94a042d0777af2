"""Application factory for the bridge's Falcon ASGI application.

This module provides ``create_app()`` which builds the Falcon ASGI
application with health endpoints and, when bridge dependencies are
available, the GitHub webhook endpoint.

Usage
-----
Create a health-only app::

    app = create_app()

Create the full bridge app::

    from bugbridge.api.app import AppDependencies, create_app

    deps = AppDependencies(
        store=store,
        queue=queue,
        identity=tracker.authenticated_login,
    )
    app = create_app(deps)

"""

from __future__ import annotations

import dataclasses as dc
import typing as typ

import falcon.asgi

from bugbridge.api.errors import (
    InvalidInputError,
    WebhookSignatureError,
    handle_invalid_input,
    handle_invalid_signature,
)
from bugbridge.api.health.resources import HealthResource, ReadyResource
from bugbridge.api.webhook.resources import WebhookResource

if typ.TYPE_CHECKING:
    import asyncio
    import collections.abc as cabc

    from bugbridge.api.lifespan import BridgeLifespan
    from bugbridge.correlation import CorrelationStore
    from bugbridge.engine.models import BridgeEvent

__all__ = ["AppDependencies", "create_app"]


@dc.dataclass(frozen=True, slots=True)
class AppDependencies:
    """Dependencies for the Falcon ASGI application.

    Attributes
    ----------
    store
        Correlation store consulted by the webhook endpoint.
    queue
        Merged event queue the webhook endpoint feeds.
    identity
        Returns the bridge's own GitHub login.
    webhook_secret
        Optional secret for ``X-Hub-Signature-256`` verification.
    is_ready
        Readiness check for ``/ready``; ``None`` means always ready.
    lifespan
        Middleware starting and stopping the background workers.

    """

    store: CorrelationStore
    queue: asyncio.Queue[BridgeEvent]
    identity: cabc.Callable[[], cabc.Awaitable[str]]
    webhook_secret: str | None = None
    is_ready: cabc.Callable[[], bool] | None = None
    lifespan: BridgeLifespan | None = None


def create_app(
    dependencies: AppDependencies | None = None,
) -> falcon.asgi.App:
    """Create and configure the Falcon ASGI application.

    Parameters
    ----------
    dependencies
        Optional bridge dependencies. When ``None``, only ``/health`` and
        ``/ready`` are registered.

    Returns
    -------
    falcon.asgi.App
        Configured Falcon ASGI application.

    """
    middleware: list[object] = []
    if dependencies is not None and dependencies.lifespan is not None:
        middleware.append(dependencies.lifespan)

    app = falcon.asgi.App(middleware=middleware)  # type: ignore[no-matching-overload]  # Falcon stubs

    app.add_route("/health", HealthResource())
    app.add_route(
        "/ready",
        ReadyResource(None if dependencies is None else dependencies.is_ready),
    )

    if dependencies is not None:
        app.add_route(
            "/webhook",
            WebhookResource(
                store=dependencies.store,
                queue=dependencies.queue,
                identity=dependencies.identity,
                secret=dependencies.webhook_secret,
            ),
        )

    app.add_error_handler(InvalidInputError, handle_invalid_input)
    app.add_error_handler(WebhookSignatureError, handle_invalid_signature)

    return app
