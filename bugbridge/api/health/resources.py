"""Liveness and readiness probe resources.

Liveness only reports that the process serves HTTP. Readiness additionally
reports whether the chat gateway session is up, because webhook comments can
only be mirrored once the bridge can post to chat.
"""

from __future__ import annotations

import typing as typ
from http import HTTPStatus

if typ.TYPE_CHECKING:
    from falcon.asgi import Request, Response

__all__ = ["HealthResource", "ReadyResource"]


class HealthResource:
    """Liveness probe returning ``{"status": "ok"}``."""

    async def on_get(self, _req: Request, resp: Response) -> None:
        """Handle GET /health."""
        resp.media = {"status": "ok"}
        resp.status = HTTPStatus.OK


class ReadyResource:
    """Readiness probe gated on an optional readiness check.

    Parameters
    ----------
    is_ready
        Returns ``True`` once dependencies are usable. When omitted the
        resource always reports ready.

    """

    def __init__(self, is_ready: typ.Callable[[], bool] | None = None) -> None:
        """Store the readiness check."""
        self._is_ready = is_ready

    async def on_get(self, _req: Request, resp: Response) -> None:
        """Handle GET /ready, answering 503 until the check passes."""
        if self._is_ready is None or self._is_ready():
            resp.media = {"status": "ready"}
            resp.status = HTTPStatus.OK
            return
        resp.media = {"status": "starting"}
        resp.status = HTTPStatus.SERVICE_UNAVAILABLE
