"""GitHub webhook endpoint acting as the tracker event source.

The endpoint turns ``issue_comment`` deliveries for bridged issues into
``TrackerComment`` events on the merged queue. It answers before the comment
reaches chat, and it acknowledges every well-formed delivery it decides to
skip with a success status so GitHub never marks it as failed.

Usage
-----
Register the resource on the Falcon app::

    app.add_route(
        "/webhook",
        WebhookResource(store=store, queue=queue, identity=tracker.authenticated_login),
    )

"""

from __future__ import annotations

import hashlib
import hmac
import typing as typ
from http import HTTPStatus

import httpx
import msgspec

from bugbridge.api.errors import InvalidInputError, WebhookSignatureError
from bugbridge.engine.models import TrackerComment
from bugbridge.github.errors import (
    GitHubAPIError,
    GitHubConfigError,
    GitHubResponseShapeError,
)
from bugbridge.logging import get_logger, log_debug, log_info, log_warning

from .models import IssueCommentPayload

if typ.TYPE_CHECKING:
    import asyncio
    import collections.abc as cabc

    from falcon.asgi import Request, Response

    from bugbridge.correlation import CorrelationStore
    from bugbridge.engine.models import BridgeEvent

__all__ = ["WebhookResource", "verify_signature"]

logger = get_logger(__name__)

_EVENT_HEADER = "X-GitHub-Event"
_SIGNATURE_HEADER = "X-Hub-Signature-256"
_HANDLED_EVENT = "issue_comment"
_HANDLED_ACTION = "created"
_IDENTITY_ERRORS = (
    httpx.HTTPError,
    GitHubAPIError,
    GitHubConfigError,
    GitHubResponseShapeError,
)


def verify_signature(secret: str, body: bytes, header: str | None) -> bool:
    """Return whether ``header`` is the ``sha256=`` HMAC of ``body``."""
    if not header or not header.startswith("sha256="):
        return False
    expected = hmac.new(secret.encode("utf-8"), body, hashlib.sha256).hexdigest()
    return hmac.compare_digest(f"sha256={expected}", header)


def _decode(body: bytes) -> IssueCommentPayload:
    try:
        return msgspec.json.decode(body, type=IssueCommentPayload)
    except msgspec.ValidationError as exc:
        raise InvalidInputError(str(exc), field="body") from exc
    except msgspec.DecodeError as exc:
        msg = f"body is not valid JSON: {exc}"
        raise InvalidInputError(msg, field="body") from exc


def _ignored(resp: Response, reason: str) -> None:
    resp.status = HTTPStatus.OK
    resp.media = {"status": "ignored", "reason": reason}


class WebhookResource:
    """Accept ``issue_comment`` deliveries at ``POST /webhook``.

    Parameters
    ----------
    store
        Correlation store used to find the thread bound to the issue.
    queue
        Merged event queue consumed by the dispatcher.
    identity
        Returns the bridge's own GitHub login, used to drop echoes of the
        comments the bridge itself posted.
    secret
        Optional webhook secret. When set, deliveries must carry a valid
        ``X-Hub-Signature-256`` header.

    """

    def __init__(
        self,
        *,
        store: CorrelationStore,
        queue: asyncio.Queue[BridgeEvent],
        identity: cabc.Callable[[], cabc.Awaitable[str]],
        secret: str | None = None,
    ) -> None:
        """Store collaborators."""
        self._store = store
        self._queue = queue
        self._identity = identity
        self._secret = secret

    async def on_post(self, req: Request, resp: Response) -> None:
        """Handle POST /webhook."""
        body = await req.stream.read()
        if self._secret is not None and not verify_signature(
            self._secret, body, req.get_header(_SIGNATURE_HEADER)
        ):
            raise WebhookSignatureError

        event_name = req.get_header(_EVENT_HEADER)
        if event_name is not None and event_name != _HANDLED_EVENT:
            log_debug(logger, "Ignoring %s delivery", event_name)
            _ignored(resp, f"event {event_name} is not handled")
            return

        payload = _decode(body)
        repo = payload.repository.full_name
        number = payload.issue.number

        if payload.action != _HANDLED_ACTION:
            log_info(
                logger,
                "Ignoring %s action on %s#%d comment",
                payload.action,
                repo,
                number,
            )
            _ignored(resp, f"action {payload.action} is not handled")
            return

        thread_id = await self._store.lookup_by_issue(number, repo)
        if thread_id is None:
            log_info(logger, "No thread bound to %s#%d", repo, number)
            _ignored(resp, "issue is not bridged")
            return

        try:
            bridge_login = await self._identity()
        except _IDENTITY_ERRORS as exc:
            # Without the bridge login an echo cannot be told apart.
            log_warning(
                logger,
                "Dropping comment on %s#%d; bridge identity unavailable: %s",
                repo,
                number,
                exc,
            )
            _ignored(resp, "bridge identity unavailable")
            return
        if payload.comment.user.login == bridge_login:
            _ignored(resp, "comment authored by the bridge")
            return

        self._queue.put_nowait(
            TrackerComment(
                thread_id=thread_id,
                repo=repo,
                issue_number=number,
                author=payload.comment.user.login,
                body=payload.comment.body,
                url=payload.comment.html_url,
            )
        )
        resp.status = HTTPStatus.ACCEPTED
        resp.media = {"status": "accepted", "thread_id": str(thread_id)}
