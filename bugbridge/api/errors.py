"""Domain exceptions and Falcon error handlers for the HTTP layer.

Usage
-----
Register the handlers on the Falcon app::

    app.add_error_handler(InvalidInputError, handle_invalid_input)
    app.add_error_handler(WebhookSignatureError, handle_invalid_signature)

"""

from __future__ import annotations

import typing as typ

import falcon

if typ.TYPE_CHECKING:
    from falcon.asgi import Request, Response

__all__ = [
    "InvalidInputError",
    "WebhookSignatureError",
    "handle_invalid_input",
    "handle_invalid_signature",
]


class InvalidInputError(Exception):
    """Raised for malformed request bodies that should map to HTTP 400.

    Only payloads that cannot be understood at all raise this; well-formed
    payloads the bridge chooses to ignore are acknowledged with a success
    status so the sender's delivery bookkeeping stays clean.

    Attributes
    ----------
    reason
        Human-readable description of the problem.
    field
        Optional name of the offending field.

    """

    def __init__(self, reason: str, *, field: str | None = None) -> None:
        """Initialize with a reason and optional field name."""
        self.reason = reason
        self.field = field
        message = f"{field}: {reason}" if field is not None else reason
        super().__init__(message)


class WebhookSignatureError(Exception):
    """Raised when a webhook signature is missing or does not match."""

    def __init__(self) -> None:
        """Initialize with a fixed message that leaks no signature detail."""
        super().__init__("Webhook signature verification failed")


async def handle_invalid_input(
    _req: Request,
    resp: Response,
    ex: InvalidInputError,
    _params: dict[str, typ.Any],
) -> None:
    """Map ``InvalidInputError`` to an HTTP 400 JSON response."""
    resp.status = falcon.HTTP_400
    media: dict[str, str] = {"title": "Invalid input", "description": ex.reason}
    if ex.field is not None:
        media["field"] = ex.field
    resp.media = media


async def handle_invalid_signature(
    _req: Request,
    resp: Response,
    ex: WebhookSignatureError,
    _params: dict[str, typ.Any],
) -> None:
    """Map ``WebhookSignatureError`` to an HTTP 401 JSON response."""
    resp.status = falcon.HTTP_401
    resp.media = {"title": "Unauthorized", "description": str(ex)}
