"""GitHub webhook endpoint."""

from __future__ import annotations

from .models import IssueCommentPayload
from .resources import WebhookResource, verify_signature

__all__ = ["IssueCommentPayload", "WebhookResource", "verify_signature"]
