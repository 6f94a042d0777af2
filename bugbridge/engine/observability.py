"""Structured log events for event handling.

Every handled event produces one ``[bridge.event.*]`` line so operators can
follow escalations and spot dropped events. Failures carry an error category
suited to alert routing.
"""

from __future__ import annotations

import enum
import typing as typ

import discord
import httpx
from sqlalchemy.exc import (
    IntegrityError,
    InterfaceError,
    OperationalError,
    SQLAlchemyError,
)

from bugbridge.config.errors import ConfigError
from bugbridge.github.errors import (
    GitHubAPIError,
    GitHubConfigError,
    GitHubResponseShapeError,
)
from bugbridge.logging import get_logger, log_error, log_info, log_warning

from .models import describe_event

if typ.TYPE_CHECKING:
    import datetime as dt

    from bugbridge.correlation import CorrelationRecord

    from .models import BridgeEvent, CreatedIssue, SyncOutcome

logger = get_logger(__name__)

_HTTP_SERVER_ERROR_THRESHOLD = 500
_HTTP_RATE_LIMITED = 429


class BridgeEventType(enum.StrEnum):
    """Structured log event types."""

    EVENT_HANDLED = "bridge.event.handled"
    EVENT_FAILED = "bridge.event.failed"
    ISSUE_CREATED = "bridge.issue.created"
    BIND_CONFLICT = "bridge.bind.conflict"


class ErrorCategory(enum.StrEnum):
    """Categories for failed event handling."""

    TRANSIENT = "transient"
    CLIENT_ERROR = "client_error"
    SCHEMA_DRIFT = "schema_drift"
    CONFIGURATION = "configuration"
    CHAT_PLATFORM = "chat_platform"
    DATABASE_CONNECTIVITY = "database_connectivity"
    DATA_INTEGRITY = "data_integrity"
    DATABASE_ERROR = "database_error"
    UNKNOWN = "unknown"


_EXCEPTION_CATEGORY_MAP: tuple[tuple[type[BaseException], ErrorCategory], ...] = (
    (GitHubResponseShapeError, ErrorCategory.SCHEMA_DRIFT),
    (ConfigError, ErrorCategory.CONFIGURATION),
    (GitHubConfigError, ErrorCategory.CONFIGURATION),
    (httpx.TransportError, ErrorCategory.TRANSIENT),
    (discord.DiscordServerError, ErrorCategory.TRANSIENT),
    (discord.DiscordException, ErrorCategory.CHAT_PLATFORM),
    (OperationalError, ErrorCategory.DATABASE_CONNECTIVITY),
    (InterfaceError, ErrorCategory.DATABASE_CONNECTIVITY),
    (IntegrityError, ErrorCategory.DATA_INTEGRITY),
    (SQLAlchemyError, ErrorCategory.DATABASE_ERROR),
)


def categorize_error(exc: BaseException) -> ErrorCategory:
    """Categorize a handling failure for alert routing."""
    if isinstance(exc, GitHubAPIError):
        status = exc.status_code
        if status is not None and (
            status >= _HTTP_SERVER_ERROR_THRESHOLD or status == _HTTP_RATE_LIMITED
        ):
            return ErrorCategory.TRANSIENT
        return ErrorCategory.CLIENT_ERROR

    for exc_type, category in _EXCEPTION_CATEGORY_MAP:
        if isinstance(exc, exc_type):
            return category

    return ErrorCategory.UNKNOWN


class BridgeEventLogger:
    """Emit structured bridge events through femtologging."""

    def log_event_handled(
        self, event: BridgeEvent, outcome: SyncOutcome, duration: dt.timedelta
    ) -> None:
        """Log the transition taken for one event."""
        log_info(
            logger,
            "[%s] %s outcome=%s duration_seconds=%.3f",
            BridgeEventType.EVENT_HANDLED,
            describe_event(event),
            outcome,
            duration.total_seconds(),
        )

    def log_event_failed(
        self, event: BridgeEvent, error: BaseException, duration: dt.timedelta
    ) -> None:
        """Log a dropped event with its error category."""
        log_error(
            logger,
            "[%s] %s duration_seconds=%.3f error_type=%s error_category=%s "
            "error_message=%s",
            BridgeEventType.EVENT_FAILED,
            describe_event(event),
            duration.total_seconds(),
            type(error).__name__,
            categorize_error(error),
            str(error),
            exc_info=error,
        )

    def log_issue_created(self, record: CorrelationRecord, issue: CreatedIssue) -> None:
        """Log a successful escalation."""
        log_info(
            logger,
            "[%s] repo=%s issue_number=%d thread_id=%d url=%s",
            BridgeEventType.ISSUE_CREATED,
            record.repo,
            record.issue_number,
            record.thread_id,
            issue.html_url,
        )

    def log_bind_conflict(
        self, repo: str, thread_id: int, issue: CreatedIssue
    ) -> None:
        """Log an escalation that lost the race to another handler.

        The issue and thread created by the losing handler stay in place; the
        URL is logged so operators can close the orphan.
        """
        log_warning(
            logger,
            "[%s] repo=%s thread_id=%d orphaned_issue_number=%d orphaned_url=%s",
            BridgeEventType.BIND_CONFLICT,
            repo,
            thread_id,
            issue.number,
            issue.html_url,
        )
