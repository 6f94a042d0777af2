"""Correlation store binding chat threads to tracker issues."""

from __future__ import annotations

from .errors import CorrelationConflictError
from .service import CorrelationRecord, CorrelationStore
from .storage import ThreadIssueLink, init_correlation_storage

__all__ = [
    "CorrelationConflictError",
    "CorrelationRecord",
    "CorrelationStore",
    "ThreadIssueLink",
    "init_correlation_storage",
]
