"""Correlation store errors."""

from __future__ import annotations


class CorrelationConflictError(RuntimeError):
    """Raised when a bind would give a thread or an issue a second partner.

    The uniqueness constraints on the correlation table are the only guard
    against two concurrent escalations of the same message, so this error is
    expected under races and is recovered by the synchronization engine.
    """

    def __init__(self, thread_id: int, issue_number: int, repo: str) -> None:
        """Record the rejected binding for logging."""
        self.thread_id = thread_id
        self.issue_number = issue_number
        self.repo = repo
        super().__init__(
            f"thread {thread_id} or issue {repo}#{issue_number} is already bound"
        )
