"""Durable thread/issue correlation store."""

from __future__ import annotations

import dataclasses as dc
import typing as typ

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from .errors import CorrelationConflictError
from .storage import ThreadIssueLink

if typ.TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker


@dc.dataclass(frozen=True, slots=True)
class CorrelationRecord:
    """A chat thread paired with a tracker issue."""

    thread_id: int
    issue_number: int
    repo: str


def _to_record(row: ThreadIssueLink) -> CorrelationRecord:
    return CorrelationRecord(
        thread_id=row.thread_id,
        issue_number=row.issue_number,
        repo=row.repo,
    )


class CorrelationStore:
    """Single source of truth for which threads are tracked.

    Each operation runs in its own short session, so the store can be shared
    by every concurrently running event handler without in-process locks.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        """Store the session factory used for every operation."""
        self._session_factory = session_factory

    async def bind(
        self, thread_id: int, issue_number: int, repo: str
    ) -> CorrelationRecord:
        """Insert a new correlation.

        The insert is rejected atomically by the table's unique constraints
        when either the thread or the issue is already bound, even if both
        callers looked the thread up and saw it untracked.

        Raises
        ------
        CorrelationConflictError
            If the thread or the ``(repo, issue_number)`` pair is taken.

        """
        async with self._session_factory() as session:
            session.add(
                ThreadIssueLink(
                    thread_id=thread_id, repo=repo, issue_number=issue_number
                )
            )
            try:
                await session.commit()
            except IntegrityError as exc:
                await session.rollback()
                raise CorrelationConflictError(thread_id, issue_number, repo) from exc

        return CorrelationRecord(
            thread_id=thread_id, issue_number=issue_number, repo=repo
        )

    async def lookup_by_thread(self, thread_id: int) -> CorrelationRecord | None:
        """Return the issue bound to ``thread_id``, if any."""
        async with self._session_factory() as session:
            row = await session.scalar(
                select(ThreadIssueLink).where(ThreadIssueLink.thread_id == thread_id)
            )
        return None if row is None else _to_record(row)

    async def lookup_by_issue(self, issue_number: int, repo: str) -> int | None:
        """Return the thread bound to ``repo#issue_number``, if any."""
        async with self._session_factory() as session:
            return await session.scalar(
                select(ThreadIssueLink.thread_id).where(
                    ThreadIssueLink.repo == repo,
                    ThreadIssueLink.issue_number == issue_number,
                )
            )
