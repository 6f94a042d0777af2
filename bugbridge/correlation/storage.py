"""Persistence model for thread/issue correlations."""

from __future__ import annotations

import datetime as dt
import typing as typ

from sqlalchemy import BigInteger, DateTime, Integer, String, UniqueConstraint
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

if typ.TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncEngine


def _utcnow() -> dt.datetime:
    return dt.datetime.now(dt.UTC)


class Base(DeclarativeBase):
    """Declarative base for correlation tables."""


class ThreadIssueLink(Base):
    """One chat thread bound to one tracker issue.

    Rows are inserted once and never updated or deleted. Both sides of the
    pairing are unique so a thread can never gain a second issue and an
    issue can never be mirrored into a second thread.
    """

    __tablename__ = "thread_issue_links"
    __table_args__ = (
        UniqueConstraint("repo", "issue_number", name="uq_thread_issue_links_issue"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    thread_id: Mapped[int] = mapped_column(BigInteger, unique=True)
    repo: Mapped[str] = mapped_column(String(255))
    issue_number: Mapped[int] = mapped_column(Integer)
    created_at: Mapped[dt.datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow
    )


async def init_correlation_storage(engine: AsyncEngine) -> None:
    """Create the correlation table if it does not exist yet."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
