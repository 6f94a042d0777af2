"""Unit tests for the best-effort chat message cache."""

from __future__ import annotations

import pytest

from bugbridge.chat import MessageCache
from bugbridge.engine import ChatMessageSnapshot


def _snapshot(message_id: int, content: str = "hello") -> ChatMessageSnapshot:
    return ChatMessageSnapshot(
        id=message_id, channel_id=1, guild_id=2, author="marina", content=content
    )


def test_put_and_get() -> None:
    """Cached messages are returned by id."""
    cache = MessageCache(4)
    cache.put(_snapshot(1))

    assert cache.get(1) == _snapshot(1)
    assert cache.get(2) is None
    assert 1 in cache


def test_least_recently_used_is_evicted() -> None:
    """Reads refresh an entry so the oldest untouched one goes first."""
    cache = MessageCache(2)
    cache.put(_snapshot(1))
    cache.put(_snapshot(2))
    cache.get(1)
    cache.put(_snapshot(3))

    assert len(cache) == 2
    assert 1 in cache
    assert 2 not in cache


def test_edits_and_threads_update_entries() -> None:
    """Edits and new threads replace the cached snapshot."""
    cache = MessageCache()
    cache.put(_snapshot(1))

    cache.update_content(1, "edited")
    cache.attach_thread(1, 1)
    cache.update_content(99, "ignored")

    snapshot = cache.get(1)
    assert snapshot is not None
    assert snapshot.content == "edited"
    assert snapshot.thread_id == 1
    assert 99 not in cache


def test_discard() -> None:
    """Deleted messages leave the cache."""
    cache = MessageCache()
    cache.put(_snapshot(1))
    cache.discard(1)
    cache.discard(1)

    assert len(cache) == 0


def test_size_must_be_positive() -> None:
    """A zero-sized cache is a programming error."""
    with pytest.raises(ValueError, match="max_size must be positive"):
        MessageCache(0)


def test_clear() -> None:
    """Clearing forgets every message."""
    cache = MessageCache(4)
    cache.put(_snapshot(1))
    cache.put(_snapshot(2))

    cache.clear()

    assert len(cache) == 0
    assert cache.get(1) is None
