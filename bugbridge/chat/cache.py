"""Best-effort cache of recently seen chat messages."""

from __future__ import annotations

import collections
import dataclasses as dc
import typing as typ

if typ.TYPE_CHECKING:
    from bugbridge.engine.models import ChatMessageSnapshot

DEFAULT_CACHE_SIZE = 10_000


class MessageCache:
    """Bounded least-recently-used map from message id to snapshot.

    The cache is fed by gateway frames and may lag behind the platform; it
    only saves a network round trip and is never authoritative.
    """

    def __init__(self, max_size: int = DEFAULT_CACHE_SIZE) -> None:
        """Create an empty cache holding at most ``max_size`` messages."""
        if max_size < 1:
            msg = f"max_size must be positive, got: {max_size}"
            raise ValueError(msg)
        self._max_size = max_size
        self._entries: collections.OrderedDict[int, ChatMessageSnapshot] = (
            collections.OrderedDict()
        )

    def __len__(self) -> int:
        """Return the number of cached messages."""
        return len(self._entries)

    def __contains__(self, message_id: object) -> bool:
        """Return whether ``message_id`` is cached."""
        return message_id in self._entries

    def get(self, message_id: int) -> ChatMessageSnapshot | None:
        """Return a cached message and mark it recently used."""
        snapshot = self._entries.get(message_id)
        if snapshot is not None:
            self._entries.move_to_end(message_id)
        return snapshot

    def put(self, snapshot: ChatMessageSnapshot) -> None:
        """Insert or replace a message, evicting the oldest when full."""
        self._entries[snapshot.id] = snapshot
        self._entries.move_to_end(snapshot.id)
        while len(self._entries) > self._max_size:
            self._entries.popitem(last=False)

    def update_content(self, message_id: int, content: str) -> None:
        """Apply an edit to a cached message; unknown ids are ignored."""
        snapshot = self._entries.get(message_id)
        if snapshot is not None:
            self._entries[message_id] = dc.replace(snapshot, content=content)

    def attach_thread(self, message_id: int, thread_id: int) -> None:
        """Record that a thread was started from a cached message."""
        snapshot = self._entries.get(message_id)
        if snapshot is not None:
            self._entries[message_id] = dc.replace(snapshot, thread_id=thread_id)

    def discard(self, message_id: int) -> None:
        """Forget a deleted message."""
        self._entries.pop(message_id, None)

    def clear(self) -> None:
        """Forget every message."""
        self._entries.clear()
