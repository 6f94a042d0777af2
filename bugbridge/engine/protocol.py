"""Collaborator interfaces the synchronization engine drives."""

from __future__ import annotations

import typing as typ

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from .models import ChatMessageSnapshot, CreatedComment, CreatedIssue, Emoji


@typ.runtime_checkable
class ChatClient(typ.Protocol):
    """Chat platform operations needed to escalate and mirror messages."""

    async def fetch_message(
        self, channel_id: int, message_id: int
    ) -> ChatMessageSnapshot:
        """Fetch a message from the platform, bypassing any cache."""
        ...

    async def create_thread(self, channel_id: int, message_id: int, name: str) -> int:
        """Start a thread anchored to a message and return the thread id."""
        ...

    async def post_message(self, channel_id: int, content: str) -> None:
        """Post ``content`` to a channel or thread."""
        ...

    async def remove_reaction(
        self, channel_id: int, message_id: int, emoji: Emoji, user_id: int
    ) -> None:
        """Remove one member's reaction from a message."""
        ...

    async def member_role_ids(self, guild_id: int, user_id: int) -> frozenset[int]:
        """Return the role ids a guild member holds."""
        ...


class MessageSource(typ.Protocol):
    """Read-through lookup for messages the engine reacts to."""

    async def get_message(
        self, channel_id: int, message_id: int
    ) -> ChatMessageSnapshot:
        """Return a message, preferring a local cache over the network."""
        ...


@typ.runtime_checkable
class TrackerClient(typ.Protocol):
    """Issue tracker operations needed by the bridge."""

    async def create_issue(
        self,
        repo: str,
        *,
        title: str,
        body: str,
        labels: cabc.Sequence[str],
    ) -> CreatedIssue:
        """Open an issue in ``repo``."""
        ...

    async def create_comment(
        self, repo: str, issue_number: int, body: str
    ) -> CreatedComment:
        """Comment on ``repo#issue_number``."""
        ...

    async def authenticated_login(self) -> str:
        """Return the login the bridge posts comments as."""
        ...
