"""Normalized events flowing through the bridge.

Both event sources translate their raw input into the variants defined here.
Each event is handled exactly once by the synchronization engine and then
discarded; nothing in this module is persisted.
"""

from __future__ import annotations

import dataclasses as dc
import enum


@dc.dataclass(frozen=True, slots=True)
class UnicodeEmoji:
    """A standard emoji identified by its character sequence."""

    name: str


@dc.dataclass(frozen=True, slots=True)
class CustomEmoji:
    """A guild emoji identified by snowflake."""

    id: int
    name: str | None = None
    animated: bool = False


Emoji = UnicodeEmoji | CustomEmoji


@dc.dataclass(frozen=True, slots=True)
class ChatMessage:
    """A message posted in a chat channel or thread.

    Attributes
    ----------
    message_id
        Snowflake of the message.
    channel_id
        Channel the message was posted in. For replies inside a thread this
        is the thread id.
    guild_id
        Guild of the channel, ``None`` for direct messages.
    thread_id
        Thread started from this message, if any.
    author
        Display name of the author.
    content
        Message text.
    is_bot
        Whether the author is a bot account (including this bridge).

    """

    message_id: int
    channel_id: int
    guild_id: int | None
    thread_id: int | None
    author: str
    content: str
    is_bot: bool


@dc.dataclass(frozen=True, slots=True)
class ChatReaction:
    """A reaction added to or removed from a message."""

    channel_id: int
    message_id: int
    guild_id: int | None
    user_id: int
    emoji: Emoji
    actor_roles: frozenset[int]
    is_add: bool


@dc.dataclass(frozen=True, slots=True)
class TrackerComment:
    """A tracker comment already resolved to its bound chat thread."""

    thread_id: int
    repo: str
    issue_number: int
    author: str
    body: str
    url: str


BridgeEvent = ChatMessage | ChatReaction | TrackerComment


@dc.dataclass(frozen=True, slots=True)
class ChatMessageSnapshot:
    """The parts of a chat message the engine needs to open an issue."""

    id: int
    channel_id: int
    guild_id: int | None
    author: str
    content: str
    thread_id: int | None = None


@dc.dataclass(frozen=True, slots=True)
class CreatedIssue:
    """Issue returned by the tracker after creation."""

    number: int
    html_url: str


@dc.dataclass(frozen=True, slots=True)
class CreatedComment:
    """Comment returned by the tracker after creation."""

    id: int
    html_url: str


class SyncOutcome(enum.StrEnum):
    """Transition taken by the engine for one event."""

    ISSUE_CREATED = "issue_created"
    COMMENT_FORWARDED = "comment_forwarded"
    MESSAGE_FORWARDED = "message_forwarded"
    ALREADY_TRACKED = "already_tracked"
    THREAD_UNTRACKED = "thread_untracked"
    NOT_ROUTED = "not_routed"
    UNAUTHORIZED = "unauthorized"
    BIND_CONFLICT = "bind_conflict"
    UNTRACKED = "untracked"
    IGNORED_BOT = "ignored_bot"
    IGNORED = "ignored"


def describe_event(event: BridgeEvent) -> str:
    """Return a compact ``key=value`` summary used in log lines."""
    match event:
        case ChatMessage():
            return (
                f"kind=chat_message channel_id={event.channel_id} "
                f"message_id={event.message_id}"
            )
        case ChatReaction():
            return (
                f"kind=chat_reaction channel_id={event.channel_id} "
                f"message_id={event.message_id} user_id={event.user_id} "
                f"is_add={event.is_add}"
            )
        case TrackerComment():
            return (
                f"kind=tracker_comment repo={event.repo} "
                f"issue_number={event.issue_number} thread_id={event.thread_id}"
            )
