"""Translate discord.py gateway objects into bridge events.

The functions here only read attributes, so tests can pass simple stand-ins
instead of real discord.py models.
"""

from __future__ import annotations

import typing as typ

from bugbridge.engine.models import (
    ChatMessage,
    ChatMessageSnapshot,
    ChatReaction,
    CustomEmoji,
    Emoji,
    UnicodeEmoji,
)

if typ.TYPE_CHECKING:
    import discord


def _guild_id(message: discord.Message) -> int | None:
    guild = message.guild
    return None if guild is None else guild.id


def _thread_id(message: discord.Message) -> int | None:
    thread = getattr(message, "thread", None)
    return None if thread is None else thread.id


def snapshot_from_message(message: discord.Message) -> ChatMessageSnapshot:
    """Return the cacheable view of a message."""
    return ChatMessageSnapshot(
        id=message.id,
        channel_id=message.channel.id,
        guild_id=_guild_id(message),
        author=message.author.name,
        content=message.content,
        thread_id=_thread_id(message),
    )


def chat_message_event(message: discord.Message) -> ChatMessage:
    """Normalize a message-create frame."""
    return ChatMessage(
        message_id=message.id,
        channel_id=message.channel.id,
        guild_id=_guild_id(message),
        thread_id=_thread_id(message),
        author=message.author.name,
        content=message.content,
        is_bot=bool(message.author.bot),
    )


def emoji_from_partial(emoji: discord.PartialEmoji) -> Emoji:
    """Map a reaction emoji onto the closed emoji variants."""
    if emoji.id is None:
        return UnicodeEmoji(name=emoji.name)
    return CustomEmoji(id=emoji.id, name=emoji.name, animated=bool(emoji.animated))


def chat_reaction_event(
    payload: discord.RawReactionActionEvent, *, is_add: bool
) -> ChatReaction:
    """Normalize a raw reaction add or remove frame.

    Role ids come from the member object Discord attaches to guild reaction
    adds; removals carry no member, so their role set is empty.
    """
    member = payload.member
    roles: frozenset[int] = frozenset()
    if member is not None:
        roles = frozenset(role.id for role in member.roles)
    return ChatReaction(
        channel_id=payload.channel_id,
        message_id=payload.message_id,
        guild_id=payload.guild_id,
        user_id=payload.user_id,
        emoji=emoji_from_partial(payload.emoji),
        actor_roles=roles,
        is_add=is_add,
    )
