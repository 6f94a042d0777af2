"""Discord gateway connection acting as the chat event source.

``ChatGateway`` is a ``discord.Client`` that does three jobs over one
connection:

- normalizes message and reaction frames into bridge events on the shared
  queue,
- keeps the message cache current from every frame it sees, and
- implements the chat-side operations the synchronization engine needs.

Reconnecting after transport drops is left to discord.py.
"""

from __future__ import annotations

import asyncio
import typing as typ

import discord

from bugbridge.engine.models import CustomEmoji, Emoji, UnicodeEmoji
from bugbridge.logging import get_logger, log_info

from .cache import DEFAULT_CACHE_SIZE, MessageCache
from .normalize import chat_message_event, chat_reaction_event, snapshot_from_message

if typ.TYPE_CHECKING:
    from bugbridge.engine.models import BridgeEvent, ChatMessageSnapshot

logger = get_logger(__name__)


def gateway_intents() -> discord.Intents:
    """Return the intents needed to see messages, reactions and threads."""
    intents = discord.Intents.none()
    intents.guilds = True
    intents.guild_messages = True
    intents.guild_reactions = True
    intents.message_content = True
    return intents


def _reaction_emoji(emoji: Emoji) -> str | discord.PartialEmoji:
    match emoji:
        case UnicodeEmoji(name=name):
            return name
        case CustomEmoji(id=emoji_id, name=name, animated=animated):
            return discord.PartialEmoji(name=name, id=emoji_id, animated=animated)


class ChatGateway(discord.Client):
    """Chat event source and chat collaborator backed by discord.py.

    Parameters
    ----------
    queue
        Merged event queue shared with the webhook endpoint.
    cache
        Message cache; a fresh one is created when omitted.

    """

    def __init__(
        self,
        queue: asyncio.Queue[BridgeEvent],
        *,
        cache: MessageCache | None = None,
    ) -> None:
        """Create the client without connecting."""
        super().__init__(intents=gateway_intents(), max_messages=None)
        self._queue = queue
        self.message_cache = cache or MessageCache(DEFAULT_CACHE_SIZE)

    async def on_ready(self) -> None:
        """Log the identity once the gateway session is established."""
        log_info(logger, "Chat gateway connected as %s", self.user)

    async def on_message(self, message: discord.Message) -> None:
        """Cache a new message and emit it as a bridge event."""
        self.message_cache.put(snapshot_from_message(message))
        self._queue.put_nowait(chat_message_event(message))

    async def on_disconnect(self) -> None:
        """Drop the cache; frames missed while offline would leave it stale."""
        self.message_cache.clear()
        log_info(logger, "Chat gateway disconnected; message cache cleared")

    async def on_raw_message_edit(self, payload: discord.RawMessageUpdateEvent) -> None:
        """Keep cached content in step with edits."""
        content = payload.data.get("content")
        if isinstance(content, str):
            self.message_cache.update_content(payload.message_id, content)

    async def on_raw_message_delete(
        self, payload: discord.RawMessageDeleteEvent
    ) -> None:
        """Drop deleted messages from the cache."""
        self.message_cache.discard(payload.message_id)

    async def on_thread_create(self, thread: discord.Thread) -> None:
        """Mark the starter message of a new thread.

        A thread started from a message shares that message's id.
        """
        self.message_cache.attach_thread(thread.id, thread.id)

    async def on_raw_reaction_add(
        self, payload: discord.RawReactionActionEvent
    ) -> None:
        """Emit a reaction-add event."""
        self._queue.put_nowait(chat_reaction_event(payload, is_add=True))

    async def on_raw_reaction_remove(
        self, payload: discord.RawReactionActionEvent
    ) -> None:
        """Emit a reaction-remove event."""
        self._queue.put_nowait(chat_reaction_event(payload, is_add=False))

    async def get_message(
        self, channel_id: int, message_id: int
    ) -> ChatMessageSnapshot:
        """Return a message from the cache, fetching it on a miss."""
        cached = self.message_cache.get(message_id)
        if cached is not None:
            return cached
        snapshot = await self.fetch_message(channel_id, message_id)
        self.message_cache.put(snapshot)
        return snapshot

    async def _messageable(
        self, channel_id: int
    ) -> discord.TextChannel | discord.Thread | discord.DMChannel:
        channel = self.get_channel(channel_id) or await self.fetch_channel(channel_id)
        if not isinstance(
            channel, discord.TextChannel | discord.Thread | discord.DMChannel
        ):
            msg = f"channel {channel_id} does not accept messages"
            raise discord.InvalidData(msg)
        return channel

    async def fetch_message(
        self, channel_id: int, message_id: int
    ) -> ChatMessageSnapshot:
        """Fetch a message over REST."""
        channel = await self._messageable(channel_id)
        message = await channel.fetch_message(message_id)
        return snapshot_from_message(message)

    async def create_thread(self, channel_id: int, message_id: int, name: str) -> int:
        """Start a public thread on a message and return its id."""
        channel = await self._messageable(channel_id)
        thread = await channel.get_partial_message(message_id).create_thread(name=name)
        self.message_cache.attach_thread(message_id, thread.id)
        return thread.id

    async def post_message(self, channel_id: int, content: str) -> None:
        """Send ``content`` to a channel or thread."""
        channel = await self._messageable(channel_id)
        await channel.send(content)

    async def remove_reaction(
        self, channel_id: int, message_id: int, emoji: Emoji, user_id: int
    ) -> None:
        """Remove ``user_id``'s ``emoji`` reaction from a message."""
        channel = await self._messageable(channel_id)
        await channel.get_partial_message(message_id).remove_reaction(
            _reaction_emoji(emoji), discord.Object(id=user_id)
        )

    async def member_role_ids(self, guild_id: int, user_id: int) -> frozenset[int]:
        """Return the role ids held by a guild member."""
        guild = self.get_guild(guild_id) or await self.fetch_guild(guild_id)
        member = guild.get_member(user_id) or await guild.fetch_member(user_id)
        return frozenset(role.id for role in member.roles)
