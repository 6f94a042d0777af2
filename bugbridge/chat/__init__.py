"""Chat platform event source and client."""

from __future__ import annotations

from .cache import MessageCache
from .gateway import ChatGateway, gateway_intents
from .normalize import (
    chat_message_event,
    chat_reaction_event,
    emoji_from_partial,
    snapshot_from_message,
)

__all__ = [
    "ChatGateway",
    "MessageCache",
    "chat_message_event",
    "chat_reaction_event",
    "emoji_from_partial",
    "gateway_intents",
    "snapshot_from_message",
]
