"""Event model, synchronization state machine and dispatcher."""

from __future__ import annotations

from .dispatcher import EventDispatcher
from .models import (
    BridgeEvent,
    ChatMessage,
    ChatMessageSnapshot,
    ChatReaction,
    CreatedComment,
    CreatedIssue,
    CustomEmoji,
    Emoji,
    SyncOutcome,
    TrackerComment,
    UnicodeEmoji,
)
from .observability import BridgeEventLogger, ErrorCategory, categorize_error
from .protocol import ChatClient, MessageSource, TrackerClient
from .sync import EngineSettings, SyncEngine

__all__ = [
    "BridgeEvent",
    "BridgeEventLogger",
    "ChatClient",
    "ChatMessage",
    "ChatMessageSnapshot",
    "ChatReaction",
    "CreatedComment",
    "CreatedIssue",
    "CustomEmoji",
    "Emoji",
    "EngineSettings",
    "ErrorCategory",
    "EventDispatcher",
    "MessageSource",
    "SyncEngine",
    "SyncOutcome",
    "TrackerClient",
    "TrackerComment",
    "UnicodeEmoji",
    "categorize_error",
]
