"""Synchronization engine: the per-event state machine.

A chat thread is either untracked (no correlation record) or tracked. The
only transition, untracked to tracked, happens when an authorized member adds
the trigger reaction to a routed message: the engine opens an issue, starts a
thread on the message, links the two in the thread, and binds them in the
correlation store. Tracked threads then mirror replies in both directions.

Side effects inside one transition run in order and stop at the first
failure; nothing already done is rolled back.
"""

from __future__ import annotations

import dataclasses as dc
import typing as typ

from bugbridge.correlation import CorrelationConflictError
from bugbridge.logging import get_logger, log_debug, log_info

from . import formatting
from .models import (
    ChatMessage,
    ChatReaction,
    SyncOutcome,
    TrackerComment,
    UnicodeEmoji,
)
from .observability import BridgeEventLogger

if typ.TYPE_CHECKING:
    from bugbridge.config import RoutingTable
    from bugbridge.correlation import CorrelationStore

    from .models import BridgeEvent, ChatMessageSnapshot, Emoji
    from .protocol import ChatClient, MessageSource, TrackerClient

logger = get_logger(__name__)


@dc.dataclass(frozen=True, slots=True)
class EngineSettings:
    """Behavioural knobs taken from the routing file.

    Attributes
    ----------
    trigger_emoji
        Unicode reaction that escalates a message.
    issue_label
        Label applied to every issue opened from chat.

    """

    trigger_emoji: str = "\N{BUG}"
    issue_label: str = "discord"


class SyncEngine:
    """Apply routing, permission and correlation rules to bridge events."""

    def __init__(  # noqa: PLR0913
        self,
        *,
        routing: RoutingTable,
        store: CorrelationStore,
        chat: ChatClient,
        messages: MessageSource,
        tracker: TrackerClient,
        settings: EngineSettings | None = None,
        event_logger: BridgeEventLogger | None = None,
    ) -> None:
        """Wire the engine to its collaborators."""
        self._routing = routing
        self._store = store
        self._chat = chat
        self._messages = messages
        self._tracker = tracker
        self._settings = settings or EngineSettings()
        self._event_logger = event_logger or BridgeEventLogger()

    async def handle(self, event: BridgeEvent) -> SyncOutcome:
        """Handle one event and return the transition taken.

        Exceptions from collaborators propagate so the dispatcher can log
        them with the event's context; correlation conflicts are recovered
        here.
        """
        match event:
            case ChatMessage():
                return await self._on_chat_message(event)
            case ChatReaction(is_add=True):
                return await self._on_reaction_added(event)
            case ChatReaction():
                return SyncOutcome.IGNORED
            case TrackerComment():
                return await self._on_tracker_comment(event)

    async def _on_chat_message(self, event: ChatMessage) -> SyncOutcome:
        if event.thread_id is not None:
            # Messages that started a thread are the escalated originals.
            return SyncOutcome.IGNORED
        if event.is_bot:
            log_debug(
                logger,
                "Ignoring bot message %d in channel %d",
                event.message_id,
                event.channel_id,
            )
            return SyncOutcome.IGNORED_BOT

        record = await self._store.lookup_by_thread(event.channel_id)
        if record is None:
            return SyncOutcome.UNTRACKED

        body = formatting.tracker_comment_body(
            event.author,
            event.content,
            guild_id=event.guild_id,
            channel_id=event.channel_id,
            message_id=event.message_id,
        )
        comment = await self._tracker.create_comment(
            record.repo, record.issue_number, body
        )
        log_debug(
            logger, "Forwarded message %d as %s", event.message_id, comment.html_url
        )
        return SyncOutcome.MESSAGE_FORWARDED

    def _is_trigger(self, emoji: Emoji) -> bool:
        match emoji:
            case UnicodeEmoji(name=name):
                return name == self._settings.trigger_emoji
            case _:
                return False

    async def _on_reaction_added(self, event: ChatReaction) -> SyncOutcome:
        if not self._is_trigger(event.emoji):
            return SyncOutcome.IGNORED

        enclosing = await self._store.lookup_by_thread(event.channel_id)
        if enclosing is not None:
            log_info(
                logger,
                "Message %d is inside thread %d tracked as %s#%d",
                event.message_id,
                event.channel_id,
                enclosing.repo,
                enclosing.issue_number,
            )
            return SyncOutcome.ALREADY_TRACKED

        message = await self._messages.get_message(event.channel_id, event.message_id)
        if message.thread_id is not None:
            return await self._existing_thread_outcome(message.thread_id, event)

        repo = self._routing.resolve_repo(event.channel_id, event.guild_id)
        if repo is None:
            log_debug(
                logger,
                "Channel %d (guild %s) is not routed to a repository",
                event.channel_id,
                event.guild_id,
            )
            return SyncOutcome.NOT_ROUTED

        if not await self._is_authorized(repo, event):
            await self._chat.remove_reaction(
                event.channel_id, event.message_id, event.emoji, event.user_id
            )
            log_info(
                logger,
                "Removed trigger reaction by unauthorized user %d on message %d",
                event.user_id,
                event.message_id,
            )
            return SyncOutcome.UNAUTHORIZED

        return await self._escalate(repo, message)

    async def _existing_thread_outcome(
        self, thread_id: int, event: ChatReaction
    ) -> SyncOutcome:
        record = await self._store.lookup_by_thread(thread_id)
        if record is None:
            log_info(
                logger,
                "Message %d already has untracked thread %d; not escalating",
                event.message_id,
                thread_id,
            )
            return SyncOutcome.THREAD_UNTRACKED
        log_info(
            logger,
            "Issue %s#%d already exists for thread %d",
            record.repo,
            record.issue_number,
            thread_id,
        )
        return SyncOutcome.ALREADY_TRACKED

    async def _is_authorized(self, repo: str, event: ChatReaction) -> bool:
        roles = event.actor_roles
        if not roles and event.guild_id is not None:
            roles = await self._chat.member_role_ids(event.guild_id, event.user_id)
        return self._routing.is_any_authorized(repo, roles)

    async def _escalate(self, repo: str, message: ChatMessageSnapshot) -> SyncOutcome:
        title = formatting.issue_title(message.content, message.author)
        issue = await self._tracker.create_issue(
            repo,
            title=title,
            body=message.content,
            labels=[self._settings.issue_label],
        )
        thread_id = await self._chat.create_thread(
            message.channel_id,
            message.id,
            formatting.thread_name(issue.number, title),
        )
        await self._chat.post_message(thread_id, issue.html_url)

        try:
            record = await self._store.bind(thread_id, issue.number, repo)
        except CorrelationConflictError:
            self._event_logger.log_bind_conflict(repo, thread_id, issue)
            return SyncOutcome.BIND_CONFLICT

        self._event_logger.log_issue_created(record, issue)
        return SyncOutcome.ISSUE_CREATED

    async def _on_tracker_comment(self, event: TrackerComment) -> SyncOutcome:
        await self._chat.post_message(
            event.thread_id,
            formatting.chat_comment_message(event.author, event.body, event.url),
        )
        return SyncOutcome.COMMENT_FORWARDED
