"""Text rendered into issues, comments and chat messages."""

from __future__ import annotations

ISSUE_TITLE_LIMIT = 30
THREAD_NAME_LIMIT = 100
CHAT_MESSAGE_LIMIT = 2000
_ELLIPSIS = "\N{HORIZONTAL ELLIPSIS}"


def clip(text: str, limit: int) -> str:
    """Return ``text`` shortened to at most ``limit`` characters.

    Clipped text ends with an ellipsis so readers can tell it was cut.
    """
    if len(text) <= limit:
        return text
    return text[: limit - 1] + _ELLIPSIS


def issue_title(content: str, author: str) -> str:
    """Return the first characters of a message, used as an issue title."""
    title = content[:ISSUE_TITLE_LIMIT].strip()
    return title or f"Message from {author}"


def thread_name(issue_number: int, title: str) -> str:
    """Return the name of the companion thread for an issue."""
    return clip(f"Github issue {issue_number} - {title}", THREAD_NAME_LIMIT)


def message_link(guild_id: int | None, channel_id: int, message_id: int) -> str:
    """Return a deep link to a chat message."""
    scope = "@me" if guild_id is None else str(guild_id)
    return f"https://discord.com/channels/{scope}/{channel_id}/{message_id}"


def tracker_comment_body(
    author: str,
    content: str,
    *,
    guild_id: int | None,
    channel_id: int,
    message_id: int,
) -> str:
    """Render a chat reply as a tracker comment."""
    link = message_link(guild_id, channel_id, message_id)
    return f"New comment from @{author}\n\n{content}\n\n[Link]({link})"


def chat_comment_message(author: str, body: str, url: str) -> str:
    """Render a tracker comment as a chat message."""
    header = f"**{author}** commented on GitHub:\n"
    footer = f"\n<{url}>"
    room = CHAT_MESSAGE_LIMIT - len(header) - len(footer)
    return f"{header}{clip(body, max(room, 1))}{footer}"
