"""Typed routing configuration structures."""

from __future__ import annotations

import msgspec


class GuildTarget(msgspec.Struct, frozen=True, tag="guild", tag_field="type"):
    """Route every channel of a guild to one repository.

    Attributes
    ----------
    id : int
        Guild snowflake.

    """

    id: int


class ChannelTarget(msgspec.Struct, frozen=True, tag="channel", tag_field="type"):
    """Route a single channel to one repository, overriding its guild.

    Attributes
    ----------
    id : int
        Channel snowflake.

    """

    id: int


RoutingTarget = GuildTarget | ChannelTarget


class RepositoryRoute(msgspec.Struct, kw_only=True):
    """Chat scope and issue-creation allow-list for one repository.

    Attributes
    ----------
    target : RoutingTarget
        Guild or channel whose messages escalate into this repository.
    roles : list[int]
        Role ids allowed to open issues. An empty list authorizes nobody.

    """

    target: RoutingTarget
    roles: list[int] = msgspec.field(default_factory=list)


class BridgeConfig(msgspec.Struct, kw_only=True):
    """Root of the routing file.

    Attributes
    ----------
    trigger_emoji : str
        Unicode reaction that escalates a message into an issue.
    issue_label : str
        Label applied to every issue opened from chat.
    repositories : dict[str, RepositoryRoute]
        ``owner/name`` slug to routing entry.

    """

    trigger_emoji: str = "\N{BUG}"
    issue_label: str = "discord"
    repositories: dict[str, RepositoryRoute] = msgspec.field(default_factory=dict)


def describe_target(target: RoutingTarget) -> str:
    """Return a short ``kind id`` label for log and error messages."""
    match target:
        case GuildTarget(id=guild_id):
            return f"guild {guild_id}"
        case ChannelTarget(id=channel_id):
            return f"channel {channel_id}"
