"""Unit tests for scope-to-repository routing and permissions."""

from __future__ import annotations

import concurrent.futures

from bugbridge.config import BridgeConfig, RoutingTable
from bugbridge.config.models import ChannelTarget, GuildTarget, RepositoryRoute

GUILD = 10
CHANNEL = 20


def _table() -> RoutingTable:
    return RoutingTable(
        BridgeConfig(
            repositories={
                "org/guild-wide": RepositoryRoute(
                    target=GuildTarget(id=GUILD), roles=[1, 2]
                ),
                "org/special": RepositoryRoute(
                    target=ChannelTarget(id=CHANNEL), roles=[3]
                ),
                "org/locked": RepositoryRoute(target=ChannelTarget(id=30)),
            }
        )
    )


class TestResolveRepo:
    """Channel entries override guild entries."""

    def test_channel_mapping_wins_over_guild(self) -> None:
        """A channel with its own entry resolves to that entry."""
        assert _table().resolve_repo(CHANNEL, GUILD) == "org/special"

    def test_guild_mapping_covers_other_channels(self) -> None:
        """Channels without an entry fall back to their guild."""
        assert _table().resolve_repo(99, GUILD) == "org/guild-wide"

    def test_channel_mapping_without_guild(self) -> None:
        """Channel lookups do not need a guild id."""
        assert _table().resolve_repo(CHANNEL) == "org/special"

    def test_unmapped_scope_is_none(self) -> None:
        """Unknown scopes are not an error."""
        table = _table()
        assert table.resolve_repo(99) is None
        assert table.resolve_repo(99, 12345) is None

    def test_guild_id_is_not_matched_as_channel(self) -> None:
        """Guild and channel ids live in separate namespaces."""
        assert _table().resolve_repo(GUILD) is None


class TestAuthorization:
    """Role allow-lists fail closed."""

    def test_allowed_role(self) -> None:
        """Roles on the allow-list may open issues."""
        assert _table().is_authorized("org/guild-wide", 2)

    def test_other_role(self) -> None:
        """Roles off the allow-list may not."""
        assert not _table().is_authorized("org/guild-wide", 3)

    def test_repo_without_roles_authorizes_nobody(self) -> None:
        """An empty allow-list denies everyone."""
        assert not _table().is_authorized("org/locked", 1)

    def test_unknown_repo_authorizes_nobody(self) -> None:
        """Unconfigured repositories deny everyone."""
        assert not _table().is_authorized("org/unknown", 1)

    def test_any_of_several_roles(self) -> None:
        """One allowed role among many is enough."""
        table = _table()
        assert table.is_any_authorized("org/special", [1, 3])
        assert not table.is_any_authorized("org/special", [])


def test_concurrent_first_use_builds_one_index() -> None:
    """Racing first lookups all observe the same frozen index."""
    table = _table()
    with concurrent.futures.ThreadPoolExecutor(max_workers=8) as pool:
        results = list(
            pool.map(lambda _: table.resolve_repo(CHANNEL, GUILD), range(32))
        )

    assert set(results) == {"org/special"}
    assert table.repositories == ("org/guild-wide", "org/special", "org/locked")
