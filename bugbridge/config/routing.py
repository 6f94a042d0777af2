"""Scope-to-repository routing and role allow-lists.

The routing table answers two questions for the synchronization engine:
which repository a chat message belongs to, and whether a member may open
issues in it. The reverse index (scope to repository) is computed once, on
first use, and is read-only afterwards so concurrent handlers never observe a
partially built mapping.
"""

from __future__ import annotations

import threading
import types
import typing as typ

from .models import BridgeConfig, ChannelTarget, GuildTarget, RoutingTarget

if typ.TYPE_CHECKING:
    import collections.abc as cabc


class RoutingTable:
    """Resolve chat scopes to repositories and check issue permissions."""

    def __init__(self, config: BridgeConfig) -> None:
        """Capture the repository routes from a validated configuration."""
        self._routes = dict(config.repositories)
        self._allowed: dict[str, frozenset[int]] = {
            slug: frozenset(route.roles) for slug, route in self._routes.items()
        }
        self._index: cabc.Mapping[RoutingTarget, str] = types.MappingProxyType({})
        self._initialised = False
        self._init_lock = threading.Lock()

    def _ensure_index(self) -> cabc.Mapping[RoutingTarget, str]:
        if self._initialised:
            return self._index
        with self._init_lock:
            if not self._initialised:
                self._index = types.MappingProxyType(
                    {route.target: slug for slug, route in self._routes.items()}
                )
                self._initialised = True
        return self._index

    def resolve_repo(self, channel_id: int, guild_id: int | None = None) -> str | None:
        """Return the repository for a channel, falling back to its guild.

        A channel-level entry always wins over a guild-level one. ``None``
        means the scope is not bridged; it is not an error.
        """
        index = self._ensure_index()
        repo = index.get(ChannelTarget(id=channel_id))
        if repo is None and guild_id is not None:
            repo = index.get(GuildTarget(id=guild_id))
        return repo

    def is_authorized(self, repo: str, role_id: int) -> bool:
        """Return whether ``role_id`` may open issues in ``repo``.

        Repositories without an allow-list authorize nobody.
        """
        return role_id in self._allowed.get(repo, frozenset())

    def is_any_authorized(self, repo: str, role_ids: cabc.Iterable[int]) -> bool:
        """Return whether any of ``role_ids`` may open issues in ``repo``."""
        return any(self.is_authorized(repo, role_id) for role_id in role_ids)

    @property
    def repositories(self) -> tuple[str, ...]:
        """Configured repository slugs in file order."""
        return tuple(self._routes)
