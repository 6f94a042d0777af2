"""Bridge configuration: environment settings and the routing table."""

from __future__ import annotations

from .errors import ConfigError
from .loader import load_bridge_config, validate_bridge_config
from .models import (
    BridgeConfig,
    ChannelTarget,
    GuildTarget,
    RepositoryRoute,
    RoutingTarget,
    describe_target,
)
from .routing import RoutingTable
from .settings import BridgeSettings, GitHubAppCredentials

__all__ = [
    "BridgeConfig",
    "BridgeSettings",
    "ChannelTarget",
    "ConfigError",
    "GitHubAppCredentials",
    "GuildTarget",
    "RepositoryRoute",
    "RoutingTable",
    "RoutingTarget",
    "describe_target",
    "load_bridge_config",
    "validate_bridge_config",
]
