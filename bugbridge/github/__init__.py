"""GitHub REST client and authentication strategies."""

from __future__ import annotations

from .auth import AppAuth, GitHubAuth, TokenAuth
from .client import GitHubRestClient, GitHubRestConfig
from .errors import GitHubAPIError, GitHubConfigError, GitHubResponseShapeError

__all__ = [
    "AppAuth",
    "GitHubAPIError",
    "GitHubAuth",
    "GitHubConfigError",
    "GitHubResponseShapeError",
    "GitHubRestClient",
    "GitHubRestConfig",
    "TokenAuth",
]
