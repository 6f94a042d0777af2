"""Process settings read from the environment.

Secrets and deployment knobs come from ``BUGBRIDGE_*`` environment variables;
the routing table lives in a YAML file whose path is one of those settings.

Usage
-----
>>> import os
>>> os.environ["BUGBRIDGE_DISCORD_TOKEN"] = "discord-token"
>>> os.environ["BUGBRIDGE_GITHUB_TOKEN"] = "github-token"
>>> settings = BridgeSettings.from_env()
>>> settings.database_url
'sqlite+aiosqlite:///bugbridge.db'

"""

from __future__ import annotations

import dataclasses as dc
import os
from pathlib import Path

from .errors import ConfigError

DEFAULT_DATABASE_URL = "sqlite+aiosqlite:///bugbridge.db"
DEFAULT_CONFIG_PATH = "bugbridge.yaml"


@dc.dataclass(frozen=True, slots=True)
class GitHubAppCredentials:
    """GitHub App identity exchanged for per-repository installation tokens."""

    app_id: int
    private_key_path: Path

    def read_private_key(self) -> str:
        """Return the PEM-encoded private key.

        Raises
        ------
        ConfigError
            If the key file cannot be read or is empty.

        """
        try:
            pem = self.private_key_path.read_text(encoding="utf-8")
        except OSError as exc:
            raise ConfigError.unreadable_file(self.private_key_path, exc) from exc
        if not pem.strip():
            raise ConfigError([f"{self.private_key_path} is empty"])
        return pem


@dc.dataclass(frozen=True, slots=True)
class BridgeSettings:
    """Deployment settings for one bridge process.

    Attributes
    ----------
    discord_token
        Bot token for the chat gateway and REST calls.
    github_token
        Static GitHub token. Mutually exclusive with ``github_app``; the
        token wins when both are configured.
    github_app
        GitHub App credentials used when no static token is set.
    database_url
        SQLAlchemy async URL of the correlation database.
    config_path
        Path to the routing YAML file.
    webhook_secret
        Shared secret for ``X-Hub-Signature-256`` verification. ``None``
        disables verification.
    max_in_flight
        Upper bound on concurrently handled events. ``None`` is unbounded.

    """

    discord_token: str
    github_token: str | None = None
    github_app: GitHubAppCredentials | None = None
    database_url: str = DEFAULT_DATABASE_URL
    config_path: Path = Path(DEFAULT_CONFIG_PATH)
    webhook_secret: str | None = None
    max_in_flight: int | None = None

    @staticmethod
    def _optional(name: str) -> str | None:
        raw = os.environ.get(name, "").strip()
        return raw or None

    @staticmethod
    def _positive_int(name: str) -> int | None:
        raw = os.environ.get(name, "").strip()
        if not raw:
            return None
        try:
            value = int(raw)
        except ValueError as exc:
            raise ConfigError.invalid_env(
                name, f"must be an integer, got: {raw!r}"
            ) from exc
        if value < 1:
            raise ConfigError.invalid_env(name, f"must be positive, got: {value}")
        return value

    @classmethod
    def _github_app_from_env(cls) -> GitHubAppCredentials | None:
        app_id = cls._positive_int("BUGBRIDGE_GITHUB_APP_ID")
        key_path = cls._optional("BUGBRIDGE_GITHUB_PRIVATE_KEY_PATH")
        if app_id is None and key_path is None:
            return None
        if app_id is None:
            raise ConfigError.missing_env("BUGBRIDGE_GITHUB_APP_ID")
        if key_path is None:
            raise ConfigError.missing_env("BUGBRIDGE_GITHUB_PRIVATE_KEY_PATH")
        return GitHubAppCredentials(app_id=app_id, private_key_path=Path(key_path))

    @classmethod
    def from_env(cls) -> BridgeSettings:
        """Build settings from ``BUGBRIDGE_*`` environment variables.

        Raises
        ------
        ConfigError
            If a required variable is missing or a value is malformed.

        """
        discord_token = cls._optional("BUGBRIDGE_DISCORD_TOKEN")
        if discord_token is None:
            raise ConfigError.missing_env("BUGBRIDGE_DISCORD_TOKEN")

        github_token = cls._optional("BUGBRIDGE_GITHUB_TOKEN")
        github_app = None if github_token else cls._github_app_from_env()
        if github_token is None and github_app is None:
            raise ConfigError.missing_github_auth()

        return cls(
            discord_token=discord_token,
            github_token=github_token,
            github_app=github_app,
            database_url=cls._optional("BUGBRIDGE_DATABASE_URL")
            or DEFAULT_DATABASE_URL,
            config_path=Path(
                cls._optional("BUGBRIDGE_CONFIG") or DEFAULT_CONFIG_PATH
            ),
            webhook_secret=cls._optional("BUGBRIDGE_WEBHOOK_SECRET"),
            max_in_flight=cls._positive_int("BUGBRIDGE_MAX_IN_FLIGHT"),
        )
