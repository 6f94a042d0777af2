"""Configuration errors raised while loading bridge settings."""

from __future__ import annotations

import typing as typ


class ConfigError(RuntimeError):
    """Raised when startup configuration is missing or invalid.

    Configuration errors are fatal: the runtime logs them and exits before
    the gateway or HTTP server start.

    Attributes
    ----------
    issues
        Every individual problem found, in discovery order.

    """

    def __init__(self, issues: typ.Sequence[str]) -> None:
        """Initialise with one or more human-readable issues."""
        self.issues = tuple(issues)
        super().__init__("; ".join(self.issues))

    @classmethod
    def missing_env(cls, name: str) -> ConfigError:
        """Return an error for a required environment variable that is unset."""
        return cls([f"{name} is required"])

    @classmethod
    def invalid_env(cls, name: str, reason: str) -> ConfigError:
        """Return an error for an environment variable with a bad value."""
        return cls([f"{name} {reason}"])

    @classmethod
    def missing_github_auth(cls) -> ConfigError:
        """Return an error when neither token nor app credentials are set."""
        return cls(
            [
                "set BUGBRIDGE_GITHUB_TOKEN or both BUGBRIDGE_GITHUB_APP_ID "
                "and BUGBRIDGE_GITHUB_PRIVATE_KEY_PATH"
            ]
        )

    @classmethod
    def unreadable_file(cls, path: object, exc: BaseException) -> ConfigError:
        """Return an error for a configuration file that cannot be read."""
        return cls([f"cannot read {path}: {exc}"])
