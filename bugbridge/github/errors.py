"""GitHub client errors."""

from __future__ import annotations


class GitHubAPIError(RuntimeError):
    """Raised when GitHub returns an error response."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        """Initialise with a message and optional HTTP status code."""
        self.status_code = status_code
        super().__init__(message)

    @classmethod
    def http_error(cls, method: str, path: str, status_code: int) -> GitHubAPIError:
        """Return an error for a non-2xx REST response."""
        return cls(
            f"GitHub {method} {path} returned HTTP {status_code}",
            status_code=status_code,
        )


class GitHubResponseShapeError(RuntimeError):
    """Raised when a GitHub response lacks an expected field."""

    @classmethod
    def missing(cls, field: str) -> GitHubResponseShapeError:
        """Return an error for a missing response field."""
        return cls(f"GitHub response missing expected field: {field}")


class GitHubConfigError(RuntimeError):
    """Raised when GitHub credentials are unusable."""

    @classmethod
    def empty_token(cls) -> GitHubConfigError:
        """Return an error when the provided token is empty."""
        return cls("GitHub token must be non-empty")

    @classmethod
    def invalid_private_key(cls, exc: BaseException) -> GitHubConfigError:
        """Return an error when the app private key cannot sign a JWT."""
        return cls(f"GitHub App private key is unusable: {exc}")
