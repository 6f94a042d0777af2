"""Authentication strategies for the GitHub REST client.

A bridge either holds one static token for every repository, or acts as a
GitHub App. App credentials are exchanged for an installation token scoped to
the repository being written to; those tokens are cached until shortly before
they expire.
"""

from __future__ import annotations

import asyncio
import dataclasses as dc
import datetime as dt
import time
import typing as typ

import jwt

from .errors import GitHubAPIError, GitHubConfigError, GitHubResponseShapeError

if typ.TYPE_CHECKING:
    import httpx

_HTTP_ERROR_STATUS_THRESHOLD = 400
_JWT_BACKDATE_S = 60
_JWT_LIFETIME_S = 9 * 60
_TOKEN_REFRESH_MARGIN = dt.timedelta(minutes=5)


class GitHubAuth(typ.Protocol):
    """Supplies bearer tokens and the identity the bridge acts as."""

    async def token_for(self, client: httpx.AsyncClient, repo: str) -> str:
        """Return a bearer token allowed to write to ``repo``."""
        ...

    async def login(self, client: httpx.AsyncClient) -> str:
        """Return the login that authors the bridge's comments."""
        ...


def _json_field(payload: object, field: str) -> typ.Any:  # noqa: ANN401
    if not isinstance(payload, dict) or field not in payload:
        raise GitHubResponseShapeError.missing(field)
    return payload[field]


async def _request_json(
    client: httpx.AsyncClient, method: str, path: str, token: str
) -> object:
    response = await client.request(
        method, path, headers={"Authorization": f"Bearer {token}"}
    )
    if response.status_code >= _HTTP_ERROR_STATUS_THRESHOLD:
        raise GitHubAPIError.http_error(method, path, response.status_code)
    return response.json()


class TokenAuth:
    """Use one personal access or installation token for every repository."""

    def __init__(self, token: str) -> None:
        """Store the token after rejecting blank values."""
        if not token.strip():
            raise GitHubConfigError.empty_token()
        self._token = token.strip()

    async def token_for(self, client: httpx.AsyncClient, repo: str) -> str:
        """Return the static token regardless of repository."""
        del client, repo
        return self._token

    async def login(self, client: httpx.AsyncClient) -> str:
        """Return the token owner's login from ``GET /user``."""
        payload = await _request_json(client, "GET", "/user", self._token)
        return str(_json_field(payload, "login"))


@dc.dataclass(frozen=True, slots=True)
class _InstallationToken:
    token: str
    expires_at: dt.datetime

    def is_fresh(self, now: dt.datetime) -> bool:
        return now < self.expires_at - _TOKEN_REFRESH_MARGIN


def _parse_expiry(raw: object) -> dt.datetime:
    if not isinstance(raw, str):
        raise GitHubResponseShapeError.missing("expires_at")
    parsed = dt.datetime.fromisoformat(raw.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=dt.UTC)
    return parsed.astimezone(dt.UTC)


class AppAuth:
    """Authenticate as a GitHub App with per-repository installation tokens.

    Parameters
    ----------
    app_id
        Numeric GitHub App id, used as the JWT issuer.
    private_key
        PEM-encoded RSA private key of the app.
    clock
        Returns the current UTC time; replaceable in tests.

    """

    def __init__(
        self,
        app_id: int,
        private_key: str,
        *,
        clock: typ.Callable[[], dt.datetime] | None = None,
    ) -> None:
        """Store credentials; tokens are fetched lazily."""
        self._app_id = app_id
        self._private_key = private_key
        self._clock = clock or (lambda: dt.datetime.now(dt.UTC))
        self._tokens: dict[str, _InstallationToken] = {}
        self._lock = asyncio.Lock()

    def app_jwt(self) -> str:
        """Return a short-lived RS256 JWT identifying the app.

        Raises
        ------
        GitHubConfigError
            If the private key cannot be used for signing.

        """
        now = int(time.time())
        claims = {
            "iat": now - _JWT_BACKDATE_S,
            "exp": now + _JWT_LIFETIME_S,
            "iss": str(self._app_id),
        }
        try:
            return jwt.encode(claims, self._private_key, algorithm="RS256")
        except (ValueError, TypeError, jwt.PyJWTError) as exc:
            raise GitHubConfigError.invalid_private_key(exc) from exc

    async def token_for(self, client: httpx.AsyncClient, repo: str) -> str:
        """Return a cached or freshly exchanged installation token for ``repo``."""
        async with self._lock:
            cached = self._tokens.get(repo)
            if cached is not None and cached.is_fresh(self._clock()):
                return cached.token
            fresh = await self._exchange(client, repo)
            self._tokens[repo] = fresh
            return fresh.token

    async def _exchange(
        self, client: httpx.AsyncClient, repo: str
    ) -> _InstallationToken:
        app_jwt = self.app_jwt()
        installation = await _request_json(
            client, "GET", f"/repos/{repo}/installation", app_jwt
        )
        installation_id = _json_field(installation, "id")
        payload = await _request_json(
            client,
            "POST",
            f"/app/installations/{installation_id}/access_tokens",
            app_jwt,
        )
        return _InstallationToken(
            token=str(_json_field(payload, "token")),
            expires_at=_parse_expiry(_json_field(payload, "expires_at")),
        )

    async def login(self, client: httpx.AsyncClient) -> str:
        """Return ``<app slug>[bot]``, the login GitHub shows on app comments."""
        payload = await _request_json(client, "GET", "/app", self.app_jwt())
        return f"{_json_field(payload, 'slug')}[bot]"
