"""Unit tests for the GitHub REST client and its authentication."""

from __future__ import annotations

import datetime as dt
import json
import secrets
import typing as typ

import httpx
import jwt
import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa

from bugbridge.engine import CreatedComment, CreatedIssue
from bugbridge.github import (
    AppAuth,
    GitHubAPIError,
    GitHubConfigError,
    GitHubResponseShapeError,
    GitHubRestClient,
    GitHubRestConfig,
    TokenAuth,
)

_TOKEN = secrets.token_hex(8)
_BASE_URL = "https://api.github.test"

Route = tuple[str, str]
Routes = dict[Route, tuple[int, dict[str, typ.Any]]]
_COMMENT_CREATED = (
    201,
    {"id": 1, "html_url": "https://github.com/org/app/issues/7#issuecomment-1"},
)


def _make_client(
    routes: Routes,
    auth: TokenAuth | AppAuth | None = None,
) -> tuple[GitHubRestClient, list[httpx.Request]]:
    requests: list[httpx.Request] = []

    def _handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        status, payload = routes[(request.method, request.url.path)]
        return httpx.Response(status_code=status, json=payload)

    http_client = httpx.AsyncClient(
        base_url=_BASE_URL, transport=httpx.MockTransport(_handler)
    )
    client = GitHubRestClient(
        auth or TokenAuth(_TOKEN),
        GitHubRestConfig(base_url=_BASE_URL),
        http_client=http_client,
    )
    return client, requests


@pytest.fixture(scope="module")
def rsa_key() -> rsa.RSAPrivateKey:
    """Generate one RSA key for the app-auth tests."""
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


def _pem(key: rsa.RSAPrivateKey) -> str:
    return key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    ).decode("ascii")


class TestTokenAuthClient:
    """REST calls with a static token."""

    @pytest.mark.asyncio
    async def test_create_issue(self) -> None:
        """Issues are posted with title, body and labels."""
        client, requests = _make_client(
            {
                ("POST", "/repos/org/app/issues"): (
                    201,
                    {"number": 7, "html_url": "https://github.com/org/app/issues/7"},
                )
            }
        )

        issue = await client.create_issue(
            "org/app", title="Crash", body="Crash on start", labels=["discord"]
        )

        assert issue == CreatedIssue(
            number=7, html_url="https://github.com/org/app/issues/7"
        )
        [request] = requests
        assert json.loads(request.content) == {
            "title": "Crash",
            "body": "Crash on start",
            "labels": ["discord"],
        }
        assert request.headers["Authorization"] == f"Bearer {_TOKEN}"
        assert request.headers["Accept"] == "application/vnd.github+json"
        assert request.headers["X-GitHub-Api-Version"] == "2022-11-28"

    @pytest.mark.asyncio
    async def test_create_comment(self) -> None:
        """Comments are posted to the issue's comment collection."""
        client, requests = _make_client(
            {("POST", "/repos/org/app/issues/7/comments"): _COMMENT_CREATED}
        )

        comment = await client.create_comment("org/app", 7, "hello")

        assert comment == CreatedComment(
            id=1, html_url="https://github.com/org/app/issues/7#issuecomment-1"
        )
        assert json.loads(requests[0].content) == {"body": "hello"}

    @pytest.mark.asyncio
    async def test_error_status_raises(self) -> None:
        """Non-2xx responses raise GitHubAPIError with the status."""
        client, _ = _make_client(
            {("POST", "/repos/org/app/issues"): (403, {"message": "Forbidden"})}
        )

        with pytest.raises(GitHubAPIError) as excinfo:
            await client.create_issue("org/app", title="t", body="b", labels=[])

        assert excinfo.value.status_code == 403

    @pytest.mark.asyncio
    async def test_malformed_issue_response(self) -> None:
        """Responses without an issue number are schema drift."""
        client, _ = _make_client(
            {("POST", "/repos/org/app/issues"): (201, {"html_url": "x"})}
        )

        with pytest.raises(GitHubResponseShapeError, match="issue.number"):
            await client.create_issue("org/app", title="t", body="b", labels=[])

    @pytest.mark.asyncio
    async def test_login_is_resolved_once(self) -> None:
        """The authenticated login is cached after the first lookup."""
        client, requests = _make_client({("GET", "/user"): (200, {"login": "octo"})})

        assert await client.authenticated_login() == "octo"
        assert await client.authenticated_login() == "octo"
        assert len(requests) == 1

    def test_blank_token_is_rejected(self) -> None:
        """Empty tokens fail fast."""
        with pytest.raises(GitHubConfigError):
            TokenAuth("  ")


class TestAppAuth:
    """GitHub App JWT and installation token exchange."""

    def test_app_jwt_claims(self, rsa_key: rsa.RSAPrivateKey) -> None:
        """The JWT is RS256 signed with the app id as issuer."""
        token = AppAuth(1234, _pem(rsa_key)).app_jwt()

        claims = jwt.decode(token, rsa_key.public_key(), algorithms=["RS256"])
        assert claims["iss"] == "1234"
        assert claims["exp"] - claims["iat"] == 600

    def test_unusable_key(self) -> None:
        """Keys that cannot sign are configuration errors."""
        with pytest.raises(GitHubConfigError, match="private key is unusable"):
            AppAuth(1, "not a key").app_jwt()

    @pytest.mark.asyncio
    async def test_installation_token_is_exchanged_and_cached(
        self, rsa_key: rsa.RSAPrivateKey
    ) -> None:
        """Installation tokens are fetched once per repo until near expiry."""
        now = dt.datetime(2024, 7, 1, 12, 0, tzinfo=dt.UTC)
        clock_value = [now]
        auth = AppAuth(1234, _pem(rsa_key), clock=lambda: clock_value[0])
        client, requests = _make_client(
            {
                ("GET", "/repos/org/app/installation"): (200, {"id": 55}),
                ("POST", "/app/installations/55/access_tokens"): (
                    201,
                    {"token": "inst-token", "expires_at": "2024-07-01T13:00:00Z"},
                ),
                ("POST", "/repos/org/app/issues/7/comments"): _COMMENT_CREATED,
            },
            auth,
        )

        await client.create_comment("org/app", 7, "one")
        await client.create_comment("org/app", 7, "two")

        paths = [r.url.path for r in requests]
        assert paths == [
            "/repos/org/app/installation",
            "/app/installations/55/access_tokens",
            "/repos/org/app/issues/7/comments",
            "/repos/org/app/issues/7/comments",
        ]
        assert requests[-1].headers["Authorization"] == "Bearer inst-token"

        clock_value[0] = now + dt.timedelta(minutes=56)
        await client.create_comment("org/app", 7, "three")
        assert len(requests) == 7

    @pytest.mark.asyncio
    async def test_app_login_is_bot_slug(self, rsa_key: rsa.RSAPrivateKey) -> None:
        """Apps comment as ``<slug>[bot]``."""
        client, _ = _make_client(
            {("GET", "/app"): (200, {"slug": "bugbridge"})},
            AppAuth(1234, _pem(rsa_key)),
        )

        assert await client.authenticated_login() == "bugbridge[bot]"
