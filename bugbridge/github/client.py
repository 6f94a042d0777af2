"""GitHub REST client used as the bridge's issue tracker."""

from __future__ import annotations

import asyncio
import dataclasses
import typing as typ

import httpx

from bugbridge.engine.models import CreatedComment, CreatedIssue

from .errors import GitHubAPIError, GitHubResponseShapeError

if typ.TYPE_CHECKING:
    import collections.abc as cabc

    from .auth import GitHubAuth

_HTTP_ERROR_STATUS_THRESHOLD = 400


@dataclasses.dataclass(frozen=True, slots=True)
class GitHubRestConfig:
    """Connection settings for the GitHub REST API."""

    base_url: str = "https://api.github.com"
    timeout_s: float = 20.0
    user_agent: str = "bugbridge/0.1"
    api_version: str = "2022-11-28"


def _require_dict(payload: object, field: str) -> dict[str, typ.Any]:
    if not isinstance(payload, dict):
        raise GitHubResponseShapeError.missing(field)
    return payload


def _created_issue(payload: object) -> CreatedIssue:
    body = _require_dict(payload, "issue")
    number = body.get("number")
    html_url = body.get("html_url")
    if not isinstance(number, int):
        raise GitHubResponseShapeError.missing("issue.number")
    if not isinstance(html_url, str):
        raise GitHubResponseShapeError.missing("issue.html_url")
    return CreatedIssue(number=number, html_url=html_url)


def _created_comment(payload: object) -> CreatedComment:
    body = _require_dict(payload, "comment")
    comment_id = body.get("id")
    html_url = body.get("html_url")
    if not isinstance(comment_id, int):
        raise GitHubResponseShapeError.missing("comment.id")
    if not isinstance(html_url, str):
        raise GitHubResponseShapeError.missing("comment.html_url")
    return CreatedComment(id=comment_id, html_url=html_url)


class GitHubRestClient:
    """Create issues and comments on behalf of the bridge.

    The client owns its ``httpx.AsyncClient`` unless one is injected, which
    tests use to supply a mock transport.
    """

    def __init__(
        self,
        auth: GitHubAuth,
        config: GitHubRestConfig | None = None,
        *,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialise the client with an authentication strategy."""
        self._auth = auth
        self._config = config or GitHubRestConfig()
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(
            base_url=self._config.base_url,
            timeout=self._config.timeout_s,
        )
        self._client.headers.update(
            {
                "Accept": "application/vnd.github+json",
                "User-Agent": self._config.user_agent,
                "X-GitHub-Api-Version": self._config.api_version,
            }
        )
        self._login: str | None = None
        self._login_lock = asyncio.Lock()

    async def aclose(self) -> None:
        """Close any owned HTTP resources."""
        if self._owns_client:
            await self._client.aclose()

    async def create_issue(
        self,
        repo: str,
        *,
        title: str,
        body: str,
        labels: cabc.Sequence[str],
    ) -> CreatedIssue:
        """Open an issue in ``repo`` and return its number and URL."""
        payload = await self._post(
            repo,
            f"/repos/{repo}/issues",
            {"title": title, "body": body, "labels": list(labels)},
        )
        return _created_issue(payload)

    async def create_comment(
        self, repo: str, issue_number: int, body: str
    ) -> CreatedComment:
        """Add a comment to ``repo#issue_number`` and return its id and URL."""
        payload = await self._post(
            repo, f"/repos/{repo}/issues/{issue_number}/comments", {"body": body}
        )
        return _created_comment(payload)

    async def authenticated_login(self) -> str:
        """Return the login the bridge comments as, resolving it once."""
        if self._login is not None:
            return self._login
        async with self._login_lock:
            if self._login is None:
                self._login = await self._auth.login(self._client)
        return self._login

    async def _post(
        self, repo: str, path: str, body: dict[str, typ.Any]
    ) -> object:
        token = await self._auth.token_for(self._client, repo)
        response = await self._client.post(
            path,
            json=body,
            headers={"Authorization": f"Bearer {token}"},
        )
        if response.status_code >= _HTTP_ERROR_STATUS_THRESHOLD:
            raise GitHubAPIError.http_error("POST", path, response.status_code)
        return response.json()
