"""Unit tests for the bugbridge.runtime module."""

from __future__ import annotations

import typing as typ
from http import HTTPStatus

import falcon.asgi
import falcon.testing
import pytest

from bugbridge.runtime import _engine_options, _parse_port, create_app

if typ.TYPE_CHECKING:
    from pathlib import Path

ROUTES = """\
repositories:
  org/app:
    target: {type: channel, id: 200}
    roles: [7]
"""


@pytest.fixture
def bridge_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Path:
    """Point the runtime at a routing file and a scratch database."""
    config = tmp_path / "bugbridge.yaml"
    config.write_text(ROUTES, encoding="utf-8")
    monkeypatch.setenv("BUGBRIDGE_DISCORD_TOKEN", "discord-token")
    monkeypatch.setenv("BUGBRIDGE_GITHUB_TOKEN", "github-token")
    monkeypatch.setenv("BUGBRIDGE_CONFIG", str(config))
    monkeypatch.setenv(
        "BUGBRIDGE_DATABASE_URL", f"sqlite+aiosqlite:///{tmp_path / 'bridge.db'}"
    )
    for name in ("BUGBRIDGE_GITHUB_APP_ID", "BUGBRIDGE_MAX_IN_FLIGHT"):
        monkeypatch.delenv(name, raising=False)
    return config


class TestParsePort:
    """Port parsing for BUGBRIDGE_PORT."""

    def test_valid_port(self) -> None:
        """In-range integers are accepted."""
        assert _parse_port("8080") == 8080

    @pytest.mark.parametrize("raw", ["0", "65536", "http", ""])
    def test_invalid_port_exits(self, raw: str) -> None:
        """Invalid values stop the process."""
        with pytest.raises(SystemExit):
            _parse_port(raw)


def test_sqlite_files_share_one_connection() -> None:
    """File-backed SQLite gets a single pooled connection."""
    assert _engine_options("sqlite+aiosqlite:///bridge.db") == {
        "pool_size": 1,
        "max_overflow": 0,
    }
    assert _engine_options("sqlite+aiosqlite:///:memory:") == {}
    assert _engine_options("postgresql+asyncpg://db/bridge") == {}


class TestCreateApp:
    """Tests for the create_app factory function."""

    def test_builds_full_app(self, bridge_env: Path) -> None:
        """Valid settings produce an app serving probes and the webhook."""
        app = create_app()

        assert isinstance(app, falcon.asgi.App)
        client = falcon.testing.TestClient(app)
        assert client.simulate_get("/health").status_code == HTTPStatus.OK
        result = client.simulate_post(
            "/webhook", body=b"{}", headers={"X-GitHub-Event": "issue_comment"}
        )
        assert result.status_code == HTTPStatus.BAD_REQUEST

    def test_gateway_not_ready_before_startup(self, bridge_env: Path) -> None:
        """/ready reports 503 until the chat gateway connects."""
        client = falcon.testing.TestClient(create_app())

        assert client.simulate_get("/ready").status_code == (
            HTTPStatus.SERVICE_UNAVAILABLE
        )

    def test_missing_settings_exit(
        self, bridge_env: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Configuration errors stop startup."""
        monkeypatch.delenv("BUGBRIDGE_DISCORD_TOKEN")

        with pytest.raises(SystemExit):
            create_app()

    def test_invalid_routing_file_exits(self, bridge_env: Path) -> None:
        """A malformed routing file stops startup."""
        bridge_env.write_text("repositories:\n  bad-slug: {}\n", encoding="utf-8")

        with pytest.raises(SystemExit):
            create_app()
