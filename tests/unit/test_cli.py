"""Tests for the MovieStack CLI."""

import json
from collections.abc import Iterator
from pathlib import Path
from unittest.mock import patch

import pytest
from typer.testing import CliRunner

from moviestack.api import ApiError
from moviestack.cli import app
from moviestack.config import ACTIVE_USER_KEY
from tests.unit.fakes import SEARCH_PATH, FakeApi, log_row, movie_row

runner = CliRunner()


@pytest.fixture(autouse=True)
def _quiet_logging() -> Iterator[None]:
    """Keep CLI runs from re-pointing loguru at the runner's streams."""
    with patch("moviestack.cli.configure_logging"):
        yield


@pytest.fixture
def cli_api(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> FakeApi:
    """Route the CLI to a FakeApi and a throwaway storage file."""
    fake = FakeApi()
    monkeypatch.setattr("moviestack.cli._make_api", lambda _url: fake)
    monkeypatch.setattr("moviestack.cli.resolve_storage_path", lambda: tmp_path / "storage.json")
    return fake


def _login(tmp_path: Path, user_id: int = 1, username: str = "alice") -> None:
    (tmp_path / "storage.json").write_text(
        json.dumps({ACTIVE_USER_KEY: json.dumps({"id": user_id, "username": username})})
    )


def test_whoami_without_user(cli_api: FakeApi) -> None:
    result = runner.invoke(app, ["whoami"])

    assert result.exit_code == 0, result.output
    assert "No active user selected." in result.output


def test_login_then_whoami(cli_api: FakeApi) -> None:
    cli_api.add_response(
        "GET",
        "/api/admin/users",
        [{"id": 2, "username": "bob", "created_at": "2025-01-01T00:00:00Z", "updated_at": ""}],
    )

    result = runner.invoke(app, ["login", "2"])
    assert result.exit_code == 0, result.output
    assert "Viewing as bob (ID: 2)" in result.output

    result = runner.invoke(app, ["whoami"])
    assert "Viewing as bob (ID: 2)" in result.output

    result = runner.invoke(app, ["logout"])
    assert result.exit_code == 0
    assert "No active user selected." in runner.invoke(app, ["whoami"]).output


def test_login_unknown_user_fails(cli_api: FakeApi) -> None:
    cli_api.add_response("GET", "/api/admin/users", [])

    result = runner.invoke(app, ["login", "42"])

    assert result.exit_code == 1
    assert "User 42 not found." in result.output


def test_search_prints_results_in_server_order(cli_api: FakeApi) -> None:
    cli_api.add_search_results(
        {"matrix": [movie_row(603, "The Matrix", 500.0), movie_row(604, "The Matrix Revisited", 10.0)]}
    )

    result = runner.invoke(app, ["search", "matrix"])

    assert result.exit_code == 0, result.output
    assert result.output.index("The Matrix ") < result.output.index("The Matrix Revisited")
    assert "Log in as a user" in result.output
    assert cli_api.queries() == ["matrix"]


def test_search_json_output(cli_api: FakeApi) -> None:
    cli_api.add_search_results({"heat": [movie_row(949, "Heat")]})

    result = runner.invoke(app, ["search", "heat", "--json"])

    assert result.exit_code == 0, result.output
    data = json.loads(result.output)
    assert data[0]["original_title"] == "Heat"


def test_search_failure_exits_nonzero(cli_api: FakeApi) -> None:
    cli_api.add_response("GET", SEARCH_PATH, ApiError("500", status=500, server_message="failed to search movies"))

    result = runner.invoke(app, ["search", "heat"])

    assert result.exit_code == 1
    assert "failed to search movies" in result.output


def test_add_requires_active_user(cli_api: FakeApi) -> None:
    result = runner.invoke(app, ["add", "603"])

    assert result.exit_code == 1
    assert cli_api.calls == []


def test_log_shows_ranked_and_unranked(cli_api: FakeApi, tmp_path: Path) -> None:
    _login(tmp_path)
    cli_api.add_response(
        "GET",
        "/api/users/1/log",
        [log_row(1, "Heat", note="rewatch"), log_row(2, "Alien", 2), log_row(3, "Up", 1)],
    )

    result = runner.invoke(app, ["log"])

    assert result.exit_code == 0, result.output
    out = result.output
    assert out.index("Ranked") < out.index("#1 Up") < out.index("#2 Alien") < out.index("Unranked")
    assert out.index("Unranked") < out.index("Heat")
    assert "note: rewatch" in out


def test_delete_failure_exits_nonzero(cli_api: FakeApi, tmp_path: Path) -> None:
    _login(tmp_path)
    cli_api.add_response("GET", "/api/users/1/log", [log_row(1, "Heat")])
    cli_api.add_response("DELETE", "/api/users/1/log/1", ApiError("500", status=500))

    result = runner.invoke(app, ["delete", "1"])

    assert result.exit_code == 1
    assert "Failed to delete log entry" in result.output


def test_create_user_rejects_blank_name(cli_api: FakeApi) -> None:
    result = runner.invoke(app, ["create-user", "  "])

    assert result.exit_code == 1
    assert "Username is required" in result.output
    assert cli_api.calls == []
