"""Tests for the SquashLink Typer application."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from conftest import FakeResponse, FakeSession, hal, make_token
from dependency_injector import providers
from typer.testing import CliRunner

from squashlink.cli.common.context import LogLevel, clear_cli_context, get_cli_context
from squashlink.cli.typer_app import app, main_callback
from squashlink.config import Settings
from squashlink.containers import Container

runner = CliRunner()


@pytest.fixture
def cli_session(monkeypatch: pytest.MonkeyPatch, client_factory, tmp_path: Path):
    """Route every CLI command through a FakeSession-backed client."""
    monkeypatch.chdir(tmp_path)
    session = FakeSession()
    client = client_factory(session)

    def _create_container(context):
        container = Container()
        container.config.override(providers.Object(Settings()))
        container.token_context.override(providers.Object(client.token_context))
        container.http_client.override(providers.Object(client))
        return container

    monkeypatch.setattr("squashlink.cli.common.runtime.create_container", _create_container)
    return session


def _json(stdout: str) -> dict:
    return json.loads(stdout[stdout.index("{") :])


class TestMainCallback:
    def test_sets_context(self) -> None:
        clear_cli_context()

        main_callback(verbose=0, log_level=LogLevel.ERROR, json_output=True, version=False)

        context = get_cli_context()
        assert context.json_output is True
        assert context.get_effective_log_level() == "ERROR"

    def test_verbose_forces_debug(self) -> None:
        main_callback(verbose=2, log_level=LogLevel.ERROR, json_output=False, version=False)
        assert get_cli_context().get_effective_log_level() == "DEBUG"

    def test_context_must_be_initialised(self) -> None:
        clear_cli_context()
        with pytest.raises(RuntimeError):
            get_cli_context()


class TestVersionAndHelp:
    def test_version(self) -> None:
        result = runner.invoke(app, ["--version"])

        assert result.exit_code == 0
        assert "SquashLink CLI v0.1.0" in result.output

    def test_help_lists_commands(self) -> None:
        result = runner.invoke(app, ["--help"])

        assert result.exit_code == 0
        for command in ("status", "tree", "testcases", "testcase", "token"):
            assert command in result.output


class TestStatusCommand:
    def test_json(self, cli_session: FakeSession) -> None:
        cli_session.queue(FakeResponse(200, hal("projects", [])))

        result = runner.invoke(app, ["--json", "status"])

        assert result.exit_code == 0, result.output
        payload = _json(result.stdout)
        assert payload["success"] is True
        assert payload["command"] == "status"
        assert payload["data"]["connection"] == "connected"
        assert payload["data"]["circuit"]["is_open"] is False
        assert payload["data"]["token"]["subject"] == "tester"
        assert payload["data"]["using_fallback"] is False

    def test_text(self, cli_session: FakeSession) -> None:
        cli_session.queue(FakeResponse(200, hal("projects", [])))

        result = runner.invoke(app, ["status"])

        assert result.exit_code == 0, result.output
        assert "connected" in result.output
        assert "Circuit breaker" in result.output


class TestTreeCommand:
    def test_json_expands_requested_depth(self, cli_session: FakeSession) -> None:
        cli_session.queue(
            FakeResponse(200, hal("projects", [{"id": 1, "name": "Alpha"}])),
            FakeResponse(200, hal("folders", [{"id": 10, "name": "Login"}])),
            FakeResponse(200, hal("folders", [])),
            FakeResponse(200, hal("testCases", [{"id": 100, "name": "Valid login"}])),
        )

        result = runner.invoke(app, ["--json", "tree", "--depth", "2"])

        assert result.exit_code == 0, result.output
        roots = _json(result.stdout)["data"]["roots"]
        assert roots[0]["id"] == "project-1"
        folder = roots[0]["children"][0]
        assert folder["id"] == "folder-10"
        assert folder["children"][0]["id"] == "testcase-100"
        assert folder["children"][0]["path"] == "Login/Valid login"

    def test_depth_zero_only_lists_projects(self, cli_session: FakeSession) -> None:
        cli_session.queue(FakeResponse(200, hal("projects", [{"id": 1, "name": "Alpha"}])))

        result = runner.invoke(app, ["tree", "--depth", "0"])

        assert result.exit_code == 0, result.output
        assert "Alpha" in result.output
        assert len(cli_session.calls) == 1


class TestTestCaseCommands:
    def test_list_page_json(self, cli_session: FakeSession) -> None:
        cli_session.queue(
            FakeResponse(
                200,
                hal("testCases", [{"id": 7, "name": "TC", "importance": "LOW"}], size=10, total=31, pages=4, number=3),
            ),
        )

        result = runner.invoke(app, ["--json", "testcases", "--page", "3", "--size", "10"])

        assert result.exit_code == 0, result.output
        data = _json(result.stdout)["data"]
        assert data["page"] == {"number": 3, "size": 10, "total_elements": 31, "total_pages": 4}
        assert data["items"][0]["importance"] == "LOW"
        assert cli_session.calls[0]["params"]["page"] == "3"

    def test_show_single_test_case(self, cli_session: FakeSession) -> None:
        cli_session.queue(
            FakeResponse(
                200,
                {
                    "id": 7,
                    "name": "Checkout",
                    "steps": [{"id": 1, "action": "Pay", "expectedResult": "Paid", "index": 0}],
                },
            ),
        )

        result = runner.invoke(app, ["testcase", "7"])

        assert result.exit_code == 0, result.output
        assert "Checkout" in result.output
        assert "Pay" in result.output

    def test_api_error_exit_code(self, cli_session: FakeSession) -> None:
        cli_session.queue(FakeResponse(404, {"message": "missing"}))

        result = runner.invoke(app, ["testcase", "404"])

        assert result.exit_code == 2
        assert "Error:" in result.output

    def test_invalid_page_size_is_rejected(self) -> None:
        result = runner.invoke(app, ["testcases", "--size", "0"])
        assert result.exit_code != 0


class TestTokenCommand:
    def test_reports_claims(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("SQUASH_API_TOKEN", make_token(sub="alice"))

        result = runner.invoke(app, ["--json", "token"])

        assert result.exit_code == 0, result.output
        data = _json(result.stdout)["data"]
        assert data["subject"] == "alice"
        assert data["is_expired"] is False

    def test_expired_token_exit_code(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("SQUASH_API_TOKEN", make_token(exp_offset_s=-60))

        result = runner.invoke(app, ["token"])

        assert result.exit_code == 1
        assert "yes" in result.output

    def test_missing_token_is_security_error(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        monkeypatch.chdir(tmp_path)

        result = runner.invoke(app, ["--json", "token"])

        assert result.exit_code == 3
        payload = _json(result.stdout)
        assert payload["success"] is False
        assert payload["data"]["error_code"] == "TOKEN_MISSING"

    def test_config_file_option(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        monkeypatch.chdir(tmp_path)
        config = tmp_path / "custom.toml"
        config.write_text(f'[squash]\ntoken = "{make_token(sub="from-file")}"\n', encoding="utf-8")

        result = runner.invoke(app, ["--json", "--config", str(config), "token"])

        assert result.exit_code == 0, result.output
        assert _json(result.stdout)["data"]["subject"] == "from-file"
