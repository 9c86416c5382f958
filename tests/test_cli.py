"""Tests for the envseal CLI commands."""

from __future__ import annotations

import json
from unittest.mock import patch

import pytest
import yaml
from click.testing import CliRunner

from envseal.cli import main

from _fakes import REPO, FakeResponse


@pytest.fixture
def home(tmp_path):
    """An envseal home with fast retry settings."""
    home = tmp_path / ".envseal"
    home.mkdir()
    (home / "config.yaml").write_text(yaml.dump({"backoff_seconds": 0, "max_retries": 0}))
    return home


@pytest.fixture
def env_file(tmp_path):
    path = tmp_path / ".env"
    path.write_text('# app\nAPI_KEY=abc\nCERT="one\ntwo"\n')
    return path


class TestParseCommand:
    """envseal parse"""

    def test_json_lists_keys_without_values(self, env_file):
        runner = CliRunner()
        result = runner.invoke(main, ["parse", str(env_file), "--json-out"])

        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data == [{"key": "API_KEY", "length": 3}, {"key": "CERT", "length": 7}]
        assert "abc" not in result.output

    def test_table_output(self, env_file):
        runner = CliRunner()
        result = runner.invoke(main, ["parse", str(env_file)])
        assert result.exit_code == 0
        assert "API_KEY" in result.output
        assert "2 secret(s)" in result.output

    def test_stdin(self):
        runner = CliRunner()
        result = runner.invoke(main, ["parse", "-", "--json-out"], input="X=1\n")
        assert json.loads(result.output) == [{"key": "X", "length": 1}]


class TestPushCommand:
    """envseal push"""

    def test_push_success(self, repo_store, home, env_file):
        repo_store.route("PUT", f"/repos/{REPO}/actions/secrets/API_KEY", FakeResponse(201))
        repo_store.route("PUT", f"/repos/{REPO}/actions/secrets/CERT", FakeResponse(201))

        runner = CliRunner()
        with patch("envseal.sync.client.requests.Session", return_value=repo_store):
            result = runner.invoke(main, [
                "push", REPO, "--env-file", str(env_file),
                "--token", "tok", "--home", str(home), "--json-out",
            ])

        assert result.exit_code == 0, result.output
        assert json.loads(result.output) == {
            "success": True,
            "variables": ["API_KEY", "CERT"],
            "status_code": 200,
        }
        assert repo_store.calls[0].headers["Authorization"] == "Bearer tok"

    def test_push_partial_failure_exits_nonzero(self, repo_store, home, env_file):
        repo_store.route("PUT", f"/repos/{REPO}/actions/secrets/API_KEY", FakeResponse(201))
        repo_store.route("PUT", f"/repos/{REPO}/actions/secrets/CERT", FakeResponse(422))

        runner = CliRunner()
        with patch("envseal.sync.client.requests.Session", return_value=repo_store):
            result = runner.invoke(main, [
                "push", REPO, "-e", str(env_file), "-t", "tok", "--home", str(home),
            ])

        assert result.exit_code == 1
        assert "API_KEY" in result.output
        assert "FAILED" in result.output

    def test_token_from_environment(self, repo_store, home, env_file, monkeypatch):
        monkeypatch.setenv("GITHUB_TOKEN", "env-tok")
        repo_store.route("PUT", f"/repos/{REPO}/actions/secrets/API_KEY", FakeResponse(201))
        repo_store.route("PUT", f"/repos/{REPO}/actions/secrets/CERT", FakeResponse(201))

        runner = CliRunner()
        with patch("envseal.sync.client.requests.Session", return_value=repo_store):
            result = runner.invoke(main, [
                "push", REPO, "-e", str(env_file), "--home", str(home), "--json-out",
            ])

        assert result.exit_code == 0
        assert repo_store.calls[0].headers["Authorization"] == "Bearer env-tok"

    def test_missing_token(self, home, env_file, monkeypatch):
        monkeypatch.delenv("GITHUB_TOKEN", raising=False)

        runner = CliRunner()
        result = runner.invoke(main, [
            "push", REPO, "-e", str(env_file), "--home", str(home), "--json-out",
        ])

        assert result.exit_code == 1
        data = json.loads(result.output)
        assert data["status_code"] == 400
        assert "Missing required parameters" in data["variables"][0]

    def test_inaccessible_repo_message(self, session, home, env_file):
        runner = CliRunner()
        with patch("envseal.sync.client.requests.Session", return_value=session):
            result = runner.invoke(main, [
                "push", REPO, "-e", str(env_file), "-t", "tok", "--home", str(home),
            ])

        assert result.exit_code == 1
        assert "Repository access error" in result.output

    @pytest.mark.parametrize("timeout", ["0", "-5"])
    def test_non_positive_timeout_rejected(self, session, home, env_file, timeout):
        runner = CliRunner()
        with patch("envseal.sync.client.requests.Session", return_value=session):
            result = runner.invoke(main, [
                "push", REPO, "-e", str(env_file), "-t", "tok",
                "--home", str(home), f"--timeout={timeout}",
            ])

        assert result.exit_code == 2
        assert "Invalid value for '--timeout'" in result.output
        assert session.calls == []


class TestConfigCommands:
    """envseal config show / set"""

    def test_show(self, home):
        runner = CliRunner()
        result = runner.invoke(main, ["config", "show", "--home", str(home)])
        assert result.exit_code == 0
        assert yaml.safe_load(result.output)["max_retries"] == 0

    def test_set_and_persist(self, home):
        runner = CliRunner()
        result = runner.invoke(main, ["config", "set", "workers", "8", "--home", str(home)])

        assert result.exit_code == 0
        assert yaml.safe_load((home / "config.yaml").read_text())["workers"] == 8

    def test_set_unknown_key(self, home):
        runner = CliRunner()
        result = runner.invoke(main, ["config", "set", "colour", "blue", "--home", str(home)])
        assert result.exit_code == 1
        assert "Unknown config key" in result.output

    def test_set_invalid_value(self, home):
        runner = CliRunner()
        result = runner.invoke(main, ["config", "set", "workers", "0", "--home", str(home)])
        assert result.exit_code == 1


class TestVersion:
    def test_version(self):
        runner = CliRunner()
        result = runner.invoke(main, ["--version"])
        assert result.exit_code == 0
        assert "envseal" in result.output
