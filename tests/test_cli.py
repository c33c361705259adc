"""CLI tests: mock the counting boundary, test command behavior."""

import json
import tempfile
from pathlib import Path
from unittest.mock import AsyncMock, patch

import pytest
from typer.testing import CliRunner

from commit_counter.cli import app
from commit_counter.models import CountResult

runner = CliRunner()


@pytest.fixture(autouse=True)
def isolated_home(monkeypatch):
    """Keep stored tokens and token env vars out of CLI tests."""
    monkeypatch.delenv("GITHUB_TOKEN", raising=False)
    monkeypatch.delenv("GITLAB_TOKEN", raising=False)
    monkeypatch.setattr("commit_counter.cli._configure_logging", lambda verbose: None)
    with (
        tempfile.TemporaryDirectory() as temp_dir,
        patch("commit_counter.config.Path.home", return_value=Path(temp_dir)),
    ):
        yield Path(temp_dir)


def test_version():
    """Test the version command works."""
    result = runner.invoke(app, ["version"])
    assert result.exit_code == 0
    assert "commit-counter" in result.stdout


def test_auth_status():
    """Test auth-status command works."""
    result = runner.invoke(app, ["auth-status"])
    assert result.exit_code == 0
    assert "Authentication Status" in result.stdout


@patch("commit_counter.cli._run_count", new_callable=AsyncMock)
def test_count_passes_settings(mock_run):
    """Test that count builds settings from its options."""
    mock_run.return_value = CountResult(projects=3, commits=42)

    result = runner.invoke(
        app,
        [
            "count",
            "github",
            "--username",
            "octocat",
            "--token",
            "ghp_test",
            "--email",
            "a@example.com",
            "--email",
            "b@example.com",
            "--from-date",
            "2024-01-01",
            "--min-commits",
            "2",
        ],
    )

    assert result.exit_code == 0
    assert "42" in result.stdout
    platform, settings, base_url, timeout = mock_run.call_args.args
    assert platform == "github"
    assert settings.username == "octocat"
    assert settings.access_token == "ghp_test"
    assert settings.user_email_addresses == ("a@example.com", "b@example.com")
    assert settings.from_date == "2024-01-01"
    assert settings.min_commits == 2
    assert base_url is None
    assert timeout == 600.0


@patch("commit_counter.cli._run_count", new_callable=AsyncMock)
def test_count_json_output(mock_run):
    """Test machine-readable output."""
    mock_run.return_value = CountResult(projects=1, commits=7)

    result = runner.invoke(app, ["count", "gitlab", "--token", "glpat", "--json"])

    assert result.exit_code == 0
    assert json.loads(result.stdout) == {"projects": 1, "commits": 7}


@patch("commit_counter.cli._run_count", new_callable=AsyncMock)
def test_count_reads_token_from_env(mock_run, monkeypatch):
    """Test that <PLATFORM>_TOKEN is used when --token is absent."""
    monkeypatch.setenv("GITHUB_TOKEN", "ghp_env")
    mock_run.return_value = CountResult()

    result = runner.invoke(app, ["count", "github", "--json"])

    assert result.exit_code == 0
    assert mock_run.call_args.args[1].access_token == "ghp_env"


def test_count_without_token_fails():
    """Test that a missing token is reported before any request."""
    result = runner.invoke(app, ["count", "github"])

    assert result.exit_code == 1
    assert "No github token found" in result.stdout


def test_count_unknown_platform_fails():
    """Test that unknown platforms are rejected."""
    result = runner.invoke(app, ["count", "sourcehut", "--token", "x"])

    assert result.exit_code == 1
    assert "Unknown platform" in result.stdout


@patch("commit_counter.cli._run_count", new_callable=AsyncMock)
def test_count_timeout(mock_run):
    """Test that an overall timeout exits with an error."""
    mock_run.side_effect = TimeoutError()

    result = runner.invoke(app, ["count", "github", "--token", "x", "--timeout", "5"])

    assert result.exit_code == 1
    assert "timed out after 5 seconds" in result.stdout


@patch("commit_counter.cli.Confirm.ask", return_value=True)
@patch("commit_counter.cli.Prompt.ask", side_effect=["octocat", "ghp_secret"])
def test_auth_stores_and_removes_token(_mock_prompt, _mock_confirm):
    """Test interactive token setup followed by auth-remove."""
    result = runner.invoke(app, ["auth", "github"])
    assert result.exit_code == 0
    assert "github token stored securely" in result.stdout

    status = runner.invoke(app, ["auth-status"])
    assert "✓ Yes" in status.stdout

    removed = runner.invoke(app, ["auth-remove", "github"])
    assert removed.exit_code == 0
    assert "token removed" in removed.stdout
