"""Tests for the root wavalidate CLI."""

from __future__ import annotations

from click.testing import CliRunner

from wavalidate import __version__
from wavalidate.cli import cli


def test_cli_help(cli_runner: CliRunner) -> None:
    result = cli_runner.invoke(cli, ["--help"])
    assert result.exit_code == 0
    assert "wavalidate" in result.output
    for command in ("validate", "session", "files"):
        assert command in result.output


def test_cli_version(cli_runner: CliRunner) -> None:
    result = cli_runner.invoke(cli, ["--version"])
    assert result.exit_code == 0
    assert __version__ in result.output


def test_cli_no_args(cli_runner: CliRunner, tmp_path, monkeypatch) -> None:
    monkeypatch.chdir(tmp_path)
    result = cli_runner.invoke(cli, [])
    assert result.exit_code == 0
    assert "Usage" in result.output


def test_missing_config_file(cli_runner: CliRunner, tmp_path) -> None:
    result = cli_runner.invoke(cli, ["-c", str(tmp_path / "nope.toml"), "files"])
    assert result.exit_code == 1
    assert "Config file not found" in result.output


def test_examples_flag(cli_runner: CliRunner) -> None:
    result = cli_runner.invoke(cli, ["validate", "--examples"])
    assert result.exit_code == 0
    assert "wavalidate validate numbers.txt --session office" in result.output
