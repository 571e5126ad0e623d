"""Unit tests for relkit platforms command."""

from __future__ import annotations

import json

from click.testing import CliRunner

from relkit_cli.main import cli


class TestPlatformsCommand:
    """Tests for the platforms command."""

    def test_table(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["platforms"])

        assert result.exit_code == 0
        assert "x86_64-unknown-linux-gnu" in result.output
        assert "linux-arm64" in result.output

    def test_json(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["platforms", "--json"])

        assert result.exit_code == 0
        data = json.loads(result.stdout)
        defaults = [p for p in data if p["default"]]
        assert defaults == [
            {
                "name": "linux_amd64",
                "compiler_triple": "x86_64-unknown-linux-gnu",
                "platform_tag": "linux-amd64",
                "default": True,
            }
        ]
        assert {p["platform_tag"] for p in data} >= {"linux-amd64", "linux-arm64"}
