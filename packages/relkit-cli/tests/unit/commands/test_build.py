"""Unit tests for relkit build command.

Covers: cli.build (platform overrides from the environment, release naming)
"""

from __future__ import annotations

from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
from click.testing import CliRunner

from relkit_cli.main import cli
from relkit_core.build.models import ReleaseArtifact
from relkit_core.errors import (
    ConfigurationError,
    SourceCompileError,
    ToolchainNotFoundError,
    ValidationFailedError,
)


def _artifact(tag: str = "linux-amd64") -> ReleaseArtifact:
    return ReleaseArtifact(path=Path("dist") / f"gh-jj-{tag}", platform_tag=tag)


def _config_of(mock_pipeline: MagicMock) -> object:
    return mock_pipeline.call_args.args[0]


class TestBuildCommand:
    """Tests for the build command."""

    def test_help_shows_options(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["build", "--help"])

        assert result.exit_code == 0
        for option in ("--triple", "--tag", "--output-dir", "--require-checks", "--config"):
            assert option in result.output

    @patch("relkit_core.pipeline.ReleasePipeline")
    def test_success_prints_release_path(
        self, mock_pipeline: MagicMock, isolated_runner: CliRunner
    ) -> None:
        mock_pipeline.return_value.build_release.return_value = _artifact()

        result = isolated_runner.invoke(cli, ["build"])

        assert result.exit_code == 0
        assert "Built gh-jj-linux-amd64" in result.output
        assert str(Path("dist") / "gh-jj-linux-amd64") in result.output

    @pytest.mark.requirement("cli.build")
    @patch("relkit_core.pipeline.ReleasePipeline")
    def test_environment_overrides(
        self, mock_pipeline: MagicMock, isolated_runner: CliRunner
    ) -> None:
        mock_pipeline.return_value.build_release.return_value = _artifact("linux-arm64")

        result = isolated_runner.invoke(
            cli,
            ["build"],
            env={"COMPILER_TRIPLE": "aarch64-unknown-linux-gnu", "PLATFORM_TAG": "linux-arm64"},
        )

        assert result.exit_code == 0
        config = _config_of(mock_pipeline)
        assert config.compiler_triple == "aarch64-unknown-linux-gnu"  # type: ignore[attr-defined]
        assert config.platform_tag == "linux-arm64"  # type: ignore[attr-defined]

    @pytest.mark.requirement("cli.build")
    @patch("relkit_core.pipeline.ReleasePipeline")
    def test_empty_environment_means_default(
        self, mock_pipeline: MagicMock, isolated_runner: CliRunner
    ) -> None:
        mock_pipeline.return_value.build_release.return_value = _artifact()

        result = isolated_runner.invoke(
            cli, ["build"], env={"COMPILER_TRIPLE": "", "PLATFORM_TAG": ""}
        )

        assert result.exit_code == 0
        config = _config_of(mock_pipeline)
        assert config.compiler_triple is None  # type: ignore[attr-defined]
        assert config.platform_tag is None  # type: ignore[attr-defined]

    @patch("relkit_core.pipeline.ReleasePipeline")
    def test_flags_map_onto_config(
        self, mock_pipeline: MagicMock, isolated_runner: CliRunner
    ) -> None:
        mock_pipeline.return_value.build_release.return_value = _artifact()

        result = isolated_runner.invoke(
            cli,
            ["build", "--tag", "linux-amd64", "--output-dir", "release", "--require-checks"],
        )

        assert result.exit_code == 0
        config = _config_of(mock_pipeline)
        assert config.output_dir == Path("release")  # type: ignore[attr-defined]
        assert config.require_validation is True  # type: ignore[attr-defined]
        assert config.strict_platform is False  # type: ignore[attr-defined]

    @patch("relkit_core.pipeline.ReleasePipeline")
    def test_config_file_values(
        self, mock_pipeline: MagicMock, isolated_runner: CliRunner
    ) -> None:
        mock_pipeline.return_value.build_release.return_value = _artifact()
        Path("relkit.yaml").write_text("binary_name: jj-tool\nrequire_validation: true\n")

        result = isolated_runner.invoke(cli, ["build"])

        assert result.exit_code == 0
        config = _config_of(mock_pipeline)
        assert config.binary_name == "jj-tool"  # type: ignore[attr-defined]
        assert config.require_validation is True  # type: ignore[attr-defined]

    def test_missing_config_file(self, isolated_runner: CliRunner) -> None:
        result = isolated_runner.invoke(cli, ["build", "--config", "nope.yaml"])

        assert result.exit_code == 2
        assert "File not found" in result.output

    def test_invalid_config_value(self, isolated_runner: CliRunner) -> None:
        Path("relkit.yaml").write_text("binary_name: 'has space'\n")

        result = isolated_runner.invoke(cli, ["build"])

        assert result.exit_code == 2
        assert "binary_name" in result.output

    @patch("relkit_core.pipeline.ReleasePipeline")
    def test_compile_error_exits_1(
        self, mock_pipeline: MagicMock, isolated_runner: CliRunner
    ) -> None:
        mock_pipeline.return_value.build_release.side_effect = SourceCompileError(
            "Project source failed to compile"
        )

        result = isolated_runner.invoke(cli, ["build"])

        assert result.exit_code == 1
        assert "[project_builder]" in result.output

    @patch("relkit_core.pipeline.ReleasePipeline")
    def test_gate_failure_exits_1(
        self, mock_pipeline: MagicMock, isolated_runner: CliRunner
    ) -> None:
        mock_pipeline.return_value.build_release.side_effect = ValidationFailedError(["fmt"])

        result = isolated_runner.invoke(cli, ["build", "--require-checks"])

        assert result.exit_code == 1
        assert "Validation gate failed: fmt" in result.output

    @pytest.mark.parametrize(
        "err",
        [
            ConfigurationError("Platform tag does not match", component="target_resolver"),
            ToolchainNotFoundError("cargo"),
        ],
    )
    @patch("relkit_core.pipeline.ReleasePipeline")
    def test_environment_problem_exits_2(
        self, mock_pipeline: MagicMock, err: Exception, isolated_runner: CliRunner
    ) -> None:
        mock_pipeline.return_value.build_release.side_effect = err

        result = isolated_runner.invoke(cli, ["build"])

        assert result.exit_code == 2

    @patch("relkit_core.pipeline.ReleasePipeline")
    def test_unexpected_error_is_reported(
        self, mock_pipeline: MagicMock, isolated_runner: CliRunner
    ) -> None:
        mock_pipeline.return_value.build_release.side_effect = RuntimeError("disk vanished")

        result = isolated_runner.invoke(cli, ["build"])

        assert result.exit_code == 1
        assert "Unexpected error: RuntimeError: disk vanished" in result.output
        assert not isinstance(result.exception, RuntimeError)
