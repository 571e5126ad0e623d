"""Unit tests for PipelineConfig."""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from relkit_core.config import CONFIG_FILE_NAME, PipelineConfig
from relkit_core.errors import ConfigurationError


class TestPipelineConfig:
    """Tests for PipelineConfig defaults and derived paths."""

    def test_defaults(self, tmp_path: Path) -> None:
        config = PipelineConfig(project_dir=tmp_path)

        assert config.binary_name == "gh-jj"
        assert config.compiler_triple is None
        assert config.platform_tag is None
        assert config.strict_dependencies
        assert not config.strict_platform
        assert not config.require_validation
        assert config.resolved_output_dir == tmp_path.resolve() / "dist"
        assert config.resolved_cache_dir == tmp_path.resolve() / ".relkit" / "cache"

    def test_absolute_dirs_are_kept(self, tmp_path: Path) -> None:
        config = PipelineConfig(
            project_dir=tmp_path, output_dir=tmp_path / "out", cache_dir=tmp_path / "c"
        )
        assert config.resolved_output_dir == tmp_path / "out"
        assert config.resolved_cache_dir == tmp_path / "c"

    def test_blank_overrides_mean_unset(self) -> None:
        """An empty environment variable does not override anything."""
        config = PipelineConfig(compiler_triple="", platform_tag="  ")
        assert config.compiler_triple is None
        assert config.platform_tag is None

    def test_rejects_unknown_fields(self) -> None:
        with pytest.raises(ValidationError):
            PipelineConfig(target="x86_64")  # type: ignore[call-arg]

    def test_rejects_path_like_binary_name(self) -> None:
        with pytest.raises(ValidationError):
            PipelineConfig(binary_name="../gh-jj")

    def test_is_frozen(self) -> None:
        config = PipelineConfig()
        with pytest.raises(ValidationError):
            config.binary_name = "other"  # type: ignore[misc]


class TestFromYaml:
    """Tests for loading relkit.yaml."""

    def test_loads_values(self, tmp_path: Path) -> None:
        path = tmp_path / CONFIG_FILE_NAME
        path.write_text("binary_name: jj-tool\nrequire_validation: true\noutput_dir: release\n")

        config = PipelineConfig.from_yaml(path)

        assert config.binary_name == "jj-tool"
        assert config.require_validation
        assert config.project_dir == tmp_path
        assert config.resolved_output_dir == tmp_path.resolve() / "release"

    def test_overrides_win_over_file(self, tmp_path: Path) -> None:
        path = tmp_path / CONFIG_FILE_NAME
        path.write_text("platform_tag: linux-amd64\n")

        config = PipelineConfig.from_yaml(path, platform_tag="linux-arm64", cache_dir=None)

        assert config.platform_tag == "linux-arm64"
        assert config.cache_dir is None

    def test_empty_file_uses_defaults(self, tmp_path: Path) -> None:
        path = tmp_path / CONFIG_FILE_NAME
        path.write_text("")

        assert PipelineConfig.from_yaml(path).binary_name == "gh-jj"

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            PipelineConfig.from_yaml(tmp_path / CONFIG_FILE_NAME)

    def test_invalid_yaml(self, tmp_path: Path) -> None:
        path = tmp_path / CONFIG_FILE_NAME
        path.write_text("binary_name: [unclosed\n")

        with pytest.raises(ConfigurationError, match="Invalid YAML"):
            PipelineConfig.from_yaml(path)

    def test_non_mapping(self, tmp_path: Path) -> None:
        path = tmp_path / CONFIG_FILE_NAME
        path.write_text("- just\n- a list\n")

        with pytest.raises(ConfigurationError, match="mapping"):
            PipelineConfig.from_yaml(path)


class TestDiscover:
    """Tests for PipelineConfig.discover()."""

    def test_without_file(self, tmp_path: Path) -> None:
        config = PipelineConfig.discover(tmp_path, compiler_triple="aarch64-unknown-linux-gnu")

        assert config.project_dir == tmp_path
        assert config.compiler_triple == "aarch64-unknown-linux-gnu"

    def test_with_file(self, tmp_path: Path) -> None:
        (tmp_path / CONFIG_FILE_NAME).write_text("binary_name: jj-tool\n")

        config = PipelineConfig.discover(tmp_path, platform_tag=None)

        assert config.binary_name == "jj-tool"
        assert config.project_dir == tmp_path
