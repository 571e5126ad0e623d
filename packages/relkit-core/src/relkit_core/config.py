"""Pipeline configuration.

PipelineConfig is built once at the entry point and passed explicitly to
every component. Library code never reads the environment; the CLI maps
COMPILER_TRIPLE and PLATFORM_TAG onto the override fields.

Optional ``relkit.yaml`` in the project directory:

    binary_name: gh-jj
    output_dir: dist
    strict_platform: false
    require_validation: false
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator

from relkit_core.errors import ConfigurationError
from relkit_core.packager import DEFAULT_BINARY_NAME

CONFIG_FILE_NAME = "relkit.yaml"
DEFAULT_OUTPUT_DIR = Path("dist")
DEFAULT_CACHE_SUBDIR = Path(".relkit") / "cache"


class PipelineConfig(BaseModel):
    """Configuration for one pipeline run.

    Attributes:
        project_dir: Cargo project root.
        output_dir: Release output directory (relative to project_dir unless absolute).
        cache_dir: Dependency cache root (default ``<project_dir>/.relkit/cache``).
        binary_name: Project binary base name used in release file names.
        compiler_triple: Optional compiler triple override.
        platform_tag: Optional platform tag override.
        strict_platform: Reject tags that contradict the platform table.
        strict_dependencies: Build with locked dependency versions.
        require_validation: Gate packaging on an all-checks-pass verdict.

    Example:
        >>> config = PipelineConfig(project_dir=Path("."), platform_tag="linux-arm64")
        >>> config.resolved_output_dir.name
        'dist'
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    project_dir: Path = Field(default=Path("."), description="Cargo project root")
    output_dir: Path = Field(default=DEFAULT_OUTPUT_DIR, description="Release output directory")
    cache_dir: Path | None = Field(default=None, description="Dependency cache root")
    binary_name: str = Field(
        default=DEFAULT_BINARY_NAME,
        min_length=1,
        pattern=r"^[A-Za-z0-9][A-Za-z0-9_.-]*$",
        description="Binary base name",
    )
    compiler_triple: str | None = Field(default=None, description="Compiler triple override")
    platform_tag: str | None = Field(default=None, description="Platform tag override")
    strict_platform: bool = Field(default=False, description="Reject mismatched triple/tag")
    strict_dependencies: bool = Field(default=True, description="Require locked versions")
    require_validation: bool = Field(default=False, description="Gate packaging on checks")

    @field_validator("compiler_triple", "platform_tag", mode="before")
    @classmethod
    def _blank_override(cls, v: Any) -> Any:
        # Empty overrides mean "not supplied"
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @property
    def resolved_project_dir(self) -> Path:
        return self.project_dir.resolve()

    @property
    def resolved_output_dir(self) -> Path:
        if self.output_dir.is_absolute():
            return self.output_dir
        return self.resolved_project_dir / self.output_dir

    @property
    def resolved_cache_dir(self) -> Path:
        if self.cache_dir is None:
            return self.resolved_project_dir / DEFAULT_CACHE_SUBDIR
        if self.cache_dir.is_absolute():
            return self.cache_dir
        return self.resolved_project_dir / self.cache_dir

    @classmethod
    def from_yaml(cls, path: Path, **overrides: Any) -> PipelineConfig:
        """Load configuration from a relkit.yaml file.

        Keyword overrides whose value is not None win over file values.
        ``project_dir`` defaults to the file's directory.

        Args:
            path: Path to relkit.yaml.
            **overrides: Field values from the command line.

        Returns:
            Validated PipelineConfig.

        Raises:
            FileNotFoundError: If the file doesn't exist.
            ConfigurationError: If the YAML is malformed or not a mapping.
            pydantic.ValidationError: If a field is invalid.
        """
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")

        try:
            with open(path) as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigurationError(
                "Invalid YAML", file_path=str(path), internal_details=str(e)
            ) from e

        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ConfigurationError("Expected a mapping at top level", file_path=str(path))

        data.setdefault("project_dir", str(path.parent))
        data.update({k: v for k, v in overrides.items() if v is not None})
        return cls.model_validate(data)

    @classmethod
    def discover(cls, project_dir: Path, **overrides: Any) -> PipelineConfig:
        """Load ``<project_dir>/relkit.yaml`` if present, else use defaults."""
        config_path = project_dir / CONFIG_FILE_NAME
        if config_path.is_file():
            return cls.from_yaml(config_path, project_dir=project_dir, **overrides)
        values = {k: v for k, v in overrides.items() if v is not None}
        return cls(project_dir=project_dir, **values)
