"""Build a PipelineConfig from command-line options.

The COMPILER_TRIPLE and PLATFORM_TAG environment variables are read by
click (``envvar=``) and arrive here as plain overrides.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError as PydanticValidationError

from relkit_cli.errors import handle_file_not_found, handle_validation_error

if TYPE_CHECKING:
    from relkit_core.config import PipelineConfig


def load_pipeline_config(
    project_dir: str | None,
    config_file: str | None = None,
    **overrides: Any,
) -> PipelineConfig:
    """Load relkit.yaml (explicit or discovered) and apply CLI overrides.

    Overrides that are None are ignored, so flags left at their defaults
    never mask values from the file.

    Args:
        project_dir: ``--project-dir`` value, or None for the config file's
            directory (or the current directory without ``--config``).
        config_file: ``--config`` value.
        **overrides: Remaining PipelineConfig fields from the command line.

    Raises:
        CLIError: If the config file is missing or a field is invalid.
        ConfigurationError: If the config file is not valid YAML.
    """
    from relkit_core.config import CONFIG_FILE_NAME, PipelineConfig

    if project_dir is not None:
        overrides["project_dir"] = Path(project_dir)

    try:
        if config_file is not None:
            return PipelineConfig.from_yaml(Path(config_file), **overrides)
        root = Path(project_dir) if project_dir is not None else Path(".")
        overrides.pop("project_dir", None)
        return PipelineConfig.discover(root, **overrides)
    except FileNotFoundError:
        handle_file_not_found(str(config_file))
    except PydanticValidationError as e:
        handle_validation_error(e, config_file or CONFIG_FILE_NAME)
