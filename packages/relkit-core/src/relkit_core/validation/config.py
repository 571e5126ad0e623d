"""Validation gate configuration.

Selects which checks run and how they are scheduled.
"""

from __future__ import annotations

from collections.abc import Iterable

from pydantic import BaseModel, ConfigDict, Field

from relkit_core.platforms import DEFAULT_TRIPLE

BUILD_CHECK = "build"
LINT_CHECK = "lint"
FMT_CHECK = "fmt"
TOML_FMT_CHECK = "toml-fmt"

# Report order of the checks
CHECK_NAMES = (BUILD_CHECK, LINT_CHECK, FMT_CHECK, TOML_FMT_CHECK)


class ValidationConfig(BaseModel):
    """Configuration for the validation gate.

    Attributes:
        build: Run the build check
        lint: Run the zero-tolerance lint check
        fmt: Run the source-format check
        toml_fmt: Run the structured-config-format check
        triple: Compiler triple for the build and lint checks
        max_workers: Checks executed concurrently

    Example:
        >>> config = ValidationConfig.only(["fmt", "toml-fmt"])
        >>> config.enabled_checks
        ['fmt', 'toml-fmt']
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    build: bool = Field(default=True, description="Enable build check")
    lint: bool = Field(default=True, description="Enable lint check")
    fmt: bool = Field(default=True, description="Enable source-format check")
    toml_fmt: bool = Field(default=True, description="Enable config-format check")
    triple: str = Field(default=DEFAULT_TRIPLE, min_length=1, description="Compiler triple")
    max_workers: int = Field(default=4, ge=1, le=16, description="Concurrent checks")

    @classmethod
    def only(cls, names: Iterable[str], **kwargs: object) -> ValidationConfig:
        """Enable exactly the named checks.

        Raises:
            ValueError: If a name is not a known check.
        """
        selected = set(names)
        unknown = selected - set(CHECK_NAMES)
        if unknown:
            raise ValueError(f"Unknown checks: {', '.join(sorted(unknown))}")
        flags = {_field(name): name in selected for name in CHECK_NAMES}
        return cls(**flags, **kwargs)  # type: ignore[arg-type]

    @property
    def enabled_checks(self) -> list[str]:
        """Enabled check names, in report order."""
        return [name for name in CHECK_NAMES if getattr(self, _field(name))]

    @property
    def needs_dependencies(self) -> bool:
        """True when an enabled check needs compiled dependencies."""
        return self.build or self.lint


def _field(name: str) -> str:
    return name.replace("-", "_")
