"""Custom exception hierarchy for relkit-core.

This module defines the exception classes used throughout the release pipeline:
- ReleaseError: Base exception for all relkit errors
- DependencyBuildError / SourceCompileError / LockMismatchError: build chain
- LintViolationError / FormatViolationError: validation gate
- PackagingError: release packaging

Every error names the pipeline component it originated from so the operator
can tell where a run stopped. User-facing messages are safe to display;
raw toolchain output goes into internal details and is logged via structlog.
"""

from __future__ import annotations

import structlog

logger = structlog.get_logger(__name__)


class ReleaseError(Exception):
    """Base exception for relkit.

    All relkit exceptions inherit from this class.

    Args:
        user_message: Human-readable cause shown to the operator.
        component: Pipeline component that raised the error.
        internal_details: Optional technical details (toolchain output,
            paths). Logged on construction and kept on the instance.

    Example:
        >>> raise ReleaseError(
        ...     "Dependency compilation failed",
        ...     component="dependency_cache_builder",
        ...     internal_details="error[E0463]: can't find crate for `core`",
        ... )
    """

    component: str = "relkit"

    def __init__(
        self,
        user_message: str,
        *,
        component: str | None = None,
        internal_details: str | None = None,
    ) -> None:
        """Initialize ReleaseError with user message and optional internal details.

        Args:
            user_message: Message to display to the operator.
            component: Originating component (defaults to the class default).
            internal_details: Technical details for logging.
        """
        super().__init__(user_message)
        self.user_message = user_message
        if component is not None:
            self.component = component
        self.internal_details = internal_details

        if internal_details:
            logger.error(
                "release_error",
                error_type=self.__class__.__name__,
                component=self.component,
                user_message=user_message,
                internal_details=internal_details,
            )

    def describe(self) -> str:
        """Return ``"[component] message"`` for operator-facing output."""
        return f"[{self.component}] {self.user_message}"


class ConfigurationError(ReleaseError):
    """Raised when pipeline configuration or project layout is invalid.

    Use this exception when:
    - relkit.yaml cannot be parsed
    - The project directory has no Cargo.toml
    - A strict platform request pairs a triple with the wrong tag

    Attributes:
        file_path: Path to the offending file (if known).
    """

    component = "configuration"

    def __init__(
        self,
        user_message: str,
        *,
        file_path: str | None = None,
        component: str | None = None,
        internal_details: str | None = None,
    ) -> None:
        """Initialize ConfigurationError with file context.

        Args:
            user_message: Message to display to the operator.
            file_path: Path to the configuration file (optional).
            component: Originating component.
            internal_details: Technical details for logging.
        """
        full_message = f"{user_message} (in {file_path})" if file_path else user_message
        super().__init__(full_message, component=component, internal_details=internal_details)
        self.file_path = file_path


class ToolchainNotFoundError(ReleaseError):
    """Raised when a required executable (cargo, taplo) is not on PATH."""

    component = "toolchain"

    def __init__(self, executable: str) -> None:
        super().__init__(f"Executable '{executable}' not found on PATH")
        self.executable = executable


class DependencyBuildError(ReleaseError):
    """Raised when an external dependency fails to fetch or compile.

    Fatal to the whole pipeline run: there is no partial dependency set.
    """

    component = "dependency_cache_builder"


class SourceCompileError(ReleaseError):
    """Raised when the project's own source fails to compile.

    The compiler output is kept verbatim in ``compiler_output``.
    """

    component = "project_builder"

    def __init__(
        self,
        user_message: str,
        *,
        compiler_output: str = "",
        component: str | None = None,
    ) -> None:
        super().__init__(
            user_message, component=component, internal_details=compiler_output or None
        )
        self.compiler_output = compiler_output


class LockMismatchError(ReleaseError):
    """Raised when declared and locked dependency versions drift apart.

    Strict dependency mode never resolves the drift automatically.

    Attributes:
        drift: One line per detected divergence.
    """

    component = "project_builder"

    def __init__(
        self,
        user_message: str,
        *,
        drift: list[str] | None = None,
        component: str | None = None,
        internal_details: str | None = None,
    ) -> None:
        self.drift = drift or []
        if self.drift:
            user_message = f"{user_message}: " + "; ".join(self.drift)
        super().__init__(user_message, component=component, internal_details=internal_details)


class BuildContractError(ReleaseError):
    """Raised when builder inputs violate their contract.

    Example: a dependency cache artifact built for one triple handed to a
    project build for another.
    """

    component = "project_builder"


class LintViolationError(ReleaseError):
    """Raised when zero-tolerance lint reports any warning."""

    component = "lint_check"


class FormatViolationError(ReleaseError):
    """Raised when source or config files are not canonically formatted.

    Attributes:
        files: Files reported as non-conforming (when the tool names them).
    """

    component = "format_check"

    def __init__(
        self,
        user_message: str,
        *,
        files: list[str] | None = None,
        component: str | None = None,
        internal_details: str | None = None,
    ) -> None:
        super().__init__(user_message, component=component, internal_details=internal_details)
        self.files = files or []


class PackagingError(ReleaseError):
    """Raised when the release artifact cannot be written."""

    component = "release_packager"


class ValidationFailedError(ReleaseError):
    """Raised when packaging is gated on validation and a check did not pass.

    Attributes:
        failed_checks: Names of the checks that did not pass.
    """

    component = "validation_gate"

    def __init__(self, failed_checks: list[str]) -> None:
        super().__init__(f"Validation gate failed: {', '.join(failed_checks)}")
        self.failed_checks = failed_checks
