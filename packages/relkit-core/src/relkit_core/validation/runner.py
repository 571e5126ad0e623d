"""Validation gate runner.

Orchestrates execution of all validation checks.
"""

from __future__ import annotations

import time
from concurrent.futures import ThreadPoolExecutor
from datetime import UTC, datetime

import structlog

from relkit_core.build.deps import DependencyCacheBuilder
from relkit_core.build.models import CommonBuildInputs, DependencyCacheArtifact
from relkit_core.build.project import ProjectBuilder
from relkit_core.build.toolchain import Toolchain
from relkit_core.errors import ReleaseError
from relkit_core.validation.checks import (
    BaseCheck,
    BuildCheck,
    ConfigFormatCheck,
    LintCheck,
    SourceFormatCheck,
)
from relkit_core.validation.config import (
    BUILD_CHECK,
    FMT_CHECK,
    LINT_CHECK,
    TOML_FMT_CHECK,
    ValidationConfig,
)
from relkit_core.validation.models import CheckResult, CheckStatus, ValidationResult

logger = structlog.get_logger(__name__)


class ValidationRunner:
    """Orchestrates validation check execution.

    Every enabled check runs to completion, in parallel, against the same
    CommonBuildInputs. The verdict is computed only once all of them have
    reported; one failure never cancels or hides another.

    Attributes:
        config: Validation configuration
        toolchain: Toolchain handed to every check
        cache_builder: Builds the dependency artifact for build and lint
        project_builder: Used by the build check

    Example:
        >>> runner = ValidationRunner(ValidationConfig(), toolchain, cache_builder, builder)
        >>> result = runner.run(inputs)
        >>> print(result.overall_status)
    """

    def __init__(
        self,
        config: ValidationConfig,
        toolchain: Toolchain,
        cache_builder: DependencyCacheBuilder,
        project_builder: ProjectBuilder,
    ) -> None:
        """Initialize the runner.

        Args:
            config: Which checks to run and how many at once
            toolchain: Toolchain for the checks
            cache_builder: Dependency cache builder
            project_builder: Project builder for the build check
        """
        self.config = config
        self.toolchain = toolchain
        self.cache_builder = cache_builder
        self.project_builder = project_builder
        self._log = logger.bind(component="validation_gate")

    def run(self, inputs: CommonBuildInputs) -> ValidationResult:
        """Run all configured checks.

        Args:
            inputs: Shared build inputs

        Returns:
            ValidationResult with every check outcome
        """
        start_time = time.monotonic()
        started_at = datetime.now(UTC)

        self._log.info("validation_started", checks=self.config.enabled_checks)

        deps: DependencyCacheArtifact | None = None
        deps_error: Exception | None = None
        if self.config.needs_dependencies:
            try:
                deps = self.cache_builder.build(inputs, self.config.triple)
            except Exception as e:
                # Build and lint report the failure; the other checks still run
                self._log.error("validation_deps_failed", error=str(e), error_type=type(e).__name__)
                deps_error = e

        results = self._run_checks(self._build_checks(inputs, deps, deps_error))

        finished_at = datetime.now(UTC)
        total_duration_ms = int((time.monotonic() - start_time) * 1000)
        overall_status = self._determine_overall_status(results)

        self._log.info(
            "validation_completed",
            overall_status=overall_status.value,
            total_duration_ms=total_duration_ms,
            passed=sum(1 for r in results if r.passed),
            failed=sum(1 for r in results if r.failed),
        )

        return ValidationResult(
            checks=results,
            overall_status=overall_status,
            started_at=started_at,
            finished_at=finished_at,
            total_duration_ms=total_duration_ms,
        )

    def _build_checks(
        self,
        inputs: CommonBuildInputs,
        deps: DependencyCacheArtifact | None,
        deps_error: Exception | None,
    ) -> list[BaseCheck | CheckResult]:
        """Build the checks to run, in report order.

        Checks that cannot run because dependencies failed to build are
        represented by their ERROR result directly.
        """
        triple = self.config.triple
        checks: list[BaseCheck | CheckResult] = []

        for name in self.config.enabled_checks:
            if name in (BUILD_CHECK, LINT_CHECK) and deps is None:
                checks.append(_blocked_result(name, deps_error))
            elif name == BUILD_CHECK and deps is not None:
                checks.append(
                    BuildCheck(inputs, self.toolchain, self.project_builder, deps, triple)
                )
            elif name == LINT_CHECK and deps is not None:
                checks.append(LintCheck(inputs, self.toolchain, deps, triple))
            elif name == FMT_CHECK:
                checks.append(SourceFormatCheck(inputs, self.toolchain))
            elif name == TOML_FMT_CHECK:
                checks.append(ConfigFormatCheck(inputs, self.toolchain))

        return checks

    def _run_checks(self, checks: list[BaseCheck | CheckResult]) -> list[CheckResult]:
        runnable = [c for c in checks if isinstance(c, BaseCheck)]
        if not runnable:
            return [c for c in checks if isinstance(c, CheckResult)]

        with ThreadPoolExecutor(
            max_workers=min(self.config.max_workers, len(runnable)),
            thread_name_prefix="relkit-check",
        ) as pool:
            futures = {id(c): pool.submit(c.run) for c in runnable}
            return [
                c if isinstance(c, CheckResult) else futures[id(c)].result() for c in checks
            ]

    def _determine_overall_status(self, results: list[CheckResult]) -> CheckStatus:
        """Determine overall status from check results.

        Args:
            results: List of individual check results

        Returns:
            Overall status based on all results
        """
        if not results:
            return CheckStatus.SKIPPED

        if any(r.status == CheckStatus.ERROR for r in results):
            return CheckStatus.ERROR

        if any(r.status == CheckStatus.FAILED for r in results):
            return CheckStatus.FAILED

        if all(r.status == CheckStatus.SKIPPED for r in results):
            return CheckStatus.SKIPPED

        return CheckStatus.PASSED


def _blocked_result(name: str, error: Exception | None) -> CheckResult:
    if isinstance(error, ReleaseError):
        message = error.user_message
    elif error is not None:
        message = f"{type(error).__name__}: {error}"
    else:
        message = "Dependencies unavailable"
    details = {"blocked_by": "dependency_cache_builder"}
    if error is not None:
        details["error_type"] = type(error).__name__
    return CheckResult(
        name=name,
        status=CheckStatus.ERROR,
        message=f"Dependency build failed: {message}",
        details=details,
    )


def run_validation(
    inputs: CommonBuildInputs,
    config: ValidationConfig,
    toolchain: Toolchain,
    cache_builder: DependencyCacheBuilder,
    project_builder: ProjectBuilder,
) -> ValidationResult:
    """Run validation checks with the given configuration.

    Convenience function that creates a runner and executes checks.

    Example:
        >>> result = run_validation(inputs, ValidationConfig(), toolchain, cache, builder)
        >>> if result.passed:
        ...     print("All checks passed!")
    """
    runner = ValidationRunner(config, toolchain, cache_builder, project_builder)
    return runner.run(inputs)
