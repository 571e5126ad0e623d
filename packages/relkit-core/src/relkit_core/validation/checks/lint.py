"""Lint check: clippy over every target with warnings denied."""

from __future__ import annotations

import shutil
from typing import Any

from relkit_core.build.cache import TARGET_DIR
from relkit_core.build.lockfile import is_lock_drift
from relkit_core.build.models import CommonBuildInputs, DependencyCacheArtifact
from relkit_core.build.project import SOURCE_DIR
from relkit_core.build.toolchain import Toolchain, cargo_clippy_args
from relkit_core.errors import LintViolationError, LockMismatchError, ReleaseError
from relkit_core.validation.checks.base import BaseCheck
from relkit_core.validation.config import LINT_CHECK
from relkit_core.validation.models import CheckResult, CheckStatus


def count_diagnostics(output: str) -> int:
    """Count ``error``/``warning`` diagnostics in cargo output.

    The trailing ``could not compile`` summary is not a diagnostic.
    """
    count = 0
    for line in output.splitlines():
        if line.startswith(("error:", "error[", "warning:", "warning[")) and (
            "could not compile" not in line and "generated" not in line
        ):
            count += 1
    return count


class LintCheck(BaseCheck):
    """Zero-tolerance static analysis.

    Any warning is escalated to an error, so a project that compiles but
    warns still fails this check. Runs against a private copy of the
    dependency target directory.
    """

    def __init__(
        self,
        inputs: CommonBuildInputs,
        toolchain: Toolchain,
        deps: DependencyCacheArtifact,
        triple: str,
    ) -> None:
        super().__init__(name=LINT_CHECK, inputs=inputs, toolchain=toolchain)
        self.deps = deps
        self.triple = triple

    def _execute(self) -> CheckResult:
        strict = self.inputs.strict_dependencies
        with self._workspace() as work_dir:
            source_dir = self.inputs.snapshot.materialize(work_dir / SOURCE_DIR)
            target_dir = work_dir / TARGET_DIR
            if self.deps.target_dir.is_dir():
                shutil.copytree(self.deps.target_dir, target_dir, symlinks=True)

            result = self.toolchain.run(
                cargo_clippy_args(self.triple, strict=strict),
                cwd=source_dir,
                env={"CARGO_TARGET_DIR": str(target_dir)},
            )

        if result.succeeded:
            return self._make_result(CheckStatus.PASSED, "No lint warnings")

        if strict and is_lock_drift(result.output):
            raise LockMismatchError(
                "Cargo.lock is out of date", component=self.name, internal_details=result.output
            )
        diagnostics = count_diagnostics(result.output)
        raise LintViolationError(
            f"Lint reported {diagnostics} diagnostic(s) with warnings denied",
            internal_details=result.output,
        )

    def _error_details(self, error: ReleaseError) -> dict[str, Any]:
        return {"triple": self.triple}
