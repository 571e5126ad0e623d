"""Build check: the project must compile in release mode."""

from __future__ import annotations

from relkit_core.build.models import CommonBuildInputs, DependencyCacheArtifact
from relkit_core.build.project import ProjectBuilder
from relkit_core.build.toolchain import Toolchain
from relkit_core.validation.checks.base import BaseCheck
from relkit_core.validation.config import BUILD_CHECK
from relkit_core.validation.models import CheckResult, CheckStatus


class BuildCheck(BaseCheck):
    """Runs the project builder and requires it to produce a binary.

    The build happens in a private directory; the binary is discarded.

    Attributes:
        project_builder: Builder used for the release build
        deps: Dependency artifact for ``triple``
        triple: Compiler triple to build for
    """

    def __init__(
        self,
        inputs: CommonBuildInputs,
        toolchain: Toolchain,
        project_builder: ProjectBuilder,
        deps: DependencyCacheArtifact,
        triple: str,
    ) -> None:
        super().__init__(name=BUILD_CHECK, inputs=inputs, toolchain=toolchain)
        self.project_builder = project_builder
        self.deps = deps
        self.triple = triple

    def _execute(self) -> CheckResult:
        with self._workspace() as work_dir:
            binary = self.project_builder.build(
                self.inputs, self.triple, self.deps, work_dir=work_dir
            )
            return self._make_result(
                CheckStatus.PASSED,
                f"Built {binary.binary_name} for {self.triple}",
                {"triple": self.triple, "deps_reused": self.deps.reused},
            )
