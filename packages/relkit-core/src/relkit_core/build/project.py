"""Project builder.

Compiles the project's own source into a release-mode binary for one
compiler triple, on top of a dependency cache artifact built for the
same triple and dependency graph.
"""

from __future__ import annotations

import shutil
from pathlib import Path

import structlog

from relkit_core.build.cache import TARGET_DIR, dependency_fingerprint
from relkit_core.build.lockfile import is_lock_drift, verify_lockfile
from relkit_core.build.models import BinaryArtifact, CommonBuildInputs, DependencyCacheArtifact
from relkit_core.build.toolchain import Toolchain, cargo_build_args
from relkit_core.errors import BuildContractError, LockMismatchError, SourceCompileError

logger = structlog.get_logger(__name__)

SOURCE_DIR = "source"


def binary_file_name(binary_name: str, triple: str) -> str:
    """File name cargo gives the binary for ``triple``."""
    return f"{binary_name}.exe" if "windows" in triple else binary_name


def binary_output_path(target_dir: Path, triple: str, binary_name: str) -> Path:
    """Deterministic, triple-qualified location of a release binary."""
    return target_dir / triple / "release" / binary_file_name(binary_name, triple)


class ProjectBuilder:
    """Compiles the project into a release binary.

    Attributes:
        toolchain: Toolchain used to run cargo.
        binary_name: Name of the binary target to produce.

    Example:
        >>> builder = ProjectBuilder(Toolchain(), binary_name="gh-jj")
        >>> binary = builder.build(inputs, triple, deps, work_dir=Path("/tmp/work"))
        >>> binary.path.name
        'gh-jj'
    """

    def __init__(self, toolchain: Toolchain, binary_name: str) -> None:
        self.toolchain = toolchain
        self.binary_name = binary_name
        self._log = logger.bind(component="project_builder", binary=binary_name)

    def build(
        self,
        inputs: CommonBuildInputs,
        triple: str,
        deps: DependencyCacheArtifact,
        *,
        work_dir: Path,
    ) -> BinaryArtifact:
        """Compile the project for ``triple``.

        Args:
            inputs: Shared build inputs.
            triple: Compiler triple.
            deps: Dependency artifact for the same triple.
            work_dir: Private directory for the source copy and target dir.

        Returns:
            BinaryArtifact at ``work_dir/target/<triple>/release/<binary>``.

        Raises:
            BuildContractError: If ``deps`` was built for another triple or graph.
            LockMismatchError: If strict mode detects lock drift.
            SourceCompileError: If the project fails to compile.
        """
        self._check_contract(inputs, triple, deps)
        if inputs.strict_dependencies:
            verify_lockfile(inputs.snapshot)

        log = self._log.bind(triple=triple, deps_key=deps.key[:24])
        source_dir = inputs.snapshot.materialize(work_dir / SOURCE_DIR)
        target_dir = work_dir / TARGET_DIR
        if deps.target_dir.is_dir():
            shutil.copytree(deps.target_dir, target_dir, symlinks=True, dirs_exist_ok=True)

        log.info("project_build_started")
        result = self.toolchain.run(
            cargo_build_args(triple, strict=inputs.strict_dependencies),
            cwd=source_dir,
            env={"CARGO_TARGET_DIR": str(target_dir)},
        )

        if not result.succeeded:
            if inputs.strict_dependencies and is_lock_drift(result.output):
                raise LockMismatchError(
                    "Cargo.lock is out of date and strict dependency mode forbids updating it",
                    internal_details=result.output,
                )
            raise SourceCompileError(
                f"Compilation failed for {triple} (exit {result.returncode})",
                compiler_output=result.output,
            )

        binary_path = binary_output_path(target_dir, triple, self.binary_name)
        if not binary_path.is_file():
            raise SourceCompileError(
                f"Build succeeded but produced no binary at {binary_path}",
                compiler_output=result.output,
            )

        log.info("project_build_completed", path=str(binary_path))
        return BinaryArtifact(path=binary_path, triple=triple, binary_name=self.binary_name)

    def _check_contract(
        self, inputs: CommonBuildInputs, triple: str, deps: DependencyCacheArtifact
    ) -> None:
        if deps.triple != triple:
            raise BuildContractError(
                f"Dependency artifact was built for {deps.triple}, not {triple}"
            )
        if deps.fingerprint != dependency_fingerprint(inputs.snapshot):
            raise BuildContractError(
                "Dependency artifact does not match the project's dependency graph"
            )
