"""Release pipeline orchestration.

Wires the target resolver, source snapshot, dependency cache, project
builder, validation gate and release packager into one sequential run:

    resolve -> snapshot -> inputs -> deps -> build -> package

Every stage receives its inputs explicitly; nothing is read from the
environment here.
"""

from __future__ import annotations

import tempfile
from pathlib import Path

import structlog

from relkit_core.build.cache import DependencyCache, dependency_fingerprint
from relkit_core.build.deps import DependencyCacheBuilder
from relkit_core.build.models import CommonBuildInputs, ReleaseArtifact
from relkit_core.build.project import ProjectBuilder
from relkit_core.build.source import SourceSnapshot
from relkit_core.build.toolchain import Toolchain
from relkit_core.config import PipelineConfig
from relkit_core.errors import ValidationFailedError
from relkit_core.packager import ReleasePackager
from relkit_core.platforms import PlatformRequest, resolve_platform
from relkit_core.validation.config import ValidationConfig
from relkit_core.validation.models import ValidationResult
from relkit_core.validation.runner import ValidationRunner

logger = structlog.get_logger(__name__)


class ReleasePipeline:
    """Builds one release binary for one platform.

    Attributes:
        config: Pipeline configuration.
        toolchain: Toolchain shared by every stage.
        cache: Dependency cache under ``config.resolved_cache_dir``.

    Example:
        >>> pipeline = ReleasePipeline(PipelineConfig(project_dir=Path(".")))
        >>> artifact = pipeline.build_release()
        >>> artifact.path.name
        'gh-jj-linux-amd64'
    """

    def __init__(self, config: PipelineConfig, toolchain: Toolchain | None = None) -> None:
        self.config = config
        self.toolchain = toolchain or Toolchain()
        self.cache = DependencyCache(config.resolved_cache_dir)
        self.cache_builder = DependencyCacheBuilder(self.toolchain, self.cache)
        self.project_builder = ProjectBuilder(self.toolchain, config.binary_name)
        self.packager = ReleasePackager(config.resolved_output_dir, config.binary_name)
        self._log = logger.bind(component="pipeline", project_dir=str(config.resolved_project_dir))

    def resolve(self) -> PlatformRequest:
        """Resolve the platform request from the configured overrides."""
        return resolve_platform(
            self.config.compiler_triple,
            self.config.platform_tag,
            strict=self.config.strict_platform,
        )

    def inputs(self) -> CommonBuildInputs:
        """Capture the source snapshot and wrap it as shared build inputs."""
        snapshot = SourceSnapshot.capture(self.config.resolved_project_dir)
        return CommonBuildInputs(
            snapshot=snapshot,
            strict_dependencies=self.config.strict_dependencies,
        )

    def build_release(self) -> ReleaseArtifact:
        """Run the full pipeline and place the release binary.

        Stages run strictly in order and the first error aborts the run.
        When ``require_validation`` is set, the validation gate runs before
        anything is compiled for release.

        Returns:
            ReleaseArtifact at ``<output_dir>/<binary_name>-<tag>``.

        Raises:
            ReleaseError: The failing stage's error, unchanged.
            ValidationFailedError: If the gate is required and does not pass.
        """
        request = self.resolve()
        log = self._log.bind(triple=request.compiler_triple, platform_tag=request.release_tag)
        log.info("pipeline_started")

        inputs = self.inputs()

        if self.config.require_validation:
            result = self._run_gate(inputs, ValidationConfig())
            if not result.passed:
                log.error("pipeline_gate_failed", failed=result.failed_names)
                raise ValidationFailedError(result.failed_names)

        deps = self.cache_builder.build(inputs, request.compiler_triple)

        with tempfile.TemporaryDirectory(prefix="relkit-build-") as tmp:
            binary = self.project_builder.build(
                inputs, request.compiler_triple, deps, work_dir=Path(tmp)
            )
            artifact = self.packager.package(binary, request)

        log.info("pipeline_completed", path=str(artifact.path), deps_reused=deps.reused)
        return artifact

    def validate(self, validation_config: ValidationConfig | None = None) -> ValidationResult:
        """Run the validation gate only.

        Nothing is written to the output directory.

        Args:
            validation_config: Checks to run (default: all four).

        Returns:
            ValidationResult with the verdict and every check outcome.
        """
        return self._run_gate(self.inputs(), validation_config or ValidationConfig())

    def prune_cache(self) -> list[str]:
        """Drop cache entries for every dependency graph but the current one.

        Returns:
            Keys that were removed.
        """
        snapshot = SourceSnapshot.capture(self.config.resolved_project_dir)
        prefix = f"{dependency_fingerprint(snapshot)}-"
        keep = [key for key in self.cache.keys() if key.startswith(prefix)]
        return self.cache.prune(keep)

    def _run_gate(
        self, inputs: CommonBuildInputs, validation_config: ValidationConfig
    ) -> ValidationResult:
        runner = ValidationRunner(
            validation_config,
            self.toolchain,
            self.cache_builder,
            self.project_builder,
        )
        return runner.run(inputs)
