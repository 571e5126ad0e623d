"""relkit-core: Release build pipeline for Cargo projects.

This package provides:
- Target resolution: compiler triple and platform tag for a run
- Build chain: source snapshot, dependency cache, project compilation
- Validation gate: build, lint and formatting checks
- Release packaging: ``<binary>-<tag>`` files in the output directory
- ReleasePipeline: the whole run, configured by PipelineConfig
"""

from __future__ import annotations

__version__ = "0.1.0"

# Build chain
from relkit_core.build import (
    BinaryArtifact,
    CommonBuildInputs,
    DependencyCache,
    DependencyCacheArtifact,
    DependencyCacheBuilder,
    ProjectBuilder,
    ReleaseArtifact,
    SourceSnapshot,
    Toolchain,
)
from relkit_core.config import CONFIG_FILE_NAME, PipelineConfig

# Error types
from relkit_core.errors import (
    BuildContractError,
    ConfigurationError,
    DependencyBuildError,
    FormatViolationError,
    LintViolationError,
    LockMismatchError,
    PackagingError,
    ReleaseError,
    SourceCompileError,
    ToolchainNotFoundError,
    ValidationFailedError,
)
from relkit_core.packager import DEFAULT_BINARY_NAME, ReleasePackager, release_file_name_for
from relkit_core.pipeline import ReleasePipeline
from relkit_core.platforms import (
    DEFAULT_TAG,
    DEFAULT_TRIPLE,
    Platform,
    PlatformRequest,
    resolve_platform,
)

# Validation gate
from relkit_core.validation import (
    CheckResult,
    CheckStatus,
    ValidationConfig,
    ValidationResult,
)

__all__ = [
    "__version__",
    # Pipeline
    "ReleasePipeline",
    "PipelineConfig",
    "CONFIG_FILE_NAME",
    # Platforms
    "Platform",
    "PlatformRequest",
    "resolve_platform",
    "DEFAULT_TRIPLE",
    "DEFAULT_TAG",
    # Build chain
    "SourceSnapshot",
    "CommonBuildInputs",
    "Toolchain",
    "DependencyCache",
    "DependencyCacheArtifact",
    "DependencyCacheBuilder",
    "ProjectBuilder",
    "BinaryArtifact",
    "ReleaseArtifact",
    # Packaging
    "ReleasePackager",
    "release_file_name_for",
    "DEFAULT_BINARY_NAME",
    # Validation
    "ValidationConfig",
    "ValidationResult",
    "CheckResult",
    "CheckStatus",
    # Errors
    "ReleaseError",
    "ConfigurationError",
    "ToolchainNotFoundError",
    "DependencyBuildError",
    "SourceCompileError",
    "LockMismatchError",
    "BuildContractError",
    "LintViolationError",
    "FormatViolationError",
    "PackagingError",
    "ValidationFailedError",
]
