"""Build chain: source snapshot, dependency cache and project compilation."""

from __future__ import annotations

from relkit_core.build.cache import DependencyCache, dependency_fingerprint
from relkit_core.build.deps import DependencyCacheBuilder
from relkit_core.build.lockfile import is_lock_drift, verify_lockfile
from relkit_core.build.models import (
    BinaryArtifact,
    CommonBuildInputs,
    DependencyCacheArtifact,
    ReleaseArtifact,
)
from relkit_core.build.project import ProjectBuilder, binary_output_path
from relkit_core.build.source import SourceSnapshot
from relkit_core.build.toolchain import Toolchain, ToolResult

__all__ = [
    "BinaryArtifact",
    "CommonBuildInputs",
    "DependencyCache",
    "DependencyCacheArtifact",
    "DependencyCacheBuilder",
    "ProjectBuilder",
    "ReleaseArtifact",
    "SourceSnapshot",
    "ToolResult",
    "Toolchain",
    "binary_output_path",
    "dependency_fingerprint",
    "is_lock_drift",
    "verify_lockfile",
]
