"""Data passed between the build components.

Covers the shared inputs handed to every builder and check, and the
artifacts produced along the dependency -> project -> release chain.
"""

from __future__ import annotations

from datetime import UTC, datetime
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

from relkit_core.build.source import SourceSnapshot


class CommonBuildInputs(BaseModel):
    """Configuration shared by the builders and every validation check.

    One instance per pipeline run guarantees that lint, format and build
    all observe the same source state.

    Attributes:
        snapshot: Filtered project source.
        strict_dependencies: Require locked dependency versions (--locked).
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    snapshot: SourceSnapshot
    strict_dependencies: bool = Field(default=True, description="Build with --locked")


class DependencyCacheArtifact(BaseModel):
    """Compiled dependency graph for one (fingerprint, triple) pair.

    Attributes:
        fingerprint: Dependency graph fingerprint.
        triple: Compiler triple the dependencies were built for.
        path: Cache entry directory.
        target_dir: Cargo target directory inside the entry.
        created_at: When the entry was published.
        reused: True when served from an existing entry.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    fingerprint: str = Field(..., min_length=1)
    triple: str = Field(..., min_length=1)
    path: Path
    target_dir: Path
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    reused: bool = False

    @property
    def key(self) -> str:
        """Cache key, unique per (fingerprint, triple)."""
        return cache_key(self.fingerprint, self.triple)


class BinaryArtifact(BaseModel):
    """Release-mode executable produced by the project builder."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    path: Path
    triple: str = Field(..., min_length=1)
    binary_name: str = Field(..., min_length=1)


class ReleaseArtifact(BaseModel):
    """Final, deterministically named release file."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    path: Path
    platform_tag: str = Field(..., min_length=1)


def cache_key(fingerprint: str, triple: str) -> str:
    """Directory name of a cache entry."""
    return f"{fingerprint}-{triple}"
