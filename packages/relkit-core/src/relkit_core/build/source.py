"""Filtered, immutable view of a Cargo project's source tree.

SourceSnapshot keeps only the files that take part in compilation,
so scratch output, VCS metadata and release directories never leak into
builds, fingerprints or checks.
"""

from __future__ import annotations

import hashlib
import os
import shutil
from pathlib import Path

import structlog
from pydantic import BaseModel, ConfigDict, Field

from relkit_core.errors import ConfigurationError

logger = structlog.get_logger(__name__)

CARGO_MANIFEST = "Cargo.toml"
CARGO_LOCK = "Cargo.lock"

# Suffixes of files relevant to compilation
SOURCE_SUFFIXES = (".rs", ".toml")

# Exact file names kept regardless of suffix
SOURCE_FILE_NAMES = frozenset({CARGO_LOCK, "rust-toolchain"})

# Directories never descended into
EXCLUDED_DIRS = frozenset({"target", "dist", "result", "node_modules"})

# Hidden directories that still hold build configuration
ALLOWED_HIDDEN_DIRS = frozenset({".cargo"})

MANIFEST_FILE_NAMES = frozenset(
    {CARGO_MANIFEST, CARGO_LOCK, "rust-toolchain", "rust-toolchain.toml"}
)


def _is_relevant(name: str) -> bool:
    return name in SOURCE_FILE_NAMES or name.endswith(SOURCE_SUFFIXES)


def _skip_dir(name: str) -> bool:
    if name in EXCLUDED_DIRS:
        return True
    return name.startswith(".") and name not in ALLOWED_HIDDEN_DIRS


class SourceSnapshot(BaseModel):
    """Immutable filtered view of a project source tree.

    Attributes:
        root: Absolute project root.
        files: Relative POSIX paths of kept files, sorted.
        digest: sha256 over every kept path and its contents.

    Example:
        >>> snapshot = SourceSnapshot.capture(Path("."))
        >>> "Cargo.toml" in snapshot.files
        True
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    root: Path = Field(..., description="Project root")
    files: tuple[str, ...] = Field(default=(), description="Relative file paths")
    digest: str = Field(..., min_length=64, max_length=64, description="Content digest")

    @classmethod
    def capture(cls, root: Path) -> SourceSnapshot:
        """Walk ``root`` and capture the compilation-relevant files.

        Args:
            root: Project directory containing Cargo.toml.

        Returns:
            A fresh snapshot.

        Raises:
            ConfigurationError: If root is missing or has no Cargo.toml.
        """
        root = root.resolve()
        if not root.is_dir():
            raise ConfigurationError(f"Project directory not found: {root}", component="source")
        if not (root / CARGO_MANIFEST).is_file():
            raise ConfigurationError(
                f"No {CARGO_MANIFEST} in project directory {root}", component="source"
            )

        files: list[str] = []
        for dirpath, dirnames, filenames in os.walk(root):
            dirnames[:] = sorted(d for d in dirnames if not _skip_dir(d))
            base = Path(dirpath)
            for name in filenames:
                if _is_relevant(name) or base.name in ALLOWED_HIDDEN_DIRS:
                    files.append((base / name).relative_to(root).as_posix())

        files.sort()
        digest = _digest(root, files)
        logger.debug("source_captured", root=str(root), files=len(files), digest=digest[:12])
        return cls(root=root, files=tuple(files), digest=digest)

    def path(self, relative: str) -> Path:
        """Absolute path of a snapshot file."""
        return self.root / relative

    def files_with_suffix(self, *suffixes: str) -> tuple[str, ...]:
        """Return the kept files whose name ends with one of ``suffixes``."""
        return tuple(f for f in self.files if f.endswith(suffixes))

    def materialize(self, dest: Path) -> Path:
        """Copy the snapshot's files into ``dest``.

        The copy is checked against the snapshot digest, so a tree edited
        after capture is rejected instead of built.

        Args:
            dest: Directory to copy into (created if absent).

        Returns:
            ``dest``.

        Raises:
            ConfigurationError: If the source changed since capture or a file
                can no longer be read.
        """
        for relative in self.files:
            target = dest / relative
            target.parent.mkdir(parents=True, exist_ok=True)
            try:
                shutil.copy2(self.path(relative), target)
            except OSError as e:
                raise ConfigurationError(
                    f"Source tree {self.root} changed after it was captured",
                    component="source",
                    internal_details=f"cannot copy {relative}: {e}",
                ) from e

        if _digest(dest, list(self.files)) != self.digest:
            raise ConfigurationError(
                f"Source tree {self.root} changed after it was captured", component="source"
            )
        return dest

    def manifest_files(self) -> tuple[str, ...]:
        """Return the files that define the dependency graph.

        Cargo manifests at any depth, the lock file, toolchain pins and
        everything under ``.cargo/``.
        """
        return tuple(
            f
            for f in self.files
            if Path(f).name in MANIFEST_FILE_NAMES or f.split("/", 1)[0] == ".cargo"
        )


def _digest(root: Path, files: list[str]) -> str:
    hasher = hashlib.sha256()
    for relative in files:
        hasher.update(relative.encode("utf-8"))
        hasher.update(b"\0")
        hasher.update((root / relative).read_bytes())
        hasher.update(b"\0")
    return hasher.hexdigest()


def fingerprint_files(root: Path, files: tuple[str, ...]) -> str:
    """sha256 over the given relative files (path and contents)."""
    return _digest(root, sorted(files))
