"""Dependency cache builder.

Compiles only the external dependency graph of the project for one
compiler triple. The project's own targets are replaced by stubs in a
staged copy of the manifests, so the result depends on nothing but the
manifests and the lock file and can be reused until they change.
"""

from __future__ import annotations

import shutil
from pathlib import Path, PurePosixPath
from typing import Any

import structlog

from relkit_core.build.cache import TARGET_DIR, DependencyCache, dependency_fingerprint
from relkit_core.build.lockfile import is_lock_drift, verify_lockfile
from relkit_core.build.manifest import local_manifests
from relkit_core.build.models import CommonBuildInputs, DependencyCacheArtifact
from relkit_core.build.source import SourceSnapshot
from relkit_core.build.toolchain import (
    Toolchain,
    ToolResult,
    cargo_build_args,
    cargo_check_args,
)
from relkit_core.errors import DependencyBuildError, LockMismatchError

logger = structlog.get_logger(__name__)

WORKSPACE_DIR = "workspace"

LIB_STUB = "// dependency-only build\n"
MAIN_STUB = "#![allow(dead_code)]\nfn main() {}\n"

# Directories cargo auto-discovers targets from
AUTO_TARGET_DIRS = ("src/bin", "tests", "benches", "examples")
TARGET_TABLES = ("bin", "test", "bench", "example")


def _target_roots(
    manifest_dir: PurePosixPath,
    manifest: dict[str, Any],
    files: set[str],
) -> dict[str, str]:
    """Map each crate-root file of one package to the stub that replaces it."""

    def rel(path: str) -> str:
        return (manifest_dir / path).as_posix() if manifest_dir.parts else path

    roots: dict[str, str] = {}
    lib_path = manifest.get("lib", {}).get("path", "src/lib.rs")
    if rel(lib_path) in files or "lib" in manifest:
        roots[rel(lib_path)] = LIB_STUB
    if rel("src/main.rs") in files:
        roots[rel("src/main.rs")] = MAIN_STUB

    build = manifest.get("package", {}).get("build")
    if isinstance(build, str):
        roots[rel(build)] = MAIN_STUB
    elif build is not False and rel("build.rs") in files:
        roots[rel("build.rs")] = MAIN_STUB

    for table in TARGET_TABLES:
        for target in manifest.get(table, []):
            if "path" in target:
                roots[rel(target["path"])] = MAIN_STUB

    for auto_dir in AUTO_TARGET_DIRS:
        prefix = rel(auto_dir) + "/"
        for f in files:
            rest = f[len(prefix) :] if f.startswith(prefix) else None
            if rest is None or not rest.endswith(".rs"):
                continue
            # Single-file targets and <name>/main.rs targets only
            if "/" not in rest or (rest.count("/") == 1 and rest.endswith("/main.rs")):
                roots[f] = MAIN_STUB
    return roots


def stage_dummy_workspace(snapshot: SourceSnapshot, dest: Path) -> list[str]:
    """Copy manifests into ``dest`` and stub out every local target.

    Only the root package, workspace members and path dependencies are
    stubbed; other manifests in the tree are copied but never parsed.

    Args:
        snapshot: Project source.
        dest: Empty directory to stage into.

    Returns:
        Names of the local packages.

    Raises:
        ConfigurationError: If a local manifest is not valid TOML.
    """
    files = set(snapshot.files)
    package_names: list[str] = []

    for relative in snapshot.manifest_files():
        target = dest / relative
        target.parent.mkdir(parents=True, exist_ok=True)
        shutil.copyfile(snapshot.path(relative), target)

    manifests = local_manifests(snapshot, "dependency_cache_builder")
    for relative, manifest in manifests.items():
        path = PurePosixPath(relative)
        name = manifest.get("package", {}).get("name")
        if name:
            package_names.append(name)
        for stub_path, stub in _target_roots(path.parent, manifest, files).items():
            stub_file = dest / stub_path
            stub_file.parent.mkdir(parents=True, exist_ok=True)
            stub_file.write_text(stub)

    return package_names


def purge_local_units(target_dir: Path, package_names: list[str]) -> int:
    """Delete cargo fingerprints of local packages built from stubs.

    Forces cargo to rebuild the project's own crates when the cached target
    directory is reused, while keeping every dependency unit fresh.

    Returns:
        Number of fingerprint directories removed.
    """
    if not target_dir.is_dir():
        return 0
    prefixes = tuple(f"{name}-" for name in package_names)
    prefixes += tuple(f"{name.replace('-', '_')}-" for name in package_names)
    removed = 0
    for fingerprint_dir in list(target_dir.rglob(".fingerprint")):
        for unit in fingerprint_dir.iterdir():
            if unit.name.startswith(prefixes):
                shutil.rmtree(unit)
                removed += 1
    return removed


class DependencyCacheBuilder:
    """Builds or reuses the compiled dependency graph for a triple.

    Attributes:
        toolchain: Toolchain used to run cargo.
        cache: Content-addressed dependency store.

    Example:
        >>> builder = DependencyCacheBuilder(Toolchain(), DependencyCache(Path(".relkit/cache")))
        >>> artifact = builder.build(inputs, "x86_64-unknown-linux-gnu")
        >>> artifact.reused
        False
    """

    def __init__(self, toolchain: Toolchain, cache: DependencyCache) -> None:
        self.toolchain = toolchain
        self.cache = cache
        self._log = logger.bind(component="dependency_cache_builder")

    def build(self, inputs: CommonBuildInputs, triple: str) -> DependencyCacheArtifact:
        """Return the dependency artifact for ``triple``, compiling on a cache miss.

        Args:
            inputs: Shared build inputs.
            triple: Compiler triple.

        Returns:
            DependencyCacheArtifact for (fingerprint, triple).

        Raises:
            DependencyBuildError: If any dependency fails to fetch or compile.
            LockMismatchError: If strict mode detects lock drift.
        """
        snapshot = inputs.snapshot
        if inputs.strict_dependencies:
            try:
                verify_lockfile(snapshot)
            except LockMismatchError as e:
                e.component = "dependency_cache_builder"
                raise

        fingerprint = dependency_fingerprint(snapshot)
        log = self._log.bind(fingerprint=fingerprint[:12], triple=triple)

        cached = self.cache.lookup(fingerprint, triple)
        if cached is not None:
            log.info("deps_cache_hit")
            return cached

        log.info("deps_cache_miss")
        staging = self.cache.create_staging(fingerprint, triple)
        try:
            workspace = staging / WORKSPACE_DIR
            workspace.mkdir()
            package_names = stage_dummy_workspace(snapshot, workspace)

            env = {"CARGO_TARGET_DIR": str(staging / TARGET_DIR)}
            strict = inputs.strict_dependencies
            commands = (
                cargo_check_args(triple, strict=strict),
                cargo_build_args(triple, strict=strict),
            )
            for args in commands:
                result = self.toolchain.run(args, cwd=workspace, env=env)
                if not result.succeeded:
                    self._raise_for(result, triple)

            purged = purge_local_units(staging / TARGET_DIR, package_names)
            shutil.rmtree(workspace)
            log.debug("local_units_purged", count=purged)
        except BaseException:
            self.cache.discard(staging)
            raise

        artifact = self.cache.publish(staging, fingerprint, triple)
        log.info("deps_built", key=artifact.key)
        return artifact

    def _raise_for(self, result: ToolResult, triple: str) -> None:
        if is_lock_drift(result.output):
            raise LockMismatchError(
                "Cargo.lock is out of date and strict dependency mode forbids updating it",
                component="dependency_cache_builder",
                internal_details=result.output,
            )
        raise DependencyBuildError(
            f"Dependency compilation failed for {triple} (exit {result.returncode})",
            internal_details=result.output,
        )
