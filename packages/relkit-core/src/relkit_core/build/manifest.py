"""Cargo manifest discovery.

Finds the manifests cargo actually reads for a build: the root manifest,
workspace members and path dependencies reachable from them. Other
``Cargo.toml`` files in the tree (test fixtures, project templates) are
never parsed.
"""

from __future__ import annotations

import posixpath
import tomllib
from pathlib import Path, PurePosixPath
from typing import Any

from relkit_core.build.source import CARGO_MANIFEST, SourceSnapshot
from relkit_core.errors import ConfigurationError

DEPENDENCY_TABLES = ("dependencies", "dev-dependencies", "build-dependencies")


def load_manifest(path: Path, component: str | None = None) -> dict[str, Any]:
    """Parse a TOML file.

    Raises:
        ConfigurationError: If the file is not valid TOML.
    """
    try:
        with open(path, "rb") as f:
            return tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigurationError(
            f"Malformed TOML: {e}", file_path=str(path), component=component
        ) from e


def dependency_tables(manifest: dict[str, Any]) -> list[dict[str, Any]]:
    """Every dependency table of a manifest, platform-specific ones included."""
    tables: list[dict[str, Any]] = [manifest.get(t, {}) for t in DEPENDENCY_TABLES]
    for target in manifest.get("target", {}).values():
        tables.extend(target.get(t, {}) for t in DEPENDENCY_TABLES)
    return tables


def _join(base: PurePosixPath, path: str) -> str:
    return posixpath.normpath((base / path / CARGO_MANIFEST).as_posix())


def _members(root: Path, base: PurePosixPath, manifest: dict[str, Any]) -> list[str]:
    workspace = manifest.get("workspace", {})
    excluded = {posixpath.normpath((base / e).as_posix()) for e in workspace.get("exclude", [])}
    members: list[str] = []
    for pattern in workspace.get("members", []):
        for member_dir in sorted((root / base).glob(pattern)):
            if not member_dir.is_relative_to(root):
                continue
            relative = member_dir.relative_to(root).as_posix()
            if relative not in excluded:
                members.append(f"{relative}/{CARGO_MANIFEST}")
    return members


def _path_dependencies(base: PurePosixPath, manifest: dict[str, Any]) -> list[str]:
    paths: list[str] = []
    tables = dependency_tables(manifest)
    tables.append(manifest.get("workspace", {}).get("dependencies", {}))
    for table in tables:
        for spec in table.values():
            if isinstance(spec, dict) and isinstance(spec.get("path"), str):
                paths.append(_join(base, spec["path"]))
    return paths


def local_manifests(
    snapshot: SourceSnapshot, component: str | None = None
) -> dict[str, dict[str, Any]]:
    """Parse the manifests of every local package in the build.

    Args:
        snapshot: Project source.
        component: Component named in a parse error.

    Returns:
        Snapshot-relative manifest path to parsed manifest, root first.

    Raises:
        ConfigurationError: If one of these manifests is not valid TOML.
    """
    files = set(snapshot.files)
    found: dict[str, dict[str, Any]] = {}
    pending = [CARGO_MANIFEST]
    while pending:
        relative = pending.pop(0)
        if relative in found or relative not in files:
            continue
        manifest = load_manifest(snapshot.path(relative), component)
        found[relative] = manifest
        base = PurePosixPath(relative).parent
        pending.extend(_members(snapshot.root, base, manifest))
        pending.extend(_path_dependencies(base, manifest))
    return found
