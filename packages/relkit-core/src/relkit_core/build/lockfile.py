"""Strict dependency mode: declared vs. locked dependency verification.

Cargo itself refuses to build with ``--locked`` when Cargo.lock is stale;
this module performs the same comparison up front from the manifests so
drift is reported before any compilation starts, and recognises cargo's
own refusal in toolchain output.
"""

from __future__ import annotations

import re
from typing import Any

import structlog

from relkit_core.build.manifest import dependency_tables, load_manifest, local_manifests
from relkit_core.build.source import CARGO_LOCK, SourceSnapshot
from relkit_core.errors import LockMismatchError

logger = structlog.get_logger(__name__)

_LOCKED_REFUSAL = re.compile(r"--locked was passed|lock file .*needs to be updated")
_EXACT_REQUIREMENT = re.compile(r"^=\s*(\d+\.\d+\.\d+\S*)$")


def is_lock_drift(output: str) -> bool:
    """Return True if toolchain output reports a stale lock file."""
    return bool(_LOCKED_REFUSAL.search(output))


def _locked_versions(lock: dict[str, Any]) -> dict[str, set[str]]:
    locked: dict[str, set[str]] = {}
    for package in lock.get("package", []):
        locked.setdefault(package["name"], set()).add(package.get("version", ""))
    return locked


def _declared_dependencies(manifest: dict[str, Any]) -> list[tuple[str, str | None]]:
    """Return (crate name, version requirement) for non-path dependencies."""
    declared: list[tuple[str, str | None]] = []
    for table in dependency_tables(manifest):
        for key, spec in table.items():
            if isinstance(spec, str):
                declared.append((key, spec))
                continue
            if "path" in spec:
                continue
            name = spec.get("package", key)
            version = spec.get("version")
            declared.append((name, version if isinstance(version, str) else None))
    return declared


def _check_manifest(manifest: dict[str, Any], locked: dict[str, set[str]]) -> list[str]:
    drift: list[str] = []

    package = manifest.get("package", {})
    name = package.get("name")
    version = package.get("version")
    if name and isinstance(version, str) and version not in locked.get(name, set()):
        drift.append(f"package {name} {version} is not in {CARGO_LOCK}")

    for dep_name, requirement in _declared_dependencies(manifest):
        versions = locked.get(dep_name)
        if not versions:
            drift.append(f"dependency {dep_name} is declared but not locked")
            continue
        exact = _EXACT_REQUIREMENT.match(requirement.strip()) if requirement else None
        if exact and exact.group(1) not in versions:
            drift.append(
                f"dependency {dep_name} requires ={exact.group(1)}, "
                f"locked {', '.join(sorted(versions))}"
            )
    return drift


def verify_lockfile(snapshot: SourceSnapshot) -> None:
    """Verify that Cargo.lock covers everything Cargo.toml declares.

    Args:
        snapshot: Project source.

    Raises:
        LockMismatchError: If the lock file is missing or has drifted.
        ConfigurationError: If a manifest is not valid TOML.
    """
    lock_path = snapshot.root / CARGO_LOCK
    if CARGO_LOCK not in snapshot.files or not lock_path.is_file():
        raise LockMismatchError(f"{CARGO_LOCK} is missing; strict dependency mode needs a lock")

    locked = _locked_versions(load_manifest(lock_path, "lockfile"))

    drift: list[str] = []
    for manifest in local_manifests(snapshot, "lockfile").values():
        drift.extend(_check_manifest(manifest, locked))

    if drift:
        logger.warning("lock_drift_detected", count=len(drift))
        raise LockMismatchError("Cargo.lock does not match declared dependencies", drift=drift)

    logger.debug("lockfile_verified", packages=len(locked))
