"""Content-addressed store for compiled dependency graphs.

Entries are keyed by (dependency fingerprint, compiler triple) and live at
``<root>/deps/<fingerprint>-<triple>/``. An entry only becomes visible once
it is complete: builders stage into a private directory and publish it
with an atomic rename.
"""

from __future__ import annotations

import shutil
import uuid
from collections.abc import Iterable
from datetime import UTC, datetime
from pathlib import Path

import structlog
from pydantic import ValidationError as PydanticValidationError

from relkit_core.build.models import DependencyCacheArtifact, cache_key
from relkit_core.build.source import SourceSnapshot, fingerprint_files

logger = structlog.get_logger(__name__)

ARTIFACT_RECORD = "artifact.json"
ENTRIES_DIR = "deps"
STAGING_DIR = "staging"
TARGET_DIR = "target"


def dependency_fingerprint(snapshot: SourceSnapshot) -> str:
    """Fingerprint the dependency graph of a snapshot.

    Only manifests, the lock file and toolchain configuration contribute,
    so editing project source leaves the fingerprint unchanged.
    """
    return fingerprint_files(snapshot.root, snapshot.manifest_files())


class DependencyCache:
    """Local store of dependency cache entries.

    Attributes:
        root: Cache root directory.

    Example:
        >>> cache = DependencyCache(Path(".relkit/cache"))
        >>> cache.lookup(fingerprint, "x86_64-unknown-linux-gnu") is None
        True
    """

    def __init__(self, root: Path) -> None:
        self.root = root
        self._log = logger.bind(component="dependency_cache", root=str(root))

    @property
    def entries_dir(self) -> Path:
        return self.root / ENTRIES_DIR

    def entry_path(self, fingerprint: str, triple: str) -> Path:
        return self.entries_dir / cache_key(fingerprint, triple)

    def lookup(self, fingerprint: str, triple: str) -> DependencyCacheArtifact | None:
        """Return the published artifact for a key, or None.

        Locations are derived from the cache root, so an entry stays valid
        when the cache directory is moved. An entry without a readable record
        or without its target directory is treated as absent.
        """
        entry = self.entry_path(fingerprint, triple)
        record = entry / ARTIFACT_RECORD
        if not record.is_file():
            return None
        try:
            artifact = DependencyCacheArtifact.model_validate_json(record.read_text())
        except PydanticValidationError:
            self._log.warning("cache_record_unreadable", record=str(record))
            return None
        if not (entry / TARGET_DIR).is_dir():
            self._log.warning("cache_entry_incomplete", entry=str(entry))
            return None
        return artifact.model_copy(
            update={"path": entry, "target_dir": entry / TARGET_DIR, "reused": True}
        )

    def create_staging(self, fingerprint: str, triple: str) -> Path:
        """Create a private staging directory for a new entry."""
        staging = self.root / STAGING_DIR / f"{cache_key(fingerprint, triple)}.{uuid.uuid4().hex}"
        staging.mkdir(parents=True)
        return staging

    def publish(self, staging: Path, fingerprint: str, triple: str) -> DependencyCacheArtifact:
        """Publish a fully built staging directory as the entry for a key.

        If a concurrent run already published the same key, its entry is
        kept and the staging directory discarded.

        Args:
            staging: Directory produced by create_staging() and filled by a build.
            fingerprint: Dependency fingerprint.
            triple: Compiler triple.

        Returns:
            The artifact now stored under the key.
        """
        final = self.entry_path(fingerprint, triple)
        artifact = DependencyCacheArtifact(
            fingerprint=fingerprint,
            triple=triple,
            path=final,
            target_dir=final / TARGET_DIR,
            created_at=datetime.now(UTC),
        )
        (staging / ARTIFACT_RECORD).write_text(artifact.model_dump_json(indent=2))

        self.entries_dir.mkdir(parents=True, exist_ok=True)
        if final.exists() and self.lookup(fingerprint, triple) is None:
            # Broken entry left behind; replace it
            shutil.rmtree(final, ignore_errors=True)
        try:
            staging.rename(final)
        except OSError:
            existing = self.lookup(fingerprint, triple)
            if existing is None:
                raise
            shutil.rmtree(staging, ignore_errors=True)
            self._log.info("cache_publish_lost_race", key=artifact.key)
            return existing.model_copy(update={"reused": False})

        self._log.info("cache_published", key=artifact.key)
        return artifact

    def discard(self, staging: Path) -> None:
        """Remove a staging directory left by a failed build."""
        shutil.rmtree(staging, ignore_errors=True)

    def keys(self) -> list[str]:
        """Keys of all published entries."""
        if not self.entries_dir.is_dir():
            return []
        return sorted(
            p.name for p in self.entries_dir.iterdir() if (p / ARTIFACT_RECORD).is_file()
        )

    def prune(self, keep: Iterable[str]) -> list[str]:
        """Remove every published entry whose key is not in ``keep``.

        Leftover staging directories are removed as well, so this must not
        run while a dependency build is in progress.

        Returns:
            Keys that were removed.
        """
        keep_set = set(keep)
        removed: list[str] = []
        for key in self.keys():
            if key in keep_set:
                continue
            shutil.rmtree(self.entries_dir / key)
            removed.append(key)
        shutil.rmtree(self.root / STAGING_DIR, ignore_errors=True)
        self._log.info("cache_pruned", removed=len(removed), kept=len(keep_set))
        return removed
