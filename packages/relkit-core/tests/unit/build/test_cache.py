"""Unit tests for the content-addressed dependency cache."""

from __future__ import annotations

import shutil
from pathlib import Path

import pytest

from relkit_core.build.cache import (
    ARTIFACT_RECORD,
    STAGING_DIR,
    DependencyCache,
    dependency_fingerprint,
)
from relkit_core.build.source import SourceSnapshot

TRIPLE = "x86_64-unknown-linux-gnu"
FINGERPRINT = "ab" * 32


def _staged(cache: DependencyCache, fingerprint: str = FINGERPRINT, triple: str = TRIPLE) -> Path:
    staging = cache.create_staging(fingerprint, triple)
    (staging / "target").mkdir()
    (staging / "target" / "marker").write_text(staging.name)
    return staging


class TestDependencyFingerprint:
    """Tests for dependency_fingerprint()."""

    @pytest.mark.requirement("build.cache.dependency_fingerprint")
    def test_source_edits_keep_fingerprint(self, cargo_project: Path) -> None:
        """Changing project source leaves the dependency graph untouched."""
        before = dependency_fingerprint(SourceSnapshot.capture(cargo_project))
        (cargo_project / "src" / "main.rs").write_text("fn main() { todo!() }\n")

        assert dependency_fingerprint(SourceSnapshot.capture(cargo_project)) == before

    @pytest.mark.requirement("build.cache.dependency_fingerprint")
    def test_manifest_edits_change_fingerprint(self, cargo_project: Path) -> None:
        before = dependency_fingerprint(SourceSnapshot.capture(cargo_project))
        manifest = cargo_project / "Cargo.toml"
        manifest.write_text(manifest.read_text() + 'regex = "1.10"\n')

        assert dependency_fingerprint(SourceSnapshot.capture(cargo_project)) != before


class TestDependencyCache:
    """Tests for DependencyCache."""

    def test_lookup_miss(self, cache_root: Path) -> None:
        assert DependencyCache(cache_root).lookup(FINGERPRINT, TRIPLE) is None

    def test_publish_then_lookup(self, cache_root: Path) -> None:
        cache = DependencyCache(cache_root)

        published = cache.publish(_staged(cache), FINGERPRINT, TRIPLE)
        found = cache.lookup(FINGERPRINT, TRIPLE)

        assert not published.reused
        assert found is not None
        assert found.reused
        assert found.key == f"{FINGERPRINT}-{TRIPLE}"
        assert found.target_dir == cache.entry_path(FINGERPRINT, TRIPLE) / "target"
        assert (found.target_dir / "marker").is_file()

    def test_entries_are_per_triple(self, cache_root: Path) -> None:
        cache = DependencyCache(cache_root)
        cache.publish(_staged(cache), FINGERPRINT, TRIPLE)

        assert cache.lookup(FINGERPRINT, "aarch64-unknown-linux-gnu") is None

    @pytest.mark.requirement("build.cache.DependencyCache.publish")
    def test_second_publisher_keeps_first_entry(self, cache_root: Path) -> None:
        """Concurrent writers of one key converge on a single complete entry."""
        cache = DependencyCache(cache_root)
        first = _staged(cache)
        second = _staged(cache)

        cache.publish(first, FINGERPRINT, TRIPLE)
        result = cache.publish(second, FINGERPRINT, TRIPLE)

        entry = cache.entry_path(FINGERPRINT, TRIPLE)
        assert result.path == entry
        assert (entry / "target" / "marker").read_text() == first.name
        assert not second.exists()
        assert cache.keys() == [f"{FINGERPRINT}-{TRIPLE}"]

    def test_unreadable_record_is_a_miss(self, cache_root: Path) -> None:
        cache = DependencyCache(cache_root)
        cache.publish(_staged(cache), FINGERPRINT, TRIPLE)
        (cache.entry_path(FINGERPRINT, TRIPLE) / ARTIFACT_RECORD).write_text("{not json")

        assert cache.lookup(FINGERPRINT, TRIPLE) is None

    def test_moved_cache_resolves_from_new_root(self, tmp_path: Path) -> None:
        old_root = tmp_path / "old" / "cache"
        cache = DependencyCache(old_root)
        cache.publish(_staged(cache), FINGERPRINT, TRIPLE)
        new_root = tmp_path / "new" / "cache"
        new_root.parent.mkdir()
        shutil.move(str(old_root), str(new_root))

        found = DependencyCache(new_root).lookup(FINGERPRINT, TRIPLE)

        assert found is not None
        assert found.path == new_root / "deps" / f"{FINGERPRINT}-{TRIPLE}"
        assert (found.target_dir / "marker").is_file()

    def test_entry_without_target_dir_is_a_miss(self, cache_root: Path) -> None:
        cache = DependencyCache(cache_root)
        cache.publish(_staged(cache), FINGERPRINT, TRIPLE)
        shutil.rmtree(cache.entry_path(FINGERPRINT, TRIPLE) / "target")

        assert cache.lookup(FINGERPRINT, TRIPLE) is None

    def test_publish_replaces_incomplete_entry(self, cache_root: Path) -> None:
        cache = DependencyCache(cache_root)
        cache.publish(_staged(cache), FINGERPRINT, TRIPLE)
        shutil.rmtree(cache.entry_path(FINGERPRINT, TRIPLE) / "target")
        staging = _staged(cache)

        published = cache.publish(staging, FINGERPRINT, TRIPLE)

        assert (published.target_dir / "marker").read_text() == staging.name
        assert cache.lookup(FINGERPRINT, TRIPLE) is not None

    def test_discard_removes_staging(self, cache_root: Path) -> None:
        cache = DependencyCache(cache_root)
        staging = _staged(cache)

        cache.discard(staging)

        assert not staging.exists()

    def test_prune_keeps_only_listed_keys(self, cache_root: Path) -> None:
        cache = DependencyCache(cache_root)
        other = "cd" * 32
        cache.publish(_staged(cache), FINGERPRINT, TRIPLE)
        cache.publish(_staged(cache, other), other, TRIPLE)
        leftover = _staged(cache)

        removed = cache.prune(keep=[f"{FINGERPRINT}-{TRIPLE}"])

        assert removed == [f"{other}-{TRIPLE}"]
        assert cache.keys() == [f"{FINGERPRINT}-{TRIPLE}"]
        assert not leftover.exists()
        assert not (cache_root / STAGING_DIR).exists()
