"""Unit tests for strict dependency verification."""

from __future__ import annotations

from pathlib import Path

import pytest

from relkit_core.build.lockfile import is_lock_drift, verify_lockfile
from relkit_core.build.source import SourceSnapshot
from relkit_core.errors import ConfigurationError, LockMismatchError


def _capture(project: Path) -> SourceSnapshot:
    return SourceSnapshot.capture(project)


class TestVerifyLockfile:
    """Tests for verify_lockfile()."""

    @pytest.mark.requirement("build.lockfile.verify_lockfile")
    def test_matching_lock_passes(self, snapshot: SourceSnapshot) -> None:
        verify_lockfile(snapshot)

    @pytest.mark.requirement("build.lockfile.verify_lockfile")
    def test_missing_lock(self, cargo_project: Path) -> None:
        (cargo_project / "Cargo.lock").unlink()

        with pytest.raises(LockMismatchError, match="missing"):
            verify_lockfile(_capture(cargo_project))

    @pytest.mark.requirement("build.lockfile.verify_lockfile")
    def test_unlocked_dependency_is_drift(self, cargo_project: Path) -> None:
        """A dependency added to Cargo.toml but not locked is reported."""
        manifest = cargo_project / "Cargo.toml"
        manifest.write_text(manifest.read_text() + 'regex = "1.10"\n')

        with pytest.raises(LockMismatchError) as exc_info:
            verify_lockfile(_capture(cargo_project))

        assert exc_info.value.drift == ["dependency regex is declared but not locked"]

    @pytest.mark.requirement("build.lockfile.verify_lockfile")
    def test_exact_requirement_must_match_lock(self, cargo_project: Path) -> None:
        manifest = cargo_project / "Cargo.toml"
        manifest.write_text(manifest.read_text().replace('serde = "1.0"', 'serde = "=1.0.200"'))

        with pytest.raises(LockMismatchError, match="requires =1.0.200"):
            verify_lockfile(_capture(cargo_project))

    def test_package_version_must_be_locked(self, cargo_project: Path) -> None:
        """Bumping the crate version without relocking is drift."""
        manifest = cargo_project / "Cargo.toml"
        manifest.write_text(manifest.read_text().replace('version = "0.1.0"', 'version = "0.2.0"'))

        with pytest.raises(LockMismatchError, match="gh-jj 0.2.0"):
            verify_lockfile(_capture(cargo_project))

    def test_path_dependencies_are_ignored(self, cargo_project: Path) -> None:
        manifest = cargo_project / "Cargo.toml"
        manifest.write_text(manifest.read_text() + 'helper = { path = "../helper" }\n')

        verify_lockfile(_capture(cargo_project))

    def test_renamed_dependency_uses_package_name(self, cargo_project: Path) -> None:
        manifest = cargo_project / "Cargo.toml"
        manifest.write_text(
            manifest.read_text() + 'serde_alias = { package = "serde", version = "1.0" }\n'
        )

        verify_lockfile(_capture(cargo_project))

    def test_malformed_manifest(self, cargo_project: Path) -> None:
        (cargo_project / "Cargo.toml").write_text("[package\nname = ")

        with pytest.raises(ConfigurationError, match="Malformed TOML"):
            verify_lockfile(_capture(cargo_project))

    def test_template_manifests_are_ignored(self, cargo_project: Path) -> None:
        template = cargo_project / "templates" / "crate"
        template.mkdir(parents=True)
        (template / "Cargo.toml").write_text("[package]\nversion = {{ver}}\n")

        verify_lockfile(_capture(cargo_project))

    def test_workspace_member_must_be_locked(self, cargo_project: Path) -> None:
        member = cargo_project / "crates" / "core"
        member.mkdir(parents=True)
        (member / "Cargo.toml").write_text('[package]\nname = "jj-core"\nversion = "0.1.0"\n')
        manifest = cargo_project / "Cargo.toml"
        manifest.write_text(manifest.read_text() + '\n[workspace]\nmembers = ["crates/*"]\n')

        with pytest.raises(LockMismatchError, match="jj-core 0.1.0"):
            verify_lockfile(_capture(cargo_project))


class TestIsLockDrift:
    """Tests for recognising cargo's --locked refusal."""

    def test_recognises_locked_refusal(self) -> None:
        output = (
            "error: the lock file /src/Cargo.lock needs to be updated but --locked was passed "
            "to prevent this"
        )
        assert is_lock_drift(output)

    def test_ignores_compile_errors(self) -> None:
        assert not is_lock_drift("error[E0425]: cannot find value `x` in this scope")
