"""Sample Cargo projects written to disk for relkit tests."""

from __future__ import annotations

from pathlib import Path

CARGO_TOML = """\
[package]
name = "gh-jj"
version = "0.1.0"
edition = "2021"

[dependencies]
serde = "1.0"
anyhow = { version = "1.0" }
"""

CARGO_LOCK = """\
version = 3

[[package]]
name = "anyhow"
version = "1.0.81"

[[package]]
name = "gh-jj"
version = "0.1.0"
dependencies = ["anyhow", "serde"]

[[package]]
name = "serde"
version = "1.0.197"
"""

MAIN_RS = 'fn main() {\n    println!("gh-jj");\n}\n'


def write_cargo_project(root: Path) -> Path:
    """Write a small binary crate into ``root``.

    Besides the crate itself, the tree holds build output, VCS metadata
    and a release directory that snapshots must ignore.

    Returns:
        ``root``.
    """
    (root / "src").mkdir(parents=True)
    (root / "Cargo.toml").write_text(CARGO_TOML)
    (root / "Cargo.lock").write_text(CARGO_LOCK)
    (root / "src" / "main.rs").write_text(MAIN_RS)
    (root / "README.md").write_text("# gh-jj\n")
    (root / "target" / "debug").mkdir(parents=True)
    (root / "target" / "debug" / "stale.rs").write_text("// stale\n")
    (root / ".git").mkdir()
    (root / ".git" / "config.toml").write_text("[core]\n")
    (root / "dist").mkdir()
    (root / "dist" / "notes.txt").write_text("keep me\n")
    return root
