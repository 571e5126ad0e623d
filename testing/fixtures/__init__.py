"""Shared test fixtures for relkit packages.

Exports:
    FakeToolchain: Scripted stand-in for cargo and taplo
    tool_step: Step name of a recorded command line
    write_cargo_project: Write a sample binary crate to disk

Usage:
    ```python
    from testing.fixtures import FakeToolchain, write_cargo_project

    project = write_cargo_project(tmp_path / "project")
    toolchain = FakeToolchain()
    toolchain.respond("fmt", returncode=1, stdout="Diff in src/main.rs at line 1:")
    ```
"""

from __future__ import annotations

from testing.fixtures.cargo_projects import CARGO_LOCK, CARGO_TOML, MAIN_RS, write_cargo_project
from testing.fixtures.toolchain import FakeToolchain, tool_step

__all__ = [
    "CARGO_LOCK",
    "CARGO_TOML",
    "MAIN_RS",
    "FakeToolchain",
    "tool_step",
    "write_cargo_project",
]
