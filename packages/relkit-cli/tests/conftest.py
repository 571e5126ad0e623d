"""Shared test fixtures for relkit-cli tests.

Provides CliRunner fixtures and a sample Cargo project for testing CLI
commands.
"""

from __future__ import annotations

import logging
from collections.abc import Generator
from pathlib import Path

import pytest
from click.testing import CliRunner

from testing.fixtures import write_cargo_project


@pytest.fixture
def cli_runner() -> CliRunner:
    """Create a Click test runner.

    Returns:
        CliRunner instance for testing CLI commands.
    """
    return CliRunner()


@pytest.fixture
def isolated_runner(cli_runner: CliRunner) -> Generator[CliRunner, None, None]:
    """Create a Click test runner with an isolated filesystem.

    Yields:
        CliRunner instance with isolated filesystem.
    """
    with cli_runner.isolated_filesystem():
        yield cli_runner


@pytest.fixture
def cargo_project(tmp_path: Path) -> Path:
    """A small binary crate with a matching Cargo.lock."""
    return write_cargo_project(tmp_path / "project")


@pytest.fixture(autouse=True)
def restore_root_logging() -> Generator[None, None, None]:
    """Undo the root handler replacement done by configure_logging()."""
    root = logging.getLogger()
    handlers = root.handlers[:]
    level = root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture(autouse=True)
def clear_platform_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep the caller's COMPILER_TRIPLE/PLATFORM_TAG out of the tests."""
    monkeypatch.delenv("COMPILER_TRIPLE", raising=False)
    monkeypatch.delenv("PLATFORM_TAG", raising=False)
