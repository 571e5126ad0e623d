"""Shared pytest fixtures for relkit-core tests.

Provides a sample Cargo project on disk, the snapshot and build inputs
derived from it, and a scripted toolchain.
"""

from __future__ import annotations

import sys
from pathlib import Path

import pytest
import structlog

from relkit_core.build.models import CommonBuildInputs
from relkit_core.build.source import SourceSnapshot
from testing.fixtures import FakeToolchain, write_cargo_project


@pytest.fixture(autouse=True)
def configure_structlog_for_tests() -> None:
    """Configure structlog to output to stdout for test capture.

    This fixture ensures structlog outputs to stdout so that capsys
    can capture the output in tests.
    """
    structlog.configure(
        processors=[
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.dev.ConsoleRenderer(colors=False),
        ],
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stdout),
        cache_logger_on_first_use=False,  # Important for test isolation
    )


@pytest.fixture
def cargo_project(tmp_path: Path) -> Path:
    """A small binary crate with a matching Cargo.lock."""
    return write_cargo_project(tmp_path / "project")


@pytest.fixture
def snapshot(cargo_project: Path) -> SourceSnapshot:
    return SourceSnapshot.capture(cargo_project)


@pytest.fixture
def build_inputs(snapshot: SourceSnapshot) -> CommonBuildInputs:
    return CommonBuildInputs(snapshot=snapshot, strict_dependencies=True)


@pytest.fixture
def fake_toolchain() -> FakeToolchain:
    return FakeToolchain()


@pytest.fixture
def cache_root(tmp_path: Path) -> Path:
    return tmp_path / "cache"
