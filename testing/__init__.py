"""Shared testing infrastructure for relkit.

Modules:
    fixtures: Sample Cargo projects and a scripted toolchain double

Usage:
    In your conftest.py:
        from testing.fixtures import FakeToolchain, write_cargo_project
"""

from __future__ import annotations
