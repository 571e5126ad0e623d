"""Subprocess wrapper for the Rust toolchain.

The compiler, linter and formatters are external collaborators. This
module only knows how to spell their command lines and capture what
they print; interpreting the outcome is left to the callers.
"""

from __future__ import annotations

import os
import subprocess
import time
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path

import structlog

from relkit_core.errors import ToolchainNotFoundError

logger = structlog.get_logger(__name__)

CARGO = "cargo"
TAPLO = "taplo"


@dataclass(frozen=True)
class ToolResult:
    """Outcome of one toolchain invocation."""

    args: tuple[str, ...]
    returncode: int
    stdout: str = ""
    stderr: str = ""

    @property
    def succeeded(self) -> bool:
        return self.returncode == 0

    @property
    def output(self) -> str:
        """stderr and stdout combined, stderr first (cargo reports there)."""
        return "\n".join(part for part in (self.stderr, self.stdout) if part)


def _locked(strict: bool) -> list[str]:
    return ["--locked"] if strict else []


def cargo_build_args(triple: str, *, strict: bool) -> list[str]:
    """``cargo build --release [--locked] --target <triple>``"""
    return [CARGO, "build", "--release", *_locked(strict), "--target", triple]


def cargo_check_args(triple: str, *, strict: bool) -> list[str]:
    """``cargo check --release [--locked] --all-targets --target <triple>``"""
    return [CARGO, "check", "--release", *_locked(strict), "--all-targets", "--target", triple]


def cargo_clippy_args(triple: str, *, strict: bool) -> list[str]:
    """Zero-tolerance clippy over every target, warnings denied."""
    return [
        CARGO,
        "clippy",
        "--release",
        *_locked(strict),
        "--all-targets",
        "--target",
        triple,
        "--",
        "--deny",
        "warnings",
    ]


def cargo_fmt_check_args() -> list[str]:
    """``cargo fmt --all --check``"""
    return [CARGO, "fmt", "--all", "--check"]


def taplo_fmt_check_args(files: Sequence[str]) -> list[str]:
    """``taplo fmt --check <files...>``"""
    return [TAPLO, "fmt", "--check", *files]


class Toolchain:
    """Runs toolchain commands as subprocesses.

    Attributes:
        base_env: Extra environment applied to every invocation.

    Example:
        >>> toolchain = Toolchain()
        >>> result = toolchain.run(cargo_fmt_check_args(), cwd=Path("."))
        >>> result.succeeded
        True
    """

    def __init__(self, base_env: Mapping[str, str] | None = None) -> None:
        self.base_env = dict(base_env or {})
        self._log = logger.bind(component="toolchain")

    def run(
        self,
        args: Sequence[str],
        *,
        cwd: Path,
        env: Mapping[str, str] | None = None,
    ) -> ToolResult:
        """Run a command and capture its output.

        Args:
            args: Command line, executable first.
            cwd: Working directory.
            env: Extra environment variables for this invocation.

        Returns:
            ToolResult with exit code and captured output.

        Raises:
            ToolchainNotFoundError: If the executable cannot be found.
        """
        merged_env = {**os.environ, **self.base_env, **(env or {})}
        start_time = time.monotonic()
        self._log.info("tool_started", args=list(args), cwd=str(cwd))

        try:
            completed = subprocess.run(
                list(args),
                cwd=cwd,
                env=merged_env,
                capture_output=True,
                text=True,
                check=False,
            )
        except FileNotFoundError as e:
            raise ToolchainNotFoundError(args[0]) from e

        duration_ms = int((time.monotonic() - start_time) * 1000)
        self._log.info(
            "tool_completed",
            executable=args[0],
            returncode=completed.returncode,
            duration_ms=duration_ms,
        )
        return ToolResult(
            args=tuple(args),
            returncode=completed.returncode,
            stdout=completed.stdout,
            stderr=completed.stderr,
        )
