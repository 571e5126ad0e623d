"""Formatting checks for Rust source and TOML configuration.

Both checks only report conformance; neither rewrites a file.
"""

from __future__ import annotations

import re
from typing import Any

from relkit_core.build.models import CommonBuildInputs
from relkit_core.build.project import SOURCE_DIR
from relkit_core.build.toolchain import Toolchain, cargo_fmt_check_args, taplo_fmt_check_args
from relkit_core.errors import FormatViolationError, ReleaseError
from relkit_core.validation.checks.base import BaseCheck
from relkit_core.validation.config import FMT_CHECK, TOML_FMT_CHECK
from relkit_core.validation.models import CheckResult, CheckStatus

# rustfmt: "Diff in /abs/path/src/main.rs at line 3:" (older: "Diff in /abs/path/src/main.rs:3:")
_RUSTFMT_DIFF = re.compile(r"^Diff in (.+?)(?: at line \d+:|:\d+:)$")

# taplo: 'ERROR taplo:format_files: the file is not properly formatted path="/abs/Cargo.toml"'
_TAPLO_UNFORMATTED = re.compile(r'not properly formatted\s+path="([^"]+)"')


def _relative(path: str, prefix: str) -> str:
    return path[len(prefix) :].lstrip("/") if path.startswith(prefix) else path


class SourceFormatCheck(BaseCheck):
    """``cargo fmt --check`` over the whole workspace."""

    def __init__(self, inputs: CommonBuildInputs, toolchain: Toolchain) -> None:
        super().__init__(name=FMT_CHECK, inputs=inputs, toolchain=toolchain)

    def _execute(self) -> CheckResult:
        with self._workspace() as work_dir:
            source_dir = self.inputs.snapshot.materialize(work_dir / SOURCE_DIR)
            result = self.toolchain.run(cargo_fmt_check_args(), cwd=source_dir)
            prefix = str(source_dir)

        if result.succeeded:
            return self._make_result(CheckStatus.PASSED, "Source is formatted")

        files: list[str] = []
        for line in result.stdout.splitlines():
            match = _RUSTFMT_DIFF.match(line.strip())
            if match:
                relative = _relative(match.group(1), prefix)
                if relative not in files:
                    files.append(relative)

        if not files:
            raise FormatViolationError(
                f"Source format check failed (exit {result.returncode})",
                component=self.name,
                internal_details=result.output,
            )
        raise FormatViolationError(
            f"{len(files)} source file(s) not formatted",
            files=files,
            component=self.name,
            internal_details=result.output,
        )

    def _error_details(self, error: ReleaseError) -> dict[str, Any]:
        return {"files": error.files} if isinstance(error, FormatViolationError) else {}


class ConfigFormatCheck(BaseCheck):
    """``taplo fmt --check`` over the snapshot's TOML files only."""

    def __init__(self, inputs: CommonBuildInputs, toolchain: Toolchain) -> None:
        super().__init__(name=TOML_FMT_CHECK, inputs=inputs, toolchain=toolchain)

    def _execute(self) -> CheckResult:
        toml_files = list(self.inputs.snapshot.files_with_suffix(".toml"))
        if not toml_files:
            return self._make_result(CheckStatus.SKIPPED, "No TOML files in source")

        with self._workspace() as work_dir:
            source_dir = self.inputs.snapshot.materialize(work_dir / SOURCE_DIR)
            result = self.toolchain.run(taplo_fmt_check_args(toml_files), cwd=source_dir)
            prefix = str(source_dir)

        if result.succeeded:
            return self._make_result(
                CheckStatus.PASSED,
                f"{len(toml_files)} TOML file(s) formatted",
                {"files_checked": len(toml_files)},
            )

        files = [_relative(path, prefix) for path in _TAPLO_UNFORMATTED.findall(result.output)]
        raise FormatViolationError(
            f"{len(files) or 'Some'} TOML file(s) not formatted",
            files=files,
            component=self.name,
            internal_details=result.output,
        )

    def _error_details(self, error: ReleaseError) -> dict[str, Any]:
        return {"files": error.files} if isinstance(error, FormatViolationError) else {}
