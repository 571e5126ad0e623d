"""Validation gate.

Independent build, lint and formatting checks that must all pass before
a build is trusted for release.
"""

from __future__ import annotations

from relkit_core.validation.config import CHECK_NAMES, ValidationConfig
from relkit_core.validation.models import CheckResult, CheckStatus, ValidationResult
from relkit_core.validation.output import (
    format_result_json,
    format_result_table,
    print_result,
)
from relkit_core.validation.runner import ValidationRunner, run_validation

__all__ = [
    "CHECK_NAMES",
    "CheckResult",
    "CheckStatus",
    "ValidationConfig",
    "ValidationResult",
    "ValidationRunner",
    "format_result_json",
    "format_result_table",
    "print_result",
    "run_validation",
]
