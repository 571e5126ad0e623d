"""Validation check implementations.

Build, lint, source-format and config-format checks.
"""

from __future__ import annotations

from relkit_core.validation.checks.base import BaseCheck
from relkit_core.validation.checks.build import BuildCheck
from relkit_core.validation.checks.formatting import ConfigFormatCheck, SourceFormatCheck
from relkit_core.validation.checks.lint import LintCheck

__all__ = [
    "BaseCheck",
    "BuildCheck",
    "ConfigFormatCheck",
    "LintCheck",
    "SourceFormatCheck",
]
