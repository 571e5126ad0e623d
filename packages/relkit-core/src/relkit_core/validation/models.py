"""Validation result models.

Models for representing the outcome of each validation check and the
aggregate release-worthiness verdict.
"""

from __future__ import annotations

from datetime import UTC, datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class CheckStatus(str, Enum):
    """Status of a validation check.

    Attributes:
        PASSED: Check passed
        FAILED: Check ran and found a violation
        ERROR: Check could not run to a verdict (missing tool, broken deps)
        SKIPPED: Check had nothing to inspect
    """

    PASSED = "passed"
    FAILED = "failed"
    ERROR = "error"
    SKIPPED = "skipped"


class CheckResult(BaseModel):
    """Result of a single validation check.

    Attributes:
        name: Check name (e.g., "lint", "fmt")
        status: Check status
        message: Human-readable result message
        details: Diagnostics (tool output, offending files, error type)
        duration_ms: Check duration in milliseconds
        timestamp: When the check started

    Example:
        >>> result = CheckResult(
        ...     name="fmt",
        ...     status=CheckStatus.FAILED,
        ...     message="1 file not formatted",
        ...     details={"files": ["src/main.rs"]},
        ... )
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    name: str = Field(..., min_length=1, description="Check name")
    status: CheckStatus = Field(..., description="Check status")
    message: str = Field(default="", description="Result message")
    details: dict[str, Any] = Field(default_factory=dict, description="Diagnostics")
    duration_ms: int = Field(default=0, ge=0, description="Duration in milliseconds")
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(UTC), description="Check timestamp"
    )

    @property
    def passed(self) -> bool:
        """Check if result does not block a release."""
        return self.status in (CheckStatus.PASSED, CheckStatus.SKIPPED)

    @property
    def failed(self) -> bool:
        """Check if result blocks a release."""
        return self.status in (CheckStatus.FAILED, CheckStatus.ERROR)


class ValidationResult(BaseModel):
    """Aggregated result of every validation check.

    Attributes:
        checks: Individual check results, in configured order
        overall_status: Aggregate status
        started_at: When validation started
        finished_at: When the last check finished
        total_duration_ms: Total duration in milliseconds
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    checks: list[CheckResult] = Field(default_factory=list, description="Check results")
    overall_status: CheckStatus = Field(default=CheckStatus.PASSED, description="Overall status")
    started_at: datetime = Field(
        default_factory=lambda: datetime.now(UTC), description="Start time"
    )
    finished_at: datetime | None = Field(default=None, description="End time")
    total_duration_ms: int = Field(default=0, ge=0, description="Total duration")

    @property
    def passed(self) -> bool:
        """Release-worthiness: every check passed (logical AND)."""
        return all(c.passed for c in self.checks)

    @property
    def failed(self) -> bool:
        """Check if any check blocks the release."""
        return not self.passed

    @property
    def passed_count(self) -> int:
        """Count of passed checks."""
        return sum(1 for c in self.checks if c.passed)

    @property
    def failed_count(self) -> int:
        """Count of failed checks."""
        return sum(1 for c in self.checks if c.failed)

    @property
    def failed_names(self) -> list[str]:
        """Names of the checks that block the release."""
        return [c.name for c in self.checks if c.failed]

    def get(self, name: str) -> CheckResult | None:
        """Return the result of the named check, if it ran."""
        for check in self.checks:
            if check.name == name:
                return check
        return None
