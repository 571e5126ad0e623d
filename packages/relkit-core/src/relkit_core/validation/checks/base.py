"""Base class for validation checks.

Abstract base class defining the interface for all validation checks.
"""

from __future__ import annotations

import tempfile
import time
from abc import ABC, abstractmethod
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

import structlog

from relkit_core.build.models import CommonBuildInputs
from relkit_core.build.toolchain import Toolchain
from relkit_core.errors import ReleaseError, ToolchainNotFoundError
from relkit_core.validation.models import CheckResult, CheckStatus

logger = structlog.get_logger(__name__)

# Toolchain output kept in check details
MAX_OUTPUT_CHARS = 20_000


class BaseCheck(ABC):
    """Base class for validation checks.

    Provides timing, error conversion and logging around ``_execute``.
    Violations raised as ReleaseError become FAILED results; anything else
    (including a missing toolchain) becomes ERROR. ``run`` never raises, so
    a check can never take its siblings down with it.

    Attributes:
        name: Check name for identification
        inputs: Shared build inputs, read-only
        toolchain: Toolchain used to run the check

    Example:
        >>> class MyCheck(BaseCheck):
        ...     def _execute(self) -> CheckResult:
        ...         return self._make_result(status=CheckStatus.PASSED)
    """

    def __init__(self, name: str, inputs: CommonBuildInputs, toolchain: Toolchain) -> None:
        """Initialize the check.

        Args:
            name: Check name for identification and logging
            inputs: Shared build inputs
            toolchain: Toolchain to invoke
        """
        self.name = name
        self.inputs = inputs
        self.toolchain = toolchain
        self._log = logger.bind(check=name)

    def run(self) -> CheckResult:
        """Run the check with timing and error handling.

        Returns:
            CheckResult with status, message, and duration.
        """
        start_time = time.monotonic()
        timestamp = datetime.now(UTC)

        self._log.info("check_started")

        try:
            result = self._execute()
        except ToolchainNotFoundError as e:
            result = self._make_result(
                CheckStatus.ERROR,
                e.user_message,
                {"error_type": type(e).__name__, "component": e.component},
            )
        except ReleaseError as e:
            details: dict[str, Any] = {"error_type": type(e).__name__, "component": e.component}
            if e.internal_details:
                details["output"] = e.internal_details[-MAX_OUTPUT_CHARS:]
            details.update(self._error_details(e))
            result = self._make_result(CheckStatus.FAILED, e.user_message, details)
        except Exception as e:
            self._log.error("check_error", error=str(e))
            result = self._make_result(
                CheckStatus.ERROR,
                f"Check failed with error: {type(e).__name__}",
                {"error": str(e), "error_type": type(e).__name__},
            )

        duration_ms = int((time.monotonic() - start_time) * 1000)
        final_result = result.model_copy(
            update={"duration_ms": duration_ms, "timestamp": timestamp}
        )

        self._log.info(
            "check_completed",
            status=final_result.status.value,
            duration_ms=duration_ms,
        )
        return final_result

    @abstractmethod
    def _execute(self) -> CheckResult:
        """Execute the actual check logic.

        Returns:
            CheckResult with the check outcome.

        Raises:
            ReleaseError: Reported as a FAILED result.
            Any other exception is reported as ERROR.
        """

    def _error_details(self, error: ReleaseError) -> dict[str, Any]:
        """Extra details for a violation; subclasses add offending files etc."""
        return {}

    def _make_result(
        self,
        status: CheckStatus,
        message: str = "",
        details: dict[str, Any] | None = None,
    ) -> CheckResult:
        """Create a CheckResult with common fields.

        Args:
            status: Check status
            message: Human-readable message
            details: Additional details dict

        Returns:
            CheckResult with provided fields
        """
        return CheckResult(
            name=self.name,
            status=status,
            message=message,
            details=details or {},
        )

    @contextmanager
    def _workspace(self) -> Iterator[Path]:
        """Private scratch directory, removed when the check ends."""
        with tempfile.TemporaryDirectory(prefix=f"relkit-{self.name}-") as tmp:
            yield Path(tmp)
