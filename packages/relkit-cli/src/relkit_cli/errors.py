"""CLI error handling for relkit-cli.

Maps relkit-core exceptions onto user-facing messages and exit codes.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, NoReturn

import click
from pydantic import ValidationError as PydanticValidationError
from rich.markup import escape

from relkit_cli.output import error

if TYPE_CHECKING:
    from pydantic_core import ErrorDetails

    from relkit_core.errors import ReleaseError


EXIT_SUCCESS = 0
EXIT_USER_ERROR = 1  # Pipeline failure (compile, lint, packaging)
EXIT_SYSTEM_ERROR = 2  # Configuration or environment problem


class CLIError(click.ClickException):
    """CLI-specific exception with exit code support.

    Attributes:
        message: User-facing error message.
        exit_code: Exit code for the CLI (default: 1).
    """

    def __init__(self, message: str, exit_code: int = EXIT_USER_ERROR) -> None:
        super().__init__(message)
        self.exit_code = exit_code

    def show(self, file: object = None) -> None:
        """Display the error message using Rich formatting.

        Args:
            file: Output file (unused, for Click compatibility).
        """
        error(escape(self.format_message()))


def format_pydantic_error(err: PydanticValidationError) -> str:
    """Format a Pydantic validation error as one line per field.

    Example:
        >>> format_pydantic_error(err)
        "Validation failed:\\n  - binary_name: String should match pattern..."
    """
    errors: list[ErrorDetails] = err.errors()
    lines = ["Validation failed:"]

    for e in errors:
        loc = ".".join(str(x) for x in e["loc"])
        lines.append(f"  - {loc}: {e['msg']}")

    return "\n".join(lines)


def exit_code_for(err: ReleaseError) -> int:
    """Exit code for a relkit-core error.

    Configuration problems and a missing toolchain are system errors; every
    other pipeline failure is a user error.
    """
    from relkit_core.errors import ConfigurationError, ToolchainNotFoundError

    if isinstance(err, (ConfigurationError, ToolchainNotFoundError)):
        return EXIT_SYSTEM_ERROR
    return EXIT_USER_ERROR


def handle_release_error(err: ReleaseError) -> NoReturn:
    """Report a pipeline error with the component that raised it.

    Raises:
        CLIError: Always, with the exit code from ``exit_code_for``.
    """
    raise CLIError(err.describe(), exit_code=exit_code_for(err))


def handle_validation_error(err: PydanticValidationError, source: str) -> NoReturn:
    """Handle Pydantic validation errors in configuration.

    Raises:
        CLIError: Always, with exit code 2.
    """
    formatted = format_pydantic_error(err)
    raise CLIError(f"Invalid configuration in {source}:\n{formatted}", exit_code=EXIT_SYSTEM_ERROR)


def handle_file_not_found(file_path: str) -> NoReturn:
    """Handle a missing configuration file.

    Raises:
        CLIError: Always, with exit code 2.
    """
    raise CLIError(
        f"File not found: {file_path}\n\n"
        "Create relkit.yaml in the project directory, or drop --config to use defaults.",
        exit_code=EXIT_SYSTEM_ERROR,
    )


def handle_permission_error(path: str, operation: str = "access") -> NoReturn:
    """Handle permission errors.

    Raises:
        CLIError: Always, with exit code 2.
    """
    raise CLIError(
        f"Permission denied: Cannot {operation} {path}",
        exit_code=EXIT_SYSTEM_ERROR,
    )


def handle_unexpected_error(err: Exception, verbose: bool = False) -> NoReturn:
    """Report an error no pipeline component classified.

    The traceback is printed with ``--verbose``.

    Raises:
        CLIError: Always, with exit code 1.
    """
    if verbose:
        import traceback

        traceback.print_exception(err)
    raise CLIError(f"Unexpected error: {type(err).__name__}: {err}", exit_code=EXIT_USER_ERROR)
