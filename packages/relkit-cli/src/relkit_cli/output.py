"""Rich console output utilities for relkit-cli.

Colored success/error/warning messages on a shared Rich console. The
NO_COLOR environment variable and the ``--no-color`` flag both disable
colors.
"""

from __future__ import annotations

import json
import os
from typing import Any

from rich.console import Console

# Rich respects NO_COLOR on its own; --no-color is handled by set_no_color
_force_no_color = os.environ.get("NO_COLOR") is not None


def create_console(no_color: bool = False) -> Console:
    """Create a Rich Console with the requested color settings.

    Args:
        no_color: Disable colored output. NO_COLOR is honored as well.

    Returns:
        Configured Console instance.
    """
    force_terminal = None
    if no_color or _force_no_color:
        force_terminal = False
    return Console(force_terminal=force_terminal, no_color=no_color or _force_no_color)


console = create_console()


def success(message: str, **kwargs: Any) -> None:
    """Print a success message with a green checkmark.

    Example:
        >>> success("Release written to dist/gh-jj-linux-amd64")
        ✓ Release written to dist/gh-jj-linux-amd64
    """
    console.print(f"[green]✓[/green] {message}", **kwargs)


def error(message: str, **kwargs: Any) -> None:
    """Print an error message with a red X."""
    console.print(f"[red]✗[/red] {message}", **kwargs)


def warning(message: str, **kwargs: Any) -> None:
    """Print a warning message with a yellow triangle."""
    console.print(f"[yellow]⚠[/yellow] {message}", **kwargs)


def info(message: str, **kwargs: Any) -> None:
    """Print an informational message."""
    console.print(message, **kwargs)


def print_json(data: dict[str, Any] | list[Any], **kwargs: Any) -> None:
    """Print JSON data with syntax highlighting.

    Args:
        data: JSON-serializable data.
        **kwargs: Passed to ``console.print_json()``.
    """
    console.print_json(json.dumps(data), **kwargs)


def set_no_color(no_color: bool) -> None:
    """Replace the module console with one that has colors disabled or enabled."""
    global console
    console = create_console(no_color=no_color)
