"""Validation report rendering.

The table report answers one question first (may this tree be released?)
and then lists, per blocking check, what the operator has to fix: the
files to reformat, the target a build or lint ran for, the step that kept
a check from running. JSON output carries the same data for CI.
"""

from __future__ import annotations

import json
from typing import Any

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from relkit_core.validation.models import CheckResult, CheckStatus, ValidationResult

# Toolchain output lines shown per check with show_output
OUTPUT_TAIL_LINES = 60


def _status_icon(status: CheckStatus) -> str:
    """Get icon for check status."""
    icons = {
        CheckStatus.PASSED: "✅",
        CheckStatus.FAILED: "❌",
        CheckStatus.SKIPPED: "⏭️",
        CheckStatus.ERROR: "💥",
    }
    return icons.get(status, "❓")


def _status_color(status: CheckStatus) -> str:
    """Get color for check status."""
    colors = {
        CheckStatus.PASSED: "green",
        CheckStatus.FAILED: "red",
        CheckStatus.SKIPPED: "dim",
        CheckStatus.ERROR: "red bold",
    }
    return colors.get(status, "white")


def _diagnostics(check: CheckResult) -> list[str]:
    """Turn a check's details into lines an operator can act on."""
    details = check.details
    lines: list[str] = []
    if "blocked_by" in details:
        lines.append(f"did not run: {details['blocked_by']} failed")
    if "triple" in details:
        lines.append(f"target: {details['triple']}")
    lines.extend(f"not formatted: {path}" for path in details.get("files", []))
    if "error_type" in details:
        origin = details.get("component")
        lines.append(f"error: {details['error_type']}" + (f" in {origin}" if origin else ""))
    if details.get("error"):
        lines.append(str(details["error"]))
    return lines


def _output_tail(output: str) -> str:
    lines = output.rstrip().splitlines()
    if len(lines) <= OUTPUT_TAIL_LINES:
        return "\n".join(lines)
    skipped = len(lines) - OUTPUT_TAIL_LINES
    return "\n".join([f"... {skipped} earlier line(s)", *lines[-OUTPUT_TAIL_LINES:]])


def _header(result: ValidationResult) -> Text:
    icon = _status_icon(result.overall_status)
    color = _status_color(result.overall_status)
    errored = sum(1 for c in result.checks if c.status == CheckStatus.ERROR)

    text = Text()
    text.append("RELKIT VALIDATION REPORT\n\n", style="bold")
    text.append(f"Status: {icon} ", style=color)
    text.append(result.overall_status.value.upper(), style=f"bold {color}")
    if result.passed:
        text.append("\nRelease: ready", style="green")
    else:
        text.append(f"\nRelease: blocked by {', '.join(result.failed_names)}", style="red")
    text.append(f"\nChecks: {result.passed_count} passed, {result.failed_count} failed")
    if errored:
        text.append(f" ({errored} could not run)")
    if result.total_duration_ms > 0:
        text.append(f"\nDuration: {result.total_duration_ms}ms")
    return text


def format_result_table(
    result: ValidationResult,
    console: Console | None = None,
    show_output: bool = False,
) -> None:
    """Render validation results as a Rich report.

    Args:
        result: ValidationResult to display
        console: Optional Rich console (creates one if not provided)
        show_output: Also print the tail of captured toolchain output
    """
    if console is None:
        console = Console()

    console.print(Panel(_header(result), title="[bold]Validation Results[/bold]"))

    table = Table(show_header=True, header_style="bold")
    table.add_column("Status", width=3, justify="center")
    table.add_column("Check", min_width=12)
    table.add_column("Target", style="dim")
    table.add_column("Message", min_width=30)
    table.add_column("Duration", justify="right", width=10)

    for check in result.checks:
        duration = f"{check.duration_ms}ms" if check.duration_ms > 0 else "-"
        table.add_row(
            _status_icon(check.status),
            Text(check.name, style=_status_color(check.status)),
            check.details.get("triple", "-"),
            Text(check.message or "-", style="dim" if not check.message else ""),
            duration,
        )

    console.print(table)

    failed_checks = [c for c in result.checks if c.failed]
    if not failed_checks:
        return

    console.print()
    console.print("[bold red]Failed Check Details:[/bold red]")
    for check in failed_checks:
        console.print(f"  [red]• {check.name}[/red]: {check.message}", highlight=False)
        for line in _diagnostics(check):
            console.print(f"    {line}", style="dim", markup=False, highlight=False)

        output = check.details.get("output")
        if not output:
            continue
        if show_output:
            console.print(
                Panel(Text(_output_tail(output)), title=f"{check.name} output", title_align="left")
            )
        else:
            console.print("    (toolchain output hidden)", style="dim italic")


def format_result_json(result: ValidationResult, pretty: bool = True) -> str:
    """Format validation results as JSON.

    Args:
        result: ValidationResult to format
        pretty: Whether to use indentation

    Returns:
        JSON string representation
    """
    data = _result_to_dict(result)
    if pretty:
        return json.dumps(data, indent=2, default=str)
    return json.dumps(data, default=str)


def _result_to_dict(result: ValidationResult) -> dict[str, Any]:
    return {
        "status": result.overall_status.value,
        "passed": result.passed,
        "blocking": result.failed_names,
        "summary": {
            "total": len(result.checks),
            "passed": result.passed_count,
            "failed": result.failed_count,
        },
        "duration_ms": result.total_duration_ms,
        "started_at": result.started_at.isoformat() if result.started_at else None,
        "finished_at": result.finished_at.isoformat() if result.finished_at else None,
        "checks": [_check_to_dict(check) for check in result.checks],
    }


def _check_to_dict(check: CheckResult) -> dict[str, Any]:
    return {
        "name": check.name,
        "status": check.status.value,
        "passed": check.passed,
        "message": check.message,
        "diagnostics": _diagnostics(check),
        "details": check.details,
        "duration_ms": check.duration_ms,
        "timestamp": check.timestamp.isoformat() if check.timestamp else None,
    }


def print_result(
    result: ValidationResult,
    output_format: str = "table",
    console: Console | None = None,
    show_output: bool = False,
) -> None:
    """Print validation results in specified format.

    Args:
        result: ValidationResult to display
        output_format: Output format ("table" or "json")
        console: Optional Rich console
        show_output: Include toolchain output of failed checks (table only)
    """
    if console is None:
        console = Console()

    if output_format == "json":
        # Raw JSON keeps the output parseable
        json_str = format_result_json(result, pretty=True)
        if console.file is not None:
            console.file.write(json_str + "\n")
        else:
            print(json_str)
    else:
        format_result_table(result, console, show_output=show_output)
