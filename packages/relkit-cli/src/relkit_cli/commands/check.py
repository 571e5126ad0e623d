"""relkit check command - Run the validation gate."""

from __future__ import annotations

import click

from relkit_cli import output
from relkit_cli.errors import (
    EXIT_SYSTEM_ERROR,
    CLIError,
    handle_release_error,
    handle_unexpected_error,
)
from relkit_cli.logging_config import configure_logging
from relkit_core.validation.config import CHECK_NAMES


def _select_checks(only: tuple[str, ...], skip: tuple[str, ...]) -> list[str]:
    """Resolve --only/--skip into check names, in report order."""
    selected = set(only) if only else set(CHECK_NAMES)
    selected -= set(skip)
    return [name for name in CHECK_NAMES if name in selected]


@click.command()
@click.option(
    "--only",
    multiple=True,
    type=click.Choice(CHECK_NAMES),
    help="Run only this check (repeatable)",
)
@click.option(
    "--skip",
    multiple=True,
    type=click.Choice(CHECK_NAMES),
    help="Skip this check (repeatable)",
)
@click.option(
    "-p",
    "--project-dir",
    type=click.Path(file_okay=False),
    default=None,
    help="Cargo project root [default: current directory]",
)
@click.option(
    "--cache-dir",
    type=click.Path(file_okay=False),
    default=None,
    help="Dependency cache root [default: .relkit/cache]",
)
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["table", "json"]),
    default="table",
    help="Output format [default: table]",
)
@click.option(
    "-v",
    "--verbose",
    is_flag=True,
    default=False,
    help="Verbose output, including toolchain output of failed checks",
)
@click.pass_context
def check(
    ctx: click.Context,
    only: tuple[str, ...],
    skip: tuple[str, ...],
    project_dir: str | None,
    cache_dir: str | None,
    output_format: str,
    verbose: bool,
) -> None:
    """Run the build, lint and formatting checks.

    Every selected check runs to completion; the verdict passes only when
    all of them pass. Nothing is written to the release directory.

    Examples:

        relkit check

        relkit check --only fmt --only toml-fmt

        relkit check --skip build --format json
    """
    configure_logging(verbose, json_logs=bool((ctx.obj or {}).get("log_json")))

    names = _select_checks(only, skip)
    if not names:
        raise CLIError("No checks selected", exit_code=EXIT_SYSTEM_ERROR)

    from relkit_cli.config_loader import load_pipeline_config
    from relkit_core.errors import ReleaseError
    from relkit_core.pipeline import ReleasePipeline
    from relkit_core.validation import ValidationConfig, print_result

    try:
        config = load_pipeline_config(project_dir, cache_dir=cache_dir)
        if verbose:
            output.info(f"Running checks: {', '.join(names)}")
        result = ReleasePipeline(config).validate(ValidationConfig.only(names))
    except CLIError:
        raise
    except ReleaseError as e:
        handle_release_error(e)
    except Exception as e:
        handle_unexpected_error(e, verbose)

    print_result(result, output_format=output_format, console=output.console, show_output=verbose)

    if result.passed:
        if output_format == "table":
            output.success("Validation gate passed")
        raise SystemExit(0)
    if output_format == "table":
        output.error(f"Validation gate failed: {', '.join(result.failed_names)}")
    raise SystemExit(1)
