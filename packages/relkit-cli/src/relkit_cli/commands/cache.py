"""relkit cache command - Dependency cache housekeeping."""

from __future__ import annotations

import click

from relkit_cli.errors import CLIError, handle_release_error, handle_unexpected_error
from relkit_cli.logging_config import configure_logging
from relkit_cli.output import info, success


@click.group()
def cache() -> None:
    """Manage the dependency cache.

    **Commands:**

    - `relkit cache prune` - Keep only entries for the current dependency graph
    """


@cache.command("prune")
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
    "-v",
    "--verbose",
    is_flag=True,
    default=False,
    help="Verbose output",
)
def prune(project_dir: str | None, cache_dir: str | None, verbose: bool) -> None:
    """Remove cache entries for dependency graphs other than the current one.

    Must not run while a build is using the same cache.

    Examples:

        relkit cache prune

        relkit cache prune --cache-dir /var/cache/relkit
    """
    configure_logging(verbose)

    from relkit_cli.config_loader import load_pipeline_config
    from relkit_core.errors import ReleaseError
    from relkit_core.pipeline import ReleasePipeline

    try:
        config = load_pipeline_config(project_dir, cache_dir=cache_dir)
        removed = ReleasePipeline(config).prune_cache()
    except CLIError:
        raise
    except ReleaseError as e:
        handle_release_error(e)
    except Exception as e:
        handle_unexpected_error(e, verbose)

    if verbose:
        for key in removed:
            info(f"  removed {key}")
    success(f"Removed {len(removed)} cache entries")
