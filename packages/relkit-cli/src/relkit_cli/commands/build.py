"""relkit build command - Build and package a release binary."""

from __future__ import annotations

import click

from relkit_cli.errors import (
    CLIError,
    handle_permission_error,
    handle_release_error,
    handle_unexpected_error,
)
from relkit_cli.logging_config import configure_logging
from relkit_cli.output import info, success


@click.command()
@click.option(
    "-p",
    "--project-dir",
    type=click.Path(file_okay=False),
    default=None,
    help="Cargo project root [default: current directory]",
)
@click.option(
    "-o",
    "--output-dir",
    type=click.Path(file_okay=False),
    default=None,
    help="Release output directory [default: dist]",
)
@click.option(
    "--cache-dir",
    type=click.Path(file_okay=False),
    default=None,
    help="Dependency cache root [default: .relkit/cache]",
)
@click.option(
    "--triple",
    "compiler_triple",
    envvar="COMPILER_TRIPLE",
    default=None,
    help="Compiler triple [env: COMPILER_TRIPLE; default: x86_64-unknown-linux-gnu]",
)
@click.option(
    "--tag",
    "platform_tag",
    envvar="PLATFORM_TAG",
    default=None,
    help="Platform tag for the release name [env: PLATFORM_TAG; default: linux-amd64]",
)
@click.option(
    "--strict-platform",
    is_flag=True,
    default=False,
    help="Reject a tag that belongs to a different triple",
)
@click.option(
    "--require-checks",
    is_flag=True,
    default=False,
    help="Run the validation gate first and stop unless every check passes",
)
@click.option(
    "-c",
    "--config",
    "config_file",
    type=click.Path(dir_okay=False),
    default=None,
    help="Path to relkit.yaml [default: <project-dir>/relkit.yaml if present]",
)
@click.option(
    "-v",
    "--verbose",
    is_flag=True,
    default=False,
    help="Verbose output",
)
@click.pass_context
def build(
    ctx: click.Context,
    project_dir: str | None,
    output_dir: str | None,
    cache_dir: str | None,
    compiler_triple: str | None,
    platform_tag: str | None,
    strict_platform: bool,
    require_checks: bool,
    config_file: str | None,
    verbose: bool,
) -> None:
    """Build a release binary and place it in the output directory.

    The binary lands at `<output-dir>/<binary>-<tag>`. Dependencies are
    compiled once per dependency graph and triple and reused afterwards.

    Examples:

        relkit build

        COMPILER_TRIPLE=aarch64-unknown-linux-gnu PLATFORM_TAG=linux-arm64 relkit build

        relkit build --require-checks --output-dir release/
    """
    configure_logging(verbose, json_logs=bool((ctx.obj or {}).get("log_json")))

    # Import here to keep CLI startup fast
    from relkit_cli.config_loader import load_pipeline_config
    from relkit_core.errors import ReleaseError
    from relkit_core.pipeline import ReleasePipeline

    try:
        config = load_pipeline_config(
            project_dir,
            config_file,
            output_dir=output_dir,
            cache_dir=cache_dir,
            compiler_triple=compiler_triple,
            platform_tag=platform_tag,
            strict_platform=True if strict_platform else None,
            require_validation=True if require_checks else None,
        )
        pipeline = ReleasePipeline(config)

        if verbose:
            info(f"Building {config.binary_name} from {config.resolved_project_dir}")

        artifact = pipeline.build_release()

    except CLIError:
        raise
    except ReleaseError as e:
        handle_release_error(e)
    except PermissionError as e:
        handle_permission_error(str(e.filename or output_dir or "dist"), "write")
    except Exception as e:
        handle_unexpected_error(e, verbose)

    success(f"Built {artifact.path.name}")
    click.echo(str(artifact.path))
