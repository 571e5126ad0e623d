"""CLI entry point for relkit.

The main group loads subcommands lazily so ``relkit --help`` does not
import the build pipeline.
"""

from __future__ import annotations

import importlib
from typing import Any

import click
import rich_click as rclick

from relkit_cli import __version__
from relkit_cli.output import set_no_color

rclick.rich_click.TEXT_MARKUP = "markdown"
rclick.rich_click.SHOW_ARGUMENTS = True
rclick.rich_click.GROUP_ARGUMENTS_OPTIONS = True


class LazyGroup(rclick.RichGroup):
    """Click group that imports commands only when they are requested.

    Attributes:
        lazy_subcommands: Mapping of command names to ``module.attribute`` paths.
    """

    def __init__(
        self,
        *args: Any,
        lazy_subcommands: dict[str, str] | None = None,
        **kwargs: Any,
    ) -> None:
        """Initialize LazyGroup.

        Args:
            *args: Positional arguments for parent class.
            lazy_subcommands: Mapping of command name to module path.
                Format: {"build": "relkit_cli.commands.build.build"}
            **kwargs: Keyword arguments for parent class.
        """
        super().__init__(*args, **kwargs)
        self.lazy_subcommands: dict[str, str] = lazy_subcommands or {}

    def list_commands(self, ctx: click.Context) -> list[str]:
        commands = set(super().list_commands(ctx))
        commands.update(self.lazy_subcommands.keys())
        return sorted(commands)

    def get_command(self, ctx: click.Context, cmd_name: str) -> click.Command | None:
        """Get a command by name, importing its module on first use.

        Returns:
            Click Command instance, or None if not found.
        """
        cmd = super().get_command(ctx, cmd_name)  # type: ignore[arg-type]
        if cmd is not None:
            return cmd

        if cmd_name not in self.lazy_subcommands:
            return None

        module_name, attr_name = self.lazy_subcommands[cmd_name].rsplit(".", 1)
        mod = importlib.import_module(module_name)
        return getattr(mod, attr_name)  # type: ignore[no-any-return]


LAZY_COMMANDS = {
    "build": "relkit_cli.commands.build.build",
    "check": "relkit_cli.commands.check.check",
    "platforms": "relkit_cli.commands.platforms.platforms",
    "cache": "relkit_cli.commands.cache.cache",
}


@click.command(cls=LazyGroup, lazy_subcommands=LAZY_COMMANDS)
@click.version_option(version=__version__, prog_name="relkit")
@click.option(
    "--no-color",
    is_flag=True,
    default=False,
    help="Disable colored output.",
    is_eager=True,
    expose_value=False,
    callback=lambda ctx, param, value: set_no_color(value) if value else None,
)
@click.option(
    "--log-json",
    is_flag=True,
    default=False,
    help="Render log lines as JSON.",
)
@click.pass_context
def cli(ctx: click.Context, log_json: bool) -> None:
    """relkit - Release builds for Cargo projects.

    Compile a project for one platform, gate it on build, lint and
    formatting checks, and place the binary in the release directory.

    **Getting Started:**

    - `relkit build` - Build `dist/<binary>-<tag>` for the default platform
    - `relkit check` - Run the validation gate
    - `relkit platforms` - List known compiler triples and platform tags
    - `relkit cache prune` - Drop stale dependency cache entries
    """
    ctx.ensure_object(dict)
    ctx.obj["log_json"] = log_json


if __name__ == "__main__":
    cli()
