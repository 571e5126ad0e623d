"""relkit platforms command - List known platforms."""

from __future__ import annotations

import click

from relkit_cli import output


@click.command()
@click.option(
    "--json",
    "as_json",
    is_flag=True,
    default=False,
    help="Output as JSON",
)
def platforms(as_json: bool) -> None:
    """List known compiler triples and their platform tags.

    Examples:

        relkit platforms

        relkit platforms --json
    """
    from rich.table import Table

    from relkit_core.platforms import DEFAULT_PLATFORM, Platform

    if as_json:
        output.print_json(
            [
                {
                    "name": p.name.lower(),
                    "compiler_triple": p.triple,
                    "platform_tag": p.tag,
                    "default": p is DEFAULT_PLATFORM,
                }
                for p in Platform
            ]
        )
        return

    table = Table(show_header=True, header_style="bold")
    table.add_column("Compiler triple")
    table.add_column("Platform tag")
    table.add_column("Default", justify="center")
    for p in Platform:
        table.add_row(p.triple, p.tag, "✓" if p is DEFAULT_PLATFORM else "")
    output.console.print(table)
