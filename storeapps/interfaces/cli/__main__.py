"""Entry point for running the storeapps CLI.

This module defines a top-level Click group that aggregates all subcommands
defined in the ``storeapps.interfaces.cli`` package. Executing
``python -m storeapps.interfaces.cli`` will invoke this group.
"""

import click

from .add_apps import add_android_apps


@click.group(
    context_settings={"help_option_names": ["-h", "--help"]},
    invoke_without_command=True,
)
@click.pass_context
def cli(ctx: click.Context) -> None:
    """Intune store app import command-line interface."""
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


cli.add_command(add_android_apps)


if __name__ == "__main__":
    cli()
