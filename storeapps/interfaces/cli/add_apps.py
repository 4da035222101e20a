"""Bulk-create Android store apps from a delimited file."""

from __future__ import annotations

import click
from rich.console import Console
from rich.markup import escape
from rich.prompt import Prompt

from storeapps.app.config import (
    DEFAULT_DELIMITER,
    DEFAULT_LOG_PATH,
    DEFAULT_MAX_AGE_DAYS,
    ConfigError,
    build_settings,
)
from storeapps.services.pipeline import ImportPipeline, PipelineAbort


def _single_character(
    _ctx: click.Context, _param: click.Parameter, value: str | None
) -> str | None:
    if value is not None and len(value) != 1:
        raise click.BadParameter("must be exactly one character")
    return value


@click.command(name="add-android-apps")
@click.option(
    "--csv-location",
    required=True,
    type=click.Path(dir_okay=False, path_type=str),
    help="Delimited file with Name, URL, Publisher, Description, "
    "MininumAndroidVersion and Icon columns.",
)
@click.option(
    "--intune-module",
    "module_path",
    required=True,
    type=click.Path(path_type=str),
    help="Path to the management API module (a .py file or package directory).",
)
@click.option(
    "--log-path",
    type=click.Path(dir_okay=False, path_type=str),
    default=None,
    show_default=str(DEFAULT_LOG_PATH),
    help="Base log file; the run timestamp is inserted before the extension.",
)
@click.option(
    "--csv-delimiter",
    default=None,
    callback=_single_character,
    show_default=DEFAULT_DELIMITER,
    help="Field separator used in the input file.",
)
@click.option(
    "--max-age-log-files",
    "max_age_days",
    type=click.IntRange(min=0),
    default=None,
    show_default=str(DEFAULT_MAX_AGE_DAYS),
    help="Delete log files older than this many days.",
)
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=str),
    default=None,
    help="Optional JSON configuration file.",
)
@click.option("--tenant-id", envvar="STOREAPPS_TENANT_ID", help="Tenant (directory) ID.")
@click.option("--client-id", envvar="STOREAPPS_CLIENT_ID", help="App registration client ID.")
@click.option(
    "--client-secret",
    envvar="STOREAPPS_CLIENT_SECRET",
    help="App registration secret (prompted if a client ID is given without one).",
)
@click.option(
    "--tolerant/--strict",
    default=None,
    help="Continue with no records or no session when import or connect fails.  "
    "[default: strict]",
)
@click.option(
    "--dry-run",
    is_flag=True,
    default=False,
    help="Validate records and icons without connecting or creating apps.",
)
@click.pass_context
def add_android_apps(
    ctx: click.Context,
    csv_location: str,
    module_path: str,
    log_path: str | None,
    csv_delimiter: str | None,
    max_age_days: int | None,
    config_path: str | None,
    tenant_id: str | None,
    client_id: str | None,
    client_secret: str | None,
    tolerant: bool | None,
    dry_run: bool,
) -> None:
    """Register every app listed in the input file with Intune.

    Each row is created independently; a failing row is logged and the run
    moves on. Only a module that cannot be loaded (or, without --tolerant, an
    unreadable input file or failed sign-in) stops the run with exit code 1.
    """
    console = Console()
    if client_id and not client_secret and not dry_run:
        client_secret = Prompt.ask("Client secret", password=True, console=console)

    try:
        settings = build_settings(
            csv_location=csv_location,
            module_path=module_path,
            config_path=config_path,
            log_path=log_path,
            csv_delimiter=csv_delimiter,
            max_age_days=max_age_days,
            connection={
                "tenant_id": tenant_id,
                "client_id": client_id,
                "client_secret": client_secret,
            },
            tolerant=tolerant,
            dry_run=dry_run,
        )
    except (ConfigError, ValueError) as exc:
        console.print(f"[red]Invalid configuration: {escape(str(exc))}[/red]")
        ctx.exit(1)

    try:
        result = ImportPipeline(settings).run()
    except PipelineAbort as exc:
        console.print(f"[red]Import aborted: {escape(str(exc))}[/red]")
        ctx.exit(1)

    summary = result.summary
    colour = "green" if result.status == "success" else "yellow"
    verb = "validated" if dry_run else "created"
    count = summary.attempted - summary.failed if dry_run else summary.created
    console.print(
        f"[{colour}]Import {result.status}[/{colour}]: records={len(result.records)}, "
        f"{verb}={count}, failed={summary.failed}"
    )
    if result.degraded_stages:
        console.print(
            f"[yellow]Degraded stages: {', '.join(result.degraded_stages)}[/yellow]"
        )
    for err in summary.errors:
        console.print(f"  - {escape(err)}")
    console.print(f"Log file: {escape(str(result.log_path))}")
