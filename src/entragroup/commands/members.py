"""Group member report command."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.markup import escape

from entragroup.commands import Settings
from entragroup.config import load_config
from entragroup.directory import create_directory_from_config
from entragroup.errors import EntraGroupError
from entragroup.export import ReportEmitter
from entragroup.output import OutputFormat, ReportPrinter
from entragroup.pipeline import run_report

err_console = Console(stderr=True)


def print_error(error: EntraGroupError) -> None:
    stage = f" during {error.stage}" if error.stage else ""
    err_console.print(f"[red]Error{stage}:[/red] {escape(str(error))}")


def list_members(
    ctx: typer.Context,
    group_name: Optional[str] = typer.Option(
        None, "--group-name", "-n", help="Group display name"
    ),
    group_id: Optional[str] = typer.Option(
        None, "--group-id", "-g", help="Group object ID"
    ),
    export_csv: bool = typer.Option(
        False, "--export-csv", help="Write the report to a CSV file"
    ),
    csv_path: Optional[Path] = typer.Option(
        None,
        "--csv-path",
        help="CSV destination (default: EntraGroup_<name>_<timestamp>.csv in the current directory)",
    ),
    transitive: bool = typer.Option(
        False, "--transitive", help="Include users of nested groups"
    ),
    output: Optional[OutputFormat] = typer.Option(
        None, "--output", "-o", help="Console format (overrides the global option)",
        case_sensitive=False,
    ),
) -> None:
    """List the user members of a group.

    Devices, service principals and nested groups are left out. Members
    whose profile cannot be read are skipped with a warning.

    Example:
        entragroup members --group-name "Marketing Team"
        entragroup members --group-id 0f2c... --export-csv --csv-path reports/marketing.csv
    """
    if (group_name is None) == (group_id is None):
        raise typer.BadParameter("Specify exactly one of --group-name or --group-id")

    settings = ctx.obj if isinstance(ctx.obj, Settings) else Settings()
    printer = ReportPrinter(format=output or settings.output, plain=settings.plain)
    emitter = ReportEmitter(printer=printer, console=err_console)

    try:
        directory = create_directory_from_config(
            load_config(), settings.context, settings.verbose, transitive=transitive
        )
        report = run_report(
            directory,
            group_name=group_name,
            group_id=group_id,
            export_csv=export_csv,
            csv_path=csv_path,
            emitter=emitter,
        )
    except EntraGroupError as e:
        print_error(e)
        raise typer.Exit(1)

    for warning in report.warnings:
        err_console.print(f"[yellow]Warning:[/yellow] {escape(str(warning))}")

    if report.export_error is not None:
        print_error(report.export_error)
        raise typer.Exit(1)
