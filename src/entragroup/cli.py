"""Command line entry point for entragroup."""

from __future__ import annotations

import logging
import sys
from typing import Optional

import typer
from rich.console import Console
from rich.markup import escape

from entragroup import __version__
from entragroup.commands import Settings
from entragroup.commands import config as config_cmd
from entragroup.commands import members as members_cmd
from entragroup.output import OutputFormat

err_console = Console(stderr=True)

app = typer.Typer(
    name="entragroup",
    help=(
        "Report the user members of a Microsoft Entra ID group as a table or CSV file.\n\n"
        "[dim]The app registration needs Group.Read.All and User.Read.All "
        "application permissions with admin consent.[/dim]"
    ),
    no_args_is_help=True,
    rich_markup_mode="rich",
)


def configure_logging(verbose: bool) -> None:
    # Diagnostics share stderr with warnings so stdout carries only the report
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s" if verbose else "%(levelname)s: %(message)s",
        stream=sys.stderr,
    )
    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.DEBUG if verbose else logging.WARNING)


def show_version(value: bool) -> None:
    if value:
        typer.echo(f"entragroup {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    ctx: typer.Context,
    context: Optional[str] = typer.Option(
        None, "--context", "-c",
        help="App registration context to use instead of the current one",
        envvar="ENTRAGROUP_CONTEXT",
    ),
    output: OutputFormat = typer.Option(
        OutputFormat.TABLE, "--output", "-o",
        help="Console format of the report",
        envvar="ENTRAGROUP_OUTPUT",
        case_sensitive=False,
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v",
        help="Log Graph requests and pipeline steps to stderr",
        envvar="ENTRAGROUP_VERBOSE",
    ),
    plain: bool = typer.Option(False, "--plain", help="No colors or box drawing"),
    version: bool = typer.Option(
        False, "--version", "-V",
        callback=show_version, is_eager=True,
        help="Show version and exit",
    ),
) -> None:
    """Report the user members of a Microsoft Entra ID group.

    Examples:
        entragroup config set-context contoso --tenant-id contoso.onmicrosoft.com --client-id ID
        entragroup members --group-name "Marketing Team"
        entragroup -o json members --group-id 0f2c... > members.json
    """
    ctx.obj = Settings(context=context, output=output, verbose=verbose, plain=plain)
    configure_logging(verbose)


app.add_typer(config_cmd.app, name="config", help="Manage app registration contexts")
app.command("members")(members_cmd.list_members)


def main_cli() -> None:
    """Console script entry point."""
    try:
        app()
    except Exception as e:
        if logging.getLogger().isEnabledFor(logging.DEBUG):
            err_console.print_exception()
        else:
            err_console.print(f"[red]Error:[/red] {escape(str(e))}")
        sys.exit(1)


if __name__ == "__main__":
    main_cli()
