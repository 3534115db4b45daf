"""Commands for the app registration contexts in the config file."""

from __future__ import annotations

from typing import Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from entragroup.config import (
    AppRegistration,
    config_path,
    load_config,
    save_config,
    secret_hint,
)
from entragroup.errors import PreconditionError

app = typer.Typer(no_args_is_help=True)
console = Console()
err_console = Console(stderr=True)


def _load():
    try:
        return load_config()
    except PreconditionError as e:
        err_console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(1)


@app.command("set-context")
def set_context(
    name: str = typer.Argument(..., help="Context name, e.g. the tenant's short name"),
    tenant_id: Optional[str] = typer.Option(
        None, "--tenant-id", "-t", help="Directory (tenant) ID or primary domain"
    ),
    client_id: Optional[str] = typer.Option(
        None, "--client-id", "-i", help="Application (client) ID of the app registration"
    ),
    client_secret: Optional[str] = typer.Option(
        None, "--client-secret", "-s",
        help="Client secret value (prompted for, hidden, when omitted)",
    ),
    use: bool = typer.Option(False, "--use", help="Make this the current context"),
) -> None:
    """Store an app registration as a named context.

    Options left out keep their stored value when the context exists, so a
    rotated secret can be saved on its own. The first context stored
    becomes the current one.

    Examples:
        entragroup config set-context contoso -t contoso.onmicrosoft.com -i 1111...
        entragroup config set-context contoso --client-secret NEW_VALUE
    """
    config = _load()
    existing = config.contexts.get(name)

    tenant_id = tenant_id or (existing.tenant_id if existing else None)
    client_id = client_id or (existing.client_id if existing else None)
    if not tenant_id or not client_id:
        err_console.print("[red]Error:[/red] A new context needs --tenant-id and --client-id")
        raise typer.Exit(1)
    if not client_secret:
        client_secret = existing.client_secret if existing else typer.prompt(
            "Client secret", hide_input=True
        )

    config.contexts[name] = AppRegistration(
        tenant_id=tenant_id, client_id=client_id, client_secret=client_secret
    )
    if use or not config.current_context:
        config.current_context = name
    path = save_config(config)

    verb = "Updated" if existing else "Stored"
    console.print(f"{verb} context '{escape(name)}' in {escape(str(path))}")
    if config.current_context == name:
        console.print(f"Current context is '{escape(name)}'")


@app.command("use-context")
def use_context(name: str = typer.Argument(..., help="Context to make current")) -> None:
    """Switch the current context."""
    config = _load()
    if name not in config.contexts:
        known = ", ".join(sorted(config.contexts)) or "none"
        err_console.print(f"[red]Error:[/red] No context '{escape(name)}' (configured: {known})")
        raise typer.Exit(1)

    config.current_context = name
    save_config(config)
    console.print(f"Current context is '{escape(name)}'")


@app.command("view")
def view() -> None:
    """List the stored contexts. Client secrets are shown as a hint only."""
    config = _load()
    if not config.contexts:
        console.print("No contexts configured. Use 'entragroup config set-context'.")
        return

    table = Table(show_edge=False)
    table.add_column("")
    table.add_column("CONTEXT")
    table.add_column("TENANT")
    table.add_column("CLIENT ID", no_wrap=True)
    table.add_column("SECRET")
    for name, registration in config.contexts.items():
        table.add_row(
            "*" if name == config.current_context else "",
            name,
            registration.tenant_id,
            registration.client_id,
            secret_hint(registration.client_secret),
        )
    console.print(table)


@app.command("path")
def show_path() -> None:
    """Print where the config file is stored."""
    typer.echo(str(config_path()))
