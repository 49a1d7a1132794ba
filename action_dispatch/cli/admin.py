"""CLI commands for provisioning and serving."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer
import uvicorn
from rich.console import Console
from rich.table import Table

from action_dispatch.adapters.identity import IdentityAdapter
from action_dispatch.core.config import config
from action_dispatch.core.directives import DirectiveStore
from action_dispatch.core.exceptions import DispatchError

console = Console()


def init_db(
    directives_path: Optional[Path] = typer.Option(
        None, "--directives", "-d", help="Directive file (defaults to DIRECTIVES_PATH)"
    ),
    admin_login: str = typer.Option(
        config.BOOTSTRAP_ADMIN_LOGIN, "--admin-login", help="Login of the seed administrator"
    ),
    admin_password: Optional[str] = typer.Option(
        None, "--admin-password", help="Password of the seed administrator"
    ),
    admin_role: str = typer.Option(
        "administrator", "--admin-role", help="Role given to the seed administrator"
    ),
) -> None:
    """Create the identity database, sync roles, and seed an administrator."""
    try:
        directives = DirectiveStore.load(directives_path or config.DIRECTIVES_PATH)
        adapter = IdentityAdapter()
        roles = directives.roles()
        adapter.sync_roles(roles)
        password = admin_password or config.BOOTSTRAP_ADMIN_PASSWORD
        if password:
            user = adapter.ensure_admin(admin_login, password, role=admin_role)
            console.print(f"[green]Administrator ready:[/green] {user.login}")
    except DispatchError as e:
        console.print(f"[red]Error:[/red] {e}", highlight=False)
        raise typer.Exit(1) from e

    if not roles:
        console.print("[dim]No roles declared in the directive file.[/dim]")
        return

    table = Table(title="Roles")
    table.add_column("Role", style="cyan")
    table.add_column("Permissions")
    for slug, permissions in sorted(roles.items()):
        table.add_row(slug, ", ".join(sorted(permissions)) or "-")
    console.print(table)


def serve(
    host: str = typer.Option("127.0.0.1", "--host", help="Bind address"),
    port: int = typer.Option(8000, "--port", help="Bind port"),
    reload: bool = typer.Option(False, "--reload", help="Reload on code changes"),
) -> None:
    """Serve the web transport with uvicorn."""
    uvicorn.run(
        "action_dispatch.api_factory:create_app",
        factory=True,
        host=host,
        port=port,
        reload=reload,
    )


__all__ = ["init_db", "serve"]
