"""CLI commands that dispatch requests from the terminal."""

from __future__ import annotations

from typing import List, Optional

import typer
from rich.console import Console

from action_dispatch.bootstrap import build_default_service_container
from action_dispatch.core.exceptions import DispatchError
from action_dispatch.core.models import ShapedResponse
from action_dispatch.services import ServiceContainer
from action_dispatch.services.dispatcher import Dispatcher
from action_dispatch.services.identity import PASSWORD_FIELD, USERNAME_FIELD
from action_dispatch.services.request_context import context_from_argv

console = Console()


def _load_services() -> ServiceContainer:
    try:
        return build_default_service_container()
    except DispatchError as e:
        console.print(f"[red]Error:[/red] {e}", highlight=False)
        raise typer.Exit(1) from e


def _write(text: str) -> None:
    console.print(text, markup=False, highlight=False)


def run_request(
    params: Optional[List[str]] = typer.Argument(None, help="Request parameters as key=value"),
    login: Optional[str] = typer.Option(None, "--login", "-u", help="Log in as this user first"),
    password: str = typer.Option("", "--password", "-p", help="Password for --login"),
) -> None:
    """Dispatch a single request, e.g. ``run ctrl=admin action=getUserDetails email=x``."""
    dispatcher = Dispatcher(_load_services())
    try:
        if login:
            dispatcher.identity.login({USERNAME_FIELD: login, PASSWORD_FIELD: password})
        context = context_from_argv(params or [])
    except DispatchError as e:
        console.print(f"[red]Error:[/red] {e}", highlight=False)
        raise typer.Exit(1) from e

    try:
        result = dispatcher.dispatch(context)
    finally:
        dispatcher.identity.logout()
    if isinstance(result, ShapedResponse):
        _write(str(result.body))
        if result.status_code >= 400:
            raise typer.Exit(1)


def monitor(
    login: Optional[str] = typer.Option(None, "--login", "-u", help="Log in as this user"),
    password: str = typer.Option("", "--password", "-p", help="Password for --login"),
) -> None:
    """Start the interactive request monitor. Type ``exit`` to leave."""
    dispatcher = Dispatcher(_load_services())
    credentials = {USERNAME_FIELD: login, PASSWORD_FIELD: password} if login else None
    if credentials is None:
        console.print("[dim]Log in with: un=<login> pw=<password>[/dim]")
    try:
        dispatcher.run_interactive_session(
            read_line=console.input,
            write=_write,
            credentials=credentials,
        )
    finally:
        dispatcher.identity.logout()


__all__ = ["monitor", "run_request"]
