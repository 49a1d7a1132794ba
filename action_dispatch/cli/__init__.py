"""CLI commands for action-dispatch."""

import typer

from action_dispatch.cli.admin import init_db, serve
from action_dispatch.cli.monitor import monitor, run_request

main_app = typer.Typer(
    name="action-dispatch",
    help="Action dispatch CLI",
    no_args_is_help=True,
)
main_app.command("run")(run_request)
main_app.command("monitor")(monitor)
main_app.command("serve")(serve)
main_app.command("init-db")(init_db)


def main() -> None:
    """Entry point for the CLI."""
    main_app()


__all__ = ["main", "main_app"]
