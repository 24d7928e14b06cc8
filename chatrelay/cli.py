"""
CLI tool for running and inspecting the chat relay.

Provides commands for starting the server with uvicorn and for viewing the
effective configuration.
"""

from typing import Optional

import typer
import uvicorn
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from chatrelay.settings import app_settings

# Initialize Typer app with help text
typer_app = typer.Typer(
    name="chatrelay",
    help="Chat relay CLI - Run the WebSocket chat server",
    add_completion=False,
)
console = Console()


@typer_app.command(name="serve")
def serve(
    host: Optional[str] = typer.Option(
        None, "--host", help="Bind address (default: HOST setting)"
    ),
    port: Optional[int] = typer.Option(
        None, "--port", "-p", help="Listen port (default: PORT setting)"
    ),
    reload: bool = typer.Option(
        False, "--reload", help="Restart the server on code changes"
    ),
):
    """
    Start the chat server.

    Uvicorn handles SIGINT/SIGTERM: it stops accepting connections, runs the
    application shutdown which closes every WebSocket, and exits.

    Example:
        chatrelay serve --port 3000
    """
    if host is None:
        host = app_settings.HOST
    if port is None:
        port = app_settings.PORT

    console.print(
        Panel.fit(
            f"[bold cyan]Chat relay[/bold cyan]\n\n"
            f"Listening on [yellow]http://{host}:{port}[/yellow]",
            border_style="cyan",
        )
    )

    uvicorn.run(
        "chatrelay:application",
        factory=True,
        host=host,
        port=port,
        reload=reload,
        log_config=None,
    )


@typer_app.command(name="settings")
def show_settings():
    """
    Display the effective settings.

    Values come from environment variables and the optional `.env` file.

    Example:
        chatrelay settings
    """
    console.print()

    table = Table(
        "Setting",
        "Value",
        title="Chat relay settings",
        show_lines=True,
    )

    for name, value in app_settings.model_dump().items():
        table.add_row(f"[green]{name}[/green]", str(value))

    console.print(table)
    console.print()
    console.print(
        f"[bold]CORS origins:[/bold] {', '.join(app_settings.cors_origins)}"
    )
    console.print()


if __name__ == "__main__":
    typer_app()
