from __future__ import annotations

import asyncio

import typer
from rich.console import Console

from alexa_entities.core import run_mock_hub


def register(app: typer.Typer) -> None:
    @app.command("mock-hub")
    def mock_hub(
        host: str = typer.Option("127.0.0.1", "--host", help="Interface to bind"),
        port: int = typer.Option(8765, "--port", "-p", help="Port to listen on"),
        token: str = typer.Option(
            "test-token", "--token", "-t", help="Access token clients must send"
        ),
    ) -> None:
        """Run a fake Home Assistant WebSocket API for development."""
        console = Console()
        console.print(f"Starting mock hub on ws://{host}:{port}/api/websocket ...")
        console.print("Press Ctrl+C to stop.\n")

        try:
            asyncio.run(run_mock_hub(host=host, port=port, access_token=token))
        except KeyboardInterrupt:
            console.print("\n[green]Mock hub stopped.[/green]")
