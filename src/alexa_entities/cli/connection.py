from __future__ import annotations

import typer
from rich.console import Console

from alexa_entities.errors import CredentialUnavailable
from alexa_entities.services import connection_config
from alexa_entities.utils.redaction import Redactor

from .common import build_provider, fail, load_settings_or_exit, print_json


def register(app: typer.Typer) -> None:
    @app.command()
    def connection(
        show_token: bool = typer.Option(
            False, "--show-token", help="Print the access token unredacted"
        ),
        as_json: bool = typer.Option(False, "--json", help="Print the raw response"),
    ) -> None:
        """Show how the dashboard reaches Home Assistant."""
        console = Console()
        settings = load_settings_or_exit()
        provider = build_provider(settings)

        try:
            response = connection_config(provider)
        except CredentialUnavailable as exc:
            fail(console, exc)

        redactor = Redactor(enabled=not show_token)
        response = response.model_copy(
            update={
                "access_token": redactor.redact_token(response.access_token),
                "websocket_url": redactor.redact_url(response.websocket_url),
            }
        )

        if as_json:
            print_json(response)
            return

        console.print("[bold]Home Assistant connection[/bold]\n")
        console.print(f"Options file: {provider.path}")
        console.print(f"WebSocket URL: {response.websocket_url}")
        console.print(f"Access token: {response.access_token}")
