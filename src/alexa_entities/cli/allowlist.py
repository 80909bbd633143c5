from __future__ import annotations

import typer
from rich.console import Console

from alexa_entities.errors import ConfigMutationError
from alexa_entities.models import ErrorResponse
from alexa_entities.services import get_allowlist

from .common import fail, load_settings_or_exit, print_json


def register(app: typer.Typer) -> None:
    @app.command()
    def allowlist(
        as_json: bool = typer.Option(False, "--json", help="Print the raw response"),
    ) -> None:
        """Show the entity ids Alexa is currently allowed to see."""
        console = Console()
        settings = load_settings_or_exit()

        try:
            response = get_allowlist(settings)
        except ConfigMutationError as exc:
            if as_json:
                print_json(ErrorResponse(message=str(exc)))
                raise typer.Exit(1) from exc
            fail(console, exc)

        if as_json:
            print_json(response)
            return

        if not response.entity_ids:
            console.print("Allowlist is empty.")
            return

        for entity_id in response.entity_ids:
            console.print(entity_id)
        console.print(f"\n[green]{len(response.entity_ids)} entities allowed[/green]")
