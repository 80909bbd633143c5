from __future__ import annotations

import typer
from rich.console import Console

from alexa_entities.errors import ConfigMutationError
from alexa_entities.models import ErrorResponse
from alexa_entities.services import build_mutator, publish_allowlist

from .common import fail, load_settings_or_exit, print_json


def register(app: typer.Typer) -> None:
    @app.command()
    def publish(
        entity_ids: list[str] | None = typer.Argument(
            None, help="Entity ids Alexa may see; replaces the current allowlist"
        ),
        clear: bool = typer.Option(False, "--clear", help="Publish an empty allowlist"),
        as_json: bool = typer.Option(False, "--json", help="Print the raw response"),
    ) -> None:
        """Write the Alexa allowlist into configuration.yaml."""
        console = Console()

        if entity_ids and clear:
            console.print("[red]✗[/red] Pass entity ids or --clear, not both")
            raise typer.Exit(2)
        if not entity_ids and not clear:
            console.print("[red]✗[/red] Pass entity ids to publish, or --clear")
            raise typer.Exit(2)

        settings = load_settings_or_exit()
        try:
            result = publish_allowlist(settings, entity_ids or [])
        except ConfigMutationError as exc:
            if as_json:
                print_json(ErrorResponse(error=str(exc)))
                raise typer.Exit(1) from exc
            fail(console, exc)

        if as_json:
            print_json(result)
            return

        mutator = build_mutator(settings)
        console.print(f"[green]✓[/green] {result.message}")
        console.print(f"Entities published: {result.entities_count}")
        console.print(f"Backup: {mutator.backup_path}")
