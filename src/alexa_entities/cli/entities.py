from __future__ import annotations

import asyncio
from collections.abc import Iterable
from enum import StrEnum

import typer
from rich.console import Console
from rich.table import Table

from alexa_entities.errors import AlexaEntitiesError
from alexa_entities.models import CompiledEntity, EntitiesResponse, ErrorResponse
from alexa_entities.services import load_entities

from .common import build_provider, fail, load_settings_or_exit, print_json


class QuickFilter(StrEnum):
    ALL = "all"
    SYNCED = "synced"
    UNSYNCED = "unsynced"


def _haystack(entity: CompiledEntity) -> str:
    return " ".join(
        (
            entity.device.name,
            entity.name,
            entity.entity_id,
            entity.device.manufacturer,
            entity.area.name,
        )
    ).lower()


def filter_entities(
    entities: Iterable[CompiledEntity],
    quick: QuickFilter = QuickFilter.ALL,
    domains: Iterable[str] = (),
    search: str | None = None,
) -> list[CompiledEntity]:
    wanted_domains = set(domains)
    terms = search.lower().split() if search else []

    selected = []
    for entity in entities:
        if quick is QuickFilter.SYNCED and not entity.shared:
            continue
        if quick is QuickFilter.UNSYNCED and entity.shared:
            continue
        if wanted_domains and entity.domain not in wanted_domains:
            continue
        if terms and not all(term in _haystack(entity) for term in terms):
            continue
        selected.append(entity)

    selected.sort(key=lambda e: (e.device.name.lower(), e.name.lower(), e.entity_id))
    return selected


def register(app: typer.Typer) -> None:
    @app.command()
    def entities(
        quick: QuickFilter = typer.Option(
            QuickFilter.ALL, "--filter", "-f", help="Show all, synced or unsynced"
        ),
        domain: list[str] | None = typer.Option(
            None, "--domain", "-d", help="Only show this domain (repeatable)"
        ),
        search: str | None = typer.Option(
            None, "--search", "-s", help="Words to match in device, name, id, area"
        ),
        as_json: bool = typer.Option(False, "--json", help="Print the raw response"),
    ) -> None:
        """List Home Assistant entities and whether Alexa can see them."""
        console = Console()
        settings = load_settings_or_exit()
        provider = build_provider(settings)

        try:
            response = asyncio.run(load_entities(settings, provider))
        except AlexaEntitiesError as exc:
            if as_json:
                print_json(ErrorResponse(message=str(exc)))
                raise typer.Exit(1) from exc
            fail(console, exc)

        rows = filter_entities(response.data, quick, domain or (), search)

        if as_json:
            print_json(EntitiesResponse(data=rows))
            return

        if not rows:
            console.print("No matching entities.")
            return

        table = Table()
        table.add_column("Device", style="cyan")
        table.add_column("Name")
        table.add_column("Entity Id", style="green")
        table.add_column("Manufacturer")
        table.add_column("Area", style="yellow")
        table.add_column("Synced")

        for entity in rows:
            table.add_row(
                entity.device.name,
                entity.name,
                entity.entity_id,
                entity.device.manufacturer,
                entity.area.name,
                "[green]✓[/green]" if entity.shared else "",
            )

        console.print(table)
        synced = sum(1 for entity in rows if entity.shared)
        console.print(f"\n[green]{len(rows)} entities, {synced} synced[/green]")
