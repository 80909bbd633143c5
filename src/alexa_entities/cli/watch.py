from __future__ import annotations

import asyncio
import logging

import typer
from rich.console import Console

from alexa_entities.config import AddonOptionsProvider, Settings
from alexa_entities.core import RegistrySyncEngine, Snapshot, websocket_connector
from alexa_entities.errors import ConfigMutationError
from alexa_entities.services import build_mutator

from .common import build_provider, load_settings_or_exit

logger = logging.getLogger(__name__)


def describe(snapshot: Snapshot) -> str:
    synced = sum(1 for entity in snapshot.entities if entity.shared)
    line = (
        f"[bold]{snapshot.state}[/bold] "
        f"{len(snapshot.entities)} entities, {synced} synced"
    )
    if snapshot.error:
        line += f" [red]({snapshot.error})[/red]"
    return line


def _read_allowlist(settings: Settings) -> list[str]:
    try:
        return build_mutator(settings).read_allowlist()
    except ConfigMutationError as exc:
        logger.warning("Could not read allowlist: %s", exc)
        return []


async def watch_registries(
    settings: Settings,
    provider: AddonOptionsProvider,
    console: Console,
    reload_interval: float | None = None,
) -> Snapshot:
    engine = RegistrySyncEngine(
        provider,
        websocket_connector(settings.hub.timeout, settings.hub.max_message_size),
        entity_domains=provider.entity_domains(settings.hub.entity_domains),
        allowlist=_read_allowlist(settings),
    )
    unsubscribe = engine.subscribe(lambda snapshot: console.print(describe(snapshot)))
    runner = asyncio.create_task(engine.run())
    try:
        while not runner.done():
            done, _ = await asyncio.wait({runner}, timeout=reload_interval)
            if done:
                break
            # pick up allowlist changes published by someone else
            engine.set_allowlist(_read_allowlist(settings))
            await engine.reload()
    finally:
        unsubscribe()
        if not runner.done():
            await engine.close()
            runner.cancel()
        await asyncio.gather(runner, return_exceptions=True)
    return engine.snapshot


def register(app: typer.Typer) -> None:
    @app.command()
    def watch(
        reload_interval: float | None = typer.Option(
            None,
            "--reload-interval",
            "-r",
            min=1.0,
            help="Re-query the registries every N seconds",
        ),
    ) -> None:
        """Stay connected and print every registry update."""
        console = Console()
        settings = load_settings_or_exit()
        provider = build_provider(settings)

        console.print("Watching Home Assistant registries. Press Ctrl+C to stop.\n")
        try:
            snapshot = asyncio.run(
                watch_registries(settings, provider, console, reload_interval)
            )
        except KeyboardInterrupt:
            console.print("\n[green]Stopped.[/green]")
            return

        if snapshot.error and not snapshot.synced:
            raise typer.Exit(1)
