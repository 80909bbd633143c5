from __future__ import annotations

from pathlib import Path
from typing import NoReturn

import typer
from pydantic import BaseModel
from rich.console import Console

from alexa_entities.config import (
    AddonOptionsProvider,
    Settings,
    get_settings,
    options_path,
    resolve_config_path,
)


def load_settings_or_exit() -> Settings:
    try:
        return get_settings()
    except (FileNotFoundError, ValueError) as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(1) from exc


def resolve_config_path_or_exit(allow_missing: bool = False) -> tuple[Path, bool]:
    try:
        return resolve_config_path(allow_missing=allow_missing)
    except FileNotFoundError as exc:
        typer.echo(str(exc), err=True)
        raise typer.Exit(1) from exc


def build_provider(settings: Settings) -> AddonOptionsProvider:
    return AddonOptionsProvider(options_path(settings))


def print_json(payload: BaseModel) -> None:
    typer.echo(payload.model_dump_json(by_alias=True, indent=2))


def fail(console: Console, exc: Exception) -> NoReturn:
    console.print(f"[red]✗[/red] {exc}")
    raise typer.Exit(1) from exc
