from __future__ import annotations

from typing import Annotated

import typer

from alexa_entities.utils.logging import setup_logging

from . import config as config_cmd
from .allowlist import register as register_allowlist
from .connection import register as register_connection
from .entities import register as register_entities
from .mock import register as register_mock
from .publish import register as register_publish
from .watch import register as register_watch

app = typer.Typer(
    help="alexa-entities - choose which Home Assistant entities Alexa can see",
    no_args_is_help=True,
)

app.add_typer(config_cmd.app, name="config")

register_entities(app)
register_watch(app)
register_allowlist(app)
register_publish(app)
register_connection(app)
register_mock(app)


@app.callback(invoke_without_command=True)
def main(
    version: Annotated[
        bool,
        typer.Option("--version", "-v", help="Show version and exit"),
    ] = False,
) -> None:
    """alexa-entities CLI."""
    setup_logging()

    if version:
        from importlib.metadata import version as get_version

        typer.echo(f"alexa-entities version {get_version('alexa-entities')}")
        raise typer.Exit()
