"""Start command."""

import click
from rich.markup import escape

from smtp2tg.errors import ConfigError

from . import cli
from .shared import config_help, console


@cli.command()
@click.option("--config", "-c", "config_path", type=click.Path(dir_okay=False), help=config_help)
@click.option("--debug", is_flag=True, help="Enable debug logging")
def start(config_path, debug):
    """Start the SMTP server."""
    from smtp2tg.main import main

    console.print("[bold blue]Starting SMTP2TG...[/bold blue]")
    try:
        main(config_path, debug=debug)
    except ConfigError as e:
        console.print(f"[red]{escape(str(e))}[/red]")
        raise SystemExit(1)
