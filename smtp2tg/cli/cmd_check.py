"""Configuration check command."""

import click
from rich.markup import escape
from rich.table import Table

from smtp2tg.errors import ConfigError

from . import cli
from .shared import config_help, console


@cli.command()
@click.option("--config", "-c", "config_path", type=click.Path(dir_okay=False), help=config_help)
def check(config_path):
    """Validate configuration and show routing."""
    from smtp2tg.config import load_settings

    try:
        settings = load_settings(config_path)
    except ConfigError as e:
        console.print(f"[red]✗ {escape(str(e))}[/red]")
        raise SystemExit(1)

    table = Table(title="Recipients")
    table.add_column("Key", style="bold")
    table.add_column("Chat ID", justify="right")
    for key, chat in sorted(settings.recipients.items()):
        table.add_row(key, str(chat))
    table.add_row("[dim](default)[/dim]", str(settings.default))
    console.print(table)

    console.print(f"Domains: {', '.join(sorted(settings.domains))}")
    console.print(f"Fields: {', '.join(sorted(settings.fields))}")
    console.print(f"Unknown recipients: [bold]{settings.unknown}[/bold]")
    console.print(f"Listening on: {settings.listen_on} as {settings.hostname}")
    console.print("[green]✓ Configuration OK[/green]")
