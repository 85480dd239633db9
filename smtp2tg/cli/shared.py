"""Shared utilities for SMTP2TG CLI commands."""

from rich.console import Console

console = Console()

config_help = "Configuration file (default: $SMTP2TG_CONFIG or ./smtp2tg.toml)"
