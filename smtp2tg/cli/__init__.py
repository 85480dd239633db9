"""SMTP2TG CLI — command line interface."""

import click
from smtp2tg import __version__


@click.group()
@click.version_option(version=__version__, prog_name="smtp2tg")
def cli():
    """SMTP2TG — relay incoming mail to Telegram chats"""


# Import all command modules (registers commands onto cli group)
from . import cmd_start  # noqa: E402, F401
from . import cmd_check  # noqa: E402, F401
