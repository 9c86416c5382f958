"""
envseal CLI.

Each command group lives in its own module and is attached to the
main Click group through a register function.

Entry point: envseal.cli:main
"""

from __future__ import annotations

import logging

import click

from .. import __version__


@click.group()
@click.version_option(version=__version__, prog_name="envseal")
@click.option("--verbose", "-v", count=True, help="More logging (-vv for debug).")
def main(verbose: int):
    """envseal -- seal .env secrets straight into the secret store."""
    level = logging.WARNING
    if verbose == 1:
        level = logging.INFO
    elif verbose > 1:
        level = logging.DEBUG
    logging.basicConfig(level=level, format="%(name)s: %(message)s")


from .config_cmd import register_config_commands
from .parse_cmd import register_parse_commands
from .push_cmd import register_push_commands

register_push_commands(main)
register_parse_commands(main)
register_config_commands(main)
