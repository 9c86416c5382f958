"""Parse command: preview what an .env file will produce, offline."""

from __future__ import annotations

import json

import click
from rich.table import Table

from ..envparser import parse_env
from ._common import console


def register_parse_commands(main: click.Group) -> None:
    """Register the parse command."""

    @main.command("parse")
    @click.argument("env_file", type=click.File("r", encoding="utf-8"))
    @click.option("--json-out", is_flag=True, help="Output as JSON.")
    def parse(env_file, json_out):
        """List the keys in ENV_FILE (or - for stdin). Values are never shown."""
        secrets = parse_env(env_file.read())

        if json_out:
            click.echo(json.dumps(
                [{"key": k, "length": len(v)} for k, v in secrets.items()], indent=2,
            ))
            return

        if not secrets:
            console.print("\n  [yellow]No secrets found.[/]\n")
            return

        table = Table(show_header=True, header_style="bold", box=None, padding=(0, 2))
        table.add_column("Key", style="bold cyan")
        table.add_column("Chars", justify="right")
        table.add_column("Lines", justify="right", style="dim")
        for key, value in secrets.items():
            table.add_row(key, str(len(value)), str(value.count("\n") + 1))

        console.print()
        console.print(table)
        console.print(f"\n  [bold]{len(secrets)}[/] secret(s)\n")
