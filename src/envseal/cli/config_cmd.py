"""Config commands: show, set."""

from __future__ import annotations

import sys

import click
import yaml
from pydantic import ValidationError

from ..config import EnvsealConfig, home_path, load_config, save_config
from ._common import HOME_OPTION, console


def register_config_commands(main: click.Group) -> None:
    """Register the config command group."""

    @main.group()
    def config():
        """Inspect and change run configuration."""

    @config.command("show")
    @HOME_OPTION
    def config_show(home):
        """Print the effective configuration."""
        cfg = load_config(home_path(home))
        click.echo(yaml.dump(cfg.model_dump(mode="json"), default_flow_style=False), nl=False)

    @config.command("set")
    @click.argument("key")
    @click.argument("value")
    @HOME_OPTION
    def config_set(key, value, home):
        """Set KEY to VALUE in config.yaml."""
        if key not in EnvsealConfig.model_fields:
            console.print(f"[red]Unknown config key:[/] {key}")
            sys.exit(1)

        path = home_path(home)
        data = load_config(path).model_dump()
        data[key] = yaml.safe_load(value)
        try:
            cfg = EnvsealConfig(**data)
        except ValidationError as exc:
            console.print(f"[red]Invalid value for {key}:[/] {exc.errors()[0]['msg']}")
            sys.exit(1)

        written = save_config(cfg, path)
        console.print(f"  [green]{key}[/] = {getattr(cfg, key)!r}  [dim]({written})[/]")
