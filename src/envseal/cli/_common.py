"""Shared helpers for the CLI command modules."""

from __future__ import annotations

import click
from rich.console import Console

from .. import ENVSEAL_HOME
from ..config import EnvsealConfig, home_path, load_config

console = Console()

HOME_OPTION = click.option(
    "--home", default=ENVSEAL_HOME, type=click.Path(), help="envseal home directory.",
)


def load_effective_config(home: str, **overrides) -> EnvsealConfig:
    """Load config from ``home`` and apply any non-None CLI overrides."""
    config = load_config(home_path(home))
    update = {k: v for k, v in overrides.items() if v is not None}
    if not update:
        return config
    return EnvsealConfig(**{**config.model_dump(), **update})


def status_markup(accepted: bool) -> str:
    return "[bold green]OK[/]" if accepted else "[bold red]FAILED[/]"
