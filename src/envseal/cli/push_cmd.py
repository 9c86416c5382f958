"""Push command: seal an .env file into a repository's secrets."""

from __future__ import annotations

import sys

import click
from rich.table import Table

from ..models import RunResult
from ..sync import run_sync
from ._common import HOME_OPTION, console, load_effective_config, status_markup


def _print_result(repo: str, result: RunResult) -> None:
    report = result.report
    console.print()
    if report is None:
        console.print(f"  [bold red]Sync of {repo} failed:[/] {result.variables[0]}\n")
        return

    table = Table(show_header=True, header_style="bold", box=None, padding=(0, 2))
    table.add_column("Secret", style="bold")
    table.add_column("Status")
    table.add_column("HTTP", style="dim")
    table.add_column("Detail", style="dim")

    for outcome in report.outcomes:
        detail = outcome.error or ("" if outcome.accepted else (outcome.body or ""))
        table.add_row(
            outcome.key,
            status_markup(outcome.accepted),
            str(outcome.status_code or "-"),
            detail[:60],
        )

    console.print(f"  Target: [cyan]{repo}[/] ([dim]{report.scope.value} key[/])")
    console.print(table)
    console.print(
        f"\n  [green]{len(report.succeeded_keys)} written[/], "
        f"[red]{len(report.failed_keys)} failed[/]\n"
    )


def register_push_commands(main: click.Group) -> None:
    """Register the push command."""

    @main.command("push")
    @click.argument("repo")
    @click.option(
        "--env-file", "-e", required=True, type=click.File("r", encoding="utf-8"),
        help="Path to the .env file, or - for stdin.",
    )
    @click.option("--token", "-t", default=None, help="API token (default: from env var).")
    @click.option("--workers", type=click.IntRange(min=1), default=None, help="Parallel pushes.")
    @click.option(
        "--timeout", type=click.FloatRange(min=0, min_open=True), default=None,
        help="Per-request timeout in seconds.",
    )
    @click.option("--retries", type=click.IntRange(min=0), default=None, help="Retries for transient errors.")
    @click.option("--json-out", is_flag=True, help="Output the run result as JSON.")
    @HOME_OPTION
    def push(repo, env_file, token, workers, timeout, retries, json_out, home):
        """Seal every secret in an .env file into REPO (owner/name)."""
        config = load_effective_config(
            home, workers=workers, timeout_seconds=timeout, max_retries=retries,
        )
        env_text = env_file.read()
        result = run_sync(repo, config.resolve_token(token), env_text, config=config)

        if json_out:
            click.echo(result.model_dump_json(indent=2))
        else:
            _print_result(repo, result)

        if not result.success:
            sys.exit(1)
