"""CLI interface for the charity selector.

Usage:
    charity-selector charities.csv profile.csv
    charity-selector select charities.csv profile.csv
    charity-selector select charities.csv profile.csv --format table
    charity-selector pools charities.csv profile.csv
    charity-selector --config config.yaml --verbose select charities.csv profile.csv
"""

from __future__ import annotations

import asyncio
import json
import sys

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from charity_selector.pipeline.logging_config import configure_logging
from charity_selector.pipeline.orchestrator import DEFAULT_CONFIG_PATH, SelectionOrchestrator
from charity_selector.selection.errors import SelectionError

console = Console()
err_console = Console(stderr=True)


def run_async(coro):
    """Run an async function to completion."""
    return asyncio.run(coro)


def _fail(title: str, error: Exception) -> None:
    err_console.print(f"[bold red]{title}[/bold red]")
    err_console.print(f"[red]Error:[/red] {escape(str(error))}")
    sys.exit(1)


class DefaultCommandGroup(click.Group):
    """Group that runs ``default_command`` when the first argument names no subcommand."""

    default_command = "select"

    def resolve_command(self, ctx, args):
        if args and args[0] not in self.commands and not args[0].startswith("-"):
            return self.default_command, self.commands[self.default_command], args
        return super().resolve_command(ctx, args)


@click.group(cls=DefaultCommandGroup)
@click.option("--config", default=DEFAULT_CONFIG_PATH, help="Config file path")
@click.option("--verbose", "-v", is_flag=True, help="Show debug logging on stderr")
@click.pass_context
def cli(ctx, config: str, verbose: bool):
    """Charity selector CLI."""
    configure_logging(verbose)
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config


@cli.command()
@click.argument("charities_path", type=click.Path(dir_okay=False))
@click.argument("profile_path", type=click.Path(dir_okay=False))
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["json", "table"]),
    default="json",
    help="Output one JSON object per charity, or a table",
)
@click.pass_context
def select(ctx, charities_path: str, profile_path: str, output_format: str):
    """Select charities for the user in PROFILE_PATH from CHARITIES_PATH."""
    orchestrator = SelectionOrchestrator(config_path=ctx.obj["config_path"])
    try:
        result = run_async(orchestrator.run(charities_path, profile_path))
    except SelectionError as e:
        _fail("CHARITY SELECTION FAILED", e)
        return

    if output_format == "table":
        table = Table(title="Selected Charities")
        table.add_column("#", style="dim", width=4)
        table.add_column("ID", style="cyan")
        table.add_column("Name", max_width=50)
        table.add_column("State")
        table.add_column("Category")
        table.add_column("Featured")
        for i, item in enumerate(result, 1):
            row = item.to_dict()
            table.add_row(str(i), row["id"], row["name"], row["state"], row["category"], row["featured"])
        console.print(table)
    else:
        for item in result:
            click.echo(json.dumps(item.to_dict()))

    for shortfall in result.shortfalls:
        err_console.print(f"[yellow]Warning:[/yellow] {shortfall}")
    click.echo(
        f"Total charities selected: {len(result)} "
        f"({result.national_count} national, {result.regional_count} state)"
    )


@cli.command()
@click.argument("charities_path", type=click.Path(dir_okay=False))
@click.argument("profile_path", type=click.Path(dir_okay=False))
@click.pass_context
def pools(ctx, charities_path: str, profile_path: str):
    """Show eligible pool sizes and categories for the user in PROFILE_PATH."""
    orchestrator = SelectionOrchestrator(config_path=ctx.obj["config_path"])
    try:
        eligible = run_async(orchestrator.inspect_pools(charities_path, profile_path))
    except SelectionError as e:
        _fail("POOL INSPECTION FAILED", e)
        return

    counts = eligible.category_counts()
    table = Table(title="Eligible Pools")
    table.add_column("Category", style="cyan")
    table.add_column("National", justify="right")
    table.add_column("State", justify="right")
    for category in sorted(set(counts["national"]) | set(counts["regional"])):
        table.add_row(
            category or "-",
            str(counts["national"].get(category, 0)),
            str(counts["regional"].get(category, 0)),
        )
    table.add_section()
    table.add_row("[bold]Total", f"[bold]{len(eligible.national)}", f"[bold]{len(eligible.regional)}")
    console.print(table)


def main():
    cli()


if __name__ == "__main__":
    main()
