"""CLI commands: nightmare config show | path | init."""

from __future__ import annotations

import json
import sys

import click
from rich.console import Console

from nightmare.core.config import NightmareConfig, config_to_dict, save_config
from nightmare.core.constants import ExitCode
from nightmare.core.exceptions import ConfigError

console = Console()


@click.group("config")
def config_group() -> None:
    """View or write the effective Nightmare configuration."""


@config_group.command("show")
@click.option("--json", "as_json", is_flag=True, default=False, help="Output as JSON")
@click.pass_obj
def config_show(config: NightmareConfig, as_json: bool) -> None:
    """Display the effective configuration (file + environment + defaults)."""
    data = config_to_dict(config)

    if as_json:
        click.echo(json.dumps(data, indent=2))
        return

    console.print(f"[bold]Nightmare Configuration[/bold]  ({config.config_path})\n")
    for section, values in data.items():
        if isinstance(values, dict):
            console.print(f"  [cyan][{section}][/cyan]")
            for k, v in values.items():
                console.print(f"    {k} = {v!r}")
        else:
            console.print(f"  {section} = {values!r}")
    console.print()


@config_group.command("path")
@click.pass_obj
def config_path(config: NightmareConfig) -> None:
    """Print the config file location."""
    click.echo(str(config.config_path))


@config_group.command("init")
@click.option("--force", is_flag=True, default=False, help="Overwrite an existing file")
@click.pass_obj
def config_init(config: NightmareConfig, force: bool) -> None:
    """Write the effective configuration to the config file."""
    if config.config_path.exists() and not force:
        console.print(f"[yellow]{config.config_path} already exists.[/yellow] Use --force.")
        sys.exit(ExitCode.ERROR)

    try:
        path = save_config(config)
    except ConfigError as exc:
        console.print(f"[red]Config error:[/red] {exc}")
        sys.exit(ExitCode.CONFIG_ERROR)

    console.print(f"[green]Wrote[/green] {path}")
