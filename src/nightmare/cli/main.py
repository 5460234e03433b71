"""
Nightmare CLI entry point.

Commands:
  nightmare login            — log in and approve this device
  nightmare status           — show the VM state
  nightmare start [--wait]   — start the VM, optionally wait until it is up
  nightmare whoami           — show the stored account and device id
  nightmare config show      — show the effective configuration
  nightmare config path      — print the config file location
  nightmare config init      — write the effective configuration to disk
"""

from __future__ import annotations

import sys
from pathlib import Path

import click
from rich.console import Console

from nightmare import __version__

console = Console()
err_console = Console(stderr=True)


# ---------------------------------------------------------------------------
# Root group
# ---------------------------------------------------------------------------


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(__version__, "--version", "-V", message="nightmare %(version)s")
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Config file (default: ~/.nightmare/config.toml or $NIGHTMARE_CONFIG)",
)
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default=None,
    help="Override the configured log level",
)
@click.pass_context
def cli(ctx: click.Context, config_path: Path | None, log_level: str | None) -> None:
    """Nightmare — Shadow cloud PC client."""
    from nightmare.core.config import load_config
    from nightmare.core.constants import ExitCode
    from nightmare.core.exceptions import ConfigError
    from nightmare.core.logging import setup_logging

    try:
        config = load_config(config_path)
    except ConfigError as exc:
        err_console.print(f"[red]Config error:[/red] {exc}")
        sys.exit(ExitCode.CONFIG_ERROR)

    setup_logging(log_level or config.logging.level, config.logging.format)
    ctx.obj = config


# ---------------------------------------------------------------------------
# login
# ---------------------------------------------------------------------------


@cli.command()
@click.option("--email", default="", help="Account email (prompted if omitted)")
@click.option(
    "--password",
    default="",
    envvar="NIGHTMARE_PASSWORD",
    help="Account password (prompted if omitted)",
)
@click.pass_obj
def login(config, email: str, password: str) -> None:
    """Log in and approve this device."""
    from nightmare.cli._login import cmd_login

    cmd_login(config, email=email, password=password, console=console)


# ---------------------------------------------------------------------------
# status / start
# ---------------------------------------------------------------------------


@cli.command()
@click.option("--json", "as_json", is_flag=True, default=False)
@click.pass_obj
def status(config, as_json: bool) -> None:
    """Show the VM state."""
    from nightmare.cli._vm import cmd_status

    cmd_status(config, as_json=as_json, console=console)


@cli.command()
@click.option("--wait", is_flag=True, default=False, help="Poll until the VM is up")
@click.pass_obj
def start(config, wait: bool) -> None:
    """Start the VM."""
    from nightmare.cli._vm import cmd_start

    cmd_start(config, wait=wait, console=console)


# ---------------------------------------------------------------------------
# whoami
# ---------------------------------------------------------------------------


@cli.command()
@click.option("--json", "as_json", is_flag=True, default=False)
@click.pass_obj
def whoami(config, as_json: bool) -> None:
    """Show the stored account and device id."""
    from nightmare.cli._whoami import cmd_whoami

    cmd_whoami(config, as_json=as_json, console=console)


# ---------------------------------------------------------------------------
# config
# ---------------------------------------------------------------------------

from nightmare.cli._config_cmd import config_group  # noqa: E402

cli.add_command(config_group)


if __name__ == "__main__":
    cli()
