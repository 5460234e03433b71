"""nightmare login — interactive email/password and device confirmation."""

from __future__ import annotations

import asyncio
import sys

import click
from rich.console import Console

from nightmare.auth.machine import AuthPhase
from nightmare.cli._common import cli_errors, open_session
from nightmare.core.config import NightmareConfig
from nightmare.core.constants import ExitCode
from nightmare.core.exceptions import AuthenticationRejected

# Consecutive unexpected device-check answers before giving up
_MAX_UNEXPECTED = 3


def cmd_login(config: NightmareConfig, email: str, password: str, console: Console) -> None:
    with cli_errors(console):
        code = asyncio.run(_login(config, email, password, console))
    if code:
        sys.exit(code)


async def _login(config: NightmareConfig, email: str, password: str, console: Console) -> ExitCode:
    async with open_session(config) as session:
        phase = await session.auth.advance()
        unexpected = 0

        while phase != AuthPhase.READY:
            if phase == AuthPhase.AWAITING_PRIMARY_CREDENTIALS:
                address = email or click.prompt("Email")
                secret = password or click.prompt("Password", hide_input=True)
                try:
                    await session.auth.submit_primary_credentials(address.strip(), secret)
                except AuthenticationRejected:
                    console.print("[red]Email or password rejected.[/red]")
                    if password:
                        return ExitCode.AUTH_REQUIRED
                    email = ""
                    continue
                phase = await session.auth.advance()

            elif phase == AuthPhase.AWAITING_CONFIRMATION_CODE:
                console.print(f"A confirmation code was sent to [cyan]{session.credentials.email}[/cyan].")
                code = click.prompt("Confirmation code").strip()
                if not await session.auth.submit_confirmation_code(code):
                    console.print("[yellow]Code not accepted, try again.[/yellow]")
                phase = session.phase

            else:
                unexpected += 1
                if unexpected >= _MAX_UNEXPECTED:
                    console.print("[red]The gateway keeps giving unexpected answers.[/red]")
                    return ExitCode.NETWORK_ERROR
                await asyncio.sleep(config.vm.poll_interval_seconds)
                phase = await session.auth.advance()

        console.print(f"[green]Ready.[/green] Logged in as [cyan]{session.credentials.email}[/cyan]")
        return ExitCode.SUCCESS
