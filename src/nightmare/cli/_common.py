"""Shared CLI plumbing: session construction, error mapping, auth gate."""

from __future__ import annotations

import sys
from collections.abc import Iterator
from contextlib import contextmanager

from rich.console import Console

from nightmare.auth.machine import AuthPhase
from nightmare.client import ShadowSession
from nightmare.core.config import NightmareConfig
from nightmare.core.constants import ExitCode
from nightmare.core.exceptions import (
    ConfigError,
    DecodeError,
    NightmareError,
    ResourceTimeoutError,
    TransportError,
)


def open_session(config: NightmareConfig) -> ShadowSession:
    return ShadowSession(config)


@contextmanager
def cli_errors(console: Console) -> Iterator[None]:
    """Translate Nightmare exceptions into a message and an exit code."""
    try:
        yield
    except TransportError as exc:
        console.print(f"[red]Network error:[/red] {exc}")
        sys.exit(ExitCode.NETWORK_ERROR)
    except DecodeError as exc:
        console.print(f"[red]Unexpected response:[/red] {exc}")
        sys.exit(ExitCode.ERROR)
    except ResourceTimeoutError as exc:
        console.print(f"[red]Timed out:[/red] {exc}")
        sys.exit(ExitCode.TIMEOUT)
    except ConfigError as exc:
        console.print(f"[red]Config error:[/red] {exc}")
        sys.exit(ExitCode.CONFIG_ERROR)
    except NightmareError as exc:
        console.print(f"[red]Error:[/red] {exc}")
        sys.exit(ExitCode.ERROR)


async def require_ready(session: ShadowSession, console: Console) -> bool:
    """Advance once without prompting; report what is missing unless READY."""
    phase = await session.auth.advance()
    if phase == AuthPhase.READY:
        return True
    if phase == AuthPhase.AWAITING_CONFIRMATION_CODE:
        console.print("[yellow]This device needs email confirmation.[/yellow]")
    elif phase == AuthPhase.AWAITING_PRIMARY_CREDENTIALS:
        console.print("[yellow]Not logged in.[/yellow]")
    else:
        console.print("[yellow]The gateway did not confirm this device.[/yellow]")
    console.print("Run [cyan]nightmare login[/cyan] first.")
    return False
