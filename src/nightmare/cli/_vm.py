"""nightmare status | start — VM state and start."""

from __future__ import annotations

import asyncio
import json
import sys

from rich.console import Console

from nightmare.cli._common import cli_errors, open_session, require_ready
from nightmare.core.config import NightmareConfig
from nightmare.core.constants import ExitCode
from nightmare.resource.controller import ResourceState, ResourceStatus

_STYLE = {
    ResourceStatus.UP: "green",
    ResourceStatus.STARTING: "yellow",
    ResourceStatus.DOWN: "red",
    ResourceStatus.UNKNOWN: "dim",
}


def cmd_status(config: NightmareConfig, as_json: bool, console: Console) -> None:
    with cli_errors(console):
        code = asyncio.run(_status(config, as_json, console))
    if code:
        sys.exit(code)


def cmd_start(config: NightmareConfig, wait: bool, console: Console) -> None:
    with cli_errors(console):
        code = asyncio.run(_start(config, wait, console))
    if code:
        sys.exit(code)


async def _status(config: NightmareConfig, as_json: bool, console: Console) -> ExitCode:
    async with open_session(config) as session:
        if not await require_ready(session, console):
            return ExitCode.AUTH_REQUIRED
        state = await session.vm.query_state()

    if as_json:
        print(json.dumps(_state_to_dict(state), indent=2))
    else:
        _print_state(state, console)
    return ExitCode.SUCCESS


async def _start(config: NightmareConfig, wait: bool, console: Console) -> ExitCode:
    async with open_session(config) as session:
        if not await require_ready(session, console):
            return ExitCode.AUTH_REQUIRED

        if not wait:
            if await session.vm.request_start():
                console.print("[green]Start requested.[/green]")
                return ExitCode.SUCCESS
            console.print("[red]The gateway did not accept the start request.[/red]")
            return ExitCode.ERROR

        console.print("Waiting for the VM to come up...")
        state = await session.vm.wait_until_up(
            interval=config.vm.poll_interval_seconds,
            max_attempts=config.vm.max_poll_attempts,
        )

    _print_state(state, console)
    return ExitCode.SUCCESS


def _state_to_dict(state: ResourceState) -> dict[str, object]:
    return {"status": str(state.status), "address": state.address, "port": state.port}


def _print_state(state: ResourceState, console: Console) -> None:
    style = _STYLE[state.status]
    console.print(f"VM: [{style}]{state}[/{style}]")
