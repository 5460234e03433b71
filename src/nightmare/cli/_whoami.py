"""nightmare whoami — stored account and device identity."""

from __future__ import annotations

import json

from rich.console import Console

from nightmare.core.config import NightmareConfig
from nightmare.core.logging import mask_secret
from nightmare.identity.credentials import CredentialStore


def cmd_whoami(config: NightmareConfig, as_json: bool, console: Console) -> None:
    creds = CredentialStore.from_file(config.creds_path).get()

    data = {
        "logged_in": creds is not None,
        "email": creds.email if creds else None,
        "device_id": creds.device_id if creds else None,
        "token": mask_secret(creds.token) if creds else None,
        "refresh": mask_secret(creds.refresh) if creds else None,
    }
    if as_json:
        print(json.dumps(data, indent=2))
        return

    if creds is None:
        console.print("[yellow]Not logged in.[/yellow] Run [cyan]nightmare login[/cyan].")
        return
    console.print(f"  Email:     [cyan]{creds.email}[/cyan]")
    console.print(f"  Device id: {creds.device_id}")
    console.print(f"  Token:     {data['token']}")
