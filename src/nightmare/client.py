"""
ShadowSession — one account, one process, one explicitly constructed object.

Lifecycle::

    async with ShadowSession(config) as session:
        while await session.auth.advance() != AuthPhase.READY:
            ...  # ask for password / confirmation code
        state = await session.vm.query_state()

The session owns the HTTP client, the credential store, the gateway
resolver, the auth state machine and the VM controller.  Nothing here is a
module-level singleton; pass the session to whatever drives it.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from types import TracebackType

import httpx

from nightmare.auth.machine import AuthPhase, AuthStateMachine
from nightmare.core.config import NightmareConfig
from nightmare.gateway.http import build_client
from nightmare.gateway.resolver import SessionResolver
from nightmare.identity.credentials import CredentialStore
from nightmare.identity.device import derive_device_id
from nightmare.resource.controller import ResourceController

logger = logging.getLogger(__name__)


class ShadowSession:
    def __init__(
        self,
        config: NightmareConfig,
        transport: httpx.AsyncBaseTransport | None = None,
        device_id_factory: Callable[[], str] = derive_device_id,
    ) -> None:
        self.config = config
        config.data_dir.mkdir(mode=0o700, parents=True, exist_ok=True)

        self.client = build_client(config.api, transport=transport)
        self.credentials = CredentialStore.from_file(config.creds_path)
        self.resolver = SessionResolver(self.client, config.api.discovery_url)
        self.auth = AuthStateMachine(
            self.client,
            self.credentials,
            self.resolver,
            sso_url=config.api.sso_url,
            device_id_factory=device_id_factory,
        )
        self.vm = ResourceController(self.client, self.auth)

        if self.credentials.get() is not None:
            logger.debug("Loaded credentials for %s", self.credentials.email)

    @property
    def phase(self) -> AuthPhase:
        return self.auth.current_phase()

    async def close(self) -> None:
        await self.client.aclose()

    async def __aenter__(self) -> ShadowSession:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.close()
