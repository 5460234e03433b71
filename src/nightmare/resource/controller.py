"""
ResourceController — state query and start for the account's VM.

Both operations need a READY :class:`~nightmare.auth.machine.AuthStateMachine`;
before that they make no request at all and report ``UNKNOWN`` / False.

Status mapping for ``GET shadow/vm/ip``::

    200              -> UP(address, port)
    429, 470-472     -> DOWN
    473              -> STARTING
    anything else    -> UNKNOWN
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from enum import StrEnum

import httpx

from nightmare.auth.machine import AuthStateMachine
from nightmare.core.constants import (
    DEFAULT_POLL_INTERVAL_SECONDS,
    GATEWAY_VM_IP_PATH,
    GATEWAY_VM_START_PATH,
    VM_DOWN_STATUSES,
    VM_STARTING_STATUS,
)
from nightmare.core.exceptions import ResourceTimeoutError
from nightmare.gateway.http import gateway_headers, gateway_route, parse_response, send
from nightmare.gateway.models import VmAddressResponse

logger = logging.getLogger(__name__)


class ResourceStatus(StrEnum):
    UNKNOWN = "unknown"
    DOWN = "down"
    STARTING = "starting"
    UP = "up"


@dataclass(frozen=True)
class ResourceState:
    status: ResourceStatus
    address: str | None = None
    port: int | None = None

    @classmethod
    def up(cls, address: str, port: int) -> ResourceState:
        return cls(ResourceStatus.UP, address=address, port=port)

    @property
    def is_up(self) -> bool:
        return self.status == ResourceStatus.UP

    def __str__(self) -> str:
        if self.is_up:
            return f"{self.status} ({self.address}:{self.port})"
        return str(self.status)


UNKNOWN = ResourceState(ResourceStatus.UNKNOWN)
DOWN = ResourceState(ResourceStatus.DOWN)
STARTING = ResourceState(ResourceStatus.STARTING)


class ResourceController:
    def __init__(self, client: httpx.AsyncClient, auth: AuthStateMachine) -> None:
        self._client = client
        self._auth = auth

    async def query_state(self) -> ResourceState:
        access = self._auth.gateway_access()
        if access is None:
            return UNKNOWN
        session, device_id = access

        response = await send(
            self._client,
            "GET",
            gateway_route(session.gateway_url, GATEWAY_VM_IP_PATH),
            headers=gateway_headers(session.gateway_token, device_id),
        )

        status = response.status_code
        if status == httpx.codes.OK:
            body = parse_response(response, VmAddressResponse)
            return ResourceState.up(body.ip, body.port)
        if status in VM_DOWN_STATUSES:
            return DOWN
        if status == VM_STARTING_STATUS:
            return STARTING
        logger.debug("Unmapped VM status code: %d", status)
        return UNKNOWN

    async def request_start(self) -> bool:
        """Ask the gateway to start the VM. Does not wait for it to come up."""
        access = self._auth.gateway_access()
        if access is None:
            return False
        session, device_id = access

        response = await send(
            self._client,
            "GET",
            gateway_route(session.gateway_url, GATEWAY_VM_START_PATH),
            headers=gateway_headers(session.gateway_token, device_id),
        )
        if response.status_code == httpx.codes.OK:
            logger.info("VM start requested")
            return True
        logger.warning("Unexpected status while starting VM: %d", response.status_code)
        return False

    async def wait_until_up(
        self,
        interval: float = DEFAULT_POLL_INTERVAL_SECONDS,
        max_attempts: int | None = None,
        start_when_down: bool = True,
    ) -> ResourceState:
        """
        Poll until the VM is UP, issuing a start whenever it reports DOWN.

        Raises:
            ResourceTimeoutError: ``max_attempts`` queries passed without UP.
        """
        attempt = 0
        while True:
            attempt += 1
            state = await self.query_state()
            logger.info("VM state: %s", state)
            if state.is_up:
                return state
            if state.status == ResourceStatus.DOWN and start_when_down:
                await self.request_start()
            if max_attempts is not None and attempt >= max_attempts:
                raise ResourceTimeoutError(f"VM not up after {attempt} checks (last: {state})")
            await asyncio.sleep(interval)
