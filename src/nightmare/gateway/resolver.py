"""
Gateway session resolver.

Two round-trips turn an SSO access token into a gateway-scoped session:

  1. GET  <discovery>?email=<email>&fmt=json       -> {"uri": <gateway url>}
  2. POST <gateway>/shadow/auth_login               -> {"token": <gateway token>}
     header X-Shadow-Uuid: <device id>, body {"token": <access token>}

The resulting :class:`GatewaySession` lives for the rest of the process;
once set it is never replaced.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass

import httpx

from nightmare.core.constants import GATEWAY_LOGIN_PATH, HEADER_X_SHADOW_UUID
from nightmare.core.logging import mask_secret
from nightmare.gateway.http import ensure_success, gateway_route, parse_response, send
from nightmare.gateway.models import (
    DiscoveryResponse,
    GatewayLoginRequest,
    GatewayLoginResponse,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GatewaySession:
    gateway_url: httpx.URL
    gateway_token: str


class SessionResolver:
    """Discovers the account's gateway and exchanges the access token, at most once."""

    def __init__(self, client: httpx.AsyncClient, discovery_url: str) -> None:
        self._client = client
        self._discovery_url = discovery_url
        self._lock = asyncio.Lock()
        self._session: GatewaySession | None = None

    @property
    def session(self) -> GatewaySession | None:
        return self._session

    async def resolve(self, email: str, access_token: str, device_id: str) -> GatewaySession:
        async with self._lock:
            if self._session is not None:
                return self._session

            gateway_url = await self._discover(email)
            logger.info("Gateway for %s: %s", email, gateway_url)

            gateway_token = await self._exchange(gateway_url, access_token, device_id)
            logger.info("Gateway token acquired: %s", mask_secret(gateway_token))

            self._session = GatewaySession(gateway_url=gateway_url, gateway_token=gateway_token)
            return self._session

    async def _discover(self, email: str) -> httpx.URL:
        response = await send(
            self._client,
            "GET",
            self._discovery_url,
            params={"email": email, "fmt": "json"},
        )
        ensure_success(response, "gateway discovery")
        return httpx.URL(parse_response(response, DiscoveryResponse).uri)

    async def _exchange(self, gateway_url: httpx.URL, access_token: str, device_id: str) -> str:
        response = await send(
            self._client,
            "POST",
            gateway_route(gateway_url, GATEWAY_LOGIN_PATH),
            headers={HEADER_X_SHADOW_UUID: device_id},
            json=GatewayLoginRequest(token=access_token).model_dump(),
        )
        ensure_success(response, "gateway login")
        return parse_response(response, GatewayLoginResponse).token
