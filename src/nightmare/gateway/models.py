"""
Wire schemas — one named request/response type per endpoint.

Responses are validated at the boundary; anything that does not match
raises :class:`~nightmare.core.exceptions.DecodeError` in
:func:`nightmare.gateway.http.parse_response`.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, field_validator

# ---------------------------------------------------------------------------
# SSO
# ---------------------------------------------------------------------------


class PrimaryLoginRequest(BaseModel):
    device_id: str
    email: str
    password: str


class PrimaryLoginResponse(BaseModel):
    token: str
    refresh: str


# ---------------------------------------------------------------------------
# Discovery
# ---------------------------------------------------------------------------


class DiscoveryResponse(BaseModel):
    uri: str

    @field_validator("uri")
    @classmethod
    def validate_uri(cls, v: str) -> str:
        if not v.startswith(("https://", "http://")):
            raise ValueError(f"gateway uri must be absolute, got {v!r}")
        return v


# ---------------------------------------------------------------------------
# Gateway
# ---------------------------------------------------------------------------


class GatewayLoginRequest(BaseModel):
    token: str


class GatewayLoginResponse(BaseModel):
    token: str


class VmAddressResponse(BaseModel):
    ip: str
    port: int

    @field_validator("port", mode="before")
    @classmethod
    def parse_port(cls, v: Any) -> int:
        """The gateway sends the port as a string, e.g. ``"8080"``."""
        if not isinstance(v, str):
            raise ValueError("port must be a string-encoded number")
        if not (v.isascii() and v.isdigit()):
            raise ValueError(f"port is not a number: {v!r}")
        port = int(v)
        if not (0 <= port <= 65535):
            raise ValueError(f"port out of range: {port}")
        return port
