"""
HTTP helpers shared by the resolver, the auth state machine and the VM
controller.

Error mapping:
  httpx transport failures        -> TransportError
  error status on a required step -> TransportError(status_code=...)
  body not matching the schema    -> DecodeError
"""

from __future__ import annotations

import logging
from typing import Any, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from nightmare.core.config import ApiConfig
from nightmare.core.constants import HEADER_X_SHADOW_UUID
from nightmare.core.exceptions import DecodeError, TransportError

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


def build_client(
    config: ApiConfig,
    transport: httpx.AsyncBaseTransport | None = None,
) -> httpx.AsyncClient:
    """Create the process-wide async HTTP client."""
    return httpx.AsyncClient(
        headers={"User-Agent": config.user_agent},
        timeout=httpx.Timeout(config.timeout_seconds),
        transport=transport,
    )


def gateway_route(base: httpx.URL, path: str) -> httpx.URL:
    """Return ``base`` with its path replaced by ``path`` (same host, new route)."""
    return base.join("/" + path.lstrip("/"))


def gateway_headers(gateway_token: str, device_id: str) -> dict[str, str]:
    return {
        "Authorization": f"Token {gateway_token}",
        HEADER_X_SHADOW_UUID: device_id,
    }


async def send(
    client: httpx.AsyncClient,
    method: str,
    url: httpx.URL | str,
    **kwargs: Any,
) -> httpx.Response:
    """Send one request; transport-level failures become :class:`TransportError`."""
    try:
        response = await client.request(method, url, **kwargs)
    except httpx.HTTPError as exc:
        raise TransportError(f"{method} {_redact(url)} failed: {exc}") from exc
    logger.debug("%s %s -> %d", method, _redact(url), response.status_code)
    return response


def ensure_success(response: httpx.Response, what: str) -> None:
    if not response.is_success:
        raise TransportError(
            f"{what}: unexpected status {response.status_code}",
            status_code=response.status_code,
        )


def parse_response(response: httpx.Response, model: type[ModelT]) -> ModelT:
    """Validate a JSON body against ``model``."""
    try:
        return model.model_validate_json(response.content)
    except ValidationError as exc:
        raise DecodeError(
            f"Unexpected response from {_redact(response.request.url)}: {exc}"
        ) from exc


def _redact(url: httpx.URL | str) -> str:
    """Drop the query string; it can carry emails and confirmation codes."""
    return str(url).split("?", 1)[0]
