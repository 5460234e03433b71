"""Shared fixtures: a scriptable fake of the SSO, discovery and gateway services."""

from __future__ import annotations

import json
import logging
from collections import deque
from pathlib import Path

import httpx
import pytest

from nightmare.core.config import ApiConfig, NightmareConfig, VmConfig

SSO_URL = "https://sso.test/api/v2"
DISCOVERY_URL = "https://discovery.test/gap"
GATEWAY_URI = "https://gap.test:8443/some/base"

DEVICE_ID = "D" * 64


class FakeShadow:
    """
    Routes requests by (method, host, path) to queued responses.

    The last queued response for a route repeats.  Every request is kept in
    :attr:`requests` for assertions.
    """

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self._routes: dict[tuple[str, str, str], deque[httpx.Response]] = {}

    def on(self, method: str, url: str, *responses: httpx.Response) -> FakeShadow:
        u = httpx.URL(url)
        self._routes[(method, u.host, u.path)] = deque(responses)
        return self

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        key = (request.method, request.url.host, request.url.path)
        queue = self._routes.get(key)
        if not queue:
            return httpx.Response(404, json={"error": f"no route for {key}"})
        return queue.popleft() if len(queue) > 1 else queue[0]

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def calls(self, path: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.url.path == path]

    def body(self, request: httpx.Request) -> dict:
        return json.loads(request.content)

    # ------------------------------------------------------------------
    # Canned routes
    # ------------------------------------------------------------------

    def sso_login(self, *responses: httpx.Response) -> FakeShadow:
        return self.on("POST", f"{SSO_URL}/sso/auth/login", *responses)

    def discovery(self, *responses: httpx.Response) -> FakeShadow:
        return self.on("GET", DISCOVERY_URL, *responses)

    def gateway(self, method: str, path: str, *responses: httpx.Response) -> FakeShadow:
        return self.on(method, f"https://gap.test:8443/{path}", *responses)

    def happy_path(self, uuid_status: int = 200) -> FakeShadow:
        """SSO login, discovery, gateway login and uuid check all succeed."""
        self.sso_login(httpx.Response(200, json={"token": "T" * 20, "refresh": "R" * 20}))
        self.discovery(httpx.Response(200, json={"uri": GATEWAY_URI}))
        self.gateway("POST", "shadow/auth_login", httpx.Response(200, json={"token": "GAP-TOKEN"}))
        self.gateway("GET", "shadow/auth_uuid", httpx.Response(uuid_status))
        return self


@pytest.fixture
def fake() -> FakeShadow:
    return FakeShadow()


@pytest.fixture
def config(tmp_path: Path) -> NightmareConfig:
    return NightmareConfig(
        data_dir=tmp_path / "data",
        api=ApiConfig(sso_url=SSO_URL, discovery_url=DISCOVERY_URL),
        vm=VmConfig(poll_interval_seconds=0.01, max_poll_attempts=5),
    )


def write_creds(config: NightmareConfig, **overrides: str) -> dict[str, str]:
    """Pre-populate the credential file as if a previous run had logged in."""
    data = {
        "device_id": DEVICE_ID,
        "email": "a@b.com",
        "token": "ACCESS-TOKEN",
        "refresh": "REFRESH-TOKEN",
    }
    data.update(overrides)
    config.data_dir.mkdir(parents=True, exist_ok=True)
    config.creds_path.write_text(json.dumps(data))
    return data


@pytest.fixture(autouse=True)
def _reset_nightmare_logger():
    """CLI runs call setup_logging(); undo it so caplog keeps working."""
    yield
    logger = logging.getLogger("nightmare")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)
    logger.propagate = True
