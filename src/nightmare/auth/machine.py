"""
AuthStateMachine — drives one account from "no credentials" to "ready".

Phases::

    UNKNOWN ──advance()──▶ AWAITING_PRIMARY_CREDENTIALS   (no stored credentials)
       │                          │ submit_primary_credentials() + advance()
       ▼                          ▼
    resolve gateway session, GET shadow/auth_uuid
       ├── 200 ─▶ READY
       └── 412 ─▶ AWAITING_CONFIRMATION_CODE
                        │ submit_confirmation_code()
                        ├── 200 ─▶ READY
                        └── 403 ─▶ AWAITING_CONFIRMATION_CODE

The caller owns the loop: call :meth:`advance`, look at :meth:`current_phase`,
supply whatever input the phase asks for, and call :meth:`advance` again.
Nothing here retries on its own.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from enum import StrEnum

import httpx

from nightmare.core.constants import (
    GATEWAY_APPROVAL_PATH,
    GATEWAY_UUID_CHECK_PATH,
    SSO_LOGIN_PATH,
)
from nightmare.core.exceptions import AuthenticationRejected
from nightmare.core.logging import mask_secret
from nightmare.gateway.http import (
    ensure_success,
    gateway_headers,
    gateway_route,
    parse_response,
    send,
)
from nightmare.gateway.models import PrimaryLoginRequest, PrimaryLoginResponse
from nightmare.gateway.resolver import GatewaySession, SessionResolver
from nightmare.identity.credentials import Credentials, CredentialStore
from nightmare.identity.device import derive_device_id

logger = logging.getLogger(__name__)


class AuthPhase(StrEnum):
    UNKNOWN = "unknown"
    AWAITING_PRIMARY_CREDENTIALS = "awaiting_primary_credentials"
    AWAITING_CONFIRMATION_CODE = "awaiting_confirmation_code"
    READY = "ready"


class AuthStateMachine:
    """Owns the :class:`AuthPhase` of one account for the process lifetime."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        store: CredentialStore,
        resolver: SessionResolver,
        sso_url: str,
        device_id_factory: Callable[[], str] = derive_device_id,
    ) -> None:
        self._client = client
        self._store = store
        self._resolver = resolver
        self._sso_url = sso_url.rstrip("/")
        self._device_id_factory = device_id_factory
        self._phase_lock = threading.Lock()
        self._phase = AuthPhase.UNKNOWN

    # ------------------------------------------------------------------
    # Phase access
    # ------------------------------------------------------------------

    def current_phase(self) -> AuthPhase:
        with self._phase_lock:
            return self._phase

    def _set_phase(self, phase: AuthPhase) -> None:
        with self._phase_lock:
            previous, self._phase = self._phase, phase
        if previous != phase:
            logger.debug("Auth phase: %s -> %s", previous, phase)

    @property
    def is_ready(self) -> bool:
        return self.current_phase() == AuthPhase.READY

    def gateway_access(self) -> tuple[GatewaySession, str] | None:
        """Return ``(session, device_id)`` when READY, otherwise None."""
        if not self.is_ready:
            return None
        session = self._resolver.session
        creds = self._store.get()
        if session is None or creds is None:
            return None
        return session, creds.device_id

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    async def advance(self) -> AuthPhase:
        """Run one step of the login flow and return the resulting phase."""
        creds = self._store.get()
        if creds is None:
            self._set_phase(AuthPhase.AWAITING_PRIMARY_CREDENTIALS)
            return AuthPhase.AWAITING_PRIMARY_CREDENTIALS

        session = self._resolver.session
        if session is None:
            session = await self._resolver.resolve(creds.email, creds.token, creds.device_id)

        # A second uuid check would trigger another confirmation email
        if self.current_phase() != AuthPhase.AWAITING_CONFIRMATION_CODE:
            await self._check_device(session, creds)

        return self.current_phase()

    async def _check_device(self, session: GatewaySession, creds: Credentials) -> None:
        response = await send(
            self._client,
            "GET",
            gateway_route(session.gateway_url, GATEWAY_UUID_CHECK_PATH),
            headers=gateway_headers(session.gateway_token, creds.device_id),
        )

        if response.status_code == httpx.codes.OK:
            logger.info("Device approved, no email confirmation needed")
            self._set_phase(AuthPhase.READY)
        elif response.status_code == httpx.codes.PRECONDITION_FAILED:
            logger.info("Device not registered, a confirmation code was sent to %s", creds.email)
            self._set_phase(AuthPhase.AWAITING_CONFIRMATION_CODE)
        else:
            logger.warning("Unexpected status while checking device: %d", response.status_code)

    async def submit_primary_credentials(self, email: str, password: str) -> Credentials:
        """
        Log in with email and password and persist the new credentials.

        Reuses the stored device id when there is one.  Does not change the
        phase; call :meth:`advance` afterwards.

        Raises:
            AuthenticationRejected: the SSO service refused the pair.
            TransportError / DecodeError: network or response failure.
        """
        device_id = self._store.device_id or self._device_id_factory()

        response = await send(
            self._client,
            "POST",
            f"{self._sso_url}/{SSO_LOGIN_PATH}",
            json=PrimaryLoginRequest(
                device_id=device_id, email=email, password=password
            ).model_dump(),
        )
        if response.is_client_error:
            raise AuthenticationRejected(
                f"Login rejected for {email} (status {response.status_code})",
                status_code=response.status_code,
            )
        ensure_success(response, "primary login")
        body = parse_response(response, PrimaryLoginResponse)

        creds = self._store.set(
            device_id=device_id, email=email, token=body.token, refresh=body.refresh
        )
        self._store.save()
        logger.info("Logged in as %s (token %s)", email, mask_secret(body.token))
        return creds

    async def submit_confirmation_code(self, code: str) -> bool:
        """
        Send the emailed confirmation code.

        Returns True when the gateway accepted it.  Outside
        AWAITING_CONFIRMATION_CODE this does nothing and returns False.
        """
        if self.current_phase() != AuthPhase.AWAITING_CONFIRMATION_CODE:
            return False

        session = self._resolver.session
        creds = self._store.get()
        assert session is not None and creds is not None

        response = await send(
            self._client,
            "GET",
            gateway_route(session.gateway_url, GATEWAY_APPROVAL_PATH),
            headers=gateway_headers(session.gateway_token, creds.device_id),
            params={"code": code},
        )

        if response.status_code == httpx.codes.OK:
            logger.info("Confirmation code accepted")
            self._set_phase(AuthPhase.READY)
            return True
        if response.status_code == httpx.codes.FORBIDDEN:
            logger.warning("Confirmation code rejected")
            self._set_phase(AuthPhase.AWAITING_CONFIRMATION_CODE)
        else:
            logger.warning(
                "Unexpected status while sending confirmation code: %d", response.status_code
            )
        return False
