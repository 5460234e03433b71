"""
Credential store — the last known account identity and tokens.

Layout of ``creds.json``::

    {"device_id": "...", "email": "...", "refresh": "...", "token": "..."}

A missing or unreadable file means "not logged in yet"; it is never fatal.
The record is replaced as a whole and written after every successful
primary login.
"""

from __future__ import annotations

import contextlib
import json
import logging
import os
import threading
from pathlib import Path

from pydantic import BaseModel, ConfigDict

from nightmare.core.exceptions import CredentialStoreError

logger = logging.getLogger(__name__)


class Credentials(BaseModel):
    """One account's device id and SSO tokens."""

    model_config = ConfigDict(frozen=True)

    device_id: str  # also sent as X-Shadow-Uuid
    email: str
    token: str
    refresh: str


class CredentialStore:
    """
    File-backed holder of the optional :class:`Credentials` record.

    Readers get an immutable snapshot; :meth:`set` swaps the whole record
    under the lock.
    """

    def __init__(self, path: Path) -> None:
        self.path = path
        self._lock = threading.Lock()
        self._data: Credentials | None = None

    @classmethod
    def from_file(cls, path: Path) -> CredentialStore:
        store = cls(path)
        store.load()
        return store

    def load(self) -> Credentials | None:
        """Read the file; absence or a parse failure leaves the store empty."""
        data: Credentials | None = None
        if self.path.exists():
            try:
                data = Credentials.model_validate_json(self.path.read_bytes())
            except (OSError, ValueError) as exc:
                logger.warning("Ignoring unreadable credential file %s: %s", self.path, exc)
        with self._lock:
            self._data = data
        return data

    def save(self) -> None:
        """Write the current record (0600, atomic rename). No-op when empty."""
        creds = self.get()
        if creds is None:
            return

        tmp_path = self.path.with_suffix(".tmp")
        try:
            self.path.parent.mkdir(mode=0o700, parents=True, exist_ok=True)
            tmp_path.write_text(json.dumps(creds.model_dump(), indent=2) + "\n", encoding="utf-8")
            tmp_path.chmod(0o600)
            os.replace(tmp_path, self.path)
        except OSError as exc:
            with contextlib.suppress(OSError):
                tmp_path.unlink(missing_ok=True)
            raise CredentialStoreError(f"Cannot write credentials to {self.path}: {exc}") from exc
        logger.debug("Credentials saved to %s", self.path)

    def get(self) -> Credentials | None:
        with self._lock:
            return self._data

    def set(self, device_id: str, email: str, token: str, refresh: str) -> Credentials:
        creds = Credentials(device_id=device_id, email=email, token=token, refresh=refresh)
        with self._lock:
            self._data = creds
        return creds

    @property
    def device_id(self) -> str | None:
        creds = self.get()
        return creds.device_id if creds else None

    @property
    def email(self) -> str | None:
        creds = self.get()
        return creds.email if creds else None
