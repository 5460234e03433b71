"""Nightmare exception hierarchy."""

from __future__ import annotations


class NightmareError(Exception):
    """Base exception for all Nightmare errors."""


class ConfigError(NightmareError):
    """Raised when the configuration is invalid or cannot be read."""


class CredentialStoreError(NightmareError):
    """Raised when the credential file cannot be written."""


class DeviceInfoError(NightmareError):
    """Raised when a machine attribute needed for the device id cannot be read."""


class TransportError(NightmareError):
    """Raised on connection failures, timeouts and error statuses from a required step."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class AuthenticationRejected(TransportError):
    """Raised when the SSO service refuses the email/password pair."""


class DecodeError(NightmareError):
    """Raised when a response body does not have the expected shape."""


class ResourceTimeoutError(NightmareError):
    """Raised when the VM does not come up within the allowed poll attempts."""
