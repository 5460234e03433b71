"""
Device identity — a per-installation id derived from machine attributes.

The gateway knows a client installation by the ``X-Shadow-Uuid`` header.
The value is a SHA3-256 digest over a descriptor of this machine plus the
current Unix time, so two derivations on the same machine differ.  Derive
once, then keep the result in the credential file.
"""

from __future__ import annotations

import hashlib
import platform
import socket
import time
from dataclasses import dataclass

import psutil

from nightmare.core.exceptions import DeviceInfoError


@dataclass(frozen=True)
class DeviceInfo:
    """Snapshot of the machine attributes that feed the device id."""

    hostname: str
    cpu_count: int
    cpu_clock: int  # MHz
    os_type: str
    os_release: str

    @classmethod
    def collect(cls) -> DeviceInfo:
        """Read the attributes from the running machine."""
        try:
            hostname = socket.gethostname()
            cpu_count = psutil.cpu_count(logical=True)
            freq = psutil.cpu_freq()
            os_type = platform.system()
            os_release = platform.release()
        except (OSError, RuntimeError, NotImplementedError) as exc:
            raise DeviceInfoError(f"Cannot read machine attributes: {exc}") from exc

        if not cpu_count:
            raise DeviceInfoError("Cannot determine logical CPU count")
        if freq is None:
            raise DeviceInfoError("Cannot determine CPU clock speed")

        return cls(
            hostname=hostname,
            cpu_count=cpu_count,
            cpu_clock=int(freq.current),
            os_type=os_type,
            os_release=os_release,
        )

    def descriptor(self, timestamp: int) -> str:
        return (
            f"{self.os_type} {self.hostname} {self.os_release} "
            f"SMP #{self.cpu_count}@{self.cpu_clock} TIME {timestamp}"
        )

    def hash(self, timestamp: int | None = None) -> str:
        """Return the upper-case hex SHA3-256 digest of the descriptor."""
        if timestamp is None:
            timestamp = int(time.time())
        digest = hashlib.sha3_256(self.descriptor(timestamp).encode("utf-8"))
        return digest.hexdigest().upper()


def derive_device_id() -> str:
    """Derive a fresh device id for this machine."""
    return DeviceInfo.collect().hash()
