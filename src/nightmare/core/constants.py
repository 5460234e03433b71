"""Nightmare constants: endpoints, filesystem layout, timeouts."""

from __future__ import annotations

from enum import IntEnum

# ---------------------------------------------------------------------------
# Exit codes
# ---------------------------------------------------------------------------


class ExitCode(IntEnum):
    SUCCESS = 0
    ERROR = 1
    CONFIG_ERROR = 2
    AUTH_REQUIRED = 3
    NETWORK_ERROR = 4
    TIMEOUT = 5


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------

SSO_API_URL = "https://sso.api-web.shadow.tech/api/v2"
DISCOVERY_URL = "https://tinag.shadow.tech/gap"
USER_AGENT = "Nightmare-0.0.1"

SSO_LOGIN_PATH = "sso/auth/login"

GATEWAY_LOGIN_PATH = "shadow/auth_login"
GATEWAY_UUID_CHECK_PATH = "shadow/auth_uuid"
GATEWAY_APPROVAL_PATH = "shadow/client/approval"
GATEWAY_VM_IP_PATH = "shadow/vm/ip"
GATEWAY_VM_START_PATH = "shadow/vm/start"

HEADER_X_SHADOW_UUID = "X-Shadow-Uuid"

# Statuses the gateway uses on shadow/vm/ip
VM_DOWN_STATUSES = frozenset({429, 470, 471, 472})
VM_STARTING_STATUS = 473

# ---------------------------------------------------------------------------
# Filesystem layout
# ---------------------------------------------------------------------------

NIGHTMARE_DIR_NAME = ".nightmare"
CONFIG_FILENAME = "config.toml"
CREDS_FILENAME = "creds.json"

# ---------------------------------------------------------------------------
# Timeouts and limits
# ---------------------------------------------------------------------------

DEFAULT_TIMEOUT_SECONDS = 30.0
DEFAULT_POLL_INTERVAL_SECONDS = 4.0
DEFAULT_MAX_POLL_ATTEMPTS = 75  # ~5 minutes at the default interval
