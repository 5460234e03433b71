"""
Logging setup for the CLI.

Library modules only ever call ``logging.getLogger(__name__)``; this module
attaches a handler to the ``nightmare`` logger when the CLI starts:

  text — rich.logging.RichHandler on stderr
  json — one JSON object per line on stderr
"""

from __future__ import annotations

import json
import logging
from datetime import UTC, datetime

_ROOT_LOGGER = "nightmare"


class JsonFormatter(logging.Formatter):
    """Format records as single-line JSON objects."""

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, object] = {
            "ts": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            entry["exc"] = self.formatException(record.exc_info)
        return json.dumps(entry)


def setup_logging(level: str = "INFO", fmt: str = "text") -> logging.Logger:
    """Configure the ``nightmare`` logger. Safe to call more than once."""
    logger = logging.getLogger(_ROOT_LOGGER)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)

    if fmt == "json":
        handler: logging.Handler = logging.StreamHandler()
        handler.setFormatter(JsonFormatter())
    else:
        from rich.console import Console
        from rich.logging import RichHandler

        handler = RichHandler(
            console=Console(stderr=True),
            show_path=False,
            rich_tracebacks=False,
        )
        handler.setFormatter(logging.Formatter("%(message)s"))

    logger.addHandler(handler)
    logger.setLevel(level.upper())
    logger.propagate = False
    return logger


def mask_secret(value: str | None) -> str:
    """Mask a secret value, showing first 4 and last 4 chars."""
    if not value:
        return ""
    if len(value) <= 12:
        return "***"
    return value[:4] + "***" + value[-4:]
