"""Unit tests for nightmare.core.logging."""

from __future__ import annotations

import json
import logging

from nightmare.core.logging import JsonFormatter, mask_secret, setup_logging


class TestMaskSecret:
    def test_long_value(self) -> None:
        assert mask_secret("abcdefghijklmnop") == "abcd***mnop"

    def test_short_value(self) -> None:
        assert mask_secret("short") == "***"

    def test_empty(self) -> None:
        assert mask_secret("") == ""
        assert mask_secret(None) == ""


class TestSetup:
    def test_json_format(self) -> None:
        logger = setup_logging("DEBUG", "json")
        assert logger.level == logging.DEBUG
        assert isinstance(logger.handlers[0].formatter, JsonFormatter)
        assert logger.propagate is False

    def test_repeat_setup_replaces_handler(self) -> None:
        setup_logging("INFO", "text")
        logger = setup_logging("WARNING", "text")
        assert len(logger.handlers) == 1
        assert logger.level == logging.WARNING

    def test_json_record(self) -> None:
        record = logging.LogRecord(
            "nightmare.auth.machine", logging.WARNING, __file__, 1, "status %d", (412,), None
        )
        entry = json.loads(JsonFormatter().format(record))
        assert entry["level"] == "WARNING"
        assert entry["logger"] == "nightmare.auth.machine"
        assert entry["message"] == "status 412"
