"""
Nightmare test suite.

Tests are organized by layer:
    tests/unit/         Unit tests (no real network; httpx.MockTransport)
    tests/integration/  CLI tests through click's CliRunner

Run all tests:
    pytest

Run with coverage:
    pytest --cov=nightmare
"""
