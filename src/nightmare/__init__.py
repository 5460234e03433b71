"""
Nightmare — a small client for Shadow cloud PCs.

Nightmare logs a Shadow account in, approves the local device through the
emailed confirmation code when the gateway asks for one, and then reports
or starts the account's VM.

Package layout (src/nightmare/):
  core/       — config, constants, exceptions, logging setup
  identity/   — device id derivation and the credential file
  gateway/    — wire schemas, HTTP helpers, gateway session resolver
  auth/       — authentication state machine
  resource/   — VM state query and start
  cli/        — Click CLI entry point
"""

__version__ = "0.1.0"
__all__ = ["__version__"]
