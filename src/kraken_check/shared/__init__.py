"""Shared modules for kraken-check.

This module provides functionality used by the client, runner and CLI:
- Credential loading and request signing
- Logging configuration
- Paths under ~/.kraken-check/
"""

from .auth import Credentials, NonceSource, load_credentials, sign, signed_form
from .logging import bind_run_context, configure_logging, get_logger
from .paths import CONFIG_FILE, KRAKEN_CHECK_DIR

__all__ = [
    # Paths
    "KRAKEN_CHECK_DIR",
    "CONFIG_FILE",
    # Auth
    "Credentials",
    "NonceSource",
    "load_credentials",
    "sign",
    "signed_form",
    # Logging
    "bind_run_context",
    "configure_logging",
    "get_logger",
]
