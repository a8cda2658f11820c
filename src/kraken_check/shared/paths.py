"""Path management for kraken-check.

Manages the ~/.kraken-check/ directory.
"""

from pathlib import Path

# Base directory for all kraken-check data
KRAKEN_CHECK_DIR = Path.home() / ".kraken-check"

# CLI configuration file
CONFIG_FILE = KRAKEN_CHECK_DIR / "config.yaml"
