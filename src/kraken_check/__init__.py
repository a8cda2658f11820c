"""kraken-check - acceptance checks for the Kraken REST API."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("kraken-check")
except PackageNotFoundError:
    __version__ = "0.0.0.dev0"  # Fallback for editable installs without metadata

from .main import main

__all__ = ["main", "__version__"]
