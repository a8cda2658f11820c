"""CLI configuration management.

Handles persistent configuration stored in ~/.kraken-check/config.yaml.
Supports environment variable overrides and CLI flag precedence.
API credentials are never read from this file.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path

import yaml

from .client import DEFAULT_API_URL
from .shared.paths import CONFIG_FILE

# Default values
DEFAULT_TIMEOUT = 30
DEFAULT_CONCURRENCY = 1
DEFAULT_LOG_LEVEL = "warning"

# Environment variable mappings
ENV_VARS = {
    "api_url": "KRAKEN_CHECK_API_URL",
    "timeout": "KRAKEN_CHECK_TIMEOUT",
    "concurrency": "KRAKEN_CHECK_CONCURRENCY",
    "scenarios_file": "KRAKEN_CHECK_SCENARIOS",
    "log_level": "KRAKEN_CHECK_LOG_LEVEL",
}

INT_KEYS = ("timeout", "concurrency")


@dataclass
class HarnessConfig:
    """Harness configuration."""

    api_url: str = DEFAULT_API_URL
    timeout: int = DEFAULT_TIMEOUT
    concurrency: int = DEFAULT_CONCURRENCY
    scenarios_file: str | None = None
    log_level: str = DEFAULT_LOG_LEVEL

    # Track where each value came from
    _sources: dict[str, str] = field(default_factory=dict)

    def get_source(self, key: str) -> str:
        """Get the source of a config value."""
        return self._sources.get(key, "default")

    def override(self, key: str, value: object) -> None:
        """Apply a CLI flag value (highest precedence)."""
        if value is None:
            return
        setattr(self, key, value)
        self._sources[key] = "cli flag"

    def to_dict(self) -> dict[str, object]:
        return {key: getattr(self, key) for key in ENV_VARS}


def get_config_path() -> Path:
    """Get the config file path.

    Returns:
        Path to ~/.kraken-check/config.yaml
    """
    return CONFIG_FILE


def _coerce(key: str, value: object) -> object:
    if key in INT_KEYS:
        return int(value)
    return str(value)


def load_config(config_path: str | Path | None = None) -> HarnessConfig:
    """Load harness configuration.

    Precedence (highest to lowest):
    1. CLI flags (applied by the caller via override())
    2. Environment variables
    3. Config file (~/.kraken-check/config.yaml)
    4. Defaults

    Args:
        config_path: Config file to read instead of the default location

    Returns:
        HarnessConfig with values and sources
    """
    config = HarnessConfig()
    sources: dict[str, str] = {key: "default" for key in ENV_VARS}

    path = Path(config_path) if config_path else get_config_path()
    if path.exists():
        try:
            with open(path) as f:
                file_config = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError):
            file_config = {}  # Unreadable config file, use defaults

        if isinstance(file_config, dict):
            for key in ENV_VARS:
                if key not in file_config:
                    continue
                try:
                    setattr(config, key, _coerce(key, file_config[key]))
                    sources[key] = "config file"
                except (TypeError, ValueError):
                    pass

    for key, env_var in ENV_VARS.items():
        raw = os.environ.get(env_var)
        if not raw:
            continue
        try:
            setattr(config, key, _coerce(key, raw))
            sources[key] = "environment"
        except ValueError:
            pass

    config._sources = sources
    return config
