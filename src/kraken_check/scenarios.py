"""Scenario definitions and the YAML scenario loader.

A scenario is one request and the response shape it must produce. The
built-in set mirrors the exchange acceptance checks: server time, the
XBT/USD ticker and the account's open orders.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any
from urllib.parse import parse_qs, urlsplit

import yaml

from .errors import ConfigError

HTTP_METHODS = ("GET", "POST")


class ExpectedShape(str, Enum):
    """Response shapes a scenario can assert."""

    TIME = "time"
    TICKER = "ticker"
    ORDERS = "orders"

    @classmethod
    def parse(cls, value: Any) -> ExpectedShape:
        """Resolve a tag like ``"ticker"`` or ``"TickerFormat"``."""
        if isinstance(value, cls):
            return value
        tag = str(value).strip().lower()
        if tag.endswith("format"):
            tag = tag[: -len("format")]
        try:
            return cls(tag)
        except ValueError:
            known = ", ".join(s.value for s in cls)
            raise ConfigError(f"Unknown expected shape '{value}' (known: {known})") from None


@dataclass(frozen=True)
class Request:
    method: str
    url: str
    authenticated: bool = False

    def __post_init__(self) -> None:
        if self.method not in HTTP_METHODS:
            raise ConfigError(f"Unsupported method '{self.method}' for {self.url}")
        if not self.url:
            raise ConfigError("Request url must not be empty")

    @property
    def path(self) -> str:
        """URL path without query string, as used for request signing."""
        return urlsplit(self.url).path

    @property
    def query(self) -> dict[str, str]:
        return {k: v[0] for k, v in parse_qs(urlsplit(self.url).query).items()}


@dataclass(frozen=True)
class Scenario:
    name: str
    request: Request
    expected: ExpectedShape

    def __post_init__(self) -> None:
        if not isinstance(self.expected, ExpectedShape):
            raise ConfigError(f"Scenario '{self.name}' has unknown expected shape: {self.expected!r}")

    @property
    def pair(self) -> str | None:
        """Asset pair requested by a ticker scenario, if any."""
        return self.request.query.get("pair")


def make_scenario(
    name: str,
    url: str,
    expected: str | ExpectedShape,
    method: str = "GET",
    authenticated: bool = False,
) -> Scenario:
    """Build a Scenario, resolving the expected-shape tag."""
    return Scenario(
        name=name,
        request=Request(method=method.upper(), url=url, authenticated=authenticated),
        expected=ExpectedShape.parse(expected),
    )


BUILTIN_SCENARIOS: tuple[Scenario, ...] = (
    make_scenario("public-time", "/0/public/Time", ExpectedShape.TIME),
    make_scenario("public-ticker-xbtusd", "/0/public/Ticker?pair=xbtusd", ExpectedShape.TICKER),
    # Private endpoints only accept a signed form body
    make_scenario(
        "private-open-orders",
        "/0/private/OpenOrders",
        ExpectedShape.ORDERS,
        method="POST",
        authenticated=True,
    ),
)


def load_scenarios(path: str | Path) -> list[Scenario]:
    """Load scenarios from a YAML file.

    The file holds a list of mappings with keys ``name``, ``url`` and
    ``expected``, plus optional ``method`` and ``authenticated``.

    Raises:
        ConfigError: If the file is missing or any entry is invalid
    """
    p = Path(path)
    if not p.exists():
        raise ConfigError(f"Scenario file not found: {p.resolve()}")

    try:
        raw = yaml.safe_load(p.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {p}: {e}") from e

    if not isinstance(raw, list):
        raise ConfigError(f"{p.name} must contain a list of scenarios")

    out: list[Scenario] = []
    for row in raw:
        if not isinstance(row, dict):
            raise ConfigError(f"Each scenario must be a mapping, got: {row!r}")
        out.append(_to_scenario(row))

    names = [s.name for s in out]
    duplicates = sorted({n for n in names if names.count(n) > 1})
    if duplicates:
        raise ConfigError(f"Duplicate scenario names: {', '.join(duplicates)}")
    return out


def _to_scenario(d: dict[str, Any]) -> Scenario:
    for k in ("name", "url", "expected"):
        if k not in d:
            raise ConfigError(f"Missing key '{k}' in scenario: {d}")

    authenticated = d.get("authenticated", False)
    if not isinstance(authenticated, bool):
        raise ConfigError(f"authenticated must be true/false: {d.get('name')}")

    return make_scenario(
        name=str(d["name"]),
        url=str(d["url"]),
        expected=d["expected"],
        method=str(d.get("method", "POST" if authenticated else "GET")),
        authenticated=authenticated,
    )
