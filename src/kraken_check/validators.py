"""Response shape validators.

One validator per ExpectedShape, dispatched through VALIDATORS. Each takes
the unwrapped result payload and returns the details worth reporting, or
raises ShapeError.

Exchange responses arrive wrapped as ``{"error": [...], "result": {...}}``.
A body without that envelope is validated as the result itself.
"""

from __future__ import annotations

import math
from collections.abc import Callable
from datetime import timezone
from email.utils import parsedate_to_datetime
from typing import Any

from .client import Response
from .errors import ConfigError, ShapeError, StatusError
from .scenarios import ExpectedShape

# Ticker fields: ask, bid, last trade closed
REQUIRED_TICKER_FIELDS = {"a": "ask", "b": "bid", "c": "last"}
# volume, volume-weighted average, trade count, low, high, today's opening price
OPTIONAL_TICKER_FIELDS = ("v", "p", "t", "l", "h", "o")


def validate(response: Response, expected: ExpectedShape, pair: str | None = None) -> dict[str, Any]:
    """Check a response against the expected shape.

    Args:
        response: Response to check
        expected: Shape the body must have
        pair: Requested asset pair (ticker only)

    Returns:
        Details extracted from the payload

    Raises:
        StatusError: Status is not 200
        ShapeError: Body does not have the expected shape
        ConfigError: Unknown shape tag
    """
    if response.status != 200:
        raise StatusError(response.status, details={"body": response.body})

    try:
        shape = ExpectedShape(expected)
        validator = VALIDATORS[shape]
    except (KeyError, ValueError):
        raise ConfigError(f"No validator for expected shape {expected!r}") from None

    result = _unwrap(response.body)
    if shape is ExpectedShape.TICKER:
        return validator(result, pair)
    return validator(result)


def _unwrap(body: Any) -> dict[str, Any]:
    """Strip the exchange envelope, failing on reported errors."""
    if not isinstance(body, dict):
        raise ShapeError(f"Expected a JSON object, got {type(body).__name__}")

    if "error" in body or "result" in body:
        errors = body.get("error") or []
        if not isinstance(errors, list):
            raise ShapeError(f"Envelope 'error' must be a list, got {type(errors).__name__}")
        if errors:
            raise ShapeError(f"Answer contains error: {errors}", details={"errors": errors})
        result = body.get("result")
        if not isinstance(result, dict):
            raise ShapeError("Envelope has no result object")
        return result

    return body


def _as_float(value: Any, name: str) -> float:
    """Numeric, numeric string, or array led by one of those."""
    if isinstance(value, (list, tuple)):
        if not value:
            raise ShapeError(f"Field '{name}' is an empty array")
        value = value[0]
    if isinstance(value, bool):
        raise ShapeError(f"Field '{name}' must be numeric, got bool")
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value)
        except ValueError:
            raise ShapeError(f"Field '{name}' is not a number: {value!r}") from None
    else:
        raise ShapeError(f"Field '{name}' must be numeric, got {type(value).__name__}")
    if not math.isfinite(number):
        raise ShapeError(f"Field '{name}' must be finite, got {value!r}")
    return number


def check_time(result: dict[str, Any]) -> dict[str, Any]:
    unixtime = result.get("unixtime")
    if unixtime is None:
        raise ShapeError("Missing field 'unixtime'")
    if isinstance(unixtime, bool) or not isinstance(unixtime, (int, float)):
        raise ShapeError(f"Field 'unixtime' must be numeric, got {unixtime!r}")
    if not math.isfinite(unixtime):
        raise ShapeError(f"Field 'unixtime' must be finite, got {unixtime!r}")

    rfc1123 = result.get("rfc1123")
    if rfc1123 is not None:
        # RFC 2822 is a superset of RFC 1123 dates
        try:
            parsed = parsedate_to_datetime(str(rfc1123))
        except (TypeError, ValueError):
            raise ShapeError(f"Field 'rfc1123' is not a valid date: {rfc1123!r}") from None
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=timezone.utc)
        if int(parsed.timestamp()) != int(unixtime):
            raise ShapeError(
                f"rfc1123 ({rfc1123}) does not match unixtime ({unixtime})",
                details={"unixtime": unixtime, "rfc1123": rfc1123},
            )

    return {"unixtime": unixtime, "rfc1123": rfc1123}


def canonical_pair(name: str) -> str:
    """Normalize pair names: ``XXBTZUSD``, ``xbtusd`` and ``BTC/USD`` all give ``XBTUSD``."""
    n = name.upper().replace("/", "")
    if len(n) == 8 and n[0] in "XZ" and n[4] in "XZ":
        n = n[1:4] + n[5:]
    return n.replace("BTC", "XBT")


def _find_ticker(result: dict[str, Any], pair: str | None) -> tuple[str, Any]:
    if pair is None:
        if len(result) != 1:
            raise ShapeError(f"Expected exactly one ticker, got {sorted(result)}")
        return next(iter(result.items()))

    wanted = canonical_pair(pair)
    for key, ticker in result.items():
        if canonical_pair(key) == wanted:
            return key, ticker
    raise ShapeError(f"No ticker for pair '{pair}' (got {sorted(result)})")


def check_ticker(result: dict[str, Any], pair: str | None = None) -> dict[str, Any]:
    key, ticker = _find_ticker(result, pair)
    if not isinstance(ticker, dict):
        raise ShapeError(f"Ticker for '{key}' must be an object")

    details: dict[str, Any] = {"pair": key}
    for field_name, label in REQUIRED_TICKER_FIELDS.items():
        if field_name not in ticker:
            raise ShapeError(f"Ticker for '{key}' is missing '{field_name}' ({label})")
        details[label] = _as_float(ticker[field_name], f"{key}.{field_name}")

    for field_name in OPTIONAL_TICKER_FIELDS:
        if field_name in ticker:
            _as_float(ticker[field_name], f"{key}.{field_name}")

    return details


def check_orders(result: dict[str, Any]) -> dict[str, Any]:
    if "open" not in result:
        raise ShapeError("Missing field 'open'")
    orders = result["open"]
    if not isinstance(orders, dict):
        raise ShapeError(f"Field 'open' must be a mapping of order id to order, got {type(orders).__name__}")

    for order_id, order in orders.items():
        if not isinstance(order, dict):
            raise ShapeError(f"Order '{order_id}' must be an object")

    return {"count": len(orders), "order_ids": list(orders)}


VALIDATORS: dict[ExpectedShape, Callable[..., dict[str, Any]]] = {
    ExpectedShape.TIME: check_time,
    ExpectedShape.TICKER: check_ticker,
    ExpectedShape.ORDERS: check_orders,
}
