"""Error types for kraken-check.

Every failure a scenario can hit is a HarnessError subclass. The runner
catches them at the scenario boundary and turns them into a failed Outcome.
"""

from typing import Any


class HarnessError(Exception):
    """Base error for scenario failures."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)

    @property
    def kind(self) -> str:
        """Short name used in reports (e.g. ``ShapeError``)."""
        return type(self).__name__


class TransportError(HarnessError):
    """The request never produced a response (timeout, refused, DNS)."""


class StatusError(HarnessError):
    """The server answered with a non-200 status."""

    def __init__(self, status: int, message: str | None = None, details: dict[str, Any] | None = None):
        self.status = status
        super().__init__(message or f"Expected status 200, got {status}", details)


class ShapeError(HarnessError):
    """The response body is missing fields or has the wrong types."""


class ConfigError(HarnessError):
    """Bad scenario definition or missing credentials."""
