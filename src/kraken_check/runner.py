"""Scenario runner.

Runs each scenario as one linear request -> validate sequence. Failures are
caught per scenario and reported as failed outcomes, so one broken endpoint
never stops the rest of the run.
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any

from .client import KrakenClient, Response
from .errors import ConfigError, HarnessError
from .scenarios import ExpectedShape, Scenario
from .shared.auth import Credentials
from .shared.logging import get_logger
from .validators import validate as validate_shape

logger = get_logger(__name__)


@dataclass
class Outcome:
    """Verdict for one scenario."""

    scenario: str
    passed: bool
    error_kind: str | None = None
    message: str = ""
    elapsed: float = 0.0
    details: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "scenario": self.scenario,
            "passed": self.passed,
            "error_kind": self.error_kind,
            "message": self.message,
            "elapsed": round(self.elapsed, 3),
            "details": self.details,
        }


@dataclass
class RunSummary:
    """Outcomes of a run, in scenario order."""

    outcomes: list[Outcome] = field(default_factory=list)

    @property
    def passed(self) -> int:
        return sum(1 for o in self.outcomes if o.passed)

    @property
    def failed(self) -> int:
        return len(self.outcomes) - self.passed

    @property
    def ok(self) -> bool:
        return self.failed == 0

    @property
    def exit_code(self) -> int:
        return 0 if self.ok else 1

    def to_dict(self) -> dict[str, Any]:
        return {
            "total": len(self.outcomes),
            "passed": self.passed,
            "failed": self.failed,
            "outcomes": [o.to_dict() for o in self.outcomes],
        }


def validate(
    response: Response, expected: ExpectedShape | str, pair: str | None = None
) -> Outcome:
    """Validate a response outside of a run, e.g. against a recorded payload.

    An unknown shape tag is reported as a ConfigError outcome.
    """
    label = str(getattr(expected, "value", expected))
    try:
        shape = ExpectedShape.parse(expected)
        label = shape.value
        details = validate_shape(response, shape, pair=pair)
    except HarnessError as e:
        return Outcome(
            scenario=label,
            passed=False,
            error_kind=e.kind,
            message=e.message,
            elapsed=response.elapsed,
            details=e.details,
        )
    return Outcome(scenario=label, passed=True, elapsed=response.elapsed, details=details)


class ScenarioRunner:
    """Executes scenarios against the exchange.

    Credentials are handed in once and only read; scenarios share nothing
    else except the client's connection pool.
    """

    def __init__(self, client: KrakenClient, credentials: Credentials | None = None):
        self.client = client
        self.credentials = credentials

    async def run(self, scenario: Scenario) -> Outcome:
        """Run one scenario and return its outcome. Never raises HarnessError."""
        log = logger.bind(scenario=scenario.name)
        log.info("scenario_started", url=scenario.request.url, expected=scenario.expected.value)

        start = time.perf_counter()
        try:
            if scenario.request.authenticated and self.credentials is None:
                raise ConfigError(
                    f"Scenario '{scenario.name}' needs API credentials "
                    "(set API_Public_Key and API_Private_Key)"
                )
            response = await self.client.send(scenario.request, self.credentials)
            details = validate_shape(response, scenario.expected, pair=scenario.pair)
        except HarnessError as e:
            elapsed = time.perf_counter() - start
            log.warning("scenario_failed", error_kind=e.kind, error=e.message)
            return Outcome(
                scenario=scenario.name,
                passed=False,
                error_kind=e.kind,
                message=e.message,
                elapsed=elapsed,
                details=e.details,
            )

        log.info("scenario_passed", elapsed=round(response.elapsed, 3))
        return Outcome(
            scenario=scenario.name,
            passed=True,
            elapsed=response.elapsed,
            details=details,
        )

    async def run_all(self, scenarios: Iterable[Scenario], concurrency: int = 1) -> RunSummary:
        """Run every scenario, at most ``concurrency`` at a time.

        Outcomes are returned in input order.
        """
        scenarios = list(scenarios)
        if concurrency <= 1:
            return RunSummary([await self.run(s) for s in scenarios])

        semaphore = asyncio.Semaphore(concurrency)

        async def _bounded(scenario: Scenario) -> Outcome:
            async with semaphore:
                return await self.run(scenario)

        outcomes = await asyncio.gather(*(_bounded(s) for s in scenarios))
        return RunSummary(list(outcomes))
