"""CLI output formatting helpers."""

from typing import Any

import click
import yaml
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from .config import HarnessConfig
from .runner import Outcome, RunSummary
from .scenarios import Scenario


def describe_outcome(outcome: Outcome) -> str:
    """One-line detail for an outcome."""
    if not outcome.passed:
        return f"{outcome.error_kind}: {outcome.message}"

    d = outcome.details
    if "unixtime" in d:
        return f"server time {d.get('rfc1123') or d['unixtime']}"
    if "last" in d:
        return f"{d['pair']} last price {d['last']}"
    if "count" in d:
        ids = ", ".join(d.get("order_ids", []))
        return f"{d['count']} open orders" + (f": {ids}" if ids else "")
    return ""


def print_run_summary(summary: RunSummary, console: Console | None = None) -> None:
    """Print outcomes as a table followed by the totals line.

    Args:
        summary: Run summary to print
        console: Console to print on (stdout by default)
    """
    console = console or Console()

    table = Table(show_header=True, header_style="bold")
    table.add_column("Scenario", no_wrap=True)
    table.add_column("Result", no_wrap=True)
    table.add_column("Time", justify="right", no_wrap=True)
    table.add_column("Detail", overflow="fold")

    for outcome in summary.outcomes:
        result = "[green]PASS[/green]" if outcome.passed else "[red]FAIL[/red]"
        table.add_row(
            outcome.scenario,
            result,
            f"{outcome.elapsed:.2f}s",
            escape(describe_outcome(outcome)),
        )

    console.print(table)
    console.print(
        f"Ran {len(summary.outcomes)} scenarios: "
        f"{summary.passed} passed, {summary.failed} failed"
    )


def print_scenarios(scenarios: list[Scenario]) -> None:
    """Print scenario list.

    Args:
        scenarios: Scenarios to list
    """
    click.echo(f"Scenarios ({len(scenarios)}):\n")
    for sc in scenarios:
        auth = " [private]" if sc.request.authenticated else ""
        click.echo(f"  - {sc.name}: {sc.request.method} {sc.request.url} -> {sc.expected.value}{auth}")


def print_config(config: HarnessConfig) -> None:
    """Print effective config with the source of each value."""
    data: dict[str, Any] = config.to_dict()
    click.echo(yaml.dump(data, default_flow_style=False, sort_keys=False).rstrip())
    click.echo()
    click.echo("Sources:")
    for key in data:
        click.echo(f"  {key}: {config.get_source(key)}")
