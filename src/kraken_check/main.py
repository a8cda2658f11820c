"""CLI main entry point."""

import asyncio
import json
import sys

import click

from .client import KrakenClient
from .config import HarnessConfig, load_config
from .errors import ConfigError
from .formatters import print_config, print_run_summary, print_scenarios
from .runner import RunSummary, ScenarioRunner
from .scenarios import BUILTIN_SCENARIOS, Scenario, load_scenarios
from .shared.auth import Credentials, load_credentials
from .shared.logging import bind_run_context, configure_logging

# Exit code when scenarios or config cannot be loaded
EXIT_CONFIG_ERROR = 2


@click.group()
@click.option("-c", "--config", type=click.Path(), help="Config file path")
@click.option("-v", "--verbose", count=True, help="Increase verbosity")
@click.option("--json", "json_output", is_flag=True, help="Output as JSON")
@click.option("--log-json", is_flag=True, help="Emit logs as JSON lines")
@click.option("--log-file", type=click.Path(dir_okay=False), help="Write logs to a file instead of stderr")
@click.version_option(package_name="kraken-check")
@click.pass_context
def cli(
    ctx: click.Context,
    config: str,
    verbose: int,
    json_output: bool,
    log_json: bool,
    log_file: str | None,
) -> None:
    """Acceptance checks for the Kraken REST API."""
    ctx.ensure_object(dict)
    harness_config = load_config(config)

    level = harness_config.log_level
    if verbose == 1:
        level = "info"
    elif verbose > 1:
        level = "debug"
    configure_logging(level, log_file=log_file, json_output=log_json)

    ctx.obj["config"] = harness_config
    ctx.obj["json_output"] = json_output


def _resolve_scenarios(config: HarnessConfig, only: tuple[str, ...]) -> list[Scenario]:
    """Scenarios from the configured file (or built-ins), filtered by name."""
    if config.scenarios_file:
        scenarios = load_scenarios(config.scenarios_file)
    else:
        scenarios = list(BUILTIN_SCENARIOS)

    if only:
        known = {s.name for s in scenarios}
        unknown = [name for name in only if name not in known]
        if unknown:
            raise ConfigError(f"Unknown scenario(s): {', '.join(unknown)}")
        scenarios = [s for s in scenarios if s.name in only]
    return scenarios


async def _run_scenarios(
    config: HarnessConfig,
    scenarios: list[Scenario],
    credentials: Credentials | None,
) -> RunSummary:
    async with KrakenClient(config.api_url, timeout=config.timeout) as client:
        runner = ScenarioRunner(client, credentials)
        return await runner.run_all(scenarios, concurrency=config.concurrency)


@cli.command()
@click.option("-s", "--scenarios", "scenarios_file", type=click.Path(), help="YAML scenario file")
@click.option("--only", multiple=True, help="Run only the named scenario (repeatable)")
@click.option("--api-url", help="API base URL")
@click.option("--timeout", type=int, help="Request timeout in seconds")
@click.option("--concurrency", type=click.IntRange(min=1), help="Scenarios run at once")
@click.option("--api-key", help="API key (default: $API_Public_Key)")
@click.option("--api-secret", help="API secret (default: $API_Private_Key)")
@click.pass_context
def run(
    ctx: click.Context,
    scenarios_file: str | None,
    only: tuple[str, ...],
    api_url: str | None,
    timeout: int | None,
    concurrency: int | None,
    api_key: str | None,
    api_secret: str | None,
) -> None:
    """Run all scenarios. Exits 1 if any scenario fails."""
    config: HarnessConfig = ctx.obj["config"]
    config.override("scenarios_file", scenarios_file)
    config.override("api_url", api_url)
    config.override("timeout", timeout)
    config.override("concurrency", concurrency)

    try:
        scenarios = _resolve_scenarios(config, only)
    except ConfigError as e:
        click.echo(f"Error: {e.message}", err=True)
        sys.exit(EXIT_CONFIG_ERROR)

    credentials = load_credentials(api_key=api_key, api_secret=api_secret)
    run_id = bind_run_context(config.api_url)
    summary = asyncio.run(_run_scenarios(config, scenarios, credentials))

    if ctx.obj["json_output"]:
        click.echo(json.dumps({"run_id": run_id, **summary.to_dict()}, indent=2))
    else:
        print_run_summary(summary)

    sys.exit(summary.exit_code)


@cli.command("list")
@click.option("-s", "--scenarios", "scenarios_file", type=click.Path(), help="YAML scenario file")
@click.pass_context
def list_scenarios(ctx: click.Context, scenarios_file: str | None) -> None:
    """List scenarios without running them."""
    config: HarnessConfig = ctx.obj["config"]
    config.override("scenarios_file", scenarios_file)

    try:
        scenarios = _resolve_scenarios(config, ())
    except ConfigError as e:
        click.echo(f"Error: {e.message}", err=True)
        sys.exit(EXIT_CONFIG_ERROR)

    if ctx.obj["json_output"]:
        data = [
            {
                "name": s.name,
                "method": s.request.method,
                "url": s.request.url,
                "authenticated": s.request.authenticated,
                "expected": s.expected.value,
            }
            for s in scenarios
        ]
        click.echo(json.dumps(data, indent=2))
    else:
        print_scenarios(scenarios)


@cli.group()
def config() -> None:
    """Inspect harness configuration."""


@config.command("show")
@click.pass_context
def config_show(ctx: click.Context) -> None:
    """Show effective configuration and where each value came from."""
    harness_config: HarnessConfig = ctx.obj["config"]
    if ctx.obj["json_output"]:
        click.echo(json.dumps(harness_config.to_dict(), indent=2))
    else:
        print_config(harness_config)


def main() -> None:
    """Main entry point."""
    cli()


if __name__ == "__main__":
    main()
