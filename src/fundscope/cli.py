"""Click-based CLI for fundscope.

Thin wrapper around FundService. Zero business logic: every command wires
a service from config, calls one operation, and renders the result.
"""

from __future__ import annotations

import asyncio
import json
import os
from datetime import datetime, timezone
from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

from fundscope.core.config import CONFIG_ENV_VAR

console = Console(stderr=True)

EXIT_NOT_FOUND = 2


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _run_async(coro):
    """Run an async coroutine from synchronous Click code."""
    return asyncio.run(coro)


def _load_config(ctx: click.Context):
    """Load config lazily, caching on first call."""
    if "config" not in ctx.obj:
        from fundscope.core import load_config

        ctx.obj["config"] = load_config(config_path=ctx.obj.get("config_path"))
    return ctx.obj["config"]


async def _create_service(config):
    """Wire providers, price source, and cache from config."""
    from fundscope.aggregation import FundService

    return await FundService.from_config(config)


def _run_with_service(ctx: click.Context, operation):
    """Build a service, run ``operation(service)``, and map errors to exit codes."""
    from fundscope.core import FundscopeError, NotFoundError

    config = _load_config(ctx)

    async def _run():
        service = await _create_service(config)
        try:
            return await operation(service)
        finally:
            await service.aclose()

    try:
        return _run_async(_run())
    except NotFoundError as exc:
        console.print(f"[red]Not found:[/red] {exc}")
        raise SystemExit(EXIT_NOT_FOUND)
    except FundscopeError as exc:
        console.print(f"[red]Error:[/red] {exc}")
        if ctx.obj["verbose"] and exc.context:
            console.print(exc.context)
        raise SystemExit(1)


def _format_day(timestamp: int) -> str:
    return datetime.fromtimestamp(timestamp, tz=timezone.utc).date().isoformat()


def _echo_json(model) -> None:
    click.echo(json.dumps(model, indent=2, default=str))


# ---------------------------------------------------------------------------
# CLI group
# ---------------------------------------------------------------------------


@click.group()
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=True),
    envvar=CONFIG_ENV_VAR,
    default=None,
    help="Path to fundscope.yml config file.",
)
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    default=False,
    help="Enable debug logging.",
)
@click.version_option(package_name="fundscope")
@click.pass_context
def cli(ctx: click.Context, config: str | None, verbose: bool) -> None:
    """fundscope: ETF holdings and holding-contribution charts."""
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config
    ctx.obj["verbose"] = verbose

    from fundscope.core import ConfigError
    from fundscope.core.log import configure_logging

    if ctx.invoked_subcommand is None or ctx.resilient_parsing:
        return
    try:
        config = _load_config(ctx)
    except ConfigError as exc:
        console.print(f"[red]Config error:[/red] {exc}")
        raise SystemExit(1)
    configure_logging(config.logging, verbose=verbose)


# ---------------------------------------------------------------------------
# list
# ---------------------------------------------------------------------------


@cli.command(name="list")
@click.option("--json", "as_json", is_flag=True, default=False, help="Output JSON.")
@click.pass_context
def list_funds(ctx: click.Context, as_json: bool) -> None:
    """List every fund the configured providers serve."""

    async def _op(service):
        return service.list_funds()

    funds = _run_with_service(ctx, _op)

    if as_json:
        _echo_json([f.model_dump(mode="json") for f in funds])
        return

    table = Table(title=f"Funds ({len(funds)})")
    table.add_column("Ticker", style="bold")
    table.add_column("Name")
    for fund in funds:
        table.add_row(fund.ticker, fund.name)
    console.print(table)


# ---------------------------------------------------------------------------
# details
# ---------------------------------------------------------------------------


@cli.command()
@click.argument("ticker")
@click.option("--json", "as_json", is_flag=True, default=False, help="Output JSON.")
@click.pass_context
def details(ctx: click.Context, ticker: str, as_json: bool) -> None:
    """Show holdings and price coverage for a fund."""

    async def _op(service):
        return await service.details(ticker)

    result = _run_with_service(ctx, _op)

    if as_json:
        _echo_json(result.model_dump(mode="json"))
        return

    table = Table(title=f"{result.ticker}: {result.name}")
    table.add_column("Ticker", style="bold")
    table.add_column("Name")
    table.add_column("Weight %", justify="right")
    table.add_column("Exchange")
    table.add_column("Prices", justify="right")
    for holding in result.equity_holdings:
        table.add_row(
            holding.ticker,
            holding.name,
            f"{holding.weight:.2f}",
            holding.exchange,
            str(len(holding.prices)) if holding.prices is not None else "[red]n/a[/red]",
        )
    console.print(table)

    if result.other_holdings:
        other = Table(title="Other holdings")
        other.add_column("Asset class", style="bold")
        other.add_column("Weight %", justify="right")
        for asset_class, weight in result.other_holdings.items():
            other.add_row(asset_class, f"{weight:.2f}")
        console.print(other)

    etf_points = len(result.prices) if result.prices is not None else 0
    console.print(f"ETF price points: {etf_points}")


# ---------------------------------------------------------------------------
# chart
# ---------------------------------------------------------------------------


@cli.command()
@click.argument("ticker")
@click.option("--json", "as_json", is_flag=True, default=False, help="Output JSON.")
@click.option(
    "--tail",
    "-n",
    type=click.IntRange(min=1),
    default=10,
    help="Number of most recent chart points to show.",
)
@click.pass_context
def chart(ctx: click.Context, ticker: str, as_json: bool, tail: int) -> None:
    """Chart a fund against its holdings on a percentage axis."""

    async def _op(service):
        return await service.chart(ticker)

    result = _run_with_service(ctx, _op)

    if as_json:
        _echo_json(result.model_dump(mode="json"))
        return

    holdings = list(result.chart[-1].holding_prices) if result.chart else []
    table = Table(title=f"{result.etf_ticker}: {result.etf_name}")
    table.add_column("Date", style="bold")
    table.add_column(result.etf_ticker, justify="right")
    for holding in holdings:
        table.add_column(holding, justify="right")
    for point in result.chart[-tail:]:
        table.add_row(
            _format_day(point.timestamp),
            f"{point.etf_price:.2f}",
            *(f"{point.holding_prices.get(h, 0.0):.3f}" for h in holdings),
        )
    console.print(table)
    console.print(
        f"{len(result.chart)} points, {len(holdings)} of "
        f"{len(result.holding_details)} holdings charted"
    )


# ---------------------------------------------------------------------------
# serve
# ---------------------------------------------------------------------------


@cli.command()
@click.option("--host", type=str, default=None, help="Bind address (default from config).")
@click.option("--port", "-p", type=int, default=None, help="Port number (default from config).")
@click.option("--reload", is_flag=True, default=False, help="Auto-reload on code changes.")
@click.pass_context
def serve(ctx: click.Context, host: str | None, port: int | None, reload: bool) -> None:
    """Start the REST API server."""
    import uvicorn

    config = _load_config(ctx)
    host = host or config.api.host
    port = port or config.api.port

    console.print(f"Starting fundscope API on [bold]{host}:{port}[/bold]")
    console.print(f"API docs: http://{host}:{port}/docs")

    # The app factory runs without arguments and reloads config from here
    if ctx.obj.get("config_path"):
        os.environ[CONFIG_ENV_VAR] = str(Path(ctx.obj["config_path"]).resolve())

    uvicorn.run(
        "fundscope.api.app:create_app",
        factory=True,
        host=host,
        port=port,
        reload=reload,
    )


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def main() -> None:
    """Main entry point for the CLI."""
    cli()


if __name__ == "__main__":
    main()
