"""Click CLI commands for market-data."""

from __future__ import annotations

import asyncio
import io
from collections.abc import Callable
from datetime import datetime
from pathlib import Path
from typing import Any

import click
from pydantic import ValidationError

from market_data.client import MarketClient
from market_data.config import AppConfig, IndicatorDefaults
from market_data.enhanced import EnhancedMarketSeries
from market_data.errors import MarketError
from market_data.publishers import (
    AlphaVantage,
    Finnhub,
    Massive,
    OutputSize,
    Polygon,
    Twelvedata,
    YahooFinance,
    YahooRange,
)
from market_data.types import Interval, MarketSeries
from market_data.utils.logging import set_run_id, setup_logging

PROVIDERS = ("twelvedata", "yahoo", "polygon", "alphavantage", "finnhub", "massive")

# Providers whose requests are bounded by a date range
DATED_PROVIDERS = frozenset({"polygon", "massive", "finnhub"})


def _parse_ints(count: int) -> Callable[[click.Context, click.Parameter, Any], list]:
    """Build a callback parsing repeated "a,b,c" options into int tuples."""

    def callback(
        ctx: click.Context, param: click.Parameter, values: tuple[str, ...]
    ) -> list[tuple[int, ...]]:
        parsed: list[tuple[int, ...]] = []
        for raw in values:
            parts = [p.strip() for p in raw.split(",")]
            if len(parts) != count:
                raise click.BadParameter(
                    f"expected {count} comma-separated values, got {raw!r}"
                )
            try:
                parsed.append(tuple(int(p) for p in parts))
            except ValueError:
                raise click.BadParameter(f"expected integers, got {raw!r}") from None
        return parsed

    return callback


def _parse_bollinger(
    ctx: click.Context, param: click.Parameter, values: tuple[str, ...]
) -> list[tuple[int, float]]:
    parsed: list[tuple[int, float]] = []
    for raw in values:
        parts = [p.strip() for p in raw.split(",")]
        if len(parts) != 2:
            raise click.BadParameter(f"expected PERIOD,STD_DEV, got {raw!r}")
        try:
            parsed.append((int(parts[0]), float(parts[1])))
        except ValueError:
            raise click.BadParameter(f"expected PERIOD,STD_DEV, got {raw!r}") from None
    return parsed


def indicator_options(func: Callable[..., Any]) -> Callable[..., Any]:
    """Shared indicator flags for the enhance and fetch commands."""
    options = [
        click.option("--sma", multiple=True, type=int, help="SMA period (repeatable)."),
        click.option("--ema", multiple=True, type=int, help="EMA period (repeatable)."),
        click.option("--rsi", multiple=True, type=int, help="RSI period (repeatable)."),
        click.option(
            "--stochastic",
            multiple=True,
            type=int,
            help="Stochastic period (repeatable).",
        ),
        click.option(
            "--macd",
            multiple=True,
            callback=_parse_ints(3),
            help="MACD as FAST,SLOW,SIGNAL (repeatable).",
        ),
        click.option(
            "--bollinger",
            multiple=True,
            callback=_parse_bollinger,
            help="Bollinger Bands as PERIOD,STD_DEV (repeatable).",
        ),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def apply_indicators(
    series: MarketSeries,
    defaults: IndicatorDefaults,
    *,
    sma: tuple[int, ...] = (),
    ema: tuple[int, ...] = (),
    rsi: tuple[int, ...] = (),
    stochastic: tuple[int, ...] = (),
    macd: list[tuple[int, ...]] | None = None,
    bollinger: list[tuple[int, float]] | None = None,
) -> EnhancedMarketSeries:
    """Request the given indicators, or the configured SMA/EMA/RSI when none."""
    macd = macd or []
    bollinger = bollinger or []
    enhanced = series.enhance()
    if not (sma or ema or rsi or stochastic or macd or bollinger):
        return (
            enhanced.with_sma(defaults.sma_period)
            .with_ema(defaults.ema_period)
            .with_rsi(defaults.rsi_period)
            .calculate()
        )
    for period in sma:
        enhanced = enhanced.with_sma(period)
    for period in ema:
        enhanced = enhanced.with_ema(period)
    for period in rsi:
        enhanced = enhanced.with_rsi(period)
    for period in stochastic:
        enhanced = enhanced.with_stochastic(period)
    for fast, slow, signal in macd:
        enhanced = enhanced.with_macd(fast, slow, signal)
    for period, std_dev in bollinger:
        enhanced = enhanced.with_bollinger_bands(period, std_dev)
    return enhanced.calculate()


def _load_config() -> AppConfig:
    try:
        return AppConfig()
    except ValidationError as e:
        raise click.ClickException(f"Invalid configuration: {e}") from e


def _publisher(provider: str, config: AppConfig) -> Any:
    if provider == "twelvedata":
        return Twelvedata(config.providers.twelvedata_api_key)
    if provider == "polygon":
        return Polygon(config.providers.polygon_api_key)
    if provider == "massive":
        return Massive(config.providers.massive_api_key)
    if provider == "alphavantage":
        return AlphaVantage(config.providers.alphavantage_api_key)
    if provider == "finnhub":
        return Finnhub(config.providers.finnhub_api_key)
    return YahooFinance()


def _build_request(
    publisher: Any,
    symbol: str,
    interval: Interval,
    *,
    output_size: int = 30,
    full: bool = False,
    range_: str = YahooRange.MONTH6.value,
    from_date: str = "",
    to_date: str = "",
) -> Any:
    """Build the provider request for a symbol/interval."""
    if isinstance(publisher, Twelvedata):
        if interval.is_intraday:
            return publisher.intraday_series(symbol, output_size, interval)
        return {
            Interval.DAILY: publisher.daily_series,
            Interval.WEEKLY: publisher.weekly_series,
            Interval.MONTHLY: publisher.monthly_series,
        }[interval](symbol, output_size)
    if isinstance(publisher, (Polygon, Massive)):
        if interval.is_intraday:
            return publisher.intraday_series(symbol, from_date, to_date, interval)
        return {
            Interval.DAILY: publisher.daily_series,
            Interval.WEEKLY: publisher.weekly_series,
            Interval.MONTHLY: publisher.monthly_series,
        }[interval](symbol, from_date, to_date)
    if isinstance(publisher, AlphaVantage):
        size = OutputSize.FULL if full else OutputSize.COMPACT
        if interval.is_intraday:
            return publisher.intraday_series(symbol, interval, size)
        if interval == Interval.DAILY:
            return publisher.daily_series(symbol, size)
        if interval == Interval.WEEKLY:
            return publisher.weekly_series(symbol)
        return publisher.monthly_series(symbol)
    if isinstance(publisher, Finnhub):
        # A saved payload carries its own range; 0 stands in for the bounds
        start = from_date or 0
        end = to_date or 0
        if interval.is_intraday:
            return publisher.intraday_series(symbol, start, end, interval)
        return {
            Interval.DAILY: publisher.daily_series,
            Interval.WEEKLY: publisher.weekly_series,
            Interval.MONTHLY: publisher.monthly_series,
        }[interval](symbol, start, end)
    yahoo_range = YahooRange(range_)
    if interval.is_intraday:
        return publisher.intraday_series(symbol, interval, yahoo_range)
    return {
        Interval.DAILY: publisher.daily_series,
        Interval.WEEKLY: publisher.weekly_series,
        Interval.MONTHLY: publisher.monthly_series,
    }[interval](symbol, yahoo_range)


@click.group()
@click.pass_context
def cli(ctx: click.Context) -> None:
    """market-data: historical stock series enhanced with technical indicators."""
    config = _load_config()
    setup_logging(level=config.log_level, log_format=config.log_format)
    set_run_id()
    ctx.obj = config


@cli.command()
@click.argument("path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--provider",
    type=click.Choice(PROVIDERS),
    required=True,
    help="Provider whose JSON format the file holds.",
)
@click.option("--symbol", default="", help="Symbol, if the payload has none.")
@click.option("--interval", default="daily", help="Bar interval (default: daily).")
@indicator_options
@click.pass_obj
def enhance(
    config: AppConfig,
    path: Path,
    provider: str,
    symbol: str,
    interval: str,
    **indicators: Any,
) -> None:
    """Enhance a saved provider payload with indicators and print the report."""
    try:
        publisher = _publisher(provider, config)
        request = _build_request(
            publisher,
            symbol,
            Interval.parse(interval),
        )
        series = publisher.transform_data(path.read_text(encoding="utf-8"), request)
        enhanced = apply_indicators(series, config.indicators, **indicators)
    except MarketError as e:
        raise click.ClickException(str(e)) from e

    click.echo(str(enhanced))


@cli.command()
@click.argument("symbol")
@click.option(
    "--provider",
    type=click.Choice(PROVIDERS),
    default="yahoo",
    help="Provider to download from (default: yahoo).",
)
@click.option("--interval", default="daily", help="Bar interval (default: daily).")
@click.option("--output-size", default=30, type=int, help="Twelvedata bar count.")
@click.option("--full", is_flag=True, help="Alpha Vantage full history.")
@click.option(
    "--range",
    "range_",
    default=YahooRange.MONTH6.value,
    type=click.Choice([r.value for r in YahooRange]),
    help="Yahoo Finance lookback range (default: 6mo).",
)
@click.option(
    "--from-date",
    type=click.DateTime(formats=["%Y-%m-%d"]),
    default=None,
    help="Start date for polygon, massive and finnhub (YYYY-MM-DD).",
)
@click.option(
    "--to-date",
    type=click.DateTime(formats=["%Y-%m-%d"]),
    default=None,
    help="End date for polygon, massive and finnhub (YYYY-MM-DD).",
)
@click.option("--raw", is_flag=True, help="Print the raw payload instead.")
@indicator_options
@click.pass_obj
def fetch(
    config: AppConfig,
    symbol: str,
    provider: str,
    interval: str,
    output_size: int,
    full: bool,
    range_: str,
    from_date: datetime | None,
    to_date: datetime | None,
    raw: bool,
    **indicators: Any,
) -> None:
    """Download a series and print it enhanced with indicators."""
    if provider in DATED_PROVIDERS and (from_date is None or to_date is None):
        raise click.UsageError(
            f"--from-date and --to-date are required for {provider}"
        )

    try:
        publisher = _publisher(provider, config)
        request = _build_request(
            publisher,
            symbol.upper(),
            Interval.parse(interval),
            output_size=output_size,
            full=full,
            range_=range_,
            from_date=from_date.date().isoformat() if from_date else "",
            to_date=to_date.date().isoformat() if to_date else "",
        )
        client = MarketClient(publisher, http_config=config.http).add_request(request)
        asyncio.run(client.get_data_async())
        if raw:
            buffer = io.StringIO()
            client.to_writer(buffer)
            click.echo(buffer.getvalue(), nl=False)
            return
        outcome = client.transform_data()[0]
        if isinstance(outcome, MarketError):
            raise outcome
        enhanced = apply_indicators(outcome, config.indicators, **indicators)
    except MarketError as e:
        raise click.ClickException(str(e)) from e

    click.echo(str(enhanced))


@cli.command()
@click.pass_obj
def config(cfg: AppConfig) -> None:
    """Show current configuration."""
    click.echo("=== Market-Data Configuration ===\n")

    click.echo(f"Log Level:    {cfg.log_level}")
    click.echo(f"Log Format:   {cfg.log_format}")
    click.echo("")

    click.echo("[HTTP]")
    click.echo(f"  Timeout:    {cfg.http.timeout_seconds}s")
    click.echo(f"  User-Agent: {cfg.http.user_agent}")
    click.echo("")

    click.echo("[Providers]")
    keys = cfg.providers
    click.echo(f"  Twelvedata key: {'set' if keys.twelvedata_api_key else 'unset'}")
    click.echo(f"  Polygon key:    {'set' if keys.polygon_api_key else 'unset'}")
    click.echo(f"  Massive key:    {'set' if keys.massive_api_key else 'unset'}")
    click.echo(
        f"  AlphaVantage key: {'set' if keys.alphavantage_api_key else 'unset'}"
    )
    click.echo(f"  Finnhub key:    {'set' if keys.finnhub_api_key else 'unset'}")
    click.echo("")

    ind = cfg.indicators
    click.echo("[Indicator Defaults]")
    click.echo(f"  SMA:         {ind.sma_period}")
    click.echo(f"  EMA:         {ind.ema_period}")
    click.echo(f"  RSI:         {ind.rsi_period}")
    click.echo(f"  Stochastic:  {ind.stochastic_period}")
    click.echo(f"  MACD:        {ind.macd_fast}, {ind.macd_slow}, {ind.macd_signal}")
    click.echo(f"  Bollinger:   {ind.bollinger_period}, {ind.bollinger_std_dev:g}")
