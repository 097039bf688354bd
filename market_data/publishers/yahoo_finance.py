"""Yahoo Finance chart publisher.

No API key. Rows where any OHLCV field is null (halts, partial
sessions) are skipped rather than zero-filled.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, ClassVar

import httpx

from market_data.errors import (
    DownloadedDataError,
    ParsingError,
    UnsupportedIntervalError,
)
from market_data.publishers.base import build_series, load_json
from market_data.types import Bar, Interval, MarketSeries
from market_data.utils.parsing import from_epoch_seconds, to_float

BASE_URL = "https://query1.finance.yahoo.com/v8/finance/chart/"


class YahooRange(str, Enum):
    """Lookback ranges accepted by the chart endpoint."""

    DAY1 = "1d"
    DAY5 = "5d"
    MONTH1 = "1mo"
    MONTH3 = "3mo"
    MONTH6 = "6mo"
    YEAR1 = "1y"
    YEAR2 = "2y"
    YEAR5 = "5y"
    YEAR10 = "10y"
    YTD = "ytd"
    MAX = "max"


# Interval -> Yahoo interval string (intraday capped at 1h)
_INTERVAL_MAP: dict[Interval, str] = {
    Interval.MIN1: "1m",
    Interval.MIN5: "5m",
    Interval.MIN15: "15m",
    Interval.MIN30: "30m",
    Interval.HOUR1: "1h",
    Interval.DAILY: "1d",
    Interval.WEEKLY: "1wk",
    Interval.MONTHLY: "1mo",
}


@dataclass(frozen=True)
class YahooRequest:
    symbol: str
    interval: Interval
    range: YahooRange = YahooRange.MONTH6


class YahooFinance:
    name: ClassVar[str] = "yahoo"

    def intraday_series(
        self,
        symbol: str,
        interval: Interval,
        range: YahooRange = YahooRange.DAY5,
    ) -> YahooRequest:
        if not interval.is_intraday or interval not in _INTERVAL_MAP:
            raise UnsupportedIntervalError(
                f"{interval} interval is not supported by Yahoo Finance intraday"
            )
        return YahooRequest(symbol, interval, range)

    def daily_series(
        self, symbol: str, range: YahooRange = YahooRange.MONTH6
    ) -> YahooRequest:
        return YahooRequest(symbol, Interval.DAILY, range)

    def weekly_series(
        self, symbol: str, range: YahooRange = YahooRange.MONTH6
    ) -> YahooRequest:
        return YahooRequest(symbol, Interval.WEEKLY, range)

    def monthly_series(
        self, symbol: str, range: YahooRange = YahooRange.MONTH6
    ) -> YahooRequest:
        return YahooRequest(symbol, Interval.MONTHLY, range)

    def create_endpoint(self, request: YahooRequest) -> str:
        try:
            interval = _INTERVAL_MAP[request.interval]
        except KeyError:
            raise UnsupportedIntervalError(
                f"{request.interval} interval is not supported by Yahoo Finance"
            ) from None
        params = {
            "metrics": "high",
            "interval": interval,
            "range": request.range.value,
        }
        return str(httpx.URL(BASE_URL + request.symbol, params=params))

    def transform_data(self, payload: str, request: YahooRequest) -> MarketSeries:
        data = load_json(payload)
        try:
            chart = data["chart"]
        except (KeyError, TypeError) as e:
            raise ParsingError("Yahoo Finance payload missing 'chart'") from e

        if chart.get("error"):
            raise DownloadedDataError(f"Yahoo Finance error: {chart['error']}")
        results = chart.get("result") or []
        if not results:
            raise DownloadedDataError("Yahoo Finance returned empty result")

        result = results[0]
        symbol = result.get("meta", {}).get("symbol", request.symbol)
        timestamps = result.get("timestamp") or []
        quotes = result.get("indicators", {}).get("quote") or []
        bars = _rows_to_bars(timestamps, quotes[0]) if quotes else []
        return build_series(symbol, request.interval, bars)


def _rows_to_bars(timestamps: list[int], quote: dict[str, Any]) -> list[Bar]:
    """Zip the columnar quote arrays into Bars, skipping incomplete rows."""
    columns = ("open", "high", "low", "close", "volume")
    arrays = {c: quote.get(c) or [] for c in columns}
    bars: list[Bar] = []
    for i, ts in enumerate(timestamps):
        row = {c: arrays[c][i] if i < len(arrays[c]) else None for c in columns}
        if any(v is None for v in row.values()):
            continue
        bars.append(
            Bar(
                timestamp=from_epoch_seconds(ts),
                open=to_float(row["open"], "open"),
                close=to_float(row["close"], "close"),
                high=to_float(row["high"], "high"),
                low=to_float(row["low"], "low"),
                volume=to_float(row["volume"], "volume"),
            )
        )
    return bars
