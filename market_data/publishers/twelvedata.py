"""Twelvedata time series publisher.

https://twelvedata.com/docs#time-series. Numbers arrive as strings and
values are newest-first; both are normalized here.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, ClassVar

import httpx

from market_data.errors import (
    DownloadedDataError,
    ParsingError,
    UnsupportedIntervalError,
)
from market_data.publishers.base import build_series, load_json
from market_data.types import Bar, Interval, MarketSeries
from market_data.utils.parsing import parse_datetime, to_float

BASE_URL = "https://api.twelvedata.com/time_series"

# Interval -> Twelvedata interval string
_INTERVAL_MAP: dict[Interval, str] = {
    Interval.MIN1: "1min",
    Interval.MIN5: "5min",
    Interval.MIN15: "15min",
    Interval.MIN30: "30min",
    Interval.HOUR1: "1h",
    Interval.HOUR2: "2h",
    Interval.HOUR4: "4h",
    Interval.DAILY: "1day",
    Interval.WEEKLY: "1week",
    Interval.MONTHLY: "1month",
}


@dataclass(frozen=True)
class TwelvedataRequest:
    symbol: str
    interval: Interval
    output_size: int = 30


class Twelvedata:
    """Twelvedata publisher. output_size accepts 1..5000 (provider default 30)."""

    name: ClassVar[str] = "twelvedata"

    def __init__(self, api_key: str) -> None:
        self._api_key = api_key

    def intraday_series(
        self,
        symbol: str,
        output_size: int,
        interval: Interval,
    ) -> TwelvedataRequest:
        if not interval.is_intraday:
            raise UnsupportedIntervalError(
                f"{interval} interval is not supported by Twelvedata intraday"
            )
        return TwelvedataRequest(symbol, interval, output_size)

    def daily_series(self, symbol: str, output_size: int = 30) -> TwelvedataRequest:
        return TwelvedataRequest(symbol, Interval.DAILY, output_size)

    def weekly_series(self, symbol: str, output_size: int = 30) -> TwelvedataRequest:
        return TwelvedataRequest(symbol, Interval.WEEKLY, output_size)

    def monthly_series(self, symbol: str, output_size: int = 30) -> TwelvedataRequest:
        return TwelvedataRequest(symbol, Interval.MONTHLY, output_size)

    def create_endpoint(self, request: TwelvedataRequest) -> str:
        params = {
            "symbol": request.symbol,
            "interval": _INTERVAL_MAP[request.interval],
            "outputsize": str(request.output_size),
            "format": "json",
            "apikey": self._api_key,
        }
        return str(httpx.URL(BASE_URL, params=params))

    def transform_data(self, payload: str, request: TwelvedataRequest) -> MarketSeries:
        data = load_json(payload)
        if not isinstance(data, dict):
            raise ParsingError("Twelvedata payload is not a JSON object")
        status = data.get("status")
        if status != "ok":
            message = data.get("message", "")
            raise DownloadedDataError(
                f"Downloaded data status is: {status}. {message}".strip()
            )

        try:
            meta = data["meta"]
            values = data["values"]
        except KeyError as e:
            raise ParsingError(f"Twelvedata payload missing {e.args[0]!r}") from e

        bars = [_value_to_bar(v) for v in values]
        interval = request.interval
        if "interval" in meta:
            interval = Interval.parse(meta["interval"])
        return build_series(meta.get("symbol", request.symbol), interval, bars)


def _value_to_bar(value: dict[str, Any]) -> Bar:
    """Convert one Twelvedata "values" entry to a Bar."""
    if "datetime" not in value:
        raise ParsingError("Twelvedata value missing 'datetime'")
    return Bar(
        timestamp=parse_datetime(value["datetime"]),
        open=to_float(value.get("open"), "open"),
        close=to_float(value.get("close"), "close"),
        high=to_float(value.get("high"), "high"),
        low=to_float(value.get("low"), "low"),
        # Forex and index symbols come without volume
        volume=to_float(value.get("volume", "0"), "volume"),
    )
