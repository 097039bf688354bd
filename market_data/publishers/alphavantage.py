"""Alpha Vantage time series publisher.

One query endpoint selected by ``function``. The payload holds a
"Meta Data" block and one "... Time Series ..." object keyed by date,
whose exact name depends on the function and interval. Adjusted series
insert "5. adjusted close" and move volume to "6. volume".
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
from market_data.utils.parsing import parse_datetime, to_float

BASE_URL = "https://www.alphavantage.co/query"


class Function(str, Enum):
    TIME_SERIES_DAILY = "TIME_SERIES_DAILY"
    TIME_SERIES_DAILY_ADJUSTED = "TIME_SERIES_DAILY_ADJUSTED"
    TIME_SERIES_INTRADAY = "TIME_SERIES_INTRADAY"
    TIME_SERIES_WEEKLY = "TIME_SERIES_WEEKLY"
    TIME_SERIES_WEEKLY_ADJUSTED = "TIME_SERIES_WEEKLY_ADJUSTED"
    TIME_SERIES_MONTHLY = "TIME_SERIES_MONTHLY"
    TIME_SERIES_MONTHLY_ADJUSTED = "TIME_SERIES_MONTHLY_ADJUSTED"


class OutputSize(str, Enum):
    """compact is the latest 100 points; full is the whole history."""

    COMPACT = "compact"
    FULL = "full"


# Intraday Interval -> Alpha Vantage interval string
_INTRADAY_INTERVALS: dict[Interval, str] = {
    Interval.MIN1: "1min",
    Interval.MIN5: "5min",
    Interval.MIN15: "15min",
    Interval.MIN30: "30min",
    Interval.HOUR1: "60min",
}

# Bodies Alpha Vantage sends with HTTP 200 instead of data
_ERROR_KEYS = ("Error Message", "Note", "Information")


@dataclass(frozen=True)
class AlphaVantageRequest:
    symbol: str
    function: Function
    interval: Interval
    output_size: OutputSize = OutputSize.COMPACT


class AlphaVantage:
    name: ClassVar[str] = "alphavantage"

    def __init__(self, api_key: str) -> None:
        self._api_key = api_key

    def intraday_series(
        self,
        symbol: str,
        interval: Interval,
        output_size: OutputSize = OutputSize.COMPACT,
    ) -> AlphaVantageRequest:
        if interval not in _INTRADAY_INTERVALS:
            raise UnsupportedIntervalError(
                f"{interval} interval is not supported by Alpha Vantage intraday"
            )
        return AlphaVantageRequest(
            symbol, Function.TIME_SERIES_INTRADAY, interval, output_size
        )

    def daily_series(
        self,
        symbol: str,
        output_size: OutputSize = OutputSize.COMPACT,
        adjusted: bool = False,
    ) -> AlphaVantageRequest:
        function = (
            Function.TIME_SERIES_DAILY_ADJUSTED
            if adjusted
            else Function.TIME_SERIES_DAILY
        )
        return AlphaVantageRequest(symbol, function, Interval.DAILY, output_size)

    def weekly_series(self, symbol: str, adjusted: bool = False) -> AlphaVantageRequest:
        function = (
            Function.TIME_SERIES_WEEKLY_ADJUSTED
            if adjusted
            else Function.TIME_SERIES_WEEKLY
        )
        return AlphaVantageRequest(symbol, function, Interval.WEEKLY)

    def monthly_series(
        self, symbol: str, adjusted: bool = False
    ) -> AlphaVantageRequest:
        function = (
            Function.TIME_SERIES_MONTHLY_ADJUSTED
            if adjusted
            else Function.TIME_SERIES_MONTHLY
        )
        return AlphaVantageRequest(symbol, function, Interval.MONTHLY)

    def create_endpoint(self, request: AlphaVantageRequest) -> str:
        params = {
            "function": request.function.value,
            "symbol": request.symbol,
            "outputsize": request.output_size.value,
            "datatype": "json",
            "apikey": self._api_key,
        }
        if request.function is Function.TIME_SERIES_INTRADAY:
            params["interval"] = _INTRADAY_INTERVALS[request.interval]
        return str(httpx.URL(BASE_URL, params=params))

    def transform_data(
        self, payload: str, request: AlphaVantageRequest
    ) -> MarketSeries:
        data = load_json(payload)
        if not isinstance(data, dict):
            raise ParsingError("Alpha Vantage payload is not a JSON object")

        series_key = next((k for k in data if "Time Series" in k), None)
        if series_key is None:
            for key in _ERROR_KEYS:
                if key in data:
                    raise DownloadedDataError(f"Alpha Vantage error: {data[key]}")
            raise ParsingError("Alpha Vantage payload missing time series")

        symbol = data.get("Meta Data", {}).get("2. Symbol", request.symbol)
        bars = [_entry_to_bar(ts, fields) for ts, fields in data[series_key].items()]
        return build_series(symbol, request.interval, bars)


def _entry_to_bar(timestamp: str, fields: dict[str, Any]) -> Bar:
    """Convert one dated entry ({"1. open", ..., "5. volume"}) to a Bar."""
    volume = fields.get("5. volume", fields.get("6. volume"))
    return Bar(
        timestamp=parse_datetime(timestamp),
        open=to_float(fields.get("1. open"), "open"),
        close=to_float(fields.get("4. close"), "close"),
        high=to_float(fields.get("2. high"), "high"),
        low=to_float(fields.get("3. low"), "low"),
        volume=to_float(volume, "volume"),
    )
