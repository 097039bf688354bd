"""Finnhub candle and quote publisher.

Candles come back as parallel column arrays (t, o, h, l, c, v) with a
status field "s"; timestamps are epoch seconds. A quote is the latest
price only, so it maps to a single bar without volume.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, date, datetime
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

BASE_URL = "https://finnhub.io/api/v1/"

# Interval -> Finnhub candle resolution
_RESOLUTIONS: dict[Interval, str] = {
    Interval.MIN1: "1",
    Interval.MIN5: "5",
    Interval.MIN15: "15",
    Interval.MIN30: "30",
    Interval.HOUR1: "60",
    Interval.DAILY: "D",
    Interval.WEEKLY: "W",
    Interval.MONTHLY: "M",
}

_CANDLE_COLUMNS = {
    "t": "timestamps",
    "o": "open prices",
    "h": "high prices",
    "l": "low prices",
    "c": "close prices",
    "v": "volumes",
}


@dataclass(frozen=True)
class FinnhubCandleRequest:
    symbol: str
    interval: Interval
    from_ts: int
    to_ts: int

    @property
    def resolution(self) -> str:
        return _RESOLUTIONS[self.interval]


@dataclass(frozen=True)
class FinnhubQuoteRequest:
    symbol: str
    interval: Interval = Interval.DAILY


def to_epoch_seconds(value: date | str | int) -> int:
    """Accept epoch seconds, a date, or a YYYY-MM-DD string (midnight UTC)."""
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            value = date.fromisoformat(value)
        except ValueError:
            raise ParsingError(f"Unable to parse date: {value!r}") from None
    midnight = datetime(value.year, value.month, value.day, tzinfo=UTC)
    return int(midnight.timestamp())


class Finnhub:
    """Finnhub publisher. Candle ranges are epoch seconds or dates."""

    name: ClassVar[str] = "finnhub"

    def __init__(self, api_key: str) -> None:
        self._api_key = api_key

    def _candle(
        self,
        symbol: str,
        interval: Interval,
        from_ts: date | str | int,
        to_ts: date | str | int,
    ) -> FinnhubCandleRequest:
        return FinnhubCandleRequest(
            symbol, interval, to_epoch_seconds(from_ts), to_epoch_seconds(to_ts)
        )

    def intraday_series(
        self,
        symbol: str,
        from_ts: date | str | int,
        to_ts: date | str | int,
        interval: Interval,
    ) -> FinnhubCandleRequest:
        if not interval.is_intraday or interval not in _RESOLUTIONS:
            raise UnsupportedIntervalError(
                f"{interval} interval is not supported by Finnhub"
            )
        return self._candle(symbol, interval, from_ts, to_ts)

    def daily_series(
        self, symbol: str, from_ts: date | str | int, to_ts: date | str | int
    ) -> FinnhubCandleRequest:
        return self._candle(symbol, Interval.DAILY, from_ts, to_ts)

    def weekly_series(
        self, symbol: str, from_ts: date | str | int, to_ts: date | str | int
    ) -> FinnhubCandleRequest:
        return self._candle(symbol, Interval.WEEKLY, from_ts, to_ts)

    def monthly_series(
        self, symbol: str, from_ts: date | str | int, to_ts: date | str | int
    ) -> FinnhubCandleRequest:
        return self._candle(symbol, Interval.MONTHLY, from_ts, to_ts)

    def quote(self, symbol: str) -> FinnhubQuoteRequest:
        return FinnhubQuoteRequest(symbol)

    def create_endpoint(
        self, request: FinnhubCandleRequest | FinnhubQuoteRequest
    ) -> str:
        if isinstance(request, FinnhubQuoteRequest):
            params = {"symbol": request.symbol, "token": self._api_key}
            return str(httpx.URL(BASE_URL + "quote", params=params))
        if request.interval not in _RESOLUTIONS:
            raise UnsupportedIntervalError(
                f"{request.interval} interval is not supported by Finnhub"
            )
        params = {
            "symbol": request.symbol,
            "resolution": request.resolution,
            "from": str(request.from_ts),
            "to": str(request.to_ts),
            "token": self._api_key,
        }
        return str(httpx.URL(BASE_URL + "stock/candle", params=params))

    def transform_data(
        self, payload: str, request: FinnhubCandleRequest | FinnhubQuoteRequest
    ) -> MarketSeries:
        data = load_json(payload)
        if not isinstance(data, dict):
            raise ParsingError("Finnhub payload is not a JSON object")
        if isinstance(request, FinnhubQuoteRequest):
            return _quote_to_series(data, request)

        status = data.get("s")
        if status is None:
            if data.get("error"):
                raise DownloadedDataError(f"Finnhub error: {data['error']}")
            raise DownloadedDataError("Finnhub response missing status")
        if status != "ok":
            raise DownloadedDataError(
                f"Error returned from Finnhub: {data.get('error') or status}"
            )

        for key, description in _CANDLE_COLUMNS.items():
            if data.get(key) is None:
                raise DownloadedDataError(f"Finnhub response missing {description}")
        rows = zip(data["t"], data["o"], data["h"], data["l"], data["c"], data["v"])
        bars = [
            Bar(
                timestamp=from_epoch_seconds(t),
                open=to_float(o, "open"),
                close=to_float(c, "close"),
                high=to_float(h, "high"),
                low=to_float(low, "low"),
                volume=to_float(v, "volume"),
            )
            for t, o, h, low, c, v in rows
        ]
        return build_series(request.symbol, request.interval, bars)


def _quote_to_series(
    data: dict[str, Any], request: FinnhubQuoteRequest
) -> MarketSeries:
    # t == 0 is Finnhub's answer for an unknown symbol
    if not data.get("t"):
        raise DownloadedDataError(
            f"Finnhub quote returned no data for symbol: {request.symbol}"
        )
    bar = Bar(
        timestamp=from_epoch_seconds(data["t"]),
        open=to_float(data.get("o"), "open"),
        close=to_float(data.get("c"), "close"),
        high=to_float(data.get("h"), "high"),
        low=to_float(data.get("l"), "low"),
        volume=0.0,
    )
    return build_series(request.symbol, request.interval, [bar])
