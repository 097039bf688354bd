"""Polygon.io aggregates publisher.

GET /v2/aggs/ticker/{ticker}/range/{multiplier}/{timespan}/{from}/{to}.
Timestamps are epoch milliseconds (UTC).
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Any, ClassVar

import httpx

from market_data.errors import (
    DownloadedDataError,
    ParsingError,
    UnsupportedIntervalError,
)
from market_data.publishers.base import build_series, load_json
from market_data.types import Bar, Interval, MarketSeries
from market_data.utils.parsing import from_epoch_millis, to_float

BASE_URL = "https://api.polygon.io/v2/aggs/ticker/"

# Interval -> (timespan, multiplier)
RANGE_MAP: dict[Interval, tuple[str, int]] = {
    Interval.MIN1: ("minute", 1),
    Interval.MIN5: ("minute", 5),
    Interval.MIN15: ("minute", 15),
    Interval.MIN30: ("minute", 30),
    Interval.HOUR1: ("hour", 1),
    Interval.HOUR2: ("hour", 2),
    Interval.HOUR4: ("hour", 4),
    Interval.DAILY: ("day", 1),
    Interval.WEEKLY: ("week", 1),
    Interval.MONTHLY: ("month", 1),
}


@dataclass(frozen=True)
class PolygonRequest:
    symbol: str
    interval: Interval
    from_date: str
    to_date: str
    limit: int = 5000


class Polygon:
    """Polygon.io publisher. Dates are YYYY-MM-DD strings or date objects."""

    name: ClassVar[str] = "polygon"

    def __init__(self, api_key: str) -> None:
        self._api_key = api_key

    def intraday_series(
        self,
        symbol: str,
        from_date: date | str,
        to_date: date | str,
        interval: Interval,
        limit: int = 5000,
    ) -> PolygonRequest:
        if not interval.is_intraday:
            raise UnsupportedIntervalError(
                f"{interval} interval is not supported by Polygon intraday"
            )
        return PolygonRequest(symbol, interval, str(from_date), str(to_date), limit)

    def daily_series(
        self, symbol: str, from_date: date | str, to_date: date | str, limit: int = 5000
    ) -> PolygonRequest:
        return PolygonRequest(
            symbol, Interval.DAILY, str(from_date), str(to_date), limit
        )

    def weekly_series(
        self, symbol: str, from_date: date | str, to_date: date | str, limit: int = 5000
    ) -> PolygonRequest:
        return PolygonRequest(
            symbol, Interval.WEEKLY, str(from_date), str(to_date), limit
        )

    def monthly_series(
        self, symbol: str, from_date: date | str, to_date: date | str, limit: int = 5000
    ) -> PolygonRequest:
        return PolygonRequest(
            symbol, Interval.MONTHLY, str(from_date), str(to_date), limit
        )

    def create_endpoint(self, request: PolygonRequest) -> str:
        timespan, multiplier = RANGE_MAP[request.interval]
        path = (
            f"{request.symbol}/range/{multiplier}/{timespan}/"
            f"{request.from_date}/{request.to_date}"
        )
        params = {
            "adjusted": "true",
            "sort": "asc",
            "limit": str(request.limit),
            "apiKey": self._api_key,
        }
        return str(httpx.URL(BASE_URL + path, params=params))

    def transform_data(self, payload: str, request: PolygonRequest) -> MarketSeries:
        data = load_json(payload)
        if not isinstance(data, dict):
            raise ParsingError("Polygon payload is not a JSON object")
        status = data.get("status")
        if status not in ("OK", "DELAYED"):
            detail = data.get("error") or data.get("message") or ""
            raise DownloadedDataError(
                f"Downloaded data status is: {status}. {detail}".strip()
            )
        results = data.get("results")
        if not results:
            raise DownloadedDataError(
                f"Polygon returned no results for {request.symbol}"
            )

        bars = [aggregate_to_bar(r) for r in results]
        return build_series(data.get("ticker", request.symbol), request.interval, bars)


def aggregate_to_bar(agg: dict[str, Any]) -> Bar:
    """Convert one aggregate ({o, h, l, c, v, t}) to a Bar.

    Shared with the Massive publisher, which serves the same aggregates.
    """
    if "t" not in agg:
        raise ParsingError("Aggregate missing 't'")
    return Bar(
        timestamp=from_epoch_millis(agg["t"]),
        open=to_float(agg.get("o"), "open"),
        close=to_float(agg.get("c"), "close"),
        high=to_float(agg.get("h"), "high"),
        low=to_float(agg.get("l"), "low"),
        volume=to_float(agg.get("v"), "volume"),
    )
