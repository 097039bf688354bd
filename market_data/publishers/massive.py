"""Massive aggregates publisher.

Massive serves the Polygon.io aggregates API under its own host, so the
range table and the aggregate mapping are shared with polygon_io. It
sends no "adjusted" flag and only reports status OK on success.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import ClassVar

import httpx

from market_data.errors import (
    DownloadedDataError,
    ParsingError,
    UnsupportedIntervalError,
)
from market_data.publishers.base import build_series, load_json
from market_data.publishers.polygon_io import RANGE_MAP, aggregate_to_bar
from market_data.types import Interval, MarketSeries

BASE_URL = "https://api.massive.com/v2/aggs/ticker/"


@dataclass(frozen=True)
class MassiveRequest:
    symbol: str
    interval: Interval
    from_date: str
    to_date: str
    limit: int = 5000


class Massive:
    name: ClassVar[str] = "massive"

    def __init__(self, api_key: str) -> None:
        self._api_key = api_key

    def intraday_series(
        self,
        symbol: str,
        from_date: date | str,
        to_date: date | str,
        interval: Interval,
        limit: int = 5000,
    ) -> MassiveRequest:
        if not interval.is_intraday:
            raise UnsupportedIntervalError(
                f"{interval} interval is not supported by Massive intraday"
            )
        return MassiveRequest(symbol, interval, str(from_date), str(to_date), limit)

    def daily_series(
        self, symbol: str, from_date: date | str, to_date: date | str, limit: int = 5000
    ) -> MassiveRequest:
        return MassiveRequest(
            symbol, Interval.DAILY, str(from_date), str(to_date), limit
        )

    def weekly_series(
        self, symbol: str, from_date: date | str, to_date: date | str, limit: int = 5000
    ) -> MassiveRequest:
        return MassiveRequest(
            symbol, Interval.WEEKLY, str(from_date), str(to_date), limit
        )

    def monthly_series(
        self, symbol: str, from_date: date | str, to_date: date | str, limit: int = 5000
    ) -> MassiveRequest:
        return MassiveRequest(
            symbol, Interval.MONTHLY, str(from_date), str(to_date), limit
        )

    def create_endpoint(self, request: MassiveRequest) -> str:
        timespan, multiplier = RANGE_MAP[request.interval]
        path = (
            f"{request.symbol}/range/{multiplier}/{timespan}/"
            f"{request.from_date}/{request.to_date}"
        )
        params = {
            "sort": "asc",
            "limit": str(request.limit),
            "apiKey": self._api_key,
        }
        return str(httpx.URL(BASE_URL + path, params=params))

    def transform_data(self, payload: str, request: MassiveRequest) -> MarketSeries:
        data = load_json(payload)
        if not isinstance(data, dict):
            raise ParsingError("Massive payload is not a JSON object")
        status = data.get("status")
        if status != "OK":
            detail = data.get("error") or data.get("message") or ""
            raise DownloadedDataError(
                f"Downloaded data status is: {status}. {detail}".strip()
            )
        if "results" not in data:
            raise ParsingError("Massive payload missing 'results'")
        bars = [aggregate_to_bar(r) for r in data["results"]]
        return build_series(data.get("ticker", request.symbol), request.interval, bars)
