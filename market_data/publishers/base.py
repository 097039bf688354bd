"""Publisher protocol: abstract interface for market data providers.

Every provider implementation (Twelvedata, Yahoo Finance, Polygon.io,
Massive, Alpha Vantage, Finnhub) satisfies this protocol. A publisher
only builds URLs and maps payloads; downloading is MarketClient's job.
"""

from __future__ import annotations

import json
from collections.abc import Iterable
from typing import Any, Protocol, runtime_checkable

from market_data.errors import ParsingError
from market_data.types import Bar, Interval, MarketSeries


@runtime_checkable
class Publisher(Protocol):
    """Builds endpoints for, and parses payloads from, one provider.

    ``request`` is the provider-specific object returned by the
    publisher's ``*_series`` methods.
    """

    name: str

    def create_endpoint(self, request: Any) -> str:
        """Return the full query URL for a request."""
        ...

    def transform_data(self, payload: str, request: Any) -> MarketSeries:
        """Parse a downloaded payload into a MarketSeries.

        Returns bars sorted ascending by timestamp.

        Raises:
            DownloadedDataError: The provider reported an error.
            ParsingError: A field could not be converted.
        """
        ...


def load_json(payload: str) -> Any:
    """Decode a provider payload, mapping decode failures to ParsingError."""
    try:
        return json.loads(payload)
    except json.JSONDecodeError as e:
        raise ParsingError(f"Unable to deserialize: {e}") from e


def build_series(symbol: str, interval: Interval, bars: Iterable[Bar]) -> MarketSeries:
    """Sort bars by timestamp and wrap them in a MarketSeries."""
    ordered = sorted(bars, key=lambda b: b.timestamp)
    return MarketSeries(symbol=symbol, interval=interval, bars=tuple(ordered))
