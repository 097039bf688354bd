"""Market data domain types shared across the library.

Frozen dataclasses for value objects. Prices and volumes are floats:
the indicator engine works in float throughout, and publishers convert
provider strings at the parsing boundary.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING

from market_data.errors import UnsupportedIntervalError

if TYPE_CHECKING:
    from market_data.enhanced import EnhancedMarketSeries


class Interval(str, Enum):
    """Bar granularity."""

    MIN1 = "1min"
    MIN5 = "5min"
    MIN15 = "15min"
    MIN30 = "30min"
    HOUR1 = "1h"
    HOUR2 = "2h"
    HOUR4 = "4h"
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"

    @classmethod
    def parse(cls, text: str) -> Interval:
        """Parse a provider or user spelling into an Interval.

        Accepts the canonical values plus the aliases used by the
        supported publishers (e.g. "1day", "1wk", "60min").
        """
        key = text.strip().lower()
        try:
            return _INTERVAL_ALIASES[key]
        except KeyError:
            raise UnsupportedIntervalError(f"Unknown interval: {text!r}") from None

    @property
    def is_intraday(self) -> bool:
        return self not in (Interval.DAILY, Interval.WEEKLY, Interval.MONTHLY)

    def __str__(self) -> str:
        return self.value


_INTERVAL_ALIASES: dict[str, Interval] = {
    **{i.value: i for i in Interval},
    "1m": Interval.MIN1,
    "5m": Interval.MIN5,
    "15m": Interval.MIN15,
    "30m": Interval.MIN30,
    "60min": Interval.HOUR1,
    "60m": Interval.HOUR1,
    "1hour": Interval.HOUR1,
    "2hour": Interval.HOUR2,
    "4hour": Interval.HOUR4,
    "1d": Interval.DAILY,
    "1day": Interval.DAILY,
    "day": Interval.DAILY,
    "1wk": Interval.WEEKLY,
    "1week": Interval.WEEKLY,
    "week": Interval.WEEKLY,
    "1mo": Interval.MONTHLY,
    "1month": Interval.MONTHLY,
    "month": Interval.MONTHLY,
}


# --- Value Objects (frozen) ---


@dataclass(frozen=True)
class Bar:
    """OHLCV bar (candlestick) data."""

    timestamp: datetime
    open: float
    close: float
    high: float
    low: float
    volume: float

    @property
    def typical_price(self) -> float:
        """(high + low + close) / 3."""
        return (self.high + self.low + self.close) / 3.0


@dataclass(frozen=True)
class MarketSeries:
    """Bars for one symbol and interval, ascending by timestamp.

    Publishers sort after parsing. Nothing downstream re-sorts or
    validates ordering.
    """

    symbol: str
    interval: Interval
    bars: tuple[Bar, ...]

    def __len__(self) -> int:
        return len(self.bars)

    @property
    def closes(self) -> list[float]:
        return [b.close for b in self.bars]

    def enhance(self) -> EnhancedMarketSeries:
        """Start an indicator builder over this series."""
        from market_data.enhanced import EnhancedMarketSeries

        return EnhancedMarketSeries(
            symbol=self.symbol,
            interval=self.interval,
            bars=self.bars,
        )

    def __str__(self) -> str:
        from market_data.formatting import format_series

        return format_series(self)
