"""Plain-text reports for series and enhanced series.

One line per bar: timestamp and OHLCV, then every requested indicator's
value at the same index, labeled by its result key.
"""

from __future__ import annotations

from datetime import datetime, time

from market_data.enhanced import EnhancedMarketSeries
from market_data.indicators.results import BollingerResult, IndicatorValue, MACDResult
from market_data.types import Bar, MarketSeries

_MISSING = "n/a"


def format_timestamp(ts: datetime) -> str:
    """Date only for midnight bars, otherwise date and time."""
    if ts.time() == time(0, 0):
        return ts.date().isoformat()
    return ts.strftime("%Y-%m-%d %H:%M:%S")


def format_bar(bar: Bar) -> str:
    return (
        f"Date: {format_timestamp(bar.timestamp)}, Open: {bar.open:.2f}, "
        f"Close: {bar.close:.2f}, High: {bar.high:.2f}, Low: {bar.low:.2f}, "
        f"Volume: {bar.volume:.0f}"
    )


def format_value(value: IndicatorValue, index: int) -> str:
    """Render one indicator's value(s) at a bar index.

    Multi-valued results render as "a / b / c" in field order. Indices
    past the end of a result (degenerate output) render as "n/a".
    """
    if isinstance(value, (MACDResult, BollingerResult)):
        if index >= len(value):
            return _MISSING
        return " / ".join(f"{v:.4f}" for v in value.at(index))
    if index >= len(value):
        return _MISSING
    return f"{value[index]:.4f}"


def format_series(series: MarketSeries) -> str:
    lines = [
        f"MarketSeries: Symbol = {series.symbol}, Interval = {series.interval}, "
        f"Bars = {len(series.bars)}"
    ]
    lines.extend(f"  {format_bar(bar)}" for bar in series.bars)
    return "\n".join(lines)


def format_enhanced(series: EnhancedMarketSeries) -> str:
    """Tabular report of an enhanced series.

    Before calculate() only the header and bars are shown, with the
    pending labels listed in the header.
    """
    labels = series.labels
    state = "calculated" if series.calculated else "pending"
    lines = [
        f"EnhancedMarketSeries: Symbol = {series.symbol}, "
        f"Interval = {series.interval}, Bars = {len(series.bars)}, "
        f"Indicators ({state}) = {', '.join(labels) or 'none'}"
    ]
    for index, bar in enumerate(series.bars):
        parts = [format_bar(bar)]
        for label in labels:
            value = series.indicators.get(label)
            if value is not None:
                parts.append(f"{label}: {format_value(value, index)}")
        lines.append("  " + ", ".join(parts))
    return "\n".join(lines)
