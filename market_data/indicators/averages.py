"""Moving averages: SMA via ring buffer, EMA via recurrence.

SMA is a standalone ring-buffer class with O(1) per update; the
whole-series sma() function streams closes through it and writes the
0.0 sentinel until the window is warm. EMA seeds with the first input
value and never pads.
"""

from __future__ import annotations

from collections import deque
from collections.abc import Sequence

from market_data.indicators.results import Values
from market_data.types import Bar

SENTINEL = 0.0


class SMA:
    """Simple Moving Average via ring buffer with running sum. O(1) per update.

    Note: Running-sum approach may accumulate negligible float drift over very
    long series (100K+ updates). Re-sum periodically if exact agreement with a
    naive mean matters.
    """

    __slots__ = ("_buf", "_period", "_sum")

    def __init__(self, period: int) -> None:
        if period < 1:
            raise ValueError(f"SMA period must be >= 1, got {period}")
        self._period = period
        self._buf: deque[float] = deque(maxlen=period)
        self._sum: float = 0.0

    def update(self, value: float) -> None:
        """Add a value. Evicts oldest if at capacity."""
        if len(self._buf) == self._period:
            self._sum -= self._buf[0]
        self._buf.append(value)
        self._sum += value

    @property
    def value(self) -> float | None:
        """Current SMA, or None if not warm."""
        if len(self._buf) < self._period:
            return None
        return self._sum / self._period

    @property
    def is_warm(self) -> bool:
        """True when buffer has enough values for a valid SMA."""
        return len(self._buf) >= self._period

    @property
    def count(self) -> int:
        """Number of values currently in the buffer."""
        return len(self._buf)


def sma(bars: Sequence[Bar], period: int) -> Values:
    """SMA of close prices, same length as bars.

    The first period-1 positions hold the 0.0 sentinel. A period below 1
    yields all sentinels.
    """
    if period < 1:
        return (SENTINEL,) * len(bars)
    window = SMA(period)
    values: list[float] = []
    for bar in bars:
        window.update(bar.close)
        current = window.value
        values.append(SENTINEL if current is None else current)
    return tuple(values)


def ema_values(values: Sequence[float], period: int) -> Values:
    """EMA over a raw float sequence, seeded with values[0].

    alpha = 2 / (period + 1). Used directly by MACD for the signal line.
    """
    if period < 1:
        return (SENTINEL,) * len(values)
    alpha = 2.0 / (period + 1)
    result: list[float] = []
    prev: float | None = None
    for value in values:
        prev = value if prev is None else alpha * value + (1.0 - alpha) * prev
        result.append(prev)
    return tuple(result)


def ema(bars: Sequence[Bar], period: int) -> Values:
    """EMA of close prices, same length as bars, no padding."""
    return ema_values([b.close for b in bars], period)
