"""Momentum oscillators: RSI and the Stochastic Oscillator (%K).

Both look back over a trailing window of period + 1 bars and pad the
first `period` positions with the 0.0 sentinel.
"""

from __future__ import annotations

from collections.abc import Sequence

from market_data.indicators.averages import SENTINEL
from market_data.indicators.results import Values
from market_data.types import Bar

RSI_NO_LOSS = 100.0
STOCHASTIC_FLAT_RANGE = 0.0


def rsi(bars: Sequence[Bar], period: int) -> Values:
    """Relative Strength Index, recomputed over each trailing window.

    For i >= period the window is bars[i - period .. i], giving `period`
    close-to-close deltas. Gains and losses are summed and divided by
    `period`; no Wilder smoothing is carried between windows. A window
    without losses is 100.0.
    """
    n = len(bars)
    if period < 1 or n <= period:
        return (SENTINEL,) * n

    closes = [b.close for b in bars]
    deltas = [closes[j] - closes[j - 1] for j in range(1, n)]

    values = [SENTINEL] * period
    for i in range(period, n):
        gains = 0.0
        losses = 0.0
        # deltas[j - 1] is the change into bar j
        for change in deltas[i - period : i]:
            if change > 0:
                gains += change
            else:
                losses += -change
        avg_gain = gains / period
        avg_loss = losses / period
        if avg_loss == 0:
            values.append(RSI_NO_LOSS)
        else:
            values.append(100.0 - 100.0 / (1.0 + avg_gain / avg_loss))
    return tuple(values)


def stochastic(bars: Sequence[Bar], period: int) -> Values:
    """Stochastic %K over the trailing bars[i - period .. i].

    %K = 100 * (close - lowest low) / (highest high - lowest low), or
    0.0 when the range is flat.
    """
    n = len(bars)
    if period < 1 or n <= period:
        return (SENTINEL,) * n

    values = [SENTINEL] * period
    for i in range(period, n):
        window = bars[i - period : i + 1]
        lowest_low = min(b.low for b in window)
        highest_high = max(b.high for b in window)
        if highest_high == lowest_low:
            values.append(STOCHASTIC_FLAT_RANGE)
        else:
            values.append(
                100.0 * (bars[i].close - lowest_low) / (highest_high - lowest_low)
            )
    return tuple(values)
