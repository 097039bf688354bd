"""Multi-output indicators built on EMA: MACD and Bollinger Bands.

Both return empty results for degenerate parameters instead of raising.
The enhancement orchestrator validates parameters before calling these,
so callers going through calculate() never see the empty form.
"""

from __future__ import annotations

import math
from collections.abc import Sequence

from market_data.indicators.averages import SENTINEL, ema, ema_values
from market_data.indicators.results import BollingerResult, MACDResult
from market_data.types import Bar


def macd(bars: Sequence[Bar], fast: int, slow: int, signal: int) -> MACDResult:
    """MACD line, signal line and histogram.

    Requires fast < slow, signal < slow and slow < len(bars); anything
    else returns an empty MACDResult. The signal line is the EMA of the
    MACD line itself, not of price.
    """
    if min(fast, slow, signal) < 1 or len(bars) <= slow:
        return MACDResult()
    if fast >= slow or signal >= slow:
        return MACDResult()

    fast_ema = ema(bars, fast)
    slow_ema = ema(bars, slow)
    macd_line = tuple(f - s for f, s in zip(fast_ema, slow_ema))
    signal_line = ema_values(macd_line, signal)
    histogram = tuple(m - s for m, s in zip(macd_line, signal_line))
    return MACDResult(macd=macd_line, signal=signal_line, histogram=histogram)


def bollinger_bands(
    bars: Sequence[Bar],
    period: int,
    std_dev: float,
) -> BollingerResult:
    """Bollinger Bands with an EMA centerline.

    For i >= period the band width is std_dev times the deviation of the
    typical price over bars[i - period + 1 .. i], measured around the
    current bar's typical price, and is applied around middle[i]. The
    first `period` upper/lower positions are 0.0; the middle band is the
    unpadded EMA. Returns an empty BollingerResult when len(bars) <= period.
    """
    n = len(bars)
    if period < 1 or n <= period:
        return BollingerResult()

    middle = ema(bars, period)
    typical = [b.typical_price for b in bars]

    upper = [SENTINEL] * period
    lower = [SENTINEL] * period
    for i in range(period, n):
        current = typical[i]
        sum_squares = sum((tp - current) ** 2 for tp in typical[i - period + 1 : i + 1])
        deviation = math.sqrt(sum_squares / period)
        upper.append(middle[i] + std_dev * deviation)
        lower.append(middle[i] - std_dev * deviation)
    return BollingerResult(upper=tuple(upper), middle=middle, lower=tuple(lower))
