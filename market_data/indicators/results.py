"""Indicator output containers.

Single-valued indicators produce a plain tuple of floats. MACD and
Bollinger Bands produce three aligned tuples, grouped in a frozen
dataclass that still unpacks like a 3-tuple.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass

Values = tuple[float, ...]


@dataclass(frozen=True)
class MACDResult:
    """MACD line, signal line and histogram, index-aligned with the bars."""

    macd: Values = ()
    signal: Values = ()
    histogram: Values = ()

    def __iter__(self) -> Iterator[Values]:
        return iter((self.macd, self.signal, self.histogram))

    def __len__(self) -> int:
        return len(self.macd)

    def at(self, index: int) -> tuple[float, float, float]:
        return (self.macd[index], self.signal[index], self.histogram[index])


@dataclass(frozen=True)
class BollingerResult:
    """Upper, middle and lower bands, index-aligned with the bars."""

    upper: Values = ()
    middle: Values = ()
    lower: Values = ()

    def __iter__(self) -> Iterator[Values]:
        return iter((self.upper, self.middle, self.lower))

    def __len__(self) -> int:
        return len(self.middle)

    def at(self, index: int) -> tuple[float, float, float]:
        return (self.upper[index], self.middle[index], self.lower[index])


IndicatorValue = Values | MACDResult | BollingerResult
