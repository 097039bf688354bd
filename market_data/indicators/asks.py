"""Indicator requests ("asks") and their labels.

One frozen dataclass per indicator kind. Each knows its result label
and how to check itself against a series length; computing is left to
the enhancement orchestrator.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar

from market_data.errors import InvalidParametersError


def _check_period(label: str, period: int, length: int) -> None:
    if period < 1:
        raise InvalidParametersError(label, f"period must be >= 1, got {period}")
    if period >= length:
        raise InvalidParametersError(
            label, f"period {period} must be below the series length {length}"
        )


@dataclass(frozen=True)
class _PeriodAsk:
    """Shared shape of the single-period indicators."""

    kind: ClassVar[str] = ""

    period: int

    @property
    def label(self) -> str:
        return f"{self.kind} {self.period}"

    def validate(self, length: int) -> None:
        _check_period(self.label, self.period, length)


@dataclass(frozen=True)
class SMAAsk(_PeriodAsk):
    kind: ClassVar[str] = "SMA"


@dataclass(frozen=True)
class EMAAsk(_PeriodAsk):
    kind: ClassVar[str] = "EMA"


@dataclass(frozen=True)
class RSIAsk(_PeriodAsk):
    kind: ClassVar[str] = "RSI"


@dataclass(frozen=True)
class StochasticAsk(_PeriodAsk):
    kind: ClassVar[str] = "STOCHASTIC"


@dataclass(frozen=True)
class MACDAsk:
    """MACD(fast, slow, signal). fast and signal must both be below slow."""

    kind: ClassVar[str] = "MACD"

    fast: int
    slow: int
    signal: int

    @property
    def label(self) -> str:
        return f"{self.kind} ({self.fast}, {self.slow}, {self.signal})"

    def validate(self, length: int) -> None:
        label = self.label
        params = (("fast", self.fast), ("slow", self.slow), ("signal", self.signal))
        for name, value in params:
            if value < 1:
                raise InvalidParametersError(label, f"{name} must be >= 1, got {value}")
        if self.fast >= self.slow:
            raise InvalidParametersError(
                label, f"fast ({self.fast}) must be below slow ({self.slow})"
            )
        if self.signal >= self.slow:
            raise InvalidParametersError(
                label, f"signal ({self.signal}) must be below slow ({self.slow})"
            )
        if self.slow >= length:
            raise InvalidParametersError(
                label, f"slow {self.slow} must be below the series length {length}"
            )


@dataclass(frozen=True)
class BollingerAsk:
    """Bollinger Bands(period, std_dev multiplier)."""

    kind: ClassVar[str] = "BOLLINGER"

    period: int
    std_dev: float

    @property
    def label(self) -> str:
        return f"{self.kind} ({self.period}, {self.std_dev:g})"

    def validate(self, length: int) -> None:
        _check_period(self.label, self.period, length)
        if self.std_dev < 0:
            raise InvalidParametersError(
                self.label, f"std_dev must be >= 0, got {self.std_dev:g}"
            )


Ask = SMAAsk | EMAAsk | RSIAsk | StochasticAsk | MACDAsk | BollingerAsk
