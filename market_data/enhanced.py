"""EnhancedMarketSeries: indicator request builder and calculation orchestrator.

Built from MarketSeries.enhance(). Each with_* call returns a new
value with one more ask appended; nothing is computed until
calculate(), which validates every ask against the series length,
dispatches it to its algorithm and stores the result under the ask's
label. A calculated series is final: further with_* or calculate()
calls raise IndicatorError.
"""

from __future__ import annotations

import dataclasses
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

import structlog

from market_data.errors import IndicatorError
from market_data.indicators.asks import (
    Ask,
    BollingerAsk,
    EMAAsk,
    MACDAsk,
    RSIAsk,
    SMAAsk,
    StochasticAsk,
)
from market_data.indicators.averages import ema, sma
from market_data.indicators.composite import bollinger_bands, macd
from market_data.indicators.momentum import rsi, stochastic
from market_data.indicators.results import IndicatorValue
from market_data.types import Bar, Interval

log = structlog.get_logger()

# Ask type -> algorithm. Every Ask variant must have an entry.
_CALCULATORS: dict[type, Callable[[Sequence[Bar], Any], IndicatorValue]] = {
    SMAAsk: lambda bars, ask: sma(bars, ask.period),
    EMAAsk: lambda bars, ask: ema(bars, ask.period),
    RSIAsk: lambda bars, ask: rsi(bars, ask.period),
    StochasticAsk: lambda bars, ask: stochastic(bars, ask.period),
    MACDAsk: lambda bars, ask: macd(bars, ask.fast, ask.slow, ask.signal),
    BollingerAsk: lambda bars, ask: bollinger_bands(bars, ask.period, ask.std_dev),
}


def _empty_store() -> Mapping[str, IndicatorValue]:
    return MappingProxyType({})


@dataclass(frozen=True)
class EnhancedMarketSeries:
    """A series plus the indicators requested and (after calculate) computed.

    indicators maps each ask label (e.g. "SMA 10", "MACD (12, 26, 9)") to
    a value sequence aligned index-for-index with bars.
    """

    symbol: str
    interval: Interval
    bars: tuple[Bar, ...]
    asks: tuple[Ask, ...] = ()
    indicators: Mapping[str, IndicatorValue] = field(default_factory=_empty_store)
    calculated: bool = False

    # --- Request accumulation ---

    def with_sma(self, period: int) -> EnhancedMarketSeries:
        """Request a Simple Moving Average of close."""
        return self._with_ask(SMAAsk(period))

    def with_ema(self, period: int) -> EnhancedMarketSeries:
        """Request an Exponential Moving Average of close."""
        return self._with_ask(EMAAsk(period))

    def with_rsi(self, period: int) -> EnhancedMarketSeries:
        """Request a Relative Strength Index."""
        return self._with_ask(RSIAsk(period))

    def with_stochastic(self, period: int) -> EnhancedMarketSeries:
        """Request a Stochastic Oscillator (%K)."""
        return self._with_ask(StochasticAsk(period))

    def with_macd(self, fast: int, slow: int, signal: int) -> EnhancedMarketSeries:
        """Request MACD line, signal line and histogram."""
        return self._with_ask(MACDAsk(fast, slow, signal))

    def with_bollinger_bands(self, period: int, std_dev: float) -> EnhancedMarketSeries:
        """Request upper, middle and lower Bollinger Bands."""
        return self._with_ask(BollingerAsk(period, std_dev))

    def _with_ask(self, ask: Ask) -> EnhancedMarketSeries:
        if self.calculated:
            raise IndicatorError(
                f"Cannot add {ask.label}: indicators for {self.symbol} "
                "are already calculated"
            )
        return dataclasses.replace(self, asks=(*self.asks, ask))

    # --- Calculation ---

    def calculate(self) -> EnhancedMarketSeries:
        """Run every requested indicator and return the calculated series.

        Asks run in issue order; two identical asks share a label and the
        later one wins. Raises InvalidParametersError for the first ask
        whose parameters do not fit this series, and IndicatorError if the
        series was already calculated.
        """
        if self.calculated:
            raise IndicatorError(f"Indicators for {self.symbol} are already calculated")

        length = len(self.bars)
        for ask in self.asks:
            ask.validate(length)

        store: dict[str, IndicatorValue] = {}
        for ask in self.asks:
            store[ask.label] = _CALCULATORS[type(ask)](self.bars, ask)

        log.info(
            "indicators_calculated",
            symbol=self.symbol,
            interval=str(self.interval),
            bar_count=length,
            labels=list(store),
        )
        return dataclasses.replace(
            self,
            indicators=MappingProxyType(store),
            calculated=True,
        )

    # --- Access ---

    @property
    def labels(self) -> list[str]:
        """Distinct result labels in first-requested order."""
        return list(dict.fromkeys(ask.label for ask in self.asks))

    def __len__(self) -> int:
        return len(self.bars)

    def __getitem__(self, label: str) -> IndicatorValue:
        return self.indicators[label]

    def __str__(self) -> str:
        from market_data.formatting import format_enhanced

        return format_enhanced(self)
