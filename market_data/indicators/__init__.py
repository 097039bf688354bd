"""Indicator engine: pure algorithms, request types and result containers."""

from market_data.indicators.asks import (
    Ask,
    BollingerAsk,
    EMAAsk,
    MACDAsk,
    RSIAsk,
    SMAAsk,
    StochasticAsk,
)
from market_data.indicators.averages import SENTINEL, SMA, ema, ema_values, sma
from market_data.indicators.composite import bollinger_bands, macd
from market_data.indicators.momentum import rsi, stochastic
from market_data.indicators.results import (
    BollingerResult,
    IndicatorValue,
    MACDResult,
    Values,
)

__all__ = [
    "SENTINEL",
    "SMA",
    "Ask",
    "BollingerAsk",
    "BollingerResult",
    "EMAAsk",
    "IndicatorValue",
    "MACDAsk",
    "MACDResult",
    "RSIAsk",
    "SMAAsk",
    "StochasticAsk",
    "Values",
    "bollinger_bands",
    "ema",
    "ema_values",
    "macd",
    "rsi",
    "sma",
    "stochastic",
]
