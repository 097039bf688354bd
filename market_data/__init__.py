"""market-data: fetch historical stock market series and enhance them with indicators.

Re-exports the public API for convenient imports:
    from market_data import MarketSeries, Bar, Interval, MarketClient
"""

from market_data.client import MarketClient
from market_data.enhanced import EnhancedMarketSeries
from market_data.errors import (
    DownloadedDataError,
    HttpError,
    IndicatorError,
    InvalidParametersError,
    MarketError,
    ParsingError,
    UnsupportedIntervalError,
)
from market_data.indicators import BollingerResult, MACDResult
from market_data.publishers import (
    AlphaVantage,
    Finnhub,
    Massive,
    OutputSize,
    Polygon,
    Publisher,
    Twelvedata,
    YahooFinance,
    YahooRange,
)
from market_data.types import Bar, Interval, MarketSeries

__all__ = [
    "AlphaVantage",
    "Bar",
    "BollingerResult",
    "DownloadedDataError",
    "EnhancedMarketSeries",
    "Finnhub",
    "HttpError",
    "IndicatorError",
    "Interval",
    "InvalidParametersError",
    "MACDResult",
    "MarketClient",
    "MarketError",
    "MarketSeries",
    "Massive",
    "OutputSize",
    "ParsingError",
    "Polygon",
    "Publisher",
    "Twelvedata",
    "UnsupportedIntervalError",
    "YahooFinance",
    "YahooRange",
]
