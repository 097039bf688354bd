"""Provider publishers.

Re-exports the protocol and implementations for convenient imports:
    from market_data.publishers import Publisher, Twelvedata, YahooFinance
"""

from market_data.publishers.alphavantage import (
    AlphaVantage,
    AlphaVantageRequest,
    Function,
    OutputSize,
)
from market_data.publishers.base import Publisher
from market_data.publishers.finnhub import (
    Finnhub,
    FinnhubCandleRequest,
    FinnhubQuoteRequest,
)
from market_data.publishers.massive import Massive, MassiveRequest
from market_data.publishers.polygon_io import Polygon, PolygonRequest
from market_data.publishers.twelvedata import Twelvedata, TwelvedataRequest
from market_data.publishers.yahoo_finance import YahooFinance, YahooRange, YahooRequest

__all__ = [
    "AlphaVantage",
    "AlphaVantageRequest",
    "Finnhub",
    "FinnhubCandleRequest",
    "FinnhubQuoteRequest",
    "Function",
    "Massive",
    "MassiveRequest",
    "OutputSize",
    "Polygon",
    "PolygonRequest",
    "Publisher",
    "Twelvedata",
    "TwelvedataRequest",
    "YahooFinance",
    "YahooRange",
    "YahooRequest",
]
