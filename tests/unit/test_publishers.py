"""Tests for the provider publishers.

Endpoints are checked via parsed URLs; payloads are small hand-written
JSON documents in each provider's shape.
"""

from __future__ import annotations

import json
from datetime import date, datetime
from typing import Any

import httpx
import pytest

from market_data.errors import (
    DownloadedDataError,
    ParsingError,
    UnsupportedIntervalError,
)
from market_data.publishers import (
    AlphaVantage,
    AlphaVantageRequest,
    Finnhub,
    FinnhubCandleRequest,
    FinnhubQuoteRequest,
    Function,
    Massive,
    MassiveRequest,
    OutputSize,
    Polygon,
    PolygonRequest,
    Publisher,
    Twelvedata,
    TwelvedataRequest,
    YahooFinance,
    YahooRange,
    YahooRequest,
)
from market_data.types import Interval

# Epoch milliseconds, midnight UTC
FEB_3 = 1770076800000
FEB_4 = 1770163200000

# --- Payload builders ---


def twelvedata_payload(**overrides: Any) -> str:
    data: dict[str, Any] = {
        "meta": {"symbol": "AAPL", "interval": "1day", "currency": "USD"},
        "values": [
            {
                "datetime": "2026-02-04",
                "open": "152.0",
                "high": "154.0",
                "low": "151.0",
                "close": "153.5",
                "volume": "2000",
            },
            {
                "datetime": "2026-02-03",
                "open": "150.0",
                "high": "152.5",
                "low": "149.5",
                "close": "152.0",
                "volume": "1500",
            },
        ],
        "status": "ok",
    }
    data.update(overrides)
    return json.dumps(data)


def yahoo_payload(**chart_overrides: Any) -> str:
    chart: dict[str, Any] = {
        "result": [
            {
                "meta": {"symbol": "MSFT"},
                "timestamp": [1770076800, 1770163200, 1770249600],
                "indicators": {
                    "quote": [
                        {
                            "open": [400.0, None, 404.0],
                            "high": [405.0, 406.0, 408.0],
                            "low": [398.0, 399.0, 402.0],
                            "close": [403.0, 401.0, 407.0],
                            "volume": [10000, 11000, 12000],
                        }
                    ]
                },
            }
        ],
        "error": None,
    }
    chart.update(chart_overrides)
    return json.dumps({"chart": chart})


def polygon_payload(**overrides: Any) -> str:
    data: dict[str, Any] = {
        "ticker": "NVDA",
        "status": "OK",
        "resultsCount": 2,
        "results": [
            {"o": 120.0, "h": 125.0, "l": 119.0, "c": 124.0, "v": 5e6, "t": FEB_4},
            {"o": 118.0, "h": 121.0, "l": 117.5, "c": 120.0, "v": 4e6, "t": FEB_3},
        ],
    }
    data.update(overrides)
    return json.dumps(data)


def alphavantage_payload(**overrides: Any) -> str:
    data: dict[str, Any] = {
        "Meta Data": {"1. Information": "Daily Prices", "2. Symbol": "IBM"},
        "Time Series (Daily)": {
            "2026-02-04": {
                "1. open": "231.0",
                "2. high": "234.5",
                "3. low": "230.0",
                "4. close": "233.0",
                "5. volume": "4100000",
            },
            "2026-02-03": {
                "1. open": "228.0",
                "2. high": "232.0",
                "3. low": "227.5",
                "4. close": "231.5",
                "5. volume": "3900000",
            },
        },
    }
    data.update(overrides)
    return json.dumps(data)


def finnhub_candles(**overrides: Any) -> str:
    data: dict[str, Any] = {
        "s": "ok",
        "t": [FEB_4 // 1000, FEB_3 // 1000],
        "o": [52.0, 50.0],
        "h": [53.5, 51.0],
        "l": [51.5, 49.0],
        "c": [53.0, 50.5],
        "v": [9000, 8000],
    }
    data.update(overrides)
    return json.dumps(data)


# --- Protocol ---


class TestProtocol:
    @pytest.mark.parametrize(
        "publisher",
        [
            Twelvedata("key"),
            YahooFinance(),
            Polygon("key"),
            Massive("key"),
            AlphaVantage("key"),
            Finnhub("key"),
        ],
    )
    def test_satisfies_publisher(self, publisher: object) -> None:
        assert isinstance(publisher, Publisher)


# --- Twelvedata ---


class TestTwelvedataRequests:
    def test_daily_weekly_monthly(self) -> None:
        td = Twelvedata("demo")
        assert td.daily_series("AAPL") == TwelvedataRequest("AAPL", Interval.DAILY, 30)
        assert td.weekly_series("AAPL", 10).interval == Interval.WEEKLY
        assert td.monthly_series("AAPL").interval == Interval.MONTHLY

    def test_intraday_rejects_daily(self) -> None:
        with pytest.raises(UnsupportedIntervalError):
            Twelvedata("demo").intraday_series("AAPL", 30, Interval.DAILY)

    def test_endpoint(self) -> None:
        td = Twelvedata("demo")
        request = td.intraday_series("AAPL", 50, Interval.MIN5)
        url = httpx.URL(td.create_endpoint(request))
        assert url.host == "api.twelvedata.com"
        assert url.path == "/time_series"
        assert dict(url.params) == {
            "symbol": "AAPL",
            "interval": "5min",
            "outputsize": "50",
            "format": "json",
            "apikey": "demo",
        }

    def test_endpoint_daily_interval_name(self) -> None:
        td = Twelvedata("demo")
        url = httpx.URL(td.create_endpoint(td.daily_series("AAPL")))
        assert url.params["interval"] == "1day"


class TestTwelvedataTransform:
    def test_bars_sorted_ascending(self) -> None:
        td = Twelvedata("demo")
        series = td.transform_data(twelvedata_payload(), td.daily_series("AAPL"))
        assert series.symbol == "AAPL"
        assert series.interval == Interval.DAILY
        assert [b.timestamp for b in series.bars] == [
            datetime(2026, 2, 3),
            datetime(2026, 2, 4),
        ]
        first = series.bars[0]
        assert (first.open, first.high, first.low, first.close) == (
            150.0,
            152.5,
            149.5,
            152.0,
        )
        assert first.volume == 1500.0

    def test_missing_volume_is_zero(self) -> None:
        values = [
            {
                "datetime": "2026-02-03 09:30:00",
                "open": "1.1",
                "high": "1.2",
                "low": "1.0",
                "close": "1.15",
            }
        ]
        payload = twelvedata_payload(
            meta={"symbol": "EUR/USD", "interval": "1min"}, values=values
        )
        td = Twelvedata("demo")
        request = td.intraday_series("EUR/USD", 1, Interval.MIN1)
        series = td.transform_data(payload, request)
        assert series.bars[0].volume == 0.0
        assert series.interval == Interval.MIN1

    def test_error_status(self) -> None:
        payload = json.dumps(
            {"code": 400, "message": "symbol not found", "status": "error"}
        )
        td = Twelvedata("demo")
        with pytest.raises(DownloadedDataError, match="symbol not found"):
            td.transform_data(payload, td.daily_series("ZZZZ"))

    def test_bad_number(self) -> None:
        values = [
            {
                "datetime": "2026-02-03",
                "open": "abc",
                "high": "1",
                "low": "1",
                "close": "1",
            }
        ]
        td = Twelvedata("demo")
        with pytest.raises(ParsingError, match="open"):
            td.transform_data(
                twelvedata_payload(values=values), td.daily_series("AAPL")
            )

    def test_not_json(self) -> None:
        td = Twelvedata("demo")
        with pytest.raises(ParsingError, match="Unable to deserialize"):
            td.transform_data("<html>", td.daily_series("AAPL"))

    def test_missing_values(self) -> None:
        payload = json.dumps({"meta": {"symbol": "AAPL"}, "status": "ok"})
        td = Twelvedata("demo")
        with pytest.raises(ParsingError, match="values"):
            td.transform_data(payload, td.daily_series("AAPL"))


# --- Yahoo Finance ---


class TestYahooRequests:
    def test_defaults(self) -> None:
        yf = YahooFinance()
        assert yf.daily_series("MSFT") == YahooRequest(
            "MSFT", Interval.DAILY, YahooRange.MONTH6
        )
        assert yf.intraday_series("MSFT", Interval.MIN15).range == YahooRange.DAY5

    def test_intraday_rejects_unsupported(self) -> None:
        with pytest.raises(UnsupportedIntervalError):
            YahooFinance().intraday_series("MSFT", Interval.HOUR4)

    @pytest.mark.parametrize(
        ("request_", "interval"),
        [
            (YahooRequest("MSFT", Interval.DAILY), "1d"),
            (YahooRequest("MSFT", Interval.WEEKLY), "1wk"),
            (YahooRequest("MSFT", Interval.MONTHLY), "1mo"),
            (YahooRequest("MSFT", Interval.MIN1, YahooRange.DAY1), "1m"),
        ],
    )
    def test_endpoint(self, request_: YahooRequest, interval: str) -> None:
        url = httpx.URL(YahooFinance().create_endpoint(request_))
        assert url.host == "query1.finance.yahoo.com"
        assert url.path == "/v8/finance/chart/MSFT"
        assert url.params["interval"] == interval
        assert url.params["range"] == request_.range.value
        assert url.params["metrics"] == "high"

    @pytest.mark.parametrize("interval", [Interval.HOUR2, Interval.HOUR4])
    def test_endpoint_rejects_unmapped_interval(self, interval: Interval) -> None:
        with pytest.raises(UnsupportedIntervalError, match="Yahoo Finance"):
            YahooFinance().create_endpoint(YahooRequest("MSFT", interval))


class TestYahooTransform:
    def test_skips_null_rows(self) -> None:
        yf = YahooFinance()
        series = yf.transform_data(yahoo_payload(), yf.daily_series("MSFT"))
        assert series.symbol == "MSFT"
        assert len(series.bars) == 2
        assert series.bars[0].timestamp == datetime(2026, 2, 3)
        assert series.bars[1].close == 407.0
        assert series.bars[1].volume == 12000.0

    def test_chart_error(self) -> None:
        error = {"code": "Not Found", "description": "No data found"}
        yf = YahooFinance()
        with pytest.raises(DownloadedDataError, match="No data found"):
            yf.transform_data(
                yahoo_payload(result=None, error=error), yf.daily_series("X")
            )

    def test_empty_result(self) -> None:
        yf = YahooFinance()
        with pytest.raises(DownloadedDataError, match="empty"):
            yf.transform_data(yahoo_payload(result=[]), yf.daily_series("X"))

    def test_missing_chart(self) -> None:
        yf = YahooFinance()
        with pytest.raises(ParsingError, match="chart"):
            yf.transform_data(json.dumps({"finance": {}}), yf.daily_series("X"))


# --- Polygon.io ---


class TestPolygonRequests:
    def test_date_objects_become_iso_strings(self) -> None:
        req = Polygon("key").daily_series("NVDA", date(2026, 1, 1), date(2026, 2, 1))
        assert req == PolygonRequest(
            "NVDA", Interval.DAILY, "2026-01-01", "2026-02-01", 5000
        )

    def test_intraday_rejects_weekly(self) -> None:
        with pytest.raises(UnsupportedIntervalError):
            Polygon("key").intraday_series(
                "NVDA", "2026-01-01", "2026-01-02", Interval.WEEKLY
            )

    def test_endpoint(self) -> None:
        pg = Polygon("secret")
        req = pg.intraday_series("NVDA", "2026-01-01", "2026-01-02", Interval.MIN15)
        url = httpx.URL(pg.create_endpoint(req))
        assert url.host == "api.polygon.io"
        assert url.path == "/v2/aggs/ticker/NVDA/range/15/minute/2026-01-01/2026-01-02"
        assert url.params["apiKey"] == "secret"
        assert url.params["sort"] == "asc"
        assert url.params["adjusted"] == "true"
        assert url.params["limit"] == "5000"

    def test_monthly_endpoint(self) -> None:
        pg = Polygon("k")
        request = pg.monthly_series("NVDA", "2025-01-01", "2026-01-01")
        url = httpx.URL(pg.create_endpoint(request))
        assert "/range/1/month/" in url.path


class TestPolygonTransform:
    def test_bars_sorted_with_epoch_millis(self) -> None:
        pg = Polygon("k")
        req = pg.daily_series("NVDA", "2026-02-01", "2026-02-05")
        series = pg.transform_data(polygon_payload(), req)
        assert series.symbol == "NVDA"
        assert [b.timestamp for b in series.bars] == [
            datetime(2026, 2, 3),
            datetime(2026, 2, 4),
        ]
        assert series.bars[0].close == 120.0
        assert series.bars[1].volume == 5e6

    def test_delayed_status_is_accepted(self) -> None:
        pg = Polygon("k")
        req = pg.daily_series("NVDA", "2026-02-01", "2026-02-05")
        assert len(pg.transform_data(polygon_payload(status="DELAYED"), req)) == 2

    def test_error_status(self) -> None:
        payload = json.dumps({"status": "ERROR", "error": "Unknown API Key"})
        pg = Polygon("bad")
        req = pg.daily_series("NVDA", "2026-02-01", "2026-02-05")
        with pytest.raises(DownloadedDataError, match="Unknown API Key"):
            pg.transform_data(payload, req)

    def test_no_results(self) -> None:
        pg = Polygon("k")
        req = pg.daily_series("NVDA", "2026-02-01", "2026-02-05")
        with pytest.raises(DownloadedDataError, match="no results"):
            pg.transform_data(polygon_payload(results=[]), req)


# --- Massive ---


class TestMassiveRequests:
    def test_daily_request(self) -> None:
        req = Massive("key").daily_series("NVDA", date(2026, 1, 1), "2026-02-01")
        assert req == MassiveRequest(
            "NVDA", Interval.DAILY, "2026-01-01", "2026-02-01", 5000
        )

    def test_intraday_rejects_daily(self) -> None:
        with pytest.raises(UnsupportedIntervalError, match="Massive"):
            Massive("key").intraday_series(
                "NVDA", "2026-01-01", "2026-01-02", Interval.DAILY
            )

    def test_endpoint(self) -> None:
        ms = Massive("secret")
        req = ms.intraday_series(
            "NVDA", "2026-01-01", "2026-01-02", Interval.HOUR4, limit=120
        )
        url = httpx.URL(ms.create_endpoint(req))
        assert url.host == "api.massive.com"
        assert url.path == "/v2/aggs/ticker/NVDA/range/4/hour/2026-01-01/2026-01-02"
        assert dict(url.params) == {"sort": "asc", "limit": "120", "apiKey": "secret"}


class TestMassiveTransform:
    def test_bars_sorted_with_epoch_millis(self) -> None:
        ms = Massive("k")
        req = ms.weekly_series("NVDA", "2026-01-01", "2026-02-05")
        series = ms.transform_data(polygon_payload(), req)
        assert series.symbol == "NVDA"
        assert series.interval == Interval.WEEKLY
        assert series.bars[0].timestamp == datetime(2026, 2, 3)
        assert series.bars[1].close == 124.0

    def test_delayed_status_is_rejected(self) -> None:
        ms = Massive("k")
        req = ms.daily_series("NVDA", "2026-02-01", "2026-02-05")
        with pytest.raises(DownloadedDataError, match="DELAYED"):
            ms.transform_data(polygon_payload(status="DELAYED"), req)

    def test_empty_results_give_empty_series(self) -> None:
        ms = Massive("k")
        req = ms.daily_series("NVDA", "2026-02-01", "2026-02-05")
        assert len(ms.transform_data(polygon_payload(results=[]), req)) == 0

    def test_missing_results(self) -> None:
        ms = Massive("k")
        req = ms.daily_series("NVDA", "2026-02-01", "2026-02-05")
        payload = json.dumps({"ticker": "NVDA", "status": "OK"})
        with pytest.raises(ParsingError, match="results"):
            ms.transform_data(payload, req)


# --- Alpha Vantage ---


class TestAlphaVantageRequests:
    def test_daily_defaults(self) -> None:
        assert AlphaVantage("k").daily_series("IBM") == AlphaVantageRequest(
            "IBM", Function.TIME_SERIES_DAILY, Interval.DAILY, OutputSize.COMPACT
        )

    @pytest.mark.parametrize(
        ("method", "function"),
        [
            ("daily_series", Function.TIME_SERIES_DAILY_ADJUSTED),
            ("weekly_series", Function.TIME_SERIES_WEEKLY_ADJUSTED),
            ("monthly_series", Function.TIME_SERIES_MONTHLY_ADJUSTED),
        ],
    )
    def test_adjusted_functions(self, method: str, function: Function) -> None:
        request = getattr(AlphaVantage("k"), method)("IBM", adjusted=True)
        assert request.function == function

    def test_intraday_rejects_four_hours(self) -> None:
        with pytest.raises(UnsupportedIntervalError, match="Alpha Vantage"):
            AlphaVantage("k").intraday_series("IBM", Interval.HOUR4)

    def test_endpoint(self) -> None:
        av = AlphaVantage("demo")
        url = httpx.URL(av.create_endpoint(av.daily_series("IBM", OutputSize.FULL)))
        assert url.host == "www.alphavantage.co"
        assert url.path == "/query"
        assert dict(url.params) == {
            "function": "TIME_SERIES_DAILY",
            "symbol": "IBM",
            "outputsize": "full",
            "datatype": "json",
            "apikey": "demo",
        }

    def test_intraday_endpoint_has_interval(self) -> None:
        av = AlphaVantage("demo")
        url = httpx.URL(av.create_endpoint(av.intraday_series("IBM", Interval.HOUR1)))
        assert url.params["function"] == "TIME_SERIES_INTRADAY"
        assert url.params["interval"] == "60min"


class TestAlphaVantageTransform:
    def test_bars_sorted_ascending(self) -> None:
        av = AlphaVantage("k")
        series = av.transform_data(alphavantage_payload(), av.daily_series("X"))
        assert series.symbol == "IBM"
        assert [b.timestamp for b in series.bars] == [
            datetime(2026, 2, 3),
            datetime(2026, 2, 4),
        ]
        assert series.bars[0].open == 228.0
        assert series.bars[1].volume == 4100000.0

    def test_adjusted_volume_field(self) -> None:
        entries = {
            "2026-01-30": {
                "1. open": "10",
                "2. high": "12",
                "3. low": "9",
                "4. close": "11",
                "5. adjusted close": "10.8",
                "6. volume": "777",
                "7. dividend amount": "0.0000",
            }
        }
        payload = json.dumps(
            {"Meta Data": {"2. Symbol": "IBM"}, "Weekly Adjusted Time Series": entries}
        )
        av = AlphaVantage("k")
        request = av.weekly_series("IBM", adjusted=True)
        series = av.transform_data(payload, request)
        assert series.interval == Interval.WEEKLY
        assert series.bars[0].close == 11.0
        assert series.bars[0].volume == 777.0

    def test_intraday_timestamps(self) -> None:
        entries = {
            "2026-02-03 19:55:00": {
                "1. open": "1",
                "2. high": "2",
                "3. low": "0.5",
                "4. close": "1.5",
                "5. volume": "10",
            }
        }
        payload = json.dumps({"Time Series (5min)": entries})
        av = AlphaVantage("k")
        series = av.transform_data(payload, av.intraday_series("IBM", Interval.MIN5))
        assert series.symbol == "IBM"
        assert series.bars[0].timestamp == datetime(2026, 2, 3, 19, 55)

    @pytest.mark.parametrize("key", ["Error Message", "Note", "Information"])
    def test_error_bodies(self, key: str) -> None:
        payload = json.dumps({key: "Invalid API call"})
        av = AlphaVantage("k")
        with pytest.raises(DownloadedDataError, match="Invalid API call"):
            av.transform_data(payload, av.daily_series("IBM"))

    def test_missing_time_series(self) -> None:
        av = AlphaVantage("k")
        payload = json.dumps({"Meta Data": {"2. Symbol": "IBM"}})
        with pytest.raises(ParsingError, match="time series"):
            av.transform_data(payload, av.daily_series("IBM"))


# --- Finnhub ---


class TestFinnhubRequests:
    def test_dates_become_epoch_seconds(self) -> None:
        req = Finnhub("k").daily_series("AAPL", date(2026, 2, 3), "2026-02-04")
        assert req == FinnhubCandleRequest(
            "AAPL", Interval.DAILY, FEB_3 // 1000, FEB_4 // 1000
        )

    def test_epoch_seconds_pass_through(self) -> None:
        req = Finnhub("k").monthly_series("AAPL", 0, 1700000000)
        assert (req.from_ts, req.to_ts, req.resolution) == (0, 1700000000, "M")

    def test_intraday_keeps_interval(self) -> None:
        req = Finnhub("k").intraday_series("AAPL", 0, 1, Interval.MIN15)
        assert req.interval == Interval.MIN15
        assert req.resolution == "15"

    def test_intraday_rejects_two_hours(self) -> None:
        with pytest.raises(UnsupportedIntervalError, match="Finnhub"):
            Finnhub("k").intraday_series("AAPL", 0, 1, Interval.HOUR2)

    def test_bad_date_string(self) -> None:
        with pytest.raises(ParsingError, match="2026/02/03"):
            Finnhub("k").daily_series("AAPL", "2026/02/03", 0)

    def test_candle_endpoint(self) -> None:
        fh = Finnhub("tok")
        request = fh.weekly_series("AAPL", 100, 200)
        url = httpx.URL(fh.create_endpoint(request))
        assert url.host == "finnhub.io"
        assert url.path == "/api/v1/stock/candle"
        assert dict(url.params) == {
            "symbol": "AAPL",
            "resolution": "W",
            "from": "100",
            "to": "200",
            "token": "tok",
        }

    def test_quote_endpoint(self) -> None:
        fh = Finnhub("tok")
        assert fh.quote("AAPL") == FinnhubQuoteRequest("AAPL")
        url = httpx.URL(fh.create_endpoint(fh.quote("AAPL")))
        assert url.path == "/api/v1/quote"
        assert dict(url.params) == {"symbol": "AAPL", "token": "tok"}


class TestFinnhubTransform:
    def test_candles_sorted_ascending(self) -> None:
        fh = Finnhub("k")
        series = fh.transform_data(finnhub_candles(), fh.daily_series("AAPL", 0, 1))
        assert series.symbol == "AAPL"
        assert [b.timestamp for b in series.bars] == [
            datetime(2026, 2, 3),
            datetime(2026, 2, 4),
        ]
        assert series.bars[0].low == 49.0
        assert series.bars[1].volume == 9000.0

    def test_intraday_candles_keep_interval(self) -> None:
        fh = Finnhub("k")
        request = fh.intraday_series("AAPL", 0, 1, Interval.MIN30)
        assert fh.transform_data(finnhub_candles(), request).interval == Interval.MIN30

    def test_no_data_status(self) -> None:
        fh = Finnhub("k")
        payload = json.dumps({"s": "no_data"})
        with pytest.raises(DownloadedDataError, match="no_data"):
            fh.transform_data(payload, fh.daily_series("AAPL", 0, 1))

    def test_error_without_status(self) -> None:
        fh = Finnhub("k")
        payload = json.dumps({"error": "You don't have access to this resource."})
        with pytest.raises(DownloadedDataError, match="access"):
            fh.transform_data(payload, fh.daily_series("AAPL", 0, 1))

    def test_missing_column(self) -> None:
        fh = Finnhub("k")
        with pytest.raises(DownloadedDataError, match="volumes"):
            fh.transform_data(finnhub_candles(v=None), fh.daily_series("AAPL", 0, 1))

    def test_quote_is_single_bar(self) -> None:
        quote = {"c": 261.7, "h": 263.3, "l": 260.7, "o": 261.1, "pc": 259.4}
        payload = json.dumps({**quote, "t": FEB_3 // 1000})
        fh = Finnhub("k")
        series = fh.transform_data(payload, fh.quote("AAPL"))
        assert series.interval == Interval.DAILY
        assert len(series) == 1
        bar = series.bars[0]
        assert (bar.open, bar.close, bar.volume) == (261.1, 261.7, 0.0)
        assert bar.timestamp == datetime(2026, 2, 3)

    def test_quote_unknown_symbol(self) -> None:
        payload = json.dumps({"c": 0, "h": 0, "l": 0, "o": 0, "pc": 0, "t": 0})
        fh = Finnhub("k")
        with pytest.raises(DownloadedDataError, match="ZZZZ"):
            fh.transform_data(payload, fh.quote("ZZZZ"))
