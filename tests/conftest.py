"""Shared test fixtures for market-data."""

from __future__ import annotations

import pytest

from market_data.types import MarketSeries
from tests.factories import make_wave_series


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch: pytest.MonkeyPatch, tmp_path: object) -> None:
    """Keep developer env vars and .env files out of config-driven tests."""
    import os

    for key in list(os.environ):
        if key.startswith("MARKET_DATA_"):
            monkeypatch.delenv(key)
    monkeypatch.chdir(tmp_path)  # type: ignore[arg-type]


@pytest.fixture
def aapl_30() -> MarketSeries:
    """30-bar daily AAPL series with mixed gains and losses."""
    return make_wave_series(30)
