"""Tests for configuration loading and validation."""

from __future__ import annotations

import os
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from market_data.config import AppConfig, HttpConfig, IndicatorDefaults


class TestDefaultConfig:
    """Default configuration loads without env vars."""

    def test_default_config_loads(self) -> None:
        config = AppConfig()
        assert config.log_level == "WARNING"
        assert config.log_format == "console"
        assert config.http.timeout_seconds == 30.0
        assert config.providers.twelvedata_api_key == ""
        assert config.providers.polygon_api_key == ""
        assert config.providers.alphavantage_api_key == ""
        assert config.providers.finnhub_api_key == ""
        assert config.providers.massive_api_key == ""

    def test_indicator_defaults(self) -> None:
        ind = AppConfig().indicators
        assert (ind.sma_period, ind.ema_period, ind.rsi_period) == (10, 20, 14)
        assert ind.stochastic_period == 14
        assert (ind.macd_fast, ind.macd_slow, ind.macd_signal) == (12, 26, 9)
        assert (ind.bollinger_period, ind.bollinger_std_dev) == (20, 2.0)


class TestIndicatorValidation:
    def test_macd_fast_must_be_below_slow(self) -> None:
        with pytest.raises(ValidationError, match="macd_fast"):
            IndicatorDefaults(macd_fast=26, macd_slow=12)

    def test_macd_signal_must_be_below_slow(self) -> None:
        with pytest.raises(ValidationError, match="macd_signal"):
            IndicatorDefaults(macd_signal=30)

    def test_period_bounds(self) -> None:
        with pytest.raises(ValidationError):
            IndicatorDefaults(sma_period=0)
        with pytest.raises(ValidationError):
            IndicatorDefaults(rsi_period=501)

    def test_negative_std_dev(self) -> None:
        with pytest.raises(ValidationError):
            IndicatorDefaults(bollinger_std_dev=-0.5)


class TestHttpValidation:
    def test_timeout_must_be_positive(self) -> None:
        with pytest.raises(ValidationError):
            HttpConfig(timeout_seconds=0)

    def test_timeout_upper_bound(self) -> None:
        with pytest.raises(ValidationError):
            HttpConfig(timeout_seconds=121)


class TestLogLevelValidation:
    def test_invalid_log_level(self) -> None:
        with pytest.raises(ValidationError):
            AppConfig(log_level="TRACE")

    def test_log_level_is_uppercased(self) -> None:
        assert AppConfig(log_level="debug").log_level == "DEBUG"

    def test_invalid_log_format(self) -> None:
        with pytest.raises(ValidationError):
            AppConfig(log_format="xml")

    def test_valid_log_formats(self) -> None:
        for fmt in ["console", "json", "JSON"]:
            assert AppConfig(log_format=fmt).log_format == fmt.lower()


class TestEnvVarOverride:
    """Environment variables override defaults."""

    def test_env_var_overrides_default(self) -> None:
        with patch.dict(os.environ, {"MARKET_DATA_LOG_LEVEL": "DEBUG"}):
            assert AppConfig().log_level == "DEBUG"

    def test_nested_indicator_override(self) -> None:
        with patch.dict(os.environ, {"MARKET_DATA_INDICATORS__RSI_PERIOD": "21"}):
            assert AppConfig().indicators.rsi_period == 21

    def test_provider_key_override(self) -> None:
        env = {"MARKET_DATA_PROVIDERS__TWELVEDATA_API_KEY": "abc123"}
        with patch.dict(os.environ, env):
            assert AppConfig().providers.twelvedata_api_key == "abc123"

    @pytest.mark.parametrize("provider", ["alphavantage", "finnhub", "massive"])
    def test_added_provider_key_override(self, provider: str) -> None:
        env = {f"MARKET_DATA_PROVIDERS__{provider.upper()}_API_KEY": "k-1"}
        with patch.dict(os.environ, env):
            providers = AppConfig().providers
        assert getattr(providers, f"{provider}_api_key") == "k-1"

    def test_invalid_env_macd_rejected(self) -> None:
        env = {"MARKET_DATA_INDICATORS__MACD_FAST": "30"}
        with patch.dict(os.environ, env), pytest.raises(ValidationError):
            AppConfig()

    def test_dotenv_file(self, tmp_path: object) -> None:
        # conftest chdirs into tmp_path, where .env is looked up
        with open(".env", "w", encoding="utf-8") as f:
            f.write("MARKET_DATA_HTTP__TIMEOUT_SECONDS=5\n")
        assert AppConfig().http.timeout_seconds == 5.0
