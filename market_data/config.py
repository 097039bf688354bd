"""Pydantic Settings configuration models.

Config hierarchy (lowest to highest priority):
1. Pydantic defaults (in code below)
2. .env file (loaded by Pydantic Settings)
3. Environment variables (e.g., MARKET_DATA_INDICATORS__RSI_PERIOD=21)
4. Explicit CLI flags, which override the indicator defaults per run
"""

from __future__ import annotations

from pydantic import BaseModel, Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

VALID_LOG_LEVELS = frozenset({"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"})
VALID_LOG_FORMATS = frozenset({"console", "json"})


class HttpConfig(BaseModel):
    """HTTP transport settings for publisher downloads."""

    timeout_seconds: float = Field(default=30.0, gt=0, le=120)
    user_agent: str = "market-data/0.4"


class ProviderConfig(BaseModel):
    """API keys passed through to publisher endpoints as-is."""

    twelvedata_api_key: str = ""
    polygon_api_key: str = ""
    alphavantage_api_key: str = ""
    finnhub_api_key: str = ""
    massive_api_key: str = ""


class IndicatorDefaults(BaseModel):
    """Indicator parameters used when a run requests none explicitly."""

    sma_period: int = Field(default=10, ge=1, le=500)
    ema_period: int = Field(default=20, ge=1, le=500)
    rsi_period: int = Field(default=14, ge=1, le=500)
    stochastic_period: int = Field(default=14, ge=1, le=500)
    macd_fast: int = Field(default=12, ge=1, le=500)
    macd_slow: int = Field(default=26, ge=2, le=500)
    macd_signal: int = Field(default=9, ge=1, le=500)
    bollinger_period: int = Field(default=20, ge=1, le=500)
    bollinger_std_dev: float = Field(default=2.0, ge=0.0, le=10.0)

    @model_validator(mode="after")
    def validate_macd_ordering(self) -> IndicatorDefaults:
        if self.macd_fast >= self.macd_slow:
            raise ValueError(
                f"macd_fast ({self.macd_fast}) must be below "
                f"macd_slow ({self.macd_slow})"
            )
        if self.macd_signal >= self.macd_slow:
            raise ValueError(
                f"macd_signal ({self.macd_signal}) must be below "
                f"macd_slow ({self.macd_slow})"
            )
        return self


class AppConfig(BaseSettings):
    """Top-level configuration.

    Env var examples:
        MARKET_DATA_LOG_LEVEL=DEBUG
        MARKET_DATA_LOG_FORMAT=json
        MARKET_DATA_PROVIDERS__TWELVEDATA_API_KEY=your-key
        MARKET_DATA_HTTP__TIMEOUT_SECONDS=10
    """

    model_config = SettingsConfigDict(
        env_prefix="MARKET_DATA_",
        env_nested_delimiter="__",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    log_level: str = "WARNING"
    log_format: str = "console"
    http: HttpConfig = HttpConfig()
    providers: ProviderConfig = ProviderConfig()
    indicators: IndicatorDefaults = IndicatorDefaults()

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        v = v.upper()
        if v not in VALID_LOG_LEVELS:
            raise ValueError(
                f"log_level must be one of {sorted(VALID_LOG_LEVELS)}, got {v}"
            )
        return v

    @field_validator("log_format")
    @classmethod
    def validate_log_format(cls, v: str) -> str:
        v = v.lower()
        if v not in VALID_LOG_FORMATS:
            raise ValueError(
                f"log_format must be one of {sorted(VALID_LOG_FORMATS)}, got {v}"
            )
        return v
