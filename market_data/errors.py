"""Market data error hierarchy.

All library exceptions inherit from MarketError, so callers can catch
one type at the API boundary. Indicator misuse and parameter problems
live under IndicatorError; download and parsing problems sit directly
under MarketError.
"""

from __future__ import annotations


class MarketError(Exception):
    """Base exception for all market-data errors."""


class IndicatorError(MarketError):
    """Enhancement builder misused (calculate twice, with_* after calculate)."""


class InvalidParametersError(IndicatorError):
    """Indicator parameters cannot produce a meaningful series.

    Stores the label of the offending request and the reason, so a
    caller can tell "no data" apart from a zero value.
    """

    def __init__(self, label: str, reason: str) -> None:
        self.label = label
        self.reason = reason
        super().__init__(f"Invalid parameters for {label}: {reason}")


class HttpError(MarketError):
    """Non-success HTTP status or transport failure while downloading.

    status_code is None when no response was received.
    """

    def __init__(self, status_code: int | None, message: str) -> None:
        self.status_code = status_code
        self.message = message
        if status_code is None:
            super().__init__(f"Http error: {message}")
        else:
            super().__init__(f"Http error {status_code}: {message}")


class DownloadedDataError(MarketError):
    """Provider reported an error or returned nothing usable."""


class ParsingError(MarketError):
    """A provider field could not be converted to the expected type."""


class UnsupportedIntervalError(MarketError):
    """Interval is not offered by the selected publisher."""
