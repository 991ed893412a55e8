"""Alpha Vantage market data adapter."""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import Any

import httpx
from moonmarket.config import Settings
from moonmarket.schemas.market import StockDataPoint, StockQuote

logger = logging.getLogger(__name__)

DAILY_SERIES_KEY = "Time Series (Daily)"
GLOBAL_QUOTE_KEY = "Global Quote"

# Symbols offered in the dashboard picker
STOCK_SYMBOLS: list[dict[str, str]] = [
    {"symbol": "SPY", "name": "S&P 500 ETF"},
    {"symbol": "QQQ", "name": "Nasdaq 100 ETF"},
    {"symbol": "DIA", "name": "Dow Jones ETF"},
    {"symbol": "AAPL", "name": "Apple"},
    {"symbol": "MSFT", "name": "Microsoft"},
    {"symbol": "GOOGL", "name": "Google"},
    {"symbol": "AMZN", "name": "Amazon"},
    {"symbol": "TSLA", "name": "Tesla"},
]


class MarketDataError(RuntimeError):
    """The market data provider reported an error for the request."""


def _check_provider_messages(payload: dict[str, Any]) -> bool:
    """Raise on provider errors; return False when the request was throttled."""
    if payload.get("Error Message"):
        raise MarketDataError(str(payload["Error Message"]))
    note = payload.get("Note") or payload.get("Information")
    if note:
        logger.warning("Alpha Vantage API rate limit: %s", note)
        return False
    return True


def _trading_day(date_str: str) -> datetime:
    """Parse ``YYYY-MM-DD`` to noon UTC so the calendar day survives any offset."""
    year, month, day = (int(part) for part in date_str.split("-"))
    return datetime(year, month, day, 12, 0, 0, tzinfo=UTC)


def parse_daily_series(payload: dict[str, Any], limit: int = 60) -> list[StockDataPoint]:
    """Convert a TIME_SERIES_DAILY payload to bars, oldest first.

    Only the most recent ``limit`` bars are returned.
    """
    if not _check_provider_messages(payload):
        return []

    series = payload.get(DAILY_SERIES_KEY)
    if not series:
        return []

    points = [
        StockDataPoint(
            date=_trading_day(date_str),
            open=float(values["1. open"]),
            high=float(values["2. high"]),
            low=float(values["3. low"]),
            close=float(values["4. close"]),
            volume=int(values["5. volume"]),
        )
        for date_str, values in series.items()
    ]
    points.sort(key=lambda p: p.date)
    if limit <= 0:
        return []
    return points[-limit:]


def parse_global_quote(payload: dict[str, Any]) -> StockQuote | None:
    """Convert a GLOBAL_QUOTE payload to a quote, or None when it is empty."""
    if not _check_provider_messages(payload):
        return None

    quote = payload.get(GLOBAL_QUOTE_KEY)
    if not quote:
        return None

    return StockQuote(
        symbol=quote["01. symbol"],
        price=float(quote["05. price"]),
        change=float(quote["09. change"]),
        change_percent=float(str(quote["10. change percent"]).replace("%", "")),
        high=float(quote["03. high"]),
        low=float(quote["04. low"]),
        volume=int(quote["06. volume"]),
        latest_trading_day=quote["07. latest trading day"],
    )


class AlphaVantageClient:
    """Thin async client for the Alpha Vantage query endpoint."""

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://www.alphavantage.co/query",
        timeout: float = 15.0,
        history_days: int = 60,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.api_key = api_key
        self.base_url = base_url
        self.timeout = timeout
        self.history_days = history_days
        self._transport = transport

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> AlphaVantageClient:
        return cls(
            api_key=settings.alpha_vantage_api_key,
            base_url=settings.alpha_vantage_base_url,
            timeout=settings.http_timeout_seconds,
            history_days=settings.market_history_days,
            transport=transport,
        )

    async def _query(self, function: str, symbol: str) -> dict[str, Any]:
        params = {"function": function, "symbol": symbol, "apikey": self.api_key}
        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            response = await client.get(self.base_url, params=params)
            response.raise_for_status()
            data = response.json()
        if not isinstance(data, dict):
            raise MarketDataError(f"Unexpected {function} payload for {symbol}")
        return data

    async def fetch_daily_series(self, symbol: str = "SPY") -> list[StockDataPoint]:
        """Fetch recent daily bars; an empty list when the provider is unavailable."""
        try:
            payload = await self._query("TIME_SERIES_DAILY", symbol)
            return parse_daily_series(payload, limit=self.history_days)
        except (httpx.HTTPError, ValueError, KeyError, MarketDataError) as e:
            logger.warning("Daily series fetch failed for %s: %s", symbol, e)
            return []

    async def fetch_quote(self, symbol: str = "SPY") -> StockQuote | None:
        """Fetch the latest quote; None when the provider is unavailable."""
        try:
            payload = await self._query("GLOBAL_QUOTE", symbol)
            return parse_global_quote(payload)
        except (httpx.HTTPError, ValueError, KeyError, MarketDataError) as e:
            logger.warning("Quote fetch failed for %s: %s", symbol, e)
            return None
