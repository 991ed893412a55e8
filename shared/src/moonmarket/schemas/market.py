"""Pydantic schemas for market data."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel


class StockDataPoint(BaseModel):
    """One daily OHLCV bar, stamped at noon UTC of the trading day."""

    date: datetime
    open: float
    high: float
    low: float
    close: float
    volume: int

    model_config = {"frozen": True}


class StockQuote(BaseModel):
    """Latest quote for a symbol."""

    symbol: str
    price: float
    change: float
    change_percent: float
    high: float
    low: float
    volume: int
    latest_trading_day: str

    model_config = {"frozen": True}
