"""Dashboard test fixtures."""

import pytest


@pytest.fixture
def daily_series_payload():
    """Trimmed TIME_SERIES_DAILY response, newest first as the API returns it."""
    return {
        "Meta Data": {"2. Symbol": "SPY"},
        "Time Series (Daily)": {
            "2024-01-26": {
                "1. open": "487.59",
                "2. high": "489.12",
                "3. low": "486.54",
                "4. close": "487.41",
                "5. volume": "76641609",
            },
            "2024-01-25": {
                "1. open": "487.58",
                "2. high": "488.31",
                "3. low": "485.39",
                "4. close": "488.03",
                "5. volume": "72524989",
            },
            "2024-01-24": {
                "1. open": "487.81",
                "2. high": "488.77",
                "3. low": "484.88",
                "4. close": "485.39",
                "5. volume": "81765039",
            },
        },
    }


@pytest.fixture
def global_quote_payload():
    return {
        "Global Quote": {
            "01. symbol": "SPY",
            "02. open": "487.59",
            "03. high": "489.12",
            "04. low": "486.54",
            "05. price": "487.41",
            "06. volume": "76641609",
            "07. latest trading day": "2024-01-26",
            "08. previous close": "488.03",
            "09. change": "-0.6200",
            "10. change percent": "-0.1270%",
        }
    }
