"""Pydantic schemas for structured LLM readings."""

from __future__ import annotations

from datetime import date
from typing import Literal

from pydantic import BaseModel, Field


class FinancialHoroscope(BaseModel):
    """Daily market horoscope for a symbol under the current Moon."""

    overview: str = Field(min_length=1)
    lucky_hours: str = Field(min_length=1)
    risk_level: Literal["low", "medium", "high"]
    lucky_number: int
    action_advice: str = Field(min_length=1)
    cosmic_alignment: str = Field(min_length=1)


class MarketPrediction(BaseModel):
    """Short-term directional call drawn from recent lunar/price history."""

    direction: Literal["bullish", "bearish", "neutral"]
    prediction: str = Field(min_length=1)
    confidence: int = Field(ge=0, le=100)
    reasoning: str = Field(min_length=1)


class LunarPattern(BaseModel):
    """One recurring relationship between a lunar feature and price."""

    name: str = Field(min_length=1)
    description: str = Field(min_length=1)
    correlation: Literal["positive", "negative", "neutral"]
    confidence: int = Field(ge=0, le=100)


class PatternAnalysis(BaseModel):
    """Patterns found in a history window plus an overall summary."""

    patterns: list[LunarPattern] = Field(min_length=1)
    summary: str = Field(min_length=1)


class ChatMessage(BaseModel):
    """One turn of the lunar assistant conversation."""

    role: Literal["user", "assistant", "system"]
    content: str


class ChatContext(BaseModel):
    """What the assistant knows about the day the user is looking at."""

    phase_name: str
    illumination_percent: float
    zodiac_sign: str
    symbol: str
    price: float
    change_percent: float
    day: date
