"""Prompt builders for horoscope, prediction, pattern and chat readings."""

from __future__ import annotations

from datetime import date

from moonmarket.schemas.readings import ChatContext
from moonmarket.schemas.timeline import DayRecord

from dashboard.prompts.lunar_insight import format_long_date

ANALYST_SYSTEM_PROMPT = (
    "You are a mystical financial analyst who blends lunar astrology with market data. "
    "Always answer with a single JSON object and nothing else."
)


def format_history(days: list[DayRecord], max_days: int = 30) -> str:
    """One line per day, most recent last."""
    lines = []
    for day in days[-max_days:]:
        flags = []
        if day.is_supermoon:
            flags.append("supermoon")
        if day.is_micromoon:
            flags.append("micromoon")
        flags.extend(day.special_names)
        suffix = f" [{', '.join(flags)}]" if flags else ""
        lines.append(
            f"{day.date:%Y-%m-%d} | {day.phase_name} {day.illumination_percent:.0f}% | "
            f"Moon in {day.zodiac_sign} | ${day.price:.2f}{suffix}"
        )
    return "\n".join(lines)


def build_horoscope_prompt(phase_name: str, zodiac_sign: str, symbol: str, when: date) -> str:
    return f"""Write today's financial horoscope for {symbol}.

Date: {format_long_date(when)}
Moon Phase: {phase_name}
Moon in: {zodiac_sign}

Return a JSON object with exactly these keys:
- "overview": 2 sentences on the day's market energy
- "lucky_hours": a trading window such as "10:00 AM - 11:30 AM"
- "risk_level": one of "low", "medium", "high"
- "lucky_number": an integer from 1 to 99
- "action_advice": one sentence of advice
- "cosmic_alignment": one sentence on the Moon's position

No preamble, no markdown fencing."""


def build_prediction_prompt(days: list[DayRecord], symbol: str) -> str:
    return f"""Recent daily closes for {symbol} with the Moon's state:

{format_history(days)}

Predict the direction for the next few sessions.
Return a JSON object with exactly these keys:
- "direction": one of "bullish", "bearish", "neutral"
- "prediction": 1-2 sentences
- "confidence": an integer from 0 to 100
- "reasoning": one sentence tying the call to the lunar cycle

No preamble, no markdown fencing."""


def build_patterns_prompt(days: list[DayRecord]) -> str:
    return f"""Daily closes with the Moon's state:

{format_history(days, max_days=60)}

Find 2-4 recurring relationships between lunar phases, zodiac signs or distance and price.
Return a JSON object with exactly these keys:
- "patterns": a list of objects with "name", "description",
  "correlation" (one of "positive", "negative", "neutral") and "confidence" (integer 0-100)
- "summary": 1-2 sentences

No preamble, no markdown fencing."""


def build_chat_system_prompt(context: ChatContext) -> str:
    sign = "+" if context.change_percent >= 0 else ""
    return f"""You are Luna, a celestial guide who talks about lunar cycles, market patterns and the mystical connection between the moon and markets. Answer in 2-4 sentences, warm and a little mystical, and never give guaranteed financial advice.

Current context:
Date: {format_long_date(context.day)}
Moon Phase: {context.phase_name} ({context.illumination_percent:.0f}% illuminated)
Moon in: {context.zodiac_sign}
Stock: {context.symbol} at ${context.price:.2f} ({sign}{context.change_percent:.2f}% today)"""
