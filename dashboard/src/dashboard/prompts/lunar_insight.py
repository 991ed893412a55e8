"""Lunar market insight prompt builder."""

from __future__ import annotations

from datetime import date

SYSTEM_PROMPT = (
    "You are a mystical financial analyst who provides brief, poetic insights "
    "connecting lunar cycles to market behavior. Keep responses under 50 words."
)


def format_long_date(when: date) -> str:
    """``Thursday, January 25, 2024``."""
    return f"{when:%A}, {when:%B} {when.day}, {when.year}"


def build_lunar_insight_prompt(
    phase_name: str,
    illumination_percent: float,
    zodiac_sign: str,
    symbol: str,
    price: float,
    change_percent: float,
    when: date,
) -> str:
    sign = "+" if change_percent >= 0 else ""
    return f"""You are a mystical financial analyst who combines lunar astrology with market analysis. Generate a brief, insightful observation (2-3 sentences max) about the following:

Date: {format_long_date(when)}
Moon Phase: {phase_name} ({illumination_percent:.0f}% illuminated)
Moon in: {zodiac_sign}
Stock: {symbol} at ${price:.2f}
Daily Change: {sign}{change_percent:.2f}%

Provide a mystical yet data-informed insight connecting the lunar phase to market sentiment. Be concise and intriguing. Don't use bullet points."""
