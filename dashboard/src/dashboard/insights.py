"""Lunar market insight generation with deterministic fallbacks."""

from __future__ import annotations

import logging
from datetime import date

import httpx
from lunar.tables import FULL_MOON
from moonmarket.schemas.lunar import MoonPhaseRecord
from moonmarket.services.llm_client import LLMClient

from dashboard.llm_slots import INSIGHT_SLOT
from dashboard.prompts.lunar_insight import SYSTEM_PROMPT, build_lunar_insight_prompt

logger = logging.getLogger(__name__)

FALLBACK_INSIGHTS: dict[str, str] = {
    "New Moon": (
        "The New Moon brings a veil of uncertainty. Markets often pause for reflection "
        "during this dark phase, as traders await new signals."
    ),
    "Waxing Crescent": (
        "As light returns to the lunar surface, optimism builds. Early movers position "
        "themselves for the growth cycle ahead."
    ),
    "First Quarter": (
        "The First Quarter marks a decision point. Half-lit skies mirror the market's "
        "indecision between bulls and bears."
    ),
    "Waxing Gibbous": (
        "Momentum builds as the moon approaches fullness. Markets often ride waves of "
        "increasing confidence during this phase."
    ),
    "Full Moon": (
        "Under the Full Moon's glow, emotions run high. Expect heightened volatility as "
        "lunar energy peaks in the markets."
    ),
    "Waning Gibbous": (
        "Post-peak reflection begins. Wise traders take profits as the moon's light "
        "slowly diminishes."
    ),
    "Last Quarter": (
        "The Last Quarter signals transition. Markets reassess positions as the lunar "
        "cycle winds down."
    ),
    "Waning Crescent": (
        "In the moon's final whisper, patience is rewarded. The wise prepare for the "
        "next cycle's opportunities."
    ),
}


def fallback_insight(phase_name: str) -> str:
    """Canned insight for a phase; unknown phases get the Full Moon text."""
    return FALLBACK_INSIGHTS.get(phase_name, FALLBACK_INSIGHTS[FULL_MOON])


def build_insight_messages(
    record: MoonPhaseRecord,
    symbol: str,
    price: float,
    change_percent: float,
    when: date,
) -> list[dict[str, str]]:
    """Chat messages asking for a short insight on one day."""
    prompt = build_lunar_insight_prompt(
        phase_name=record.phase_name,
        illumination_percent=record.illumination_percent,
        zodiac_sign=record.zodiac_sign,
        symbol=symbol,
        price=price,
        change_percent=change_percent,
        when=when,
    )
    return [
        {"role": "system", "content": SYSTEM_PROMPT},
        {"role": "user", "content": prompt},
    ]


async def generate_lunar_insight(
    client: LLMClient,
    record: MoonPhaseRecord,
    symbol: str,
    price: float,
    change_percent: float,
    when: date,
) -> str:
    """Ask the LLM for a lunar market insight, falling back to canned text.

    Args:
        client: LLM client with the ``insight`` slot configured
        record: Lunar record for the day
        symbol: Ticker symbol
        price: Closing price
        change_percent: Day-over-day change in percent
        when: The day being described

    Returns:
        The model's text, or the phase fallback if the call fails or is empty.
    """
    messages = build_insight_messages(record, symbol, price, change_percent, when)
    try:
        text = await client.generate(INSIGHT_SLOT, messages, max_tokens=100, temperature=0.7)
    except (httpx.HTTPError, RuntimeError, ValueError, KeyError) as e:
        logger.warning("Insight generation failed, using fallback: %s", e)
        return fallback_insight(record.phase_name)

    text = text.strip()
    if not text:
        logger.warning("Insight generation returned empty content, using fallback")
        return fallback_insight(record.phase_name)
    return text
