"""Structured LLM readings: horoscope, prediction, pattern analysis and chat."""

from __future__ import annotations

import logging
from datetime import date

import httpx
from lunar.tables import FULL_MOON, NEW_MOON
from moonmarket.schemas.lunar import MoonPhaseRecord
from moonmarket.schemas.readings import (
    ChatContext,
    ChatMessage,
    FinancialHoroscope,
    MarketPrediction,
    PatternAnalysis,
)
from moonmarket.schemas.timeline import DayRecord
from moonmarket.services.llm_client import LLMClient, generate_with_validation

from dashboard.insights import fallback_insight
from dashboard.llm_slots import CHAT_SLOT, HOROSCOPE_SLOT, PATTERNS_SLOT, PREDICTION_SLOT
from dashboard.prompts.readings import (
    ANALYST_SYSTEM_PROMPT,
    build_chat_system_prompt,
    build_horoscope_prompt,
    build_patterns_prompt,
    build_prediction_prompt,
)

logger = logging.getLogger(__name__)

MIN_PREDICTION_DAYS = 7
MIN_PATTERN_DAYS = 10

CHAT_FALLBACK = "The cosmic connection wavered... Please try again."

_LLM_ERRORS = (httpx.HTTPError, RuntimeError, ValueError)

_QUARTERS = {"First Quarter", "Last Quarter"}

_ACTION_ADVICE = {
    "low": "Steady hands prosper; follow your plan and let positions breathe.",
    "medium": "Stay nimble and size positions modestly while the sky decides.",
    "high": "Guard your capital; tighten stops and avoid chasing sudden moves.",
}


def _analyst_messages(prompt: str) -> list[dict[str, str]]:
    return [
        {"role": "system", "content": ANALYST_SYSTEM_PROMPT},
        {"role": "user", "content": prompt},
    ]


def fallback_horoscope(record: MoonPhaseRecord) -> FinancialHoroscope:
    """Deterministic horoscope built from the lunar record alone.

    Syzygies read as high risk, quarters as medium, everything else low.
    """
    if record.phase_name in (NEW_MOON, FULL_MOON):
        risk = "high"
    elif record.phase_name in _QUARTERS:
        risk = "medium"
    else:
        risk = "low"
    waxing = record.phase_fraction < 0.5
    return FinancialHoroscope(
        overview=fallback_insight(record.phase_name),
        lucky_hours="9:30 AM - 11:00 AM" if waxing else "2:00 PM - 3:30 PM",
        risk_level=risk,
        lucky_number=int(record.age_days) + 1,
        action_advice=_ACTION_ADVICE[risk],
        cosmic_alignment=(
            f"The {record.phase_name} in {record.zodiac_sign} shines at "
            f"{record.illumination_percent:.0f}% illumination."
        ),
    )


async def generate_financial_horoscope(
    client: LLMClient,
    record: MoonPhaseRecord,
    symbol: str,
    when: date,
) -> FinancialHoroscope:
    """Ask the LLM for a day's horoscope, falling back to ``fallback_horoscope``."""
    messages = _analyst_messages(
        build_horoscope_prompt(record.phase_name, record.zodiac_sign, symbol, when)
    )
    try:
        return await generate_with_validation(
            client, HOROSCOPE_SLOT, messages, FinancialHoroscope.model_validate, max_tokens=400
        )
    except _LLM_ERRORS as e:
        logger.warning("Horoscope generation failed for %s, using fallback: %s", symbol, e)
        return fallback_horoscope(record)


async def generate_prediction(
    client: LLMClient,
    days: list[DayRecord],
    symbol: str,
) -> MarketPrediction | None:
    """Directional call from recent history.

    Returns None when there are fewer than ``MIN_PREDICTION_DAYS`` days or
    the LLM cannot produce a valid reading.
    """
    if len(days) < MIN_PREDICTION_DAYS:
        logger.info("Skipping prediction for %s: %d days of history", symbol, len(days))
        return None
    messages = _analyst_messages(build_prediction_prompt(days, symbol))
    try:
        return await generate_with_validation(
            client, PREDICTION_SLOT, messages, MarketPrediction.model_validate, max_tokens=400
        )
    except _LLM_ERRORS as e:
        logger.warning("Prediction failed for %s: %s", symbol, e)
        return None


async def analyze_patterns(client: LLMClient, days: list[DayRecord]) -> PatternAnalysis | None:
    """Lunar/price patterns in the history window, or None when unavailable."""
    if len(days) < MIN_PATTERN_DAYS:
        logger.info("Skipping pattern analysis: %d days of history", len(days))
        return None
    messages = _analyst_messages(build_patterns_prompt(days))
    try:
        return await generate_with_validation(
            client, PATTERNS_SLOT, messages, PatternAnalysis.model_validate, max_tokens=800
        )
    except _LLM_ERRORS as e:
        logger.warning("Pattern analysis failed: %s", e)
        return None


def chat_context_for(day: DayRecord, symbol: str, change_percent: float) -> ChatContext:
    return ChatContext(
        phase_name=day.phase_name,
        illumination_percent=day.illumination_percent,
        zodiac_sign=day.zodiac_sign,
        symbol=symbol,
        price=day.price,
        change_percent=change_percent,
        day=day.date.date(),
    )


async def chat_with_lunar_assistant(
    client: LLMClient,
    history: list[ChatMessage],
    context: ChatContext,
) -> str:
    """Reply to the latest user turn with the day's context in the system prompt.

    System turns in ``history`` are dropped; the context prompt replaces them.
    """
    messages = [{"role": "system", "content": build_chat_system_prompt(context)}]
    messages.extend(
        {"role": m.role, "content": m.content} for m in history if m.role != "system"
    )
    try:
        text = await client.generate(CHAT_SLOT, messages, max_tokens=300)
    except _LLM_ERRORS as e:
        logger.warning("Lunar assistant chat failed: %s", e)
        return CHAT_FALLBACK

    text = text.strip()
    return text or CHAT_FALLBACK
