"""Tests for horoscope, prediction, pattern and chat readings."""

from __future__ import annotations

import json
import random
from datetime import UTC, date, datetime, timedelta
from unittest.mock import AsyncMock

import httpx
import pytest
from dashboard.insights import FALLBACK_INSIGHTS
from dashboard.llm_slots import (
    CHAT_SLOT,
    HOROSCOPE_SLOT,
    PATTERNS_SLOT,
    PREDICTION_SLOT,
    build_llm_client,
)
from dashboard.prompts.readings import build_chat_system_prompt, format_history
from dashboard.readings import (
    CHAT_FALLBACK,
    MIN_PATTERN_DAYS,
    MIN_PREDICTION_DAYS,
    analyze_patterns,
    chat_context_for,
    chat_with_lunar_assistant,
    fallback_horoscope,
    generate_financial_horoscope,
    generate_prediction,
)
from dashboard.timeline import generate_sample_timeline
from lunar.calculator import compute_moon_phase
from lunar.tables import NEW_MOON_EPOCH
from moonmarket.config import Settings
from moonmarket.schemas.readings import ChatMessage, FinancialHoroscope

NEW_MOON_RECORD = compute_moon_phase(NEW_MOON_EPOCH)
FIRST_QUARTER_RECORD = compute_moon_phase(NEW_MOON_EPOCH + timedelta(days=7.4))
WANING_RECORD = compute_moon_phase(NEW_MOON_EPOCH + timedelta(days=19))

HOROSCOPE = {
    "overview": "Silver currents favor patient buyers.",
    "lucky_hours": "10:00 AM - 11:30 AM",
    "risk_level": "medium",
    "lucky_number": 7,
    "action_advice": "Scale in slowly.",
    "cosmic_alignment": "The Moon in Taurus steadies the tape.",
}

PREDICTION = {
    "direction": "bullish",
    "prediction": "Momentum should carry into the waxing phase.",
    "confidence": 62,
    "reasoning": "Prices rose through the last two first quarters.",
}

PATTERNS = {
    "patterns": [
        {
            "name": "Full moon fade",
            "description": "Closes dip in the two sessions after a full moon.",
            "correlation": "negative",
            "confidence": 55,
        }
    ],
    "summary": "Waning phases have been softer than waxing ones.",
}


def _days(count: int):
    today = datetime(2024, 3, 1, 12, 0, tzinfo=UTC)
    return generate_sample_timeline(today=today, days=count, rng=random.Random(7))


def _settings() -> Settings:
    return Settings(
        LLM_API_ENDPOINT="https://llm.example.test/v1",
        LLM_API_KEY="sk-test",
        LLM_MODEL="mistral-small-latest",
    )


def _reply(content: str) -> httpx.Response:
    return httpx.Response(200, json={"choices": [{"message": {"content": content}}]})


def test_fallback_horoscope_risk_follows_phase():
    assert fallback_horoscope(NEW_MOON_RECORD).risk_level == "high"
    assert fallback_horoscope(FIRST_QUARTER_RECORD).risk_level == "medium"
    assert fallback_horoscope(WANING_RECORD).risk_level == "low"


def test_fallback_horoscope_for_new_moon():
    horoscope = fallback_horoscope(NEW_MOON_RECORD)
    assert horoscope.overview == FALLBACK_INSIGHTS["New Moon"]
    assert horoscope.lucky_hours == "9:30 AM - 11:00 AM"
    assert horoscope.lucky_number == 1
    assert NEW_MOON_RECORD.zodiac_sign in horoscope.cosmic_alignment


def test_format_history_marks_special_days():
    plain = {"is_supermoon": False, "is_micromoon": False, "special_names": []}
    days = [d.model_copy(update=plain) for d in _days(5)]
    days[-1] = days[-1].model_copy(update={"is_supermoon": True, "special_names": ["Worm Moon"]})
    lines = format_history(days).splitlines()

    assert len(lines) == 5
    assert lines[-1].startswith("2024-03-01 | ")
    assert lines[-1].endswith("[supermoon, Worm Moon]")
    assert "[" not in lines[0]


def test_format_history_keeps_most_recent_days():
    lines = format_history(_days(40), max_days=30).splitlines()
    assert len(lines) == 30
    assert lines[-1].startswith("2024-03-01")


@pytest.mark.asyncio
async def test_generate_financial_horoscope_parses_reply():
    seen: list[dict] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(json.loads(request.content))
        return _reply("```json\n" + json.dumps(HOROSCOPE) + "\n```")

    client = build_llm_client(_settings(), transport=httpx.MockTransport(handler))
    try:
        horoscope = await generate_financial_horoscope(
            client, NEW_MOON_RECORD, "SPY", date(2024, 1, 11)
        )
    finally:
        await client.close()

    assert horoscope == FinancialHoroscope(**HOROSCOPE)
    prompt = seen[0]["messages"][1]["content"]
    assert "financial horoscope for SPY" in prompt
    assert "Date: Thursday, January 11, 2024" in prompt
    assert '"lucky_hours"' in prompt


@pytest.mark.asyncio
async def test_generate_financial_horoscope_falls_back_on_invalid_json():
    client = AsyncMock()
    client.generate.return_value = "The stars are silent."
    horoscope = await generate_financial_horoscope(
        client, NEW_MOON_RECORD, "SPY", date(2024, 1, 11)
    )

    assert horoscope == fallback_horoscope(NEW_MOON_RECORD)
    assert client.generate.await_count == 2
    assert client.generate.await_args_list[0].args[0] == HOROSCOPE_SLOT


@pytest.mark.asyncio
async def test_generate_financial_horoscope_falls_back_on_http_error():
    transport = httpx.MockTransport(lambda request: httpx.Response(500, text="down"))
    client = build_llm_client(_settings(), transport=transport)
    try:
        horoscope = await generate_financial_horoscope(
            client, WANING_RECORD, "QQQ", date(2024, 1, 30)
        )
    finally:
        await client.close()
    assert horoscope == fallback_horoscope(WANING_RECORD)


@pytest.mark.asyncio
async def test_generate_prediction_parses_reply():
    client = AsyncMock()
    client.generate.return_value = json.dumps(PREDICTION)
    prediction = await generate_prediction(client, _days(MIN_PREDICTION_DAYS), "SPY")

    assert prediction is not None
    assert prediction.direction == "bullish"
    assert prediction.confidence == 62
    slot, messages = client.generate.await_args.args[:2]
    assert slot == PREDICTION_SLOT
    assert "Recent daily closes for SPY" in messages[1]["content"]


@pytest.mark.asyncio
async def test_generate_prediction_needs_a_week_of_history():
    client = AsyncMock()
    assert await generate_prediction(client, _days(MIN_PREDICTION_DAYS - 1), "SPY") is None
    client.generate.assert_not_awaited()


@pytest.mark.asyncio
async def test_generate_prediction_rejects_out_of_range_confidence():
    client = AsyncMock()
    client.generate.return_value = json.dumps({**PREDICTION, "confidence": 140})
    assert await generate_prediction(client, _days(10), "SPY") is None
    assert client.generate.await_count == 2


@pytest.mark.asyncio
async def test_analyze_patterns_parses_reply():
    client = AsyncMock()
    client.generate.return_value = json.dumps(PATTERNS)
    analysis = await analyze_patterns(client, _days(MIN_PATTERN_DAYS))

    assert analysis is not None
    assert analysis.patterns[0].name == "Full moon fade"
    assert analysis.patterns[0].correlation == "negative"
    assert client.generate.await_args.args[0] == PATTERNS_SLOT


@pytest.mark.asyncio
async def test_analyze_patterns_needs_ten_days():
    client = AsyncMock()
    assert await analyze_patterns(client, _days(MIN_PATTERN_DAYS - 1)) is None
    client.generate.assert_not_awaited()


@pytest.mark.asyncio
async def test_analyze_patterns_rejects_empty_pattern_list():
    client = AsyncMock()
    client.generate.return_value = json.dumps({"patterns": [], "summary": "Nothing."})
    assert await analyze_patterns(client, _days(20)) is None


@pytest.mark.asyncio
async def test_analyze_patterns_returns_none_on_transport_failure():
    client = AsyncMock()
    client.generate.side_effect = httpx.ConnectError("boom")
    assert await analyze_patterns(client, _days(20)) is None


def test_chat_context_for_day():
    day = _days(1)[0]
    context = chat_context_for(day, "SPY", -0.42)
    assert context.day == date(2024, 3, 1)
    assert context.phase_name == day.phase_name
    assert context.price == day.price

    prompt = build_chat_system_prompt(context)
    assert "You are Luna" in prompt
    assert f"Stock: SPY at ${day.price:.2f} (-0.42% today)" in prompt


@pytest.mark.asyncio
async def test_chat_sends_context_and_history():
    seen: list[dict] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(json.loads(request.content))
        return _reply("  The waxing light favors patience.  ")

    context = chat_context_for(_days(1)[0], "SPY", 0.5)
    history = [
        ChatMessage(role="system", content="ignored"),
        ChatMessage(role="user", content="Hello Luna"),
        ChatMessage(role="assistant", content="Greetings, cosmic traveler!"),
        ChatMessage(role="user", content="Should I buy?"),
    ]
    client = build_llm_client(_settings(), transport=httpx.MockTransport(handler))
    try:
        answer = await chat_with_lunar_assistant(client, history, context)
    finally:
        await client.close()

    assert answer == "The waxing light favors patience."
    messages = seen[0]["messages"]
    assert [m["role"] for m in messages] == ["system", "user", "assistant", "user"]
    assert "Moon Phase:" in messages[0]["content"]
    assert messages[-1]["content"] == "Should I buy?"
    assert seen[0]["max_tokens"] == 300


@pytest.mark.asyncio
async def test_chat_falls_back_on_failure():
    client = AsyncMock()
    client.generate.side_effect = RuntimeError("LLM API request failed (503)")
    context = chat_context_for(_days(1)[0], "SPY", 0.0)
    answer = await chat_with_lunar_assistant(
        client, [ChatMessage(role="user", content="Hi")], context
    )
    assert answer == CHAT_FALLBACK
    assert client.generate.await_args.args[0] == CHAT_SLOT


@pytest.mark.asyncio
async def test_chat_falls_back_on_empty_reply():
    client = AsyncMock()
    client.generate.return_value = ""
    context = chat_context_for(_days(1)[0], "SPY", 0.0)
    answer = await chat_with_lunar_assistant(
        client, [ChatMessage(role="user", content="Hi")], context
    )
    assert answer == CHAT_FALLBACK
