"""Dashboard entry point for running as a module: python -m dashboard."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from datetime import UTC, date, datetime
from typing import Any

import httpx
from lunar.calculator import compute_moon_phase
from moonmarket.config import Settings, get_settings
from moonmarket.schemas.readings import ChatMessage

from dashboard.insights import generate_lunar_insight
from dashboard.llm_slots import build_llm_client
from dashboard.market_data import AlphaVantageClient
from dashboard.readings import (
    analyze_patterns,
    chat_context_for,
    chat_with_lunar_assistant,
    generate_financial_horoscope,
    generate_prediction,
)
from dashboard.timeline import generate_sample_timeline, merge_market_data, summarize_by_phase

logger = logging.getLogger("dashboard")


def _parse_day(value: str) -> date:
    try:
        return date.fromisoformat(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"Invalid date '{value}'. Expected YYYY-MM-DD.") from exc


def _parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Print a lunar/market timeline as JSON.")
    parser.add_argument("--symbol", default=None, help="Ticker symbol (default: DEFAULT_SYMBOL).")
    parser.add_argument(
        "--date",
        type=_parse_day,
        default=None,
        help="Last day of the sample timeline, YYYY-MM-DD (default: today).",
    )
    parser.add_argument(
        "--sample",
        action="store_true",
        help="Skip the market data provider and use a synthetic timeline.",
    )
    parser.add_argument(
        "--insight",
        action="store_true",
        help="Ask the LLM for an insight on the last day.",
    )
    parser.add_argument(
        "--horoscope",
        action="store_true",
        help="Ask the LLM for a financial horoscope on the last day.",
    )
    parser.add_argument(
        "--prediction",
        action="store_true",
        help="Ask the LLM for a directional prediction from the timeline.",
    )
    parser.add_argument(
        "--patterns",
        action="store_true",
        help="Ask the LLM for lunar/price patterns in the timeline.",
    )
    parser.add_argument("--ask", default=None, help="Ask the lunar assistant a question.")
    return parser


async def build_report(
    symbol: str,
    *,
    settings: Settings,
    today: date | None = None,
    use_sample: bool = False,
    with_insight: bool = False,
    with_horoscope: bool = False,
    with_prediction: bool = False,
    with_patterns: bool = False,
    question: str | None = None,
    market_transport: httpx.AsyncBaseTransport | None = None,
    llm_transport: httpx.AsyncBaseTransport | None = None,
) -> dict[str, Any]:
    """Assemble the timeline, phase summary and any requested LLM readings."""
    days = []
    source = "sample"
    if not use_sample:
        client = AlphaVantageClient.from_settings(settings, transport=market_transport)
        days = merge_market_data(await client.fetch_daily_series(symbol))
        if days:
            source = "alpha_vantage"
        else:
            logger.warning("No market data for %s, falling back to sample timeline", symbol)

    if not days:
        anchor = None
        if today is not None:
            anchor = datetime(today.year, today.month, today.day, 12, 0, tzinfo=UTC)
        days = generate_sample_timeline(today=anchor, days=settings.market_history_days)

    report: dict[str, Any] = {
        "symbol": symbol,
        "source": source,
        "days": [d.model_dump(mode="json") for d in days],
        "summary": [s.model_dump(mode="json") for s in summarize_by_phase(days)],
    }

    if not (with_insight or with_horoscope or with_prediction or with_patterns or question):
        return report

    last = days[-1]
    previous = days[-2] if len(days) > 1 else last
    change = (last.price - previous.price) / previous.price * 100 if previous.price else 0.0
    record = compute_moon_phase(last.date)
    llm = build_llm_client(settings, transport=llm_transport)
    try:
        if with_insight:
            report["insight"] = await generate_lunar_insight(
                llm, record, symbol, last.price, change, last.date.date()
            )
        if with_horoscope:
            horoscope = await generate_financial_horoscope(llm, record, symbol, last.date.date())
            report["horoscope"] = horoscope.model_dump(mode="json")
        if with_prediction:
            prediction = await generate_prediction(llm, days, symbol)
            report["prediction"] = prediction.model_dump(mode="json") if prediction else None
        if with_patterns:
            analysis = await analyze_patterns(llm, days)
            report["patterns"] = analysis.model_dump(mode="json") if analysis else None
        if question:
            report["answer"] = await chat_with_lunar_assistant(
                llm,
                [ChatMessage(role="user", content=question)],
                chat_context_for(last, symbol, change),
            )
    finally:
        await llm.close()

    return report


def main() -> None:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)-8s %(name)s: %(message)s",
        stream=sys.stderr,
    )
    args = _parser().parse_args()
    settings = get_settings()
    symbol = (args.symbol or settings.default_symbol).upper()
    logger.info("Building lunar timeline for %s", symbol)
    report = asyncio.run(
        build_report(
            symbol,
            settings=settings,
            today=args.date,
            use_sample=bool(args.sample),
            with_insight=bool(args.insight),
            with_horoscope=bool(args.horoscope),
            with_prediction=bool(args.prediction),
            with_patterns=bool(args.patterns),
            question=args.ask,
        )
    )
    print(json.dumps(report, indent=2))


if __name__ == "__main__":
    main()
