"""Join market data with lunar phase records by date."""

from __future__ import annotations

import logging
import math
import random
from collections import defaultdict
from collections.abc import Iterable
from datetime import UTC, datetime, timedelta

from lunar.calculator import compute_moon_phase, is_micromoon, is_supermoon
from lunar.tables import PHASE_ORDER
from moonmarket.schemas.market import StockDataPoint
from moonmarket.schemas.timeline import DayRecord, PhaseSummary

logger = logging.getLogger(__name__)


def build_day_record(
    when: datetime,
    price: float,
    high: float | None = None,
    low: float | None = None,
    volume: int | None = None,
) -> DayRecord:
    """Attach the lunar record for ``when`` to a price observation."""
    moon = compute_moon_phase(when)
    return DayRecord(
        date=when,
        price=price,
        high=high,
        low=low,
        volume=volume,
        phase_fraction=moon.phase_fraction,
        illumination_percent=moon.illumination_percent,
        phase_name=moon.phase_name,
        zodiac_sign=moon.zodiac_sign,
        distance_km=moon.distance_km,
        age_days=moon.age_days,
        special_names=[moon.special_name] if moon.special_name else [],
        is_supermoon=is_supermoon(moon),
        is_micromoon=is_micromoon(moon),
    )


def merge_market_data(points: Iterable[StockDataPoint]) -> list[DayRecord]:
    """One day record per bar, in input order, priced at the close."""
    return [
        build_day_record(p.date, p.close, high=p.high, low=p.low, volume=p.volume)
        for p in points
    ]


def generate_sample_timeline(
    today: datetime | None = None,
    days: int = 60,
    base_price: float = 450.0,
    rng: random.Random | None = None,
) -> list[DayRecord]:
    """Synthetic price history ending at ``today`` (normalized to noon UTC).

    Prices follow the synodic cycle with uniform noise and a slight upward
    drift. Used when the market data provider returns nothing.
    """
    if days < 1:
        raise ValueError(f"days must be at least 1, got {days}")

    rng = rng or random.Random()
    anchor = (today or datetime.now(UTC)).replace(hour=12, minute=0, second=0, microsecond=0)
    if anchor.tzinfo is None:
        anchor = anchor.replace(tzinfo=UTC)

    records: list[DayRecord] = []
    for i in range(-(days - 1), 1):
        when = anchor + timedelta(days=i)
        moon = compute_moon_phase(when)
        price = (
            base_price
            + math.sin(moon.phase_fraction * math.pi * 2) * 5
            + (rng.random() - 0.5) * 10
            + i * 0.2
        )
        records.append(build_day_record(when, round(price, 2)))

    logger.debug("Generated %d sample days ending %s", len(records), anchor.date())
    return records


def summarize_by_phase(days: list[DayRecord]) -> list[PhaseSummary]:
    """Average price and day-over-day change grouped by phase name.

    The change for a day is measured against the previous record in the
    list, so the first record contributes a price but no change.
    """
    prices: dict[str, list[float]] = defaultdict(list)
    changes: dict[str, list[float]] = defaultdict(list)

    previous: DayRecord | None = None
    for day in days:
        prices[day.phase_name].append(day.price)
        if previous is not None and previous.price:
            changes[day.phase_name].append((day.price - previous.price) / previous.price * 100)
        previous = day

    summaries = []
    for name in PHASE_ORDER:
        if name not in prices:
            continue
        phase_changes = changes.get(name)
        summaries.append(
            PhaseSummary(
                phase_name=name,
                days=len(prices[name]),
                average_price=sum(prices[name]) / len(prices[name]),
                average_change_percent=(
                    sum(phase_changes) / len(phase_changes) if phase_changes else None
                ),
            )
        )
    return summaries
