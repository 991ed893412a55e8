"""Lunar phase calculator - compute_moon_phase() entry point.

A fixed-period approximation: the synodic, anomalistic and sidereal cycles
are each treated as a single mean period counted from a reference epoch.
Illumination and distance are cosine interpolations, not ephemeris values,
so long-horizon output is structurally valid but astronomically loose.
"""

from __future__ import annotations

import math
from collections.abc import Iterable
from datetime import UTC, date, datetime, time, timedelta

from moonmarket.schemas.lunar import MoonPhaseRecord

from lunar.tables import (
    ANOMALISTIC_MONTH,
    APOGEE_KM,
    FULL_MOON,
    MICROMOON_MIN_KM,
    NEW_MOON_EPOCH,
    PERIGEE_KM,
    SIDEREAL_MONTH,
    SIGNS,
    SUPERMOON_MAX_KM,
    SYNODIC_MONTH,
    ZODIAC_EPOCH,
    ZODIAC_EPOCH_OFFSET,
    full_moon_name,
    phase_name_for,
)

_ONE_DAY = timedelta(days=1)


def _as_utc_moment(when: date | datetime) -> datetime:
    """Normalize input to an aware datetime; dates become noon UTC."""
    if isinstance(when, datetime):
        if when.utcoffset() is None:
            return when.replace(tzinfo=UTC)
        return when
    return datetime.combine(when, time(12, 0), tzinfo=UTC)


def _days_between(moment: datetime, epoch: datetime) -> float:
    return (moment - epoch) / _ONE_DAY


def _cycle_position(days: float, period: float) -> float:
    # Double mod keeps the result in [0, period) for negative day counts
    return ((days % period) + period) % period


def _illumination(phase_fraction: float) -> float:
    return (1 - math.cos(phase_fraction * 2 * math.pi)) / 2 * 100


def _distance_km(days: float) -> float:
    anomalistic_fraction = _cycle_position(days, ANOMALISTIC_MONTH) / ANOMALISTIC_MONTH
    swing = (1 - math.cos(anomalistic_fraction * 2 * math.pi)) / 2
    return min(APOGEE_KM, max(PERIGEE_KM, PERIGEE_KM + swing * (APOGEE_KM - PERIGEE_KM)))


def _zodiac_sign(moment: datetime) -> str:
    days = _days_between(moment, ZODIAC_EPOCH)
    position = ((days / SIDEREAL_MONTH) * 12 + ZODIAC_EPOCH_OFFSET) % 12
    return SIGNS[int(math.floor(position)) % 12]


def compute_moon_phase(when: date | datetime) -> MoonPhaseRecord:
    """Calculate the lunar phase record for a date or instant.

    Naive datetimes are taken as UTC; plain dates as noon UTC. Defined for
    every representable date, past or future.

    Returns:
        MoonPhaseRecord with phase, age, illumination, distance, zodiac sign
        and, at full moon, the traditional name for the calendar month.
    """
    moment = _as_utc_moment(when)
    days = _days_between(moment, NEW_MOON_EPOCH)

    age = _cycle_position(days, SYNODIC_MONTH)
    phase = age / SYNODIC_MONTH
    phase_name = phase_name_for(phase)

    # Month of the input as given, not converted to UTC
    special_name = full_moon_name(moment.month) if phase_name == FULL_MOON else None

    return MoonPhaseRecord(
        phase_fraction=phase,
        age_days=age,
        illumination_percent=_illumination(phase),
        phase_name=phase_name,
        distance_km=_distance_km(days),
        zodiac_sign=_zodiac_sign(moment),
        special_name=special_name,
    )


def compute_moon_phases(dates: Iterable[date | datetime]) -> list[MoonPhaseRecord]:
    """Calculate phase records for a sequence of dates, preserving order."""
    return [compute_moon_phase(d) for d in dates]


def current_moon_phase(now: datetime | None = None) -> MoonPhaseRecord:
    """Phase record for the current instant (UTC)."""
    return compute_moon_phase(now or datetime.now(UTC))


def is_supermoon(record: MoonPhaseRecord) -> bool:
    """Full moon near perigee."""
    return record.phase_name == FULL_MOON and record.distance_km < SUPERMOON_MAX_KM


def is_micromoon(record: MoonPhaseRecord) -> bool:
    """Full moon near apogee."""
    return record.phase_name == FULL_MOON and record.distance_km > MICROMOON_MIN_KM


def format_moon_distance(km: float) -> str:
    """Short distance label, e.g. ``384k km``."""
    return f"{km / 1000:.0f}k km"
