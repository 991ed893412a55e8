"""Lunar cycle constants, phase bins, and name tables."""

from __future__ import annotations

from datetime import UTC, datetime

# Mean cycle lengths in days
SYNODIC_MONTH = 29.53058867
ANOMALISTIC_MONTH = 27.55
SIDEREAL_MONTH = 27.321661

# Earth-Moon distance bounds in km
PERIGEE_KM = 356500.0
APOGEE_KM = 406700.0

# Full moon distance thresholds for supermoon / micromoon
SUPERMOON_MAX_KM = 360000.0
MICROMOON_MIN_KM = 400000.0

# Known new moon: 2024-01-11 11:57 UTC
NEW_MOON_EPOCH = datetime(2024, 1, 11, 11, 57, 0, tzinfo=UTC)

# The Moon was in Capricorn (index 9) at this instant
ZODIAC_EPOCH = datetime(2024, 1, 1, 0, 0, 0, tzinfo=UTC)
ZODIAC_EPOCH_OFFSET = 9

NEW_MOON = "New Moon"
FULL_MOON = "Full Moon"

# Named phases in synodic order, each centred on a multiple of 1/8
PHASE_ORDER = (
    NEW_MOON,
    "Waxing Crescent",
    "First Quarter",
    "Waxing Gibbous",
    FULL_MOON,
    "Waning Gibbous",
    "Last Quarter",
    "Waning Crescent",
)

# Upper bound (exclusive) of each phase bin; New Moon wraps across 0/1
PHASE_BINS = (
    (0.0625, NEW_MOON),
    (0.1875, "Waxing Crescent"),
    (0.3125, "First Quarter"),
    (0.4375, "Waxing Gibbous"),
    (0.5625, FULL_MOON),
    (0.6875, "Waning Gibbous"),
    (0.8125, "Last Quarter"),
    (0.9375, "Waning Crescent"),
)

# Zodiac signs in order
SIGNS = (
    "Aries",
    "Taurus",
    "Gemini",
    "Cancer",
    "Leo",
    "Virgo",
    "Libra",
    "Scorpio",
    "Sagittarius",
    "Capricorn",
    "Aquarius",
    "Pisces",
)

# Full moon names by calendar month (January first)
FULL_MOON_NAMES = (
    "Wolf Moon",
    "Snow Moon",
    "Worm Moon",
    "Pink Moon",
    "Flower Moon",
    "Strawberry Moon",
    "Buck Moon",
    "Sturgeon Moon",
    "Harvest Moon",
    "Hunter's Moon",
    "Beaver Moon",
    "Cold Moon",
)


def phase_name_for(phase_fraction: float) -> str:
    """Bucket a synodic fraction into one of the eight named phases."""
    for upper, name in PHASE_BINS:
        if phase_fraction < upper:
            return name
    return NEW_MOON


def full_moon_name(month: int) -> str:
    """Traditional full moon name for a calendar month (1-12)."""
    return FULL_MOON_NAMES[(month - 1) % 12]
