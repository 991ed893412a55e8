"""Pydantic schemas for the joined market/lunar timeline."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field


class DayRecord(BaseModel):
    """A trading (or sample) day with the lunar data for the same instant."""

    date: datetime
    price: float
    high: float | None = None
    low: float | None = None
    volume: int | None = None

    phase_fraction: float
    illumination_percent: float
    phase_name: str
    zodiac_sign: str
    distance_km: float
    age_days: float
    special_names: list[str] = Field(default_factory=list)
    is_supermoon: bool = False
    is_micromoon: bool = False


class PhaseSummary(BaseModel):
    """Aggregate of the days falling in one named phase."""

    phase_name: str
    days: int
    average_price: float
    average_change_percent: float | None = None
