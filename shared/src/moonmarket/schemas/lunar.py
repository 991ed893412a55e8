"""Pydantic schemas for lunar phase data."""

from __future__ import annotations

from lunar.tables import APOGEE_KM, PERIGEE_KM, SYNODIC_MONTH
from pydantic import BaseModel, Field


class MoonPhaseRecord(BaseModel):
    """Lunar phase, distance and zodiac position for a single instant."""

    phase_fraction: float = Field(ge=0.0, lt=1.0)
    age_days: float = Field(ge=0.0, lt=SYNODIC_MONTH)
    illumination_percent: float = Field(ge=0.0, le=100.0)
    phase_name: str
    distance_km: float = Field(ge=PERIGEE_KM, le=APOGEE_KM)
    zodiac_sign: str
    special_name: str | None = None

    model_config = {"frozen": True}
