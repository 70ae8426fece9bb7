from __future__ import annotations

from datetime import time as time_cls
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, NonNegativeInt


class TideEvent(BaseModel):
    model_config = ConfigDict(frozen=True)

    time: time_cls
    level_cm: int


class NextTide(BaseModel):
    model_config = ConfigDict(frozen=True)

    label: Literal["high", "low", "mid"]
    hours_left: NonNegativeInt
    level_cm: int
    event_time: time_cls


class NextSun(BaseModel):
    model_config = ConfigDict(frozen=True)

    label: Literal["sunrise", "sunset"]
    time: time_cls


class Context(BaseModel):
    """Resolved marine conditions for one location and reference instant."""

    model_config = ConfigDict(frozen=True)

    wave_height: Optional[str] = None
    wave_period: Optional[str] = None
    wave_direction: Optional[str] = None
    wind_speed: Optional[str] = None
    wind_direction: Optional[str] = None
    water_temp: Optional[str] = None
    sky: Optional[str] = None
    air_temp: Optional[str] = None
    next_tide: Optional[NextTide] = None
    next_sun: Optional[NextSun] = None
    reference_clock: str
