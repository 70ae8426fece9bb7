from __future__ import annotations

from datetime import time as time_cls
from typing import Optional

from .models import NextSun
from .tides import parse_clock


def next_sun(raw: Optional[str], reference: time_cls) -> Optional[NextSun]:
    """Next of sunrise/sunset from a ``"HH:MM/HH:MM"`` pair.

    Once both have passed, tomorrow's sunrise is next.
    """
    if raw is None or "/" not in raw:
        return None
    rise_token, set_token = raw.split("/")[:2]
    sunrise = parse_clock(rise_token)
    sunset = parse_clock(set_token)
    if sunrise is None or sunset is None:
        return None
    if sunrise >= reference:
        return NextSun(label="sunrise", time=sunrise)
    if sunset >= reference:
        return NextSun(label="sunset", time=sunset)
    return NextSun(label="sunrise", time=sunrise)
