"""Pick one "best" record out of a feed's array payload.

All selectors share :func:`select_extremum`: the record with the smallest
metric wins, records the metric cannot score are skipped, ties keep the
record seen first, and a default rule decides when nothing scores.
"""

from __future__ import annotations

import math
from datetime import date, datetime
from typing import Any, Callable, Optional, Sequence

from .records import Record, as_records

EARTH_RADIUS_KM = 6371.0


def first_or_empty(records: Sequence[Record]) -> Record:
    return records[0] if records else Record()


def select_extremum(
    records: Any,
    metric: Callable[[Record], Optional[float]],
    default: Callable[[Sequence[Record]], Record] = first_or_empty,
) -> Record:
    items = as_records(records)
    best: Optional[Record] = None
    best_score: Optional[float] = None
    for record in items:
        score = metric(record)
        if score is None:
            continue
        if best_score is None or score < best_score:
            best, best_score = record, score
    return best if best is not None else default(items)


def _parse_int(value: Optional[str], default: int) -> int:
    if value is None:
        return default
    try:
        return int(value.strip())
    except ValueError:
        return default


def _parse_iso_day(value: Optional[str]) -> Optional[tuple[int, int, int]]:
    if not value:
        return None
    tokens = value.split("-")
    if len(tokens) < 3:
        return None
    try:
        # tolerate a trailing time component on the day token
        return int(tokens[0]), int(tokens[1]), int(tokens[2][:2])
    except ValueError:
        return None


def parse_hour_stamp(value: Optional[str]) -> Optional[datetime]:
    """Parse a ``YYYYMMDDHH`` stamp as a naive local datetime."""
    if value is None:
        return None
    value = value.strip()
    if len(value) < 10 or not value[:10].isdigit():
        return None
    try:
        return datetime(int(value[0:4]), int(value[4:6]), int(value[6:8]), int(value[8:10]))
    except ValueError:
        return None


def haversine_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    dlat = math.radians(lat2 - lat1)
    dlon = math.radians(lon2 - lon1)
    a = (
        math.sin(dlat / 2) ** 2
        + math.cos(math.radians(lat1)) * math.cos(math.radians(lat2)) * math.sin(dlon / 2) ** 2
    )
    return 2 * EARTH_RADIUS_KM * math.atan2(math.sqrt(a), math.sqrt(1 - a))


def pick_tide_for_date(records: Any, reference_date: date, field: str = "pThisDate") -> Record:
    """Record for ``reference_date``; falls back to the first record."""
    want = (reference_date.year, reference_date.month, reference_date.day)

    def metric(record: Record) -> Optional[float]:
        return 0.0 if _parse_iso_day(record.text(field)) == want else None

    return select_extremum(records, metric)


def pick_latest_by_timestamp(records: Any, field: str = "aplYmdt") -> Record:
    # unparsable stamps count as 0, so they only win when nothing else parses
    return select_extremum(records, lambda record: -_parse_int(record.text(field), 0))


def pick_closest_forecast(records: Any, reference: datetime, field: str = "ymdt") -> Record:
    """Record whose hour stamp is closest to ``reference`` (naive local time)."""

    def metric(record: Record) -> Optional[float]:
        stamp = parse_hour_stamp(record.loose(field))
        if stamp is None:
            return None
        return abs((stamp - reference).total_seconds()) // 60

    return select_extremum(records, metric)


def pick_nearest_station(records: Any, lat: float, lon: float) -> Record:
    def metric(record: Record) -> Optional[float]:
        station_lat = record.number("lat")
        station_lon = record.number("lon")
        if station_lat is None or station_lon is None:
            return None
        return haversine_km(lat, lon, station_lat, station_lon)

    return select_extremum(records, metric)
