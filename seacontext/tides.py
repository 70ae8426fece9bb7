"""Tide schedule parsing and next-event resolution.

Raw events look like ``"08:32 (105) ▲+37"``: a leading ``HH:MM`` token and
a parenthesized level in centimeters. Anything else is dropped silently.
"""

from __future__ import annotations

import re
from datetime import date as date_cls, datetime, time as time_cls
from typing import Optional, Sequence

from .models import NextTide, TideEvent

LEVEL_RE = re.compile(r"\((\d+)\)")
HHMM_RE = re.compile(r"^(\d{1,2}):(\d{2})$")
LEADING_HHMM_RE = re.compile(r"^\s*(\d{1,2}:\d{2})(?!\d)")

_ANCHOR_DAY = date_cls(2000, 1, 1)


def parse_clock(token: Optional[str]) -> Optional[time_cls]:
    """``HH:MM`` -> time, or None."""
    if token is None:
        return None
    m = HHMM_RE.match(token.strip())
    if not m:
        return None
    hour, minute = int(m.group(1)), int(m.group(2))
    if hour > 23 or minute > 59:
        return None
    return time_cls(hour, minute)


def parse_event(raw: Optional[str]) -> Optional[TideEvent]:
    if raw is None or not raw.strip():
        return None
    lead = LEADING_HHMM_RE.match(raw)
    clock = parse_clock(lead.group(1)) if lead else None
    levels = LEVEL_RE.findall(raw)
    if clock is None or not levels:
        return None
    # the last parenthesized number is the level
    return TideEvent(time=clock, level_cm=int(levels[-1]))


def parse_events(*raws: Optional[str]) -> list[TideEvent]:
    events = [ev for ev in (parse_event(raw) for raw in raws) if ev is not None]
    events.sort(key=lambda ev: ev.time)
    return events


def whole_hours_until(reference: time_cls, target: time_cls) -> int:
    """Whole hours from ``reference`` to the next occurrence of ``target``."""
    start = datetime.combine(_ANCHOR_DAY, reference)
    end = datetime.combine(_ANCHOR_DAY, target)
    seconds = (end - start).total_seconds()
    if seconds < 0:
        seconds += 24 * 3600
    return int(seconds // 3600)


def classify_level(level_cm: int, low: int, high: int) -> str:
    if level_cm == high:
        return "high"
    if level_cm == low:
        return "low"
    return "mid"


def next_tide(events: Sequence[TideEvent], reference: time_cls) -> Optional[NextTide]:
    """Next tide event at or after ``reference``, wrapping to tomorrow's first.

    Extremes are taken over the whole day so a wrapped event is classified
    against today's levels.
    """
    if not events:
        return None
    ordered = sorted(events, key=lambda ev: ev.time)
    levels = [ev.level_cm for ev in ordered]
    low, high = min(levels), max(levels)

    upcoming = next((ev for ev in ordered if ev.time >= reference), ordered[0])
    return NextTide(
        label=classify_level(upcoming.level_cm, low, high),
        hours_left=whole_hours_until(reference, upcoming.time),
        level_cm=upcoming.level_cm,
        event_time=upcoming.time,
    )
