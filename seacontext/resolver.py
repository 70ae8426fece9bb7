"""Context resolution: fan out to the feeds, select, derive, merge.

The four feeds are fetched concurrently on a fixed worker pool and joined
before anything is parsed. A failed fetch aborts the resolution; every
later step degrades to ``None`` for the affected field instead.
"""

from __future__ import annotations

import logging
import time
from concurrent.futures import ALL_COMPLETED, ThreadPoolExecutor, wait
from datetime import datetime, time as time_cls
from typing import Any, Optional, Union
from zoneinfo import ZoneInfo

from .config import Cfg
from .feeds import FEED_NAMES, FeedClient
from .models import Context
from .records import Record
from .selectors import (
    pick_closest_forecast,
    pick_latest_by_timestamp,
    pick_nearest_station,
    pick_tide_for_date,
    select_extremum,
)
from .sun import next_sun
from .tides import next_tide, parse_events

AM_MARKER = "오전"
PM_MARKER = "오후"

logger = logging.getLogger(__name__)

Reference = Union[datetime, str, None]


def parse_iso_datetime(value: str) -> datetime:
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text)
    except ValueError as exc:
        raise ValueError(f"Invalid reference timestamp: {value}") from exc


def first_non_blank(*values: Optional[str]) -> Optional[str]:
    for value in values:
        if value is not None and value.strip():
            return value
    return None


def format_clock(t: time_cls) -> str:
    """12-hour clock with a meridiem marker, e.g. ``"오후 01:05"``."""
    marker = AM_MARKER if t.hour < 12 else PM_MARKER
    hour = t.hour % 12 or 12
    return f"{marker} {hour:02d}:{t.minute:02d}"


class ContextResolver:
    def __init__(
        self,
        cfg: Optional[Cfg] = None,
        client: Optional[FeedClient] = None,
    ) -> None:
        self.cfg = cfg or Cfg()
        self.zone = ZoneInfo(self.cfg.TIMEZONE)
        self.client = client or FeedClient(self.cfg)
        self.pool = ThreadPoolExecutor(max_workers=self.cfg.IO_WORKERS, thread_name_prefix="ext-io")

    def __enter__(self) -> "ContextResolver":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def close(self) -> None:
        self.pool.shutdown(wait=True)
        self.client.close()

    def local_reference(self, reference: Reference = None) -> datetime:
        """Reference instant in the configured zone; naive input is zone-local."""
        if reference is None:
            return datetime.now(self.zone)
        if isinstance(reference, str):
            reference = parse_iso_datetime(reference)
        if reference.tzinfo is None:
            reference = reference.replace(tzinfo=self.zone)
        try:
            return reference.astimezone(self.zone)
        except OverflowError as exc:
            raise ValueError(f"Reference timestamp out of range: {reference}") from exc

    def fetch_all(self, lat: float, lon: float) -> dict[str, Any]:
        futures = {name: self.pool.submit(self.client.fetch_feed, name, lat, lon) for name in FEED_NAMES}
        # siblings of a failed fetch run to completion; their results are dropped
        wait(futures.values(), return_when=ALL_COMPLETED)
        return {name: future.result() for name, future in futures.items()}

    def resolve(self, lat: float, lon: float, reference: Reference = None) -> Context:
        t0 = time.perf_counter()
        now_local = self.local_reference(reference)
        now_naive = now_local.replace(tzinfo=None)
        now_clock = now_naive.time()

        payloads = self.fetch_all(lat, lon)

        tide = pick_tide_for_date(payloads["tide"], now_local.date())
        events = parse_events(*(tide.text(f"pTime{i}") for i in range(1, 5)))
        upcoming_tide = next_tide(events, now_clock)
        upcoming_sun = next_sun(tide.text("pSun"), now_clock)

        current = pick_latest_by_timestamp(Record(payloads["current"]).child("weather").raw)
        forecast = pick_closest_forecast(payloads["forecast"], now_naive)
        station = pick_nearest_station(payloads["temp"], lat, lon)

        context = Context(
            wave_height=first_non_blank(forecast.loose("waveHt"), current.text("pago")),
            wave_period=forecast.loose("wavePrd"),
            wave_direction=forecast.loose("waveDir"),
            wind_speed=first_non_blank(forecast.loose("windspd"), current.text("windspd")),
            wind_direction=first_non_blank(forecast.loose("winddir"), current.text("winddir")),
            water_temp=station.text("obs_wt"),
            sky=first_non_blank(forecast.loose("sky"), current.text("sky")),
            air_temp=first_non_blank(forecast.loose("temp"), current.text("temp")),
            next_tide=upcoming_tide,
            next_sun=upcoming_sun,
            reference_clock=format_clock(now_clock),
        )
        logger.info(
            "[ext] context lat=%s lon=%s resolved in %d ms",
            lat,
            lon,
            (time.perf_counter() - t0) * 1000,
        )
        return context

    def resolve_visibility(self, lat: float, lon: float, reference: Reference = None) -> Optional[str]:
        """Visibility in km (one decimal) for the hour closest to ``reference``."""
        now_naive = self.local_reference(reference).replace(tzinfo=None)
        params = {
            "latitude": lat,
            "longitude": lon,
            "hourly": "visibility",
            "timezone": "auto",
            "past_days": 1,
            "forecast_days": 1,
        }
        payload = self.client.fetch(self.cfg.OPEN_METEO_BASE, params=params, name="visibility")

        hourly = Record(payload).child("hourly")
        times = hourly.raw.get("time") if isinstance(hourly.raw, dict) else None
        meters = hourly.raw.get("visibility") if isinstance(hourly.raw, dict) else None
        if not isinstance(times, list) or not isinstance(meters, list) or not times or len(times) != len(meters):
            return None

        # timezone=auto yields local wall-clock stamps without an offset
        def metric(record: Record) -> Optional[float]:
            try:
                stamp = datetime.fromisoformat(record.text("time") or "")
            except ValueError:
                return None
            return abs((stamp.replace(tzinfo=None) - now_naive).total_seconds()) // 60

        rows = [{"time": t, "visibility": v} for t, v in zip(times, meters)]
        best = select_extremum(rows, metric)
        value = best.number("visibility")
        if value is None:
            return None
        return f"{value / 1000.0:.1f}"
