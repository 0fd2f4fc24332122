"""Time-window helpers shared by the rules and titration engines."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Iterable, Sequence

import numpy as np

from .models import NormalizedReading


@dataclass(frozen=True)
class DayBucket:
    """Readings sharing a local calendar date."""

    day: date
    readings: tuple[NormalizedReading, ...]


def within_hours(readings: Iterable[NormalizedReading], now: datetime, hours: float) -> list[NormalizedReading]:
    """Keep readings within ``hours`` of ``now`` in either direction."""

    span = timedelta(hours=hours)
    return [reading for reading in readings if abs(reading.ts - now) <= span]


def last_24h(readings: Iterable[NormalizedReading], now: datetime) -> list[NormalizedReading]:
    return within_hours(readings, now, 24)


def in_hour_window(reading: NormalizedReading, start_hour: float, end_hour: float) -> bool:
    """Return True when the reading's local hour falls in [start_hour, end_hour).

    Hours are fractional (08:30 is 8.5). A window with start_hour > end_hour
    wraps past midnight.
    """

    hour = reading.local_hour
    if start_hour <= end_hour:
        return start_hour <= hour < end_hour
    return hour >= start_hour or hour < end_hour


def filter_hour_window(
    readings: Iterable[NormalizedReading], start_hour: float, end_hour: float
) -> list[NormalizedReading]:
    return [reading for reading in readings if in_hour_window(reading, start_hour, end_hour)]


def group_by_calendar_day(readings: Iterable[NormalizedReading]) -> list[DayBucket]:
    """Bucket readings by local date, in order of first appearance."""

    buckets: dict[date, list[NormalizedReading]] = {}
    for reading in readings:
        buckets.setdefault(reading.local_date, []).append(reading)
    return [DayBucket(day=day, readings=tuple(items)) for day, items in buckets.items()]


def mean(values: Sequence[float]) -> float | None:
    """Arithmetic mean, or ``None`` for an empty sequence."""

    if len(values) == 0:
        return None
    return float(np.mean(values))
