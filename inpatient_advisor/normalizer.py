"""Parse and order raw reading rows.

Rows with a non-numeric value or an unparseable timestamp are dropped without
raising; the only trace they leave is a lower reading count downstream.
"""
from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Iterable, Mapping

import numpy as np
import pandas as pd
from zoneinfo import ZoneInfo

from .models import NormalizedReading, Reading


def parse_number(value: Any) -> float | None:
    """Return ``value`` as a finite float, or ``None`` when it is not one."""

    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
    try:
        number = pd.to_numeric(value, errors="coerce")
    except (TypeError, ValueError):
        return None
    if not np.isscalar(number) or pd.isna(number):
        return None
    number = float(number)
    if not np.isfinite(number):
        return None
    return number


def parse_timestamp(value: Any, local_timezone: str | None = None) -> datetime | None:
    """Return a naive local datetime, or ``None`` when ``value`` is not a timestamp.

    Offset-aware inputs are converted to ``local_timezone`` (UTC when unset)
    before the offset is dropped. Strings without a digit are rejected so that
    pandas keywords such as ``"now"`` or ``"today"`` never resolve to the
    wall clock.
    """

    if isinstance(value, str):
        value = value.strip()
        if not any(char.isdigit() for char in value):
            return None
    elif not isinstance(value, datetime):
        return None
    try:
        parsed = pd.to_datetime(value, errors="coerce")
    except (TypeError, ValueError, OverflowError):
        return None
    if parsed is None or pd.isna(parsed):
        return None
    if parsed.tzinfo is not None:
        parsed = parsed.tz_convert(ZoneInfo(local_timezone or "UTC")).tz_localize(None)
    return parsed.to_pydatetime()


def _coerce_row(position: int, row: Reading | Mapping[str, Any]) -> Reading:
    if isinstance(row, Reading):
        return row
    return Reading(
        reading_id=str(row.get("id", position)),
        timestamp=row.get("ts", row.get("timestamp", "")),
        value=row.get("value", ""),
    )


def _display_timestamp(raw: Any, parsed: datetime) -> str:
    if isinstance(raw, str):
        return raw.strip()
    return parsed.isoformat(timespec="minutes")


def normalize_readings(
    rows: Iterable[Reading | Mapping[str, Any]],
    *,
    local_timezone: str | None = None,
) -> list[NormalizedReading]:
    """Return valid readings sorted ascending by time (stable for equal times)."""

    normalized: list[NormalizedReading] = []
    total = 0
    for position, raw_row in enumerate(rows):
        total += 1
        row = _coerce_row(position, raw_row)
        value = parse_number(row.value)
        if value is None:
            continue
        ts = parse_timestamp(row.timestamp, local_timezone)
        if ts is None:
            continue
        normalized.append(
            NormalizedReading(
                reading_id=row.reading_id,
                timestamp=_display_timestamp(row.timestamp, ts),
                value=value,
                ts=ts,
            )
        )

    dropped = total - len(normalized)
    if dropped:
        logging.debug(f"Dropped {dropped} of {total} reading rows during normalization")
    return sorted(normalized, key=lambda reading: reading.ts)
