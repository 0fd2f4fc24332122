"""Presentation-ready views of advisor inputs and outputs."""
from __future__ import annotations

from datetime import datetime
from typing import Any, Sequence

import pandas as pd

from .config import AdvisorSettings
from .engine import build_window
from .models import AdvisorState, AdvisoryStats, NormalizedReading
from .normalizer import normalize_readings
from .registry import registry
from .windows import within_hours

PLACEHOLDER = "—"


def _format_mean(value: float | None) -> str:
    if value is None:
        return PLACEHOLDER
    return f"{value:.1f} mmol/L"


def summary_rows(stats: AdvisoryStats) -> list[tuple[str, str]]:
    """Label/value rows for the 24h summary table."""

    return [
        ("# readings (24h)", str(stats.n24h)),
        ("Any hypo < 4.0", "Yes" if stats.any_hypo else "No"),
        ("Any severe < 3.0", "Yes" if stats.any_severe else "No"),
        ("Mean BG (24h)", _format_mean(stats.mean24h)),
        ("Overnight lows (00–06)", str(stats.overnight_lows)),
        ("Afternoon/evening mean (14–22)", _format_mean(stats.pm_mean)),
    ]


def _format_minutes(minutes: int) -> str:
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def day_overlay_frame(readings: Sequence[NormalizedReading]) -> pd.DataFrame:
    """Overlay days on a shared minutes-since-midnight axis.

    One row per minute present on any day, a ``label`` column (HH:MM) and one
    column per calendar day in date order. Missing points are NaN; when a day
    has two readings in the same minute the first one is kept.
    """

    if not readings:
        return pd.DataFrame(columns=["mins", "label"])

    frame = pd.DataFrame(
        {
            "day": [reading.local_date.isoformat() for reading in readings],
            "mins": [reading.ts.hour * 60 + reading.ts.minute for reading in readings],
            "value": [reading.value for reading in readings],
        }
    )
    overlay = frame.pivot_table(index="mins", columns="day", values="value", aggfunc="first")
    overlay = overlay.sort_index().reset_index()
    overlay.columns.name = None
    overlay.insert(1, "label", overlay["mins"].map(_format_minutes))
    return overlay


def data_checker_payload(
    state: AdvisorState,
    *,
    now: datetime | None = None,
    lookback_hours: float = 24,
    diabetes_type: str | None = None,
    settings: AdvisorSettings | None = None,
    local_timezone: str | None = None,
) -> dict[str, Any]:
    """Return exactly what the engine sees for this session, grouped for review."""

    settings = settings or AdvisorSettings()
    now = now or datetime.now()
    normalized = normalize_readings(state.readings, local_timezone=local_timezone)
    readings_used = within_hours(normalized, now, lookback_hours)
    stats = build_window(normalized, now, settings).stats()
    meds = state.medications
    context = state.context

    return {
        "overview": {
            "diabetesType": diabetes_type,
            "lookbackHrs": lookback_hours,
            "ruleVersion": settings.rule_version,
            "rules": [rule.id for rule in registry.values()],
            "counts": {
                "readingsUsed": len(readings_used),
                "insulinEntries": len(meds.insulin_entries),
            },
        },
        "readingsUsed": [reading.to_dict() for reading in readings_used],
        "medications": {
            "insulinMeds": [entry.to_dict() for entry in meds.insulin_entries],
            "basalInsulin": meds.basal_insulin,
            "basalDose": meds.basal_dose,
            "bolusInsulin": meds.bolus_insulin,
            "metformin": meds.metformin,
            "metforminDose": meds.metformin_dose,
            "su": meds.sulfonylurea,
            "suName": meds.su_name,
            "suDose": meds.su_dose,
            "sglt2": meds.sglt2,
            "steroidAM": meds.steroid_am,
            "steroid": context.steroid.to_dict(),
        },
        "context": {
            "egfr": context.egfr,
            "npo": context.npo,
            "weightKg": context.weight_kg,
            "albumin": context.albumin,
            "carbIntake": context.carb_intake,
            "infection": context.infection,
            "hypoRisk": context.hypo_risk,
            "diabetesType": diabetes_type,
        },
        "targets": state.targets.to_dict(),
        "stats": stats.to_dict(),
    }
