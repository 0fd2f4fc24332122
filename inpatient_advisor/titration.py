"""Multi-day basal/bolus titration heuristics over the structured insulin list.

Fasting and afternoon means here are means of per-day means, so a day with a
single reading weighs as much as a day with ten. The 24h rules engine pools
readings instead.
"""
from __future__ import annotations

from typing import Iterable, Sequence

from .catalogue import classify_insulin
from .models import InsulinEntry, InsulinRole, NormalizedReading, Recommendation, TitrationTargets
from .rule_base import format_value, round_half_up
from .windows import DayBucket, filter_hour_window, group_by_calendar_day, mean

FASTING_WINDOW = (4, 8)
OVERNIGHT_WINDOW = (0, 6)
AFTERNOON_WINDOW = (14, 22)
HYPO_THRESHOLD = 4.0
STEROID_PP_BIAS = 1.0


def bounded_percent_change(current: float, pct: float, min_abs: float = 1, max_pct: float = 20) -> int:
    """Apply a capped percent change that always moves the dose when pct is non-zero.

    The result is never below one unit.
    """

    pct_clamped = max(-max_pct, min(max_pct, pct))
    proposed = round_half_up(current * (1 + pct_clamped / 100))
    if pct_clamped != 0 and abs(proposed - current) < min_abs:
        proposed += 1 if pct_clamped > 0 else -1
    return max(1, proposed)


def _window_means(days: Sequence[DayBucket], start_hour: float, end_hour: float) -> list[float]:
    means: list[float] = []
    for day in days:
        day_mean = mean([reading.value for reading in filter_hour_window(day.readings, start_hour, end_hour)])
        if day_mean is not None:
            means.append(day_mean)
    return means


def _overnight_hypo_days(days: Sequence[DayBucket]) -> int:
    count = 0
    for day in days:
        overnight = filter_hour_window(day.readings, *OVERNIGHT_WINDOW)
        if any(reading.value < HYPO_THRESHOLD for reading in overnight):
            count += 1
    return count


def _basal_suggestion(
    entry: InsulinEntry,
    days: Sequence[DayBucket],
    fasting_mean: float | None,
    overnight_hypo_days: int,
    targets: TitrationTargets,
) -> Recommendation | None:
    dose = entry.dose_units
    if overnight_hypo_days > 0:
        new_dose = bounded_percent_change(dose, -10)
        return Recommendation(
            title="Overnight lows — consider basal reduction",
            body=(
                f"Overnight hypoglycaemia detected on {overnight_hypo_days}/{len(days)} recent days. "
                f"Consider reducing basal ~10% (e.g., {format_value(dose)} → {new_dose} units) "
                "and review evening intake/timing."
            ),
        )
    if fasting_mean is not None and fasting_mean > targets.fasting_high:
        diff = fasting_mean - targets.fasting_high
        pct = 10 if diff >= 4 else 7 if diff >= 2 else 5
        new_dose = bounded_percent_change(dose, pct)
        return Recommendation(
            title="Morning highs — consider basal uptitration",
            body=(
                f"Mean fasting BG ~{fasting_mean:.1f} mmol/L over {len(days)}d. "
                f"Consider +{pct}% basal (e.g., {format_value(dose)} → {new_dose} units). "
                "Check for missed doses and injection timing."
            ),
        )
    return None


def suggest_titration(
    readings: Iterable[NormalizedReading],
    insulin_entries: Iterable[InsulinEntry],
    targets: TitrationTargets,
    steroid_on: bool,
    lookback_days: int = 3,
) -> list[Recommendation]:
    """Return basal then afternoon/evening suggestions for the recent days."""

    days = group_by_calendar_day(readings)[-lookback_days:] if lookback_days > 0 else []
    entries = list(insulin_entries or ())
    out: list[Recommendation] = []

    fasting_means = _window_means(days, *FASTING_WINDOW)
    fasting_mean = mean(fasting_means)
    overnight_hypo_days = _overnight_hypo_days(days)

    basal_entries = [
        entry
        for entry in entries
        if classify_insulin(entry.insulin_id) is InsulinRole.BASAL and entry.dose_units is not None
    ]
    if basal_entries:
        # Only the first basal entry is titrated.
        suggestion = _basal_suggestion(basal_entries[0], days, fasting_mean, overnight_hypo_days, targets)
        if suggestion is not None:
            out.append(suggestion)

    pm_mean = mean(_window_means(days, *AFTERNOON_WINDOW))
    has_bolus = any(classify_insulin(entry.insulin_id) is InsulinRole.BOLUS for entry in entries)
    threshold = targets.pp_high + STEROID_PP_BIAS if steroid_on else targets.pp_high

    if pm_mean is not None and pm_mean > threshold:
        if has_bolus:
            out.append(
                Recommendation(
                    title="Afternoon/evening highs — prandial/correction review",
                    body=(
                        f"PM mean ~{pm_mean:.1f} mmol/L over {len(days)}d. Consider bolus titration or "
                        "adjusting the correction scale, especially with steroid AM use."
                    ),
                )
            )
        else:
            out.append(
                Recommendation(
                    title="Afternoon/evening highs without bolus insulin",
                    body=(
                        f"PM mean ~{pm_mean:.1f} mmol/L. Consider introducing mealtime rapid insulin "
                        "or structured correction dosing per local protocol."
                    ),
                )
            )

    return out
