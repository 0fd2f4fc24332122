"""Rules engine: derive alerts, recommendations and 24h stats from readings."""
from __future__ import annotations

from datetime import datetime
from typing import Callable, Sequence

from . import rules as _rules  # noqa: F401 - ensure rule registration side-effects
from .config import AdvisorSettings
from .models import (
    AdvisoryContext,
    Alert,
    ClinicalContext,
    EvaluationWindow,
    MedicationState,
    NormalizedReading,
    Recommendation,
    RulesOutput,
)
from .registry import RuleRegistry, registry as default_registry
from .rule_base import AdvisoryRule
from .windows import filter_hour_window, last_24h, mean

OVERNIGHT_WINDOW = (0, 6)
AFTERNOON_WINDOW = (14, 22)


def build_window(
    readings: Sequence[NormalizedReading],
    now: datetime,
    settings: AdvisorSettings | None = None,
) -> EvaluationWindow:
    """Restrict to the rolling 24h window and precompute what the rules share."""

    settings = settings or AdvisorSettings()
    hypo_threshold = float(settings.thresholds.get("hypo_threshold", 4.0))
    severe_threshold = float(settings.thresholds.get("severe_threshold", 3.0))

    recent = last_24h(readings, now)
    afternoon = filter_hour_window(recent, *AFTERNOON_WINDOW)
    return EvaluationWindow(
        now=now,
        readings=tuple(recent),
        hypos=tuple(reading for reading in recent if reading.value < hypo_threshold),
        severe=tuple(reading for reading in recent if reading.value < severe_threshold),
        overnight=tuple(filter_hour_window(recent, *OVERNIGHT_WINDOW)),
        afternoon=tuple(afternoon),
        mean24h=mean([reading.value for reading in recent]),
        pm_mean=mean([reading.value for reading in afternoon]),
        hypo_threshold=hypo_threshold,
        severe_threshold=severe_threshold,
    )


def evaluate(
    readings: Sequence[NormalizedReading],
    meds: MedicationState,
    context: ClinicalContext,
    *,
    now: datetime | None = None,
    settings: AdvisorSettings | None = None,
    registry: RuleRegistry | None = None,
    rule_filter: Callable[[AdvisoryRule], bool] | None = None,
) -> RulesOutput:
    """Evaluate every registered rule against normalized readings.

    ``now`` anchors the rolling 24h window and defaults to the current local
    time. The function has no side effects; identical inputs give identical
    output.
    """

    settings = settings or AdvisorSettings()
    window = build_window(readings, now or datetime.now(), settings)
    advisory_context = AdvisoryContext(medications=meds, clinical=context, settings=settings)

    findings = (registry or default_registry).evaluate_all(window, advisory_context, predicate=rule_filter)
    alerts = [finding for finding in findings if isinstance(finding, Alert)]
    recs = [finding for finding in findings if isinstance(finding, Recommendation)]
    return RulesOutput(alerts=alerts, recs=recs, stats=window.stats())
