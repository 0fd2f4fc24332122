"""Alert on hypoglycaemia within the last 24 hours."""
from __future__ import annotations

from ..models import AdvisoryContext, Alert, AlertSeverity, EvaluationWindow
from ..registry import register_rule
from ..rule_base import AdvisoryRule, format_value


def _evidence(window: EvaluationWindow) -> str:
    return "BG readings: " + ", ".join(format_value(value) for value in window.values)


@register_rule
class AcuteHypoglycemiaRule(AdvisoryRule):
    id = "acute_hypoglycemia"
    description = "Any BG <3.0 mmol/L (severe) or, failing that, <4.0 mmol/L in the last 24h"
    version = "1.0.0"

    def evaluate(self, window: EvaluationWindow, context: AdvisoryContext) -> Alert | None:
        if window.any_severe:
            first = window.severe[0]
            return Alert(
                title=f"Severe hypoglycaemia (BG < {window.severe_threshold:.1f} mmol/L)",
                severity=AlertSeverity.STAT,
                detail=(
                    "Treat immediately per hypo protocol; recheck in 10–15 min. "
                    f"Last severe at {first.timestamp}."
                ),
                evidence=_evidence(window),
            )
        if window.any_hypo:
            first = window.hypos[0]
            return Alert(
                title=f"Hypoglycaemia (BG < {window.hypo_threshold:.1f} mmol/L)",
                severity=AlertSeverity.STAT,
                detail=f"Treat per protocol; recheck in 10–15 min. Last hypo at {first.timestamp}.",
                evidence=_evidence(window),
            )
        return None


@register_rule
class RecurrentHypoglycemiaRule(AdvisoryRule):
    id = "recurrent_hypoglycemia"
    description = "Two or more BG readings <4.0 mmol/L in the last 24h"
    version = "1.0.0"

    def evaluate(self, window: EvaluationWindow, context: AdvisoryContext) -> Alert | None:
        minimum_episodes = int(self.resolved_threshold(context, "recurrent_min_episodes", 2))
        episodes = len(window.hypos)
        if episodes < minimum_episodes:
            return None
        return Alert(
            title="Recurrent hypoglycaemia in 24h",
            severity=AlertSeverity.WARN,
            detail=(
                f"{episodes} episodes recorded in last 24h. "
                "Review causes/meds and add overnight monitoring plan."
            ),
            evidence=", ".join(f"{format_value(hypo.value)}@{hypo.timestamp}" for hypo in window.hypos),
        )
