"""Basal insulin dose direction from the last 24 hours."""
from __future__ import annotations

from ..models import AdvisoryContext, EvaluationWindow, Recommendation
from ..registry import register_rule
from ..rule_base import AdvisoryRule, format_value, round_half_up


def _example(dose: float | None, factor: float) -> str:
    if not dose:
        return ""
    suggested = max(1, round_half_up(dose * factor))
    return f" Example: {format_value(dose)} → {suggested} units"


@register_rule
class BasalUptitrationRule(AdvisoryRule):
    id = "basal_uptitration"
    description = ">=3 readings >10 mmol/L and no hypos in 24h on basal insulin"
    version = "1.0.0"

    def evaluate(self, window: EvaluationWindow, context: AdvisoryContext) -> Recommendation | None:
        high_threshold = float(self.resolved_threshold(context, "high_threshold", 10.0))
        minimum_highs = int(self.resolved_threshold(context, "minimum_high_readings", 3))
        percent = float(self.resolved_threshold(context, "basal_increase_percent", 10.0))

        meds = context.medications
        if not meds.basal_insulin:
            return None
        highs = [value for value in window.values if value > high_threshold]
        if len(highs) < minimum_highs or window.any_hypo:
            return None
        return Recommendation(
            title="Possible basal insulin uptitration",
            body=(
                f"Frequent readings >{format_value(high_threshold)} mmol/L without hypos in 24h. "
                f"Consider a cautious basal increase (~{format_value(percent)}%)."
                + _example(meds.basal_dose, 1 + percent / 100)
            ),
            caveat="Check fasting/overnight values, nutrition status, and risk of hypoglycaemia.",
        )


@register_rule
class BasalReductionRule(AdvisoryRule):
    id = "basal_reduction"
    description = "Overnight (00:00–06:00) hypoglycaemia on basal insulin"
    version = "1.0.0"

    def evaluate(self, window: EvaluationWindow, context: AdvisoryContext) -> Recommendation | None:
        percent = float(self.resolved_threshold(context, "basal_reduction_percent", 10.0))

        meds = context.medications
        if not meds.basal_insulin or window.overnight_lows < 1:
            return None
        return Recommendation(
            title="Overnight lows — consider basal reduction",
            body=(
                f"Overnight hypoglycaemia detected. Consider basal dose reduction (~{format_value(percent)}%)."
                + _example(meds.basal_dose, 1 - percent / 100)
            ),
            caveat="Review timing of basal, evening intake, and concurrent SUs.",
        )
