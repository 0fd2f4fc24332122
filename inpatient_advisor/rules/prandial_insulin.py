"""Prandial (bolus) insulin recommendations."""
from __future__ import annotations

from ..models import AdvisoryContext, EvaluationWindow, Recommendation
from ..registry import register_rule
from ..rule_base import AdvisoryRule


@register_rule
class PostPrandialPatternRule(AdvisoryRule):
    id = "postprandial_hyperglycemia"
    description = "Mean BG >12 mmol/L between 14:00 and 22:00 on bolus insulin, no hypos"
    version = "1.0.0"

    def evaluate(self, window: EvaluationWindow, context: AdvisoryContext) -> Recommendation | None:
        pm_high = float(self.resolved_threshold(context, "pm_high_threshold", 12.0))

        if not context.medications.bolus_insulin or window.any_hypo:
            return None
        if window.pm_mean is None or window.pm_mean <= pm_high:
            return None
        return Recommendation(
            title="Post-prandial hyperglycaemia pattern",
            body=(
                f"Afternoon/evening mean {window.pm_mean:.1f} mmol/L. Consider prandial dose titration "
                "or adding/adjusting correction scale per local protocol."
            ),
            caveat="Check carbohydrate intake, missed doses, and injection technique.",
        )


@register_rule
class NilByMouthBolusRule(AdvisoryRule):
    id = "npo_bolus"
    description = "Nil by mouth while prescribed bolus insulin"
    version = "1.0.0"

    def evaluate(self, window: EvaluationWindow, context: AdvisoryContext) -> Recommendation | None:
        if not (context.clinical.npo and context.medications.bolus_insulin):
            return None
        return Recommendation(
            title="NPO status with bolus insulin",
            body=(
                "If patient is currently NPO, consider holding prandial insulin and using a "
                "basal ± correction regimen while NPO."
            ),
            caveat="Ensure hypoglycaemia prevention plan and fluids if needed per local protocol.",
        )
