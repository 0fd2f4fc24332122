"""Recommendations for sulfonylurea and metformin safety."""
from __future__ import annotations

from ..models import AdvisoryContext, EvaluationWindow, Recommendation
from ..registry import register_rule
from ..rule_base import AdvisoryRule, format_value


def _renally_impaired(rule: AdvisoryRule, context: AdvisoryContext) -> bool:
    egfr = context.clinical.egfr
    if egfr is None:
        return False
    return egfr < float(rule.resolved_threshold(context, "renal_egfr_threshold", 30.0))


@register_rule
class SulfonylureaHypoglycemiaRule(AdvisoryRule):
    id = "sulfonylurea_hypoglycemia"
    description = "Hypoglycaemia while on a sulfonylurea"
    version = "1.0.0"

    def evaluate(self, window: EvaluationWindow, context: AdvisoryContext) -> Recommendation | None:
        meds = context.medications
        if not (meds.sulfonylurea and window.any_hypo):
            return None
        return Recommendation(
            title="Sulfonylurea and hypoglycaemia",
            body=(
                f"A hypo occurred while on a sulfonylurea ({meds.su_name or 'SU'}). "
                "Consider holding tonight and review dose/regimen. "
                "Add increased monitoring for the next 24 hours."
            ),
            caveat="Review renal function, nutrition status, and timing of doses.",
        )


@register_rule
class RenalSulfonylureaRule(AdvisoryRule):
    id = "renal_sulfonylurea"
    description = "eGFR <30 with hypoglycaemia on a sulfonylurea"
    version = "1.0.0"

    def evaluate(self, window: EvaluationWindow, context: AdvisoryContext) -> Recommendation | None:
        if not (context.medications.sulfonylurea and window.any_hypo):
            return None
        if not _renally_impaired(self, context):
            return None
        return Recommendation(
            title="Renal impairment with SU and hypos",
            body=(
                f"eGFR {format_value(context.clinical.egfr)} with hypoglycaemia on an SU suggests higher risk "
                "of prolonged hypos. Consider stopping the SU and using an insulin-based regimen with review."
            ),
            caveat="Discuss with senior/diabetes team; align to local renal dosing guidance.",
        )


@register_rule
class RenalMetforminRule(AdvisoryRule):
    id = "renal_metformin"
    description = "eGFR <30 while on metformin"
    version = "1.0.0"

    def evaluate(self, window: EvaluationWindow, context: AdvisoryContext) -> Recommendation | None:
        if not context.medications.metformin:
            return None
        if not _renally_impaired(self, context):
            return None
        return Recommendation(
            title="Renal impairment with metformin",
            body=(
                f"eGFR {format_value(context.clinical.egfr)}. "
                "Consider stopping metformin while inpatient and reassessing post-discharge."
            ),
            caveat="Check local guidance; consider risks/benefits and indication.",
        )
