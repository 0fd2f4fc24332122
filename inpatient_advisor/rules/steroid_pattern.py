"""Alert on afternoon/evening hyperglycaemia with a morning steroid dose."""
from __future__ import annotations

from ..models import AdvisoryContext, Alert, AlertSeverity, EvaluationWindow
from ..registry import register_rule
from ..rule_base import AdvisoryRule


@register_rule
class SteroidPatternRule(AdvisoryRule):
    id = "steroid_pattern_hyperglycemia"
    description = "AM steroid with mean BG >12 mmol/L between 14:00 and 22:00 (>=3 readings in 24h)"
    version = "1.0.0"

    def evaluate(self, window: EvaluationWindow, context: AdvisoryContext) -> Alert | None:
        pm_high = float(self.resolved_threshold(context, "pm_high_threshold", 12.0))
        minimum_readings = int(self.resolved_threshold(context, "minimum_readings", 3))

        if not context.medications.steroid_am:
            return None
        if window.pm_mean is None or window.pm_mean <= pm_high:
            return None
        if window.n24h < minimum_readings:
            return None
        return Alert(
            title="Steroid-pattern hyperglycaemia (PM)",
            severity=AlertSeverity.WARN,
            detail=(
                f"Mean BG between 14:00–22:00 is {window.pm_mean:.1f} mmol/L with AM steroid ticked. "
                "Consider steroid-pattern adjustments."
            ),
        )
