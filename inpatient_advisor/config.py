"""Runtime configuration for advisory rules."""
from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Any, Mapping

from .models import TitrationTargets
from .normalizer import parse_number

RULE_VERSION = os.getenv("INPATIENT_ADVISOR_RULE_VERSION", "2025.11-demo")
LOG_LEVEL = os.getenv("INPATIENT_ADVISOR_LOG_LEVEL", "WARNING")

_TARGET_KEYS = {
    "fastingLow": "fasting_low",
    "fasting_low": "fasting_low",
    "fastingHigh": "fasting_high",
    "fasting_high": "fasting_high",
    "ppHigh": "pp_high",
    "pp_high": "pp_high",
}


@dataclass(frozen=True)
class AdvisorSettings:
    """Threshold overrides passed to each rule."""

    thresholds: Mapping[str, Any] = field(default_factory=dict)
    rule_settings: Mapping[str, Mapping[str, Any]] = field(default_factory=dict)
    rule_version: str = RULE_VERSION

    def rule_threshold(self, rule_id: str, key: str, default: Any) -> Any:
        """Return rule-specific override, falling back to global thresholds"""

        specific = self.rule_settings.get(rule_id, {})
        if key in specific:
            return specific[key]
        return self.thresholds.get(key, default)


def targets_from_mapping(values: Mapping[str, Any] | None, base: TitrationTargets | None = None) -> TitrationTargets:
    """Build titration targets from recognized keys, ignoring anything else."""

    base = base or TitrationTargets()
    if not values:
        return base
    resolved = {
        "fasting_low": base.fasting_low,
        "fasting_high": base.fasting_high,
        "pp_high": base.pp_high,
    }
    for key, value in values.items():
        attr = _TARGET_KEYS.get(key)
        if attr is None:
            continue
        number = parse_number(value)
        if number is not None:
            resolved[attr] = number
    return TitrationTargets(**resolved)
