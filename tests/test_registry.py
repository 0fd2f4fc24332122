from datetime import datetime
from pathlib import Path
import sys

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from inpatient_advisor.engine import evaluate
from inpatient_advisor.models import Alert, AlertSeverity, ClinicalContext, MedicationState, Recommendation
from inpatient_advisor.registry import RuleRegistry, registry
from inpatient_advisor.rule_base import AdvisoryRule, format_value, round_half_up

NOW = datetime(2025, 11, 6, 12, 0)


class _AlwaysAlert(AdvisoryRule):
    id = "always_alert"
    description = "Test rule that always alerts"

    def evaluate(self, window, context):
        return Alert(title="Always", severity=AlertSeverity.WARN, detail=f"{window.n24h} readings")


class _AlwaysRecommend(AdvisoryRule):
    id = "always_recommend"
    description = "Test rule that always recommends"

    def evaluate(self, window, context):
        return Recommendation(title="Always", body="Recommend")


def test_rule_requires_id():
    with pytest.raises(ValueError):

        class _Anonymous(AdvisoryRule):  # pragma: no cover - class body never used
            def evaluate(self, window, context):
                return None


def test_registry_rejects_duplicate_ids():
    local = RuleRegistry()
    local.register(_AlwaysAlert)

    with pytest.raises(ValueError):
        local.register(_AlwaysAlert)


def test_engine_runs_a_custom_registry():
    local = RuleRegistry()
    local.register(_AlwaysRecommend)
    local.register(_AlwaysAlert)

    result = evaluate([], MedicationState(), ClinicalContext(), now=NOW, registry=local)

    assert [alert.detail for alert in result.alerts] == ["0 readings"]
    assert [rec.body for rec in result.recs] == ["Recommend"]


def test_registry_keeps_one_instance_per_rule_in_registration_order():
    local = RuleRegistry()
    local.register(_AlwaysAlert)
    local.register(_AlwaysRecommend)

    rules = list(local.values())

    assert [rule.id for rule in rules] == ["always_alert", "always_recommend"]
    assert isinstance(rules[0], _AlwaysAlert)


def test_default_registry_contains_every_rule_in_priority_order():
    assert [rule.id for rule in registry.values()] == [
        "acute_hypoglycemia",
        "recurrent_hypoglycemia",
        "steroid_pattern_hyperglycemia",
        "sulfonylurea_hypoglycemia",
        "renal_sulfonylurea",
        "renal_metformin",
        "basal_uptitration",
        "basal_reduction",
        "postprandial_hyperglycemia",
        "npo_bolus",
    ]
    for rule in registry.values():
        assert rule.description
        assert rule.version


def test_format_value_and_half_up_rounding():
    assert format_value(18.0) == "18"
    assert format_value(3.25) == "3.25"
    assert round_half_up(22.5) == 23
    assert round_half_up(19.8) == 20
    assert round_half_up(16.2) == 16
