from datetime import datetime
from pathlib import Path
import sys

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from inpatient_advisor.advisor import run_advisor
from inpatient_advisor.demo import demo_state
from inpatient_advisor.models import (
    AdvisorState,
    AlertSeverity,
    ClinicalContext,
    InsulinEntry,
    MedicationState,
    Reading,
    SteroidCourse,
)

NOW = datetime(2025, 11, 6, 12, 0)


def _rows(*pairs):
    return tuple(Reading(f"r{index}", ts, value) for index, (ts, value) in enumerate(pairs))


def test_demo_state_produces_expected_advice():
    result = run_advisor(demo_state(NOW), now=NOW)

    assert [(alert.title, alert.severity) for alert in result.alerts] == [
        ("Hypoglycaemia (BG < 4.0 mmol/L)", AlertSeverity.STAT)
    ]
    assert result.stats.any_severe is False
    assert [rec.title for rec in result.recs] == [
        "Sulfonylurea and hypoglycaemia",
        "Renal impairment with SU and hypos",
        "Renal impairment with metformin",
    ]
    assert result.stats.n24h == 5
    assert result.stats.pm_mean == 7.8


def test_rule_recommendations_precede_titration_recommendations():
    state = AdvisorState(
        readings=_rows(("2025-11-05T15:00", 14.0), ("2025-11-05T17:00", 14.0)),
        medications=MedicationState(bolus_insulin=True, insulin_entries=(InsulinEntry("aspart", 6),)),
    )

    result = run_advisor(state, now=NOW)

    assert [rec.title for rec in result.recs] == [
        "Post-prandial hyperglycaemia pattern",
        "Afternoon/evening highs — prandial/correction review",
    ]
    assert result.recs[0].caveat is not None
    assert result.recs[1].caveat is None


def test_steroid_course_raises_titration_threshold():
    readings = _rows(("2025-11-05T18:00", 10.5))
    without = AdvisorState(readings=readings)
    with_course = AdvisorState(readings=readings, context=ClinicalContext(steroid=SteroidCourse(on=True)))
    with_am_flag = AdvisorState(readings=readings, medications=MedicationState(steroid_am=True))

    assert [rec.title for rec in run_advisor(without, now=NOW).recs] == [
        "Afternoon/evening highs without bolus insulin"
    ]
    assert run_advisor(with_course, now=NOW).recs == []
    assert run_advisor(with_am_flag, now=NOW).recs == []


def test_invalid_rows_only_reduce_the_count():
    state = AdvisorState(readings=_rows(("2025-11-06T10:00", "abc"), ("", 5.0), ("2025-11-06T11:00", "6.5")))

    result = run_advisor(state, now=NOW)

    assert result.alerts == []
    assert result.stats.n24h == 1
    assert result.stats.mean24h == 6.5


def test_run_advisor_output_serializes():
    payload = run_advisor(demo_state(NOW), now=NOW).to_dict()

    assert set(payload) == {"alerts", "recs", "stats"}
    assert payload["alerts"][0]["severity"] == "stat"
    assert "evidence" in payload["alerts"][0]
    assert payload["stats"]["anyHypo"] is True
