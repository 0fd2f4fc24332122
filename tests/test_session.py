import json
from pathlib import Path
import sys

import pytest
from pydantic import ValidationError

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from inpatient_advisor.models import TitrationTargets
from inpatient_advisor.session import load_session, parse_session, session_to_state


def _payload(**overrides):
    payload = {
        "diabetesType": "T2DM",
        "readings": [
            {"id": "a", "ts": "2025-11-06T08:00", "value": "6.1"},
            {"ts": "2025-11-06T09:00", "value": 7},
        ],
        "meds": {"basalInsulin": False, "su": False, "steroidAM": True},
        "context": {"egfr": "28", "npo": False, "weightKg": "78"},
        "insulinMeds": [],
    }
    payload.update(overrides)
    return payload


def test_session_to_state_maps_readings_and_context():
    state = session_to_state(parse_session(_payload()))

    assert [row.reading_id for row in state.readings] == ["a", "row-1"]
    assert state.readings[0].value == "6.1"
    assert state.context.egfr == 28.0
    assert state.context.weight_kg == 78.0
    assert state.medications.steroid_am is True
    assert state.targets == TitrationTargets()


def test_unparseable_numbers_become_absent():
    form = parse_session(_payload(context={"egfr": "pending", "albumin": ""}, meds={"basalDose": "n/a"}))
    state = session_to_state(form)

    assert state.context.egfr is None
    assert state.context.albumin is None
    assert state.medications.basal_dose is None


def test_legacy_context_oral_agents_are_folded_into_medications():
    form = parse_session(
        _payload(
            meds={},
            context={"metformin": True, "metforminDose": "1000", "su": True, "suName": "Glipizide", "suDose": 5},
        )
    )
    meds = session_to_state(form).medications

    assert meds.metformin is True
    assert meds.metformin_dose == 1000.0
    assert meds.sulfonylurea is True
    assert meds.su_name == "Glipizide"
    assert meds.su_dose == 5.0


def test_structured_insulin_sets_regimen_flags_and_basal_dose():
    form = parse_session(
        _payload(
            meds={},
            insulinMeds=[
                {"id": "i1", "name": "Lantus", "doseUnits": "18", "time": "22:00"},
                {"id": "i2", "insulinId": "aspart", "doseUnits": 6, "time": "08:00"},
                {"id": "i3", "insulinId": "mystery", "doseUnits": 4},
            ],
        )
    )
    meds = session_to_state(form).medications

    assert [entry.insulin_id for entry in meds.insulin_entries] == ["glargine", "aspart", "mystery"]
    assert meds.basal_insulin is True
    assert meds.basal_dose == 18.0
    assert meds.bolus_insulin is True


def test_explicit_basal_dose_wins_over_structured_entry():
    form = parse_session(
        _payload(
            meds={"basalInsulin": True, "basalDose": 24},
            insulinMeds=[{"insulinId": "glargine", "doseUnits": 18}],
        )
    )

    assert session_to_state(form).medications.basal_dose == 24.0


def test_context_aliases_and_nil_by_mouth():
    form = parse_session(
        _payload(
            context={
                "weight": 81,
                "carbIntake": "nil-by-mouth",
                "steroid": {"on": True, "type": "prednisolone", "dose": 30, "time": "08:00"},
            }
        )
    )
    context = session_to_state(form).context

    assert context.weight_kg == 81.0
    assert context.npo is True
    assert context.carb_intake == "nil-by-mouth"
    assert context.steroid.on is True
    assert context.steroid.dose == "30"
    assert context.steroid.timing == "08:00"
    assert context.steroid.route == "oral"


def test_targets_are_read_from_the_payload():
    form = parse_session(_payload(targets={"fastingHigh": "9", "ppHigh": None}))

    assert session_to_state(form).targets == TitrationTargets(fasting_low=4.0, fasting_high=9.0, pp_high=10.0)


def test_parse_session_rejects_non_object_payloads():
    with pytest.raises(ValueError):
        parse_session([1, 2, 3])


def test_parse_session_rejects_malformed_structure():
    with pytest.raises(ValidationError):
        parse_session(_payload(readings="not a list"))


def test_load_session_reads_json_file(tmp_path: Path):
    path = tmp_path / "session.json"
    path.write_text(json.dumps(_payload()))

    state = load_session(path)

    assert len(state.readings) == 2


def test_load_session_rejects_invalid_json(tmp_path: Path):
    path = tmp_path / "broken.json"
    path.write_text("{not json")

    with pytest.raises(ValueError):
        load_session(path)
