from datetime import datetime
from pathlib import Path
import sys

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from inpatient_advisor.demo import DEMO_MEDICATIONS, demo_readings, demo_state
from inpatient_advisor.models import AdvisorState, SteroidCourse, TitrationTargets
from inpatient_advisor.state import (
    AddInsulin,
    AddReading,
    ClearReadings,
    LoadDemo,
    RemoveInsulin,
    RemoveReading,
    SetTargets,
    UpdateContext,
    UpdateInsulin,
    UpdateMedications,
    UpdateReading,
    apply_command,
    initial_state,
)

NOW = datetime(2025, 11, 6, 12, 0)


def test_initial_state_has_one_blank_row():
    state = initial_state()

    assert len(state.readings) == 1
    assert state.readings[0].timestamp == ""
    assert state.readings[0].value == ""
    assert state.targets == TitrationTargets()


def test_reading_commands_return_new_states():
    start = AdvisorState()

    added = apply_command(start, AddReading(timestamp="2025-11-06T08:00", value="6.2", reading_id="r1"))
    updated = apply_command(added, UpdateReading("r1", "2025-11-06T09:00", "7.0"))
    removed = apply_command(updated, RemoveReading("r1"))

    assert start.readings == ()
    assert added.readings[0].value == "6.2"
    assert updated.readings[0].timestamp == "2025-11-06T09:00"
    assert added.readings[0].timestamp == "2025-11-06T08:00"
    assert removed.readings == ()


def test_add_reading_now_stamps_current_minute():
    command = AddReading.now(5.5, now=datetime(2025, 11, 6, 12, 34, 56))

    state = apply_command(AdvisorState(), command)

    assert state.readings[0].timestamp == "2025-11-06T12:34"
    assert state.readings[0].reading_id


def test_clear_readings_leaves_one_blank_row():
    state = apply_command(AdvisorState(), AddReading(timestamp="2025-11-06T08:00", value=6))

    cleared = apply_command(state, ClearReadings())

    assert len(cleared.readings) == 1
    assert cleared.readings[0].value == ""


def test_unknown_ids_raise_key_error():
    with pytest.raises(KeyError):
        apply_command(AdvisorState(), UpdateReading("missing", "", ""))
    with pytest.raises(KeyError):
        apply_command(AdvisorState(), RemoveReading("missing"))
    with pytest.raises(KeyError):
        apply_command(AdvisorState(), UpdateInsulin("missing", {"dose_units": 4}))
    with pytest.raises(KeyError):
        apply_command(AdvisorState(), RemoveInsulin("missing"))


def test_unsupported_command_raises_type_error():
    with pytest.raises(TypeError):
        apply_command(AdvisorState(), object())


def test_load_demo_replaces_inputs_but_keeps_targets():
    targets = TitrationTargets(fasting_high=7.0)
    state = AdvisorState(targets=targets)

    loaded = apply_command(state, LoadDemo(now=NOW))

    assert len(loaded.readings) == 5
    assert loaded.medications == DEMO_MEDICATIONS
    assert loaded.context.egfr == 28
    assert loaded.targets is targets


def test_update_medications_parses_doses():
    state = apply_command(AdvisorState(), UpdateMedications({"basal_insulin": True, "basal_dose": "18"}))
    cleared = apply_command(state, UpdateMedications({"basal_dose": ""}))

    assert state.medications.basal_insulin is True
    assert state.medications.basal_dose == 18.0
    assert cleared.medications.basal_dose is None


def test_update_context_merges_steroid_patch():
    state = apply_command(AdvisorState(), UpdateContext({"egfr": "abc", "npo": True, "steroid": {"on": True}}))
    state = apply_command(state, UpdateContext({"steroid": {"dose": "40 mg"}}))

    assert state.context.egfr is None
    assert state.context.npo is True
    assert state.context.steroid.on is True
    assert state.context.steroid.dose == "40 mg"
    assert state.context.steroid.route == "oral"


def test_update_context_maps_form_time_key_to_steroid_timing():
    state = apply_command(AdvisorState(), UpdateContext({"steroid": {"on": True, "time": "08:00"}}))
    state = apply_command(state, UpdateContext({"steroid": {"timing": "09:00", "duration": "5 days"}}))

    assert state.context.steroid.timing == "09:00"
    assert state.context.steroid.duration == "5 days"
    assert state.context.steroid.to_dict()["time"] == "09:00"


def test_update_context_accepts_a_full_steroid_course():
    course = SteroidCourse(on=True, type="dexamethasone", route="iv")

    state = apply_command(AdvisorState(), UpdateContext({"steroid": course}))

    assert state.context.steroid is course


def test_insulin_commands():
    state = apply_command(AdvisorState(), AddInsulin("glargine", "18", "22:00", entry_id="e1"))
    state = apply_command(state, UpdateInsulin("e1", {"dose_units": "20"}))

    assert state.medications.insulin_entries[0].dose_units == 20.0
    assert state.medications.insulin_entries[0].time == "22:00"

    state = apply_command(state, RemoveInsulin("e1"))
    assert state.medications.insulin_entries == ()


def test_set_targets_merges_recognized_keys():
    state = apply_command(AdvisorState(), SetTargets({"fastingHigh": 9, "other": 1}))

    assert state.targets == TitrationTargets(fasting_low=4.0, fasting_high=9.0, pp_high=10.0)


def test_demo_readings_are_relative_to_now():
    readings = demo_readings(NOW)

    assert [(row.timestamp, row.value) for row in readings] == [
        ("2025-11-05T13:00", 3.2),
        ("2025-11-05T16:00", 7.8),
        ("2025-11-06T04:00", 14.2),
        ("2025-11-06T06:00", 12.9),
        ("2025-11-06T10:00", 11.4),
    ]
    assert len({row.reading_id for row in readings}) == 5


def test_demo_state_defaults_targets():
    assert demo_state(NOW).targets == TitrationTargets()
