from pathlib import Path
import sys

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from inpatient_advisor.catalogue import INSULIN_CATALOGUE, classify_insulin, find_insulin, lookup_insulin
from inpatient_advisor.models import InsulinAction, InsulinRole


def test_catalogue_ids_are_unique():
    ids = [entry.id for entry in INSULIN_CATALOGUE]

    assert len(ids) == len(set(ids)) == 8


def test_classify_insulin_by_action():
    assert classify_insulin("glargine") is InsulinRole.BASAL
    assert classify_insulin("nph") is InsulinRole.BASAL
    assert classify_insulin("aspart") is InsulinRole.BOLUS
    assert classify_insulin("regular") is InsulinRole.BOLUS
    assert classify_insulin("biphasic30") is InsulinRole.PREMIX


def test_unknown_insulin_classifies_as_none():
    assert lookup_insulin("mystery") is None
    assert classify_insulin("mystery") is InsulinRole.NONE
    assert classify_insulin("") is InsulinRole.NONE


def test_lookup_returns_reference_data():
    degludec = lookup_insulin("degludec")

    assert degludec.brand == "Tresiba"
    assert degludec.action is InsulinAction.LONG
    assert degludec.peak_min is None
    assert degludec.duration_h == 42


def test_find_insulin_matches_brand_generic_or_id():
    assert find_insulin("lantus").id == "glargine"
    assert find_insulin(" Insulin Aspart ").id == "aspart"
    assert find_insulin("NPH").id == "nph"
    assert find_insulin("") is None
    assert find_insulin("glargine U300") is None
