"""Map form payloads onto the canonical advisor state.

The form carries overlapping shapes: oral-agent flags live both in ``meds``
and in ``context``, and insulin appears both as flags and as a structured
list. They are folded into one ``MedicationState`` here so nothing past this
module needs to know about the duplication.
"""
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Mapping
from uuid import uuid4

from models.advisor_form_models import AdvisorSessionForm, ContextForm, InsulinMedForm

from .catalogue import classify_insulin, find_insulin
from .config import targets_from_mapping
from .models import (
    AdvisorState,
    ClinicalContext,
    InsulinEntry,
    InsulinRole,
    MedicationState,
    Reading,
    SteroidCourse,
)

_NIL_BY_MOUTH = "nil-by-mouth"


def _convert_insulin(med: InsulinMedForm) -> InsulinEntry:
    insulin_id = med.insulinId
    if not insulin_id:
        matched = find_insulin(med.name or "")
        insulin_id = matched.id if matched is not None else (med.name or "")
    return InsulinEntry(
        insulin_id=insulin_id,
        dose_units=med.doseUnits,
        time=med.time,
        entry_id=med.id or str(uuid4()),
    )


def _convert_steroid(context: ContextForm) -> SteroidCourse:
    steroid = context.steroid
    if steroid is None:
        return SteroidCourse()
    return SteroidCourse(
        on=steroid.on,
        type=steroid.type,
        route=steroid.route or "oral",
        dose=steroid.dose,
        timing=steroid.time,
        duration=steroid.duration,
    )


def convert_medications(form: AdvisorSessionForm) -> MedicationState:
    """Fold flag-based, context-embedded and structured medication data together."""

    meds = form.meds
    legacy = form.context
    entries = tuple(_convert_insulin(med) for med in form.insulinMeds)
    basal_entries = [entry for entry in entries if classify_insulin(entry.insulin_id) is InsulinRole.BASAL]
    has_bolus_entry = any(classify_insulin(entry.insulin_id) is InsulinRole.BOLUS for entry in entries)

    basal_dose = meds.basalDose
    if basal_dose is None and basal_entries:
        basal_dose = basal_entries[0].dose_units

    return MedicationState(
        basal_insulin=meds.basalInsulin or bool(basal_entries),
        basal_dose=basal_dose,
        bolus_insulin=meds.bolusInsulin or has_bolus_entry,
        sulfonylurea=meds.su or bool(legacy.su),
        su_name=meds.suName or legacy.suName or MedicationState.su_name,
        su_dose=meds.suDose if meds.suDose is not None else legacy.suDose,
        metformin=meds.metformin or bool(legacy.metformin),
        metformin_dose=legacy.metforminDose,
        sglt2=meds.sglt2,
        steroid_am=meds.steroidAM,
        insulin_entries=entries,
    )


def convert_context(context: ContextForm) -> ClinicalContext:
    return ClinicalContext(
        egfr=context.egfr,
        npo=context.npo or context.carbIntake == _NIL_BY_MOUTH,
        weight_kg=context.weightKg,
        albumin=context.albumin,
        carb_intake=context.carbIntake or "normal",
        infection=context.infection,
        hypo_risk=context.hypoRisk,
        steroid=_convert_steroid(context),
    )


def session_to_state(form: AdvisorSessionForm) -> AdvisorState:
    """Convert a validated form payload into an ``AdvisorState``."""

    readings = tuple(
        Reading(reading_id=row.id or f"row-{position}", timestamp=row.ts, value=row.value)
        for position, row in enumerate(form.readings)
    )
    targets = targets_from_mapping(form.targets.model_dump(exclude_none=True) if form.targets else None)
    return AdvisorState(
        readings=readings,
        medications=convert_medications(form),
        context=convert_context(form.context),
        targets=targets,
    )


def parse_session(payload: Mapping[str, Any]) -> AdvisorSessionForm:
    """Validate a decoded payload; structural problems raise pydantic's ``ValidationError``."""

    if not isinstance(payload, Mapping):
        raise ValueError("Session payload must be a JSON object")
    return AdvisorSessionForm.model_validate(dict(payload))


def load_session_form(path: Path) -> AdvisorSessionForm:
    """Read and validate a session JSON file."""

    try:
        payload = json.loads(Path(path).read_text())
    except json.JSONDecodeError as exc:
        raise ValueError(f"Session file is not valid JSON: {path}") from exc
    logging.info(f"Loaded advisor session from {path}")
    return parse_session(payload)


def load_session(path: Path) -> AdvisorState:
    return session_to_state(load_session_form(path))
