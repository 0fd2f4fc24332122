"""Immutable session state and its single update entry point.

Every edit on the form becomes a command; ``apply_command`` returns a new
``AdvisorState`` and never mutates the previous one.
"""
from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Any, Mapping, Optional, Union
from uuid import uuid4

from .config import targets_from_mapping
from .demo import demo_state
from .models import AdvisorState, InsulinEntry, Reading, SteroidCourse
from .normalizer import parse_number

_TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M"
_NUMERIC_MEDICATION_FIELDS = {"basal_dose", "su_dose", "metformin_dose"}
_NUMERIC_CONTEXT_FIELDS = {"egfr", "weight_kg", "albumin"}
# Form key -> SteroidCourse field
_STEROID_FIELDS = {"time": "timing"}


def _new_id() -> str:
    return str(uuid4())


def blank_reading() -> Reading:
    return Reading(reading_id=_new_id(), timestamp="", value="")


def initial_state() -> AdvisorState:
    """Empty form: one blank reading row, nothing ticked."""

    return AdvisorState(readings=(blank_reading(),))


@dataclass(frozen=True)
class AddReading:
    timestamp: Any = ""
    value: Any = ""
    reading_id: Optional[str] = None

    @classmethod
    def now(cls, value: Any = "", now: datetime | None = None) -> "AddReading":
        """Row stamped with the current local minute."""

        return cls(timestamp=(now or datetime.now()).strftime(_TIMESTAMP_FORMAT), value=value)


@dataclass(frozen=True)
class UpdateReading:
    reading_id: str
    timestamp: Any
    value: Any


@dataclass(frozen=True)
class RemoveReading:
    reading_id: str


@dataclass(frozen=True)
class ClearReadings:
    pass


@dataclass(frozen=True)
class LoadDemo:
    now: Optional[datetime] = None


@dataclass(frozen=True)
class UpdateMedications:
    changes: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class UpdateContext:
    changes: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class AddInsulin:
    insulin_id: str = ""
    dose_units: Any = None
    time: str = ""
    entry_id: Optional[str] = None


@dataclass(frozen=True)
class UpdateInsulin:
    entry_id: str
    changes: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class RemoveInsulin:
    entry_id: str


@dataclass(frozen=True)
class SetTargets:
    values: Mapping[str, Any] = field(default_factory=dict)


Command = Union[
    AddReading,
    UpdateReading,
    RemoveReading,
    ClearReadings,
    LoadDemo,
    UpdateMedications,
    UpdateContext,
    AddInsulin,
    UpdateInsulin,
    RemoveInsulin,
    SetTargets,
]


def _parse_fields(changes: Mapping[str, Any], numeric: set[str]) -> dict[str, Any]:
    return {key: parse_number(value) if key in numeric else value for key, value in changes.items()}


def _require(ids: list[str], wanted: str, kind: str) -> None:
    if wanted not in ids:
        raise KeyError(f"Unknown {kind} id: {wanted}")


def _update_context(state: AdvisorState, changes: Mapping[str, Any]) -> AdvisorState:
    parsed = _parse_fields(changes, _NUMERIC_CONTEXT_FIELDS)
    steroid_patch = parsed.pop("steroid", None)
    context = replace(state.context, **parsed)
    if isinstance(steroid_patch, SteroidCourse):
        context = replace(context, steroid=steroid_patch)
    elif steroid_patch:
        patch = {_STEROID_FIELDS.get(key, key): value for key, value in steroid_patch.items()}
        context = replace(context, steroid=replace(context.steroid, **patch))
    return replace(state, context=context)


def _update_insulin(state: AdvisorState, entry_id: str, changes: Mapping[str, Any]) -> AdvisorState:
    meds = state.medications
    _require([entry.entry_id for entry in meds.insulin_entries], entry_id, "insulin entry")
    parsed = _parse_fields(changes, {"dose_units"})
    entries = tuple(
        replace(entry, **parsed) if entry.entry_id == entry_id else entry for entry in meds.insulin_entries
    )
    return replace(state, medications=replace(meds, insulin_entries=entries))


def apply_command(state: AdvisorState, command: Command) -> AdvisorState:
    """Return the state that results from applying ``command`` to ``state``."""

    if isinstance(command, AddReading):
        row = Reading(reading_id=command.reading_id or _new_id(), timestamp=command.timestamp, value=command.value)
        return replace(state, readings=(*state.readings, row))

    if isinstance(command, UpdateReading):
        _require([row.reading_id for row in state.readings], command.reading_id, "reading")
        readings = tuple(
            replace(row, timestamp=command.timestamp, value=command.value)
            if row.reading_id == command.reading_id
            else row
            for row in state.readings
        )
        return replace(state, readings=readings)

    if isinstance(command, RemoveReading):
        _require([row.reading_id for row in state.readings], command.reading_id, "reading")
        return replace(state, readings=tuple(row for row in state.readings if row.reading_id != command.reading_id))

    if isinstance(command, ClearReadings):
        return replace(state, readings=(blank_reading(),))

    if isinstance(command, LoadDemo):
        return demo_state(command.now, base=state)

    if isinstance(command, UpdateMedications):
        parsed = _parse_fields(command.changes, _NUMERIC_MEDICATION_FIELDS)
        return replace(state, medications=replace(state.medications, **parsed))

    if isinstance(command, UpdateContext):
        return _update_context(state, command.changes)

    if isinstance(command, AddInsulin):
        entry = InsulinEntry(
            insulin_id=command.insulin_id,
            dose_units=parse_number(command.dose_units),
            time=command.time,
            entry_id=command.entry_id or _new_id(),
        )
        meds = state.medications
        return replace(state, medications=replace(meds, insulin_entries=(*meds.insulin_entries, entry)))

    if isinstance(command, UpdateInsulin):
        return _update_insulin(state, command.entry_id, command.changes)

    if isinstance(command, RemoveInsulin):
        meds = state.medications
        _require([entry.entry_id for entry in meds.insulin_entries], command.entry_id, "insulin entry")
        entries = tuple(entry for entry in meds.insulin_entries if entry.entry_id != command.entry_id)
        return replace(state, medications=replace(meds, insulin_entries=entries))

    if isinstance(command, SetTargets):
        return replace(state, targets=targets_from_mapping(command.values, base=state.targets))

    raise TypeError(f"Unsupported command type: {type(command).__name__}")
