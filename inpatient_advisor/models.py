"""Core data models for inpatient glucose advice."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import TYPE_CHECKING, Any, Optional, Sequence

if TYPE_CHECKING:
    from .config import AdvisorSettings


class AlertSeverity(str, Enum):
    """Urgency of an alert."""

    STAT = "stat"
    WARN = "warn"


class InsulinAction(str, Enum):
    """Pharmacologic action class of a catalogue insulin."""

    RAPID = "rapid"
    SHORT = "short"
    INTERMEDIATE = "intermediate"
    LONG = "long"
    PREMIX = "premix"


class InsulinRole(str, Enum):
    """Functional role an insulin plays in a regimen."""

    BASAL = "basal"
    BOLUS = "bolus"
    PREMIX = "premix"
    NONE = "none"


@dataclass(frozen=True)
class Reading:
    """A reading row as entered on the form, before any parsing."""

    reading_id: str
    timestamp: Any = ""
    value: Any = ""


@dataclass(frozen=True)
class NormalizedReading:
    """A validated reading with its parsed local timestamp."""

    reading_id: str
    timestamp: str
    value: float
    ts: datetime

    @property
    def local_date(self) -> date:
        return self.ts.date()

    @property
    def local_hour(self) -> float:
        return self.ts.hour + self.ts.minute / 60.0

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.reading_id, "ts": self.timestamp, "value": self.value}


@dataclass(frozen=True)
class InsulinCatalogueEntry:
    """Static reference data for a single insulin product."""

    id: str
    brand: str
    generic: str
    action: InsulinAction
    onset_min: int
    peak_min: Optional[int]
    duration_h: float
    tags: Sequence[str] = field(default_factory=tuple)


@dataclass(frozen=True)
class InsulinEntry:
    """One line of the structured insulin regimen."""

    insulin_id: str
    dose_units: Optional[float] = None
    time: str = ""
    entry_id: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.entry_id,
            "insulinId": self.insulin_id,
            "doseUnits": self.dose_units,
            "time": self.time,
        }


@dataclass(frozen=True)
class MedicationState:
    """Canonical medication flags, doses and structured insulin list."""

    basal_insulin: bool = False
    basal_dose: Optional[float] = None
    bolus_insulin: bool = False
    sulfonylurea: bool = False
    su_name: str = "Gliclazide"
    su_dose: Optional[float] = None
    metformin: bool = False
    metformin_dose: Optional[float] = None
    sglt2: bool = False
    steroid_am: bool = False
    insulin_entries: tuple[InsulinEntry, ...] = ()


@dataclass(frozen=True)
class SteroidCourse:
    """Systemic steroid therapy details."""

    on: bool = False
    type: str = ""
    route: str = "oral"
    dose: str = ""
    timing: str = ""
    duration: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "on": self.on,
            "type": self.type,
            "route": self.route,
            "dose": self.dose,
            "time": self.timing,
            "duration": self.duration,
        }


@dataclass(frozen=True)
class ClinicalContext:
    """Patient context. Numeric fields are ``None`` when absent or unparseable."""

    egfr: Optional[float] = None
    npo: bool = False
    weight_kg: Optional[float] = None
    albumin: Optional[float] = None
    carb_intake: str = "normal"
    infection: bool = False
    hypo_risk: bool = False
    steroid: SteroidCourse = field(default_factory=SteroidCourse)


@dataclass(frozen=True)
class Alert:
    title: str
    severity: AlertSeverity
    detail: str
    evidence: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "title": self.title,
            "severity": self.severity.value,
            "detail": self.detail,
        }
        if self.evidence is not None:
            payload["evidence"] = self.evidence
        return payload


@dataclass(frozen=True)
class Recommendation:
    title: str
    body: str
    caveat: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"title": self.title, "body": self.body}
        if self.caveat is not None:
            payload["caveat"] = self.caveat
        return payload


@dataclass(frozen=True)
class AdvisoryStats:
    """Summary of the rolling 24h window. Means are ``None`` when no readings qualify."""

    n24h: int
    any_hypo: bool
    any_severe: bool
    mean24h: Optional[float]
    overnight_lows: int
    pm_mean: Optional[float]

    def to_dict(self) -> dict[str, Any]:
        return {
            "n24h": self.n24h,
            "anyHypo": self.any_hypo,
            "anySevere": self.any_severe,
            "mean24h": self.mean24h,
            "overnightLows": self.overnight_lows,
            "pmMean": self.pm_mean,
        }


@dataclass(frozen=True)
class RulesOutput:
    """Standardized output of a single advisory evaluation."""

    alerts: Sequence[Alert]
    recs: Sequence[Recommendation]
    stats: AdvisoryStats

    def to_dict(self) -> dict[str, Any]:
        return {
            "alerts": [alert.to_dict() for alert in self.alerts],
            "recs": [rec.to_dict() for rec in self.recs],
            "stats": self.stats.to_dict(),
        }


@dataclass(frozen=True)
class TitrationTargets:
    """Glucose targets (mmol/L) used by the titration heuristics."""

    fasting_low: float = 4.0
    fasting_high: float = 8.0
    pp_high: float = 10.0

    def to_dict(self) -> dict[str, float]:
        return {
            "fastingLow": self.fasting_low,
            "fastingHigh": self.fasting_high,
            "ppHigh": self.pp_high,
        }


@dataclass(frozen=True)
class AdvisorState:
    """Complete, immutable input to an advisor evaluation."""

    readings: tuple[Reading, ...] = ()
    medications: MedicationState = field(default_factory=MedicationState)
    context: ClinicalContext = field(default_factory=ClinicalContext)
    targets: TitrationTargets = field(default_factory=TitrationTargets)


@dataclass(frozen=True)
class EvaluationWindow:
    """Rolling 24h view of the readings, precomputed once per evaluation."""

    now: datetime
    readings: Sequence[NormalizedReading]
    hypos: Sequence[NormalizedReading]
    severe: Sequence[NormalizedReading]
    overnight: Sequence[NormalizedReading]
    afternoon: Sequence[NormalizedReading]
    mean24h: Optional[float]
    pm_mean: Optional[float]
    hypo_threshold: float = 4.0
    severe_threshold: float = 3.0

    @property
    def n24h(self) -> int:
        return len(self.readings)

    @property
    def values(self) -> list[float]:
        return [reading.value for reading in self.readings]

    @property
    def any_hypo(self) -> bool:
        return bool(self.hypos)

    @property
    def any_severe(self) -> bool:
        return bool(self.severe)

    @property
    def overnight_lows(self) -> int:
        return sum(1 for reading in self.overnight if reading.value < self.hypo_threshold)

    def stats(self) -> AdvisoryStats:
        return AdvisoryStats(
            n24h=self.n24h,
            any_hypo=self.any_hypo,
            any_severe=self.any_severe,
            mean24h=self.mean24h,
            overnight_lows=self.overnight_lows,
            pm_mean=self.pm_mean,
        )


@dataclass(frozen=True)
class AdvisoryContext:
    """Medication and patient state passed to each rule."""

    medications: MedicationState
    clinical: ClinicalContext
    settings: AdvisorSettings

    def rule_threshold(self, rule_id: str, key: str, default: Any) -> Any:
        return self.settings.rule_threshold(rule_id, key, default)
