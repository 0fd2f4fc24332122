"""
Advisor form payload models.

Field names follow the form's camelCase keys. Numeric inputs are lenient:
anything that does not parse as a finite number becomes ``None``.
"""
from typing import Annotated, Any, List, Optional

from pydantic import AliasChoices, BaseModel, BeforeValidator, ConfigDict, Field

from inpatient_advisor.normalizer import parse_number


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    return str(value)


def _as_optional_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    return str(value)


LenientFloat = Annotated[Optional[float], BeforeValidator(parse_number)]
LenientText = Annotated[str, BeforeValidator(_as_text)]
OptionalText = Annotated[Optional[str], BeforeValidator(_as_optional_text)]


class ReadingRow(BaseModel):
    """
    Model for a single BG reading row as entered.
    """
    model_config = ConfigDict(arbitrary_types_allowed=True)

    id: OptionalText = Field(default=None, description="Row identifier")
    ts: Any = Field(default="", description="Local timestamp as entered (e.g. 2025-11-06T08:00)")
    value: Any = Field(default="", description="BG value in mmol/L as entered")


class MedicationsForm(BaseModel):
    """
    Model for the flag-based medication section.
    """
    model_config = ConfigDict(arbitrary_types_allowed=True)

    basalInsulin: bool = Field(default=False, description="Basal insulin prescribed")
    basalDose: LenientFloat = Field(default=None, description="Basal dose (units/day)")
    bolusInsulin: bool = Field(default=False, description="Prandial (bolus) insulin prescribed")
    su: bool = Field(default=False, description="Sulfonylurea prescribed")
    suName: OptionalText = Field(default=None, description="Sulfonylurea name")
    suDose: LenientFloat = Field(default=None, description="Sulfonylurea dose (mg/day)")
    metformin: bool = Field(default=False, description="Metformin prescribed")
    sglt2: bool = Field(default=False, description="SGLT2 inhibitor prescribed")
    steroidAM: bool = Field(default=False, description="Once-daily AM prednisolone or equivalent")


class SteroidForm(BaseModel):
    """
    Model for steroid therapy details.
    """
    model_config = ConfigDict(arbitrary_types_allowed=True)

    on: bool = Field(default=False, description="On systemic steroids")
    type: LenientText = Field(default="", description="Steroid type")
    route: LenientText = Field(default="oral", description="Route (oral or iv)")
    dose: LenientText = Field(default="", description="Dose as entered")
    time: LenientText = Field(default="", description="Timing, e.g. 08:00")
    duration: LenientText = Field(default="", description="Duration, e.g. 7 days")


class ContextForm(BaseModel):
    """
    Model for the clinical context section, including the legacy embedded oral-agent fields.
    """
    model_config = ConfigDict(arbitrary_types_allowed=True, populate_by_name=True)

    egfr: LenientFloat = Field(default=None, description="eGFR (mL/min/1.73m2)")
    npo: bool = Field(default=False, description="Nil by mouth")
    weightKg: LenientFloat = Field(
        default=None,
        validation_alias=AliasChoices("weightKg", "weight"),
        description="Weight (kg)",
    )
    albumin: LenientFloat = Field(default=None, description="Albumin (g/L)")
    carbIntake: LenientText = Field(default="normal", description="normal, reduced or nil-by-mouth")
    infection: bool = Field(default=False, description="Active infection")
    hypoRisk: bool = Field(default=False, description="High hypoglycaemia risk")
    steroid: Optional[SteroidForm] = Field(default=None, description="Steroid therapy")
    metformin: Optional[bool] = Field(default=None, description="Metformin (legacy context field)")
    metforminDose: LenientFloat = Field(default=None, description="Metformin dose (mg/day)")
    su: Optional[bool] = Field(default=None, description="Sulfonylurea (legacy context field)")
    suName: OptionalText = Field(default=None, description="Sulfonylurea name (legacy context field)")
    suDose: LenientFloat = Field(default=None, description="Sulfonylurea dose (legacy context field)")


class InsulinMedForm(BaseModel):
    """
    Model for one structured insulin regimen line.
    """
    model_config = ConfigDict(arbitrary_types_allowed=True)

    id: OptionalText = Field(default=None, description="Row identifier")
    insulinId: OptionalText = Field(default=None, description="Catalogue insulin id")
    name: OptionalText = Field(default=None, description="Free-text insulin name when no id is given")
    doseUnits: LenientFloat = Field(default=None, description="Dose (units)")
    time: LenientText = Field(default="", description="Time of day (HH:mm)")


class TargetsForm(BaseModel):
    """
    Model for titration targets.
    """
    model_config = ConfigDict(arbitrary_types_allowed=True)

    fastingLow: LenientFloat = Field(default=None, description="Fasting target lower bound (mmol/L)")
    fastingHigh: LenientFloat = Field(default=None, description="Fasting target upper bound (mmol/L)")
    ppHigh: LenientFloat = Field(default=None, description="Post-prandial upper bound (mmol/L)")


class AdvisorSessionForm(BaseModel):
    """
    Model for a complete advisor form submission.
    """
    model_config = ConfigDict(arbitrary_types_allowed=True)

    diabetesType: OptionalText = Field(default=None, description="Diabetes type, informational only")
    readings: List[ReadingRow] = Field(default_factory=list, description="BG reading rows")
    meds: MedicationsForm = Field(default_factory=MedicationsForm, description="Medication flags")
    context: ContextForm = Field(default_factory=ContextForm, description="Clinical context")
    insulinMeds: List[InsulinMedForm] = Field(default_factory=list, description="Structured insulin regimen")
    targets: Optional[TargetsForm] = Field(default=None, description="Titration targets")
