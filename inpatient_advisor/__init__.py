"""Inpatient glucose advisory library."""

from .advisor import run_advisor
from .catalogue import INSULIN_CATALOGUE, classify_insulin, find_insulin, lookup_insulin
from .config import AdvisorSettings
from .engine import evaluate
from .models import (
    AdvisorState,
    AdvisoryContext,
    AdvisoryStats,
    Alert,
    AlertSeverity,
    ClinicalContext,
    EvaluationWindow,
    InsulinEntry,
    InsulinRole,
    MedicationState,
    NormalizedReading,
    Reading,
    Recommendation,
    RulesOutput,
    SteroidCourse,
    TitrationTargets,
)
from .normalizer import normalize_readings
from .registry import register_rule, registry
from .rule_base import AdvisoryRule
from .titration import bounded_percent_change, suggest_titration

__all__ = [
    "AdvisorSettings",
    "AdvisorState",
    "AdvisoryContext",
    "AdvisoryRule",
    "AdvisoryStats",
    "Alert",
    "AlertSeverity",
    "ClinicalContext",
    "EvaluationWindow",
    "INSULIN_CATALOGUE",
    "InsulinEntry",
    "InsulinRole",
    "MedicationState",
    "NormalizedReading",
    "Reading",
    "Recommendation",
    "RulesOutput",
    "SteroidCourse",
    "TitrationTargets",
    "bounded_percent_change",
    "classify_insulin",
    "evaluate",
    "find_insulin",
    "lookup_insulin",
    "normalize_readings",
    "register_rule",
    "registry",
    "run_advisor",
    "suggest_titration",
]
