"""Insulin reference catalogue and role classification."""
from __future__ import annotations

from typing import Final

from .models import InsulinAction, InsulinCatalogueEntry, InsulinRole

INSULIN_CATALOGUE: Final[tuple[InsulinCatalogueEntry, ...]] = (
    # Rapid
    InsulinCatalogueEntry("aspart", "NovoRapid", "Insulin aspart", InsulinAction.RAPID, 10, 60, 4, ("prandial",)),
    InsulinCatalogueEntry("lispro", "Humalog", "Insulin lispro", InsulinAction.RAPID, 10, 60, 4, ("prandial",)),
    # Short
    InsulinCatalogueEntry("regular", "Actrapid", "Regular insulin", InsulinAction.SHORT, 30, 120, 6, ("prandial",)),
    # Intermediate (NPH)
    InsulinCatalogueEntry("nph", "Insulatard", "Isophane (NPH)", InsulinAction.INTERMEDIATE, 90, 360, 12, ("basal",)),
    # Long
    InsulinCatalogueEntry("glargine", "Lantus", "Insulin glargine U100", InsulinAction.LONG, 90, None, 24, ("basal",)),
    InsulinCatalogueEntry("detemir", "Levemir", "Insulin detemir", InsulinAction.LONG, 90, None, 20, ("basal",)),
    InsulinCatalogueEntry("degludec", "Tresiba", "Insulin degludec", InsulinAction.LONG, 60, None, 42, ("basal",)),
    # Premix
    InsulinCatalogueEntry("biphasic30", "NovoMix 30", "Biphasic aspart 30", InsulinAction.PREMIX, 10, 60, 18, ("premix 30/70",)),
)

_BY_ID: Final[dict[str, InsulinCatalogueEntry]] = {entry.id: entry for entry in INSULIN_CATALOGUE}

_ROLE_BY_ACTION: Final[dict[InsulinAction, InsulinRole]] = {
    InsulinAction.LONG: InsulinRole.BASAL,
    InsulinAction.INTERMEDIATE: InsulinRole.BASAL,
    InsulinAction.RAPID: InsulinRole.BOLUS,
    InsulinAction.SHORT: InsulinRole.BOLUS,
    InsulinAction.PREMIX: InsulinRole.PREMIX,
}


def lookup_insulin(insulin_id: str) -> InsulinCatalogueEntry | None:
    return _BY_ID.get(insulin_id)


def classify_insulin(insulin_id: str) -> InsulinRole:
    """Map a catalogue id to its regimen role; unknown ids map to ``NONE``."""

    entry = lookup_insulin(insulin_id)
    if entry is None:
        return InsulinRole.NONE
    return _ROLE_BY_ACTION[entry.action]


def find_insulin(name: str) -> InsulinCatalogueEntry | None:
    """Match free text against catalogue id, brand or generic name (case-insensitive)."""

    wanted = (name or "").strip().lower()
    if not wanted:
        return None
    for entry in INSULIN_CATALOGUE:
        if wanted in (entry.id.lower(), entry.brand.lower(), entry.generic.lower()):
            return entry
    return None
