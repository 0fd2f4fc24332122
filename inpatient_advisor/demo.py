"""Fixed demonstration bundle used to pre-populate the form."""
from __future__ import annotations

from datetime import datetime, timedelta
from uuid import uuid4

from .models import AdvisorState, ClinicalContext, MedicationState, Reading

_TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M"

# (hours before now, BG mmol/L)
DEMO_READINGS: tuple[tuple[int, float], ...] = (
    (23, 3.2),
    (20, 7.8),
    (8, 14.2),
    (6, 12.9),
    (2, 11.4),
)

DEMO_MEDICATIONS = MedicationState(
    basal_insulin=True,
    basal_dose=18,
    bolus_insulin=False,
    sulfonylurea=True,
    su_name="Gliclazide",
    su_dose=80,
    metformin=True,
    sglt2=False,
    steroid_am=True,
)

DEMO_CONTEXT = ClinicalContext(egfr=28, npo=False, weight_kg=78)


def demo_readings(now: datetime | None = None) -> tuple[Reading, ...]:
    now = now or datetime.now()
    return tuple(
        Reading(
            reading_id=str(uuid4()),
            timestamp=(now - timedelta(hours=hours)).strftime(_TIMESTAMP_FORMAT),
            value=value,
        )
        for hours, value in DEMO_READINGS
    )


def demo_state(now: datetime | None = None, base: AdvisorState | None = None) -> AdvisorState:
    """Return the demo readings, medications and context; targets come from ``base``."""

    base = base or AdvisorState()
    return AdvisorState(
        readings=demo_readings(now),
        medications=DEMO_MEDICATIONS,
        context=DEMO_CONTEXT,
        targets=base.targets,
    )
