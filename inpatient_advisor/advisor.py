"""Combine the rules engine and titration engine into one advice bundle."""
from __future__ import annotations

import logging
from datetime import datetime

from .config import AdvisorSettings
from .engine import evaluate
from .models import AdvisorState, RulesOutput
from .normalizer import normalize_readings
from .titration import suggest_titration


def run_advisor(
    state: AdvisorState,
    *,
    now: datetime | None = None,
    lookback_days: int = 3,
    settings: AdvisorSettings | None = None,
    local_timezone: str | None = None,
) -> RulesOutput:
    """Normalize the state's readings and return ``{alerts, recs, stats}``.

    Recommendations are the rules engine's followed by the titration engine's.
    """

    normalized = normalize_readings(state.readings, local_timezone=local_timezone)
    rules_output = evaluate(
        normalized,
        state.medications,
        state.context,
        now=now or datetime.now(),
        settings=settings,
    )
    steroid_on = state.context.steroid.on or state.medications.steroid_am
    titration_recs = suggest_titration(
        normalized,
        state.medications.insulin_entries,
        state.targets,
        steroid_on,
        lookback_days,
    )
    logging.debug(
        f"Advisor produced {len(rules_output.alerts)} alerts, "
        f"{len(rules_output.recs)} rule and {len(titration_recs)} titration recommendations"
    )
    return RulesOutput(
        alerts=list(rules_output.alerts),
        recs=[*rules_output.recs, *titration_recs],
        stats=rules_output.stats,
    )
