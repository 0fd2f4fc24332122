"""Command-line utility for running the advisor over a saved form session.

The session file is the JSON the form posts::

    {
        "readings": [{"id": "r1", "ts": "2025-11-06T07:30", "value": 3.4}, ...],
        "meds": {"basalInsulin": true, "basalDose": 18, "su": true, ...},
        "context": {"egfr": 28, "npo": false, "steroid": {"on": true}},
        "insulinMeds": [{"insulinId": "glargine", "doseUnits": 18, "time": "22:00"}],
        "targets": {"fastingHigh": 8, "ppHigh": 10}
    }

Use ``--demo`` instead of ``--session`` to run the built-in demonstration
bundle. Results are written as JSON to stdout or to ``--output``.
"""
from __future__ import annotations

import argparse
import json
import logging
from datetime import datetime
from pathlib import Path

from .advisor import run_advisor
from .config import LOG_LEVEL, AdvisorSettings
from .demo import demo_state
from .normalizer import parse_timestamp
from .report import data_checker_payload, summary_rows
from .session import load_session_form, session_to_state


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run the inpatient diabetes advisor on a form session")
    parser.add_argument("--session", type=Path, help="JSON file containing the form session")
    parser.add_argument("--demo", action="store_true", help="Use the built-in demonstration data")
    parser.add_argument("--now", type=str, help="Evaluation time (ISO, local); defaults to the current time")
    parser.add_argument("--lookback-days", type=int, default=3, help="Calendar days used for titration")
    parser.add_argument("--timezone", help="IANA timezone used to localize offset-aware timestamps")
    parser.add_argument(
        "--data-checker",
        action="store_true",
        help="Include the exact engine inputs alongside the advice",
    )
    parser.add_argument("--output", type=Path, help="Optional output JSON file")
    parser.add_argument("--indent", type=int, default=None, help="Pretty-print JSON with the given indent")
    parser.add_argument("--log-level", default=LOG_LEVEL, help="Logging level (default: %(default)s)")
    return parser.parse_args(argv)


def _parse_now(value: str | None, local_timezone: str | None = None) -> datetime:
    """Parse ``--now`` into naive local time, exactly as reading timestamps are."""

    if not value:
        return datetime.now()
    parsed = parse_timestamp(value, local_timezone)
    if parsed is None:
        raise SystemExit(f"--now must be an ISO timestamp, got {value!r}")
    return parsed


def run(args: argparse.Namespace) -> dict:
    now = _parse_now(args.now, args.timezone)
    diabetes_type = None
    if args.session:
        form = load_session_form(args.session)
        state = session_to_state(form)
        diabetes_type = form.diabetesType
    elif args.demo:
        state = demo_state(now)
    else:
        raise SystemExit("Either --session or --demo must be provided")

    settings = AdvisorSettings()
    output = run_advisor(
        state,
        now=now,
        lookback_days=args.lookback_days,
        settings=settings,
        local_timezone=args.timezone,
    )
    result = output.to_dict()
    result["summary"] = [{"label": label, "value": value} for label, value in summary_rows(output.stats)]
    if args.data_checker:
        result["dataChecker"] = data_checker_payload(
            state,
            now=now,
            diabetes_type=diabetes_type,
            settings=settings,
            local_timezone=args.timezone,
        )
    return result


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(level=str(args.log_level).upper(), format="%(levelname)s %(name)s: %(message)s")
    result = run(args)

    output_text = json.dumps(result, indent=args.indent, ensure_ascii=False)
    if args.output:
        args.output.write_text(output_text)
        logging.info(f"Wrote advice to {args.output}")
    else:
        print(output_text)
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
