"""Run the focus engine over a JSON calendar history payload."""

from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from datetime import datetime
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from focus_engine.adapters import json_adapter
from focus_engine.engine import run_engine
from focus_engine.schema import INTERVENTION_LEVELS

_DEBUG_VALUES = {"1", "true"}


def _parse_day(value: str) -> datetime:
    try:
        return datetime.fromisoformat(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid date '{value}', expected ISO format") from exc


def main() -> None:
    parser = argparse.ArgumentParser(description="Compute focus insights and a weekly summary")
    parser.add_argument("--data", required=True, help="Path to JSON payload with blocks/tasks/check_ins/feedback")
    parser.add_argument("--from", dest="range_from", type=_parse_day, help="Range start (ISO date)")
    parser.add_argument("--to", dest="range_to", type=_parse_day, help="Range end (ISO date)")
    parser.add_argument("--intervention-level", choices=INTERVENTION_LEVELS, help="Override payload settings")
    parser.add_argument("--output", default="outputs/focus_report.json", help="Where to write the report")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    args = parser.parse_args()

    if (args.range_from is None) != (args.range_to is None):
        parser.error("--from and --to must be given together")

    debug = args.debug or os.environ.get("FOCUS_ENGINE_DEBUG", "").lower() in _DEBUG_VALUES
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    engine_input = json_adapter.parse(args.data)
    if args.range_from is not None:
        engine_input.range_from = args.range_from
        engine_input.range_to = args.range_to
    if args.intervention_level:
        engine_input.settings.intervention_level = args.intervention_level

    report = run_engine(engine_input)
    print(json.dumps(report, indent=2, ensure_ascii=False))

    out_path = Path(args.output)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    out_path.write_text(json.dumps(report, indent=2, ensure_ascii=False), encoding="utf-8")
    logging.getLogger(__name__).info("Saved focus report to %s", out_path)


if __name__ == "__main__":
    main()
