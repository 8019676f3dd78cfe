"""Demo script for focus-engine."""

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from focus_engine.adapters.json_adapter import parse
from focus_engine.engine import run_engine


def main() -> None:
    result = run_engine(parse("examples/sample_week.json"))
    print("Profile insights:", result["profile_insights"])
    print("Weekly summary:", result["weekly_summary"])
    heatmap = result["focus_heatmap"]
    print("Heatmap:", " ".join(heatmap["slots"]))
    for day, row in zip(heatmap["days"], heatmap["matrix"]):
        print(f"{day:>4}", " ".join(f"{minutes:11.0f}" for minutes in row))


if __name__ == "__main__":
    main()
