"""Streamlit demo UI for focus-engine."""

from __future__ import annotations

import json
from datetime import datetime, time
from typing import Any

from focus_engine.adapters import json_adapter
from focus_engine.engine import run_engine
from focus_engine.schema import INTERVENTION_LEVELS

DEMO_PATH = "examples/sample_week.json"


def _load_payload(uploaded_file) -> dict:
    if uploaded_file is None:
        with open(DEMO_PATH, encoding="utf-8") as handle:
            return json.load(handle)
    return json.loads(uploaded_file.getvalue().decode("utf-8"))


def _heatmap_rows(heatmap: dict) -> list[dict[str, Any]]:
    rows = []
    for day, values in zip(heatmap["days"], heatmap["matrix"]):
        row: dict[str, Any] = {"día": day}
        row.update({slot: round(minutes) for slot, minutes in zip(heatmap["slots"], values)})
        rows.append(row)
    return rows


def run_demo(payload: dict, intervention_level: str, reflection_enabled: bool, range_from=None, range_to=None) -> dict:
    """Parse a payload, apply UI overrides and run the engine."""

    engine_input = json_adapter.parse_payload(payload)
    engine_input.settings.intervention_level = intervention_level
    engine_input.settings.daily_reflection_question_enabled = reflection_enabled
    if range_from is not None and range_to is not None:
        engine_input.range_from = datetime.combine(range_from, time.min)
        engine_input.range_to = datetime.combine(range_to, time.min)
    return run_engine(engine_input)


def main() -> None:
    import streamlit as st

    st.set_page_config(page_title="Focus Engine Demo", layout="wide")
    st.title("Focus Engine: Streamlit Demo")

    with st.sidebar:
        st.header("Controls")
        uploaded = st.file_uploader("Upload calendar history", type=["json"])
        intervention_level = st.selectbox("Intervention level", options=INTERVENTION_LEVELS, index=1)
        reflection_enabled = st.checkbox("Daily reflection question enabled", value=True)
        override_range = st.checkbox("Override date range", value=False)
        range_from = st.date_input("From", disabled=not override_range)
        range_to = st.date_input("To", disabled=not override_range)
        run = st.button("Run engine", type="primary")

    if not run:
        st.info("Configure inputs in the sidebar and click **Run engine**.")
        return

    try:
        payload = _load_payload(uploaded)
        result = run_demo(
            payload,
            intervention_level,
            reflection_enabled,
            range_from if override_range else None,
            range_to if override_range else None,
        )
    except ValueError as exc:
        st.error(f"Input error: {exc}")
        return

    insights = result["profile_insights"]
    summary = result["weekly_summary"]

    st.subheader("A) Profile insights")
    c1, c2, c3 = st.columns(3)
    c1.metric("Best focus slot", insights["best_focus_slot"] or "-")
    c2.metric("Strongest day", insights["strongest_day"] or "-")
    c3.metric("Weakest day", insights["weakest_day"] or "-")
    st.write("Top categories:", ", ".join(insights["top_categories"]) or "-")
    for rec in insights["recommendations"]:
        st.markdown(f"**{rec['title']}**: {rec['description']}")

    st.subheader(f"B) Weekly summary ({summary['week_range_label']})")
    w1, w2, w3, w4 = st.columns(4)
    w1.metric("Focus minutes", f"{summary['total_focus_minutes']:.0f}")
    w2.metric("Completed blocks", summary["completed_blocks"])
    w3.metric("Completed tasks", summary["completed_tasks"])
    w4.metric("Completion rate", f"{summary['completion_rate_percent']}%")
    st.success(summary["highlight"])
    if "lowlight" in summary:
        st.warning(summary["lowlight"])
    st.write(summary["suggestions"])

    st.subheader("C) Focus heatmap (minutes)")
    st.table(_heatmap_rows(result["focus_heatmap"]))

    st.subheader("D) Trends")
    st.bar_chart({point["label"]: point["focus_minutes"] for point in result["trends"]["focus_trend"]})

    with st.expander("Extended metrics"):
        st.json(result["extended_metrics"])


if __name__ == "__main__":
    main()
