"""Top-level entry point: filter, detect patterns, build every result section."""

from __future__ import annotations

import logging
from dataclasses import asdict
from datetime import datetime

from focus_engine.aggregation import filter_input_by_range
from focus_engine.insights import build_profile_insights
from focus_engine.metrics import compute_extended_metrics
from focus_engine.patterns import compute_focus_heatmap, compute_patterns
from focus_engine.recommendations import build_engine_recommendations
from focus_engine.schema import EngineInput
from focus_engine.trends import build_engine_trends
from focus_engine.weekly import build_weekly_summary

logger = logging.getLogger(__name__)


def run_engine(engine_input: EngineInput, now: datetime | None = None) -> dict:
    """Run the whole analytics pipeline and return a JSON-ready bundle."""

    filtered = filter_input_by_range(engine_input)
    bounds = filtered.range
    logger.debug(
        "running engine range=%s..%s blocks=%d tasks=%d check_ins=%d feedback=%d",
        bounds.start.isoformat(),
        bounds.end.isoformat(),
        len(filtered.blocks),
        len(filtered.tasks),
        len(filtered.check_ins),
        len(filtered.feedback),
    )

    patterns = compute_patterns(filtered.blocks, filtered.tasks, filtered.feedback, bounds)
    extended_metrics = compute_extended_metrics(filtered.blocks, filtered.tasks, filtered.feedback, bounds, now=now)

    return {
        "profile_insights": build_profile_insights(patterns, engine_input.settings),
        "weekly_summary": build_weekly_summary(
            filtered.blocks,
            filtered.tasks,
            filtered.feedback,
            bounds,
            patterns,
            engine_input.settings,
        ),
        "focus_heatmap": asdict(compute_focus_heatmap(filtered.blocks, bounds.start, bounds.end)),
        "extended_metrics": extended_metrics,
        "recommendations": build_engine_recommendations(
            extended_metrics,
            best_focus_slot=patterns.best_focus_slot,
            strongest_day=patterns.day_pattern.strongest_day,
        ),
        "trends": build_engine_trends(filtered.blocks, filtered.tasks, filtered.feedback, bounds),
    }
