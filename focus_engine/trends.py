"""Trend series for charts: per-category heatmaps, weekday trend, timeline."""

from __future__ import annotations

from dataclasses import asdict

from focus_engine.aggregation import build_feedback_index, effective_duration
from focus_engine.patterns import compute_focus_heatmap
from focus_engine.schema import Block, CompletionFeedback, RangeBounds, Task
from focus_engine.timeutils import average, day_name_from_index, feeling_value, is_within_range


def build_engine_trends(
    blocks: list[Block],
    tasks: list[Task],
    feedback: list[CompletionFeedback],
    bounds: RangeBounds,
) -> dict:
    return {
        "category_heatmaps": compute_category_heatmaps(blocks, bounds),
        "focus_trend": compute_focus_trend(blocks, bounds),
        "stacked_focus": compute_stacked_focus(blocks),
        "timeline": build_timeline(blocks, feedback),
        "weekly_comparison": compute_weekly_comparison(blocks, bounds),
    }


def compute_category_heatmaps(blocks: list[Block], bounds: RangeBounds) -> list[dict]:
    by_category: dict[str, list[Block]] = {}
    for block in blocks:
        if is_within_range(block.start, bounds):
            by_category.setdefault(block.category, []).append(block)

    return [
        {"category": category, "heatmap": asdict(compute_focus_heatmap(items, bounds.start, bounds.end))}
        for category, items in by_category.items()
    ]


def compute_focus_trend(blocks: list[Block], bounds: RangeBounds) -> list[dict]:
    """Minutes and block completion rate per weekday, Monday first."""

    focus = [0.0] * 7
    planned = [0] * 7
    completed = [0] * 7
    for block in blocks:
        if not is_within_range(block.start, bounds):
            continue
        day_index = block.start.weekday()
        focus[day_index] += effective_duration(block)
        planned[day_index] += 1
        if block.completed:
            completed[day_index] += 1

    return [
        {
            "label": day_name_from_index(day_index),
            "focus_minutes": focus[day_index],
            "completion_rate": completed[day_index] / planned[day_index] if planned[day_index] else 0.0,
        }
        for day_index in range(7)
    ]


def compute_stacked_focus(blocks: list[Block]) -> list[dict]:
    totals: dict[str, float] = {}
    for block in blocks:
        totals[block.category] = totals.get(block.category, 0.0) + effective_duration(block)
    return [{"category": category, "minutes": minutes} for category, minutes in totals.items()]


def build_timeline(blocks: list[Block], feedback: list[CompletionFeedback]) -> list[dict]:
    index = build_feedback_index(feedback)
    timeline = []
    for block in blocks:
        related = index.for_block(block.id)
        timeline.append(
            {
                "block_id": block.id,
                "start": block.start.isoformat(),
                "end": block.end.isoformat(),
                "category": block.category,
                "focus_minutes": effective_duration(block),
                "feeling": average([feeling_value(item.feeling) for item in related]),
                "interruptions": sum(1 for item in related if item.had_interruptions),
            }
        )
    return timeline


def compute_weekly_comparison(blocks: list[Block], bounds: RangeBounds) -> dict:
    """Completed focus in the second half of the range relative to the first."""

    midpoint = bounds.start + (bounds.end - bounds.start) / 2
    first_half = 0.0
    second_half = 0.0
    for block in blocks:
        if not block.completed:
            continue
        if block.start <= midpoint:
            first_half += effective_duration(block)
        else:
            second_half += effective_duration(block)

    baseline = first_half or second_half
    return {
        "current_focus": second_half,
        "baseline_focus": first_half,
        "trend_score": (second_half - first_half) / baseline if baseline else 0.0,
    }
