"""Behavioral pattern detection over blocks, tasks and feedback."""

from __future__ import annotations

from datetime import datetime, timedelta

import numpy as np

from focus_engine.aggregation import build_feedback_index, effective_duration, task_anchor_date
from focus_engine.schema import (
    Block,
    CategoryBias,
    CategoryScore,
    CompletionFeedback,
    DayPatternResult,
    DayScore,
    FocusHeatmap,
    PatternResults,
    RangeBounds,
    Task,
)
from focus_engine.timeutils import (
    average,
    clamp,
    day_name_from_index,
    feeling_value,
    format_slot_label,
    humanize_category,
    is_within_range,
    normalize_range,
    start_of_day,
)

HEATMAP_DAY_LABELS = ("Lun", "Mar", "Mié", "Jue", "Vie", "Sáb", "Dom")
HEATMAP_SLOT_START_HOURS = (6, 8, 10, 12, 14, 16, 18, 20, 22)
HEATMAP_SLOT_MINUTES = 120

FEEDBACK_TIME_DELTA = 0.15
_POSITIVE_FEELINGS = {"excellent", "good"}


def compute_focus_heatmap(blocks: list[Block], range_from: datetime, range_to: datetime) -> FocusHeatmap:
    """Distribute completed focus minutes over a weekday x two-hour slot grid.

    Each block is clamped to the range and its effective duration is spread
    proportionally over the wall-clock minutes it occupies, so a block whose
    actual duration differs from its planned span still adds up to its real
    focus time. Blocks crossing midnight are split per calendar day. Minutes
    that fall before 06:00 have no slot and are dropped.
    """

    slots = [format_slot_label(hour * 60, HEATMAP_SLOT_MINUTES) for hour in HEATMAP_SLOT_START_HOURS]
    matrix = np.zeros((len(HEATMAP_DAY_LABELS), len(slots)))
    bounds = normalize_range(range_from, range_to)

    for block in blocks:
        if not block.completed:
            continue
        duration = effective_duration(block)
        if duration <= 0:
            continue

        start = clamp(block.start, bounds.start, bounds.end)
        end = clamp(block.end, bounds.start, bounds.end)
        if end <= start:
            continue
        scale = duration / _minutes_between(start, end)

        day = start_of_day(start)
        while day <= end:
            next_day = day + timedelta(days=1)
            window_start = max(start, day)
            window_end = min(end, next_day)
            if window_end > window_start:
                row = day.weekday()
                for slot_index, hour in enumerate(HEATMAP_SLOT_START_HOURS):
                    slot_start = day + timedelta(hours=hour)
                    slot_end = slot_start + timedelta(minutes=HEATMAP_SLOT_MINUTES)
                    overlap = _overlap_minutes(window_start, window_end, slot_start, slot_end)
                    if overlap > 0:
                        matrix[row, slot_index] += overlap * scale
            day = next_day

    return FocusHeatmap(days=list(HEATMAP_DAY_LABELS), slots=slots, matrix=matrix.tolist())


def compute_patterns(
    blocks: list[Block],
    tasks: list[Task],
    feedback: list[CompletionFeedback],
    bounds: RangeBounds,
) -> PatternResults:
    """Run every pattern detector over one filtered range."""

    top_categories, category_scores = compute_top_categories(blocks, tasks, feedback)
    return PatternResults(
        best_focus_slot=compute_best_focus_slot(blocks, feedback),
        day_pattern=compute_strongest_and_weakest_day(blocks, tasks, bounds),
        top_categories=top_categories,
        category_scores=category_scores,
        estimation_bias=compute_time_estimation_bias(blocks, tasks, feedback),
    )


def compute_best_focus_slot(
    blocks: list[Block],
    feedback: list[CompletionFeedback],
    slot_minutes: int = HEATMAP_SLOT_MINUTES,
) -> str | None:
    """Label of the start-time slot with the best quality-weighted focus."""

    index = build_feedback_index(feedback)
    slots: dict[int, dict] = {}

    for block in blocks:
        if not block.completed:
            continue
        duration = effective_duration(block)
        if duration <= 0:
            continue

        start_minutes = block.start.hour * 60 + block.start.minute
        slot_start = (start_minutes // slot_minutes) * slot_minutes
        info = slots.setdefault(slot_start, {"focus_minutes": 0.0, "positive": 0, "total": 0})

        related = index.for_block(block.id)
        info["focus_minutes"] += duration
        info["positive"] += sum(1 for item in related if item.focus == "yes" and item.feeling in _POSITIVE_FEELINGS)
        info["total"] += len(related)

    if not slots:
        return None

    scored = []
    for slot_start, info in slots.items():
        # slots without survey data get a neutral prior
        quality_rate = info["positive"] / info["total"] if info["total"] else 0.5
        score = info["focus_minutes"] * (0.7 + 0.3 * quality_rate)
        scored.append((slot_start, score, info["focus_minutes"]))

    best = sorted(scored, key=lambda item: (-item[1], -item[2]))[0]
    return format_slot_label(best[0], slot_minutes)


def compute_strongest_and_weakest_day(
    blocks: list[Block],
    tasks: list[Task],
    bounds: RangeBounds,
) -> DayPatternResult:
    """Score each weekday on focus, finished blocks and task completion."""

    metrics = [
        {"focus_minutes": 0.0, "completed_blocks": 0, "tasks_created_or_due": 0, "tasks_completed": 0}
        for _ in range(7)
    ]

    for block in blocks:
        if not block.completed:
            continue
        day = metrics[block.start.weekday()]
        day["focus_minutes"] += effective_duration(block)
        day["completed_blocks"] += 1

    for task in tasks:
        anchor = task_anchor_date(task)
        if is_within_range(anchor, bounds):
            metrics[anchor.weekday()]["tasks_created_or_due"] += 1
        if task.completed and task.completed_at is not None and is_within_range(task.completed_at, bounds):
            metrics[task.completed_at.weekday()]["tasks_completed"] += 1

    day_scores = []
    for day_index, value in enumerate(metrics):
        denominator = value["tasks_created_or_due"] or value["tasks_completed"]
        completion_rate = value["tasks_completed"] / denominator if denominator else 0.0
        focus_hours = value["focus_minutes"] / 60.0
        day_scores.append(
            DayScore(
                day_index=day_index,
                day_name=day_name_from_index(day_index),
                score=focus_hours * 10 + value["completed_blocks"] * 8 + completion_rate * 100,
                completion_rate=completion_rate,
                focus_minutes=value["focus_minutes"],
                completed_blocks=value["completed_blocks"],
                tasks_created_or_due=value["tasks_created_or_due"],
                tasks_completed=value["tasks_completed"],
            )
        )

    active_days = [
        day
        for day in day_scores
        if day.focus_minutes > 0 or day.completed_blocks > 0 or day.tasks_created_or_due > 0 or day.tasks_completed > 0
    ]
    if not active_days:
        return DayPatternResult(strongest_day=None, weakest_day=None, day_scores=day_scores)

    strongest = max(active_days, key=lambda day: day.score)
    weakest = min(active_days, key=lambda day: day.score)
    return DayPatternResult(
        strongest_day=strongest.day_name,
        weakest_day=weakest.day_name if len(active_days) > 1 else None,
        day_scores=day_scores,
    )


def compute_top_categories(
    blocks: list[Block],
    tasks: list[Task],
    feedback: list[CompletionFeedback],
) -> tuple[list[str], list[CategoryScore]]:
    """Rank categories by completion, focus and feeling; return top-3 labels and all scores."""

    index = build_feedback_index(feedback)
    stats: dict[str, dict] = {}

    def accumulate(category: str, completed: bool, related: list[CompletionFeedback]) -> None:
        entry = stats.setdefault(
            category, {"total": 0, "completed": 0, "focus_yes": 0, "feedback_count": 0, "feelings": []}
        )
        entry["total"] += 1
        if completed:
            entry["completed"] += 1
        entry["feedback_count"] += len(related)
        entry["focus_yes"] += sum(1 for item in related if item.focus == "yes")
        entry["feelings"].extend(feeling_value(item.feeling) for item in related)

    for block in blocks:
        accumulate(block.category, block.completed, index.for_block(block.id))
    for task in tasks:
        accumulate(task.category, task.completed, index.for_task(task.id))

    scores = []
    for category, stat in stats.items():
        completion_rate = stat["completed"] / stat["total"] if stat["total"] else 0.0
        focus_yes_rate = stat["focus_yes"] / stat["feedback_count"] if stat["feedback_count"] else 0.0
        feeling_average = average(stat["feelings"])
        normalized_feeling = (feeling_average - 1) / 4 if feeling_average is not None else 0.5
        scores.append(
            CategoryScore(
                category=category,
                label=humanize_category(category),
                score=completion_rate * 0.45 + focus_yes_rate * 0.35 + normalized_feeling * 0.20,
                completion_rate=completion_rate,
                feeling_average=feeling_average,
                focus_yes_rate=focus_yes_rate,
                sample_size=stat["total"] + stat["feedback_count"],
            )
        )

    scores.sort(key=lambda item: item.score, reverse=True)
    return [item.label for item in scores[:3]], scores


def compute_time_estimation_bias(
    blocks: list[Block],
    tasks: list[Task],
    feedback: list[CompletionFeedback],
) -> list[CategoryBias]:
    """Average planned-vs-actual deviation per category, largest magnitude first.

    Positive values mean the category tends to run longer than planned.
    """

    deltas: dict[str, list[float]] = {}
    block_categories = {block.id: block.category for block in blocks}
    task_categories = {task.id: task.category for task in tasks}

    for block in blocks:
        if not block.completed:
            continue
        if block.actual_duration_minutes is None or not block.planned_duration_minutes or block.planned_duration_minutes <= 0:
            continue
        delta = (block.actual_duration_minutes - block.planned_duration_minutes) / block.planned_duration_minutes
        deltas.setdefault(block.category, []).append(delta)

    for item in feedback:
        category = block_categories.get(item.block_id) if item.block_id else None
        if category is None and item.task_id:
            category = task_categories.get(item.task_id)
        if category is None:
            continue
        weight = _time_comparison_delta(item.time_comparison)
        if weight:
            deltas.setdefault(category, []).append(weight)

    biases = [
        CategoryBias(category=category, bias_percent=round((average(values) or 0.0) * 100, 1))
        for category, values in deltas.items()
    ]
    biases.sort(key=lambda item: abs(item.bias_percent), reverse=True)
    return biases


def _time_comparison_delta(comparison: str) -> float:
    if comparison == "more":
        return FEEDBACK_TIME_DELTA
    if comparison == "less":
        return -FEEDBACK_TIME_DELTA
    return 0.0


def _minutes_between(start: datetime, end: datetime) -> float:
    return max(0.0, (end - start).total_seconds() / 60.0)


def _overlap_minutes(a_start: datetime, a_end: datetime, b_start: datetime, b_end: datetime) -> float:
    return _minutes_between(max(a_start, b_start), min(a_end, b_end))
