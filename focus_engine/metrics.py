"""Extended behavioral metrics: energy, consistency, habits, interruptions, goals."""

from __future__ import annotations

from collections import Counter
from datetime import datetime

import numpy as np

from focus_engine.aggregation import FeedbackIndex, build_feedback_index, effective_duration, task_anchor_date
from focus_engine.schema import Block, CompletionFeedback, RangeBounds, Task
from focus_engine.timeutils import (
    average,
    clamp,
    feeling_value,
    format_slot_label,
    is_within_range,
    round_half_up,
    to_wall_clock,
)

SLOT_MINUTES = 120
DEEP_FOCUS_MIN_MINUTES = 40
PSEUDO_FOCUS_MAX_MINUTES = 30
HEAVY_DAY_MINUTES = 240
ACTIVE_DAY_MINUTES = 60
STABLE_VARIANCE = 60 * 60


def compute_extended_metrics(
    blocks: list[Block],
    tasks: list[Task],
    feedback: list[CompletionFeedback],
    bounds: RangeBounds,
    now: datetime | None = None,
) -> dict:
    """Compute every secondary metric for one filtered range.

    ``now`` only affects goal projection and overdue detection; it defaults
    to the current wall-clock time.
    """

    now = to_wall_clock(now) if now is not None else datetime.now()
    index = build_feedback_index(feedback)

    energy_curve = compute_energy_curve(blocks, index)
    consistency = compute_consistency(blocks)
    abandonment = compute_abandonment(blocks)
    deep_focus = compute_deep_focus(blocks, index)
    feelings = compute_feeling_insight(blocks, index, bounds)
    goals = compute_goal_insight(tasks, bounds, now)
    day_clusters = cluster_days(blocks, index, bounds)

    return {
        "by_category": compute_category_metrics(blocks, index),
        "energy_curve": energy_curve,
        "consistency": consistency,
        "estimation_variance": compute_estimation_variance(blocks),
        "odd_days": detect_odd_days(blocks, index, bounds),
        "planned_vs_spontaneous": compute_planned_vs_spontaneous(blocks),
        "abandonment": abandonment,
        "deep_focus": deep_focus,
        "habits": compute_habits(blocks),
        "interruptions": compute_interruption_insight(blocks, index),
        "feelings": feelings,
        "goals": goals,
        "planning": compute_planning_insight(abandonment, energy_curve, goals, day_clusters),
        "burnout_risk": compute_burnout_risk(feelings, deep_focus),
        "day_clusters": day_clusters,
        "phase": compute_phase(consistency, deep_focus, goals),
        "perception_vs_reality": build_perception_vs_reality(feelings, energy_curve),
    }


def compute_category_metrics(blocks: list[Block], index: FeedbackIndex) -> list[dict]:
    stats: dict[str, dict] = {}
    for block in blocks:
        entry = stats.setdefault(
            block.category,
            {"total": 0, "completed": 0, "duration": 0.0, "focus_yes": 0, "feedback_count": 0, "feeling_sum": 0},
        )
        related = index.for_block(block.id)
        entry["total"] += 1
        entry["duration"] += effective_duration(block)
        if block.completed:
            entry["completed"] += 1
        entry["feedback_count"] += len(related)
        entry["focus_yes"] += sum(1 for item in related if item.focus == "yes")
        entry["feeling_sum"] += sum(feeling_value(item.feeling) for item in related)

    return [
        {
            "category": category,
            "completion_rate": s["completed"] / s["total"],
            "average_duration_minutes": s["duration"] / s["total"],
            "focus_yes_rate": s["focus_yes"] / s["feedback_count"] if s["feedback_count"] else 0.0,
            "average_feeling": s["feeling_sum"] / s["feedback_count"] if s["feedback_count"] else None,
        }
        for category, s in stats.items()
    ]


def compute_energy_curve(blocks: list[Block], index: FeedbackIndex) -> list[dict]:
    """Average per-block energy by start hour, 0 for hours without blocks."""

    totals = [0.0] * 24
    weights = [0] * 24
    for block in blocks:
        related = index.for_block(block.id)
        base_focus = 1 if any(item.focus == "yes" for item in related) else 0
        interruptions = sum(1 for item in related if item.had_interruptions)
        completion = 1 if block.completed else 0
        energy = completion * 0.3 + base_focus * 0.3 + _average_feeling(related) * 0.3 - interruptions * 0.2
        totals[block.start.hour] += energy
        weights[block.start.hour] += 1

    return [{"hour": hour, "score": totals[hour] / weights[hour] if weights[hour] else 0.0} for hour in range(24)]


def compute_consistency(blocks: list[Block]) -> dict:
    day_minutes = np.zeros(7)
    for block in blocks:
        if block.completed:
            day_minutes[block.start.weekday()] += effective_duration(block)

    variance = float(np.var(day_minutes))
    return {
        "active_days": int(np.count_nonzero(day_minutes)),
        "focus_variance": variance,
        "stable": variance < STABLE_VARIANCE,
        "days_above_threshold": int(np.count_nonzero(day_minutes >= ACTIVE_DAY_MINUTES)),
    }


def compute_estimation_variance(blocks: list[Block]) -> dict:
    """Population standard deviation of actual minus planned minutes."""

    overall: list[float] = []
    by_category: dict[str, list[float]] = {}
    for block in blocks:
        if block.actual_duration_minutes is None or not block.planned_duration_minutes or block.planned_duration_minutes <= 0:
            continue
        delta = block.actual_duration_minutes - block.planned_duration_minutes
        overall.append(delta)
        by_category.setdefault(block.category, []).append(delta)

    return {
        "overall_std": _std(overall),
        "by_category": [
            {"category": category, "std": _std(values), "sample_size": len(values)}
            for category, values in by_category.items()
        ],
    }


def detect_odd_days(blocks: list[Block], index: FeedbackIndex, bounds: RangeBounds) -> list[dict]:
    """Flag weekdays whose focus, interruptions or mood stand out from the week."""

    day_focus = [0.0] * 7
    day_interruptions = [0] * 7
    day_feelings: list[list[int]] = [[] for _ in range(7)]

    for block in blocks:
        if not is_within_range(block.start, bounds):
            continue
        day_index = block.start.weekday()
        related = index.for_block(block.id)
        day_focus[day_index] += effective_duration(block)
        day_interruptions[day_index] += sum(1 for item in related if item.had_interruptions)
        day_feelings[day_index].extend(feeling_value(item.feeling) for item in related)

    focus_avg = average(day_focus)
    interruptions_avg = average(day_interruptions)
    feeling_avg = average([value for values in day_feelings for value in values])

    flags = []
    for day_index in range(7):
        reasons = []
        if abs(day_focus[day_index] - focus_avg) > focus_avg * 0.6:
            reasons.append("foco atípico")
        if abs(day_interruptions[day_index] - interruptions_avg) > max(1, interruptions_avg):
            reasons.append("interrupciones atípicas")
        day_feeling = average(day_feelings[day_index])
        if feeling_avg is not None and day_feeling is not None and abs(day_feeling - feeling_avg) > 0.8:
            reasons.append("estado de ánimo atípico")
        if reasons:
            flags.append({"day_index": day_index, "reasons": reasons})
    return flags


def compute_planned_vs_spontaneous(blocks: list[Block]) -> dict:
    planned = 0.0
    spontaneous = 0.0
    for block in blocks:
        duration = effective_duration(block)
        if not duration:
            continue
        if block.planned_duration_minutes and block.planned_duration_minutes > 0:
            planned += duration
        else:
            spontaneous += duration

    total = planned + spontaneous
    return {
        "planned_minutes": planned,
        "spontaneous_minutes": spontaneous,
        "planned_ratio": planned / total if total else 0.0,
    }


def compute_abandonment(blocks: list[Block]) -> dict:
    by_category: Counter = Counter()
    by_slot: Counter = Counter()
    for block in blocks:
        if block.completed:
            continue
        by_category[block.category] += 1
        by_slot[format_slot_label(block.start.hour * 60, SLOT_MINUTES)] += 1

    return {
        "total_abandoned": sum(by_category.values()),
        "by_category": [{"category": category, "count": count} for category, count in by_category.items()],
        "by_slot": [{"slot_label": label, "count": count} for label, count in by_slot.items()],
    }


def compute_deep_focus(blocks: list[Block], index: FeedbackIndex) -> dict:
    """Share of long completed blocks reported as focused, calm and uninterrupted."""

    long_blocks = 0
    qualifying = 0
    for block in blocks:
        if not block.completed or effective_duration(block) < DEEP_FOCUS_MIN_MINUTES:
            continue
        long_blocks += 1
        related = index.for_block(block.id)
        focused = any(item.focus == "yes" for item in related)
        interrupted = any(item.had_interruptions for item in related)
        if focused and not interrupted and _average_feeling(related) >= 3.5:
            qualifying += 1

    return {
        "score": qualifying / long_blocks if long_blocks else 0.0,
        "long_blocks": long_blocks,
        "qualifying_blocks": qualifying,
    }


def compute_habits(blocks: list[Block]) -> list[dict]:
    """Per-category frequency score; the streak counts distinct active days."""

    days_by_category: dict[str, set] = {}
    for block in blocks:
        if block.completed:
            days_by_category.setdefault(block.category, set()).add(block.start.date())

    habits = []
    for category, days in days_by_category.items():
        streak = len(days)
        score = min(10, round_half_up(streak / 7 * 10 + streak * 0.5))
        habits.append({"category": category, "score": score, "streak": streak})
    return habits


def compute_interruption_insight(blocks: list[Block], index: FeedbackIndex) -> dict:
    causes: Counter = Counter()
    hours: Counter = Counter()
    by_category: Counter = Counter()
    pseudo_focus: list[str] = []

    for block in blocks:
        related = index.for_block(block.id)
        interrupted = [item for item in related if item.had_interruptions]
        if not interrupted:
            # short and unfocused despite no reported interruption
            if effective_duration(block) <= PSEUDO_FOCUS_MAX_MINUTES and any(item.focus != "yes" for item in related):
                pseudo_focus.append(block.id)
            continue
        for item in interrupted:
            causes[item.interruption_cause or "other"] += 1
        hours[block.start.hour] += len(interrupted)
        by_category[block.category] += len(interrupted)

    return {
        "top_causes": [{"cause": cause, "count": count} for cause, count in causes.most_common(5)],
        "vulnerable_hours": [hour for hour, _ in hours.most_common(3)],
        "by_category": [{"category": category, "interruptions": count} for category, count in by_category.items()],
        "pseudo_focus_blocks": pseudo_focus,
    }


def compute_feeling_insight(blocks: list[Block], index: FeedbackIndex, bounds: RangeBounds) -> dict:
    hour_feelings: list[list[int]] = [[] for _ in range(24)]
    by_category: dict[str, list[int]] = {}
    day_focus = [0.0] * 7
    day_feelings: list[list[int]] = [[] for _ in range(7)]
    completed_feelings: list[int] = []
    incomplete_feelings: list[int] = []

    for block in blocks:
        values = [feeling_value(item.feeling) for item in index.for_block(block.id)]
        (completed_feelings if block.completed else incomplete_feelings).extend(values)
        hour_feelings[block.start.hour].extend(values)
        by_category.setdefault(block.category, []).extend(values)
        if is_within_range(block.start, bounds):
            day_index = block.start.weekday()
            day_focus[day_index] += effective_duration(block)
            day_feelings[day_index].extend(values)

    if completed_feelings and incomplete_feelings:
        completion_correlation = average(completed_feelings) - average(incomplete_feelings)
    else:
        completion_correlation = 0.0

    highlight_days = [
        {"day_index": day_index, "focus_minutes": day_focus[day_index], "feeling": average(day_feelings[day_index])}
        for day_index in range(7)
    ]
    highlight_days = [day for day in highlight_days if (day["feeling"] or 0) >= 3.5 and day["focus_minutes"] >= 60]
    highlight_days.sort(key=lambda day: day["focus_minutes"], reverse=True)

    completed_average = average(completed_feelings)
    if completed_average is not None and completed_average >= 3.8:
        positive_vs_productive = "positivo"
    elif completed_average is not None and completed_average < 3:
        positive_vs_productive = "productivo"
    else:
        positive_vs_productive = "balanceado"

    return {
        "curve": [{"hour": hour, "score": average(values) or 0.0} for hour, values in enumerate(hour_feelings)],
        "by_category": [{"category": category, "feeling": average(values)} for category, values in by_category.items()],
        "completion_correlation": completion_correlation,
        "positive_vs_productive": positive_vs_productive,
        "highlight_days": highlight_days[:3],
    }


def compute_goal_insight(tasks: list[Task], bounds: RangeBounds, now: datetime) -> dict:
    """Task progress in range and its projection against elapsed time."""

    in_range = [task for task in tasks if is_within_range(task_anchor_date(task), bounds)]
    completed = sum(1 for task in in_range if task.completed)
    progress = completed / (len(in_range) or 1)

    span_seconds = (bounds.end - bounds.start).total_seconds()
    elapsed_ratio = min(1.0, (now - bounds.start).total_seconds() / span_seconds) if span_seconds > 0 else 0.5
    projection = progress / elapsed_ratio if elapsed_ratio > 0 else progress

    if projection > 1.2:
        adjustment = "subir"
    elif projection < 0.6:
        adjustment = "bajar"
    else:
        adjustment = "mantener"

    by_category: dict[str, list[int]] = {}
    for task in in_range:
        entry = by_category.setdefault(task.category, [0, 0])
        entry[0] += 1
        entry[1] += 1 if task.completed else 0

    return {
        "progress_percent": progress,
        "projection_percent": projection,
        "adjustment": adjustment,
        "by_category": [
            {"category": category, "progress": done / total} for category, (total, done) in by_category.items()
        ],
        "abandoned": [
            task.id for task in in_range if not task.completed and task.due_date is not None and task.due_date < now
        ],
    }


def compute_planning_insight(abandonment: dict, energy_curve: list[dict], goals: dict, day_clusters: list[dict]) -> dict:
    energetic = sorted((point for point in energy_curve if point["score"] > 0), key=lambda p: p["score"], reverse=True)
    gold_slots = [format_slot_label(point["hour"] * 60, SLOT_MINUTES) for point in energetic[:2]]
    bundling = any(item["progress"] < 0.4 for item in goals["by_category"]) or len(goals["abandoned"]) > 3
    replans = []
    if abandonment["total_abandoned"]:
        replans = [f"Mover bloque pendiente a {slot['slot_label']}" for slot in abandonment["by_slot"][:2]]

    return {
        "gold_slots": gold_slots,
        "overload_days": [day["day_index"] for day in day_clusters if day["label"] != "calm"],
        "bundling_suggested": bundling,
        "suggested_replans": replans,
    }


def compute_burnout_risk(feelings: dict, deep_focus: dict) -> float:
    feeling_average = average([point["score"] for point in feelings["curve"] if point["score"] > 0])
    risk = 0.3 if deep_focus["score"] > 0.7 else 0.0
    if feeling_average is not None:
        if feeling_average < 3:
            risk += 0.5
        if feeling_average < 2.5:
            risk += 0.2
    return clamp(risk, 0.0, 1.0)


def cluster_days(blocks: list[Block], index: FeedbackIndex, bounds: RangeBounds) -> list[dict]:
    focus = [0.0] * 7
    interruptions = [0] * 7
    for block in blocks:
        if not is_within_range(block.start, bounds):
            continue
        day_index = block.start.weekday()
        focus[day_index] += effective_duration(block)
        interruptions[day_index] += sum(1 for item in index.for_block(block.id) if item.had_interruptions)

    clusters = []
    for day_index in range(7):
        if focus[day_index] > HEAVY_DAY_MINUTES and interruptions[day_index] > 1:
            label = "chaotic"
        elif focus[day_index] > HEAVY_DAY_MINUTES:
            label = "heavy"
        else:
            label = "calm"
        clusters.append({"day_index": day_index, "label": label})
    return clusters


def compute_phase(consistency: dict, deep_focus: dict, goals: dict) -> str:
    if consistency["active_days"] < 3:
        return "inicio"
    if deep_focus["score"] > 0.5 and goals["progress_percent"] > 0.5 and consistency["stable"]:
        return "consolidacion"
    return "estancamiento"


def build_perception_vs_reality(feelings: dict, energy_curve: list[dict]) -> dict:
    """Compare the hour that feels best with the hour that performs best."""

    perceived = _best_hour_slot(feelings["curve"])
    best = _best_hour_slot(energy_curve)
    return {
        "perceived_slot": perceived,
        "best_slot": best,
        "alignment": perceived is not None and perceived == best,
    }


def _best_hour_slot(curve: list[dict]) -> str | None:
    candidates = [point for point in curve if point["score"] > 0]
    if not candidates:
        return None
    best = max(candidates, key=lambda point: point["score"])
    return format_slot_label(best["hour"] * 60, SLOT_MINUTES)


def _average_feeling(feedback: list[CompletionFeedback]) -> float:
    if not feedback:
        return 0.0
    return sum(feeling_value(item.feeling) for item in feedback) / len(feedback)


def _std(values: list[float]) -> float:
    if not values:
        return 0.0
    return float(np.std(values))
