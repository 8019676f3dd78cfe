"""Temporal aggregation helpers and range filtering."""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field, replace
from datetime import datetime

from focus_engine.schema import Block, CheckIn, CompletionFeedback, EngineInput, RangeBounds, Task
from focus_engine.timeutils import date_to_datetime, is_within_range, normalize_range, to_wall_clock


@dataclass
class FeedbackIndex:
    """Feedback grouped by the block or task it belongs to."""

    by_block: dict[str, list[CompletionFeedback]] = field(default_factory=dict)
    by_task: dict[str, list[CompletionFeedback]] = field(default_factory=dict)

    def for_block(self, block_id: str) -> list[CompletionFeedback]:
        return self.by_block.get(block_id, [])

    def for_task(self, task_id: str) -> list[CompletionFeedback]:
        return self.by_task.get(task_id, [])


@dataclass
class FilteredData:
    range: RangeBounds
    blocks: list[Block]
    tasks: list[Task]
    check_ins: list[CheckIn]
    feedback: list[CompletionFeedback]


def effective_duration(block: Block) -> float:
    """Actual minutes when recorded, planned minutes otherwise."""

    if block.actual_duration_minutes is not None:
        return block.actual_duration_minutes
    return block.planned_duration_minutes or 0


def task_anchor_date(task: Task) -> datetime:
    """Single instant a task is attributed to: due date, else creation."""

    return task.due_date if task.due_date is not None else task.created_at


def build_feedback_index(feedback: list[CompletionFeedback]) -> FeedbackIndex:
    """Index feedback by owner so later stages avoid rescanning the list."""

    by_block: dict[str, list[CompletionFeedback]] = defaultdict(list)
    by_task: dict[str, list[CompletionFeedback]] = defaultdict(list)
    for item in feedback:
        if item.block_id:
            by_block[item.block_id].append(item)
        if item.task_id:
            by_task[item.task_id].append(item)
    return FeedbackIndex(by_block=dict(by_block), by_task=dict(by_task))


def _on_wall_clock(records: list, fields: tuple[str, ...]) -> list:
    """Copy records whose timestamps carry an offset onto the naive wall clock."""

    converted = []
    for record in records:
        changes = {
            name: to_wall_clock(getattr(record, name))
            for name in fields
            if getattr(record, name) is not None and getattr(record, name).tzinfo is not None
        }
        converted.append(replace(record, **changes) if changes else record)
    return converted


def filter_blocks(blocks: list[Block], bounds: RangeBounds) -> list[Block]:
    return [b for b in blocks if is_within_range(b.start, bounds) or is_within_range(b.end, bounds)]


def filter_tasks(tasks: list[Task], bounds: RangeBounds) -> list[Task]:
    def touches_range(task: Task) -> bool:
        instants = (task.created_at, task.due_date, task.completed_at)
        return any(value is not None and is_within_range(value, bounds) for value in instants)

    return [task for task in tasks if touches_range(task)]


def filter_check_ins(check_ins: list[CheckIn], bounds: RangeBounds) -> list[CheckIn]:
    return [c for c in check_ins if is_within_range(date_to_datetime(c.date, bounds.start), bounds)]


def filter_feedback(feedback: list[CompletionFeedback], bounds: RangeBounds) -> list[CompletionFeedback]:
    return [item for item in feedback if is_within_range(item.completed_at, bounds)]


def filter_input_by_range(engine_input: EngineInput) -> FilteredData:
    """Normalize the requested range and drop records that never touch it."""

    bounds = normalize_range(engine_input.range_from, engine_input.range_to)
    return FilteredData(
        range=bounds,
        blocks=filter_blocks(_on_wall_clock(engine_input.blocks, ("start", "end")), bounds),
        tasks=filter_tasks(_on_wall_clock(engine_input.tasks, ("created_at", "due_date", "completed_at")), bounds),
        check_ins=filter_check_ins(engine_input.check_ins, bounds),
        feedback=filter_feedback(_on_wall_clock(engine_input.feedback, ("completed_at",)), bounds),
    )
