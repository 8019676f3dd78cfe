from datetime import date, datetime

from focus_engine.aggregation import (
    build_feedback_index,
    effective_duration,
    filter_input_by_range,
    task_anchor_date,
)
from focus_engine.schema import AiSettings, Block, CheckIn, CompletionFeedback, EngineInput, Task


def _block(block_id, start, end, planned=60, actual=None):
    return Block(block_id, "u1", datetime.fromisoformat(start), datetime.fromisoformat(end), "work", planned, actual, True)


def _feedback(completed_at, block_id=None, task_id=None):
    return CompletionFeedback(
        completed_at=datetime.fromisoformat(completed_at),
        feeling="good",
        focus="yes",
        time_comparison="equal",
        block_id=block_id,
        task_id=task_id,
    )


def test_effective_duration_prefers_actual_minutes():
    assert effective_duration(_block("b1", "2025-03-03T08:00:00", "2025-03-03T09:00:00", 60, 45)) == 45
    assert effective_duration(_block("b2", "2025-03-03T08:00:00", "2025-03-03T09:00:00", 60)) == 60
    assert effective_duration(_block("b3", "2025-03-03T08:00:00", "2025-03-03T09:00:00", 60, 0)) == 0


def test_task_anchor_date_uses_due_date_then_creation():
    created = datetime(2025, 3, 1, 9)
    due = datetime(2025, 3, 4, 18)
    assert task_anchor_date(Task("t1", "u1", created, "study", due_date=due)) == due
    assert task_anchor_date(Task("t2", "u1", created, "study")) == created


def test_feedback_index_keeps_insertion_order_per_owner():
    first = _feedback("2025-03-03T10:00:00", block_id="b1")
    second = _feedback("2025-03-03T12:00:00", block_id="b1")
    on_task = _feedback("2025-03-03T13:00:00", task_id="t1")
    index = build_feedback_index([first, on_task, second])
    assert index.for_block("b1") == [first, second]
    assert index.for_task("t1") == [on_task]
    assert index.for_block("missing") == []


def test_filter_input_by_range_drops_records_outside_window():
    engine_input = EngineInput(
        blocks=[
            _block("inside", "2025-03-04T08:00:00", "2025-03-04T09:00:00"),
            _block("ends-inside", "2025-03-02T23:00:00", "2025-03-03T01:00:00"),
            _block("outside", "2025-03-12T08:00:00", "2025-03-12T09:00:00"),
        ],
        tasks=[
            Task("old", "u1", datetime(2025, 2, 1), "work"),
            Task("done-in-range", "u1", datetime(2025, 2, 1), "work", True, completed_at=datetime(2025, 3, 5, 10)),
        ],
        check_ins=[CheckIn("c1", "u1", date(2025, 3, 9), True), CheckIn("c2", "u1", date(2025, 3, 10), True)],
        feedback=[_feedback("2025-03-05T10:00:00", block_id="inside"), _feedback("2025-03-11T10:00:00")],
        settings=AiSettings(),
        range_from=datetime(2025, 3, 3, 15, 30),
        range_to=datetime(2025, 3, 9, 8),
    )
    filtered = filter_input_by_range(engine_input)

    assert filtered.range.start == datetime(2025, 3, 3)
    assert filtered.range.end == datetime(2025, 3, 9, 23, 59, 59, 999000)
    assert [b.id for b in filtered.blocks] == ["inside", "ends-inside"]
    assert [t.id for t in filtered.tasks] == ["done-in-range"]
    assert [c.id for c in filtered.check_ins] == ["c1"]
    assert len(filtered.feedback) == 1


def test_filter_input_by_range_accepts_reversed_bounds():
    engine_input = EngineInput([], [], [], [], AiSettings(), datetime(2025, 3, 9), datetime(2025, 3, 3))
    filtered = filter_input_by_range(engine_input)
    assert filtered.range.start == datetime(2025, 3, 3)
    assert filtered.range.end.date() == date(2025, 3, 9)
