from datetime import datetime, timedelta

from focus_engine.patterns import (
    compute_best_focus_slot,
    compute_patterns,
    compute_strongest_and_weakest_day,
    compute_time_estimation_bias,
    compute_top_categories,
)
from focus_engine.schema import Block, CompletionFeedback, Task
from focus_engine.timeutils import normalize_range

BOUNDS = normalize_range(datetime(2025, 3, 3), datetime(2025, 3, 9))


def _block(block_id, start, minutes, category="work", completed=True, planned=None, actual=None):
    start_at = datetime.fromisoformat(start)
    return Block(block_id, "u1", start_at, start_at + timedelta(minutes=minutes), category, planned or minutes, actual, completed)


def _feedback(feeling="good", focus="yes", comparison="equal", block_id=None, task_id=None):
    return CompletionFeedback(
        completed_at=datetime(2025, 3, 3, 22),
        feeling=feeling,
        focus=focus,
        time_comparison=comparison,
        block_id=block_id,
        task_id=task_id,
    )


def test_monday_work_block_example():
    blocks = [_block("b1", "2025-03-03T08:00:00", 120)]
    feedback = [_feedback(block_id="b1")]
    patterns = compute_patterns(blocks, [], feedback, BOUNDS)

    assert patterns.best_focus_slot == "08:00–10:00"
    assert patterns.day_pattern.strongest_day == "Lunes"
    assert patterns.day_pattern.weakest_day is None
    assert patterns.top_categories == ["Trabajo"]
    assert patterns.estimation_bias == []


def test_best_slot_is_none_without_completed_blocks():
    blocks = [_block("b1", "2025-03-03T08:00:00", 60, completed=False)]
    assert compute_best_focus_slot(blocks, []) is None
    assert compute_best_focus_slot([], []) is None


def test_best_slot_prefers_more_minutes_at_equal_quality():
    blocks = [_block("b1", "2025-03-03T08:00:00", 60), _block("b2", "2025-03-04T14:30:00", 90)]
    assert compute_best_focus_slot(blocks, []) == "14:00–16:00"


def test_best_slot_weights_feedback_quality():
    blocks = [_block("b1", "2025-03-03T08:00:00", 100), _block("b2", "2025-03-04T14:00:00", 80)]
    feedback = [
        _feedback(feeling="tired", focus="no", block_id="b1"),
        _feedback(feeling="excellent", focus="yes", block_id="b2"),
    ]
    assert compute_best_focus_slot(blocks, feedback) == "14:00–16:00"


def test_best_slot_ties_keep_first_seen_bucket():
    blocks = [_block("b1", "2025-03-03T14:00:00", 60), _block("b2", "2025-03-04T08:00:00", 60)]
    assert compute_best_focus_slot(blocks, []) == "14:00–16:00"


def test_day_pattern_is_empty_without_activity():
    result = compute_strongest_and_weakest_day([], [], BOUNDS)
    assert result.strongest_day is None
    assert result.weakest_day is None
    assert len(result.day_scores) == 7


def test_single_active_day_has_no_weakest_day():
    result = compute_strongest_and_weakest_day([_block("b1", "2025-03-05T10:00:00", 30)], [], BOUNDS)
    assert result.strongest_day == "Miércoles"
    assert result.weakest_day is None


def test_strongest_and_weakest_day_scores():
    blocks = [_block("b1", "2025-03-03T08:00:00", 120), _block("b2", "2025-03-05T08:00:00", 30)]
    result = compute_strongest_and_weakest_day(blocks, [], BOUNDS)
    assert result.strongest_day == "Lunes"
    assert result.weakest_day == "Miércoles"
    assert result.day_scores[0].score == 28
    assert result.day_scores[2].score == 13


def test_completion_rate_falls_back_to_completed_count():
    task = Task("t1", "u1", datetime(2025, 2, 20), "work", True, completed_at=datetime(2025, 3, 6, 10))
    result = compute_strongest_and_weakest_day([], [task], BOUNDS)
    thursday = result.day_scores[3]
    assert thursday.tasks_created_or_due == 0
    assert thursday.tasks_completed == 1
    assert thursday.completion_rate == 1.0
    assert result.strongest_day == "Jueves"


def test_top_categories_ranking():
    blocks = [
        _block("b1", "2025-03-03T08:00:00", 60, category="work"),
        _block("b2", "2025-03-04T08:00:00", 60, category="study", completed=False),
    ]
    tasks = [
        Task("t1", "u1", datetime(2025, 3, 3), "health", True),
        Task("t2", "u1", datetime(2025, 3, 3), "personal", False),
    ]
    feedback = [_feedback(block_id="b1")]

    labels, scores = compute_top_categories(blocks, tasks, feedback)
    assert labels == ["Trabajo", "Salud", "Estudio"]
    assert [s.category for s in scores] == ["work", "health", "study", "personal"]
    assert scores[0].sample_size == 2
    assert compute_top_categories(blocks, tasks, feedback) == (labels, scores)


def test_top_categories_empty():
    assert compute_top_categories([], [], []) == ([], [])


def test_time_estimation_bias_mixes_actuals_and_feedback():
    blocks = [
        _block("b1", "2025-03-03T08:00:00", 60, category="work", actual=90),
        _block("b2", "2025-03-04T08:00:00", 60, category="creative", actual=10, completed=False),
    ]
    tasks = [Task("t1", "u1", datetime(2025, 3, 3), "study", True)]
    feedback = [
        _feedback(comparison="less", task_id="t1"),
        _feedback(comparison="equal", block_id="b1"),
        _feedback(comparison="more", block_id="unknown"),
    ]

    biases = compute_time_estimation_bias(blocks, tasks, feedback)
    assert [(b.category, b.bias_percent) for b in biases] == [("work", 50.0), ("study", -15.0)]


def test_best_slot_equal_scores_prefer_more_raw_minutes():
    blocks = [_block("b1", "2025-03-03T08:00:00", 70), _block("b2", "2025-03-04T14:00:00", 100)]
    feedback = [
        _feedback(feeling="excellent", focus="yes", block_id="b1"),
        _feedback(feeling="tired", focus="no", block_id="b2"),
    ]
    assert compute_best_focus_slot(blocks, feedback) == "14:00–16:00"
