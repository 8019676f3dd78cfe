from datetime import datetime

import pytest

from focus_engine.patterns import compute_focus_heatmap
from focus_engine.schema import Block

RANGE_FROM = datetime(2025, 3, 3)
RANGE_TO = datetime(2025, 3, 9)


def _block(start, end, planned, actual=None, completed=True):
    return Block(
        "b1",
        "u1",
        datetime.fromisoformat(start),
        datetime.fromisoformat(end),
        "work",
        planned,
        actual,
        completed,
    )


def _total(heatmap):
    return sum(sum(row) for row in heatmap.matrix)


def test_empty_heatmap_has_fixed_labels():
    heatmap = compute_focus_heatmap([], RANGE_FROM, RANGE_TO)
    assert heatmap.days == ["Lun", "Mar", "Mié", "Jue", "Vie", "Sáb", "Dom"]
    assert len(heatmap.slots) == 9
    assert heatmap.slots[0] == "06:00–08:00"
    assert heatmap.slots[-1] == "22:00–00:00"
    assert heatmap.matrix == [[0.0] * 9 for _ in range(7)]


def test_block_inside_one_slot_is_conserved():
    heatmap = compute_focus_heatmap([_block("2025-03-03T08:00:00", "2025-03-03T10:00:00", 120)], RANGE_FROM, RANGE_TO)
    assert heatmap.matrix[0][1] == 120
    assert _total(heatmap) == 120


def test_actual_duration_scales_the_wall_clock_span():
    heatmap = compute_focus_heatmap(
        [_block("2025-03-05T10:00:00", "2025-03-05T12:00:00", 120, actual=60)], RANGE_FROM, RANGE_TO
    )
    assert heatmap.matrix[2][2] == 60
    assert _total(heatmap) == 60


def test_block_spanning_two_slots_is_split():
    heatmap = compute_focus_heatmap([_block("2025-03-04T09:00:00", "2025-03-04T11:00:00", 120)], RANGE_FROM, RANGE_TO)
    assert heatmap.matrix[1][1] == 60
    assert heatmap.matrix[1][2] == 60


def test_block_crossing_midnight_drops_minutes_before_first_slot():
    heatmap = compute_focus_heatmap([_block("2025-03-07T23:00:00", "2025-03-08T01:00:00", 120)], RANGE_FROM, RANGE_TO)
    assert heatmap.matrix[4][8] == 60
    assert _total(heatmap) == 60


def test_block_is_clamped_to_range_start():
    heatmap = compute_focus_heatmap([_block("2025-03-02T23:00:00", "2025-03-03T07:00:00", 480)], RANGE_FROM, RANGE_TO)
    assert heatmap.matrix[0][0] == pytest.approx(60 * 480 / 420)
    assert heatmap.matrix[6] == [0.0] * 9


def test_incomplete_and_zero_duration_blocks_are_ignored():
    blocks = [
        _block("2025-03-03T08:00:00", "2025-03-03T10:00:00", 120, completed=False),
        _block("2025-03-03T12:00:00", "2025-03-03T14:00:00", 120, actual=0),
        _block("2025-03-20T08:00:00", "2025-03-20T10:00:00", 120),
    ]
    assert _total(compute_focus_heatmap(blocks, RANGE_FROM, RANGE_TO)) == 0
