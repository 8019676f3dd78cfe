from datetime import datetime

from focus_engine.schema import (
    AiSettings,
    Block,
    CategoryBias,
    CompletionFeedback,
    DayPatternResult,
    PatternResults,
    Task,
)
from focus_engine.timeutils import normalize_range
from focus_engine.weekly import build_weekly_summary, top_interruption_cause

BOUNDS = normalize_range(datetime(2025, 3, 3), datetime(2025, 3, 9))


def _patterns(best_slot=None, top=None, strongest=None, weakest=None, bias=None):
    return PatternResults(
        best_focus_slot=best_slot,
        day_pattern=DayPatternResult(strongest_day=strongest, weakest_day=weakest),
        top_categories=top or [],
        category_scores=[],
        estimation_bias=bias or [],
    )


def _interruption(cause):
    return CompletionFeedback(
        completed_at=datetime(2025, 3, 4, 10),
        feeling="neutral",
        focus="partial",
        time_comparison="equal",
        had_interruptions=True,
        interruption_cause=cause,
    )


def test_empty_week_has_no_lowlight():
    summary = build_weekly_summary([], [], [], BOUNDS, _patterns(), AiSettings())
    assert summary["week_range_label"] == "3-9 Mar"
    assert summary["total_focus_minutes"] == 0
    assert summary["completion_rate_percent"] == 0
    assert summary["highlight"] == "Semana con progreso estable."
    assert "lowlight" not in summary
    assert len(summary["suggestions"]) == 4
    assert summary["suggestions"][0].startswith("Recorta la entrada")


def test_totals_and_completion_rate():
    blocks = [
        Block("b1", "u1", datetime(2025, 3, 3, 8), datetime(2025, 3, 3, 10), "work", 120, None, True),
        Block("b2", "u1", datetime(2025, 3, 4, 8), datetime(2025, 3, 4, 9), "work", 60, 45, True),
        Block("b3", "u1", datetime(2025, 3, 5, 8), datetime(2025, 3, 5, 9), "work", 60, None, False),
    ]
    tasks = [
        Task("t1", "u1", datetime(2025, 3, 3), "work", True, completed_at=datetime(2025, 3, 3, 12)),
        Task("t2", "u1", datetime(2025, 3, 4), "work", False),
        Task("t3", "u1", datetime(2025, 3, 1), "work", False, due_date=datetime(2025, 3, 6)),
    ]
    summary = build_weekly_summary(blocks, tasks, [], BOUNDS, _patterns(), AiSettings())
    assert summary["total_focus_minutes"] == 165
    assert summary["completed_blocks"] == 2
    assert summary["completed_tasks"] == 1
    assert summary["completion_rate_percent"] == 33.3


def test_highlight_and_lowlight_priority():
    patterns = _patterns(best_slot="08:00–10:00", top=["Trabajo"], strongest="Lunes", weakest="Viernes")
    summary = build_weekly_summary([], [], [_interruption("people")], BOUNDS, patterns, AiSettings())
    assert summary["highlight"] == "Bloques más sólidos entre 08:00–10:00."
    assert summary["lowlight"] == "Día flojo: Viernes."

    summary = build_weekly_summary([], [], [], BOUNDS, _patterns(top=["Salud"]), AiSettings())
    assert summary["highlight"] == "Lo mejor de la semana vino de Salud."


def test_lowlight_uses_interruption_cause_defaulting_to_other():
    feedback = [_interruption(None), _interruption("people"), _interruption(None)]
    assert top_interruption_cause(feedback) == "other"
    summary = build_weekly_summary([], [], feedback, BOUNDS, _patterns(), AiSettings())
    assert summary["lowlight"] == "Interrupciones frecuentes por otras causas."


def test_lowlight_uses_large_estimation_bias():
    patterns = _patterns(bias=[CategoryBias("work", 20.0)])
    summary = build_weekly_summary([], [], [], BOUNDS, patterns, AiSettings())
    assert summary["lowlight"] == "Ajusta tus tiempos de Trabajo (subestimación de ~20.0%)."

    patterns = _patterns(bias=[CategoryBias("work", 13.0)])
    summary = build_weekly_summary([], [], [], BOUNDS, patterns, AiSettings())
    assert "lowlight" not in summary
    assert "Sumá ~13.0% al plan de Trabajo para llegar con aire." in summary["suggestions"]


def test_suggestions_are_truncated_by_intervention_level():
    patterns = _patterns(best_slot="08:00–10:00", weakest="Viernes", bias=[CategoryBias("study", -20.0)])
    feedback = [_interruption("notifications")]
    settings = AiSettings(intervention_level="low", daily_reflection_question_enabled=False)
    summary = build_weekly_summary([], [], feedback, BOUNDS, patterns, settings)
    assert len(summary["suggestions"]) == 3
    assert summary["suggestions"][2].startswith("Arma un protocolo simple contra notificaciones")

    summary = build_weekly_summary([], [], feedback, BOUNDS, patterns, AiSettings(intervention_level="high"))
    assert len(summary["suggestions"]) == 5


def test_week_label_across_months():
    bounds = normalize_range(datetime(2025, 2, 24), datetime(2025, 3, 2))
    summary = build_weekly_summary([], [], [], bounds, _patterns(), AiSettings())
    assert summary["week_range_label"] == "24 Feb-2 Mar"
