from focus_engine.insights import build_profile_insights
from focus_engine.schema import AiSettings, CategoryBias, DayPatternResult, PatternResults


def _patterns(best_slot=None, strongest=None, weakest=None, top=None, bias=None):
    return PatternResults(
        best_focus_slot=best_slot,
        day_pattern=DayPatternResult(strongest_day=strongest, weakest_day=weakest),
        top_categories=top or [],
        category_scores=[],
        estimation_bias=bias or [],
    )


def _rich_patterns():
    return _patterns(
        best_slot="08:00–10:00",
        strongest="Lunes",
        weakest="Viernes",
        top=["Trabajo", "Estudio"],
        bias=[CategoryBias("study", 20.0)],
    )


def test_recommendation_count_follows_intervention_level():
    patterns = _rich_patterns()
    for level, expected in (("high", 5), ("medium", 4), ("low", 3)):
        settings = AiSettings(intervention_level=level, daily_reflection_question_enabled=False)
        recs = build_profile_insights(patterns, settings)["recommendations"]
        assert len(recs) == expected


def test_candidates_keep_priority_order():
    settings = AiSettings(intervention_level="high", daily_reflection_question_enabled=False)
    titles = [rec["title"] for rec in build_profile_insights(_rich_patterns(), settings)["recommendations"]]
    assert titles == [
        "Protegé tu franja fuerte",
        "Planifica el día pico",
        "Apalancá lo que ya funciona",
        "Protegé el día flojo",
        "Ajustá tiempos planificados",
    ]


def test_fallbacks_fill_empty_patterns():
    insights = build_profile_insights(_patterns(), AiSettings(intervention_level="low"))
    assert insights["best_focus_slot"] is None
    assert insights["top_categories"] == []
    assert [rec["title"] for rec in insights["recommendations"]] == [
        "Anclaje de cierre",
        "Bloques sin notificaciones",
        "Agrupá tareas similares",
    ]


def test_reflection_nudge_when_disabled():
    settings = AiSettings(intervention_level="low", daily_reflection_question_enabled=False)
    titles = [rec["title"] for rec in build_profile_insights(_patterns(), settings)["recommendations"]]
    assert titles[0] == "Activa la reflexión rápida"
    assert len(titles) == 3


def test_small_bias_is_not_recommended_and_negative_bias_compacts():
    settings = AiSettings(intervention_level="high")
    small = build_profile_insights(_patterns(bias=[CategoryBias("work", -5.0)]), settings)
    assert all("tiempo" not in rec["title"] for rec in small["recommendations"])

    negative = build_profile_insights(_patterns(bias=[CategoryBias("work", -12.5)]), settings)
    first = negative["recommendations"][0]
    assert first["title"] == "Compactá cuando sobra tiempo"
    assert "Trabajo" in first["description"]
    assert "~12.5%" in first["description"]
