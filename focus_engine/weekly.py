"""Weekly narrative summary."""

from __future__ import annotations

from collections import Counter

from focus_engine.aggregation import effective_duration, task_anchor_date
from focus_engine.insights import desired_item_count
from focus_engine.schema import (
    AiSettings,
    Block,
    CategoryBias,
    CompletionFeedback,
    PatternResults,
    RangeBounds,
    Task,
)
from focus_engine.timeutils import format_week_range_label, humanize_category, is_within_range

SUMMARY_BIAS_THRESHOLD = 12
LOWLIGHT_BIAS_THRESHOLD = 15
SUGGESTION_BIAS_THRESHOLD = 10
TARGET_COMPLETION_PERCENT = 75
MIN_SUGGESTIONS = 2

_INTERRUPTION_LABELS = {
    "notifications": "notificaciones",
    "people": "interrupciones de personas",
    "fatigue": "fatiga",
    "self-distraction": "auto-distracciones",
}

_FALLBACK_SUGGESTIONS = (
    "Cierra cada bloque con una nota de interrupciones y cómo las evitaste.",
    "Agrupa tareas administrativas en un solo bloque para liberar las franjas de mayor foco.",
    "Prepara tu bloque inicial con materiales listos la noche anterior.",
    "Revisa tus categorías fuertes al final de la semana y agenda dos bloques similares para la próxima.",
)


def build_weekly_summary(
    blocks: list[Block],
    tasks: list[Task],
    feedback: list[CompletionFeedback],
    bounds: RangeBounds,
    patterns: PatternResults,
    settings: AiSettings,
) -> dict:
    """Totals, highlight, optional lowlight and suggestions for one range.

    The ``lowlight`` key is left out entirely when nothing qualifies.
    """

    completed_blocks = [block for block in blocks if block.completed]
    total_focus_minutes = sum(effective_duration(block) for block in completed_blocks)

    completed_tasks = sum(
        1 for task in tasks if task.completed and task.completed_at is not None and is_within_range(task.completed_at, bounds)
    )
    anchored_tasks = sum(1 for task in tasks if is_within_range(task_anchor_date(task), bounds))
    completion_rate_percent = round(completed_tasks / anchored_tasks * 100, 1) if anchored_tasks else 0

    top_cause = top_interruption_cause(feedback)
    bias = next(
        (item for item in patterns.estimation_bias if abs(item.bias_percent) >= SUMMARY_BIAS_THRESHOLD),
        None,
    )

    summary = {
        "week_range_label": format_week_range_label(bounds.start, bounds.end),
        "total_focus_minutes": total_focus_minutes,
        "completed_blocks": len(completed_blocks),
        "completed_tasks": completed_tasks,
        "completion_rate_percent": completion_rate_percent,
        "highlight": _pick_highlight(patterns),
    }
    lowlight = _pick_lowlight(patterns, top_cause, bias)
    if lowlight:
        summary["lowlight"] = lowlight
    summary["suggestions"] = _build_suggestions(patterns, top_cause, completion_rate_percent, bias, settings)
    return summary


def top_interruption_cause(feedback: list[CompletionFeedback]) -> str | None:
    """Most frequent interruption cause; unset causes count as ``other``."""

    causes = Counter(item.interruption_cause or "other" for item in feedback if item.had_interruptions)
    if not causes:
        return None
    return causes.most_common(1)[0][0]


def humanize_interruption_cause(cause: str) -> str:
    return _INTERRUPTION_LABELS.get(cause, "otras causas")


def _pick_highlight(patterns: PatternResults) -> str:
    if patterns.best_focus_slot:
        return f"Bloques más sólidos entre {patterns.best_focus_slot}."
    if patterns.top_categories:
        return f"Lo mejor de la semana vino de {patterns.top_categories[0]}."
    if patterns.day_pattern.strongest_day:
        return f"Mejor día: {patterns.day_pattern.strongest_day}."
    return "Semana con progreso estable."


def _pick_lowlight(patterns: PatternResults, top_cause: str | None, bias: CategoryBias | None) -> str | None:
    if patterns.day_pattern.weakest_day:
        return f"Día flojo: {patterns.day_pattern.weakest_day}."
    if top_cause:
        return f"Interrupciones frecuentes por {humanize_interruption_cause(top_cause)}."
    if bias is not None and abs(bias.bias_percent) >= LOWLIGHT_BIAS_THRESHOLD:
        direction = "subestimación" if bias.bias_percent > 0 else "sobreestimación"
        return f"Ajusta tus tiempos de {humanize_category(bias.category)} ({direction} de ~{abs(bias.bias_percent)}%)."
    return None


def _build_suggestions(
    patterns: PatternResults,
    top_cause: str | None,
    completion_rate_percent: float,
    bias: CategoryBias | None,
    settings: AiSettings,
) -> list[str]:
    desired = desired_item_count(settings)
    suggestions: list[str] = []

    if patterns.best_focus_slot:
        suggestions.append(
            f"Agenda bloques exigentes entre {patterns.best_focus_slot} y protegé esa ventana de distracciones."
        )

    if patterns.day_pattern.weakest_day:
        suggestions.append(
            f"Define {patterns.day_pattern.weakest_day} como día de tareas ligeras o repaso y mové lo crítico a tu día fuerte."
        )

    if top_cause:
        suggestions.append(
            f"Arma un protocolo simple contra {humanize_interruption_cause(top_cause)} (modo silencio, avisos previos, puerta cerrada)."
        )

    if bias is not None and abs(bias.bias_percent) >= SUGGESTION_BIAS_THRESHOLD:
        label = humanize_category(bias.category)
        magnitude = abs(bias.bias_percent)
        if bias.bias_percent > 0:
            suggestions.append(f"Sumá ~{magnitude}% al plan de {label} para llegar con aire.")
        else:
            suggestions.append(f"Reducí la duración planificada de {label} en ~{magnitude}% y mantené la cadencia.")

    if completion_rate_percent < TARGET_COMPLETION_PERCENT:
        suggestions.append("Recorta la entrada de tareas nuevas hasta subir tu tasa de cierre por encima del 75%.")

    if not settings.daily_reflection_question_enabled:
        suggestions.append("Activa la pregunta diaria de reflexión para capturar contexto y ajustar tus planes rápido.")

    for item in _FALLBACK_SUGGESTIONS:
        if len(suggestions) >= desired:
            break
        if item not in suggestions:
            suggestions.append(item)

    return suggestions[: max(MIN_SUGGESTIONS, desired)]
