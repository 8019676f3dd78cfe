"""Profile insights: detected patterns plus ranked recommendations."""

from __future__ import annotations

from focus_engine.schema import AiSettings, PatternResults
from focus_engine.timeutils import humanize_category

BIAS_RECOMMENDATION_THRESHOLD = 8

_FALLBACK_RECOMMENDATIONS = (
    {
        "title": "Anclaje de cierre",
        "description": "Escribí una línea al terminar cada bloque con lo que funcionó o falló para acelerar tu curva de aprendizaje.",
    },
    {
        "title": "Bloques sin notificaciones",
        "description": "Definí un modo foco corto (30-45 min) con notificaciones silenciadas y avisos claros a tu entorno.",
    },
    {
        "title": "Agrupá tareas similares",
        "description": "Apila tareas cortas de la misma categoría para reducir el costo de cambio de contexto.",
    },
    {
        "title": "Pulso de energía",
        "description": "Elegí el primer bloque del día para algo que te recargue en menos de 45 minutos.",
    },
)


def desired_item_count(settings: AiSettings) -> int:
    """How many recommendations or suggestions the intervention level asks for."""

    if settings.intervention_level == "high":
        return 5
    if settings.intervention_level == "medium":
        return 4
    return 3


def build_profile_insights(patterns: PatternResults, settings: AiSettings) -> dict:
    """Package the pattern bundle with a settings-aware recommendation list."""

    return {
        "best_focus_slot": patterns.best_focus_slot,
        "strongest_day": patterns.day_pattern.strongest_day,
        "weakest_day": patterns.day_pattern.weakest_day,
        "top_categories": list(patterns.top_categories),
        "recommendations": build_recommendations(patterns, settings),
    }


def build_recommendations(patterns: PatternResults, settings: AiSettings) -> list[dict]:
    desired = desired_item_count(settings)
    recommendations: list[dict] = []

    if patterns.best_focus_slot:
        recommendations.append(
            {
                "title": "Protegé tu franja fuerte",
                "description": f"Concentrá tus bloques más exigentes entre {patterns.best_focus_slot}, donde mostrás mejor calidad de foco.",
            }
        )

    if patterns.day_pattern.strongest_day:
        recommendations.append(
            {
                "title": "Planifica el día pico",
                "description": f"Reservá decisiones y tareas estratégicas para {patterns.day_pattern.strongest_day}, tu día más consistente.",
            }
        )

    if patterns.top_categories:
        recommendations.append(
            {
                "title": "Apalancá lo que ya funciona",
                "description": f"Sostené {patterns.top_categories[0]} como columna vertebral de tu semana y duplicá bloques cuando necesites avanzar rápido.",
            }
        )

    if patterns.day_pattern.weakest_day:
        recommendations.append(
            {
                "title": "Protegé el día flojo",
                "description": f"Usá {patterns.day_pattern.weakest_day} para descanso activo o tareas livianas y reducí compromisos de foco largo.",
            }
        )

    bias = next(
        (item for item in patterns.estimation_bias if abs(item.bias_percent) >= BIAS_RECOMMENDATION_THRESHOLD),
        None,
    )
    if bias is not None:
        label = humanize_category(bias.category)
        magnitude = abs(bias.bias_percent)
        if bias.bias_percent > 0:
            recommendations.append(
                {
                    "title": "Ajustá tiempos planificados",
                    "description": f"Sueles subestimar {label} en ~{magnitude}%. Proba extender la duración típica de esos bloques.",
                }
            )
        else:
            recommendations.append(
                {
                    "title": "Compactá cuando sobra tiempo",
                    "description": f"{label} suele terminar ~{magnitude}% antes de lo previsto. Acortá la planificación o encadená un bloque breve al cierre.",
                }
            )

    if not settings.daily_reflection_question_enabled:
        recommendations.append(
            {
                "title": "Activa la reflexión rápida",
                "description": "Habilitá la pregunta diaria para capturar aprendizajes y ajustar tus bloques sin fricción.",
            }
        )

    titles = {item["title"] for item in recommendations}
    for item in _FALLBACK_RECOMMENDATIONS:
        if len(recommendations) >= desired:
            break
        if item["title"] not in titles:
            recommendations.append(dict(item))
            titles.add(item["title"])

    return recommendations[:desired]
