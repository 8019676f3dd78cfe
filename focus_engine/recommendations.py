"""Area-grouped recommendations driven by the extended metrics."""

from __future__ import annotations

from focus_engine.timeutils import humanize_category, round_half_up


def build_engine_recommendations(
    metrics: dict,
    best_focus_slot: str | None,
    strongest_day: str | None,
) -> dict:
    return {
        "planning": build_planning_recommendations(metrics, best_focus_slot, strongest_day),
        "interruptions": build_interruption_recommendations(metrics),
        "recovery": build_recovery_recommendations(metrics),
        "habits": build_habit_recommendations(metrics),
    }


def build_planning_recommendations(metrics: dict, best_focus_slot: str | None, strongest_day: str | None) -> list[dict]:
    recs = []
    abandoned = metrics["abandonment"]["total_abandoned"]
    if abandoned > 0:
        recs.append(
            {
                "title": "Reprograma los bloques pendientes",
                "description": (
                    f"Detectamos {abandoned} bloques sin completar. Llévalos a tu mejor franja "
                    f"{best_focus_slot or 'de mayor energía'} y al día {strongest_day or 'con menos carga'}."
                ),
                "tag": "plan",
            }
        )
    if not metrics["consistency"]["stable"]:
        recs.append(
            {
                "title": "Sube consistencia",
                "description": "Tu variabilidad de foco entre días es alta. Intenta reservar al menos 60 minutos diarios en la misma franja.",
                "tag": "consistencia",
            }
        )
    if metrics["deep_focus"]["score"] < 0.4:
        recs.append(
            {
                "title": "Practica bloques largos",
                "description": "Pocos bloques alcanzan foco profundo. Agenda 1-2 bloques >40min en tu mejor horario y protégelos de interrupciones.",
                "tag": "deep-focus",
            }
        )
    return recs


def build_interruption_recommendations(metrics: dict) -> list[dict]:
    recs = []
    slots = sorted(metrics["abandonment"]["by_slot"], key=lambda slot: slot["count"], reverse=True)
    if slots and slots[0]["count"] > 1:
        recs.append(
            {
                "title": "Protege tu horario vulnerable",
                "description": f"Hay más abandono/interrupciones en {slots[0]['slot_label']}. Activa modo foco o cambia tareas exigentes a otro horario.",
                "tag": "interrupciones",
            }
        )
    split = metrics["planned_vs_spontaneous"]
    if split["planned_minutes"] + split["spontaneous_minutes"] > 0 and split["planned_ratio"] < 0.4:
        recs.append(
            {
                "title": "Planifica antes de empezar",
                "description": "Gran parte de tu foco es espontáneo. Define 2-3 bloques clave el día anterior para reducir interrupciones.",
                "tag": "planificacion",
            }
        )
    return recs


def build_recovery_recommendations(metrics: dict) -> list[dict]:
    recs = []
    consistency = metrics["consistency"]
    if consistency["days_above_threshold"] >= 5 and consistency["active_days"] >= 6:
        recs.append(
            {
                "title": "Agenda descanso activo",
                "description": "Llevas muchos días activos. Programa un bloque liviano o de recuperación para evitar sobreesfuerzo.",
                "tag": "recuperacion",
            }
        )
    if any(point["score"] < 0 for point in metrics["energy_curve"]):
        recs.append(
            {
                "title": "Cuida tus horas bajas",
                "description": "Identificamos horas con energía negativa. Ubica pausas o tareas triviales ahí.",
                "tag": "energia",
            }
        )
    return recs


def build_habit_recommendations(metrics: dict) -> list[dict]:
    recs = []
    by_category = metrics["by_category"]
    weakest = min(by_category, key=lambda item: item["completion_rate"]) if by_category else None
    if weakest is not None and weakest["completion_rate"] < 0.5:
        minutes = max(15, round_half_up(weakest["average_duration_minutes"] or 20))
        recs.append(
            {
                "title": f"Micro-hábito para {humanize_category(weakest['category'])}",
                "description": f"Empieza con bloques cortos de {minutes} minutos en esa categoría para construir racha.",
                "tag": "habitos",
            }
        )
    if metrics["deep_focus"]["score"] > 0.7:
        recs.append(
            {
                "title": "Aprovecha tu foco profundo",
                "description": "Tus bloques largos funcionan bien. Usa esa ventana para tareas estratégicas y aprende tu duración ideal.",
                "tag": "fortaleza",
            }
        )
    return recs
