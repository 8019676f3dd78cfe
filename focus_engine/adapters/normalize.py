"""Field parsing and value normalization shared by the input adapters."""

from __future__ import annotations

from datetime import date, datetime
from typing import Any

from focus_engine.schema import (
    CATEGORIES,
    FEELINGS,
    FOCUS_VALUES,
    INTERRUPTION_CAUSES,
    INTERVENTION_LEVELS,
    TIME_COMPARISONS,
    TONES,
    AiSettings,
)
from focus_engine.timeutils import to_wall_clock

_TRUE_VALUES = {"1", "true", "yes", "y"}
_FALSE_VALUES = {"0", "false", "no", "n", ""}


def require(record: dict, fields: tuple[str, ...], where: str) -> None:
    if not isinstance(record, dict):
        raise ValueError(f"{where}: expected an object, got {type(record).__name__}")
    missing = [name for name in fields if record.get(name) in (None, "")]
    if missing:
        raise ValueError(f"{where}: missing required fields {missing}")


def parse_timestamp(value: Any, where: str, field_name: str) -> datetime:
    """Parse an ISO timestamp onto the naive wall clock it was written in."""

    if isinstance(value, datetime):
        return to_wall_clock(value)
    text = str(value).strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except Exception as exc:  # noqa: BLE001
        raise ValueError(f"{where}: malformed {field_name}") from exc
    return to_wall_clock(parsed)


def parse_optional_timestamp(value: Any, where: str, field_name: str) -> datetime | None:
    if value in (None, ""):
        return None
    return parse_timestamp(value, where, field_name)


def parse_date(value: Any, where: str, field_name: str) -> date:
    if isinstance(value, date) and not isinstance(value, datetime):
        return value
    try:
        return date.fromisoformat(str(value).strip()[:10])
    except Exception as exc:  # noqa: BLE001
        raise ValueError(f"{where}: malformed {field_name}") from exc


def parse_optional_minutes(value: Any, where: str, field_name: str) -> float | None:
    if value in (None, ""):
        return None
    try:
        return float(value)
    except Exception as exc:  # noqa: BLE001
        raise ValueError(f"{where}: invalid {field_name}") from exc


def parse_bool(value: Any, where: str, field_name: str) -> bool:
    if isinstance(value, bool):
        return value
    if value is None:
        return False
    text = str(value).strip().lower()
    if text in _TRUE_VALUES:
        return True
    if text in _FALSE_VALUES:
        return False
    raise ValueError(f"{where}: invalid {field_name} '{value}'")


def parse_category(value: Any, where: str) -> str:
    if value in (None, ""):
        return "other"
    category = str(value).strip().lower()
    if category not in CATEGORIES:
        raise ValueError(f"{where}: invalid category '{category}'")
    return category


def normalize_feeling(value: Any) -> str:
    return value if value in FEELINGS else "neutral"


def normalize_focus(value: Any) -> str:
    return value if value in FOCUS_VALUES else "partial"


def normalize_time_comparison(value: Any) -> str:
    return value if value in TIME_COMPARISONS else "equal"


def normalize_interruption_cause(value: Any) -> str | None:
    if value == "self":
        return "self-distraction"
    if value in INTERRUPTION_CAUSES and value != "other":
        return value
    return None


def parse_settings(payload: dict | None) -> AiSettings:
    """Settings with unknown values replaced by defaults."""

    payload = payload or {}
    defaults = AiSettings()
    tone = payload.get("tone")
    level = payload.get("intervention_level")
    reflection = payload.get("daily_reflection_question_enabled", defaults.daily_reflection_question_enabled)
    return AiSettings(
        tone=tone if tone in TONES else defaults.tone,
        intervention_level=level if level in INTERVENTION_LEVELS else defaults.intervention_level,
        daily_reflection_question_enabled=parse_bool(reflection, "settings", "daily_reflection_question_enabled"),
    )


def span_minutes(start: datetime, end: datetime) -> float:
    return max(0.0, (end - start).total_seconds() / 60.0)
