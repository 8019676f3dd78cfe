"""Date, label and small numeric helpers."""

from __future__ import annotations

import math
from datetime import date, datetime, time, timedelta

from focus_engine.schema import RangeBounds

DAY_NAMES = ("Lunes", "Martes", "Miércoles", "Jueves", "Viernes", "Sábado", "Domingo")
MONTH_NAMES = ("Ene", "Feb", "Mar", "Abr", "May", "Jun", "Jul", "Ago", "Sep", "Oct", "Nov", "Dic")

_CATEGORY_LABELS = {
    "study": "Estudio",
    "work": "Trabajo",
    "creative": "Creatividad",
    "health": "Salud",
    "personal": "Personal",
}

_FEELING_VALUES = {
    "excellent": 5,
    "good": 4,
    "neutral": 3,
    "tired": 2,
    "frustrated": 1,
}

_MINUTES_PER_DAY = 24 * 60


def to_wall_clock(value: datetime) -> datetime:
    """Drop the offset of an aware timestamp, keeping its local wall-clock reading."""

    if value.tzinfo is None:
        return value
    return value.replace(tzinfo=None)


def start_of_day(value: datetime) -> datetime:
    return value.replace(hour=0, minute=0, second=0, microsecond=0)


def end_of_day(value: datetime) -> datetime:
    return value.replace(hour=23, minute=59, second=59, microsecond=999000)


def normalize_range(range_from: datetime, range_to: datetime) -> RangeBounds:
    """Snap a pair of instants to whole days, swapping them if reversed."""

    range_from = to_wall_clock(range_from)
    range_to = to_wall_clock(range_to)
    if range_to < range_from:
        range_from, range_to = range_to, range_from
    return RangeBounds(start=start_of_day(range_from), end=end_of_day(range_to))


def previous_week_range(now: datetime) -> tuple[datetime, datetime]:
    """Monday 00:00 to Sunday 23:59 of the week before ``now``."""

    this_monday = start_of_day(now) - timedelta(days=now.weekday())
    monday = this_monday - timedelta(days=7)
    return monday, end_of_day(monday + timedelta(days=6))


def is_within_range(value: datetime, bounds: RangeBounds) -> bool:
    return bounds.start <= value <= bounds.end


def date_to_datetime(value: date, like: datetime) -> datetime:
    """Midnight of ``value`` in the same timezone as ``like``."""

    return datetime.combine(value, time(0, 0), tzinfo=like.tzinfo)


def day_name_from_index(day_index: int) -> str:
    """Monday-first weekday name."""

    return DAY_NAMES[day_index % 7]


def format_slot_label(start_minutes: int, slot_minutes: int) -> str:
    end_minutes = (start_minutes + slot_minutes) % _MINUTES_PER_DAY
    return f"{_format_minutes(start_minutes)}–{_format_minutes(end_minutes)}"


def format_week_range_label(range_from: datetime, range_to: datetime) -> str:
    start_month = MONTH_NAMES[range_from.month - 1]
    end_month = MONTH_NAMES[range_to.month - 1]
    if start_month == end_month:
        return f"{range_from.day}-{range_to.day} {start_month}"
    return f"{range_from.day} {start_month}-{range_to.day} {end_month}"


def humanize_category(category: str) -> str:
    return _CATEGORY_LABELS.get(category, "Otros")


def average(values: list[float]) -> float | None:
    if not values:
        return None
    return sum(values) / len(values)


def feeling_value(feeling: str) -> int:
    """Map a feeling to 1..5; unknown values count as neutral."""

    return _FEELING_VALUES.get(feeling, 3)


def clamp(value, lower, upper):
    return max(lower, min(upper, value))


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _format_minutes(total_minutes: int) -> str:
    minutes = total_minutes % _MINUTES_PER_DAY
    return f"{minutes // 60:02d}:{minutes % 60:02d}"
