"""JSON adapter for a user's calendar history payload."""

from __future__ import annotations

import json
import logging
from datetime import datetime

from focus_engine.adapters.normalize import (
    normalize_feeling,
    normalize_focus,
    normalize_interruption_cause,
    normalize_time_comparison,
    parse_bool,
    parse_category,
    parse_date,
    parse_optional_minutes,
    parse_optional_timestamp,
    parse_settings,
    parse_timestamp,
    require,
    span_minutes,
)
from focus_engine.schema import Block, CheckIn, CompletionFeedback, EngineInput, Task
from focus_engine.timeutils import previous_week_range

logger = logging.getLogger(__name__)

_DEFAULT_USER = "local"


def _parse_block(item: dict, index: int) -> Block:
    where = f"Block {index}"
    require(item, ("id", "start", "end"), where)
    start = parse_timestamp(item["start"], where, "start")
    end = parse_timestamp(item["end"], where, "end")
    planned = parse_optional_minutes(item.get("planned_duration_minutes"), where, "planned_duration_minutes")
    return Block(
        id=str(item["id"]).strip(),
        user_id=str(item.get("user_id") or _DEFAULT_USER),
        start=start,
        end=end,
        category=parse_category(item.get("category"), where),
        planned_duration_minutes=planned if planned is not None else span_minutes(start, end),
        actual_duration_minutes=parse_optional_minutes(
            item.get("actual_duration_minutes"), where, "actual_duration_minutes"
        ),
        completed=parse_bool(item.get("completed"), where, "completed"),
    )


def _parse_task(item: dict, index: int) -> Task:
    where = f"Task {index}"
    require(item, ("id", "created_at"), where)
    return Task(
        id=str(item["id"]).strip(),
        user_id=str(item.get("user_id") or _DEFAULT_USER),
        created_at=parse_timestamp(item["created_at"], where, "created_at"),
        category=parse_category(item.get("category"), where),
        completed=parse_bool(item.get("completed"), where, "completed"),
        due_date=parse_optional_timestamp(item.get("due_date"), where, "due_date"),
        completed_at=parse_optional_timestamp(item.get("completed_at"), where, "completed_at"),
    )


def _parse_check_in(item: dict, index: int) -> CheckIn:
    where = f"CheckIn {index}"
    require(item, ("date",), where)
    return CheckIn(
        id=str(item.get("id") or f"checkin-{index}"),
        user_id=str(item.get("user_id") or _DEFAULT_USER),
        date=parse_date(item["date"], where, "date"),
        completed=parse_bool(item.get("completed", True), where, "completed"),
    )


def _parse_feedback(item: dict, index: int) -> CompletionFeedback:
    where = f"Feedback {index}"
    require(item, ("completed_at",), where)
    block_id = item.get("block_id")
    task_id = item.get("task_id")
    if block_id and task_id:
        raise ValueError(f"{where}: feedback cannot reference both a block and a task")
    note = item.get("note")
    return CompletionFeedback(
        completed_at=parse_timestamp(item["completed_at"], where, "completed_at"),
        feeling=normalize_feeling(item.get("feeling")),
        focus=normalize_focus(item.get("focus")),
        time_comparison=normalize_time_comparison(item.get("time_comparison")),
        block_id=str(block_id) if block_id else None,
        task_id=str(task_id) if task_id else None,
        had_interruptions=parse_bool(item.get("had_interruptions"), where, "had_interruptions"),
        interruption_cause=normalize_interruption_cause(item.get("interruption_cause")),
        note=str(note) if note else None,
    )


def _parse_list(payload: dict, key: str, parser) -> list:
    items = payload.get(key) or []
    if not isinstance(items, list):
        raise ValueError(f"'{key}' must be a list of objects")
    return [parser(item, i) for i, item in enumerate(items, start=1)]


def parse_payload(payload: dict, now: datetime | None = None) -> EngineInput:
    """Build engine input from a decoded payload.

    Without a ``range`` object the previous Monday-to-Sunday week is used.
    """

    if not isinstance(payload, dict):
        raise ValueError("JSON payload must be an object")

    range_payload = payload.get("range") or {}
    if not isinstance(range_payload, dict):
        raise ValueError("range must be an object with 'from' and 'to'")
    range_from = parse_optional_timestamp(range_payload.get("from"), "range", "from")
    range_to = parse_optional_timestamp(range_payload.get("to"), "range", "to")
    if (range_from is None) != (range_to is None):
        raise ValueError("range: 'from' and 'to' must be given together")
    if range_from is None:
        range_from, range_to = previous_week_range(now or datetime.now())

    engine_input = EngineInput(
        blocks=_parse_list(payload, "blocks", _parse_block),
        tasks=_parse_list(payload, "tasks", _parse_task),
        check_ins=_parse_list(payload, "check_ins", _parse_check_in),
        feedback=_parse_list(payload, "feedback", _parse_feedback),
        settings=parse_settings(payload.get("settings")),
        range_from=range_from,
        range_to=range_to,
    )
    logger.debug(
        "parsed payload blocks=%d tasks=%d check_ins=%d feedback=%d",
        len(engine_input.blocks),
        len(engine_input.tasks),
        len(engine_input.check_ins),
        len(engine_input.feedback),
    )
    return engine_input


def parse(file_path: str, now: datetime | None = None) -> EngineInput:
    """Parse a JSON file into engine input."""

    with open(file_path, encoding="utf-8") as handle:
        payload = json.load(handle)
    return parse_payload(payload, now=now)
