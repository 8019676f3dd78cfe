"""CSV adapter for calendar block and task exports."""

from __future__ import annotations

import csv
import logging

from focus_engine.adapters.normalize import (
    parse_bool,
    parse_category,
    parse_optional_minutes,
    parse_optional_timestamp,
    parse_timestamp,
    require,
    span_minutes,
)
from focus_engine.schema import Block, Task

logger = logging.getLogger(__name__)

_DEFAULT_USER = "local"


def _parse_block_row(row: dict, row_number: int) -> Block:
    where = f"Row {row_number}"
    require(row, ("id", "start", "end"), where)
    start = parse_timestamp(row["start"], where, "start")
    end = parse_timestamp(row["end"], where, "end")
    planned = parse_optional_minutes(row.get("planned_duration_minutes"), where, "planned_duration_minutes")
    return Block(
        id=row["id"].strip(),
        user_id=(row.get("user_id") or _DEFAULT_USER).strip(),
        start=start,
        end=end,
        category=parse_category(row.get("category"), where),
        planned_duration_minutes=planned if planned is not None else span_minutes(start, end),
        actual_duration_minutes=parse_optional_minutes(
            row.get("actual_duration_minutes"), where, "actual_duration_minutes"
        ),
        completed=parse_bool(row.get("completed"), where, "completed"),
    )


def _parse_task_row(row: dict, row_number: int) -> Task:
    where = f"Row {row_number}"
    require(row, ("id", "created_at"), where)
    return Task(
        id=row["id"].strip(),
        user_id=(row.get("user_id") or _DEFAULT_USER).strip(),
        created_at=parse_timestamp(row["created_at"], where, "created_at"),
        category=parse_category(row.get("category"), where),
        completed=parse_bool(row.get("completed"), where, "completed"),
        due_date=parse_optional_timestamp(row.get("due_date"), where, "due_date"),
        completed_at=parse_optional_timestamp(row.get("completed_at"), where, "completed_at"),
    )


def _read_rows(file_path: str, parser) -> list:
    with open(file_path, newline="", encoding="utf-8") as handle:
        reader = csv.DictReader(handle)
        if not reader.fieldnames:
            return []
        records = [parser(row, row_number) for row_number, row in enumerate(reader, start=2)]
    logger.debug("parsed %d rows from %s", len(records), file_path)
    return records


def parse_blocks(file_path: str) -> list[Block]:
    """Parse a CSV export of calendar blocks."""

    return _read_rows(file_path, _parse_block_row)


def parse_tasks(file_path: str) -> list[Task]:
    """Parse a CSV export of tasks."""

    return _read_rows(file_path, _parse_task_row)
