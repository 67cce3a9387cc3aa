"""
Stock movement logging and closing-stock arithmetic.

A movement is a quantity used (sold, shipped, ...) or received against one
row. Recording it writes the quantity into the matching movement column,
creating the column first if the sheet has none, then recomputes that row's
closing stock as max(opening + received - used, 0).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Optional

from stocksheet.columns import (
    CLOSING,
    DEFAULT_LABELS,
    MOVEMENT_KINDS,
    OPENING,
    RECEIVED,
    USED,
    WEEK,
    describe_item_column,
    find_role_column,
    is_movement_column,
)
from stocksheet.numbers import coerce_numeric, format_quantity, parse_float, tidy_number
from stocksheet.table import Row, Table, ensure_unique_column_name

logger = logging.getLogger(__name__)

CLOSING_QUANTUM = Decimal("0.01")


@dataclass(frozen=True)
class MovementResult:
    table: Table
    message: Optional[str]
    value: Any = ""

    @property
    def applied(self) -> bool:
        return self.message is not None


def parse_movement_value(raw_value: Any) -> Any:
    """Empty input clears the movement; anything else becomes a quantity >= 0."""
    if raw_value == "" or raw_value is None:
        return ""
    number = parse_float(raw_value)
    if number is None:
        return 0
    return tidy_number(max(number, 0.0))


def compute_closing(opening: Any, received: Any, used: Any) -> float:
    total = coerce_numeric(opening) + coerce_numeric(received) - coerce_numeric(used)
    # Half-up on the exact binary value: 0.125 -> 0.13, 1.005 (stored as 1.00499...) -> 1.0
    rounded = Decimal(max(total, 0.0)).quantize(CLOSING_QUANTUM, rounding=ROUND_HALF_UP)
    return tidy_number(float(rounded))


def _resolve_or_create(columns: list[str], created: list[str], role: str) -> str:
    name = find_role_column(columns, role)
    if name is None:
        name = ensure_unique_column_name(DEFAULT_LABELS[role], columns)
        columns.append(name)
        created.append(name)
    return name


def _backfill(row: Row, created: list[str]) -> dict[str, Any]:
    values = dict(row.values)
    for column in created:
        if column not in values:
            values[column] = 0 if is_movement_column(column) else ""
    return values


def _item_label(table: Table, row: Row) -> str:
    item_column = describe_item_column(table.columns)
    if not item_column:
        return ""
    return str(row.get(item_column)).strip()


def record_movement(
    table: Table,
    row_id: str,
    kind: str,
    raw_value: Any,
    next_week_label: str = "",
) -> MovementResult:
    """
    Log ``raw_value`` units of ``kind`` ("used" or "received") against a row.

    Missing movement and closing columns are created on the fly. When a week
    column exists and a next-week label is set, the row is moved to that week.
    An unknown row id returns the table unchanged with no message.
    """
    if kind not in MOVEMENT_KINDS:
        raise ValueError(f"Unknown movement kind '{kind}'. Expected one of: {', '.join(MOVEMENT_KINDS)}")

    source = table.find_row(row_id)
    if source is None:
        logger.debug("Movement for unknown row %s ignored", row_id)
        return MovementResult(table, None)

    value = parse_movement_value(raw_value)
    item = _item_label(table, source)

    columns = list(table.columns)
    created: list[str] = []
    target_column = _resolve_or_create(columns, created, kind)
    closing_column = _resolve_or_create(columns, created, CLOSING)
    opening_column = find_role_column(columns, OPENING)
    used_column = find_role_column(columns, USED)
    received_column = find_role_column(columns, RECEIVED)
    week_column = find_role_column(columns, WEEK)

    rows: list[Row] = []
    for row in table.rows:
        values = _backfill(row, created)
        if row.row_id == row_id:
            values[target_column] = value
            if week_column and next_week_label:
                values[week_column] = next_week_label
            values[closing_column] = compute_closing(
                values.get(opening_column) if opening_column else 0,
                values.get(received_column) if received_column else 0,
                values.get(used_column) if used_column else 0,
            )
        rows.append(Row(row.row_id, values))

    if created:
        logger.info("Created movement columns: %s", ", ".join(created))

    suffix = f" for {item}" if item else ""
    if value == "":
        message = f"Cleared {kind} value{suffix}."
    else:
        message = f"Logged {format_quantity(value)} units {kind}{suffix}."
    return MovementResult(Table(tuple(columns), tuple(rows)), message, value)


def apply_movement_defaults(table: Table) -> Table:
    """Fill empty used/received cells with 0, as freshly loaded sheets often leave them blank."""
    used_column = find_role_column(table.columns, USED)
    received_column = find_role_column(table.columns, RECEIVED)
    targets = [column for column in (used_column, received_column) if column]
    if not targets:
        return table

    rows = []
    for row in table.rows:
        blanks = {column: 0 for column in targets if row.get(column) == ""}
        rows.append(row.with_values(blanks) if blanks else row)
    return Table(table.columns, tuple(rows))
