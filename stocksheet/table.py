"""
In-memory inventory table and its pure transformations.

A Table is never mutated: every operation returns a new Table (or the same
one when nothing changed), so callers replace their current table with the
result. Row identifiers are synthetic and only used to address rows while
editing; they never reach an exported file.
"""

from __future__ import annotations

import math
import uuid
from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping, Optional, Sequence

from stocksheet.columns import WEEK, RoleMap, classify_columns, is_movement_column


def new_row_id() -> str:
    return uuid.uuid4().hex


@dataclass(frozen=True)
class Row:
    row_id: str
    values: dict[str, Any] = field(default_factory=dict)

    def get(self, column: str, default: Any = "") -> Any:
        return self.values.get(column, default)

    def with_values(self, changes: Mapping[str, Any]) -> "Row":
        return Row(self.row_id, {**self.values, **changes})


@dataclass(frozen=True)
class Table:
    columns: tuple[str, ...] = ()
    rows: tuple[Row, ...] = ()

    def __len__(self) -> int:
        return len(self.rows)

    @property
    def is_empty(self) -> bool:
        return not self.columns

    def role_map(self) -> RoleMap:
        return classify_columns(self.columns)

    def find_row(self, row_id: str) -> Optional[Row]:
        for row in self.rows:
            if row.row_id == row_id:
                return row
        return None

    def row_ids(self) -> list[str]:
        return [row.row_id for row in self.rows]


EMPTY_TABLE = Table()


def _clean_cell(value: Any) -> Any:
    if value is None:
        return ""
    if isinstance(value, float) and math.isnan(value):
        return ""
    return value


def normalize_columns(candidates: Iterable[Any]) -> list[str]:
    """Turn raw header cells into unique column names ("Column N" for blanks)."""
    seen: set[str] = set()
    names: list[str] = []
    for index, candidate in enumerate(candidates):
        base = str(_clean_cell(candidate)).strip() or f"Column {index + 1}"
        name = base
        counter = 1
        while name in seen:
            counter += 1
            name = f"{base} {counter}"
        seen.add(name)
        names.append(name)
    return names


def ensure_unique_column_name(name: str, existing: Iterable[str]) -> str:
    existing = set(existing)
    base = (name or "").strip() or "New Column"
    candidate = base
    suffix = 1
    while candidate in existing:
        suffix += 1
        candidate = f"{base} {suffix}"
    return candidate


def load_table(columns: Sequence[Any], rows: Iterable[Mapping[str, Any] | Sequence[Any]]) -> Table:
    """
    Build a fresh table from the intake boundary.

    Rows may be mappings keyed by column name or positional sequences aligned
    with ``columns``. Mapping rows are looked up by the deduplicated name
    first and then by the raw header they were parsed under. Missing cells
    become empty strings.
    """
    raw_names = [str(_clean_cell(column)) for column in columns]
    names = normalize_columns(columns)

    shaped: list[Row] = []
    for source in rows:
        values: dict[str, Any] = {}
        if isinstance(source, Mapping):
            for name, raw_name in zip(names, raw_names):
                if name in source:
                    values[name] = _clean_cell(source[name])
                else:
                    values[name] = _clean_cell(source.get(raw_name, ""))
        else:
            cells = list(source)
            for index, name in enumerate(names):
                values[name] = _clean_cell(cells[index]) if index < len(cells) else ""
        shaped.append(Row(new_row_id(), values))
    return Table(tuple(names), tuple(shaped))


def export_records(table: Table) -> tuple[list[str], list[dict[str, Any]]]:
    columns = list(table.columns)
    return columns, [{column: row.get(column) for column in columns} for row in table.rows]


def blank_row_values(columns: Iterable[str], next_week_label: str = "") -> dict[str, Any]:
    columns = list(columns)
    week_column = classify_columns(columns)[WEEK]
    values: dict[str, Any] = {}
    for column in columns:
        if column == week_column and next_week_label:
            values[column] = next_week_label
        elif is_movement_column(column):
            values[column] = 0
        else:
            values[column] = ""
    return values


def add_row(table: Table, next_week_label: str = "") -> Table:
    row = Row(new_row_id(), blank_row_values(table.columns, next_week_label))
    return Table(table.columns, table.rows + (row,))


def duplicate_row(table: Table, row_id: str) -> Table:
    target = table.find_row(row_id)
    if target is None:
        return table
    duplicate = Row(new_row_id(), {column: target.get(column) for column in table.columns})
    return Table(table.columns, table.rows + (duplicate,))


def delete_row(table: Table, row_id: str) -> Table:
    rows = tuple(row for row in table.rows if row.row_id != row_id)
    if len(rows) == len(table.rows):
        return table
    return Table(table.columns, rows)


def edit_cell(table: Table, row_id: str, column: str, value: Any) -> Table:
    if column not in table.columns or table.find_row(row_id) is None:
        return table
    rows = tuple(
        row.with_values({column: value}) if row.row_id == row_id else row
        for row in table.rows
    )
    return Table(table.columns, rows)


def add_column(table: Table, name: str, fill: Any = "") -> tuple[Table, str]:
    """Append a uniquely named column; returns the new table and the name actually used."""
    unique = ensure_unique_column_name(name, table.columns)
    rows = tuple(row.with_values({unique: fill}) for row in table.rows)
    return Table(table.columns + (unique,), rows), unique


def relabel_column(table: Table, column: str, value: Any) -> Table:
    if column not in table.columns:
        return table
    rows = tuple(row.with_values({column: value}) for row in table.rows)
    return Table(table.columns, rows)
