from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Optional

from stocksheet.columns import ITEM, SKU, find_quantity_column, is_numeric_column
from stocksheet.numbers import parse_float
from stocksheet.table import Row, Table


@dataclass(frozen=True)
class TableStats:
    row_count: int
    total_quantity: Optional[float]
    quantity_column: Optional[str]
    unique_items: Optional[int]
    sku_column: Optional[str]


def cell_text(value: Any) -> str:
    if value is None:
        return ""
    return str(value)


def _search(rows: Iterable[Row], columns: list[str], query: str) -> list[Row]:
    needle = (query or "").strip().lower()
    if not needle:
        return list(rows)
    return [
        row for row in rows
        if any(needle in cell_text(row.get(column)).lower() for column in columns)
    ]


def filter_rows(table: Table, query: str) -> list[Row]:
    return _search(table.rows, list(table.columns), query)


def stocktake_rows(table: Table, query: str) -> list[Row]:
    """Search by item name or SKU only; falls back to the first column."""
    role_map = table.role_map()
    columns = [column for column in (role_map[ITEM], role_map[SKU]) if column]
    if not columns:
        columns = list(table.columns[:1])
    return _search(table.rows, columns, query)


def compute_stats(table: Table) -> TableStats:
    quantity_column = find_quantity_column(table.columns)
    sku_column = table.role_map()[SKU]

    total_quantity = None
    if quantity_column:
        total_quantity = 0.0
        for row in table.rows:
            number = parse_float(row.get(quantity_column))
            if number is not None:
                total_quantity += number

    unique_items = None
    if sku_column:
        unique_items = len({cell_text(row.get(sku_column)).strip() for row in table.rows} - {""})

    return TableStats(
        row_count=len(table.rows),
        total_quantity=total_quantity,
        quantity_column=quantity_column,
        unique_items=unique_items,
        sku_column=sku_column,
    )


def has_inventory_columns(table: Table) -> bool:
    role_map = table.role_map()
    return bool(table.rows) and bool(role_map[ITEM] or role_map[SKU] or table.columns[:1])


def _is_number_cell(value: Any) -> bool:
    return value == "" or (isinstance(value, (int, float)) and not isinstance(value, bool))


def numeric_columns(table: Table) -> list[str]:
    """Quantity-like columns whose non-blank cells are all numbers; these get numeric grid inputs."""
    return [
        column for column in table.columns
        if is_numeric_column(column) and all(_is_number_cell(row.get(column)) for row in table.rows)
    ]
