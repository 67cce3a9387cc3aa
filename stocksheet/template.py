from __future__ import annotations

from stocksheet.columns import DEFAULT_CLOSING_LABEL, DEFAULT_RECEIVED_LABEL, DEFAULT_USED_LABEL
from stocksheet.table import Row, Table, new_row_id
from stocksheet.weeks import suggest_next_week_label

TEMPLATE_COLUMNS = (
    "Week",
    "SKU",
    "Item Name",
    "Category",
    "Opening Stock",
    DEFAULT_RECEIVED_LABEL,
    DEFAULT_USED_LABEL,
    DEFAULT_CLOSING_LABEL,
    "Notes",
)

TEMPLATE_SEED_ROWS = (
    {
        "Week": "Week 24",
        "SKU": "SKU-1001",
        "Item Name": "Organic Cold Brew",
        "Category": "Beverage",
        "Opening Stock": 120,
        DEFAULT_RECEIVED_LABEL: 60,
        DEFAULT_USED_LABEL: 140,
        DEFAULT_CLOSING_LABEL: 40,
        "Notes": "Promotional week lift.",
    },
    {
        "Week": "Week 24",
        "SKU": "SKU-2045",
        "Item Name": "Blueberry Muffin",
        "Category": "Bakery",
        "Opening Stock": 80,
        DEFAULT_RECEIVED_LABEL: 40,
        DEFAULT_USED_LABEL: 95,
        DEFAULT_CLOSING_LABEL: 25,
        "Notes": "Reorder threshold approaching.",
    },
    {
        "Week": "Week 24",
        "SKU": "SKU-3308",
        "Item Name": "Granola Parfait",
        "Category": "Grab & Go",
        "Opening Stock": 65,
        DEFAULT_RECEIVED_LABEL: 25,
        DEFAULT_USED_LABEL: 70,
        DEFAULT_CLOSING_LABEL: 20,
        "Notes": "Strong weekend performance.",
    },
)

MOVEMENT_TEMPLATE_COLUMNS = {DEFAULT_RECEIVED_LABEL, DEFAULT_USED_LABEL}


def _default_cell(column: str):
    return 0 if column in MOVEMENT_TEMPLATE_COLUMNS else ""


def build_template_table() -> Table:
    """Starter sheet: three Week 24 seed rows and a blank row ready for the following week."""
    rows = [
        Row(new_row_id(), {column: seed.get(column, _default_cell(column)) for column in TEMPLATE_COLUMNS})
        for seed in TEMPLATE_SEED_ROWS
    ]
    next_week = suggest_next_week_label(TEMPLATE_SEED_ROWS[0]["Week"])
    blank = {column: _default_cell(column) for column in TEMPLATE_COLUMNS}
    blank["Week"] = next_week
    rows.append(Row(new_row_id(), blank))
    return Table(TEMPLATE_COLUMNS, tuple(rows))


def build_blank_template_table() -> Table:
    return Table(TEMPLATE_COLUMNS, ())
