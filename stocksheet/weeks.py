from __future__ import annotations

import re
from typing import Any

from stocksheet.columns import WEEK
from stocksheet.numbers import tidy_number
from stocksheet.table import Table

LAST_DIGITS_RE = re.compile(r"(\d+)(?!.*\d)")


def suggest_next_week_label(value: Any) -> str:
    """
    Guess the label that follows ``value`` by bumping its last run of digits.

    "Week 24" -> "Week 25", "Q4 2023" -> "Q4 2024". Labels without digits get
    " (next)" appended. Zero padding is not kept ("Week 09" -> "Week 10").
    """
    if value is None or value == "":
        return ""
    source = str(tidy_number(value))
    match = LAST_DIGITS_RE.search(source)
    if not match:
        return f"{source} (next)"
    return f"{source[:match.start()]}{int(match.group(1)) + 1}{source[match.end():]}"


def latest_week_value(table: Table) -> Any:
    week_column = table.role_map()[WEEK]
    if not week_column:
        return None
    for row in reversed(table.rows):
        value = row.get(week_column)
        if str(value).strip():
            return value
    return None


def infer_next_week_label(table: Table) -> str:
    if not table.role_map()[WEEK]:
        return ""
    latest = latest_week_value(table)
    if latest is None:
        return ""
    return suggest_next_week_label(latest) or str(latest)
