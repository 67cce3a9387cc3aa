"""
Header-based semantic role inference for inventory sheets.

Each role is matched by a case-insensitive pattern over the header text and
the first matching column (in column order) wins. Nothing here looks at cell
values, so the role map only changes when the column list changes.
"""

from __future__ import annotations

import re
from typing import Iterable, Optional

WEEK = "week"
ITEM = "item"
SKU = "sku"
OPENING = "opening"
RECEIVED = "received"
USED = "used"
CLOSING = "closing"

ROLES = (WEEK, ITEM, SKU, OPENING, RECEIVED, USED, CLOSING)
MOVEMENT_KINDS = (USED, RECEIVED)

ROLE_PATTERNS = {
    WEEK: re.compile(r"week", re.IGNORECASE),
    ITEM: re.compile(r"(item|product|name|description)", re.IGNORECASE),
    SKU: re.compile(r"(sku|item|product|code|id)", re.IGNORECASE),
    OPENING: re.compile(r"(opening|start|begin)", re.IGNORECASE),
    RECEIVED: re.compile(r"(received|added|incoming|brought|restock|purchased|bought)", re.IGNORECASE),
    USED: re.compile(r"(used|sold|outgoing|shipped|consumed|spent)", re.IGNORECASE),
    CLOSING: re.compile(r"(closing|ending|final|remain|available|on\s?hand)", re.IGNORECASE),
}
ITEM_FALLBACK_PATTERN = re.compile(r"(sku|code|id)", re.IGNORECASE)

NUMERIC_HEADER_PATTERN = re.compile(
    r"(qty|quantity|count|stock|units|cost|price|amount|inventory|opening|closing|sold|received)",
    re.IGNORECASE,
)
QUANTITY_HEADER_PATTERN = re.compile(r"(qty|quantity|count|stock|units|closing)", re.IGNORECASE)

DEFAULT_USED_LABEL = "Units Sold"
DEFAULT_RECEIVED_LABEL = "Units Received"
DEFAULT_CLOSING_LABEL = "Closing Stock"

DEFAULT_LABELS = {
    USED: DEFAULT_USED_LABEL,
    RECEIVED: DEFAULT_RECEIVED_LABEL,
    CLOSING: DEFAULT_CLOSING_LABEL,
}

RoleMap = dict[str, Optional[str]]


def _first_match(columns: Iterable[str], pattern: re.Pattern) -> Optional[str]:
    for column in columns:
        if pattern.search(column):
            return column
    return None


def matches_role(column: str, role: str) -> bool:
    return bool(ROLE_PATTERNS[role].search(column))


def is_movement_column(column: str) -> bool:
    return matches_role(column, USED) or matches_role(column, RECEIVED)


def find_role_column(columns: Iterable[str], role: str) -> Optional[str]:
    columns = list(columns)
    if role == ITEM:
        return _first_match(columns, ROLE_PATTERNS[ITEM]) or _first_match(columns, ITEM_FALLBACK_PATTERN)
    return _first_match(columns, ROLE_PATTERNS[role])


def classify_columns(columns: Iterable[str]) -> RoleMap:
    """Map every role to the column that satisfies it, or None."""
    columns = list(columns)
    return {role: find_role_column(columns, role) for role in ROLES}


def describe_item_column(columns: Iterable[str]) -> Optional[str]:
    """Column used to name a row in messages and searches: item, SKU, then the first column."""
    columns = list(columns)
    role_map = classify_columns(columns)
    return role_map[ITEM] or role_map[SKU] or (columns[0] if columns else None)


def is_numeric_column(column: str) -> bool:
    return bool(NUMERIC_HEADER_PATTERN.search(column))


def find_quantity_column(columns: Iterable[str]) -> Optional[str]:
    return _first_match(columns, QUANTITY_HEADER_PATTERN)
