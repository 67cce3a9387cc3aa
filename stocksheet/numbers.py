from __future__ import annotations

import math
import re
from typing import Any

LEADING_NUMBER_RE = re.compile(r"^\s*([+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?)")


def parse_float(value: Any) -> float | None:
    """
    Lenient float parse for cell values and typed-in quantities.

    Numbers pass through; text is read from its leading numeric prefix, so
    "12 units" is 12.0 while "units" is None. Booleans and non-finite values
    are rejected.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
        return number if math.isfinite(number) else None
    match = LEADING_NUMBER_RE.match(str(value))
    if not match:
        return None
    number = float(match.group(1))
    return number if math.isfinite(number) else None


def coerce_numeric(value: Any, default: float = 0.0) -> float:
    if value is None or value == "":
        return default
    number = parse_float(value)
    return default if number is None else number


def tidy_number(value: Any) -> Any:
    if isinstance(value, float) and math.isfinite(value) and value.is_integer():
        return int(value)
    return value


def format_quantity(value: float) -> str:
    return str(tidy_number(value))
