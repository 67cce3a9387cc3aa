from __future__ import annotations

import os


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


LOG_LEVEL = os.environ.get("STOCKSHEET_LOG_LEVEL", "WARNING").upper()
MAX_UPLOAD_MB = _env_int("STOCKSHEET_MAX_UPLOAD_MB", 50)
MAX_UPLOAD_BYTES = MAX_UPLOAD_MB * 1024 * 1024
DEFAULT_SHEET_NAME = os.environ.get("STOCKSHEET_DEFAULT_SHEET_NAME") or "Inventory"

DEFAULT_FILE_BASE = "inventory"
TEMPLATE_FILE_BASE = "weekly-inventory"
TEMPLATE_SHEET_NAME = "Inventory Week"
