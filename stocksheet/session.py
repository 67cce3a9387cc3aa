"""
Single-user editing session over one inventory table.

The session is the only writer: each action reads the current table, computes
the next one with the pure functions in ``stocksheet.table`` and
``stocksheet.movements``, swaps it in, and reports a Status. Load failures
leave the current table untouched.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Optional

from stocksheet import table as table_ops
from stocksheet.columns import WEEK, RoleMap
from stocksheet.config import DEFAULT_SHEET_NAME, TEMPLATE_FILE_BASE, TEMPLATE_SHEET_NAME
from stocksheet.movements import apply_movement_defaults, record_movement
from stocksheet.status import ERROR, LOADING, SUCCESS, Status, idle_status
from stocksheet.table import EMPTY_TABLE, Table
from stocksheet.template import build_blank_template_table, build_template_table
from stocksheet.views import TableStats, compute_stats
from stocksheet.weeks import infer_next_week_label, suggest_next_week_label
from stocksheet.workbook_io import (
    CSV_MIME_TYPE,
    XLSX_MIME_TYPE,
    TableLoadError,
    download_file_name,
    read_table_source,
    strip_known_extension,
    write_csv_bytes,
    write_workbook_bytes,
)

logger = logging.getLogger(__name__)

StatusListener = Callable[[Status], None]

EXPORT_FORMATS = {
    "xlsx": (".xlsx", XLSX_MIME_TYPE),
    "csv": (".csv", CSV_MIME_TYPE),
}


class InventorySession:
    def __init__(self, on_status: Optional[StatusListener] = None) -> None:
        self._on_status = on_status
        self.table: Table = EMPTY_TABLE
        self.status: Status = idle_status()
        self.next_week_label = ""
        self.file_name = ""
        self.sheet_name = ""
        self.pending_edits = False

    # ── Derived views ──────────────────────────────────────────────────────

    @property
    def role_map(self) -> RoleMap:
        return self.table.role_map()

    @property
    def week_column(self) -> Optional[str]:
        return self.role_map[WEEK]

    @property
    def stats(self) -> TableStats:
        return compute_stats(self.table)

    @property
    def has_data(self) -> bool:
        return bool(self.table.rows)

    def download_name(self, fmt: str = "xlsx") -> str:
        extension, _ = EXPORT_FORMATS[fmt]
        return download_file_name(self.file_name, self.next_week_label, extension)

    # ── Internals ──────────────────────────────────────────────────────────

    def _emit(self, kind: str, message: str) -> Status:
        self.status = Status(kind, message)
        if self._on_status is not None:
            self._on_status(self.status)
        return self.status

    def _replace(self, table: Table) -> bool:
        if table is self.table:
            return False
        self.table = table
        self.pending_edits = True
        return True

    # ── Lifecycle ──────────────────────────────────────────────────────────

    def load_file(self, data: bytes, file_name: str) -> Status:
        self._emit(LOADING, f"Reading {file_name}...")
        try:
            loaded = read_table_source(data, file_name)
        except TableLoadError as exc:
            logger.warning("Rejected %s: %s %s", file_name, exc, getattr(exc, "detail", ""))
            return self._emit(ERROR, str(exc))
        except ImportError as exc:
            logger.warning("Missing reader for %s: %s", file_name, exc)
            return self._emit(ERROR, str(exc))

        loaded_table = apply_movement_defaults(table_ops.load_table(loaded.columns, loaded.rows))
        for warning in loaded.warnings:
            logger.info("%s: %s", file_name, warning)

        self.table = loaded_table
        self.file_name = strip_known_extension(file_name)
        self.sheet_name = loaded.sheet_name
        self.next_week_label = infer_next_week_label(loaded_table)
        self.pending_edits = False
        logger.info("Loaded %d rows from %s (sheet %s)", len(loaded_table), file_name, loaded.sheet_name)
        return self._emit(SUCCESS, f'Loaded {len(loaded_table):,} rows from "{loaded.sheet_name}".')

    def start_template(self) -> Status:
        template = build_template_table()
        self.table = template
        self.file_name = TEMPLATE_FILE_BASE
        self.sheet_name = TEMPLATE_SHEET_NAME
        first_week = template.rows[0].get("Week") if template.rows else "Week 1"
        self.next_week_label = suggest_next_week_label(first_week) or "Week 1"
        self.pending_edits = False
        logger.info("Started a new weekly template")
        return self._emit(SUCCESS, "Created a fresh weekly workbook template. Customize and export when ready.")

    def reset(self) -> Status:
        self.table = EMPTY_TABLE
        self.next_week_label = ""
        self.file_name = ""
        self.sheet_name = ""
        self.pending_edits = False
        status = idle_status()
        return self._emit(status.kind, status.message)

    # ── Row and column edits ───────────────────────────────────────────────

    def add_row(self) -> Status:
        self._replace(table_ops.add_row(self.table, self.next_week_label))
        return self._emit(SUCCESS, "Added a new row.")

    def duplicate_row(self, row_id: str) -> Status:
        if self._replace(table_ops.duplicate_row(self.table, row_id)):
            return self._emit(SUCCESS, "Duplicated row.")
        return self.status

    def delete_row(self, row_id: str) -> Status:
        if self._replace(table_ops.delete_row(self.table, row_id)):
            return self._emit(SUCCESS, "Deleted row.")
        return self.status

    def edit_cell(self, row_id: str, column: str, value: Any) -> Status:
        if self._replace(table_ops.edit_cell(self.table, row_id, column, value)):
            logger.debug("Edited %s on row %s", column, row_id)
            return self._emit(SUCCESS, f"Updated {column}.")
        return self.status

    def add_column(self, name: str) -> Status:
        updated, added = table_ops.add_column(self.table, name)
        self._replace(updated)
        return self._emit(SUCCESS, f'Added "{added}" column.')

    def set_next_week_label(self, label: str) -> None:
        self.next_week_label = label

    def apply_week_label(self) -> Status:
        week_column = self.week_column
        if not week_column or not self.next_week_label.strip():
            return self.status
        self._replace(table_ops.relabel_column(self.table, week_column, self.next_week_label))
        return self._emit(SUCCESS, f'Applied "{self.next_week_label}" to the {week_column} column.')

    def record_movement(self, row_id: str, kind: str, raw_value: Any) -> Status:
        result = record_movement(self.table, row_id, kind, raw_value, self.next_week_label)
        if not result.applied:
            return self.status
        self._replace(result.table)
        logger.debug("%s", result.message)
        return self._emit(SUCCESS, result.message)

    # ── Export ─────────────────────────────────────────────────────────────

    def build_export(self, fmt: str = "xlsx") -> Optional[bytes]:
        """Serialise the current table without touching session state."""
        if fmt not in EXPORT_FORMATS:
            raise ValueError(f"Unsupported export format '{fmt}'. Expected one of: {', '.join(EXPORT_FORMATS)}")
        if not self.table.columns:
            return None
        if fmt == "csv":
            return write_csv_bytes(self.table)
        return write_workbook_bytes(self.table, self.sheet_name or DEFAULT_SHEET_NAME)

    def build_blank_template(self) -> bytes:
        """Header-only template workbook, independent of the current table."""
        return write_workbook_bytes(build_blank_template_table(), TEMPLATE_SHEET_NAME)

    def mark_exported(self, fmt: str = "xlsx") -> Status:
        self.pending_edits = False
        logger.info("Exported %d rows as %s", len(self.table), fmt)
        return self._emit(SUCCESS, f"Exported {len(self.table):,} rows.")

    def export_workbook(self, fmt: str = "xlsx") -> Optional[bytes]:
        payload = self.build_export(fmt)
        if payload is not None:
            self.mark_exported(fmt)
        return payload
