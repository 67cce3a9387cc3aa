"""
workbook_io.py: spreadsheet intake and export for stocksheet.

Supports: .xlsx .xls .csv

Intake:
    loaded = read_table_source(data, "stock.xlsx")
    table  = load_table(loaded.columns, loaded.rows)

Only the first sheet of a workbook is read. The first non-blank row is the
header; fully blank rows are dropped.

Export:
    write_workbook_bytes(table, sheet_name)  -> single-sheet .xlsx bytes
    write_csv_bytes(table)                   -> UTF-8 CSV bytes
"""

from __future__ import annotations

import csv
import io
import logging
import math
import re
from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any

import chardet
import openpyxl
import pandas as pd
from openpyxl.styles import Alignment, Font, PatternFill
from openpyxl.utils import get_column_letter

from stocksheet.config import DEFAULT_FILE_BASE, DEFAULT_SHEET_NAME, MAX_UPLOAD_BYTES, MAX_UPLOAD_MB
from stocksheet.numbers import tidy_number
from stocksheet.table import Table, export_records

logger = logging.getLogger(__name__)

# ── Format groups ──────────────────────────────────────────────────────────────
TEXT_FORMATS = {".csv"}
EXCEL_FORMATS = {".xlsx", ".xls"}
SUPPORTED_EXTENSIONS = TEXT_FORMATS | EXCEL_FORMATS

XLSX_MIME_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
CSV_MIME_TYPE = "text/csv"

HEADER_COLOR = "1565C0"
MAX_SHEET_TITLE = 31

INTEGER_TEXT_RE = re.compile(r"^[+-]?(?:0|[1-9]\d*)$")
DECIMAL_TEXT_RE = re.compile(r"^[+-]?(?:\d+\.\d+|\.\d+)$")
KNOWN_EXTENSION_RE = re.compile(r"\.(xlsx|xls|csv)$", re.IGNORECASE)


# ══════════════════════════════════════════════════════════════════════════════
# ERRORS
# ══════════════════════════════════════════════════════════════════════════════

class TableLoadError(ValueError):
    """A file could not be turned into a table. The message is user-facing."""


class UnsupportedFormatError(TableLoadError):
    def __init__(self, suffix: str) -> None:
        super().__init__("Unsupported format. Use .xlsx, .xls, or .csv files.")
        self.suffix = suffix


class SheetReadError(TableLoadError):
    def __init__(self, detail: str = "") -> None:
        super().__init__("Could not read that file. Please verify the format and try again.")
        self.detail = detail


class NoSheetError(TableLoadError):
    def __init__(self) -> None:
        super().__init__("No readable sheets were found in this file.")


class EmptySheetError(TableLoadError):
    def __init__(self) -> None:
        super().__init__("The sheet is empty. Please provide data to work with.")


class NoColumnsError(TableLoadError):
    def __init__(self) -> None:
        super().__init__("No columns were detected. Please ensure the first row contains headers.")


@dataclass
class LoadedSheet:
    columns: list[str]
    rows: list[list[Any]]
    sheet_name: str
    detected_format: str
    detected_encoding: str | None = None
    delimiter: str | None = None
    warnings: list[str] = field(default_factory=list)


def check_extension(file_name: str) -> str:
    suffix = Path(file_name).suffix.lower()
    if suffix not in SUPPORTED_EXTENSIONS:
        raise UnsupportedFormatError(suffix)
    return suffix


def strip_known_extension(file_name: str) -> str:
    return KNOWN_EXTENSION_RE.sub("", file_name)


# ══════════════════════════════════════════════════════════════════════════════
# CELL NORMALISATION
# ══════════════════════════════════════════════════════════════════════════════

def normalize_scalar(value: Any) -> Any:
    """Convert pandas/numpy cell values to plain Python values; blanks become ""."""
    if value is None:
        return ""
    if isinstance(value, str):
        return value.replace("\x00", "")
    if isinstance(value, float) and math.isnan(value):
        return ""
    try:
        if pd.isna(value):
            return ""
    except (TypeError, ValueError):
        pass
    if isinstance(value, pd.Timestamp):
        return value.to_pydatetime()
    if hasattr(value, "item") and not isinstance(value, datetime):
        value = value.item()
    return value


def coerce_text_cell(text: str) -> Any:
    """Turn numeric-looking CSV text into numbers; codes with leading zeros stay text."""
    stripped = text.strip()
    if INTEGER_TEXT_RE.match(stripped):
        return int(stripped)
    if DECIMAL_TEXT_RE.match(stripped):
        return tidy_number(float(stripped))
    return text


def _is_blank(value: Any) -> bool:
    return value == "" or (isinstance(value, str) and not value.strip())


def _matrix_to_sheet(matrix: list[list[Any]]) -> tuple[list[str], list[list[Any]]]:
    rows = [row for row in matrix if not all(_is_blank(cell) for cell in row)]
    if not rows:
        raise EmptySheetError()

    width = max(len(row) for row in rows)
    rows = [row + [""] * (width - len(row)) for row in rows]
    while width and all(_is_blank(row[width - 1]) for row in rows):
        width -= 1
    if not width:
        raise NoColumnsError()

    header = [str(tidy_number(cell)).strip() if not _is_blank(cell) else "" for cell in rows[0][:width]]
    return header, [row[:width] for row in rows[1:]]


# ══════════════════════════════════════════════════════════════════════════════
# ENCODING + DELIMITER DETECTION
# ══════════════════════════════════════════════════════════════════════════════

def _detect_encoding(raw: bytes) -> str:
    result = chardet.detect(raw)
    detected = result.get("encoding")
    return detected or "utf-8"


def _read_text_safely(raw: bytes, preferred_encoding: str) -> str:
    """
    Decode raw bytes line-by-line.

    Strategy per line:
      1. Try UTF-8
      2. Try preferred_encoding (chardet result)
      3. CP1252 with replace (never crashes)
    """
    decoded_lines: list[str] = []
    for raw_line in raw.split(b"\n"):
        decoded: str | None = None
        for enc in ("utf-8", preferred_encoding):
            try:
                decoded = raw_line.decode(enc)
                break
            except (LookupError, UnicodeDecodeError):
                continue
        if decoded is None:
            decoded = raw_line.decode("cp1252", errors="replace")
        decoded_lines.append(decoded.replace("\x00", "").rstrip("\r"))
    return "\n".join(decoded_lines).lstrip("\ufeff")


def _detect_delimiter(text: str) -> str:
    sample_lines = [line for line in text.splitlines() if line.strip()][:25]
    sample = "\n".join(sample_lines)
    if not sample:
        return ","
    try:
        return csv.Sniffer().sniff(sample, delimiters=",;\t|").delimiter
    except csv.Error:
        pass

    counts = Counter({delim: sample_lines[0].count(delim) for delim in (",", ";", "\t", "|")})
    delimiter, hits = counts.most_common(1)[0]
    return delimiter if hits else ","


# ══════════════════════════════════════════════════════════════════════════════
# FORMAT LOADERS
# ══════════════════════════════════════════════════════════════════════════════

def _load_csv(data: bytes, file_name: str) -> LoadedSheet:
    encoding = _detect_encoding(data)
    text = _read_text_safely(data, encoding)
    if not text.strip():
        raise EmptySheetError()
    delimiter = _detect_delimiter(text)

    try:
        # Ragged rows keep their extra cells; width comes from the widest row.
        width = max((len(row) for row in csv.reader(io.StringIO(text), delimiter=delimiter)), default=0)
        if not width:
            raise EmptySheetError()
        df = pd.read_csv(
            io.StringIO(text),
            sep=r"\|" if delimiter == "|" else delimiter,
            header=None,
            names=range(width),
            dtype=str,
            keep_default_na=False,
            skip_blank_lines=True,
            engine="python",
        )
    except TableLoadError:
        raise
    except pd.errors.EmptyDataError as exc:
        raise EmptySheetError() from exc
    except Exception as exc:
        raise SheetReadError(f"Could not parse .csv file: {exc}") from exc

    matrix = [
        [coerce_text_cell(cell) if isinstance(cell, str) else normalize_scalar(cell) for cell in row]
        for row in df.itertuples(index=False, name=None)
    ]
    columns, rows = _matrix_to_sheet(matrix)
    return LoadedSheet(
        columns=columns,
        rows=rows,
        sheet_name=strip_known_extension(Path(file_name).name) or DEFAULT_SHEET_NAME,
        detected_format="csv",
        detected_encoding=encoding,
        delimiter=delimiter,
    )


def _load_excel(data: bytes, suffix: str) -> LoadedSheet:
    if suffix == ".xls":
        try:
            import xlrd  # noqa: F401
        except ImportError:
            raise ImportError(".xls files require xlrd — run: pip install xlrd")

    try:
        with pd.ExcelFile(io.BytesIO(data)) as xf:
            sheet_names = list(xf.sheet_names)
            if not sheet_names:
                raise NoSheetError()
            sheet_name = sheet_names[0]
            df = pd.read_excel(xf, sheet_name=sheet_name, header=None, dtype=object)
    except TableLoadError:
        raise
    except Exception as exc:
        raise SheetReadError(f"Could not open workbook: {exc}") from exc

    warnings: list[str] = []
    if len(sheet_names) > 1:
        warnings.append(
            f"Multiple sheets found ({len(sheet_names)} total); used '{sheet_name}'. "
            f"Ignored: {sheet_names[1:]}"
        )

    matrix = [[normalize_scalar(cell) for cell in row] for row in df.itertuples(index=False, name=None)]
    columns, rows = _matrix_to_sheet(matrix)
    return LoadedSheet(
        columns=columns,
        rows=rows,
        sheet_name=str(sheet_name),
        detected_format=suffix.lstrip("."),
        warnings=warnings,
    )


# ══════════════════════════════════════════════════════════════════════════════
# PUBLIC API
# ══════════════════════════════════════════════════════════════════════════════

def read_table_source(data: bytes, file_name: str) -> LoadedSheet:
    """
    Parse uploaded file bytes into header names and positional rows.

    Raises:
        UnsupportedFormatError  before parsing when the extension is not supported.
        SheetReadError          if the bytes cannot be parsed.
        NoSheetError            if a workbook has no sheets.
        EmptySheetError         if the first sheet holds no non-blank rows.
        ImportError             if .xls support (xlrd) is not installed.
    """
    suffix = check_extension(file_name)
    if len(data) > MAX_UPLOAD_BYTES:
        raise SheetReadError(f"File is larger than {MAX_UPLOAD_MB} MB.")
    if suffix in TEXT_FORMATS:
        return _load_csv(data, file_name)
    return _load_excel(data, suffix)


# ══════════════════════════════════════════════════════════════════════════════
# EXPORT
# ══════════════════════════════════════════════════════════════════════════════

def _infer_col_widths(rows: list[list[Any]], min_width: int = 10, max_width: int = 60, sample: int = 300) -> list[int]:
    if not rows:
        return []
    widths = [max(min_width, min(max_width, len(str(v)) + 2)) for v in rows[0]]
    for row in rows[1 : sample + 1]:
        for i, val in enumerate(row):
            widths[i] = max(widths[i], min(max_width, len(str(val)) + 2))
    return widths


def _style_sheet(ws, col_widths: list[int], header_color: str) -> None:
    """Apply bold header, color, frozen row, and column widths."""
    fill = PatternFill("solid", fgColor=header_color)
    font = Font(bold=True, color="FFFFFF")
    for cell in ws[1]:
        cell.font = font
        cell.fill = fill
        cell.alignment = Alignment(horizontal="center", vertical="center", wrap_text=False)
    ws.freeze_panes = "A2"
    for i, width in enumerate(col_widths, start=1):
        ws.column_dimensions[get_column_letter(i)].width = width


def safe_sheet_title(name: str | None) -> str:
    title = re.sub(r"[\[\]:*?/\\]", " ", name or "").strip()
    return title[:MAX_SHEET_TITLE] or DEFAULT_SHEET_NAME


def write_workbook_bytes(table: Table, sheet_name: str | None = None) -> bytes:
    columns, records = export_records(table)
    grid = [columns] + [[record[column] for column in columns] for record in records]

    wb = openpyxl.Workbook()
    ws = wb.active
    ws.title = safe_sheet_title(sheet_name)
    for row in grid:
        ws.append(row)
    if columns:
        _style_sheet(ws, _infer_col_widths(grid), HEADER_COLOR)

    buffer = io.BytesIO()
    wb.save(buffer)
    logger.info("Wrote workbook sheet '%s' with %d rows", ws.title, len(records))
    return buffer.getvalue()


def write_csv_bytes(table: Table) -> bytes:
    columns, records = export_records(table)
    frame = pd.DataFrame(records, columns=columns)
    return frame.to_csv(index=False).encode("utf-8")


def sanitize_file_fragment(value: str) -> str:
    fragment = re.sub(r"\s+", "-", value.lower())
    fragment = re.sub(r"[^a-z0-9\-_]", "", fragment)
    fragment = re.sub(r"-+", "-", fragment).strip("-")
    return fragment or "updated"


def download_file_name(base: str, next_week_label: str = "", extension: str = ".xlsx") -> str:
    suffix = sanitize_file_fragment(next_week_label) if next_week_label else "updated"
    return f"{base or DEFAULT_FILE_BASE}-{suffix}{extension}"
