#!/usr/bin/env python3
from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Any

import pandas as pd
import streamlit as st


ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from stocksheet import config  # noqa: E402
from stocksheet.columns import (  # noqa: E402
    CLOSING,
    OPENING,
    RECEIVED,
    USED,
    DEFAULT_LABELS,
    describe_item_column,
    find_role_column,
)
from stocksheet.numbers import tidy_number  # noqa: E402
from stocksheet.session import EXPORT_FORMATS, InventorySession  # noqa: E402
from stocksheet.status import ERROR, IDLE, LOADING, SUCCESS  # noqa: E402
from stocksheet.views import (  # noqa: E402
    cell_text,
    filter_rows,
    has_inventory_columns,
    numeric_columns,
    stocktake_rows,
)
from stocksheet.workbook_io import SUPPORTED_EXTENSIONS, XLSX_MIME_TYPE, coerce_text_cell  # noqa: E402

logging.basicConfig(level=config.LOG_LEVEL, format="%(asctime)s %(name)s %(levelname)s %(message)s")
logger = logging.getLogger("stocksheet.web")

MAX_STOCKTAKE_ROWS = 200
BLANK_TEMPLATE_FILE_NAME = f"{config.TEMPLATE_FILE_BASE}-blank.xlsx"


def ensure_state() -> None:
    if "inventory" not in st.session_state:
        st.session_state["inventory"] = InventorySession()
    st.session_state.setdefault("loaded_signature", None)
    st.session_state.setdefault("uploader_version", 0)
    st.session_state.setdefault("grid_version", 0)
    st.session_state.setdefault("search_input", "")
    st.session_state.setdefault("stocktake_search_input", "")


def inventory() -> InventorySession:
    return st.session_state["inventory"]


def bump_grid() -> None:
    st.session_state["grid_version"] += 1


def row_label(session: InventorySession, row, position: int) -> str:
    item_column = describe_item_column(session.table.columns)
    label = cell_text(row.get(item_column)).strip() if item_column else ""
    return f"{position}. {label}" if label else f"Row {position}"


# ── Callbacks ──────────────────────────────────────────────────────────────────

def on_start_template() -> None:
    inventory().start_template()
    st.session_state["next_week_input"] = inventory().next_week_label
    bump_grid()


def on_reset() -> None:
    inventory().reset()
    st.session_state["loaded_signature"] = None
    st.session_state["next_week_input"] = ""
    st.session_state["uploader_version"] += 1
    bump_grid()


def on_add_row() -> None:
    inventory().add_row()
    bump_grid()


def on_duplicate_row() -> None:
    row_id = st.session_state.get("row_action_input")
    if row_id:
        inventory().duplicate_row(row_id)
        bump_grid()


def on_delete_row() -> None:
    row_id = st.session_state.get("row_action_input")
    if row_id:
        inventory().delete_row(row_id)
        bump_grid()


def on_add_column() -> None:
    name = st.session_state.get("new_column_input", "")
    inventory().add_column(name)
    st.session_state["new_column_input"] = ""
    bump_grid()


def on_next_week_change() -> None:
    inventory().set_next_week_label(st.session_state.get("next_week_input", ""))


def on_apply_week() -> None:
    inventory().apply_week_label()
    bump_grid()


def on_movement(row_id: str, kind: str, key: str) -> None:
    inventory().record_movement(row_id, kind, st.session_state.get(key, ""))
    bump_grid()


def on_export(fmt: str) -> None:
    inventory().mark_exported(fmt)


# ── Intake ─────────────────────────────────────────────────────────────────────

def handle_upload(upload: Any) -> None:
    if upload is None:
        return
    data = upload.getvalue()
    signature = (upload.name, len(data))
    if signature == st.session_state["loaded_signature"]:
        return
    st.session_state["loaded_signature"] = signature
    logger.info("Upload received: %s (%d bytes)", upload.name, len(data))
    status = inventory().load_file(data, upload.name)
    if status.kind == SUCCESS:
        st.session_state["next_week_input"] = inventory().next_week_label
        bump_grid()


# ── Rendering ──────────────────────────────────────────────────────────────────

def render_status() -> None:
    status = inventory().status
    if status.kind == ERROR:
        st.error(status.message)
    elif status.kind == SUCCESS:
        st.success(status.message)
    elif status.kind == LOADING:
        st.info(status.message)
    elif status.kind == IDLE:
        st.info(status.message)


def render_stats() -> None:
    session = inventory()
    stats = session.stats
    metrics = st.columns(4)
    metrics[0].metric("Rows", f"{stats.row_count:,}")
    metrics[1].metric(
        f"Total {stats.quantity_column}" if stats.quantity_column else "Total quantity",
        f"{stats.total_quantity:,.0f}" if stats.total_quantity is not None else "-",
    )
    metrics[2].metric("Unique SKUs", f"{stats.unique_items:,}" if stats.unique_items is not None else "-")
    metrics[3].metric("Unsaved edits", "Yes" if session.pending_edits else "No")


def grid_cell(value: Any, numeric: bool) -> Any:
    if numeric:
        return None if value == "" else float(value)
    return cell_text(value)


def table_frame(session: InventorySession, rows, numeric: set[str]) -> pd.DataFrame:
    columns = list(session.table.columns)
    records = [{column: grid_cell(row.get(column), column in numeric) for column in columns} for row in rows]
    return pd.DataFrame(records, columns=columns, index=[row.row_id for row in rows])


def same_cell(old: Any, new: Any) -> bool:
    if pd.isna(old) and pd.isna(new):
        return True
    return old == new


def apply_grid_edits(session: InventorySession, before: pd.DataFrame, after: pd.DataFrame, numeric: set[str]) -> bool:
    changed = False
    for row_id in after.index:
        if row_id not in before.index:
            continue
        for column in after.columns:
            new_value = after.at[row_id, column]
            if column in numeric:
                if same_cell(before.at[row_id, column], new_value):
                    continue
                stored = "" if pd.isna(new_value) else tidy_number(float(new_value))
            else:
                new_text = "" if new_value is None else str(new_value)
                if new_text == before.at[row_id, column]:
                    continue
                stored = coerce_text_cell(new_text)
            session.edit_cell(row_id, column, stored)
            changed = True
    return changed


def render_workspace() -> None:
    session = inventory()
    st.text_input("Search rows", key="search_input", placeholder="Filter by any cell value")
    rows = filter_rows(session.table, st.session_state["search_input"])
    if not rows:
        st.info("No rows match the current search.")
    else:
        numeric = set(numeric_columns(session.table))
        before = table_frame(session, rows, numeric)
        after = st.data_editor(
            before,
            hide_index=True,
            num_rows="fixed",
            width="stretch",
            column_config={column: st.column_config.NumberColumn(column) for column in numeric},
            key=f"grid_{st.session_state['grid_version']}",
        )
        if apply_grid_edits(session, before, after, numeric):
            bump_grid()
            st.rerun()

    row_ids = session.table.row_ids()
    labels = {row.row_id: row_label(session, row, index) for index, row in enumerate(session.table.rows, start=1)}
    actions = st.columns([3, 1, 1, 1])
    actions[0].selectbox(
        "Row",
        options=row_ids,
        format_func=lambda row_id: labels.get(row_id, row_id),
        key="row_action_input",
        disabled=not row_ids,
    )
    actions[1].button("Add row", on_click=on_add_row, width="stretch")
    actions[2].button("Duplicate", on_click=on_duplicate_row, width="stretch", disabled=not row_ids)
    actions[3].button("Delete", on_click=on_delete_row, width="stretch", disabled=not row_ids)

    column_controls = st.columns([3, 1])
    column_controls[0].text_input("New column", key="new_column_input", placeholder="New Column")
    column_controls[1].button("Add column", on_click=on_add_column, width="stretch")


def render_week_controls() -> None:
    session = inventory()
    st.session_state.setdefault("next_week_input", session.next_week_label)
    controls = st.columns([3, 1])
    controls[0].text_input(
        "Next week label",
        key="next_week_input",
        on_change=on_next_week_change,
        help="Applied to the week column of every row you log a movement against.",
    )
    controls[1].button(
        "Apply to all rows",
        on_click=on_apply_week,
        width="stretch",
        disabled=not session.week_column,
    )
    if not session.week_column:
        st.caption("No week column detected. Add a column whose header contains \"week\" to track weeks.")


def render_stocktake() -> None:
    session = inventory()
    if not has_inventory_columns(session.table):
        st.info("Add at least one row to start a stocktake.")
        return
    st.text_input("Find item", key="stocktake_search_input", placeholder="Item name or SKU")
    rows = stocktake_rows(session.table, st.session_state["stocktake_search_input"])
    if not rows:
        st.info("No items match the current search.")
        return
    if len(rows) > MAX_STOCKTAKE_ROWS:
        st.caption(f"Showing the first {MAX_STOCKTAKE_ROWS} of {len(rows):,} items. Narrow the search to see more.")
        rows = rows[:MAX_STOCKTAKE_ROWS]

    positions = {row_id: index for index, row_id in enumerate(session.table.row_ids(), start=1)}
    columns = session.table.columns
    opening_column = find_role_column(columns, OPENING)
    closing_column = find_role_column(columns, CLOSING)
    version = st.session_state["grid_version"]

    header = st.columns([3, 1, 1, 1, 1])
    header[0].markdown("**Item**")
    header[1].markdown(f"**{opening_column or 'Opening'}**")
    header[2].markdown(f"**{find_role_column(columns, RECEIVED) or DEFAULT_LABELS[RECEIVED]}**")
    header[3].markdown(f"**{find_role_column(columns, USED) or DEFAULT_LABELS[USED]}**")
    header[4].markdown(f"**{closing_column or DEFAULT_LABELS[CLOSING]}**")

    for row in rows:
        line = st.columns([3, 1, 1, 1, 1])
        line[0].write(row_label(session, row, positions[row.row_id]))
        line[1].write(cell_text(row.get(opening_column)) if opening_column else "-")
        for slot, kind in ((2, RECEIVED), (3, USED)):
            movement_column = find_role_column(columns, kind)
            key = f"{kind}_{row.row_id}_{version}"
            line[slot].text_input(
                kind,
                value=cell_text(row.get(movement_column)) if movement_column else "",
                key=key,
                label_visibility="collapsed",
                on_change=on_movement,
                args=(row.row_id, kind, key),
            )
        line[4].write(cell_text(row.get(closing_column)) if closing_column else "-")


def render_downloads() -> None:
    session = inventory()
    buttons = st.columns(len(EXPORT_FORMATS))
    for slot, (fmt, (extension, mime)) in enumerate(EXPORT_FORMATS.items()):
        payload = session.build_export(fmt)
        buttons[slot].download_button(
            f"Download {extension}",
            data=payload or b"",
            file_name=session.download_name(fmt),
            mime=mime,
            width="stretch",
            disabled=payload is None,
            on_click=on_export,
            args=(fmt,),
            key=f"download_{fmt}",
        )


def set_visuals() -> None:
    st.set_page_config(page_title="stocksheet", page_icon="📦", layout="wide", initial_sidebar_state="collapsed")
    st.markdown(
        """
        <style>
        .block-container {
            padding-top: 2rem;
            padding-bottom: 2rem;
            max-width: 1200px;
        }
        [data-testid="stDecoration"] {
            display: none !important;
        }
        </style>
        """,
        unsafe_allow_html=True,
    )


def main() -> None:
    set_visuals()
    ensure_state()

    st.title("stocksheet")
    st.caption("Load a weekly inventory sheet, log what was sold and received, and export the next week's workbook.")

    with st.container():
        upload = st.file_uploader(
            "Upload inventory sheet",
            type=[ext.lstrip(".") for ext in sorted(SUPPORTED_EXTENSIONS)],
            key=f"upload_{st.session_state['uploader_version']}",
        )
        handle_upload(upload)
        controls = st.columns(3)
        controls[0].button("Start weekly template", type="primary", on_click=on_start_template, width="stretch")
        controls[1].download_button(
            "Download blank template",
            data=inventory().build_blank_template(),
            file_name=BLANK_TEMPLATE_FILE_NAME,
            mime=XLSX_MIME_TYPE,
            width="stretch",
            key="download_blank_template",
        )
        controls[2].button("Reset", on_click=on_reset, width="stretch")

    render_status()

    session = inventory()
    if session.table.is_empty:
        st.info(
            "Supported here: "
            + " ".join(sorted(SUPPORTED_EXTENSIONS))
            + f" up to {config.MAX_UPLOAD_MB} MB. Only the first sheet of a workbook is read."
        )
        return

    render_stats()
    render_week_controls()
    workspace, stocktake = st.tabs(["Workspace", "Stocktake"])
    with workspace:
        render_workspace()
    with stocktake:
        render_stocktake()
    render_downloads()


if __name__ == "__main__":
    main()
