import unittest

from stocksheet.table import (
    EMPTY_TABLE,
    add_column,
    add_row,
    delete_row,
    duplicate_row,
    edit_cell,
    ensure_unique_column_name,
    export_records,
    load_table,
    normalize_columns,
    relabel_column,
)


def sample_table():
    return load_table(
        ["Week", "Item", "Units Sold", "Notes"],
        [
            ["Week 1", "Coffee", 4, "ok"],
            ["Week 1", "Tea", 2, ""],
        ],
    )


def assert_rows_match_columns(test, table):
    for row in table.rows:
        test.assertEqual(set(row.values), set(table.columns))


class NormalizeColumnsTests(unittest.TestCase):
    def test_blank_headers_get_positional_names(self):
        self.assertEqual(normalize_columns(["Item", "", None]), ["Item", "Column 2", "Column 3"])

    def test_duplicate_headers_get_numeric_suffixes(self):
        self.assertEqual(normalize_columns(["Qty", "Qty", "Qty"]), ["Qty", "Qty 2", "Qty 3"])

    def test_ensure_unique_column_name(self):
        self.assertEqual(ensure_unique_column_name("Notes", ["Notes"]), "Notes 2")
        self.assertEqual(ensure_unique_column_name("Notes", ["Notes", "Notes 2"]), "Notes 3")
        self.assertEqual(ensure_unique_column_name("  ", []), "New Column")


class LoadTableTests(unittest.TestCase):
    def test_positional_rows_are_padded(self):
        table = load_table(["A", "B", "C"], [["x"]])

        self.assertEqual(table.rows[0].values, {"A": "x", "B": "", "C": ""})

    def test_mapping_rows_are_keyed_by_raw_header(self):
        table = load_table(["Item", "Item"], [{"Item": "Coffee", "Item 2": "Tea"}])

        self.assertEqual(table.columns, ("Item", "Item 2"))
        self.assertEqual(table.rows[0].values, {"Item": "Coffee", "Item 2": "Tea"})

    def test_mapping_rows_missing_a_column_get_empty_string(self):
        table = load_table(["Item", "Qty", "Notes"], [{"Item": "Tea", "Qty": 3}])

        self.assertEqual(table.rows[0].values, {"Item": "Tea", "Qty": 3, "Notes": ""})

    def test_none_and_nan_become_empty(self):
        table = load_table(["A", "B"], [[None, float("nan")]])

        self.assertEqual(table.rows[0].values, {"A": "", "B": ""})

    def test_row_ids_are_unique(self):
        table = sample_table()

        self.assertEqual(len(set(table.row_ids())), len(table.rows))

    def test_round_trip_preserves_values(self):
        columns = ["Week", "Item", "Units Sold"]
        records = [
            {"Week": "Week 1", "Item": "Coffee", "Units Sold": 4},
            {"Week": "Week 1", "Item": "Tea", "Units Sold": ""},
        ]

        exported_columns, exported_records = export_records(load_table(columns, records))

        self.assertEqual(exported_columns, columns)
        self.assertEqual(exported_records, records)

    def test_export_never_includes_row_ids(self):
        _, records = export_records(sample_table())

        for record in records:
            self.assertEqual(list(record), ["Week", "Item", "Units Sold", "Notes"])


class RowOperationTests(unittest.TestCase):
    def test_add_row_uses_week_label_and_zero_movements(self):
        table = add_row(sample_table(), "Week 2")

        new_row = table.rows[-1]
        self.assertEqual(new_row.values, {"Week": "Week 2", "Item": "", "Units Sold": 0, "Notes": ""})
        assert_rows_match_columns(self, table)

    def test_add_row_without_label_leaves_week_blank(self):
        table = add_row(sample_table())

        self.assertEqual(table.rows[-1].get("Week"), "")

    def test_duplicate_row_appends_copy_with_new_id(self):
        table = sample_table()
        source = table.rows[0]

        duplicated = duplicate_row(table, source.row_id)

        self.assertEqual(len(duplicated), 3)
        self.assertEqual(duplicated.rows[-1].values, source.values)
        self.assertNotEqual(duplicated.rows[-1].row_id, source.row_id)

    def test_duplicate_and_delete_unknown_row_are_noops(self):
        table = sample_table()

        self.assertIs(duplicate_row(table, "missing"), table)
        self.assertIs(delete_row(table, "missing"), table)

    def test_delete_row_removes_only_target(self):
        table = sample_table()
        target = table.rows[0].row_id

        remaining = delete_row(table, target)

        self.assertEqual(remaining.row_ids(), [table.rows[1].row_id])
        self.assertEqual(len(table), 2)

    def test_edit_cell_sets_one_value(self):
        table = sample_table()
        target = table.rows[1].row_id

        edited = edit_cell(table, target, "Units Sold", 9)

        self.assertEqual(edited.rows[1].get("Units Sold"), 9)
        self.assertEqual(edited.rows[0].get("Units Sold"), 4)
        self.assertEqual(table.rows[1].get("Units Sold"), 2)

    def test_edit_cell_ignores_unknown_row_or_column(self):
        table = sample_table()

        self.assertIs(edit_cell(table, "missing", "Item", "x"), table)
        self.assertIs(edit_cell(table, table.rows[0].row_id, "Nope", "x"), table)


class ColumnOperationTests(unittest.TestCase):
    def test_add_column_keeps_names_unique_and_fills_rows(self):
        table, added = add_column(sample_table(), "Notes")

        self.assertEqual(added, "Notes 2")
        self.assertEqual(table.columns[-1], "Notes 2")
        self.assertEqual(len(set(table.columns)), len(table.columns))
        assert_rows_match_columns(self, table)

    def test_repeated_add_column_calls_stay_unique(self):
        table = sample_table()
        added = []
        for _ in range(5):
            table, name = add_column(table, "Notes")
            added.append(name)

        self.assertEqual(added, ["Notes 2", "Notes 3", "Notes 4", "Notes 5", "Notes 6"])
        self.assertEqual(len(set(table.columns)), len(table.columns))
        assert_rows_match_columns(self, table)

    def test_add_column_to_empty_table(self):
        table, added = add_column(EMPTY_TABLE, "")

        self.assertEqual(added, "New Column")
        self.assertEqual(table.columns, ("New Column",))
        self.assertEqual(table.rows, ())

    def test_relabel_column_sets_every_row(self):
        table = relabel_column(sample_table(), "Week", "Week 2")

        self.assertEqual({row.get("Week") for row in table.rows}, {"Week 2"})

    def test_relabel_unknown_column_is_noop(self):
        table = sample_table()

        self.assertIs(relabel_column(table, "Missing", "x"), table)


if __name__ == "__main__":
    unittest.main()
