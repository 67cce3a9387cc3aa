import unittest

from stocksheet.table import EMPTY_TABLE, load_table
from stocksheet.template import build_template_table
from stocksheet.views import compute_stats, filter_rows, has_inventory_columns, numeric_columns, stocktake_rows


def catalogue():
    return load_table(
        ["SKU", "Item Name", "Category", "Qty"],
        [
            ["SKU-1", "Cold Brew", "Beverage", 10],
            ["SKU-2", "Muffin", "Bakery", "4 boxes"],
            ["SKU-2", "Muffin (day old)", "Bakery", "n/a"],
            ["", "Napkins", "Supplies", ""],
        ],
    )


class FilterTests(unittest.TestCase):
    def test_blank_query_returns_every_row(self):
        table = catalogue()

        self.assertEqual(len(filter_rows(table, "  ")), 4)

    def test_search_is_case_insensitive_over_all_cells(self):
        rows = filter_rows(catalogue(), "bakery")

        self.assertEqual([row.get("Item Name") for row in rows], ["Muffin", "Muffin (day old)"])

    def test_numeric_cells_are_searchable(self):
        rows = filter_rows(catalogue(), "10")

        self.assertEqual([row.get("SKU") for row in rows], ["SKU-1"])

    def test_stocktake_search_ignores_other_columns(self):
        table = catalogue()

        self.assertEqual(stocktake_rows(table, "bakery"), [])
        self.assertEqual([row.get("Item Name") for row in stocktake_rows(table, "sku-2")], ["Muffin", "Muffin (day old)"])

    def test_stocktake_falls_back_to_first_column(self):
        table = load_table(["Aisle", "Count"], [["A1", 3], ["B2", 4]])

        self.assertEqual([row.get("Aisle") for row in stocktake_rows(table, "b2")], ["B2"])


class StatsTests(unittest.TestCase):
    def test_quantity_total_skips_unparseable_cells(self):
        stats = compute_stats(catalogue())

        self.assertEqual(stats.row_count, 4)
        self.assertEqual(stats.quantity_column, "Qty")
        self.assertEqual(stats.total_quantity, 14.0)

    def test_unique_items_ignores_blank_skus(self):
        stats = compute_stats(catalogue())

        self.assertEqual(stats.sku_column, "SKU")
        self.assertEqual(stats.unique_items, 2)

    def test_stats_without_matching_columns(self):
        stats = compute_stats(load_table(["Notes"], [["x"]]))

        self.assertIsNone(stats.total_quantity)
        self.assertIsNone(stats.unique_items)

    def test_template_stats_use_opening_stock(self):
        stats = compute_stats(build_template_table())

        self.assertEqual(stats.quantity_column, "Opening Stock")
        self.assertEqual(stats.total_quantity, 265.0)
        self.assertEqual(stats.unique_items, 3)

    def test_has_inventory_columns(self):
        self.assertTrue(has_inventory_columns(catalogue()))
        self.assertFalse(has_inventory_columns(EMPTY_TABLE))
        self.assertFalse(has_inventory_columns(load_table(["Item", "Qty"], [])))


class NumericColumnsTests(unittest.TestCase):
    def test_quantity_headers_with_numeric_cells(self):
        table = load_table(["Item", "Qty", "Unit Price", "Notes"], [["Tea", 3, 1.5, "x"], ["Cocoa", "", 2, ""]])

        self.assertEqual(numeric_columns(table), ["Qty", "Unit Price"])

    def test_text_in_quantity_column_keeps_it_as_text(self):
        self.assertEqual(numeric_columns(catalogue()), [])

    def test_template_movement_and_stock_columns_are_numeric(self):
        self.assertEqual(
            numeric_columns(build_template_table()),
            ["Opening Stock", "Units Received", "Units Sold", "Closing Stock"],
        )


if __name__ == "__main__":
    unittest.main()
