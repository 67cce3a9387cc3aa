import unittest

from stocksheet.columns import CLOSING, ITEM, OPENING, RECEIVED, SKU, USED, WEEK
from stocksheet.template import TEMPLATE_COLUMNS, build_blank_template_table, build_template_table
from stocksheet.weeks import suggest_next_week_label


class TemplateTests(unittest.TestCase):
    def test_template_shape(self):
        table = build_template_table()

        self.assertEqual(len(table.columns), 9)
        self.assertEqual(len(table.rows), 4)
        for row in table.rows:
            self.assertEqual(set(row.values), set(table.columns))

    def test_last_row_is_next_week_placeholder(self):
        table = build_template_table()
        first, last = table.rows[0], table.rows[-1]

        self.assertEqual(last.get("Week"), suggest_next_week_label(first.get("Week")))
        self.assertEqual(last.get("Week"), "Week 25")
        self.assertEqual(last.get("Units Sold"), 0)
        self.assertEqual(last.get("Units Received"), 0)
        self.assertEqual(last.get("Item Name"), "")

    def test_seed_rows_balance(self):
        for row in build_template_table().rows[:3]:
            expected = row.get("Opening Stock") + row.get("Units Received") - row.get("Units Sold")
            self.assertEqual(row.get("Closing Stock"), expected)

    def test_every_role_is_detected(self):
        roles = build_template_table().role_map()

        for role in (WEEK, ITEM, SKU, OPENING, RECEIVED, USED, CLOSING):
            self.assertIsNotNone(roles[role], role)

    def test_row_ids_are_fresh_per_build(self):
        self.assertNotEqual(build_template_table().row_ids(), build_template_table().row_ids())

    def test_blank_template_has_columns_only(self):
        table = build_blank_template_table()

        self.assertEqual(table.columns, TEMPLATE_COLUMNS)
        self.assertEqual(table.rows, ())


if __name__ == "__main__":
    unittest.main()
