import math
import unittest

from stocksheet.numbers import coerce_numeric, format_quantity, parse_float, tidy_number


class ParseFloatTests(unittest.TestCase):
    def test_numbers_pass_through(self):
        self.assertEqual(parse_float(12), 12.0)
        self.assertEqual(parse_float(2.5), 2.5)

    def test_text_uses_leading_numeric_prefix(self):
        self.assertEqual(parse_float("12 units"), 12.0)
        self.assertEqual(parse_float("  -3.5kg"), -3.5)
        self.assertEqual(parse_float(".5"), 0.5)
        self.assertEqual(parse_float("1e3"), 1000.0)

    def test_unparseable_values_return_none(self):
        self.assertIsNone(parse_float("units"))
        self.assertIsNone(parse_float(""))
        self.assertIsNone(parse_float(None))
        self.assertIsNone(parse_float(True))

    def test_non_finite_values_are_rejected(self):
        self.assertIsNone(parse_float(math.inf))
        self.assertIsNone(parse_float(float("nan")))


class CoerceNumericTests(unittest.TestCase):
    def test_blank_and_garbage_fall_back_to_default(self):
        self.assertEqual(coerce_numeric(""), 0.0)
        self.assertEqual(coerce_numeric(None), 0.0)
        self.assertEqual(coerce_numeric("n/a", default=7.0), 7.0)

    def test_numeric_text_is_parsed(self):
        self.assertEqual(coerce_numeric("42"), 42.0)


class TidyNumberTests(unittest.TestCase):
    def test_integral_floats_become_ints(self):
        self.assertEqual(tidy_number(8.0), 8)
        self.assertIsInstance(tidy_number(8.0), int)

    def test_other_values_are_untouched(self):
        self.assertEqual(tidy_number(8.25), 8.25)
        self.assertEqual(tidy_number("Week 24"), "Week 24")

    def test_format_quantity_drops_trailing_zero(self):
        self.assertEqual(format_quantity(5.0), "5")
        self.assertEqual(format_quantity(2.5), "2.5")


if __name__ == "__main__":
    unittest.main()
