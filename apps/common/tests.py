from django.test import SimpleTestCase

from apps.common import money
from apps.common.exceptions import ValidationError


class MoneyTests(SimpleTestCase):
    def test_to_major_formats_two_fraction_digits(self):
        self.assertEqual(money.to_major(0), "0.00")
        self.assertEqual(money.to_major(5), "0.05")
        self.assertEqual(money.to_major(2200), "22.00")
        self.assertEqual(money.to_major(123456), "1234.56")
        self.assertEqual(money.to_major(-305), "-3.05")

    def test_from_major_input_rounds_to_nearest_centavo(self):
        self.assertEqual(money.from_major_input("22.00"), 2200)
        self.assertEqual(money.from_major_input("10"), 1000)
        self.assertEqual(money.from_major_input("0.005"), 1)
        self.assertEqual(money.from_major_input("0.004"), 0)
        self.assertEqual(money.from_major_input("R$ 1.234,56"), 123456)
        self.assertEqual(money.from_major_input("7,5"), 750)

    def test_from_major_input_rejects_garbage_and_floats(self):
        for bad in ("", "abc", "NaN", None):
            with self.assertRaises(ValidationError):
                money.from_major_input(bad)
        with self.assertRaises(ValidationError):
            money.from_major_input(22.0)

    def test_round_trip_through_display_string(self):
        for value in list(range(0, 1001)) + [99999, 100000, 123456789]:
            self.assertEqual(money.from_major_input(money.to_major(value)), value)

    def test_integer_arithmetic(self):
        self.assertEqual(money.multiply(500, 2), 1000)
        self.assertEqual(money.total(1000, 1200), 2200)
        self.assertEqual(money.total(), 0)
        with self.assertRaises(ValidationError):
            money.multiply(5.0, 2)
        with self.assertRaises(ValidationError):
            money.total(100, True)

    def test_per_installment_is_display_rounding_only(self):
        self.assertEqual(money.per_installment(2200, 3), 733)
        self.assertEqual(money.per_installment(1000, 3), 333)
        self.assertEqual(money.per_installment(200, 3), 67)
        self.assertEqual(money.per_installment(2200, 1), 2200)
        with self.assertRaises(ValidationError):
            money.per_installment(2200, 0)

    def test_format_brl(self):
        self.assertEqual(money.format_brl(300), "R$ 3.00")
