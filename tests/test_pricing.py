import unittest
from datetime import datetime, timedelta
from decimal import Decimal

from database.models.product import RentalPeriod
from services import pricing
from services.exceptions import InvalidPeriod, InvalidQuantity, InvalidRange
from tests.helpers import make_product


class PricingTestCase(unittest.TestCase):
    def setUp(self):
        self.product = make_product()
        self.start = datetime(2024, 6, 1, 10, 0)

    # ---------- per-period formulas ----------

    def test_daily_rate_over_four_days(self):
        amount = pricing.price_per_period(
            self.product, RentalPeriod.DAILY, datetime(2024, 6, 1), datetime(2024, 6, 5)
        )
        self.assertEqual(amount, Decimal("10000.00"))

    def test_hourly_rounds_up_partial_hours(self):
        end = self.start + timedelta(hours=2, minutes=30)
        self.assertEqual(pricing.estimate_duration("hourly", self.start, end), 3)
        self.assertEqual(pricing.price_per_period(self.product, "hourly", self.start, end), Decimal("1500.00"))

    def test_ten_minutes_bills_one_hour(self):
        end = self.start + timedelta(minutes=10)
        self.assertEqual(pricing.price_per_period(self.product, "hourly", self.start, end), Decimal("500.00"))

    def test_daily_rounds_up_partial_days(self):
        end = self.start + timedelta(hours=26)
        self.assertEqual(pricing.estimate_duration(RentalPeriod.DAILY, self.start, end), 2)

    def test_weekly_counts_started_weeks(self):
        self.assertEqual(
            pricing.price_per_period(self.product, "weekly", self.start, self.start + timedelta(days=10)),
            Decimal("24000.00"),
        )
        self.assertEqual(
            pricing.estimate_duration("weekly", self.start, self.start + timedelta(days=1)), 1
        )

    def test_monthly_uses_average_month_length(self):
        end = self.start + timedelta(days=45, seconds=57024)  # 45.66 days
        self.assertEqual(pricing.estimate_duration("monthly", self.start, end), Decimal("1.5"))
        self.assertEqual(pricing.price_per_period(self.product, "monthly", self.start, end), Decimal("90000.00"))

    def test_monthly_and_yearly_bill_at_least_one_unit(self):
        end = self.start + timedelta(days=15)
        self.assertEqual(pricing.price_per_period(self.product, "monthly", self.start, end), Decimal("60000.00"))
        self.assertEqual(pricing.price_per_period(self.product, "yearly", self.start, end), Decimal("600000.00"))

    def test_yearly_uses_average_year_length(self):
        end = self.start + timedelta(days=730, hours=12)
        self.assertEqual(pricing.estimate_duration("yearly", self.start, end), 2)

    def test_equal_instants_bill_one_unit(self):
        for period in RentalPeriod:
            self.assertEqual(pricing.estimate_duration(period, self.start, self.start), 1, period)

    def test_price_multiplies_by_quantity(self):
        amount = pricing.price(self.product, "daily", 3, datetime(2024, 6, 1), datetime(2024, 6, 5))
        self.assertEqual(amount, Decimal("30000.00"))

    # ---------- floor property ----------

    def test_price_is_positive_and_at_least_one_unit(self):
        spans = [timedelta(0), timedelta(minutes=1), timedelta(minutes=59), timedelta(hours=5),
                 timedelta(days=1), timedelta(days=6, hours=23), timedelta(days=40), timedelta(days=400)]
        for period in RentalPeriod:
            rate = self.product.rate_for(period)
            for span in spans:
                end = self.start + span
                duration = pricing.estimate_duration(period, self.start, end)
                self.assertGreaterEqual(duration, 1, (period, span))
                self.assertGreaterEqual(pricing.price(self.product, period, 1, self.start, end), rate)

    def test_rate_table_covers_every_period(self):
        prices = self.product.rental_prices
        self.assertEqual(set(prices), set(RentalPeriod))
        self.assertEqual(prices[RentalPeriod.WEEKLY], Decimal("12000"))

    # ---------- errors ----------

    def test_unknown_period(self):
        with self.assertRaises(InvalidPeriod):
            pricing.price_per_period(self.product, "fortnightly", self.start, self.start)
        with self.assertRaises(InvalidPeriod):
            pricing.estimate_duration("custom", self.start, self.start)

    def test_end_before_start(self):
        with self.assertRaises(InvalidRange):
            pricing.price_per_period(self.product, "daily", self.start, self.start - timedelta(seconds=1))

    def test_quantity_below_one(self):
        with self.assertRaises(InvalidQuantity):
            pricing.price(self.product, "daily", 0, self.start, self.start + timedelta(days=1))

    # ---------- calendar arithmetic ----------

    def test_add_calendar_period_uses_calendar_fields(self):
        self.assertEqual(
            pricing.add_calendar_period(datetime(2024, 1, 31), "monthly"), datetime(2024, 2, 29)
        )
        self.assertEqual(
            pricing.add_calendar_period(datetime(2024, 2, 29), RentalPeriod.YEARLY), datetime(2025, 2, 28)
        )
        self.assertEqual(
            pricing.add_calendar_period(datetime(2024, 6, 1), "weekly", 2), datetime(2024, 6, 15)
        )
        self.assertEqual(
            pricing.add_calendar_period(datetime(2024, 6, 1, 23), "hourly", 3), datetime(2024, 6, 2, 2)
        )

    def test_calendar_month_differs_from_estimated_month(self):
        start = datetime(2024, 2, 1)
        end = pricing.add_calendar_period(start, "monthly")
        # 29 days is less than the 30.44 day average, so pricing floors it to one unit
        self.assertEqual(pricing.estimate_duration("monthly", start, end), 1)
        self.assertEqual(end, datetime(2024, 3, 1))

    def test_add_calendar_period_rejects_zero_count(self):
        with self.assertRaises(InvalidQuantity):
            pricing.add_calendar_period(self.start, "daily", 0)


if __name__ == "__main__":
    unittest.main()
