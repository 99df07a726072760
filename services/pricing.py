"""
Rental pricing.

Two different notions of "how long is a month" live here on purpose:

* ``estimate_duration`` turns a date span into billable units using average
  month/year lengths (30.44 and 365.25 days). It prices cart lines.
* ``add_calendar_period`` moves a date forward by whole calendar units
  (``relativedelta``). It proposes return dates.

They are not interchangeable: Jan 31 + 1 calendar month is Feb 29/28, which no
average-day constant reproduces.
"""
import math
from datetime import datetime, timedelta
from decimal import Decimal

from dateutil.relativedelta import relativedelta
from loguru import logger

from database.models.product import Product, RentalPeriod
from services.exceptions import InvalidPeriod, InvalidRange, InvalidQuantity
from services.ids import money

SECONDS_PER_HOUR = Decimal(3600)
SECONDS_PER_DAY = Decimal(86400)
DAYS_PER_WEEK = 7
DAYS_PER_MONTH = Decimal("30.44")
DAYS_PER_YEAR = Decimal("365.25")

ONE = Decimal(1)


def coerce_period(period) -> RentalPeriod:
    """Accept a ``RentalPeriod`` or its string tag"""
    if isinstance(period, RentalPeriod):
        return period
    try:
        return RentalPeriod(period)
    except ValueError:
        raise InvalidPeriod(period) from None


def _span_seconds(start: datetime, end: datetime) -> Decimal:
    if end < start:
        raise InvalidRange(start, end)
    span: timedelta = end - start
    return Decimal(span.days) * SECONDS_PER_DAY + Decimal(span.seconds) + Decimal(span.microseconds) / Decimal(10 ** 6)


def estimate_duration(period, start: datetime, end: datetime) -> Decimal:
    """
    Number of billable units between two instants.

    Never less than one unit: a 10 minute hourly rental bills one hour and a
    same-instant range bills one unit of its period.
    """
    period = coerce_period(period)
    seconds = _span_seconds(start, end)
    days = seconds / SECONDS_PER_DAY
    billed_days = max(1, math.ceil(days))

    if period is RentalPeriod.HOURLY:
        return Decimal(max(1, math.ceil(seconds / SECONDS_PER_HOUR)))
    if period is RentalPeriod.DAILY:
        return Decimal(billed_days)
    if period is RentalPeriod.WEEKLY:
        return Decimal(math.ceil(billed_days / DAYS_PER_WEEK))
    if period is RentalPeriod.MONTHLY:
        return max(ONE, days / DAYS_PER_MONTH)
    if period is RentalPeriod.YEARLY:
        return max(ONE, days / DAYS_PER_YEAR)
    raise InvalidPeriod(period)


def add_calendar_period(start: datetime, period, count: int = 1) -> datetime:
    """Move ``start`` forward by ``count`` whole calendar periods"""
    period = coerce_period(period)
    if count < 1:
        raise InvalidQuantity(count)

    deltas = {
        RentalPeriod.HOURLY: relativedelta(hours=count),
        RentalPeriod.DAILY: relativedelta(days=count),
        RentalPeriod.WEEKLY: relativedelta(weeks=count),
        RentalPeriod.MONTHLY: relativedelta(months=count),
        RentalPeriod.YEARLY: relativedelta(years=count),
    }
    return start + deltas[period]


def price_per_period(product: Product, period, start: datetime, end: datetime) -> Decimal:
    """Rate for the period times the billed duration, before quantity"""
    period = coerce_period(period)
    duration = estimate_duration(period, start, end)
    amount = money(product.rental_prices[period] * duration)
    logger.debug(f"Priced {product.id} {period.value}: {duration} unit(s) -> {amount}")
    return amount


def price(product: Product, period, quantity: int, start: datetime, end: datetime) -> Decimal:
    """Full price of a rental line"""
    if quantity < 1:
        raise InvalidQuantity(quantity)
    return money(price_per_period(product, period, start, end) * quantity)
