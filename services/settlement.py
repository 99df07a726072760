"""
Return settlement: late fees and completion of rental orders.
"""
import math
from dataclasses import dataclass
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Iterable, List, Tuple

from loguru import logger

from config.company import CompanyConfig
from database.models.rental import OrderStatus, RentalOrder
from services.ids import money
from services.transitions import check_transition

ONE_DAY = timedelta(days=1)


@dataclass(frozen=True)
class SettlementResult:
    late_fee: Decimal
    days_late: int
    status: OrderStatus


def calculate_late_fee(scheduled: datetime, actual: datetime, late_fee_per_day) -> Tuple[int, Decimal]:
    """
    Days late and the fee for them.

    Any part of a day past the scheduled return counts as a whole day;
    returning on time or early costs nothing.
    """
    if actual <= scheduled:
        return 0, money(0)
    days_late = math.ceil((actual - scheduled) / ONE_DAY)
    return days_late, money(Decimal(days_late) * Decimal(str(late_fee_per_day)))


def settle(
    order: RentalOrder,
    actual_return_date: datetime,
    config: CompanyConfig,
    now: datetime = None,
) -> SettlementResult:
    """
    Finalize the return of an active order.

    Everything is computed before the order is touched, then actual return
    date, late fee and status are written together. ``now`` is the time of
    the write (defaults to the return instant); a back-dated return still
    stamps ``updated_at`` with it.
    """
    check_transition(order.status, OrderStatus.COMPLETED)

    # no schedule to be late against
    scheduled = order.return_date or actual_return_date
    days_late, late_fee = calculate_late_fee(scheduled, actual_return_date, config.late_fee_per_day)

    order.actual_return_date = actual_return_date
    order.late_fee = late_fee
    order.status = OrderStatus.COMPLETED
    order.updated_at = now or actual_return_date

    if days_late:
        logger.warning(f"Order {order.id} returned {days_late} day(s) late, late fee {late_fee}")
    else:
        logger.info(f"Order {order.id} returned on time")
    return SettlementResult(late_fee=late_fee, days_late=days_late, status=OrderStatus.COMPLETED)


def pending_returns(orders: Iterable[RentalOrder], now: datetime, within_days: int = 3) -> List[RentalOrder]:
    """Active orders whose scheduled return falls within the next ``within_days`` days"""
    horizon = now + timedelta(days=within_days)
    return [
        order for order in orders
        if order.is_active
        and order.return_date is not None
        and order.return_date <= horizon
    ]


def overdue_returns(orders: Iterable[RentalOrder], now: datetime) -> List[RentalOrder]:
    """Active orders already past their scheduled return"""
    return [
        order for order in orders
        if order.is_active
        and order.return_date is not None
        and order.return_date < now
    ]
