"""
Shopping cart: staging area for rental lines before a quotation exists.

The cart re-prices a line every time one of its inputs changes, so it never
holds a stale price. Issuing a quotation copies the lines; later cart edits do
not reach the quotation.
"""
from dataclasses import dataclass
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Callable, List, Optional

from loguru import logger

from config.company import CompanyConfig, RentalRules
from database.models.order_line import RentalOrderLine
from database.models.product import Product, RentalPeriod
from database.models.quotation import Quotation, QuotationStatus
from services import pricing
from services.exceptions import BookingNotAllowed, EmptyCart, InvalidQuantity, NotFound
from services.ids import generate_id, money


@dataclass
class CartItem:
    product: Product
    quantity: int
    rental_period: RentalPeriod
    start_date: datetime
    end_date: datetime
    price_per_period: Decimal

    @property
    def line_total(self) -> Decimal:
        return money(self.price_per_period * self.quantity)


class Cart:
    """Per-session cart keyed by product id"""

    def __init__(
        self,
        config: CompanyConfig,
        clock: Callable[[], datetime] = datetime.now,
        id_factory: Callable[[str], str] = generate_id,
        rules: Optional[RentalRules] = None,
    ):
        self.config = config
        self.clock = clock
        self.id_factory = id_factory
        self.rules = rules
        self._items: List[CartItem] = []

    @property
    def items(self) -> List[CartItem]:
        return list(self._items)

    def _find(self, product_id: str) -> Optional[int]:
        for index, item in enumerate(self._items):
            if item.product.id == product_id:
                return index
        return None

    def _price(self, product, quantity, period, start_date, end_date) -> Decimal:
        if quantity < 1:
            raise InvalidQuantity(quantity)
        if self.rules is not None:
            validate_booking(self.rules, period, start_date, end_date, self.clock())
        return pricing.price_per_period(product, period, start_date, end_date)

    def add_item(
        self,
        product: Product,
        quantity: int,
        period,
        start_date: datetime,
        end_date: datetime,
    ) -> CartItem:
        """Add a line; a product already in the cart has its line replaced"""
        if not product.is_rentable:
            raise BookingNotAllowed(f"Product {product.id} is not available for rent")
        period = pricing.coerce_period(period)
        item = CartItem(
            product=product,
            quantity=quantity,
            rental_period=period,
            start_date=start_date,
            end_date=end_date,
            price_per_period=self._price(product, quantity, period, start_date, end_date),
        )

        index = self._find(product.id)
        if index is None:
            self._items.append(item)
        else:
            self._items[index] = item
        logger.debug(f"Cart line {product.id}: {quantity} x {item.price_per_period} ({period.value})")
        return item

    def update_item(
        self,
        product_id: str,
        quantity: int = None,
        period=None,
        start_date: datetime = None,
        end_date: datetime = None,
    ) -> CartItem:
        """Change any input of a line and re-price it"""
        index = self._find(product_id)
        if index is None:
            raise NotFound("Cart item", product_id)
        current = self._items[index]

        quantity = current.quantity if quantity is None else quantity
        period = current.rental_period if period is None else pricing.coerce_period(period)
        start_date = start_date or current.start_date
        end_date = end_date or current.end_date

        updated = CartItem(
            product=current.product,
            quantity=quantity,
            rental_period=period,
            start_date=start_date,
            end_date=end_date,
            price_per_period=self._price(current.product, quantity, period, start_date, end_date),
        )
        self._items[index] = updated
        return updated

    def remove_item(self, product_id: str) -> None:
        self._items = [item for item in self._items if item.product.id != product_id]

    def clear(self) -> None:
        self._items = []

    def item_count(self) -> int:
        return sum(item.quantity for item in self._items)

    def subtotal(self) -> Decimal:
        return money(sum((item.price_per_period * item.quantity for item in self._items), Decimal(0)))

    def tax(self) -> Decimal:
        return money(self.subtotal() * self.config.tax_rate / 100)

    def total(self) -> Decimal:
        return self.subtotal() + self.tax()

    def create_quotation(self, customer_id: str, customer_name: str, notes: str = "") -> Quotation:
        """
        Issue a draft quotation from the current lines.

        The cart is left untouched; clearing it is up to the caller.
        """
        if not self._items:
            raise EmptyCart()

        now = self.clock()
        lines = [
            RentalOrderLine(
                id=self.id_factory("line"),
                position=position,
                product_id=item.product.id,
                product_name=item.product.name,
                quantity=item.quantity,
                rental_period=item.rental_period,
                start_date=item.start_date,
                end_date=item.end_date,
                price_per_period=item.price_per_period,
                total_price=item.line_total,
            )
            for position, item in enumerate(self._items)
        ]

        subtotal = self.subtotal()
        tax = self.tax()
        quotation = Quotation(
            id=self.id_factory("quote"),
            customer_id=customer_id,
            customer_name=customer_name,
            lines=lines,
            status=QuotationStatus.DRAFT,
            subtotal=subtotal,
            tax=tax,
            total=subtotal + tax,
            valid_until=now + timedelta(days=self.config.quotation_validity_days),
            notes=notes,
            created_at=now,
        )
        logger.info(f"Quotation {quotation.id} drafted for {customer_id}: {len(lines)} line(s), total {quotation.total}")
        return quotation


def validate_booking(rules: RentalRules, period, start_date: datetime, end_date: datetime, now: datetime) -> None:
    """Check a booking against the company's rental rules"""
    period = pricing.coerce_period(period)

    allowed = {
        RentalPeriod.HOURLY: rules.allow_hourly,
        RentalPeriod.DAILY: rules.allow_daily,
        RentalPeriod.WEEKLY: rules.allow_weekly,
    }
    if not allowed.get(period, True):
        raise BookingNotAllowed(f"{period.value} rentals are disabled")

    if end_date < start_date:
        # pricing reports the range error itself
        return

    span = end_date - start_date
    if period is RentalPeriod.HOURLY and span < timedelta(hours=rules.min_rental_hours):
        raise BookingNotAllowed(f"Hourly rentals last at least {rules.min_rental_hours} hour(s)")
    if span > timedelta(days=rules.max_rental_days):
        raise BookingNotAllowed(f"Rentals last at most {rules.max_rental_days} day(s)")
    if start_date - now > timedelta(days=rules.advance_booking_days):
        raise BookingNotAllowed(f"Bookings open {rules.advance_booking_days} day(s) ahead")
