from datetime import datetime, timedelta
from decimal import Decimal

from config.company import CompanyConfig
from database.models.invoice import Invoice, InvoiceStatus
from database.models.product import Product
from database.models.rental import OrderStatus, RentalOrder

CONFIG = CompanyConfig(tax_rate=Decimal("18"), security_deposit_percent=Decimal("25"), late_fee_per_day=Decimal("500"))


class FixedClock:
    """Clock that only moves when told to"""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


class SequentialIds:
    """Predictable ids: line-1, line-2, order-1, ..."""

    def __init__(self):
        self.counters = {}

    def __call__(self, prefix: str) -> str:
        self.counters[prefix] = self.counters.get(prefix, 0) + 1
        return f"{prefix}-{self.counters[prefix]}"


def make_product(
    product_id="prod-1",
    name="Professional DSLR Camera",
    hourly="500",
    daily="2500",
    weekly="12000",
    monthly="60000",
    yearly="600000",
    quantity_on_hand=5,
    quantity_with_customer=0,
    vendor_id="vendor-1",
    is_rentable=True,
) -> Product:
    return Product(
        id=product_id,
        name=name,
        category="Cameras",
        vendor_id=vendor_id,
        rate_hourly=Decimal(hourly),
        rate_daily=Decimal(daily),
        rate_weekly=Decimal(weekly),
        rate_monthly=Decimal(monthly),
        rate_yearly=Decimal(yearly),
        quantity_on_hand=quantity_on_hand,
        quantity_with_customer=quantity_with_customer,
        is_rentable=is_rentable,
    )


def make_order(
    status=OrderStatus.ACTIVE,
    total="4720",
    security_deposit="2000",
    return_date=None,
    order_id="order-1",
    now=datetime(2024, 5, 18),
) -> RentalOrder:
    total = Decimal(total)
    return RentalOrder(
        id=order_id,
        customer_id="customer-1",
        customer_name="John Customer",
        vendor_id="vendor-1",
        lines=[],
        status=status,
        subtotal=total,
        tax=Decimal(0),
        total=total,
        security_deposit=Decimal(security_deposit),
        late_fee=Decimal(0),
        return_date=return_date,
        notes="",
        created_at=now,
        updated_at=now,
    )


def make_invoice(
    total="16800",
    amount_paid="5000",
    status=InvoiceStatus.PARTIAL,
    due_date=datetime(2024, 6, 8),
) -> Invoice:
    total = Decimal(total)
    amount_paid = Decimal(amount_paid)
    return Invoice(
        id="inv-1",
        order_id="order-1",
        customer_id="customer-1",
        customer_name="John Customer",
        items=[],
        subtotal=total,
        tax=Decimal(0),
        security_deposit=amount_paid,
        late_fee=Decimal(0),
        total=total,
        amount_paid=amount_paid,
        amount_due=max(Decimal(0), total - amount_paid),
        status=status,
        due_date=due_date,
        created_at=datetime(2024, 6, 1),
    )
