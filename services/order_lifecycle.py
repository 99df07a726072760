"""
Status machines for quotations and rental orders, quotation -> order
conversion and order -> invoice generation.

Every status change goes through ``transition_quotation`` or
``transition_order``; a move outside ``services.transitions`` raises
``InvalidTransition`` and leaves the record untouched.
"""
from datetime import datetime, timedelta
from typing import Callable, FrozenSet

from loguru import logger

from config.company import CompanyConfig
from database.models.invoice import Invoice, InvoiceStatus
from database.models.quotation import Quotation, QuotationStatus
from database.models.rental import OrderStatus, RentalOrder
from services import settlement
from services.exceptions import AlreadyConverted, InvalidTransition
from services.ids import generate_id, money
from services.transitions import allowed_transitions, check_transition


def allowed_quotation_transitions(status) -> FrozenSet[QuotationStatus]:
    return allowed_transitions(QuotationStatus(status))


def allowed_order_transitions(status) -> FrozenSet[OrderStatus]:
    return allowed_transitions(OrderStatus(status))


# ---------------------------
# Quotations
# ---------------------------


def transition_quotation(quotation: Quotation, target) -> Quotation:
    target = QuotationStatus(target)
    check_transition(quotation.status, target)
    logger.info(f"Quotation {quotation.id}: {quotation.status.value} -> {target.value}")
    quotation.status = target
    return quotation


def send_quotation(quotation: Quotation) -> Quotation:
    return transition_quotation(quotation, QuotationStatus.SENT)


def reject_quotation(quotation: Quotation) -> Quotation:
    return transition_quotation(quotation, QuotationStatus.REJECTED)


def expire_quotation(quotation: Quotation, now: datetime) -> bool:
    """Expire a sent quotation whose validity has passed. Returns True if it expired."""
    if quotation.status != QuotationStatus.SENT or not quotation.is_expired(now):
        return False
    transition_quotation(quotation, QuotationStatus.EXPIRED)
    return True


def convert_quotation_to_order(
    quotation: Quotation,
    config: CompanyConfig,
    now: datetime,
    order_id: str = None,
    vendor_id: str = None,
    id_factory: Callable[[str], str] = generate_id,
) -> RentalOrder:
    """
    Turn a sent, still valid quotation into a confirmed order.

    A quotation converts at most once: an accepted quotation raises
    ``AlreadyConverted`` instead of producing a second order.
    """
    if quotation.is_converted:
        raise AlreadyConverted(quotation.id, quotation.order_id)
    if quotation.status != QuotationStatus.SENT:
        raise InvalidTransition("Quotation", quotation.status, QuotationStatus.ACCEPTED)
    if quotation.is_expired(now):
        raise InvalidTransition(
            "Quotation", quotation.status, QuotationStatus.ACCEPTED,
            reason=f"validity ended {quotation.valid_until.isoformat()}",
        )

    total = money(quotation.total)
    lines = [line.copy(id_factory("line")) for line in quotation.lines]
    order = RentalOrder(
        id=order_id or id_factory("order"),
        quotation_id=quotation.id,
        customer_id=quotation.customer_id,
        customer_name=quotation.customer_name,
        vendor_id=vendor_id,
        lines=lines,
        status=OrderStatus.CONFIRMED,
        subtotal=money(quotation.subtotal),
        tax=money(quotation.tax),
        total=total,
        security_deposit=money(total * config.security_deposit_percent / 100),
        late_fee=money(0),
        return_date=max((line.end_date for line in lines), default=None),
        notes=quotation.notes or "",
        created_at=now,
        updated_at=now,
    )

    transition_quotation(quotation, QuotationStatus.ACCEPTED)
    quotation.order_id = order.id
    logger.info(f"Quotation {quotation.id} converted to order {order.id} (deposit {order.security_deposit})")
    return order


# ---------------------------
# Orders
# ---------------------------


def check_order_transition(order: RentalOrder, target) -> None:
    """Raise ``InvalidTransition`` unless the order may move to ``target``"""
    check_transition(order.status, OrderStatus(target))


def transition_order(order: RentalOrder, target, now: datetime, config: CompanyConfig = None) -> RentalOrder:
    """
    Move an order to ``target``.

    Entering ``active`` is a pickup; entering ``completed`` settles the return
    at ``now`` and needs ``config`` for the late fee.
    """
    target = OrderStatus(target)
    check_transition(order.status, target)

    if target == OrderStatus.COMPLETED:
        if config is None:
            raise ValueError("Completing an order needs the company configuration")
        settlement.settle(order, now, config, now=now)
        return order

    previous = order.status
    if target == OrderStatus.ACTIVE:
        order.pickup_date = now
    order.status = target
    order.updated_at = now
    logger.info(f"Order {order.id}: {previous.value} -> {target.value}")
    return order


def pickup_order(order: RentalOrder, now: datetime) -> RentalOrder:
    return transition_order(order, OrderStatus.ACTIVE, now)


def cancel_order(order: RentalOrder, now: datetime) -> RentalOrder:
    return transition_order(order, OrderStatus.CANCELLED, now)


def create_invoice(
    order: RentalOrder,
    config: CompanyConfig,
    now: datetime,
    invoice_id: str = None,
    id_factory: Callable[[str], str] = generate_id,
) -> Invoice:
    """
    Bill an order that has been picked up.

    The security deposit was collected at pickup, so it counts as already paid
    and only the order total remains due.
    """
    if not (order.is_active or order.is_settled):
        raise InvalidTransition("Order", order.status, OrderStatus.ACTIVE, reason="only picked-up orders are invoiced")

    deposit = money(order.security_deposit)
    late_fee = money(order.late_fee or 0)
    total = money(order.total) + deposit + late_fee
    amount_due = max(money(0), total - deposit)
    status = InvoiceStatus.PAID if amount_due == 0 else InvoiceStatus.PARTIAL

    invoice = Invoice(
        id=invoice_id or id_factory("inv"),
        order_id=order.id,
        customer_id=order.customer_id,
        customer_name=order.customer_name,
        items=[line.to_snapshot() for line in order.lines],
        subtotal=money(order.subtotal),
        tax=money(order.tax),
        security_deposit=deposit,
        late_fee=late_fee,
        total=total,
        amount_paid=deposit,
        amount_due=amount_due,
        status=status,
        due_date=now + timedelta(days=config.invoice_due_days),
        paid_at=now if status == InvoiceStatus.PAID else None,
        created_at=now,
    )
    logger.info(f"Invoice {invoice.id} created for order {order.id}: due {amount_due} ({status.value})")
    return invoice
