"""
Payments against invoices.

The invoice keeps running totals (``amount_paid`` / ``amount_due``); each
payment is also appended to ``invoice.payments`` so the history can be
audited and re-added.
"""
from datetime import datetime
from decimal import Decimal
from typing import Callable

from loguru import logger

from database.models.invoice import Invoice, InvoiceStatus
from database.models.payment import PaymentMethod, PaymentRecord
from services.exceptions import InvalidPayment, InvalidPaymentMethod, InvalidTransition
from services.ids import generate_id, money
from services.transitions import check_transition


def coerce_method(method) -> PaymentMethod:
    """Accept a ``PaymentMethod`` or its string tag"""
    if isinstance(method, PaymentMethod):
        return method
    try:
        return PaymentMethod(method)
    except ValueError:
        raise InvalidPaymentMethod(method) from None


def _move(invoice: Invoice, target: InvoiceStatus) -> None:
    # staying put is not a transition (e.g. a second partial payment)
    if invoice.status != target:
        check_transition(invoice.status, target)
        invoice.status = target


def apply_payment(
    invoice: Invoice,
    amount,
    method,
    now: datetime,
    record_id: str = None,
    id_factory: Callable[[str], str] = generate_id,
) -> Invoice:
    """
    Apply a payment and update the invoice in place.

    Paying more than is due is accepted; the balance stops at zero.
    """
    amount = money(amount)
    if amount <= 0:
        raise InvalidPayment(amount)
    method = coerce_method(method)

    amount_paid = money(invoice.amount_paid) + amount
    amount_due = max(money(0), money(invoice.total) - amount_paid)
    status = InvoiceStatus.PAID if amount_due <= 0 else InvoiceStatus.PARTIAL
    if invoice.status == InvoiceStatus.PAID:
        status = InvoiceStatus.PAID

    # validate before touching any field
    if invoice.status != status:
        check_transition(invoice.status, status)

    invoice.amount_paid = amount_paid
    invoice.amount_due = amount_due
    invoice.payment_method = method
    invoice.status = status
    if status == InvoiceStatus.PAID and invoice.paid_at is None:
        invoice.paid_at = now

    invoice.payments.append(
        PaymentRecord(
            id=record_id or id_factory("pay"),
            amount=amount,
            method=method,
            paid_at=now,
        )
    )
    logger.info(f"Invoice {invoice.id}: paid {amount} by {method.value}, due {amount_due} ({status.value})")
    return invoice


def ledger_total(invoice: Invoice) -> Decimal:
    """Sum of the recorded payments (the deposit collected at pickup is not a payment record)"""
    return money(sum((Decimal(record.amount) for record in invoice.payments), Decimal(0)))


def send_invoice(invoice: Invoice) -> Invoice:
    _move(invoice, InvoiceStatus.SENT)
    return invoice


def mark_overdue(invoice: Invoice, now: datetime) -> bool:
    """Flag an unpaid invoice whose due date has passed. Returns True if it changed."""
    if invoice.status not in (InvoiceStatus.SENT, InvoiceStatus.PARTIAL):
        return False
    if now <= invoice.due_date or money(invoice.amount_due) <= 0:
        return False
    _move(invoice, InvoiceStatus.OVERDUE)
    logger.warning(f"Invoice {invoice.id} is overdue (due {invoice.due_date.isoformat()}, balance {invoice.amount_due})")
    return True


def charge_late_fee(invoice: Invoice, late_fee) -> Invoice:
    """Add a settled order's late fee to its open invoice"""
    late_fee = money(late_fee)
    if late_fee <= 0:
        return invoice
    if invoice.status == InvoiceStatus.PAID:
        raise InvalidTransition("Invoice", invoice.status, InvoiceStatus.PARTIAL, reason="paid invoices are not reopened")

    invoice.late_fee = money(invoice.late_fee or 0) + late_fee
    invoice.total = money(invoice.total) + late_fee
    invoice.amount_due = max(money(0), money(invoice.total) - money(invoice.amount_paid))
    logger.info(f"Invoice {invoice.id}: late fee {late_fee} added, due {invoice.amount_due}")
    return invoice
